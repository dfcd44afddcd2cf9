"""Activity records — the plain-data input every calculation works on."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from numbers import Real
from typing import Any, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)


class InvalidArgument(ValueError):
    """Raised when an activity or calculation input is malformed."""


def to_local(ts: datetime) -> datetime:
    """Convert an aware datetime to naive local wall time; naive passes through."""
    if ts.tzinfo:
        return ts.astimezone().replace(tzinfo=None)
    return ts


def _from_epoch(seconds: Any) -> Optional[datetime]:
    if isinstance(seconds, bool) or not isinstance(seconds, Real):
        return None
    try:
        return datetime.fromtimestamp(float(seconds))
    except (OverflowError, OSError, ValueError):
        return None


def parse_date(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a stored date into local naive time.

    Accepts datetimes, dates, ISO-8601 strings, epoch seconds and
    Firestore-style ``{"seconds": ..., "nanoseconds": ...}`` mappings.
    Anything else yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local(value)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if isinstance(nanos, Real) and isinstance(seconds, Real) and not isinstance(seconds, bool):
            return _from_epoch(seconds + nanos / 1e9)
        return _from_epoch(seconds)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_local(datetime.fromisoformat(text))
        except ValueError:
            return None
    return _from_epoch(value)


def require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{name} must be a non-empty string, got {value!r}")
    return value


def require_amount(name: str, value: Any) -> float:
    """Validate a non-negative finite number; negative amounts are rejected."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgument(f"{name} must be a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise InvalidArgument(f"{name} must be finite, got {value!r}")
    if number < 0:
        raise InvalidArgument(f"{name} must not be negative, got {value!r}")
    return number


@dataclass(frozen=True)
class Activity:
    category: str
    type: str
    amount: float
    emissions: Optional[float] = None   # kg CO2e, set once when the activity is logged
    date: Optional[datetime] = None     # when it happened, local naive time
    id: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        require_text("category", self.category)
        require_text("type", self.type)
        object.__setattr__(self, "amount", require_amount("amount", self.amount))
        if self.emissions is not None:
            object.__setattr__(self, "emissions", require_amount("emissions", self.emissions))
        object.__setattr__(self, "date", parse_date(self.date))

    @property
    def emissions_or_zero(self) -> float:
        return self.emissions if self.emissions is not None else 0.0

    @property
    def day(self) -> Optional[date]:
        return self.date.date() if self.date else None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Activity":
        """Build an Activity from a stored record, ignoring unknown keys."""
        if not isinstance(data, Mapping):
            raise InvalidArgument(f"activity record must be a mapping, got {type(data).__name__}")
        if "amount" not in data:
            raise InvalidArgument(f"activity record has no amount: {dict(data)!r}")
        record_id = data.get("id")
        return cls(
            category=data.get("category"),
            type=data.get("type"),
            amount=data["amount"],
            emissions=data.get("emissions"),
            date=data.get("date"),
            id=str(record_id) if record_id is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "category": self.category,
            "type": self.type,
            "amount": self.amount,
            "emissions": self.emissions,
            "date": self.date.isoformat() if self.date else None,
        }
        if self.id is not None:
            data["id"] = self.id
        return data


def parse_activities(records: Iterable[Mapping[str, Any]]) -> list[Activity]:
    """Convert stored records into Activity objects.

    Malformed records raise InvalidArgument naming the offending position.
    """
    activities: list[Activity] = []
    for index, record in enumerate(records):
        try:
            activity = Activity.from_dict(record)
        except InvalidArgument as exc:
            raise InvalidArgument(f"record {index}: {exc}") from exc
        if activity.date is None:
            logger.debug("record %d has no usable date; excluded from windowed totals", index)
        activities.append(activity)
    return activities
