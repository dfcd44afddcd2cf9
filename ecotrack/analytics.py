"""Analytics engine — timeframe totals, category breakdown, footprint score, trends."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, Union

from ecotrack.activity import Activity, InvalidArgument, require_amount, to_local
from ecotrack.factors import CATEGORIES

logger = logging.getLogger(__name__)


class Timeframe(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: Union["Timeframe", str]) -> "Timeframe":
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(t.value for t in cls)
            raise InvalidArgument(f"unknown timeframe {value!r} (expected one of: {choices})") from None


# Global average daily footprint per person, kg CO2
AVERAGE_DAILY_EMISSIONS = 16.5
# Non-daily totals are treated as a month of emissions
NON_DAILY_DIVISOR = 30

DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass
class DailyEmissions:
    day: str            # e.g. "Mon"
    date: date
    emissions: float


@dataclass
class CategoryShare:
    label: str
    emissions: float


@dataclass
class Footprint:
    timeframe: Timeframe
    now: datetime
    total: float = 0.0
    daily_total: float = 0.0
    weekly_total: float = 0.0
    monthly_total: float = 0.0
    score: float = 0.0
    activity_count: int = 0
    breakdown: dict[str, float] = field(default_factory=dict)
    chart: list[CategoryShare] = field(default_factory=list)
    trend: list[DailyEmissions] = field(default_factory=list)


def _check_now(now: datetime) -> datetime:
    if not isinstance(now, datetime):
        raise InvalidArgument(f"now must be a datetime, got {now!r}")
    return to_local(now)


def window_start(timeframe: Union[Timeframe, str], now: datetime) -> datetime:
    """Start of the aggregation window ending at `now`.

    daily: midnight today; weekly: rolling 7 days back; monthly: the 1st at midnight.
    """
    timeframe = Timeframe.parse(timeframe)
    now = _check_now(now)
    if timeframe is Timeframe.DAILY:
        return datetime.combine(now.date(), time())
    if timeframe is Timeframe.WEEKLY:
        return now - timedelta(days=7)
    return datetime.combine(now.date().replace(day=1), time())


def total_emissions(
    activities: Iterable[Activity],
    timeframe: Union[Timeframe, str],
    now: datetime,
) -> float:
    """Sum stored emissions of activities dated inside [window start, now]."""
    start = window_start(timeframe, now)
    now = _check_now(now)
    total = 0.0
    for a in activities:
        if a.date is None:
            continue
        if start <= a.date <= now:
            total += a.emissions_or_zero
    return total


def category_breakdown(activities: Iterable[Activity]) -> dict[str, float]:
    """Emissions per fixed category; all four keys always present."""
    breakdown = {c: 0.0 for c in CATEGORIES}
    for a in activities:
        if a.category in breakdown:
            breakdown[a.category] += a.emissions_or_zero
        else:
            logger.debug("ignoring activity with unknown category %r", a.category)
    return breakdown


def footprint_score(total: float, timeframe: Union[Timeframe, str]) -> float:
    """Map a total to a 0-100 score, higher is better.

    At the global average the score is 100. Below it the score drops 2 points
    per kg (so zero emissions scores 67); above it 3 points per kg, floored at 0.
    """
    total = require_amount("total", total)
    timeframe = Timeframe.parse(timeframe)
    daily = total if timeframe is Timeframe.DAILY else total / NON_DAILY_DIVISOR
    avg = AVERAGE_DAILY_EMISSIONS

    if daily <= avg:
        return max(0.0, 100 - (avg - daily) * 2)
    return max(0.0, 100 - (daily - avg) * 3)


def weekly_trend(activities: Iterable[Activity], now: datetime) -> list[DailyEmissions]:
    """Per-day emissions for Monday through Sunday of the week containing `now`."""
    now = _check_now(now)
    monday = now.date() - timedelta(days=now.weekday())

    per_day = {monday + timedelta(days=i): 0.0 for i in range(7)}
    for a in activities:
        if a.day in per_day:
            per_day[a.day] += a.emissions_or_zero

    return [
        DailyEmissions(day=DAYS[d.weekday()], date=d, emissions=round(v, 2))
        for d, v in per_day.items()
    ]


def category_chart(breakdown: dict[str, float], threshold: float = 5.0) -> list[CategoryShare]:
    """Chart slices: categories under `threshold` percent fold into "Other"."""
    nonzero = [(c, v) for c, v in breakdown.items() if v > 0]
    total = sum(v for _, v in nonzero)
    if not total:
        return []

    slices: list[CategoryShare] = []
    other = 0.0
    for category, value in nonzero:
        if value / total * 100 >= threshold:
            slices.append(CategoryShare(label=category.capitalize(), emissions=round(value, 2)))
        else:
            other += value

    if other > 0:
        slices.append(CategoryShare(label="Other", emissions=round(other, 2)))
    return slices


def build_footprint(
    activities: Iterable[Activity],
    timeframe: Union[Timeframe, str],
    now: datetime,
) -> Footprint:
    """Build the full footprint snapshot for one user at `now`."""
    activities = list(activities)
    timeframe = Timeframe.parse(timeframe)
    now = _check_now(now)

    totals = {t: total_emissions(activities, t, now) for t in Timeframe}
    breakdown = category_breakdown(activities)
    total = totals[timeframe]

    return Footprint(
        timeframe=timeframe,
        now=now,
        total=total,
        daily_total=totals[Timeframe.DAILY],
        weekly_total=totals[Timeframe.WEEKLY],
        monthly_total=totals[Timeframe.MONTHLY],
        score=footprint_score(total, timeframe),
        activity_count=len(activities),
        breakdown=breakdown,
        chart=category_chart(breakdown),
        trend=weekly_trend(activities, now),
    )
