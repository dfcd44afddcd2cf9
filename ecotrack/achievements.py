"""Achievement system — unlock badges based on logged activities.

Badge definitions are static and immutable. Which badges a user has unlocked
lives outside this module (see UnlockedBadgeStore) and only ever grows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol, Sequence

from ecotrack.activity import Activity
from ecotrack.analytics import Timeframe, total_emissions

logger = logging.getLogger(__name__)

Predicate = Callable[[Sequence[Activity], datetime], bool]
ProgressFn = Callable[[Sequence[Activity], datetime], float]

SUSTAINABLE_TRANSPORT = frozenset({"bicycle", "walking", "train", "bus"})
PLANT_BASED = frozenset({"vegetables", "fruits", "tofu", "nuts"})

WEEK_WARRIOR_DAYS = 7
LOW_CARBON_WEEKLY_LIMIT = 70.0  # 10 kg/day over 7 days
TRANSPORT_HERO_TRIPS = 10
PLANT_POWER_MEALS = 20


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    icon: str
    description: str
    condition: Predicate = field(repr=False, compare=False)
    progress: ProgressFn = field(repr=False, compare=False)


class BadgeState(str, Enum):
    LOCKED = "locked"
    IN_PROGRESS = "in_progress"
    OVER_TARGET = "over_target"
    UNLOCKED = "unlocked"


@dataclass
class BadgeStatus:
    badge: Badge
    unlocked: bool
    progress: float
    state: BadgeState


# --- Helpers ---

def _count(activities: Sequence[Activity], category: str, types: frozenset[str]) -> int:
    return sum(1 for a in activities if a.category == category and a.type in types)


def _distinct_days(activities: Sequence[Activity]) -> set[date]:
    return {a.day for a in activities if a.day is not None}


def _weekly_total(activities: Sequence[Activity], now: datetime) -> float:
    return total_emissions(activities, Timeframe.WEEKLY, now)


# --- Conditions ---

def _first_steps(activities: Sequence[Activity], now: datetime) -> bool:
    return len(activities) >= 1


def _week_warrior(activities: Sequence[Activity], now: datetime) -> bool:
    # Fewer than 7 records can never unlock, however they are spread.
    if len(activities) < WEEK_WARRIOR_DAYS:
        return False
    return len(_distinct_days(activities)) >= WEEK_WARRIOR_DAYS


def _low_carbon(activities: Sequence[Activity], now: datetime) -> bool:
    return _weekly_total(activities, now) < LOW_CARBON_WEEKLY_LIMIT


def _transport_hero(activities: Sequence[Activity], now: datetime) -> bool:
    return _count(activities, "transport", SUSTAINABLE_TRANSPORT) >= TRANSPORT_HERO_TRIPS


def _plant_power(activities: Sequence[Activity], now: datetime) -> bool:
    return _count(activities, "food", PLANT_BASED) >= PLANT_POWER_MEALS


# --- Progress (percent; low-carbon goes negative when over target) ---

def _first_steps_progress(activities: Sequence[Activity], now: datetime) -> float:
    return 100.0 if activities else 0.0


def _week_warrior_progress(activities: Sequence[Activity], now: datetime) -> float:
    if len(activities) < WEEK_WARRIOR_DAYS:
        return len(activities) / WEEK_WARRIOR_DAYS * 100
    return min(100.0, len(_distinct_days(activities)) / WEEK_WARRIOR_DAYS * 100)


def _low_carbon_progress(activities: Sequence[Activity], now: datetime) -> float:
    weekly = _weekly_total(activities, now)
    pct = (LOW_CARBON_WEEKLY_LIMIT - weekly) / LOW_CARBON_WEEKLY_LIMIT * 100
    if weekly > LOW_CARBON_WEEKLY_LIMIT:
        return max(-100.0, pct)
    return min(100.0, pct)


def _transport_hero_progress(activities: Sequence[Activity], now: datetime) -> float:
    trips = _count(activities, "transport", SUSTAINABLE_TRANSPORT)
    return min(100.0, trips / TRANSPORT_HERO_TRIPS * 100)


def _plant_power_progress(activities: Sequence[Activity], now: datetime) -> float:
    meals = _count(activities, "food", PLANT_BASED)
    return min(100.0, meals / PLANT_POWER_MEALS * 100)


BADGES: tuple[Badge, ...] = (
    Badge(
        id="first-steps",
        name="First Steps",
        icon="🌱",
        description="Logged your first activity",
        condition=_first_steps,
        progress=_first_steps_progress,
    ),
    Badge(
        id="week-warrior",
        name="Week Warrior",
        icon="🏆",
        description="Logged activities on 7 different days",
        condition=_week_warrior,
        progress=_week_warrior_progress,
    ),
    Badge(
        id="low-carbon",
        name="Low Carbon Champion",
        icon="🌿",
        description="Kept daily emissions under 10kg for a week",
        condition=_low_carbon,
        progress=_low_carbon_progress,
    ),
    Badge(
        id="transport-hero",
        name="Transport Hero",
        icon="🚲",
        description="Used sustainable transport 10 times",
        condition=_transport_hero,
        progress=_transport_hero_progress,
    ),
    Badge(
        id="plant-power",
        name="Plant Power",
        icon="🥬",
        description="Chose plant-based options 20 times",
        condition=_plant_power,
        progress=_plant_power_progress,
    ),
)

_BY_ID = {b.id: b for b in BADGES}


def get_badge(badge_id: str) -> Badge:
    """Look up a badge definition; unknown ids raise KeyError."""
    return _BY_ID[badge_id]


def evaluate_badges(
    activities: Iterable[Activity],
    already_unlocked: Iterable[str],
    now: datetime,
) -> list[Badge]:
    """Return badges whose condition now holds and that are not yet unlocked."""
    activities = list(activities)
    unlocked = set(already_unlocked)
    return [
        b for b in BADGES
        if b.id not in unlocked and b.condition(activities, now)
    ]


def badge_progress(badge: Badge | str, activities: Iterable[Activity], now: datetime) -> float:
    if isinstance(badge, str):
        badge = get_badge(badge)
    return badge.progress(list(activities), now)


def _state(unlocked: bool, progress: float) -> BadgeState:
    if unlocked:
        return BadgeState.UNLOCKED
    if progress < 0:
        return BadgeState.OVER_TARGET
    if progress == 0:
        return BadgeState.LOCKED
    return BadgeState.IN_PROGRESS


def badge_statuses(
    activities: Iterable[Activity],
    unlocked: Iterable[str],
    now: datetime,
) -> list[BadgeStatus]:
    """Status of every badge, counting ones that would unlock right now."""
    activities = list(activities)
    unlocked = set(unlocked)
    unlocked.update(b.id for b in evaluate_badges(activities, unlocked, now))

    statuses: list[BadgeStatus] = []
    for b in BADGES:
        is_unlocked = b.id in unlocked
        progress = b.progress(activities, now)
        statuses.append(BadgeStatus(
            badge=b,
            unlocked=is_unlocked,
            progress=progress,
            state=_state(is_unlocked, progress),
        ))
    return statuses


# --- Unlock state ---

class UnlockedBadgeStore(Protocol):
    """Per-user unlocked badge ids. Writes must be set unions."""

    def get_unlocked(self, user_id: str) -> set[str]: ...

    def add_unlocked(self, user_id: str, badge_ids: Iterable[str]) -> None: ...


class InMemoryBadgeStore:
    def __init__(self, initial: Optional[dict[str, Iterable[str]]] = None) -> None:
        self._unlocked: dict[str, set[str]] = {
            user: set(ids) for user, ids in (initial or {}).items()
        }

    def get_unlocked(self, user_id: str) -> set[str]:
        return set(self._unlocked.get(user_id, ()))

    def add_unlocked(self, user_id: str, badge_ids: Iterable[str]) -> None:
        self._unlocked.setdefault(user_id, set()).update(badge_ids)


def unlock_badges(
    store: UnlockedBadgeStore,
    user_id: str,
    activities: Iterable[Activity],
    now: datetime,
) -> list[Badge]:
    """Evaluate badges for a user and record any new unlocks in `store`."""
    newly = evaluate_badges(activities, store.get_unlocked(user_id), now)
    if newly:
        store.add_unlocked(user_id, [b.id for b in newly])
        logger.debug("user %s unlocked %s", user_id, ", ".join(b.id for b in newly))
    return newly
