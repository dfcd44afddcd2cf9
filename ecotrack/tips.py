"""Eco tips — advice derived from what the user logs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ecotrack.activity import Activity, require_amount

HIGH_EMISSION_FOODS = frozenset({"beef", "lamb", "cheese"})
# Above this total (kg CO2) energy advice is worth showing
ENERGY_TIP_THRESHOLD = 20


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


@dataclass(frozen=True)
class Tip:
    id: str
    title: str
    description: str
    impact: str
    category: str
    priority: Priority


CAR_TIP = Tip(
    id="transport-car",
    title="Reduce Car Usage",
    description="Consider walking, cycling, or using public transport for short trips.",
    impact="Can reduce emissions by up to 50% for short journeys",
    category="transport",
    priority=Priority.HIGH,
)
PLANT_BASED_TIP = Tip(
    id="food-plant-based",
    title="Try Plant-Based Alternatives",
    description="Replace meat with plant-based proteins a few times a week.",
    impact="Can reduce food emissions by up to 70%",
    category="food",
    priority=Priority.HIGH,
)
ENERGY_TIP = Tip(
    id="energy-saving",
    title="Energy Efficiency",
    description="Use LED bulbs, unplug electronics, and adjust thermostat settings.",
    impact="Can save 10-15% on energy bills and emissions",
    category="energy",
    priority=Priority.MEDIUM,
)
WASTE_TIP = Tip(
    id="reduce-waste",
    title="Reduce, Reuse, Recycle",
    description="Bring reusable bags, water bottles, and containers.",
    impact="Reduces plastic waste and associated emissions",
    category="lifestyle",
    priority=Priority.MEDIUM,
)
LOCAL_TIP = Tip(
    id="local-seasonal",
    title="Buy Local & Seasonal",
    description="Choose locally grown, seasonal produce to reduce transport emissions.",
    impact="Reduces food miles and supports local farmers",
    category="food",
    priority=Priority.LOW,
)


def generate_tips(activities: Iterable[Activity], total_emissions: float) -> list[Tip]:
    """Collect applicable tips, highest priority first.

    Rules run in a fixed order and the sort is stable, so tips sharing a
    priority keep that order.
    """
    total_emissions = require_amount("total_emissions", total_emissions)
    activities = list(activities)
    tips: list[Tip] = []

    if any(a.category == "transport" and a.type == "car" for a in activities):
        tips.append(CAR_TIP)

    if any(a.category == "food" and a.type in HIGH_EMISSION_FOODS for a in activities):
        tips.append(PLANT_BASED_TIP)

    if total_emissions > ENERGY_TIP_THRESHOLD:
        tips.append(ENERGY_TIP)

    tips.append(WASTE_TIP)
    tips.append(LOCAL_TIP)

    return sorted(tips, key=lambda t: t.priority.rank, reverse=True)
