"""Emission factor table — kg CO2 per unit for every loggable activity type."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class Category(str, Enum):
    TRANSPORT = "transport"
    FOOD = "food"
    ENERGY = "energy"
    LIFESTYLE = "lifestyle"


CATEGORIES: tuple[str, ...] = tuple(c.value for c in Category)


class ImpactLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _freeze(table: dict[str, dict]) -> Mapping[str, Mapping]:
    return MappingProxyType({k: MappingProxyType(v) for k, v in table.items()})


EMISSION_FACTORS: Mapping[str, Mapping[str, float]] = _freeze({
    "transport": {            # per km
        "car": 0.192,
        "bus": 0.089,
        "train": 0.041,
        "plane": 0.255,
        "motorcycle": 0.113,
        "bicycle": 0.0,
        "walking": 0.0,
        "electric_car": 0.053,  # depends on the grid mix
    },
    "food": {                 # per kg
        "beef": 27.0,
        "lamb": 21.1,
        "cheese": 13.5,
        "pork": 12.1,
        "chicken": 6.9,
        "fish": 5.1,
        "eggs": 4.2,
        "rice": 2.7,
        "tofu": 2.0,
        "vegetables": 2.0,
        "fruits": 1.1,
        "nuts": 0.3,
    },
    "energy": {               # per kWh
        "electricity": 0.0004,
        "gas": 0.0002,
        "heating_oil": 0.0003,
    },
    "lifestyle": {            # per item
        "clothing": 33.4,
        "electronics": 50.0,
        "plastic_bag": 0.006,
        "paper": 0.001,
    },
})

UNITS: Mapping[str, Mapping[str, str]] = _freeze({
    "transport": {t: "km" for t in EMISSION_FACTORS["transport"]},
    "food": {t: "kg" for t in EMISSION_FACTORS["food"]},
    "energy": {t: "kWh" for t in EMISSION_FACTORS["energy"]},
    "lifestyle": {
        "clothing": "items",
        "electronics": "items",
        "plastic_bag": "bags",
        "paper": "sheets",
    },
})

_H, _M, _L = ImpactLevel.HIGH, ImpactLevel.MEDIUM, ImpactLevel.LOW

IMPACT_LEVELS: Mapping[str, Mapping[str, ImpactLevel]] = _freeze({
    "transport": {
        "car": _H, "motorcycle": _H, "taxi": _H, "flight": _H,
        "bus": _M,
        "train": _L, "bicycle": _L, "walking": _L,
    },
    "food": {
        "beef": _H, "lamb": _H,
        "pork": _M, "chicken": _M, "fish": _M, "dairy": _M,
        "vegetables": _L, "fruits": _L, "tofu": _L, "nuts": _L,
        "rice": _L, "pasta": _L, "bread": _L,
    },
    "energy": {
        "electricity": _M,
        "gas": _H, "oil": _H,
        "solar": _L, "wind": _L, "nuclear": _L,
    },
    "lifestyle": {
        "clothing": _M, "paper": _M, "water_usage": _M,
        "electronics": _H, "plastic_bag": _H,
        "recycling": _L, "composting": _L,
    },
})

_ALTERNATIVES = "High carbon emissions - consider alternatives"
_GREAT_FOOD = "Low carbon footprint - great choice"
_CLEAN = "Clean energy - excellent choice"
_POSITIVE = "Positive environmental impact - keep it up!"

IMPACT_DESCRIPTIONS: Mapping[str, Mapping[str, str]] = _freeze({
    "transport": {
        "car": _ALTERNATIVES,
        "motorcycle": _ALTERNATIVES,
        "taxi": _ALTERNATIVES,
        "flight": "Very high carbon emissions - consider alternatives",
        "bus": "Medium carbon emissions - better than car",
        "train": "Low carbon emissions - good choice",
        "bicycle": "Zero emissions - excellent choice",
        "walking": "Zero emissions - excellent choice",
    },
    "food": {
        "beef": "Very high carbon footprint - consider alternatives",
        "lamb": "Very high carbon footprint - consider alternatives",
        "pork": "Medium carbon footprint",
        "chicken": "Medium carbon footprint",
        "fish": "Medium carbon footprint",
        "dairy": "Medium carbon footprint",
        **{t: _GREAT_FOOD for t in ("vegetables", "fruits", "tofu", "nuts", "rice", "pasta", "bread")},
    },
    "energy": {
        "electricity": "Impact depends on energy source",
        "gas": "High carbon emissions",
        "oil": "High carbon emissions",
        "solar": _CLEAN,
        "wind": _CLEAN,
        "nuclear": _CLEAN,
    },
    "lifestyle": {
        "clothing": "Medium environmental impact",
        "electronics": "High environmental impact - consider repair/reuse",
        "plastic_bag": "High environmental impact - avoid single-use",
        "paper": "Medium environmental impact",
        "water_usage": "Medium environmental impact",
        "recycling": _POSITIVE,
        "composting": _POSITIVE,
    },
})

DEFAULT_IMPACT_DESCRIPTION = "Medium environmental impact"


def get_factor(category: str, activity_type: str) -> float:
    """Return kg CO2 per unit, or 0.0 when the pair is not in the table."""
    return EMISSION_FACTORS.get(category, {}).get(activity_type, 0.0)


def get_unit(category: str, activity_type: str) -> Optional[str]:
    return UNITS.get(category, {}).get(activity_type)


def get_impact_level(category: str, activity_type: str) -> ImpactLevel:
    return IMPACT_LEVELS.get(category, {}).get(activity_type, ImpactLevel.MEDIUM)


def get_impact_description(category: str, activity_type: str) -> str:
    return IMPACT_DESCRIPTIONS.get(category, {}).get(activity_type, DEFAULT_IMPACT_DESCRIPTION)
