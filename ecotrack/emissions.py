"""Emissions calculator — activity descriptor to kg CO2e."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ecotrack.activity import Activity, require_amount, require_text
from ecotrack.factors import EMISSION_FACTORS, get_factor

logger = logging.getLogger(__name__)


def calculate_emissions(category: str, activity_type: str, amount: float) -> float:
    """Return ``factor(category, type) * amount``.

    Unknown pairs have a factor of 0. Negative or non-numeric amounts raise
    InvalidArgument.
    """
    require_text("category", category)
    require_text("type", activity_type)
    amount = require_amount("amount", amount)

    if activity_type not in EMISSION_FACTORS.get(category, {}):
        logger.debug("no emission factor for %s/%s, using 0", category, activity_type)
    return get_factor(category, activity_type) * amount


def log_activity(
    category: str,
    activity_type: str,
    amount: float,
    date: datetime,
    *,
    id: Optional[str] = None,
) -> Activity:
    """Create a record with its emissions fixed at creation time."""
    return Activity(
        category=category,
        type=activity_type,
        amount=amount,
        emissions=calculate_emissions(category, activity_type, amount),
        date=date,
        id=id,
    )
