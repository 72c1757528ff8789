"""Weight model: usage declaration -> annual equivalent weight (t/yr)."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from .usage import (
    FarmlandEntry,
    ForestEntry,
    LeisureEntry,
    Number,
    OtherTrafficEntry,
    ResidenceEntry,
    UsageEntry,
)
from .weight_tables import (
    RESIDENCE_TONNES_PER_YEAR,
    ForestZone,
    farmland_tonnes_per_ha,
    forest_tonnes_per_ha,
    leisure_tonnes_per_year,
)

logger = logging.getLogger(__name__)


def _dec(value: Number) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value


def weight(entry: UsageEntry, forest_zone: Optional[ForestZone] = None) -> Decimal:
    """Annual equivalent weight of one usage entry in tonnes per year.

    ``forest_zone`` is the owning association's zone and is consulted only for
    forest entries without their own per-hectare override.
    """

    if isinstance(entry, ResidenceEntry):
        return RESIDENCE_TONNES_PER_YEAR

    if isinstance(entry, LeisureEntry):
        return leisure_tonnes_per_year(entry.leisure_type)

    if isinstance(entry, FarmlandEntry):
        if entry.custom_tonnes_per_ha is not None:
            per_ha = _dec(entry.custom_tonnes_per_ha)
        else:
            per_ha = farmland_tonnes_per_ha(entry.production_type)
        return per_ha * _dec(entry.area_ha)

    if isinstance(entry, ForestEntry):
        if entry.tonnes_per_ha_override is not None:
            per_ha = _dec(entry.tonnes_per_ha_override)
        else:
            per_ha = forest_tonnes_per_ha(forest_zone)
        return per_ha * _dec(entry.area_ha)

    if isinstance(entry, OtherTrafficEntry):
        # One-way trip counts are doubled into round trips.
        multiplier = 1 if entry.trips_include_return else 2
        trips = _dec(entry.trips_per_year) * multiplier
        return trips * _dec(entry.vehicle_empty_weight_t) + _dec(entry.useful_load_t_per_year)

    logger.debug("unrecognised usage entry %r; weight 0", type(entry).__name__)
    return Decimal("0")


def ton_kilometers(entry: UsageEntry, forest_zone: Optional[ForestZone] = None) -> Decimal:
    """Weight times one-way distance. Return legs are already in the weight."""

    return weight(entry, forest_zone) * _dec(getattr(entry, "matka_km", 0))
