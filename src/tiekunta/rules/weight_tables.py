"""Reference weight tables for private-road usage.

Annual equivalent weights (tonnes per year) used to turn a usage declaration
into ton-kilometres. The values are the established Finnish private-road
guidance figures and already include the return leg:

  - permanent residence: 1700 t/yr,
  - leisure properties: 350 / 750 / 1300 t/yr by type,
  - farmland: 60 t/ha (crop) or 130 t/ha (livestock) per year,
  - forest: 21, 18, 11, 7, 3 t/ha per year for zones 1 (south coast)
    through 5 (Lapland).

The tables are read-only for the lifetime of the process. Lookups that
cannot be resolved fall back instead of raising: unknown production types
use the crop rate and missing or unknown forest zones use zone 3.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from .usage import LeisureType, ProductionType

logger = logging.getLogger(__name__)

RESIDENCE_TONNES_PER_YEAR: Decimal = Decimal("1700")

LEISURE_TONNES_PER_YEAR: Mapping[LeisureType, Decimal] = MappingProxyType(
    {
        LeisureType.SEASONAL_CABIN: Decimal("350"),
        LeisureType.SUMMER_COTTAGE: Decimal("750"),
        LeisureType.YEAR_ROUND_COTTAGE: Decimal("1300"),
    }
)

FARMLAND_TONNES_PER_HA: Mapping[ProductionType, Decimal] = MappingProxyType(
    {
        ProductionType.CROP: Decimal("60"),
        ProductionType.LIVESTOCK: Decimal("130"),
    }
)

FOREST_ZONE_TONNES_PER_HA: Mapping[str, Decimal] = MappingProxyType(
    {
        "1": Decimal("21"),
        "2": Decimal("18"),
        "3": Decimal("11"),
        "4": Decimal("7"),
        "5": Decimal("3"),
    }
)

DEFAULT_FOREST_ZONE = "3"

ForestZone = Union[str, int]


def normalise_forest_zone(zone: Optional[ForestZone]) -> Optional[str]:
    """Return the zone as one of ``"1"``..``"5"``, or None when it is not one."""

    if zone is None or isinstance(zone, bool):
        return None
    key = str(zone).strip()
    if key in FOREST_ZONE_TONNES_PER_HA:
        return key
    return None


def forest_tonnes_per_ha(zone: Optional[ForestZone]) -> Decimal:
    key = normalise_forest_zone(zone)
    if key is None:
        if zone is not None:
            logger.debug("unknown forest zone %r; using zone %s", zone, DEFAULT_FOREST_ZONE)
        key = DEFAULT_FOREST_ZONE
    return FOREST_ZONE_TONNES_PER_HA[key]


def farmland_tonnes_per_ha(production_type: Union[ProductionType, str, None]) -> Decimal:
    try:
        kind = ProductionType(production_type)
    except ValueError:
        logger.debug("unknown production type %r; using crop rate", production_type)
        kind = ProductionType.CROP
    return FARMLAND_TONNES_PER_HA[kind]


def leisure_tonnes_per_year(leisure_type: Union[LeisureType, str]) -> Decimal:
    try:
        kind = LeisureType(leisure_type)
    except ValueError:
        logger.debug("unknown leisure property type %r; weight 0", leisure_type)
        return Decimal("0")
    return LEISURE_TONNES_PER_YEAR[kind]


def reference_tables() -> Dict[str, Any]:
    """Snapshot of every table, keyed by wire values and with string amounts."""

    return {
        "residence": str(RESIDENCE_TONNES_PER_YEAR),
        "leisure": {k.value: str(v) for k, v in LEISURE_TONNES_PER_YEAR.items()},
        "farmland_per_ha": {k.value: str(v) for k, v in FARMLAND_TONNES_PER_HA.items()},
        "forest_zone_per_ha": {k: str(v) for k, v in FOREST_ZONE_TONNES_PER_HA.items()},
        "default_forest_zone": DEFAULT_FOREST_ZONE,
    }
