"""Usage declarations that drive road-cost apportionment.

Each co-owner (osakas) declares how they use the road. A declaration is one
of five categories, each carrying a one-way distance in kilometres and the
owner's id. The tag values mirror the wire format used by the association
register (ASUNTO, VAPAA, PELTO, METSA, MUU).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union

Number = Union[Decimal, int, float, str]


class UsageKind(str, Enum):
    RESIDENCE = "ASUNTO"
    LEISURE = "VAPAA"
    FARMLAND = "PELTO"
    FOREST = "METSA"
    OTHER = "MUU"


class LeisureType(str, Enum):
    SEASONAL_CABIN = "lomamokki350"
    SUMMER_COTTAGE = "kesamokki750"
    YEAR_ROUND_COTTAGE = "ymparivuotinen1300"


class ProductionType(str, Enum):
    CROP = "kasvinviljely"
    LIVESTOCK = "nautakarja"


@dataclass(frozen=True)
class ResidenceEntry:
    """Permanent residence."""

    kind: ClassVar[UsageKind] = UsageKind.RESIDENCE

    osakas_id: str
    matka_km: Number
    entry_id: Optional[str] = None


@dataclass(frozen=True)
class LeisureEntry:
    """Leisure property; the weight is fixed per property type."""

    kind: ClassVar[UsageKind] = UsageKind.LEISURE

    osakas_id: str
    matka_km: Number
    leisure_type: Union[LeisureType, str]
    entry_id: Optional[str] = None


@dataclass(frozen=True)
class FarmlandEntry:
    """Cultivated land.

    ``custom_tonnes_per_ha`` replaces the per-hectare table value when set.
    """

    kind: ClassVar[UsageKind] = UsageKind.FARMLAND

    osakas_id: str
    matka_km: Number
    area_ha: Number
    production_type: Union[ProductionType, str, None] = ProductionType.CROP
    custom_tonnes_per_ha: Optional[Number] = None
    entry_id: Optional[str] = None


@dataclass(frozen=True)
class ForestEntry:
    """Forest holding.

    Without ``tonnes_per_ha_override`` the per-hectare value comes from the
    association's forest zone.
    """

    kind: ClassVar[UsageKind] = UsageKind.FOREST

    osakas_id: str
    matka_km: Number
    area_ha: Number
    tonnes_per_ha_override: Optional[Number] = None
    entry_id: Optional[str] = None


@dataclass(frozen=True)
class OtherTrafficEntry:
    """Any other traffic, described by trips, vehicle weight and payload.

    ``trips_include_return`` tells whether ``trips_per_year`` already counts
    both legs of a trip.
    """

    kind: ClassVar[UsageKind] = UsageKind.OTHER

    osakas_id: str
    matka_km: Number
    trips_per_year: Number
    vehicle_empty_weight_t: Number
    useful_load_t_per_year: Number
    trips_include_return: bool = False
    entry_id: Optional[str] = None


UsageEntry = Union[
    ResidenceEntry,
    LeisureEntry,
    FarmlandEntry,
    ForestEntry,
    OtherTrafficEntry,
]
