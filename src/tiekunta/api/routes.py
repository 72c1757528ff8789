# src/tiekunta/api/routes.py
"""
Road-cost calculation routes.

Notes:
- Request bodies use the association register's camelCase wire names
  (matkaKm, osakasId, vyohyke ...); snake_case names are accepted too.
- Input validation lives here; the rules package assumes well-formed entries.
- Amounts are returned as strings so that Decimal precision survives JSON.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..rules.fee_engine import apportion, entry_breakdown
from ..rules.usage import (
    FarmlandEntry,
    ForestEntry,
    LeisureEntry,
    OtherTrafficEntry,
    ResidenceEntry,
    UsageEntry,
)
from ..rules.weight_tables import reference_tables
from ..settings import settings

logger = logging.getLogger("tiekunta-api")

router = APIRouter(prefix="/api/v1", tags=["Road Costs"])

ForestZoneIn = Literal["1", "2", "3", "4", "5"]


# ============ Pydantic Models ============

class _EntryBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(None, description="Identifier of the usage entry itself")
    osakas_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("osakasId", "osakas_id"),
        description="Owner id; filled in from the member when entries are grouped by member",
    )
    matka_km: Decimal = Field(
        ..., ge=0, validation_alias=AliasChoices("matkaKm", "matka_km"), examples=[1.2]
    )


class ResidenceIn(_EntryBase):
    kind: Literal["ASUNTO"]
    # only permanent residences are declared
    vakituinen: Literal[True]

    def to_entry(self, owner: str) -> ResidenceEntry:
        return ResidenceEntry(osakas_id=owner, matka_km=self.matka_km, entry_id=self.id)


class LeisureIn(_EntryBase):
    kind: Literal["VAPAA"]
    tyyppi: Literal["lomamokki350", "kesamokki750", "ymparivuotinen1300"]

    def to_entry(self, owner: str) -> LeisureEntry:
        return LeisureEntry(
            osakas_id=owner, matka_km=self.matka_km, leisure_type=self.tyyppi, entry_id=self.id
        )


class FarmlandIn(_EntryBase):
    kind: Literal["PELTO"]
    pinta_ala_ha: Decimal = Field(..., ge=0, validation_alias=AliasChoices("pintaAlaHa", "pinta_ala_ha"))
    tuotantosuunta: Literal["kasvinviljely", "nautakarja"]
    custom_tonnia_per_ha: Optional[Decimal] = Field(
        None, ge=0, validation_alias=AliasChoices("customTonniaPerHa", "custom_tonnia_per_ha")
    )

    def to_entry(self, owner: str) -> FarmlandEntry:
        return FarmlandEntry(
            osakas_id=owner,
            matka_km=self.matka_km,
            area_ha=self.pinta_ala_ha,
            production_type=self.tuotantosuunta,
            custom_tonnes_per_ha=self.custom_tonnia_per_ha,
            entry_id=self.id,
        )


class ForestIn(_EntryBase):
    kind: Literal["METSA"]
    pinta_ala_ha: Decimal = Field(..., ge=0, validation_alias=AliasChoices("pintaAlaHa", "pinta_ala_ha"))
    tonnia_per_ha_override: Optional[Decimal] = Field(
        None, ge=0, validation_alias=AliasChoices("tonniaPerHaOverride", "tonnia_per_ha_override")
    )

    def to_entry(self, owner: str) -> ForestEntry:
        return ForestEntry(
            osakas_id=owner,
            matka_km=self.matka_km,
            area_ha=self.pinta_ala_ha,
            tonnes_per_ha_override=self.tonnia_per_ha_override,
            entry_id=self.id,
        )


class OtherTrafficIn(_EntryBase):
    kind: Literal["MUU"]
    ajokerrat_vuosi: Decimal = Field(
        ..., ge=0, validation_alias=AliasChoices("ajokerratVuosi", "ajokerrat_vuosi")
    )
    ajoneuvon_tyhjapaino_ton: Decimal = Field(
        ..., ge=0, validation_alias=AliasChoices("ajoneuvonTyhjapainoTon", "ajoneuvon_tyhjapaino_ton")
    )
    hyotykuorma_ton_per_vuosi: Decimal = Field(
        ..., ge=0, validation_alias=AliasChoices("hyotykuormaTonPerVuosi", "hyotykuorma_ton_per_vuosi")
    )
    ajokerrat_sisaltaa_meno_paluu: bool = Field(
        ...,
        validation_alias=AliasChoices("ajokerratSisaltaaMenoPaluu", "ajokerrat_sisaltaa_meno_paluu"),
    )

    def to_entry(self, owner: str) -> OtherTrafficEntry:
        return OtherTrafficEntry(
            osakas_id=owner,
            matka_km=self.matka_km,
            trips_per_year=self.ajokerrat_vuosi,
            vehicle_empty_weight_t=self.ajoneuvon_tyhjapaino_ton,
            useful_load_t_per_year=self.hyotykuorma_ton_per_vuosi,
            trips_include_return=self.ajokerrat_sisaltaa_meno_paluu,
            entry_id=self.id,
        )


UsageEntryIn = Annotated[
    Union[ResidenceIn, LeisureIn, FarmlandIn, ForestIn, OtherTrafficIn],
    Field(discriminator="kind"),
]


class MemberIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    usage_entries: List[UsageEntryIn] = Field(
        default_factory=list, validation_alias=AliasChoices("usageEntries", "usage_entries")
    )


class BreakdownRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    vyohyke: Optional[ForestZoneIn] = Field(
        None, validation_alias=AliasChoices("vyohyke", "forest_zone"), description="Forest zone 1..5"
    )
    entries: List[UsageEntryIn] = Field(default_factory=list)
    members: List[MemberIn] = Field(default_factory=list)


class CalculationRequest(BreakdownRequest):
    annual_cost: Decimal = Field(
        ..., ge=0, validation_alias=AliasChoices("annualCost", "annual_cost"), examples=[10000]
    )
    base_fee: Optional[Decimal] = Field(
        None, ge=0, validation_alias=AliasChoices("baseFee", "base_fee"), examples=[15]
    )


# ============ Helpers ============

def _core_entries(request: BreakdownRequest) -> List[UsageEntry]:
    """Flatten flat entries and member-grouped entries into core entries.

    Entries grouped under a member always belong to that member.
    """
    out: List[UsageEntry] = []
    for idx, item in enumerate(request.entries):
        if not item.osakas_id:
            raise HTTPException(
                status_code=422, detail=f"entries[{idx}] is missing osakasId"
            )
        out.append(item.to_entry(item.osakas_id))
    for member in request.members:
        out.extend(item.to_entry(member.id) for item in member.usage_entries)
    return out


def _forest_zone(request: BreakdownRequest) -> Optional[str]:
    return request.vyohyke or settings.default_forest_zone


# ============ Cost Calculation ============

@router.post("/calculate")
def calculate(request: CalculationRequest) -> Dict[str, Any]:
    """
    Apportion the association's annual cost over its owners by ton-kilometres.
    Stateless: the caller supplies the association settings and usage entries.
    """
    entries = _core_entries(request)
    try:
        result = apportion(
            entries,
            request.annual_cost,
            request.base_fee,
            _forest_zone(request),
        )
    except Exception:
        logger.exception("Cost calculation failed")
        raise HTTPException(status_code=500, detail="cost calculation failed")

    logger.info(
        "Calculated fees for %d owners from %d entries (total %s tkm)",
        len(result.results), len(entries), result.total_tkm,
    )
    return {
        "results": [
            {"osakas_id": r.osakas_id, "tkm": str(r.tkm), "fee": str(r.fee)}
            for r in result.results
        ],
        "total_tkm": str(result.total_tkm),
        "owner_count": len(result.results),
        "total_fees": str(result.total_fees),
    }


@router.post("/breakdown")
def breakdown(request: BreakdownRequest) -> Dict[str, Any]:
    """Per-entry weight and ton-kilometres, for member-facing views."""
    entries = _core_entries(request)
    try:
        rows = entry_breakdown(entries, _forest_zone(request))
    except Exception:
        logger.exception("Usage breakdown failed")
        raise HTTPException(status_code=500, detail="usage breakdown failed")
    return {
        "entries": [
            {
                "entry_id": r.entry_id,
                "osakas_id": r.osakas_id,
                "kind": r.kind,
                "weight": str(r.weight),
                "tkm": str(r.tkm),
            }
            for r in rows
        ]
    }


@router.get("/reference-tables")
def get_reference_tables() -> Dict[str, Any]:
    return reference_tables()
