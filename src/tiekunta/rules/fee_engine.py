# src/tiekunta/rules/fee_engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Iterable, List, Optional

from .usage import Number
from .weight_tables import ForestZone
from .weights import ton_kilometers, weight

logger = logging.getLogger(__name__)

TKM_PLACES = 3
MONEY_PLACES = 2


# -------------------------------
# Helpers & result models
# -------------------------------

def _dec(x: Number) -> Decimal:
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x


def _round(x: Number, places: int) -> Decimal:
    """Round half away from zero at ``places`` decimals.

    The working precision grows with the value so that very large totals
    quantize instead of raising InvalidOperation.
    """
    x = _dec(x)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, x.adjusted() + places + 2)
        return x.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _tkm(x: Number) -> Decimal:
    return _round(x, TKM_PLACES)


def _money(x: Number) -> Decimal:
    return _round(x, MONEY_PLACES)


@dataclass(frozen=True)
class FeeResult:
    osakas_id: str
    tkm: Decimal
    fee: Decimal


@dataclass(frozen=True)
class Apportionment:
    """Outcome of one apportionment run.

    ``results`` holds one FeeResult per distinct owner in first-seen order;
    callers comparing results should key them by owner via ``by_owner()``.
    """

    results: List[FeeResult]
    total_tkm: Decimal

    def by_owner(self) -> Dict[str, FeeResult]:
        return {r.osakas_id: r for r in self.results}

    @property
    def total_fees(self) -> Decimal:
        return sum((r.fee for r in self.results), Decimal("0.00"))


@dataclass(frozen=True)
class EntryBreakdown:
    entry_id: Optional[str]
    osakas_id: Optional[str]
    kind: Optional[str]
    weight: Decimal
    tkm: Decimal


# -------------------------------
# Apportionment
# -------------------------------

def owner_ton_kilometers(
    entries: Iterable[Any], forest_zone: Optional[ForestZone] = None
) -> Dict[str, Decimal]:
    """Unrounded ton-kilometre totals per owner, in first-seen owner order."""
    totals: Dict[str, Decimal] = {}
    for entry in entries:
        owner = entry.osakas_id
        totals[owner] = totals.get(owner, Decimal("0")) + ton_kilometers(entry, forest_zone)
    return totals


def apportion(
    entries: Iterable[Any],
    total_annual_cost: Number,
    base_fee_per_owner: Optional[Number] = None,
    forest_zone: Optional[ForestZone] = None,
) -> Apportionment:
    """
    Split the association's annual cost among its owners.

    Every owner pays ``base_fee_per_owner``; what is left of the total cost is
    shared in proportion to each owner's ton-kilometres. Only owners that
    appear in ``entries`` are charged. When the base fees alone exceed the
    total cost the shared pool is clamped to zero and the shortfall is not
    recovered. When nobody has any usage, everyone pays just the base fee.
    """
    base_fee = _dec(base_fee_per_owner if base_fee_per_owner is not None else 0)
    total_cost = _dec(total_annual_cost)

    per_owner = owner_ton_kilometers(entries, forest_zone)
    owner_count = len(per_owner)

    base_fee_total = base_fee * owner_count
    pool = total_cost - base_fee_total
    if pool < 0:
        logger.warning(
            "Base fees %s exceed total cost %s; shared pool clamped to 0",
            base_fee_total, total_cost,
        )
        pool = Decimal("0")

    grand_total = sum(per_owner.values(), Decimal("0"))

    results: List[FeeResult] = []
    for osakas_id, owner_tkm in per_owner.items():
        if grand_total > 0:
            share = (owner_tkm / grand_total) * pool
        else:
            share = Decimal("0")
        results.append(
            FeeResult(osakas_id=osakas_id, tkm=_tkm(owner_tkm), fee=_money(share + base_fee))
        )

    logger.debug(
        "Apportioned %s over %d owners (%s tkm, base fee %s)",
        total_cost, owner_count, grand_total, base_fee,
    )
    return Apportionment(results=results, total_tkm=_tkm(grand_total))


# -------------------------------
# Per-entry breakdown
# -------------------------------

def entry_breakdown(
    entries: Iterable[Any], forest_zone: Optional[ForestZone] = None
) -> List[EntryBreakdown]:
    rows: List[EntryBreakdown] = []
    for entry in entries:
        kind = getattr(entry, "kind", None)
        rows.append(
            EntryBreakdown(
                entry_id=getattr(entry, "entry_id", None),
                osakas_id=getattr(entry, "osakas_id", None),
                kind=getattr(kind, "value", kind),
                weight=_tkm(weight(entry, forest_zone)),
                tkm=_tkm(ton_kilometers(entry, forest_zone)),
            )
        )
    return rows
