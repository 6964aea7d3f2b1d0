"""Labels describing which income source(s) fund an envelope."""

from __future__ import annotations

from typing import Any, Dict, Sequence

from .config import EPSILON
from .models import Envelope, FundedBy, IncomeSource
from .requirements import required_per_pay


def classify(envelope: Envelope, income_sources: Sequence[IncomeSource]) -> FundedBy:
    """Classify an envelope's funding from its allocation map.

    Args:
        envelope: Envelope whose ``income_allocations`` are inspected
        income_sources: Sources used to look up the funding source's rank

    Returns:
        ``NONE`` when nothing is allocated, ``SPLIT`` when more than one
        source contributes, otherwise ``PRIMARY`` for the rank-0 source and
        ``SECONDARY`` for any other (including a source that is no longer
        in ``income_sources``)

    Example:
        >>> env = Envelope('gym', 'Gym', 40, income_allocations={'side': 20})
        >>> classify(env, [IncomeSource('pay', 'Pay', 1000, rank=0),
        ...                IncomeSource('side', 'Side', 300, rank=1)])
        <FundedBy.SECONDARY: 'secondary'>
    """
    non_zero = [source_id for source_id, amount in envelope.income_allocations.items() if amount > 0]
    if not non_zero:
        return FundedBy.NONE
    if len(non_zero) > 1:
        return FundedBy.SPLIT

    ranks: Dict[str, int] = {source.id: source.rank for source in income_sources}
    return FundedBy.PRIMARY if ranks.get(non_zero[0]) == 0 else FundedBy.SECONDARY


def total_allocated(envelope: Envelope) -> float:
    return sum(envelope.income_allocations.values())


def shortfall(envelope: Envelope, target_cycle: Any) -> float:
    """How far the envelope's allocations fall short of its requirement (never negative)."""
    return max(0.0, required_per_pay(envelope, target_cycle) - total_allocated(envelope))


def is_fully_funded(envelope: Envelope, target_cycle: Any) -> bool:
    """True when allocations cover the per-pay requirement within the tolerance.

    Envelopes that need nothing are never reported as funded, so they don't
    pick up a "funded" badge by accident.
    """
    required = required_per_pay(envelope, target_cycle)
    if required <= 0:
        return False
    return total_allocated(envelope) >= required - EPSILON
