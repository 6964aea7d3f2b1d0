"""Priority-waterfall allocation of income to envelopes.

The allocator walks envelopes from most to least important and pours each
income source's capacity into them in funding-rank order.  It is a pure
function of its inputs: running it twice on the same snapshot yields the
same allocations, and its result replaces (never merges with) whatever
allocations the envelopes carried before.

Manual overrides (:func:`fund_from`, :func:`set_allocations`) write a
single envelope's allocations directly and skip capacity checks; the
validator catches any over-commitment before a save.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .config import EPSILON
from .models import (
    AllocationPlan,
    Envelope,
    Frequency,
    FundedBy,
    IncomeSource,
    IncomeSummary,
    coerce_allocations,
)
from .requirements import required_per_pay

logger = logging.getLogger(__name__)

Allocations = Dict[str, Dict[str, float]]


def active_sources(income_sources: Iterable[IncomeSource]) -> List[IncomeSource]:
    """Active income sources in funding order (stable on equal ranks)."""
    return sorted(
        (source for source in income_sources if source.is_active),
        key=lambda source: source.rank,
    )


def priority_order(envelopes: Iterable[Envelope], target_cycle: Any) -> List[Envelope]:
    """Envelopes with a non-zero requirement, essential first.

    ``sorted`` is stable, so envelopes sharing a priority keep the order
    they were supplied in.  That is the only tie-break.
    """
    candidates = [env for env in envelopes if required_per_pay(env, target_cycle) > 0]
    return sorted(candidates, key=lambda env: env.priority.rank)


def allocate(
    envelopes: Sequence[Envelope],
    income_sources: Sequence[IncomeSource],
    target_cycle: Any,
) -> Allocations:
    """Distribute income capacity across envelopes in priority order.

    Args:
        envelopes: Envelope snapshot; existing allocations are ignored
        income_sources: Income sources; inactive ones are skipped and the
            rest are drawn down in ``rank`` order
        target_cycle: Pay cycle that requirements are expressed on

    Returns:
        Mapping of envelope id to ``{income_source_id: amount}``.  Every
        envelope in ``envelopes`` has an entry; envelopes that need nothing
        or could not be funded get an empty map.

    Example:
        >>> sources = [IncomeSource('pay', 'Pay', 1000, rank=0),
        ...            IncomeSource('side', 'Side', 500, rank=1)]
        >>> rent = Envelope('rent', 'Rent', 1200, 'fortnightly', 'essential')
        >>> allocate([rent], sources, 'fortnightly')
        {'rent': {'pay': 1000.0, 'side': 200.0}}
    """
    sources = active_sources(income_sources)
    capacity = [source.amount for source in sources]
    result: Allocations = {env.id: {} for env in envelopes}

    for envelope in priority_order(envelopes, target_cycle):
        remaining = required_per_pay(envelope, target_cycle)
        env_allocations: Dict[str, float] = {}

        for index, source in enumerate(sources):
            if remaining <= EPSILON:
                break
            take = min(remaining, capacity[index])
            if take > EPSILON:
                env_allocations[source.id] = take
                capacity[index] -= take
                remaining -= take

        result[envelope.id] = env_allocations
        if remaining > EPSILON:
            logger.debug("Envelope %s left %.2f short after waterfall", envelope.id, remaining)

    logger.debug(
        "Waterfall allocated %d envelopes across %d income sources",
        sum(1 for allocs in result.values() if allocs),
        len(sources),
    )
    return result


def apply_allocations(envelopes: Sequence[Envelope], allocations: Mapping[str, Mapping[str, float]]) -> List[Envelope]:
    """Return new envelopes whose allocations come from ``allocations``.

    Envelopes missing from ``allocations`` are returned unchanged.
    """
    updated = []
    for envelope in envelopes:
        if envelope.id in allocations:
            updated.append(envelope.with_allocations(allocations[envelope.id]))
        else:
            updated.append(envelope)
    return updated


def auto_calculate(
    envelopes: Sequence[Envelope],
    income_sources: Sequence[IncomeSource],
    target_cycle: Any,
) -> List[Envelope]:
    """Run the waterfall and replace every envelope's allocations with the result."""
    return apply_allocations(envelopes, allocate(envelopes, income_sources, target_cycle))


def set_allocations(envelope: Envelope, allocations: Mapping[str, Any]) -> Envelope:
    """Manually set one envelope's allocations. Negative amounts clamp to 0.

    No capacity checking happens here; see :func:`validator.validate`.
    """
    return envelope.with_allocations(allocations)


def fund_from(
    envelope: Envelope,
    mode: Any,
    income_sources: Sequence[IncomeSource],
    target_cycle: Any,
) -> Envelope:
    """Fund an envelope's full requirement from a chosen income source.

    Args:
        envelope: Envelope to update
        mode: ``'primary'``, ``'secondary'``, ``'split'`` (even split across
            the first two sources) or ``'none'``
        income_sources: Income sources in any order; ranks decide which is
            primary and secondary
        target_cycle: Pay cycle the requirement is expressed on

    Returns:
        A copy of ``envelope`` with its allocations replaced.  When the
        requested source doesn't exist the allocations are cleared.

    Raises:
        ValueError: If ``mode`` is not a recognised funding choice
    """
    try:
        choice = FundedBy(str(getattr(mode, 'value', mode)).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown funding mode: {mode!r}") from None

    sources = active_sources(income_sources)
    per_pay = required_per_pay(envelope, target_cycle)
    allocations: Dict[str, float] = {}

    if choice is FundedBy.PRIMARY and sources:
        allocations[sources[0].id] = per_pay
    elif choice is FundedBy.SECONDARY and len(sources) >= 2:
        allocations[sources[1].id] = per_pay
    elif choice is FundedBy.SPLIT and len(sources) >= 2:
        half = per_pay / 2
        allocations[sources[0].id] = half
        allocations[sources[1].id] = half

    return envelope.with_allocations(allocations)


def snapshot_allocations(envelopes: Iterable[Envelope]) -> Allocations:
    """Copy every envelope's allocations, e.g. as the last-saved baseline."""
    return {env.id: dict(env.income_allocations) for env in envelopes}


def has_changes(envelopes: Iterable[Envelope], saved: Mapping[str, Mapping[str, float]]) -> bool:
    """Whether any envelope's allocations differ from the ``saved`` snapshot.

    Zero entries are ignored and amounts within the tolerance count as equal.
    """
    for envelope in envelopes:
        current = _non_zero(envelope.income_allocations)
        baseline = _non_zero(coerce_allocations(saved.get(envelope.id)))
        if set(current) != set(baseline):
            return True
        if any(abs(current[key] - baseline[key]) > EPSILON for key in current):
            return True
    return False


def reset_allocations(envelopes: Sequence[Envelope], saved: Mapping[str, Mapping[str, float]]) -> List[Envelope]:
    """Discard unsaved edits, restoring every envelope's saved allocations."""
    return [env.with_allocations(saved.get(env.id) or {}) for env in envelopes]


def income_summaries(
    envelopes: Iterable[Envelope],
    income_sources: Sequence[IncomeSource],
) -> List[IncomeSummary]:
    """Allocated, remaining and percent-used figures for each active source."""
    envelopes = list(envelopes)
    summaries = []
    for source in active_sources(income_sources):
        allocated = sum(env.income_allocations.get(source.id, 0.0) for env in envelopes)
        summaries.append(
            IncomeSummary(
                source_id=source.id,
                name=source.name,
                rank=source.rank,
                amount=source.amount,
                allocated=allocated,
                remaining=source.amount - allocated,
                percent_used=(allocated / source.amount) * 100 if source.amount > 0 else 0.0,
            )
        )

    known = {source.id for source in income_sources}
    orphaned = {
        source_id
        for env in envelopes
        for source_id, amount in env.income_allocations.items()
        if amount > 0 and source_id not in known
    }
    if orphaned:
        logger.warning("Allocations reference unknown income sources: %s", sorted(orphaned))
    return summaries


def build_plan(
    envelopes: Sequence[Envelope],
    income_sources: Sequence[IncomeSource],
    target_cycle: Any,
    *,
    recalculate: bool = False,
) -> AllocationPlan:
    """Assemble an :class:`AllocationPlan`, optionally re-running the waterfall first."""
    planned = auto_calculate(envelopes, income_sources, target_cycle) if recalculate else list(envelopes)
    return AllocationPlan(
        envelopes=planned,
        income=income_summaries(planned, income_sources),
        target_cycle=Frequency.parse(target_cycle),
    )


def _non_zero(allocations: Optional[Mapping[str, float]]) -> Dict[str, float]:
    return {key: value for key, value in (allocations or {}).items() if value > 0}
