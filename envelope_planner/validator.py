"""Advisory checks run over an allocation plan before it is saved.

Every rule is evaluated independently and contributes its own warning;
none of them blocks a save.  Callers present the warnings and ask the
user to confirm before committing.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence, Set, Tuple

from .allocator import active_sources
from .classifier import total_allocated
from .config import EPSILON, SURPLUS_FLOOR
from .formatting import format_currency, join_names
from .models import (
    Envelope,
    FieldWarning,
    Frequency,
    IncomeSource,
    Priority,
    Subtype,
    ValidationResult,
    ValidationTotals,
)
from .requirements import required_per_pay

logger = logging.getLogger(__name__)


def validate(
    envelopes: Sequence[Envelope],
    income_sources: Sequence[IncomeSource],
    target_cycle: Any,
    *,
    surplus_floor: float = SURPLUS_FLOOR,
) -> ValidationResult:
    """Scan a plan for unfunded essentials, over-committed income and idle surplus.

    Args:
        envelopes: Envelopes with their current allocations
        income_sources: Income sources the allocations draw on
        target_cycle: Pay cycle requirements are expressed on
        surplus_floor: Unallocated income at or below this amount is not
            reported as surplus

    Returns:
        ``ValidationResult`` with human-readable warnings and plan totals.
        Tracking envelopes are ignored throughout.

    Example:
        >>> result = validate(envelopes, sources, 'fortnightly')
        >>> result.warnings
        ['1 essential envelope(s) are not fully funded: Rent']
    """
    planned = [env for env in envelopes if not env.is_tracking]
    result = ValidationResult()

    sources = active_sources(income_sources)
    active_ids = {source.id for source in sources}

    unfunded = []
    total_unfunded = 0.0
    for envelope in planned:
        required = required_per_pay(envelope, target_cycle)
        if required <= 0:
            continue
        # Money promised from an inactive or unknown source funds nothing
        allocated = _funded_amount(envelope, active_ids)
        total_unfunded += max(0.0, required - allocated)
        if envelope.priority is Priority.ESSENTIAL and allocated < required - EPSILON:
            unfunded.append(envelope)

    if unfunded:
        result.unfunded_essentials = [env.id for env in unfunded]
        result.warnings.append(
            f"{len(unfunded)} essential envelope(s) are not fully funded: "
            f"{join_names(env.name for env in unfunded)}"
        )

    if income_sources:
        for source_id, name, overage in _overages(planned, income_sources):
            result.over_allocated_sources.append(source_id)
            result.warnings.append(f"{name or 'Income'} is over-allocated by ${overage:.2f}")

    total_income = sum(source.amount for source in sources)
    total_allocated_amount = sum(_funded_amount(env, active_ids) for env in planned)
    total_surplus = total_income - total_allocated_amount

    if total_surplus > surplus_floor and total_unfunded > EPSILON:
        result.warnings.append(
            f"{format_currency(total_surplus)} of income is unallocated and could cover "
            f"{format_currency(min(total_surplus, total_unfunded))} of the "
            f"{format_currency(total_unfunded)} shortfall"
        )

    result.totals = ValidationTotals(
        total_income=total_income,
        total_allocated=total_allocated_amount,
        total_surplus=total_surplus,
        total_unfunded=total_unfunded,
    )
    logger.info("Validated %d envelopes: %d warning(s)", len(planned), len(result.warnings))
    return result


def validate_envelope(envelope: Envelope, target_cycle: Any) -> List[FieldWarning]:
    """Record-level checks for a single envelope, as shown beside an edited row.

    Returns:
        ``FieldWarning`` entries; ``level`` is ``'error'`` for missing
        required fields and ``'warning'``/``'info'`` for under and over
        allocation against the per-pay requirement.
    """
    warnings: List[FieldWarning] = []

    if not envelope.name or not envelope.name.strip():
        warnings.append(FieldWarning('error', 'Name required', 'name'))

    if envelope.subtype is Subtype.BILL and envelope.target_amount <= 0:
        warnings.append(FieldWarning('error', 'Target amount required for bills', 'target_amount'))

    if envelope.subtype is Subtype.BILL and envelope.frequency is Frequency.ONCE and not envelope.due_date:
        warnings.append(FieldWarning('error', 'One-off bills need a due date', 'due_date'))

    required = required_per_pay(envelope, target_cycle)
    allocated = total_allocated(envelope)
    if required > 0 and allocated < required - EPSILON:
        warnings.append(
            FieldWarning('warning', f"Under-allocated by ${required - allocated:.2f}", 'allocation')
        )
    elif required > 0 and allocated > required + EPSILON:
        warnings.append(
            FieldWarning('info', f"Over-allocated by ${allocated - required:.2f}", 'allocation')
        )

    return warnings


def _funded_amount(envelope: Envelope, active_ids: Set[str]) -> float:
    return sum(
        amount for source_id, amount in envelope.income_allocations.items() if source_id in active_ids
    )


def _overages(
    envelopes: Sequence[Envelope],
    income_sources: Sequence[IncomeSource],
) -> List[Tuple[str, str, float]]:
    """Sources whose allocations exceed what they can pay, as ``(id, name, overage)``.

    Inactive sources have no capacity, and neither do ids that match no
    source at all, so any allocation to them is an overage.
    """
    drawn: Dict[str, float] = {}
    for envelope in envelopes:
        for source_id, amount in envelope.income_allocations.items():
            drawn[source_id] = drawn.get(source_id, 0.0) + amount

    overages = []
    for source in sorted(income_sources, key=lambda source: source.rank):
        capacity = source.amount if source.is_active else 0.0
        overage = drawn.pop(source.id, 0.0) - capacity
        if overage > EPSILON:
            overages.append((source.id, source.name, overage))
    for source_id in sorted(drawn):
        if drawn[source_id] > EPSILON:
            overages.append((source_id, source_id, drawn[source_id]))
    return overages
