"""Top-level package for the Envelope Planner allocation engine.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``frequency`` – converting amounts between billing and pay cadences
* ``requirements`` – per-pay requirements for each envelope
* ``allocator`` – the priority waterfall and manual funding overrides
* ``classifier`` – primary / secondary / split funding labels
* ``validator`` – advisory checks run before a plan is saved
* ``urgency`` – "pays until due" badges for bills
* ``gap`` – gap analysis and suggested opening balances
* ``summaries`` – pandas tables for progress cards and plan views

Every operation is a pure function over snapshots of its inputs, so a
caller recomputes the whole plan whenever anything changes:

```python
from envelope_planner import auto_calculate, validate

planned = auto_calculate(envelopes, income_sources, 'fortnightly')
result = validate(planned, income_sources, 'fortnightly')
```
"""

from .models import (  # noqa: F401  # re-exported for convenience
    AllocationPlan,
    DueBadge,
    Envelope,
    FieldWarning,
    Frequency,
    FundedBy,
    IncomeSource,
    IncomeSummary,
    PaySchedule,
    Priority,
    Subtype,
    Urgency,
    ValidationResult,
    ValidationTotals,
    ranked_sources,
)
from .frequency import annualize, normalize  # noqa: F401
from .requirements import required_per_pay  # noqa: F401
from .allocator import (  # noqa: F401
    allocate,
    apply_allocations,
    auto_calculate,
    build_plan,
    fund_from,
    has_changes,
    income_summaries,
    reset_allocations,
    set_allocations,
    snapshot_allocations,
)
from .classifier import classify, is_fully_funded  # noqa: F401
from .validator import validate, validate_envelope  # noqa: F401
from .urgency import due_badges, pays_until_due, primary_pay_schedule  # noqa: F401


__all__ = [
    # Models
    "AllocationPlan",
    "DueBadge",
    "Envelope",
    "FieldWarning",
    "Frequency",
    "FundedBy",
    "IncomeSource",
    "IncomeSummary",
    "PaySchedule",
    "Priority",
    "Subtype",
    "Urgency",
    "ValidationResult",
    "ValidationTotals",
    "ranked_sources",
    # Normalisation and requirements
    "annualize",
    "normalize",
    "required_per_pay",
    # Allocation
    "allocate",
    "apply_allocations",
    "auto_calculate",
    "build_plan",
    "fund_from",
    "has_changes",
    "income_summaries",
    "reset_allocations",
    "set_allocations",
    "snapshot_allocations",
    # Classification and validation
    "classify",
    "is_fully_funded",
    "validate",
    "validate_envelope",
    # Urgency
    "due_badges",
    "pays_until_due",
    "primary_pay_schedule",
]
