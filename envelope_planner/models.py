"""Data model for the allocation engine.

Income sources and envelopes arrive from external collaborators as plain
records; this module gives them explicit shapes.  String-keyed unions
(frequency, priority, subtype) become closed enums whose ``parse``
methods fall back to a default instead of raising, so a stray value from
upstream degrades gracefully.

The engine treats every instance as a snapshot: operations that change
allocations return new ``Envelope`` values via :func:`dataclasses.replace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

DueDateValue = Union[date, datetime, str, int, None]


class Frequency(str, Enum):
    WEEKLY = 'weekly'
    FORTNIGHTLY = 'fortnightly'
    TWICE_MONTHLY = 'twice_monthly'
    MONTHLY = 'monthly'
    QUARTERLY = 'quarterly'
    ANNUALLY = 'annually'
    ONCE = 'once'

    @classmethod
    def parse(cls, value: Any) -> 'Frequency':
        """Resolve ``value`` to a frequency, defaulting to monthly."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.MONTHLY
        key = value.strip().lower().replace('-', '_').replace(' ', '_')
        key = _FREQUENCY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.MONTHLY


_FREQUENCY_ALIASES = {
    'annual': 'annually',
    'yearly': 'annually',
    'biweekly': 'fortnightly',
    'semi_monthly': 'twice_monthly',
    'semimonthly': 'twice_monthly',
}


class Priority(str, Enum):
    ESSENTIAL = 'essential'
    IMPORTANT = 'important'
    DISCRETIONARY = 'discretionary'

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]

    @classmethod
    def parse(cls, value: Any) -> 'Priority':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.DISCRETIONARY


_PRIORITY_RANKS = {
    Priority.ESSENTIAL: 0,
    Priority.IMPORTANT: 1,
    Priority.DISCRETIONARY: 2,
}


class Subtype(str, Enum):
    BILL = 'bill'
    SPENDING = 'spending'
    SAVINGS = 'savings'
    GOAL = 'goal'
    TRACKING = 'tracking'

    @classmethod
    def parse(cls, value: Any) -> 'Subtype':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.SPENDING


class FundedBy(str, Enum):
    """Which income source(s) currently fund an envelope."""

    NONE = 'none'
    PRIMARY = 'primary'
    SECONDARY = 'secondary'
    SPLIT = 'split'


class Urgency(str, Enum):
    """Urgency tiers for a bill, most urgent first."""

    OVERDUE = 'overdue'
    DUE_NOW = 'due_now'
    DUE_SOON = 'due_soon'
    ON_TRACK = 'on_track'
    NONE = 'none'


def coerce_amount(value: Any) -> float:
    """Clamp a dollar amount to a non-negative float.

    Negative, missing, ``NaN`` and non-numeric values all become ``0.0``.

    Example:
        >>> coerce_amount('12.5')
        12.5
        >>> coerce_amount(-3)
        0.0
        >>> coerce_amount(float('nan'))
        0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if pd.isna(number) or number < 0 or number == float('inf'):
        return 0.0
    return number


def coerce_balance(value: Any) -> float:
    """Convert an envelope balance to a float, keeping negatives (overdrawn envelopes).

    Missing, ``NaN``, infinite and non-numeric values become ``0.0``.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if pd.isna(number) or abs(number) == float('inf'):
        return 0.0
    return number


def coerce_allocations(mapping: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Copy an allocation map, clamping every amount to be non-negative."""
    if not mapping:
        return {}
    return {str(source_id): coerce_amount(amount) for source_id, amount in mapping.items()}


@dataclass
class IncomeSource:
    id: str
    name: str
    amount: float
    frequency: Frequency = Frequency.FORTNIGHTLY
    is_active: bool = True
    rank: int = 0
    next_pay_date: DueDateValue = None

    def __post_init__(self) -> None:
        self.amount = coerce_amount(self.amount)
        self.frequency = Frequency.parse(self.frequency)

    @property
    def is_primary(self) -> bool:
        return self.rank == 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], rank: Optional[int] = None) -> 'IncomeSource':
        """Build an income source from a loosely-typed record.

        Args:
            data: Record with ``id``, ``name``, ``amount`` and optional
                ``frequency``/``pay_cycle``, ``is_active``, ``rank`` and
                ``next_pay_date`` keys
            rank: Explicit funding rank; overrides any ``rank`` in ``data``

        Returns:
            A new ``IncomeSource``
        """
        resolved_rank = rank if rank is not None else int(data.get('rank', 0) or 0)
        return cls(
            id=str(data['id']),
            name=str(data.get('name') or ''),
            amount=data.get('amount', data.get('typical_amount')),
            frequency=data.get('frequency') or data.get('pay_cycle') or Frequency.FORTNIGHTLY,
            is_active=data.get('is_active', True) is not False,
            rank=resolved_rank,
            next_pay_date=data.get('next_pay_date'),
        )


def ranked_sources(records: List[Mapping[str, Any]]) -> List[IncomeSource]:
    """Turn an ordered list of income records into sources with explicit ranks.

    The position of each record becomes its ``rank`` so the funding order
    is stated on the object instead of implied by list position.
    """
    return [IncomeSource.from_dict(record, rank=index) for index, record in enumerate(records)]


@dataclass
class Envelope:
    id: str
    name: str
    target_amount: float = 0.0
    frequency: Frequency = Frequency.MONTHLY
    priority: Priority = Priority.DISCRETIONARY
    subtype: Subtype = Subtype.SPENDING
    due_date: DueDateValue = None
    is_tracking_only: bool = False
    income_allocations: Dict[str, float] = field(default_factory=dict)
    current_amount: float = 0.0
    opening_balance: float = 0.0

    def __post_init__(self) -> None:
        if not str(self.id or '').strip():
            raise ValueError("Envelope id must not be empty")
        self.target_amount = coerce_amount(self.target_amount)
        self.frequency = Frequency.parse(self.frequency)
        self.priority = Priority.parse(self.priority)
        self.subtype = Subtype.parse(self.subtype)
        self.income_allocations = coerce_allocations(self.income_allocations)
        self.current_amount = coerce_balance(self.current_amount)
        self.opening_balance = coerce_balance(self.opening_balance)

    @property
    def is_tracking(self) -> bool:
        return self.is_tracking_only or self.subtype is Subtype.TRACKING

    def with_allocations(self, allocations: Mapping[str, float]) -> 'Envelope':
        """Return a copy of this envelope with ``allocations`` replacing its own."""
        return replace(self, income_allocations=coerce_allocations(allocations))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Envelope':
        """Build an envelope from a loosely-typed record (snake_case keys)."""
        return cls(
            id=str(data['id']),
            name=str(data.get('name') or ''),
            target_amount=data.get('target_amount', 0.0),
            frequency=data.get('frequency') or Frequency.MONTHLY,
            priority=data.get('priority') or Priority.DISCRETIONARY,
            subtype=data.get('subtype') or Subtype.SPENDING,
            due_date=data.get('due_date'),
            is_tracking_only=bool(data.get('is_tracking_only', False)),
            income_allocations=dict(data.get('income_allocations') or {}),
            current_amount=data.get('current_amount'),
            opening_balance=data.get('opening_balance'),
        )


@dataclass
class PaySchedule:
    cadence: Frequency
    anchor_date: date

    def __post_init__(self) -> None:
        self.cadence = Frequency.parse(self.cadence)


@dataclass
class IncomeSummary:
    """Per-income-source usage, as shown on progress cards."""

    source_id: str
    name: str
    rank: int
    amount: float
    allocated: float
    remaining: float
    percent_used: float


@dataclass
class ValidationTotals:
    total_income: float = 0.0
    total_allocated: float = 0.0
    total_surplus: float = 0.0
    total_unfunded: float = 0.0


@dataclass
class ValidationResult:
    warnings: List[str] = field(default_factory=list)
    totals: ValidationTotals = field(default_factory=ValidationTotals)
    unfunded_essentials: List[str] = field(default_factory=list)
    over_allocated_sources: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.warnings


@dataclass
class FieldWarning:
    """A record-level problem with a single envelope."""

    level: str
    message: str
    field: str


@dataclass
class DueBadge:
    """Badge descriptor for a bill's "pays until due" indicator."""

    urgency: Urgency
    display_text: str
    is_funded: bool
    cycles_remaining: Optional[int] = None
    days_until_due: Optional[int] = None
    next_due_date: Optional[date] = None

    @property
    def is_placeholder(self) -> bool:
        return self.cycles_remaining is None


@dataclass
class AllocationPlan:
    """Envelopes with their current allocations plus per-source totals."""

    envelopes: List[Envelope]
    income: List[IncomeSummary]
    target_cycle: Frequency

    @property
    def total_allocated(self) -> float:
        return sum(summary.allocated for summary in self.income)

    @property
    def total_remaining(self) -> float:
        return sum(summary.remaining for summary in self.income)
