"""Frequency normalisation between billing cadences and pay cycles.

Every frequency is expressed as occurrences per year; converting an
amount from one cadence to another annualises it and divides by the
target's occurrences per year.  Unrecognised frequencies are treated as
monthly rather than raising.
"""

from __future__ import annotations

from typing import Any, Dict

from .config import CADENCE_DAYS
from .models import Frequency, coerce_amount

CYCLES_PER_YEAR: Dict[Frequency, int] = {
    Frequency.WEEKLY: 52,
    Frequency.FORTNIGHTLY: 26,
    Frequency.TWICE_MONTHLY: 24,
    Frequency.MONTHLY: 12,
    Frequency.QUARTERLY: 4,
    Frequency.ANNUALLY: 1,
    Frequency.ONCE: 1,
}

SHORT_LABELS: Dict[Frequency, str] = {
    Frequency.WEEKLY: 'Wkly',
    Frequency.FORTNIGHTLY: 'F/N',
    Frequency.TWICE_MONTHLY: '2x/mo',
    Frequency.MONTHLY: 'Mthly',
    Frequency.QUARTERLY: 'Qtly',
    Frequency.ANNUALLY: 'Ann',
    Frequency.ONCE: 'Once',
}


def cycles_per_year(frequency: Any) -> int:
    """Return how many times ``frequency`` occurs in a year.

    Example:
        >>> cycles_per_year('fortnightly')
        26
        >>> cycles_per_year('every blue moon')
        12
    """
    return CYCLES_PER_YEAR[Frequency.parse(frequency)]


def normalize(amount: Any, source_frequency: Any, target_cycle: Any) -> float:
    """Convert ``amount`` billed at ``source_frequency`` to a per-``target_cycle`` amount.

    Args:
        amount: Dollar amount per source occurrence (clamped to >= 0)
        source_frequency: How often ``amount`` recurs
        target_cycle: The pay cycle to express the amount on

    Returns:
        Equivalent amount per target cycle, rounded to cents

    Example:
        >>> normalize(200, 'monthly', 'fortnightly')
        92.31
        >>> normalize(1000, 'weekly', 'fortnightly')
        2000.0
    """
    annual = coerce_amount(amount) * cycles_per_year(source_frequency)
    return round(annual / cycles_per_year(target_cycle), 2)


def annualize(amount: Any, frequency: Any) -> float:
    """Return the yearly total of ``amount`` recurring at ``frequency``."""
    return round(coerce_amount(amount) * cycles_per_year(frequency), 2)


def cadence_days(frequency: Any) -> float:
    """Length of one cycle of ``frequency`` in (possibly fractional) days."""
    resolved = Frequency.parse(frequency)
    return CADENCE_DAYS.get(resolved.value, 365.0 / CYCLES_PER_YEAR[resolved])


def short_label(frequency: Any) -> str:
    """Compact label for table columns, e.g. ``'F/N'`` for fortnightly."""
    return SHORT_LABELS[Frequency.parse(frequency)]
