"""Gap analysis and suggested opening balances.

The ideal per-pay contribution for an envelope never changes unless the
bill itself changes.  Comparing what that contribution should have built
up since a cycle started with the envelope's actual balance shows whether
the household is ahead of or behind schedule.  Working backwards from a
due date gives the lump sum needed up front so the bill is covered when
it arrives.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from .config import GAP_THRESHOLDS
from .frequency import cadence_days
from .models import Envelope
from .requirements import required_per_pay
from .urgency import next_due_date

ON_TRACK = 'on_track'
SLIGHT_DEVIATION = 'slight_deviation'
NEEDS_ATTENTION = 'needs_attention'

GAP_STATUS_TEXT = {
    ON_TRACK: 'On track',
    SLIGHT_DEVIATION: 'Slight deviation',
    NEEDS_ATTENTION: 'Needs attention',
}


@dataclass
class EnvelopeGap:
    expected_balance: float
    actual_balance: float
    gap: float
    pay_cycles_elapsed: int
    status: str

    @property
    def status_text(self) -> str:
        return GAP_STATUS_TEXT[self.status]


def pay_cycles_elapsed(start: date, current: date, pay_cycle: Any) -> int:
    """Whole pay cycles between ``start`` and ``current`` (0 if ``current`` is earlier)."""
    days = (current - start).days
    if days <= 0:
        return 0
    return int(math.floor(days / cadence_days(pay_cycle)))


def pay_cycles_until_due(current: date, due: date, pay_cycle: Any) -> int:
    """Pay cycles left before ``due``, rounding partial cycles up."""
    days = (due - current).days
    if days <= 0:
        return 0
    return int(math.ceil(days / cadence_days(pay_cycle)))


def gap_status(gap: float, expected_balance: float) -> str:
    """Classify how far a balance is from where it should be.

    Within 5% of the expected balance is on track, within 15% a slight
    deviation, anything further needs attention.
    """
    ratio = abs(gap) / expected_balance if expected_balance > 0 else 0.0
    if ratio <= GAP_THRESHOLDS['on_track_ratio']:
        return ON_TRACK
    if ratio <= GAP_THRESHOLDS['slight_deviation_ratio']:
        return SLIGHT_DEVIATION
    return NEEDS_ATTENTION


def envelope_gap(
    envelope: Envelope,
    cycle_start: date,
    pay_cycle: Any,
    today: Optional[date] = None,
) -> EnvelopeGap:
    """Compare an envelope's balance with what its ideal contributions would have built.

    Args:
        envelope: Envelope with ``current_amount`` and ``opening_balance``
        cycle_start: When the bill cycle (or budgeting) started
        pay_cycle: The household's pay cycle
        today: Reference date; defaults to the system date

    Returns:
        ``EnvelopeGap``; a positive ``gap`` means the envelope is ahead
    """
    today = today or date.today()
    elapsed = pay_cycles_elapsed(cycle_start, today, pay_cycle)
    expected = required_per_pay(envelope, pay_cycle) * elapsed
    actual = envelope.current_amount + envelope.opening_balance
    gap = actual - expected
    return EnvelopeGap(
        expected_balance=round(expected, 2),
        actual_balance=round(actual, 2),
        gap=round(gap, 2),
        pay_cycles_elapsed=elapsed,
        status=gap_status(gap, expected),
    )


def suggested_opening_balance(envelope: Envelope, pay_cycle: Any, today: Optional[date] = None) -> float:
    """Lump sum needed now so per-pay contributions cover the bill by its due date.

    Envelopes without a (readable) due date get no suggestion.
    """
    today = today or date.today()
    due = next_due_date(envelope.due_date, envelope.frequency, today)
    if due is None:
        return 0.0
    cycles = pay_cycles_until_due(today, due, pay_cycle)
    will_accumulate = required_per_pay(envelope, pay_cycle) * cycles
    return max(0.0, round(envelope.target_amount - will_accumulate, 2))
