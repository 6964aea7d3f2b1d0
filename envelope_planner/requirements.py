"""Per-pay funding requirements for envelopes."""

from __future__ import annotations

from typing import Any

from .frequency import annualize, normalize
from .models import Envelope


def is_allocatable(envelope: Envelope) -> bool:
    """Whether the envelope takes part in waterfall distribution at all."""
    return bool(envelope.target_amount) and not envelope.is_tracking


def required_per_pay(envelope: Envelope, target_cycle: Any) -> float:
    """Amount the envelope needs each pay cycle to stay on target.

    Tracking envelopes and envelopes without a target need nothing.

    Args:
        envelope: Envelope to evaluate
        target_cycle: The household's pay cycle

    Returns:
        Required contribution per pay cycle, rounded to cents

    Example:
        >>> required_per_pay(Envelope('rent', 'Rent', 1000, 'annually'), 'fortnightly')
        38.46
    """
    if not is_allocatable(envelope):
        return 0.0
    return normalize(envelope.target_amount, envelope.frequency, target_cycle)


def annual_amount(envelope: Envelope) -> float:
    """Yearly cost of the envelope's target, for "Annual" display columns."""
    if not envelope.target_amount:
        return 0.0
    return annualize(envelope.target_amount, envelope.frequency)
