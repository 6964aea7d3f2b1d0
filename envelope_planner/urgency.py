"""Bill urgency measured in pay cycles ("pays until due").

Households think in paychecks rather than calendar days, so a bill's next
due date is converted into the number of pay cycles left before it falls
due and bucketed into an urgency tier.  A bill that is already fully
funded is shown one tier calmer.

"Today" is always injectable so results are deterministic under test.
"""

from __future__ import annotations

import calendar
import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import pandas as pd

from .allocator import active_sources
from .classifier import is_fully_funded
from .config import DEFAULT_PAY_CYCLE, URGENCY_TEXT
from .frequency import cadence_days
from .models import DueBadge, DueDateValue, Envelope, Frequency, IncomeSource, PaySchedule, Subtype, Urgency

logger = logging.getLogger(__name__)

# Most urgent first; a funded bill moves one step to the right, capped at ON_TRACK
URGENCY_LADDER = (Urgency.OVERDUE, Urgency.DUE_NOW, Urgency.DUE_SOON, Urgency.ON_TRACK)

PAY_CADENCES = {Frequency.WEEKLY, Frequency.FORTNIGHTLY, Frequency.TWICE_MONTHLY, Frequency.MONTHLY}


def _resolve_today(today: Optional[date]) -> date:
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return today.date()
    return today


def parse_date(value: Any) -> Optional[date]:
    """Parse a full calendar date, returning ``None`` when it can't be read."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if pd.api.types.is_number(value):
        return None
    parsed = pd.to_datetime(value, errors='coerce')
    if pd.isna(parsed):
        return None
    return parsed.date()


def _day_of_month(value: Any) -> Optional[int]:
    """Day number when ``value`` encodes only a day of the month (1-31)."""
    if isinstance(value, bool):
        return None
    if pd.api.types.is_integer(value):
        day = int(value)
    elif pd.api.types.is_float(value):
        # Whole-number floats come from pandas columns holding missing values
        if pd.isna(value) or not float(value).is_integer():
            return None
        day = int(value)
    elif isinstance(value, str) and value.strip().isdigit() and len(value.strip()) <= 2:
        day = int(value.strip())
    else:
        return None
    return max(1, min(31, day))


def _shift(anchor: date, frequency: Frequency, steps: int) -> date:
    if frequency is Frequency.WEEKLY:
        offset = pd.DateOffset(weeks=steps)
    elif frequency is Frequency.FORTNIGHTLY:
        offset = pd.DateOffset(weeks=2 * steps)
    elif frequency is Frequency.MONTHLY:
        offset = pd.DateOffset(months=steps)
    elif frequency is Frequency.QUARTERLY:
        offset = pd.DateOffset(months=3 * steps)
    elif frequency is Frequency.ANNUALLY:
        offset = pd.DateOffset(years=steps)
    else:
        offset = pd.DateOffset(days=int(round(cadence_days(frequency) * steps)))
    return (pd.Timestamp(anchor) + offset).date()


def roll_forward(anchor: date, frequency: Any, today: Optional[date] = None) -> date:
    """Advance ``anchor`` by whole recurrences of ``frequency`` until it is not in the past.

    Each step is taken from the original anchor, so month-end dates don't
    drift (31 Jan -> 28 Feb -> 31 Mar).  One-off dates are never moved.
    """
    today = _resolve_today(today)
    frequency = Frequency.parse(frequency)
    if anchor >= today or frequency is Frequency.ONCE:
        return anchor
    steps = 1
    current = _shift(anchor, frequency, steps)
    while current < today:
        steps += 1
        current = _shift(anchor, frequency, steps)
    return current


def _next_day_of_month(day: int, today: date) -> date:
    year, month = today.year, today.month
    # Every day number 1-31 occurs within any run of 13 months
    for _ in range(13):
        if day <= calendar.monthrange(year, month)[1]:
            candidate = date(year, month, day)
            if candidate >= today:
                return candidate
        month += 1
        if month > 12:
            year, month = year + 1, 1
    raise AssertionError("unreachable")  # pragma: no cover


def next_due_date(value: DueDateValue, frequency: Any = Frequency.MONTHLY, today: Optional[date] = None) -> Optional[date]:
    """Resolve the next occurrence of a bill's due date.

    Args:
        value: A full date (``date``, ``datetime`` or parseable string) or a
            day of the month (``int`` or digit string)
        frequency: Recurrence used to roll a past full date forward
        today: Reference date; defaults to the system date

    Returns:
        The next due date on or after ``today`` (a past one-off date is
        returned as-is), or ``None`` when ``value`` is missing or unparseable

    Example:
        >>> next_due_date(15, today=date(2024, 3, 20))
        datetime.date(2024, 4, 15)
        >>> next_due_date('2024-01-31', 'monthly', today=date(2024, 2, 10))
        datetime.date(2024, 2, 29)
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    today = _resolve_today(today)

    day = _day_of_month(value)
    if day is not None:
        return _next_day_of_month(day, today)

    anchor = parse_date(value)
    if anchor is None:
        return None
    return roll_forward(anchor, frequency, today)


def ensure_future_pay_date(anchor: date, cadence: Any, today: Optional[date] = None) -> date:
    """Move a stored next-pay date forward by whole pay cycles until it isn't past."""
    return roll_forward(anchor, cadence, today)


def primary_pay_schedule(
    income_sources: Sequence[IncomeSource],
    fallback_cycle: Any = DEFAULT_PAY_CYCLE,
    today: Optional[date] = None,
) -> Optional[PaySchedule]:
    """Derive the household pay schedule from its primary income source.

    The primary source is the lowest-ranked active source with a readable
    next-pay date.  Its frequency becomes the cadence unless it isn't a
    regular pay cadence, in which case ``fallback_cycle`` is used.

    Returns:
        ``PaySchedule`` anchored on the next pay date not before ``today``,
        or ``None`` when no source has a usable next-pay date
    """
    for source in active_sources(income_sources):
        anchor = parse_date(source.next_pay_date)
        if anchor is None:
            continue
        cadence = source.frequency if source.frequency in PAY_CADENCES else Frequency.parse(fallback_cycle)
        return PaySchedule(cadence=cadence, anchor_date=ensure_future_pay_date(anchor, cadence, today))
    return None


def urgency_tier(days_until_due: int, cycles_remaining: int) -> Urgency:
    """Bucket a due date into an urgency tier; monotonic in cycles remaining."""
    if days_until_due < 0:
        return Urgency.OVERDUE
    if cycles_remaining <= 0:
        return Urgency.DUE_NOW
    if cycles_remaining == 1:
        return Urgency.DUE_SOON
    return Urgency.ON_TRACK


def soften(urgency: Urgency) -> Urgency:
    """One tier less urgent, never calmer than ``ON_TRACK``."""
    if urgency not in URGENCY_LADDER:
        return urgency
    index = URGENCY_LADDER.index(urgency)
    return URGENCY_LADDER[min(index + 1, len(URGENCY_LADDER) - 1)]


def _display_text(days_until_due: int, cycles_remaining: int, tier: Urgency, is_funded: bool) -> str:
    if is_funded:
        texts = URGENCY_TEXT['funded_display_text']
        if days_until_due < 0:
            return texts['overdue']
        if cycles_remaining == 0:
            return texts['due_now']
        if cycles_remaining == 1:
            return texts['single']
        return texts['plural'].format(cycles=cycles_remaining)
    return URGENCY_TEXT['display_text'][tier.value].format(cycles=cycles_remaining)


def placeholder_badge(is_funded: bool = False) -> DueBadge:
    """Neutral badge for bills whose urgency can't be worked out."""
    return DueBadge(
        urgency=Urgency.NONE,
        display_text=URGENCY_TEXT['display_text']['none'],
        is_funded=is_funded,
    )


def pays_until_due(
    envelope: Envelope,
    pay_schedule: Optional[PaySchedule],
    is_funded: bool,
    today: Optional[date] = None,
) -> DueBadge:
    """Work out how many pay cycles remain before a bill falls due.

    Args:
        envelope: Bill envelope with a ``due_date``
        pay_schedule: Active pay schedule; only its cadence length is used
        is_funded: Whether the envelope's allocations already cover it
        today: Reference date; defaults to the system date

    Returns:
        ``DueBadge`` with the urgency tier and display text.  Non-bill
        envelopes, missing or unparseable due dates and a missing schedule
        all produce the neutral placeholder.

    Example:
        >>> bill = Envelope('power', 'Power', 150, subtype='bill', due_date='2024-05-04')
        >>> schedule = PaySchedule('fortnightly', date(2024, 5, 10))
        >>> pays_until_due(bill, schedule, False, today=date(2024, 5, 1)).urgency
        <Urgency.DUE_SOON: 'due_soon'>
    """
    if envelope.subtype is not Subtype.BILL or pay_schedule is None:
        return placeholder_badge(is_funded)
    if envelope.due_date is None or envelope.due_date == '':
        return placeholder_badge(is_funded)

    today = _resolve_today(today)
    due = next_due_date(envelope.due_date, envelope.frequency, today)
    if due is None:
        logger.debug("Unreadable due date %r on envelope %s", envelope.due_date, envelope.id)
        return placeholder_badge(is_funded)

    days = (due - today).days
    cycles = max(0, math.ceil(days / cadence_days(pay_schedule.cadence)))
    tier = urgency_tier(days, cycles)
    if is_funded:
        tier = soften(tier)

    return DueBadge(
        urgency=tier,
        display_text=_display_text(days, cycles, tier, is_funded),
        is_funded=is_funded,
        cycles_remaining=cycles,
        days_until_due=days,
        next_due_date=due,
    )


def due_badges(
    envelopes: Sequence[Envelope],
    income_sources: Sequence[IncomeSource],
    target_cycle: Any,
    today: Optional[date] = None,
) -> Dict[str, DueBadge]:
    """Badges for every bill envelope that has a due date, keyed by envelope id."""
    schedule = primary_pay_schedule(income_sources, target_cycle, today)
    badges: Dict[str, DueBadge] = {}
    for envelope in envelopes:
        if envelope.subtype is not Subtype.BILL or envelope.due_date in (None, ''):
            continue
        funded = is_fully_funded(envelope, target_cycle)
        badges[envelope.id] = pays_until_due(envelope, schedule, funded, today)
    return badges
