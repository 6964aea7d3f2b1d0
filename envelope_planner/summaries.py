"""Tabular summaries of an allocation plan.

These helpers turn engine output into pandas DataFrames that progress
cards, plan tables and exports can render directly.  They add no new
rules; every figure comes from the allocator, classifier and requirement
calculator.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

import numpy as np
import pandas as pd

from .classifier import classify, total_allocated
from .config import EPSILON
from .models import Envelope, IncomeSource, IncomeSummary
from .requirements import annual_amount, required_per_pay

FUNDING_COLUMNS = [
    'Envelope', 'Priority', 'Subtype', 'Frequency', 'Target', 'Per Pay',
    'Annual', 'Allocated', 'Shortfall', 'Funded By', 'Status',
]
INCOME_COLUMNS = [
    'Income Source', 'Rank', 'Amount', 'Allocated', 'Remaining',
    'Percent Used', 'Over Allocated',
]


def income_frame(summaries: Iterable[IncomeSummary]) -> pd.DataFrame:
    """One row per income source with allocated/remaining/percent-used figures."""
    rows = [
        {
            'Income Source': summary.name,
            'Rank': summary.rank,
            'Amount': round(summary.amount, 2),
            'Allocated': round(summary.allocated, 2),
            'Remaining': round(summary.remaining, 2),
            'Percent Used': round(summary.percent_used, 1),
        }
        for summary in summaries
    ]
    if not rows:
        return pd.DataFrame(columns=INCOME_COLUMNS)
    frame = pd.DataFrame(rows)
    frame['Over Allocated'] = frame['Remaining'] < -EPSILON
    return frame[INCOME_COLUMNS]


def funding_frame(
    envelopes: Sequence[Envelope],
    income_sources: Sequence[IncomeSource],
    target_cycle: Any,
) -> pd.DataFrame:
    """One row per envelope describing its requirement and how it is funded.

    ``Status`` is one of ``Tracking``, ``No Target``, ``Fully Funded``,
    ``Partially Funded`` or ``Unfunded``.
    """
    if not envelopes:
        return pd.DataFrame(columns=FUNDING_COLUMNS)

    frame = pd.DataFrame([
        {
            'Envelope': env.name,
            'Priority': env.priority.value,
            'Subtype': env.subtype.value,
            'Frequency': env.frequency.value,
            'Target': env.target_amount,
            'Per Pay': required_per_pay(env, target_cycle),
            'Annual': annual_amount(env),
            'Allocated': round(total_allocated(env), 2),
            'Funded By': classify(env, income_sources).value,
            '__tracking__': env.is_tracking,
        }
        for env in envelopes
    ])
    frame['Shortfall'] = (frame['Per Pay'] - frame['Allocated']).clip(lower=0).round(2)
    frame['Status'] = np.select(
        [
            frame['__tracking__'],
            frame['Per Pay'] <= 0,
            frame['Allocated'] >= frame['Per Pay'] - EPSILON,
            frame['Allocated'] > 0,
        ],
        ['Tracking', 'No Target', 'Fully Funded', 'Partially Funded'],
        default='Unfunded',
    )
    return frame[FUNDING_COLUMNS]


def funding_counts(frame: pd.DataFrame) -> Dict[str, int]:
    """Count fully funded, partially funded and unfunded envelopes in a funding frame."""
    if frame is None or frame.empty:
        return {'fully_funded': 0, 'partially_funded': 0, 'unfunded': 0}
    counts = frame['Status'].value_counts()
    return {
        'fully_funded': int(counts.get('Fully Funded', 0)),
        'partially_funded': int(counts.get('Partially Funded', 0)),
        'unfunded': int(counts.get('Unfunded', 0)),
    }
