import pytest

from envelope_planner.classifier import classify, is_fully_funded, shortfall, total_allocated
from envelope_planner.models import Envelope, FundedBy, IncomeSource

SOURCES = [
    IncomeSource('main', 'Salary', 2000, rank=0),
    IncomeSource('side', 'Tutoring', 400, rank=1),
]


def _with_allocations(allocations, target=100):
    return Envelope('env', 'Envelope', target, 'fortnightly', income_allocations=allocations)


def test_no_allocations_is_none():
    assert classify(_with_allocations({}), SOURCES) is FundedBy.NONE
    assert classify(_with_allocations({'main': 0, 'side': 0}), SOURCES) is FundedBy.NONE


def test_single_source_uses_rank():
    assert classify(_with_allocations({'main': 100}), SOURCES) is FundedBy.PRIMARY
    assert classify(_with_allocations({'side': 100, 'main': 0}), SOURCES) is FundedBy.SECONDARY


def test_more_than_one_non_zero_source_is_split():
    assert classify(_with_allocations({'main': 1, 'side': 99}), SOURCES) is FundedBy.SPLIT


def test_unknown_source_counts_as_secondary():
    assert classify(_with_allocations({'retired-job': 50}), SOURCES) is FundedBy.SECONDARY


def test_rank_not_list_position_decides_primary():
    reordered = [
        IncomeSource('side', 'Tutoring', 400, rank=1),
        IncomeSource('main', 'Salary', 2000, rank=0),
    ]
    assert classify(_with_allocations({'main': 100}), reordered) is FundedBy.PRIMARY


def test_funding_helpers():
    envelope = _with_allocations({'main': 60, 'side': 39.995})
    assert total_allocated(envelope) == pytest.approx(99.995)
    assert is_fully_funded(envelope, 'fortnightly')
    assert shortfall(_with_allocations({'main': 30}), 'fortnightly') == 70.0
    assert not is_fully_funded(_with_allocations({'main': 30}), 'fortnightly')
    assert not is_fully_funded(_with_allocations({}, target=0), 'fortnightly')
