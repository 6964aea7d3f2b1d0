import math

import pytest

from envelope_planner.formatting import format_currency, join_names
from envelope_planner.models import (
    Envelope,
    Frequency,
    IncomeSource,
    Priority,
    Subtype,
    coerce_amount,
    coerce_balance,
    ranked_sources,
)


@pytest.mark.parametrize('value', [None, -5, 'abc', math.nan, math.inf, True])
def test_coerce_amount_clamps_bad_values(value):
    assert coerce_amount(value) == 0.0


def test_enum_parsing_falls_back_to_defaults():
    assert Frequency.parse('Biweekly') is Frequency.FORTNIGHTLY
    assert Frequency.parse('annual') is Frequency.ANNUALLY
    assert Frequency.parse(None) is Frequency.MONTHLY
    assert Priority.parse('ESSENTIAL') is Priority.ESSENTIAL
    assert Priority.parse('urgent') is Priority.DISCRETIONARY
    assert Subtype.parse('chore') is Subtype.SPENDING


def test_envelope_from_record():
    envelope = Envelope.from_dict({
        'id': 7,
        'name': 'Car rego',
        'target_amount': '780',
        'frequency': 'yearly',
        'priority': 'important',
        'subtype': 'bill',
        'due_date': '2024-09-01',
        'income_allocations': {'main': '15', 'side': -3},
        'current_amount': -20,
    })

    assert envelope.id == '7'
    assert envelope.target_amount == 780.0
    assert envelope.frequency is Frequency.ANNUALLY
    assert envelope.income_allocations == {'main': 15.0, 'side': 0.0}
    assert envelope.current_amount == -20.0
    assert not envelope.is_tracking


def test_envelope_requires_id():
    with pytest.raises(ValueError):
        Envelope('  ', 'Nameless')


def test_with_allocations_returns_copy():
    envelope = Envelope('fun', 'Fun', 50, income_allocations={'main': 10})
    updated = envelope.with_allocations({'side': 20})
    assert envelope.income_allocations == {'main': 10.0}
    assert updated.income_allocations == {'side': 20.0}


def test_ranked_sources_use_list_position():
    sources = ranked_sources([
        {'id': 'main', 'name': 'Salary', 'amount': 2000, 'pay_cycle': 'fortnightly'},
        {'id': 'side', 'name': 'Tutoring', 'typical_amount': 300, 'is_active': False},
    ])

    assert [source.rank for source in sources] == [0, 1]
    assert sources[0].is_primary
    assert sources[1].amount == 300.0
    assert not sources[1].is_active
    assert isinstance(sources[0], IncomeSource)


def test_formatting_helpers():
    assert format_currency(1234.5) == '$1,234.50'
    assert format_currency(3, include_sign=False) == '3.00'
    assert join_names(['Rent', '', 'Power']) == 'Rent, Power'


def test_balances_keep_negatives_but_drop_unreadable_values():
    assert coerce_balance('-42.5') == -42.5
    assert coerce_balance(math.nan) == 0.0
    assert coerce_balance('n/a') == 0.0
    assert coerce_balance(-math.inf) == 0.0

    envelope = Envelope.from_dict({
        'id': 'fuel',
        'name': 'Fuel',
        'current_amount': 'n/a',
        'opening_balance': math.nan,
    })
    assert envelope.current_amount == 0.0
    assert envelope.opening_balance == 0.0
