from envelope_planner.allocator import auto_calculate, set_allocations
from envelope_planner.models import Envelope, IncomeSource
from envelope_planner.validator import validate, validate_envelope


def _rent(allocated=None, target=300):
    allocations = {'main': allocated} if allocated is not None else {}
    return Envelope('rent', 'Rent', target, 'fortnightly', 'essential', 'bill', income_allocations=allocations)


def _unfunded_warnings(result):
    return [w for w in result.warnings if 'essential envelope' in w]


def test_scenario_a_has_no_warnings_after_waterfall():
    sources = [IncomeSource('main', 'Salary', 2000, 'fortnightly', rank=0)]
    envelopes = [
        Envelope('bill', 'Power', 500, 'fortnightly', 'essential', 'bill'),
        Envelope('fun', 'Fun money', 2000, 'fortnightly', 'discretionary'),
    ]

    result = validate(auto_calculate(envelopes, sources, 'fortnightly'), sources, 'fortnightly')

    assert _unfunded_warnings(result) == []
    assert result.over_allocated_sources == []
    assert result.totals.total_income == 2000.0
    assert result.totals.total_allocated == 2000.0
    assert result.totals.total_surplus == 0.0
    assert result.totals.total_unfunded == 500.0


def test_scenario_d_tolerance_on_unfunded_essentials():
    sources = [IncomeSource('main', 'Salary', 1000, rank=0)]

    short = validate([_rent(250)], sources, 'fortnightly')
    exact = validate([_rent(300)], sources, 'fortnightly')
    within_a_cent = validate([_rent(299.999)], sources, 'fortnightly')

    assert short.unfunded_essentials == ['rent']
    assert _unfunded_warnings(short) == ['1 essential envelope(s) are not fully funded: Rent']
    assert exact.unfunded_essentials == []
    assert within_a_cent.unfunded_essentials == []


def test_non_essential_shortfalls_do_not_raise_essential_warning():
    sources = [IncomeSource('main', 'Salary', 100, rank=0)]
    gym = Envelope('gym', 'Gym', 60, 'fortnightly', 'important', income_allocations={'main': 100})
    result = validate([gym, Envelope('fun', 'Fun', 500, 'fortnightly')], sources, 'fortnightly')
    assert result.unfunded_essentials == []
    assert result.totals.total_unfunded == 500.0


def test_over_allocated_source_reports_overage():
    sources = [
        IncomeSource('main', 'Salary', 1000, rank=0),
        IncomeSource('side', 'Tutoring', 100, rank=1),
    ]
    rent = set_allocations(_rent(target=150), {'side': 150})

    result = validate([rent], sources, 'fortnightly')

    assert result.over_allocated_sources == ['side']
    assert 'Tutoring is over-allocated by $50.00' in result.warnings


def test_surplus_warning_when_income_sits_idle():
    sources = [IncomeSource('main', 'Salary', 1000, rank=0)]
    envelopes = [
        _rent(300),
        Envelope('holiday', 'Holiday', 400, 'fortnightly', 'discretionary'),
    ]

    result = validate(envelopes, sources, 'fortnightly')

    surplus = [w for w in result.warnings if 'unallocated' in w]
    assert surplus == ['$700.00 of income is unallocated and could cover $400.00 of the $400.00 shortfall']
    assert result.totals.total_surplus == 700.0


def test_small_surplus_is_ignored():
    sources = [IncomeSource('main', 'Salary', 305, rank=0)]
    result = validate([_rent(300), Envelope('fun', 'Fun', 50, 'fortnightly')], sources, 'fortnightly')
    assert not any('unallocated' in w for w in result.warnings)


def test_rules_are_collected_independently():
    sources = [IncomeSource('main', 'Salary', 100, rank=0)]
    rent = _rent(allocated=200, target=500)

    result = validate([rent], sources, 'fortnightly')

    assert len(result.warnings) == 2
    assert result.unfunded_essentials == ['rent']
    assert result.over_allocated_sources == ['main']
    assert not result.is_clean


def test_empty_income_still_flags_essentials():
    result = validate([_rent()], [], 'fortnightly')
    assert result.unfunded_essentials == ['rent']
    assert result.over_allocated_sources == []
    assert result.totals.total_income == 0.0


def test_tracking_envelopes_are_ignored():
    tracking = Envelope('log', 'Coffee', 500, 'fortnightly', 'essential', 'tracking')
    result = validate([tracking], [IncomeSource('main', 'Salary', 100, rank=0)], 'fortnightly')
    assert result.is_clean
    assert result.totals.total_unfunded == 0.0


def test_validate_envelope_record_checks():
    blank_bill = Envelope('b', '  ', 0, 'monthly', subtype='bill')
    messages = {w.field: w.message for w in validate_envelope(blank_bill, 'monthly')}
    assert messages == {'name': 'Name required', 'target_amount': 'Target amount required for bills'}

    one_off = Envelope('c', 'Rates', 900, 'once', subtype='bill')
    assert [w.field for w in validate_envelope(one_off, 'monthly')] == ['due_date', 'allocation']


def test_validate_envelope_allocation_levels():
    under = validate_envelope(_rent(100), 'fortnightly')
    over = validate_envelope(_rent(350), 'fortnightly')

    assert [(w.level, w.message) for w in under] == [('warning', 'Under-allocated by $200.00')]
    assert [(w.level, w.message) for w in over] == [('info', 'Over-allocated by $50.00')]
    assert validate_envelope(_rent(300), 'fortnightly') == []


def test_allocations_to_inactive_source_are_over_allocated_and_unfunded():
    sources = [
        IncomeSource('main', 'Salary', 1000, rank=0),
        IncomeSource('old', 'Old job', 100, is_active=False, rank=1),
    ]
    rent = Envelope('rent', 'Rent', 500, 'fortnightly', 'essential', 'bill', income_allocations={'old': 500})

    result = validate([rent], sources, 'fortnightly')

    assert result.over_allocated_sources == ['old']
    assert 'Old job is over-allocated by $500.00' in result.warnings
    assert result.unfunded_essentials == ['rent']
    assert result.totals.total_unfunded == 500.0
    assert result.totals.total_allocated == 0.0
    assert result.totals.total_surplus == 1000.0


def test_allocations_to_unknown_source_are_flagged():
    sources = [IncomeSource('main', 'Salary', 1000, rank=0)]
    gym = Envelope('gym', 'Gym', 40, 'fortnightly', 'important',
                   income_allocations={'main': 20, 'retired-job': 20})

    result = validate([gym], sources, 'fortnightly')

    assert result.over_allocated_sources == ['retired-job']
    assert 'retired-job is over-allocated by $20.00' in result.warnings
    assert result.totals.total_allocated == 20.0
    assert result.totals.total_surplus == 980.0
    assert result.totals.total_unfunded == 20.0
