import pytest

from envelope_planner.frequency import annualize, cadence_days, cycles_per_year, normalize, short_label
from envelope_planner.models import Envelope, Frequency
from envelope_planner.requirements import annual_amount, required_per_pay


def test_cycles_per_year_known_frequencies():
    assert cycles_per_year('weekly') == 52
    assert cycles_per_year('fortnightly') == 26
    assert cycles_per_year('twice_monthly') == 24
    assert cycles_per_year('monthly') == 12
    assert cycles_per_year('quarterly') == 4
    assert cycles_per_year('annually') == 1
    assert cycles_per_year('annual') == 1


def test_unknown_frequency_defaults_to_monthly():
    assert cycles_per_year('every full moon') == 12
    assert cycles_per_year(None) == 12
    assert normalize(100, 'mystery', 'monthly') == 100.0


def test_normalize_monthly_bill_to_fortnightly_pay():
    assert normalize(200, 'monthly', 'fortnightly') == 92.31


def test_normalize_weekly_income_to_fortnightly():
    assert normalize(1000, Frequency.WEEKLY, Frequency.FORTNIGHTLY) == 2000.0


def test_normalize_clamps_bad_amounts():
    assert normalize(-50, 'monthly', 'weekly') == 0.0
    assert normalize(float('nan'), 'monthly', 'weekly') == 0.0
    assert normalize(None, 'monthly', 'weekly') == 0.0


@pytest.mark.parametrize('amount', [0.0, 1.0, 99.99, 1234.56, 87000.0])
def test_normalize_round_trip_through_annual(amount):
    yearly = normalize(amount, 'monthly', 'annually')
    assert normalize(yearly, 'annually', 'monthly') == pytest.approx(amount, abs=0.01)


def test_annualize_and_labels():
    assert annualize(50, 'weekly') == 2600.0
    assert short_label('fortnightly') == 'F/N'
    assert cadence_days('fortnightly') == 14.0
    assert cadence_days('weekly') == 7.0


def test_required_per_pay_normalizes_target():
    envelope = Envelope('ins', 'Car insurance', 1000, 'annually', 'essential', 'bill')
    assert required_per_pay(envelope, 'fortnightly') == 38.46
    assert annual_amount(envelope) == 1000.0


def test_required_per_pay_is_zero_for_tracking_and_empty_targets():
    tracking = Envelope('t', 'Coffee log', 30, 'weekly', subtype='tracking')
    tracking_only = Envelope('u', 'Uber', 30, 'weekly', is_tracking_only=True)
    no_target = Envelope('v', 'Misc', 0, 'weekly')

    assert required_per_pay(tracking, 'weekly') == 0.0
    assert required_per_pay(tracking_only, 'weekly') == 0.0
    assert required_per_pay(no_target, 'weekly') == 0.0
