from datetime import datetime, timedelta

from hypothesis import given
from hypothesis import strategies as st

from tracker_sla.sla.business_hours import add_business_hours
from tracker_sla.sla.sla_calculation import (
    SLAStatus,
    check_sla_status,
    classify_percentage,
    get_expected_sla_hours,
)
from tracker_sla.utils.config import DEFAULT_SLA_HOURS, SLA_HOURS_BY_PRIORITY

START = datetime(2024, 1, 15, 9, 0)

_ORDER = {SLAStatus.ON_TIME: 0, SLAStatus.AT_RISK: 1, SLAStatus.OVERDUE: 2}


def test_on_time_below_eighty_percent():
    result = check_sla_status(START, 8, datetime(2024, 1, 15, 12, 0))
    assert result.status is SLAStatus.ON_TIME
    assert result.percentage_used == 38


def test_at_risk_between_eighty_and_hundred():
    result = check_sla_status(START, 16, datetime(2024, 1, 16, 14, 0))
    assert result.status is SLAStatus.AT_RISK
    assert result.elapsed_minutes == 840
    assert result.percentage_used == 88


def test_overdue_past_allotment():
    result = check_sla_status(START, 8, datetime(2024, 1, 17, 10, 0))
    assert result.status is SLAStatus.OVERDUE
    assert result.percentage_used == 100


def test_exactly_eighty_percent_is_at_risk():
    current = add_business_hours(START, 8)
    result = check_sla_status(START, 10, current)
    assert result.status is SLAStatus.AT_RISK
    assert result.percentage_used == 80


def test_exactly_hundred_percent_is_overdue():
    current = add_business_hours(START, 8)
    result = check_sla_status(START, 8, current)
    assert result.status is SLAStatus.OVERDUE
    assert result.percentage_used == 100
    assert result.remaining_minutes == 0


def test_zero_elapsed_is_on_time():
    result = check_sla_status(START, 8, START)
    assert result.status is SLAStatus.ON_TIME
    assert result.percentage_used == 0
    assert result.remaining_minutes == 480


def test_remaining_minutes_when_on_time():
    result = check_sla_status(START, 8, datetime(2024, 1, 15, 12, 0))
    assert result.elapsed_minutes == 180
    assert result.remaining_minutes == 300


def test_remaining_minutes_negative_when_overdue():
    result = check_sla_status(START, 8, datetime(2024, 1, 16, 12, 0))
    assert result.remaining_minutes == -240


def test_percentage_is_rounded():
    result = check_sla_status(START, 8, datetime(2024, 1, 15, 9, 30))
    assert result.percentage_used == 6


def test_percentage_rounds_half_up():
    # 12 of 480 minutes is exactly 2.5%.
    result = check_sla_status(START, 8, datetime(2024, 1, 15, 9, 12))
    assert result.percentage_used == 3


def test_percentage_is_capped_at_hundred():
    result = check_sla_status(START, 8, datetime(2024, 1, 20, 9, 0))
    assert result.elapsed_minutes == 2700
    assert result.percentage_used == 100


def test_zero_hour_sla_with_nothing_elapsed_is_on_time():
    result = check_sla_status(START, 0, START)
    assert result.status is SLAStatus.ON_TIME
    assert result.percentage_used == 0
    assert result.remaining_minutes == 0


def test_zero_hour_sla_with_time_elapsed_is_overdue():
    result = check_sla_status(START, 0, datetime(2024, 1, 15, 10, 0))
    assert result.status is SLAStatus.OVERDUE
    assert result.percentage_used == 100
    assert result.remaining_minutes == -60


def test_current_before_start():
    result = check_sla_status(START, 8, datetime(2024, 1, 15, 8, 0))
    assert result.elapsed_minutes == 0
    assert result.status is SLAStatus.ON_TIME


def test_current_defaults_to_now():
    result = check_sla_status(datetime.now() + timedelta(days=30), 8)
    assert result.elapsed_minutes == 0
    assert result.status is SLAStatus.ON_TIME


def test_to_dict_payload():
    result = check_sla_status(START, 8, datetime(2024, 1, 15, 12, 0))
    assert result.to_dict() == {
        "status": "on-time",
        "elapsedMinutes": 180,
        "remainingMinutes": 300,
        "percentageUsed": 38,
    }


def test_classify_percentage_thresholds():
    assert classify_percentage(79.99) is SLAStatus.ON_TIME
    assert classify_percentage(80) is SLAStatus.AT_RISK
    assert classify_percentage(99.99) is SLAStatus.AT_RISK
    assert classify_percentage(100) is SLAStatus.OVERDUE
    assert classify_percentage(float("nan")) is SLAStatus.ON_TIME


def test_expected_sla_hours_by_priority():
    assert get_expected_sla_hours("HIGH") == SLA_HOURS_BY_PRIORITY["HIGH"]
    assert get_expected_sla_hours("urgent") == SLA_HOURS_BY_PRIORITY["URGENT"]
    assert get_expected_sla_hours("UNKNOWN") == DEFAULT_SLA_HOURS
    assert get_expected_sla_hours(None) == DEFAULT_SLA_HOURS


instants = st.datetimes(min_value=datetime(2024, 1, 1), max_value=datetime(2024, 12, 31))


@given(instants, st.integers(min_value=1, max_value=500), instants)
def test_remaining_is_allotment_minus_elapsed(start, sla_hours, current):
    result = check_sla_status(start, sla_hours, current)
    assert result.remaining_minutes == sla_hours * 60 - result.elapsed_minutes
    assert 0 <= result.percentage_used <= 100


@given(instants, st.integers(min_value=1, max_value=100), instants, instants)
def test_status_only_moves_forward(start, sla_hours, current_a, current_b):
    earlier, later = sorted([current_a, current_b])
    first = check_sla_status(start, sla_hours, earlier)
    second = check_sla_status(start, sla_hours, later)
    assert first.elapsed_minutes <= second.elapsed_minutes
    assert _ORDER[first.status] <= _ORDER[second.status]
