"""
Conflict validation for new reservation requests. Ensures that a request for a
car within a window overlapping an existing active reservation is rejected,
and that the other checks run in order with their own reason.
"""
from datetime import timedelta

import pytest

from rentcal.config import BookingPolicy
from rentcal.services.validator import validate
from rentcal.utils.constants import RejectReason


@pytest.fixture
def existing(make_res):
    return [make_res("r1", "2024-06-01", "2024-06-05")]


def test_overlapping_request_conflicts(existing, today):
    result = validate("2024-06-03", "2024-06-10", existing, today=today)
    assert not result
    assert result.reason == RejectReason.CONFLICT
    assert [r.id for r in result.conflicts] == ["r1"]


def test_request_starting_day_after_is_accepted(existing, today):
    result = validate("2024-06-06", "2024-06-08", existing, today=today)
    assert result.ok, result.message
    assert result.reason is None


def test_request_ending_on_existing_start_day_conflicts(existing, today):
    result = validate("2024-05-28", "2024-06-01", existing, today=today)
    assert result.reason == RejectReason.CONFLICT


def test_cancelled_and_completed_reservations_do_not_block(make_res, today):
    existing = [
        make_res("r1", "2024-06-01", "2024-06-05", state="cancelled"),
        make_res("r2", "2024-06-01", "2024-06-05", state="completed"),
    ]
    assert validate("2024-06-03", "2024-06-10", existing, today=today).ok


def test_exclude_id_skips_the_reservation_being_moved(existing, today):
    assert validate("2024-06-02", "2024-06-04", existing, today=today, exclude_id="r1").ok


@pytest.mark.parametrize("start,end", [
    (None, "2024-06-10"),
    ("", "2024-06-10"),
    ("2024-06-10", "2024-06-01"),
    ("garbage", "2024-06-10"),
    ("2024-06-10", "2024-13-40"),
])
def test_malformed_range(start, end, today):
    assert validate(start, end, [], today=today).reason == RejectReason.INVALID_RANGE


def test_missing_end_is_a_single_day(today):
    result = validate("2024-06-01", None, [], today=today)
    assert result.ok
    assert result.candidate.start == result.candidate.end


def test_past_start_rejected(today):
    yesterday = today - timedelta(days=1)
    assert validate(yesterday, today, [], today=today).reason == RejectReason.IN_PAST
    assert validate(today, today, [], today=today).ok


def test_horizon_limit(today):
    last_ok = today + timedelta(days=180)
    assert validate(last_ok, last_ok, [], today=today).ok
    too_far = last_ok + timedelta(days=1)
    assert validate(too_far, too_far, [], today=today).reason == RejectReason.TOO_FAR_FUTURE


def test_duration_limit(today):
    assert validate("2024-06-01", "2024-07-01", [], today=today).ok  # 30 days
    assert validate("2024-06-01", "2024-07-02", [], today=today).reason == RejectReason.TOO_LONG


def test_first_failure_wins(existing, today):
    # both in the past and overlapping nothing relevant: in_past reported
    assert validate("2024-05-01", "2024-06-03", existing, today=today).reason == RejectReason.IN_PAST
    # too long and conflicting: too_long comes first
    assert validate("2024-06-01", "2024-07-15", existing, today=today).reason == RejectReason.TOO_LONG


def test_custom_policy(today):
    policy = BookingPolicy(max_horizon_days=10, max_duration_days=3)
    assert validate("2024-06-01", "2024-06-02", [], today=today, policy=policy).reason == RejectReason.TOO_FAR_FUTURE
    assert validate("2024-05-21", "2024-05-25", [], today=today, policy=policy).reason == RejectReason.TOO_LONG


def test_inputs_are_not_mutated(existing, today):
    before = list(existing)
    validate("2024-06-03", "2024-06-10", existing, today=today)
    assert existing == before
