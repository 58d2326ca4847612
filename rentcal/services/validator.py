"""
Conflict validation for new reservation requests.

Rejections are returned as data, never raised, so the caller decides how to
present them. Nothing here reads the clock or the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from rentcal.config import DEFAULT_POLICY, BookingPolicy
from rentcal.models.interval import DateRange, as_date, length_in_days, overlaps
from rentcal.models.reservation import Reservation
from rentcal.utils.constants import RejectReason, ReservationState

REJECTION_MESSAGES = {
    RejectReason.INVALID_RANGE: "Invalid dates: start must be set and not after end",
    RejectReason.IN_PAST: "Start date cannot be in the past",
    RejectReason.TOO_FAR_FUTURE: "Start date is too far in the future",
    RejectReason.TOO_LONG: "Reservation is longer than allowed",
    RejectReason.CONFLICT: "Date conflict with existing reservation",
}


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[str] = None
    message: str = "OK"
    candidate: Optional[DateRange] = None
    conflicts: tuple = ()

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def accept(cls, candidate: DateRange) -> "ValidationResult":
        return cls(True, candidate=candidate)

    @classmethod
    def reject(cls, reason: str, message: Optional[str] = None, candidate=None,
               conflicts: tuple = ()) -> "ValidationResult":
        return cls(False, reason, message or REJECTION_MESSAGES[reason], candidate, conflicts)


def _parse_candidate(start, end) -> Optional[DateRange]:
    """Parse the requested bounds; None when they do not form a valid range."""
    if start is None or start == "":
        return None
    try:
        d1 = as_date(start)
        d2 = as_date(end) if end not in (None, "") else d1
    except (TypeError, ValueError):
        return None
    if d1 > d2:
        return None
    return DateRange(d1, d2)


def validate(
        start,
        end,
        existing: Iterable[Reservation],
        *,
        today: date,
        policy: Optional[BookingPolicy] = None,
        exclude_id: Optional[str] = None,
) -> ValidationResult:
    """
    Accept or reject a requested [start, end] for one car.

    Checks run in order and the first failure wins:
      invalid_range -> in_past -> too_far_future -> too_long -> conflict
    Only ``active`` reservations in ``existing`` can conflict. ``exclude_id``
    skips the reservation being rescheduled.
    """
    policy = policy or DEFAULT_POLICY

    candidate = _parse_candidate(start, end)
    if candidate is None:
        return ValidationResult.reject(RejectReason.INVALID_RANGE)

    if candidate.start < today:
        return ValidationResult.reject(RejectReason.IN_PAST, candidate=candidate)

    if candidate.start > today + timedelta(days=policy.max_horizon_days):
        return ValidationResult.reject(
            RejectReason.TOO_FAR_FUTURE,
            f"Start date must be within {policy.max_horizon_days} days from today",
            candidate,
        )

    if length_in_days(candidate) > policy.max_duration_days:
        return ValidationResult.reject(
            RejectReason.TOO_LONG,
            f"Reservation cannot be longer than {policy.max_duration_days} days",
            candidate,
        )

    conflicts = tuple(
        r for r in existing
        if r.state == ReservationState.ACTIVE
        and r.id != exclude_id
        and overlaps(candidate, r.range)
    )
    if conflicts:
        return ValidationResult.reject(RejectReason.CONFLICT, candidate=candidate, conflicts=conflicts)

    return ValidationResult.accept(candidate)


def validate_range(candidate: DateRange, existing: Iterable[Reservation], **kwargs) -> ValidationResult:
    """Same as validate() for callers already holding a DateRange."""
    return validate(candidate.start, candidate.end, existing, **kwargs)
