"""Life-cycle status of reservations relative to a given day."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List

from rentcal.models.interval import overlaps
from rentcal.models.reservation import Reservation, archive, restore
from rentcal.utils.constants import Bucket, Label, ReservationState


@dataclass(frozen=True)
class Classification:
    bucket: str
    label: str


@dataclass(frozen=True)
class Partition:
    active: List[Reservation]
    archived: List[Reservation]


def bucket_for(r: Reservation, today: date) -> str:
    if today < r.start:
        return Bucket.UPCOMING
    if today <= r.end:
        return Bucket.CURRENT
    return Bucket.PAST


def classify(r: Reservation, today: date) -> Classification:
    """
    Combine the clock-derived bucket with the stored state.
    - cancelled wins over everything
    - completed, or past the end date -> completed
    - otherwise the bucket (upcoming / current)
    """
    bucket = bucket_for(r, today)
    if r.state == ReservationState.CANCELLED:
        label = Label.CANCELLED
    elif r.state == ReservationState.COMPLETED or bucket == Bucket.PAST:
        label = Label.COMPLETED
    else:
        label = bucket
    return Classification(bucket, label)


def is_active_for_dashboard(r: Reservation, today: date) -> bool:
    return r.state == ReservationState.ACTIVE and r.end >= today


def _most_recent_first(items: List[Reservation]) -> List[Reservation]:
    return sorted(items, key=lambda r: (r.start, r.created_at), reverse=True)


def partition(reservations: Iterable[Reservation], today: date) -> Partition:
    """Split into active / archived dashboard lists, newest start first."""
    active, archived = [], []
    for r in reservations:
        (active if is_active_for_dashboard(r, today) else archived).append(r)
    return Partition(_most_recent_first(active), _most_recent_first(archived))


def reconcile_states(reservations: Iterable[Reservation], today: date) -> List[Reservation]:
    """
    Return updated copies of the reservations whose stored flag lags the clock:
      - active but already ended       -> completed
      - completed but covering today   -> active (dates were moved by an operator)
    Unchanged reservations are not returned.

    A completed reservation stays completed while its dates overlap another
    active reservation of the same car, counting the ones re-activated
    earlier in the same pass.
    """
    reservations = list(reservations)
    changed = []
    active = []
    for r in reservations:
        if r.state == ReservationState.ACTIVE and r.end < today:
            changed.append(archive(r))
        elif r.state == ReservationState.ACTIVE:
            active.append(r)

    for r in reservations:
        if r.state != ReservationState.COMPLETED or not (r.start <= today <= r.end):
            continue
        if any(o.resource_id == r.resource_id and o.id != r.id and overlaps(o.range, r.range)
               for o in active):
            continue
        back = restore(r)
        active.append(back)
        changed.append(back)
    return changed


def expiring_soon(
        reservations: Iterable[Reservation],
        today: date,
        days_before: int = 1,
        include_expired: bool = False,
) -> List[Reservation]:
    """Active reservations whose end date is within ``days_before`` days."""
    horizon = today + timedelta(days=days_before)
    out = []
    for r in reservations:
        if r.state != ReservationState.ACTIVE:
            continue
        if today <= r.end <= horizon:
            out.append(r)
        elif include_expired and r.end < today:
            out.append(r)
    return out


def can_restore(r: Reservation, today: date) -> bool:
    """An archived reservation may come back only while it has not ended."""
    return r.end >= today
