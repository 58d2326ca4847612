"""
Project a car's reservations onto single calendar days.

Colors come from the reservation's position in creation order, never from
the order a view happens to iterate, so re-rendering the same data always
paints the same colors. With more reservations than palette entries two
reservations share a color.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Sequence

from rentcal.models.interval import DateRange, iter_days, month_window, overlaps
from rentcal.models.reservation import Reservation
from rentcal.utils.constants import PALETTE, DayPosition, ReservationState


@dataclass(frozen=True)
class AnnotatedReservation:
    reservation: Reservation
    day_position: str
    color: str


def assign_colors(reservations: Iterable[Reservation], palette: Sequence[str] = PALETTE) -> Dict[str, str]:
    """Map reservation id -> palette entry, enumerating by creation time."""
    # sorted() is stable: equal created_at keeps the caller's order
    ordered = sorted(reservations, key=lambda r: r.created_at)
    return {r.id: palette[i % len(palette)] for i, r in enumerate(ordered)}


def day_position(r: Reservation, day: date) -> str:
    if r.start == r.end:
        return DayPosition.SINGLE
    if day == r.start:
        return DayPosition.FIRST
    if day == r.end:
        return DayPosition.LAST
    return DayPosition.MIDDLE


def _visible(reservations: Iterable[Reservation], include_cancelled: bool) -> List[Reservation]:
    if include_cancelled:
        return list(reservations)
    return [r for r in reservations if r.state != ReservationState.CANCELLED]


def project(
        day: date,
        reservations: Sequence[Reservation],
        *,
        include_cancelled: bool = False,
        palette: Sequence[str] = PALETTE,
) -> List[AnnotatedReservation]:
    """
    Reservations touching ``day``, in input order, each with its day position
    and color. Several entries for one day only happen when the data already
    holds overlapping records; nothing is filtered beyond cancelled ones.
    """
    colors = assign_colors(reservations, palette)
    target = DateRange.single(day)
    return [
        AnnotatedReservation(r, day_position(r, day), colors[r.id])
        for r in _visible(reservations, include_cancelled)
        if overlaps(target, r.range)
    ]


def booked_days(
        year: int,
        month: int,
        reservations: Sequence[Reservation],
        *,
        include_cancelled: bool = False,
) -> List[date]:
    """Days of the month that carry at least one reservation."""
    window = month_window(year, month)
    visible = [r for r in _visible(reservations, include_cancelled) if overlaps(window, r.range)]
    return [
        day for day in iter_days(window)
        if any(overlaps(DateRange.single(day), r.range) for r in visible)
    ]
