"""Month legend / list view: each reservation clipped to the month."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Sequence

from rentcal.models.interval import clip, length_in_days, month_window, overlaps
from rentcal.models.reservation import Reservation
from rentcal.services.projector import assign_colors
from rentcal.utils.constants import PALETTE, ReservationState


@dataclass(frozen=True)
class MonthSummary:
    reservation: Reservation
    visible_start: date
    visible_end: date
    # length of the whole reservation, not of the visible part
    total_days: int
    color: str


def summarize(
        year: int,
        month: int,
        reservations: Sequence[Reservation],
        *,
        include_cancelled: bool = False,
        palette: Sequence[str] = PALETTE,
) -> List[MonthSummary]:
    """Reservations overlapping the month, in input order."""
    window = month_window(year, month)
    colors = assign_colors(reservations, palette)
    out = []
    for r in reservations:
        if r.state == ReservationState.CANCELLED and not include_cancelled:
            continue
        if not overlaps(r.range, window):
            continue
        visible = clip(r.range, window.start, window.end)
        out.append(MonthSummary(
            reservation=r,
            visible_start=visible.start,
            visible_end=visible.end,
            total_days=length_in_days(r.range),
            color=colors[r.id],
        ))
    return out
