"""Booking workflow: run the engine first, persist only what it accepts."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional

from rentcal.config import DEFAULT_POLICY, BookingPolicy
from rentcal.exceptions import ReservationStateError
from rentcal.models.interval import DateRange, overlaps
from rentcal.models.reservation import Reservation, archive, cancel, restore, with_range
from rentcal.models.store import Store
from rentcal.services import month_summary, projector, status
from rentcal.services.pricing import format_invoice_id, price, round2, split_total
from rentcal.services.validator import ValidationResult, validate
from rentcal.utils.constants import ReservationState
from rentcal.utils.filters import fmt_span

log = logging.getLogger(__name__)


def reservation_row(r: Reservation, today: date) -> dict:
    """Flatten a reservation plus its status for list views."""
    c = status.classify(r, today)
    return {
        "reservation_id": r.id,
        "car_id": r.resource_id,
        "owner_id": r.owner_id,
        "start_date": r.start.isoformat(),
        "end_date": r.end.isoformat(),
        "status": r.state,
        "bucket": c.bucket,
        "label": c.label,
        "price": r.price,
        "created_at": r.created_at.isoformat(timespec="seconds"),
    }


class BookingService:
    """
    Book, reschedule, cancel, archive/restore, dashboards, calendars and
    invoices for one Store. The clock and policy are injected.
    """

    def __init__(self, store: Store, clock, policy: Optional[BookingPolicy] = None):
        self.store = store
        self.clock = clock
        self.policy = policy or DEFAULT_POLICY

    def today(self) -> date:
        return self.clock.today()

    # -------- writes --------
    def book(self, owner_id: str, car_id: str, start, end=None):
        """
        Create a reservation if the engine accepts the dates.

        Returns:
            (result: ValidationResult, reservation: Optional[Reservation])
        """
        rate = self.store.daily_rate(car_id)
        today = self.today()

        # validate and commit under one lock so two requests can't both pass
        with self.store.write_lock():
            existing = self.store.list_reservations_for_resource(car_id)
            result = validate(start, end, existing, today=today, policy=self.policy)
            if not result.ok:
                log.info("Booking rejected for car %s (%s): %s", car_id, result.reason, result.message)
                return result, None

            breakdown = price(result.candidate, rate, self.policy.tax_rate)
            reservation = Reservation(
                id=str(uuid.uuid4()),
                resource_id=str(car_id),
                owner_id=str(owner_id),
                range=result.candidate,
                price=breakdown.total,
                tax=breakdown.tax,
            )
            self.store.commit_reservation(reservation)

        log.info("Booked car %s for %s as %s", car_id, result.candidate, reservation.id)
        return result, reservation

    def reschedule(self, reservation_id: str, start, end=None):
        """Move an active reservation to new dates; the price is recomputed."""
        today = self.today()
        with self.store.write_lock():
            current = self.store.get_reservation(reservation_id)
            if current.state != ReservationState.ACTIVE:
                raise ReservationStateError("Only active reservations can be rescheduled")
            existing = self.store.list_reservations_for_resource(current.resource_id)
            result = validate(start, end, existing, today=today, policy=self.policy,
                              exclude_id=current.id)
            if not result.ok:
                return result, None

            rate = self.store.daily_rate(current.resource_id)
            breakdown = price(result.candidate, rate, self.policy.tax_rate)
            moved = with_range(current, result.candidate, breakdown.total, breakdown.tax)
            self.store.commit_reservation(moved)
        return result, moved

    def cancel(self, reservation_id: str, requester_id: str, is_staff: bool = False) -> Reservation:
        """
        Cancel a reservation.
        - Only owner or staff can cancel
        - Only 'active' reservations
        """
        with self.store.write_lock():
            r = self.store.get_reservation(reservation_id)
            if r.owner_id != str(requester_id) and not is_staff:
                raise PermissionError("Not allowed to cancel this reservation")
            if r.state != ReservationState.ACTIVE:
                raise ReservationStateError("Only active reservations can be cancelled")
            updated = cancel(r)
            self.store.commit_reservation(updated)
        log.info("Reservation %s cancelled by %s", r.id, requester_id)
        return updated

    def archive(self, reservation_id: str) -> Reservation:
        with self.store.write_lock():
            r = self.store.get_reservation(reservation_id)
            if r.state == ReservationState.CANCELLED:
                raise ReservationStateError("Cancelled reservations cannot be archived")
            updated = archive(r)
            self.store.commit_reservation(updated)
        return updated

    def restore(self, reservation_id: str) -> Reservation:
        """Bring a completed reservation back to active while it has not ended."""
        today = self.today()
        with self.store.write_lock():
            r = self.store.get_reservation(reservation_id)
            if r.state != ReservationState.COMPLETED:
                raise ReservationStateError("Only completed reservations can be restored")
            if not status.can_restore(r, today):
                raise ReservationStateError("Reservation has already ended")
            others = self.store.list_reservations_for_resource(r.resource_id)
            if any(o.is_active and o.id != r.id and overlaps(o.range, r.range) for o in others):
                raise ReservationStateError("Dates are now taken by another reservation")
            updated = restore(r)
            self.store.commit_reservation(updated)
        return updated

    def refresh_states(self) -> int:
        """Persist state flags that lag the clock; returns how many changed."""
        today = self.today()
        with self.store.write_lock():
            changed = status.reconcile_states(self.store.all_reservations(), today)
            for r in changed:
                self.store.set_state(r.id, r.state)
        if changed:
            log.info("Refreshed %d reservation states", len(changed))
        return len(changed)

    # -------- reads --------
    def dashboard(self, owner_id: str) -> dict:
        """Active and archived lists for one user, newest start first."""
        today = self.today()
        parts = status.partition(self.store.list_reservations_for_owner(owner_id), today)
        return {
            "active": [reservation_row(r, today) for r in parts.active],
            "archived": [reservation_row(r, today) for r in parts.archived],
        }

    def expiring(self, owner_id: str, days_before: int = 1) -> list:
        today = self.today()
        soon = status.expiring_soon(self.store.list_reservations_for_owner(owner_id), today, days_before)
        return [reservation_row(r, today) for r in soon]

    def calendar_day(self, car_id: str, day: date, include_cancelled: bool = False) -> list:
        self.store.get_car(car_id)
        items = projector.project(day, self.store.list_reservations_for_resource(car_id),
                                  include_cancelled=include_cancelled)
        return [
            {
                "reservation_id": a.reservation.id,
                "start_date": a.reservation.start.isoformat(),
                "end_date": a.reservation.end.isoformat(),
                "owner_id": a.reservation.owner_id,
                "day_position": a.day_position,
                "color": a.color,
                "label": fmt_span(a.reservation.start, a.reservation.end),
            }
            for a in items
        ]

    def calendar_month(self, car_id: str, year: int, month: int, include_cancelled: bool = False) -> dict:
        self.store.get_car(car_id)
        reservations = self.store.list_reservations_for_resource(car_id)
        legend = month_summary.summarize(year, month, reservations, include_cancelled=include_cancelled)
        days = projector.booked_days(year, month, reservations, include_cancelled=include_cancelled)
        return {
            "car_id": str(car_id),
            "month": f"{year:04d}-{month:02d}",
            "booked_days": [d.isoformat() for d in days],
            "legend": [
                {
                    "reservation_id": s.reservation.id,
                    "visible_start": s.visible_start.isoformat(),
                    "visible_end": s.visible_end.isoformat(),
                    "total_days": s.total_days,
                    "color": s.color,
                    "label": fmt_span(s.reservation.start, s.reservation.end),
                }
                for s in legend
            ],
        }

    def quote(self, car_id: str, start, end=None):
        """Price a prospective rental without booking it."""
        return price(DateRange.parse(start, end), self.store.daily_rate(car_id), self.policy.tax_rate)

    def invoice(self, reservation_id: str) -> dict:
        r = self.store.get_reservation(reservation_id)
        car = self.store.get_car(r.resource_id)
        # the stored total is authoritative; later rate changes don't reprice
        breakdown = split_total(r.range, r.price, self.policy.tax_rate, tax=r.tax)
        return {
            "invoice_id": format_invoice_id(r.id),
            "reservation_id": r.id,
            "car": f"{car.get('brand', '')} {car.get('model', '')}".strip(),
            "start_date": r.start.isoformat(),
            "end_date": r.end.isoformat(),
            "days": breakdown.days,
            "daily_rate": round2(breakdown.subtotal / breakdown.days),
            "subtotal": breakdown.subtotal,
            "tax": breakdown.tax,
            "total": breakdown.total,
            "status": r.state,
        }


__all__ = ["BookingService", "ValidationResult", "reservation_row"]
