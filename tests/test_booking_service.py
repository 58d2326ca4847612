"""
Booking workflow against a real (temp-file) Store: validate first, persist
only accepted reservations, and keep state changes explicit.
"""
from datetime import timedelta
from itertools import combinations

import pytest

from rentcal.exceptions import CarNotFoundError, ReservationNotFoundError, ReservationStateError
from rentcal.models.interval import overlaps
from rentcal.models.store import Store
from rentcal.utils.clock import FixedClock


def test_book_persists_priced_reservation(service, store):
    result, r = service.book("u1", "car-1", "2024-06-01", "2024-06-04")
    assert result.ok, result.message
    assert r.price == 172.5
    assert store.list_reservations_for_resource("car-1") == [r]

    # survives a reload from disk
    reloaded = Store(store.path)
    assert reloaded.get_reservation(r.id) == r


def test_conflicting_booking_is_not_persisted(service, store):
    service.book("u1", "car-1", "2024-06-01", "2024-06-05")
    result, r = service.book("u2", "car-1", "2024-06-03", "2024-06-10")
    assert r is None
    assert result.reason == "conflict"
    assert len(store.list_reservations_for_resource("car-1")) == 1


def test_same_dates_on_other_car_are_fine(service):
    service.book("u1", "car-1", "2024-06-01", "2024-06-05")
    result, _ = service.book("u2", "car-2", "2024-06-01", "2024-06-05")
    assert result.ok


def test_unknown_car(service):
    with pytest.raises(CarNotFoundError):
        service.book("u1", "nope", "2024-06-01", "2024-06-02")


def test_cancel_frees_dates(service):
    _, r = service.book("u1", "car-1", "2024-06-01", "2024-06-05")
    cancelled = service.cancel(r.id, requester_id="u1")
    assert cancelled.state == "cancelled"
    result, _ = service.book("u2", "car-1", "2024-06-03", "2024-06-10")
    assert result.ok


def test_cancel_guards(service):
    _, r = service.book("u1", "car-1", "2024-06-01", "2024-06-05")
    with pytest.raises(PermissionError):
        service.cancel(r.id, requester_id="someone-else")
    service.cancel(r.id, requester_id="staff-1", is_staff=True)
    with pytest.raises(ReservationStateError):
        service.cancel(r.id, requester_id="u1")
    with pytest.raises(ReservationNotFoundError):
        service.cancel("missing", requester_id="u1")


def test_reschedule_ignores_own_dates(service):
    _, r = service.book("u1", "car-1", "2024-06-01", "2024-06-05")
    result, moved = service.reschedule(r.id, "2024-06-03", "2024-06-06")
    assert result.ok
    assert moved.id == r.id
    assert moved.start.isoformat() == "2024-06-03"
    assert moved.price == 172.5


def test_cancel_keeps_rescheduled_dates(service, store):
    _, r = service.book("u1", "car-1", "2024-06-01", "2024-06-05")
    service.reschedule(r.id, "2024-06-10", "2024-06-12")
    service.cancel(r.id, requester_id="u1")
    stored = store.get_reservation(r.id)
    assert (stored.state, stored.start.isoformat(), stored.price) == ("cancelled", "2024-06-10", 115.0)


def test_archive_and_restore(service, store):
    _, r = service.book("u1", "car-1", "2024-06-01", "2024-06-05")
    assert service.archive(r.id).state == "completed"
    # archived dates no longer block
    result, other = service.book("u2", "car-1", "2024-06-02", "2024-06-03")
    assert result.ok
    with pytest.raises(ReservationStateError):
        service.restore(r.id)
    service.cancel(other.id, requester_id="u2")
    assert service.restore(r.id).state == "active"


def test_refresh_states_completes_ended_reservations(store, clock):
    from rentcal.services.booking_service import BookingService

    svc = BookingService(store, clock)
    _, r = svc.book("u1", "car-1", "2024-05-20", "2024-05-22")
    later = BookingService(store, FixedClock(r.end.replace(day=25)))
    assert later.refresh_states() == 1
    assert store.get_reservation(r.id).state == "completed"
    assert later.refresh_states() == 0


def test_refresh_states_does_not_revive_over_a_new_booking(service, store, today):
    start = today.isoformat()
    _, a = service.book("u1", "car-1", start, (today + timedelta(days=3)).isoformat())
    service.archive(a.id)
    result, b = service.book("u2", "car-1", start, (today + timedelta(days=2)).isoformat())
    assert result.ok

    service.refresh_states()

    assert store.get_reservation(a.id).state == "completed"
    active = [r for r in store.list_reservations_for_resource("car-1") if r.is_active]
    assert [r.id for r in active] == [b.id]
    assert not any(overlaps(x.range, y.range) for x, y in combinations(active, 2))


def test_dashboard_rows(service):
    _, a = service.book("u1", "car-1", "2024-06-01", "2024-06-02")
    _, b = service.book("u1", "car-2", "2024-06-10", "2024-06-12")
    _, c = service.book("u1", "car-1", "2024-06-20", "2024-06-21")
    service.cancel(c.id, requester_id="u1")

    dash = service.dashboard("u1")
    assert [row["reservation_id"] for row in dash["active"]] == [b.id, a.id]
    assert [row["label"] for row in dash["archived"]] == ["cancelled"]


def test_calendar_month_and_invoice(service, store):
    _, r = service.book("u1", "car-1", "2024-05-30", "2024-06-02")
    month = service.calendar_month("car-1", 2024, 6)
    assert month["booked_days"] == ["2024-06-01", "2024-06-02"]
    [entry] = month["legend"]
    assert entry["total_days"] == 3
    assert entry["label"] == "May 30 - Jun 2"

    # later rate changes don't reprice an existing reservation
    store.cars["car-1"]["daily_rate"] = 999.0
    inv = service.invoice(r.id)
    assert (inv["days"], inv["subtotal"], inv["tax"], inv["total"]) == (3, 150.0, 22.5, 172.5)
    assert inv["invoice_id"] == r.id.upper()


def test_invoice_of_flat_charge_has_no_tax(service, store):
    # the rate overflows over three days, so the booking is a flat charge
    store.create_car({"car_id": "car-3", "brand": "Ford", "model": "Ranger", "daily_rate": 1e308})
    _, r = service.book("u1", "car-3", "2024-06-01", "2024-06-04")
    assert (r.price, r.tax) == (1e308, 0.0)

    inv = service.invoice(r.id)
    assert (inv["subtotal"], inv["tax"], inv["total"]) == (1e308, 0.0, 1e308)


def test_invoice_of_row_without_stored_tax(service, store):
    _, r = service.book("u1", "car-1", "2024-06-01", "2024-06-04")
    store.reservations[r.id].pop("tax")
    inv = service.invoice(r.id)
    assert (inv["subtotal"], inv["tax"], inv["total"]) == (150.0, 22.5, 172.5)
