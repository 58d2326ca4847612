from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from rentcal.models.interval import DateRange, as_date
from rentcal.utils.constants import ReservationState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Reservation:
    """
    A claim on one car for a closed range of days.

    The Store keeps raw dicts; services work on these immutable values and
    hand back new ones through the update helpers below.
    """
    id: str
    resource_id: str
    owner_id: str
    range: DateRange
    state: str = ReservationState.ACTIVE
    price: float = 0.0
    created_at: datetime = field(default_factory=_utcnow)
    # tax share of price; None on rows written before it was stored
    tax: Optional[float] = None

    def __post_init__(self):
        if self.state not in ReservationState.ALL:
            raise ValueError(f"Unknown reservation state: {self.state!r}")
        if self.price < 0:
            raise ValueError(f"Reservation price must be >= 0, got {self.price!r}")

    @property
    def start(self):
        return self.range.start

    @property
    def end(self):
        return self.range.end

    @property
    def is_active(self) -> bool:
        return self.state == ReservationState.ACTIVE


# -------- typed updates (always return a new value) --------
def with_state(r: Reservation, state: str) -> Reservation:
    return replace(r, state=state)


def cancel(r: Reservation) -> Reservation:
    return with_state(r, ReservationState.CANCELLED)


def archive(r: Reservation) -> Reservation:
    return with_state(r, ReservationState.COMPLETED)


def restore(r: Reservation) -> Reservation:
    return with_state(r, ReservationState.ACTIVE)


def with_range(r: Reservation, new_range: DateRange, price: Optional[float] = None,
               tax: Optional[float] = None) -> Reservation:
    """Move to new dates, repricing when a new total is given."""
    if price is None:
        return replace(r, range=new_range)
    return replace(r, range=new_range, price=price, tax=tax)


# -------- dict <-> model mappers --------
def _as_datetime(x) -> datetime:
    if isinstance(x, datetime):
        dt = x
    elif x:
        dt = datetime.fromisoformat(str(x).replace("Z", "+00:00"))
    else:
        return _utcnow()
    # If naive datetime, assume UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def reservation_from_dict(d: Optional[dict]) -> Optional[Reservation]:
    """Map a stored reservation row to a Reservation."""
    if not d:
        return None
    return Reservation(
        id=str(d.get("reservation_id") or d.get("id")),
        resource_id=str(d.get("car_id") or d.get("resource_id")),
        owner_id=str(d.get("owner_id") or ""),
        range=DateRange(as_date(d["start_date"]), as_date(d["end_date"])),
        state=(d.get("status") or ReservationState.ACTIVE).lower(),
        price=float(d.get("price") or 0.0),
        created_at=_as_datetime(d.get("created_at")),
        tax=None if d.get("tax") is None else float(d["tax"]),
    )


def reservation_to_dict(r: Reservation) -> dict:
    """Flatten a Reservation into the row shape the Store persists."""
    return {
        "reservation_id": r.id,
        "car_id": r.resource_id,
        "owner_id": r.owner_id,
        "start_date": r.start.isoformat(),
        "end_date": r.end.isoformat(),
        "status": r.state,
        "price": r.price,
        "created_at": r.created_at.isoformat(),
        "tax": r.tax,
    }
