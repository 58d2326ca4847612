import logging
import os
import pickle
import threading
import uuid
from contextlib import contextmanager
from typing import List

from rentcal.exceptions import CarNotFoundError, ReservationNotFoundError
from rentcal.models.reservation import (
    Reservation,
    reservation_from_dict,
    reservation_to_dict,
    with_state,
)
from rentcal.utils.constants import ReservationState

log = logging.getLogger(__name__)


class Store:
    """
    Car catalog plus reservation rows, held in memory and optionally
    persisted to a pickle file.

    Services never reach into the rows: they receive Reservation snapshots
    from list_* and hand new values back through commit_reservation/set_state.
    """

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path) if path else None
        self.cars: dict[str, dict] = {}
        self.reservations: dict[str, dict] = {}
        self._rw = threading.RLock()

        log.info("[Store] Using file: %s", self.path or "<memory>")
        self._load()

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            log.warning("[Store] Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            self.cars = data.get("cars", {}) or {}
            self.reservations = data.get("reservations", {}) or {}
            log.info("[Store] Loaded: cars=%d, reservations=%d", len(self.cars), len(self.reservations))
        else:
            # Handle incompatible data format: backup the old file and start empty
            bak = self.path + ".bak"
            os.replace(self.path, bak)
            log.warning("[Store] Incompatible store (%s); backed up to %s. Starting empty.",
                        type(data).__name__, bak)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        if not self.path:
            return
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {
            "cars": self.cars,
            "reservations": self.reservations,
        }
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            log.debug("[Store] Saving to %s ...", self.path or "<memory>")
            self._dump()

    @contextmanager
    def write_lock(self):
        """Hold the store lock across a read-validate-commit sequence."""
        with self._rw:
            yield self

    # ---------- Cars (resource catalog) ----------
    def create_car(self, data: dict) -> str:
        """Create a new car record and return its ID."""
        with self._rw:
            cid = str(data.get("car_id") or uuid.uuid4())
            self.cars[cid] = {
                "car_id": cid,
                "brand": data.get("brand", ""),
                "model": data.get("model", ""),
                "daily_rate": float(data.get("daily_rate") or 0),
            }
            self._dump()
            return cid

    def get_car(self, car_id: str) -> dict:
        """Get car information by ID or raise CarNotFoundError."""
        car = self.cars.get(str(car_id))
        if car is None:
            raise CarNotFoundError(f"Error: car with ID '{car_id}' not found")
        return car

    def daily_rate(self, car_id: str) -> float:
        return self.get_car(car_id).get("daily_rate")

    # ---------- Reservations ----------
    def all_reservations(self) -> List[Reservation]:
        with self._rw:
            return [reservation_from_dict(d) for d in self.reservations.values()]

    def list_reservations_for_resource(self, car_id: str) -> List[Reservation]:
        """Snapshot of a car's reservations in insertion order."""
        cid = str(car_id)
        with self._rw:
            return [reservation_from_dict(d) for d in self.reservations.values() if d.get("car_id") == cid]

    def list_reservations_for_owner(self, owner_id: str) -> List[Reservation]:
        oid = str(owner_id)
        with self._rw:
            return [reservation_from_dict(d) for d in self.reservations.values() if d.get("owner_id") == oid]

    def get_reservation(self, reservation_id: str) -> Reservation:
        d = self.reservations.get(str(reservation_id))
        if d is None:
            raise ReservationNotFoundError(f"Error: reservation '{reservation_id}' not found")
        return reservation_from_dict(d)

    def commit_reservation(self, r: Reservation) -> str:
        """Insert or replace a reservation row."""
        with self._rw:
            self.reservations[r.id] = reservation_to_dict(r)
            self._dump()
            return r.id

    def set_state(self, reservation_id: str, state: str) -> Reservation:
        """Change a reservation's stored state; returns the updated value."""
        if state not in ReservationState.ALL:
            raise ValueError(f"Unknown reservation state: {state!r}")
        with self._rw:
            updated = with_state(self.get_reservation(reservation_id), state)
            self.reservations[updated.id] = reservation_to_dict(updated)
            self._dump()
            return updated
