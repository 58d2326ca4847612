import sys, pathlib
from datetime import date, datetime, timedelta, timezone

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from rentcal import create_app
from rentcal.config import TestingConfig
from rentcal.models.interval import DateRange
from rentcal.models.reservation import Reservation
from rentcal.models.store import Store
from rentcal.services.booking_service import BookingService
from rentcal.utils.clock import FixedClock

TODAY = date(2024, 5, 20)
BASE_CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_res():
    """
    Build a Reservation from ISO strings. Each call gets a later created_at
    unless one is given, so creation order follows call order.
    """
    counter = {"n": 0}

    def _make(rid, start, end=None, state="active", car="car-1", owner="u1", price=0.0, created_at=None):
        counter["n"] += 1
        return Reservation(
            id=rid,
            resource_id=car,
            owner_id=owner,
            range=DateRange.parse(start, end),
            state=state,
            price=price,
            created_at=created_at or BASE_CREATED + timedelta(minutes=counter["n"]),
        )

    return _make


@pytest.fixture
def store(tmp_path):
    """A Store persisted to a temp pickle with two cars."""
    st = Store(tmp_path / "data.pkl")
    st.create_car({"car_id": "car-1", "brand": "Toyota", "model": "Corolla", "daily_rate": 50.0})
    st.create_car({"car_id": "car-2", "brand": "Honda", "model": "Civic", "daily_rate": 40.0})
    return st


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def service(store, clock):
    return BookingService(store, clock)


@pytest.fixture
def app(store, clock):
    app = create_app(TestingConfig, store=store, clock=clock)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
