from datetime import date

from rentcal import config
from rentcal.config import BookingPolicy
from rentcal.utils.clock import FixedClock, SystemClock


def test_policy_defaults():
    p = BookingPolicy()
    assert (p.max_horizon_days, p.max_duration_days, p.tax_rate) == (180, 30, 0.15)


def test_policy_from_flask_config(app):
    app.config["RENTCAL_MAX_DURATION_DAYS"] = "7"
    p = BookingPolicy.from_mapping(app.config)
    assert p.max_duration_days == 7
    assert p.max_horizon_days == 180


def test_policy_from_partial_mapping():
    assert BookingPolicy.from_mapping({"RENTCAL_TAX_RATE": 0.2}).tax_rate == 0.2


def test_app_uses_configured_policy(store, clock):
    from rentcal import create_app

    class ShortTrips(config.TestingConfig):
        RENTCAL_MAX_DURATION_DAYS = 2

    app = create_app(ShortTrips, store=store, clock=clock)
    r = app.test_client().post("/cars/car-1/reservations",
                               json={"owner_id": "u1", "start_date": "2024-06-01", "end_date": "2024-06-05"})
    assert r.status_code == 422
    assert r.get_json()["reason"] == "too_long"


def test_clocks():
    assert isinstance(SystemClock("UTC").today(), date)
    assert FixedClock(date(2024, 6, 1)).today() == date(2024, 6, 1)
