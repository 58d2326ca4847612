"""
Flask configuration classes and the booking policy.
"""

import os
from dataclasses import dataclass
from typing import Mapping

from rentcal.utils.constants import (
    DEFAULT_MAX_DURATION_DAYS,
    DEFAULT_MAX_HORIZON_DAYS,
    TAX_RATE,
)


class Config:
    """Base configuration class with common settings."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-change-me"

    # Pickle file backing the Store
    RENTCAL_DATA_PATH = os.environ.get("RENTCAL_DATA_PATH") or None

    # Timezone used to decide what "today" is
    RENTCAL_TIMEZONE = os.environ.get("RENTCAL_TIMEZONE", "Pacific/Auckland")

    # Booking policy
    RENTCAL_MAX_HORIZON_DAYS = int(os.environ.get("RENTCAL_MAX_HORIZON_DAYS", DEFAULT_MAX_HORIZON_DAYS))
    RENTCAL_MAX_DURATION_DAYS = int(os.environ.get("RENTCAL_MAX_DURATION_DAYS", DEFAULT_MAX_DURATION_DAYS))
    RENTCAL_TAX_RATE = float(os.environ.get("RENTCAL_TAX_RATE", TAX_RATE))

    LOG_DIR = os.environ.get("RENTCAL_LOG_DIR", "logs")


class TestingConfig(Config):
    """Test configuration: no file logging, data path set per test."""

    TESTING = True
    RENTCAL_DATA_PATH = None


@dataclass(frozen=True)
class BookingPolicy:
    """Limits applied when validating a request and pricing it."""

    max_horizon_days: int = DEFAULT_MAX_HORIZON_DAYS
    max_duration_days: int = DEFAULT_MAX_DURATION_DAYS
    tax_rate: float = TAX_RATE

    @classmethod
    def from_mapping(cls, cfg: Mapping) -> "BookingPolicy":
        """Build a policy from a Flask config (or any mapping); missing keys keep defaults."""
        return cls(
            max_horizon_days=int(cfg.get("RENTCAL_MAX_HORIZON_DAYS", DEFAULT_MAX_HORIZON_DAYS)),
            max_duration_days=int(cfg.get("RENTCAL_MAX_DURATION_DAYS", DEFAULT_MAX_DURATION_DAYS)),
            tax_rate=float(cfg.get("RENTCAL_TAX_RATE", TAX_RATE)),
        )


DEFAULT_POLICY = BookingPolicy()
