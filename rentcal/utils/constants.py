# rentcal/utils/constants.py

"""
Global constants for reservation states, calendar labels and rejection reasons.
These constants are imported by both models and services.
"""

# Fixed sales tax applied on top of the rental subtotal
TAX_RATE = 0.15

DEFAULT_MAX_HORIZON_DAYS = 180
DEFAULT_MAX_DURATION_DAYS = 30


class ReservationState:
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    ALL = (ACTIVE, CANCELLED, COMPLETED)


class Bucket:
    UPCOMING = "upcoming"
    CURRENT = "current"
    PAST = "past"


class Label:
    UPCOMING = "upcoming"
    CURRENT = "current"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DayPosition:
    FIRST = "first"
    MIDDLE = "middle"
    LAST = "last"
    SINGLE = "single"


class RejectReason:
    INVALID_RANGE = "invalid_range"
    IN_PAST = "in_past"
    TOO_FAR_FUTURE = "too_far_future"
    TOO_LONG = "too_long"
    CONFLICT = "conflict"


# --- Calendar ---
# Order matters: a reservation's color is PALETTE[index % len(PALETTE)].
PALETTE = (
    "blue",
    "green",
    "purple",
    "amber",
    "pink",
    "indigo",
    "teal",
    "orange",
)
