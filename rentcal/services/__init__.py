from .analytics_service import AnalyticsService
from .booking_service import BookingService

__all__ = [
    "BookingService",
    "AnalyticsService",
]
