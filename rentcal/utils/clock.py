"""Clock collaborators. Services never call date.today() themselves."""
from datetime import date, datetime, timezone

import pytz


class SystemClock:
    """Today's date as seen in the configured timezone."""

    def __init__(self, tz_name: str = "Pacific/Auckland"):
        self.tz = pytz.timezone(tz_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self.tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """A clock stuck on one day (tests, replaying history)."""

    def __init__(self, day: date):
        self.day = day

    def now(self) -> datetime:
        return datetime(self.day.year, self.day.month, self.day.day, tzinfo=timezone.utc)

    def today(self) -> date:
        return self.day
