"""Jinja filters and date formatting helpers."""
from datetime import date


def fmt_day(value, long: bool = False) -> str:
    """
    Format a calendar day for display.
      - default: '01/06/2024'
      - long:    'Saturday, June 1, 2024' (tooltip header)
    Non-date values are returned as text so the UI never goes blank.
    """
    if value is None:
        return ""
    if not isinstance(value, date):
        return str(value)
    if long:
        return f"{value.strftime('%A, %B')} {value.day}, {value.year}"
    return value.strftime("%d/%m/%Y")


def fmt_span(start: date, end: date) -> str:
    """Legend label for a reservation, e.g. 'Jun 1 - Jun 3'."""
    # Avoid %-d (not portable on Windows).
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}"
