from datetime import date

from flask import Blueprint, abort, current_app, jsonify, request

from ..models.interval import as_date

bp = Blueprint("calendar", __name__, url_prefix="/cars")


def _service():
    return current_app.extensions["rentcal"]


def _flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in ("1", "true", "yes")


def _parse_month(value):
    """'YYYY-MM' -> (year, month); defaults to the current month."""
    if not value:
        today = _service().today()
        return today.year, today.month
    try:
        year, month = (int(p) for p in value.split("-", 1))
        date(year, month, 1)
    except ValueError:
        abort(400, description="month must be YYYY-MM")
    return year, month


@bp.get("/<car_id>/calendar")
def month_view(car_id):
    """Booked days and legend entries for one month of a car's calendar."""
    year, month = _parse_month(request.args.get("month"))
    data = _service().calendar_month(car_id, year, month, include_cancelled=_flag("include_cancelled"))
    return jsonify(data)


@bp.get("/<car_id>/calendar/<day>")
def day_view(car_id, day):
    """Reservations on one day, with day position and color (tooltip data)."""
    try:
        d = as_date(day)
    except ValueError:
        abort(400, description="day must be YYYY-MM-DD")
    items = _service().calendar_day(car_id, d, include_cancelled=_flag("include_cancelled"))
    return jsonify({"car_id": car_id, "day": d.isoformat(), "reservations": items})


@bp.get("/<car_id>/quote")
def quote(car_id):
    """Price preview for start/end query parameters."""
    start = (request.args.get("start") or "").strip()
    if not start:
        abort(400, description="start is required")
    end = (request.args.get("end") or "").strip() or None
    try:
        breakdown = _service().quote(car_id, start, end)
    except ValueError:
        abort(400, description="dates must be YYYY-MM-DD")
    return jsonify({
        "car_id": car_id,
        "days": breakdown.days,
        "subtotal": breakdown.subtotal,
        "tax": breakdown.tax,
        "total": breakdown.total,
    })
