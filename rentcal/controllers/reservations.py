from flask import Blueprint, abort, current_app, jsonify, request

from ..services.booking_service import reservation_row
from ..utils.constants import RejectReason

bp = Blueprint("reservations", __name__)


def _service():
    return current_app.extensions["rentcal"]


def _payload() -> dict:
    return request.get_json(silent=True) or request.form.to_dict() or {}


def _rejected(result):
    """409 for a date conflict, 422 for any other rejection."""
    code = 409 if result.reason == RejectReason.CONFLICT else 422
    body = {
        "ok": False,
        "reason": result.reason,
        "message": result.message,
        "conflicts": [r.id for r in result.conflicts],
    }
    return jsonify(body), code


@bp.post("/cars/<car_id>/reservations")
def create_reservation(car_id):
    """Create a reservation for the given owner if the dates are accepted."""
    data = _payload()
    owner_id = str(data.get("owner_id") or "").strip()
    if not owner_id:
        abort(400, description="owner_id is required")

    svc = _service()
    result, reservation = svc.book(owner_id, car_id, data.get("start_date"), data.get("end_date"))
    if not result.ok:
        return _rejected(result)
    return jsonify({"ok": True, "reservation": reservation_row(reservation, svc.today())}), 201


@bp.post("/reservations/<rid>/reschedule")
def reschedule_reservation(rid):
    data = _payload()
    svc = _service()
    result, reservation = svc.reschedule(rid, data.get("start_date"), data.get("end_date"))
    if not result.ok:
        return _rejected(result)
    return jsonify({"ok": True, "reservation": reservation_row(reservation, svc.today())})


@bp.post("/reservations/<rid>/cancel")
def cancel_reservation(rid):
    """Cancel a reservation. Only the owner or staff can do this."""
    data = _payload()
    is_staff = str(data.get("is_staff") or "").lower() in ("1", "true", "yes")
    svc = _service()
    r = svc.cancel(rid, requester_id=data.get("requester_id") or "", is_staff=is_staff)
    return jsonify({"ok": True, "reservation": reservation_row(r, svc.today())})


@bp.post("/reservations/<rid>/archive")
def archive_reservation(rid):
    svc = _service()
    r = svc.archive(rid)
    return jsonify({"ok": True, "reservation": reservation_row(r, svc.today())})


@bp.post("/reservations/<rid>/restore")
def restore_reservation(rid):
    svc = _service()
    r = svc.restore(rid)
    return jsonify({"ok": True, "reservation": reservation_row(r, svc.today())})


@bp.get("/reservations/<rid>/invoice")
def invoice(rid):
    """Invoice for a reservation id."""
    return jsonify(_service().invoice(rid))
