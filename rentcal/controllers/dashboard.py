from flask import Blueprint, current_app, jsonify, request

from ..services.analytics_service import AnalyticsService

bp = Blueprint("dashboard", __name__)


def _service():
    return current_app.extensions["rentcal"]


@bp.get("/users/<owner_id>/reservations")
def user_dashboard(owner_id):
    """Active / archived reservation lists for one user."""
    svc = _service()
    svc.refresh_states()
    data = svc.dashboard(owner_id)
    data["current_date"] = svc.today().isoformat()
    return jsonify(data)


@bp.get("/users/<owner_id>/expiring")
def expiring(owner_id):
    days = request.args.get("days", default=1, type=int)
    return jsonify({"reservations": _service().expiring(owner_id, days_before=days)})


@bp.get("/analytics")
def analytics():
    """Operator summary: totals, reservations and revenue per car."""
    return jsonify(AnalyticsService.analytics(_service().store))
