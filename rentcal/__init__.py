import logging
import os

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import BookingPolicy, Config
from .controllers.calendar import bp as calendar_bp
from .controllers.dashboard import bp as dashboard_bp
from .controllers.reservations import bp as reservations_bp
from .exceptions import (
    CarNotFoundError,
    InvalidDateRangeError,
    ReservationNotFoundError,
    ReservationStateError,
)
from .models.store import Store
from .services.booking_service import BookingService
from .utils.clock import SystemClock
from .utils.filters import fmt_day, fmt_span


def create_app(config_object=None, store=None, clock=None):
    """
    Application factory.

    ``store`` and ``clock`` can be injected (tests); otherwise they are built
    from RENTCAL_DATA_PATH and RENTCAL_TIMEZONE.
    """
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    if store is None:
        store = Store(app.config.get("RENTCAL_DATA_PATH"))
    if clock is None:
        clock = SystemClock(app.config["RENTCAL_TIMEZONE"])
    app.extensions["rentcal"] = BookingService(store, clock, BookingPolicy.from_mapping(app.config))

    app.register_blueprint(calendar_bp)
    app.register_blueprint(reservations_bp)
    app.register_blueprint(dashboard_bp)
    app.jinja_env.filters["fmt_day"] = fmt_day
    app.jinja_env.filters["fmt_span"] = fmt_span

    register_error_handlers(app)
    configure_logging(app)
    return app


def register_error_handlers(app):
    """Render domain errors as JSON instead of generic 500s."""

    def _error(message, code):
        return jsonify({"ok": False, "message": message}), code

    @app.errorhandler(CarNotFoundError)
    @app.errorhandler(ReservationNotFoundError)
    def not_found(e):
        return _error(e.message, 404)

    @app.errorhandler(ReservationStateError)
    def bad_state(e):
        return _error(e.message, 409)

    @app.errorhandler(InvalidDateRangeError)
    def bad_range(e):
        return _error(e.message, 422)

    @app.errorhandler(PermissionError)
    def forbidden(e):
        return _error(str(e), 403)

    @app.errorhandler(HTTPException)
    def http_error(e):
        return _error(e.description, e.code)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(os.path.join(log_dir, "rentcal.log"))
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger("rentcal").addHandler(file_handler)
        logging.getLogger("rentcal").setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('rentcal startup')
    else:
        app.logger.setLevel(logging.DEBUG)
