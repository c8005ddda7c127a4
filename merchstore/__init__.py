from flask import Flask, current_app, g, request
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from config import Config
from . import models  # ensure models are registered with SQLAlchemy
from .extensions import db
from .routes import (
    errors,
    health,
    item_availability,
    item_type_sizes,
    item_types,
    items,
    locations,
    orders,
    roles,
    sizes,
    users,
)
from .utils.logging import assign_request_id, configure_logging


def _ping_database() -> None:
    """Raise :class:`OperationalError` when the configured database is unreachable."""

    with db.engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def _allowed_origin(origin: str | None) -> str | None:
    allowed = (current_app.config.get("CORS_ALLOWED_ORIGINS") or "").strip()
    if not allowed:
        return None
    if allowed == "*":
        return "*"
    if origin and origin in {entry.strip() for entry in allowed.split(",")}:
        return origin
    return None


def create_app(config_override=None):
    app = Flask(__name__)

    # load configuration from environment variables
    app.config.from_object(Config)
    if config_override:
        app.config.update(config_override)

    app.config.setdefault("DATABASE_AVAILABLE", True)
    app.config.setdefault("DATABASE_ERROR", None)

    database_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if database_uri.startswith("sqlite:///:memory:"):
        engine_options = app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {})
        connect_args = engine_options.setdefault("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine_options.setdefault("poolclass", StaticPool)

    configure_logging(app)
    db.init_app(app)

    database_available = True
    database_error_message: str | None = None

    # create tables if they do not exist
    with app.app_context():
        try:
            _ping_database()
        except OperationalError as exc:
            database_available = False
            root_cause = getattr(exc, "orig", exc)
            details = str(root_cause).strip()
            database_error_message = (
                "Unable to connect to the configured database. Check the DB_URL "
                "setting and restart the API."
            )
            if details:
                database_error_message += f" (Error: {details})"
            message_suffix = f": {details}" if details else ""
            app.logger.error(
                "Database connection unavailable during startup%s",
                message_suffix,
                exc_info=app.debug,
            )
            db.session.remove()
            db.engine.dispose()
        else:
            try:
                db.create_all()
            except SQLAlchemyError:
                database_available = False
                database_error_message = (
                    "The database schema could not be initialized. Review the logs "
                    "for details and restart the API once resolved."
                )
                app.logger.exception("Database initialization error")
                db.session.remove()

    app.config["DATABASE_AVAILABLE"] = database_available
    app.config["DATABASE_ERROR"] = database_error_message

    # register blueprints
    app.register_blueprint(errors.bp)
    app.register_blueprint(health.bp)
    app.register_blueprint(items.bp)
    app.register_blueprint(item_types.bp)
    app.register_blueprint(sizes.bp)
    app.register_blueprint(item_type_sizes.bp)
    app.register_blueprint(item_availability.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(roles.bp)
    app.register_blueprint(roles.permissions_bp)
    app.register_blueprint(roles.role_permissions_bp)
    app.register_blueprint(orders.bp)
    app.register_blueprint(locations.bp)

    app.before_request(assign_request_id)

    @app.after_request
    def _finalize_response(response):
        origin = _allowed_origin(request.headers.get("Origin"))
        if origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Methods"] = (
                "GET, POST, PUT, PATCH, DELETE, OPTIONS"
            )
            response.headers["Access-Control-Allow-Headers"] = (
                "Content-Type, X-Request-ID"
            )
            if origin != "*":
                response.headers.add("Vary", "Origin")

        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id

        if request.method != "OPTIONS":
            current_app.logger.info(
                "%s %s -> %s", request.method, request.full_path.rstrip("?"), response.status_code
            )
        return response

    return app
