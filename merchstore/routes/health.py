from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from merchstore.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/")
def index():
    return jsonify({"message": "API Running"})


@bp.get("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning("Health check could not reach the database: %s", exc)
        return (
            jsonify(
                {
                    "status": "DEGRADED",
                    "database": "UNAVAILABLE",
                    "error": current_app.config.get("DATABASE_ERROR")
                    or "Database unavailable",
                }
            ),
            503,
        )

    return jsonify({"status": "OK", "database": "OK"})
