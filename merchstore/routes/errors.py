from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from werkzeug.exceptions import HTTPException

from merchstore.extensions import db
from merchstore.services.errors import ErrorKind, ServiceError

bp = Blueprint("errors", __name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


@bp.app_errorhandler(ServiceError)
def handle_service_error(error: ServiceError):
    status_code = STATUS_BY_KIND.get(error.kind, 500)
    if status_code >= 500:
        current_app.logger.error("Service failure: %s", error.message)
    payload = {"error": error.message}
    payload.update(error.details)
    return jsonify(payload), status_code


@bp.app_errorhandler(HTTPException)
def handle_http_error(error: HTTPException):
    # Routing redirects keep their Location header.
    if error.code is None or error.code < 400:
        return error

    if error.code == 404:
        message = "Route not found"
    else:
        message = error.description or error.name
    response = jsonify({"error": message})
    response.status_code = error.code
    valid_methods = getattr(error, "valid_methods", None)
    if valid_methods:
        response.headers["Allow"] = ", ".join(valid_methods)
    return response


@bp.app_errorhandler(Exception)
def handle_exception(error: Exception):
    # Leave the session usable for the next request.
    db.session.rollback()
    current_app.logger.exception("Unhandled exception", exc_info=error)
    return jsonify({"error": "Something went wrong on the server"}), 500
