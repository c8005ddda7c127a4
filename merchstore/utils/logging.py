from __future__ import annotations

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask, g, has_request_context, request

LOG_FORMAT = "%(asctime)s [%(levelname)s] [req=%(request_id)s] %(name)s: %(message)s"
LOG_FILE_NAME = "merch_store_api.log"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        request_id = None
        if has_request_context():
            request_id = getattr(g, "request_id", None)
        record.request_id = request_id or "-"
        return True


def _has_console_handler(logger: logging.Logger) -> bool:
    # File handlers subclass StreamHandler, so compare exact types.
    return any(type(handler) is logging.StreamHandler for handler in logger.handlers)


def _has_file_handler(logger: logging.Logger, log_path: Path) -> bool:
    return any(
        isinstance(handler, RotatingFileHandler)
        and getattr(handler, "baseFilename", "") == str(log_path)
        for handler in logger.handlers
    )


def _resolve_log_dir(app: Flask) -> Path:
    configured = app.config.get("LOG_DIR")
    if configured:
        return Path(configured)
    return Path(app.root_path).parent / "logs"


def _build_handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())
    return handler


def configure_logging(app: Flask) -> Path | None:
    """Attach stdout and rotating-file handlers tagged with the request id.

    Returns the log file path, or ``None`` when file logging is disabled.
    """

    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not _has_console_handler(root_logger):
        root_logger.addHandler(_build_handler(logging.StreamHandler(sys.stdout), level))

    log_path = None
    if app.config.get("LOG_TO_FILE", True):
        logs_dir = _resolve_log_dir(app)
        logs_dir.mkdir(parents=True, exist_ok=True)
        log_path = logs_dir / LOG_FILE_NAME
        if not _has_file_handler(root_logger, log_path):
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=5 * 1024 * 1024,
                backupCount=5,
            )
            root_logger.addHandler(_build_handler(file_handler, level))

    for handler in app.logger.handlers:
        if not any(isinstance(existing, RequestIdFilter) for existing in handler.filters):
            handler.addFilter(RequestIdFilter())

    app.logger.setLevel(level)
    logging.getLogger("werkzeug").setLevel(level)
    logging.getLogger("gunicorn.error").setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(max(level, logging.WARNING))

    return log_path


def assign_request_id() -> None:
    """Use the caller's ``X-Request-ID`` when present, otherwise mint one."""

    incoming = (request.headers.get("X-Request-ID") or "").strip()
    g.request_id = incoming[:64] or uuid.uuid4().hex
