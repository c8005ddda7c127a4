from __future__ import annotations

import logging
import sys
from pathlib import Path

from sqlalchemy.exc import OperationalError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import merchstore as merchstore_module
from merchstore import create_app
from merchstore.extensions import db


def test_create_app_handles_database_outage(monkeypatch):
    """The application should initialize even when the database is offline."""

    def fake_ping() -> None:
        raise OperationalError("SELECT 1", {}, Exception("database offline"))

    monkeypatch.setattr(merchstore_module, "_ping_database", fake_ping)

    create_all_called = False

    def record_create_all(*args, **kwargs):  # type: ignore[no-untyped-def]
        nonlocal create_all_called
        create_all_called = True

    monkeypatch.setattr(db, "create_all", record_create_all)

    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "LOG_TO_FILE": False,
        }
    )

    assert app.config["DATABASE_AVAILABLE"] is False
    assert "Unable to connect" in (app.config["DATABASE_ERROR"] or "")
    assert "database offline" in (app.config["DATABASE_ERROR"] or "")
    assert create_all_called is False


def test_create_app_builds_schema():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "LOG_TO_FILE": False,
        }
    )

    assert app.config["DATABASE_AVAILABLE"] is True
    assert app.config["DATABASE_ERROR"] is None
    response = app.test_client().get("/api/items")
    assert response.status_code == 200
    assert response.get_json() == []


def test_file_logging_writes_to_log_dir(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "LOG_DIR": str(tmp_path),
            "LOG_TO_FILE": True,
        }
    )

    try:
        app.test_client().get("/")
        assert (tmp_path / "merch_store_api.log").exists()
    finally:
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            if getattr(handler, "baseFilename", "").startswith(str(tmp_path)):
                root_logger.removeHandler(handler)
                handler.close()
