from __future__ import annotations
import json
import logging
from pathlib import Path

from flask_migrate import upgrade
from sqlalchemy import inspect

from app import create_app
from blueprints.core.routes import JSONFormatter
from extensions import db

MIGRATIONS = Path(__file__).resolve().parent.parent / "migrations"

def test_health_ok():
    app = create_app("test")
    with app.test_client() as c:
        rv = c.get("/health")
        assert rv.status_code == 200
        data = rv.get_json()
        assert data["status"] == "ok"
        assert data["ts"].endswith("Z")

def test_health_under_api_prefix():
    app = create_app("test")
    with app.test_client() as c:
        assert c.get("/api/v1/health").status_code == 200

def test_json_handler_installed_once():
    app = create_app("test")
    handlers = [h for h in app.logger.handlers if isinstance(h.formatter, JSONFormatter)]
    assert len(handlers) == 1

def test_json_formatter_fields():
    record = logging.LogRecord("flask.app", logging.INFO, __file__, 1, "request handled", None, None)
    record.event = "http_request"
    record.status = 201
    out = json.loads(JSONFormatter().format(record))
    assert out["msg"] == "request handled"
    assert out["event"] == "http_request" and out["status"] == 201
    assert "path" not in out

def test_config_flags_default():
    app = create_app("test")
    assert app.config["PRIVILEGED_ROLES"] == ("admin",)
    assert app.config["ALLOCATION_RECHECK_ON_APPROVE"] is False
    assert app.config["ROOM_STATUS_RECOMPUTE"] is True
    assert app.config["SQLALCHEMY_DATABASE_URI"] == "sqlite:///:memory:"

def test_migrations_build_schema():
    app = create_app("test")
    with app.app_context():
        upgrade(directory=str(MIGRATIONS))
        tables = set(inspect(db.engine).get_table_names())
        db.session.remove()
    assert {"professor", "discipline", "room", "teaching_schedule", "allocation"} <= tables
    assert "alembic_version" in tables
    assert not logging.getLogger("blueprints.schedule.services").disabled
