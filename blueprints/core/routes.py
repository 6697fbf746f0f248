from __future__ import annotations
import json, logging
from datetime import datetime

from flask import current_app, g, jsonify, request
from pydantic import ValidationError
from werkzeug.wrappers.response import Response

from errors import InternalError, SchedulingError

from . import bp, api_bp

log = logging.getLogger(__name__)

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.utcnow().isoformat(timespec="milliseconds") + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in ("event","path","method","status","duration_ms","requester_role","error_code"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _setup_structured_logging(app):
    logger = app.logger
    has_json = any(
        isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), JSONFormatter)
        for h in logger.handlers
    )
    if not has_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

def _pydantic_errors_safe(ve: ValidationError):
    errs = ve.errors(include_url=False)
    for e in errs:
        if "ctx" in e and isinstance(e["ctx"], dict):
            e["ctx"] = {k: str(v) for k, v in e["ctx"].items()}
        if "input" in e:
            e["input"] = str(e["input"])
    return errs

@bp.before_app_request
def _start_timer():
    g._req_start = datetime.utcnow()

@bp.after_app_request
def _log_request(response: Response):
    try:
        duration_ms = int((datetime.utcnow() - g._req_start).total_seconds() * 1000)
    except AttributeError:
        duration_ms = None
    extra = {
        "event":"http_request",
        "path":request.path,
        "method":request.method,
        "status":response.status_code,
        "duration_ms":duration_ms,
        "requester_role":request.headers.get("X-Requester-Role"),
    }
    # handler is attached in _on_register
    current_app.logger.info("request handled", extra=extra)
    return response

@bp.app_errorhandler(SchedulingError)
def handle_scheduling_error(err: SchedulingError):
    if isinstance(err, InternalError):
        log.error("internal error", exc_info=err, extra={"error_code": err.code})
    return jsonify({"ok": False, "errors": [err.to_dict()]}), err.http_status

@bp.app_errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"ok": False, "errors": [
        {"code": "VALIDATION_ERROR", "message": "request payload is invalid",
         "details": _pydantic_errors_safe(err)}
    ]}), 422

@bp.record_once
def _on_register(state):
    _setup_structured_logging(state.app)

@bp.get("/health")
@api_bp.get("/health")
def health():
    return jsonify({
        "status":"ok",
        "ts": datetime.utcnow().isoformat(timespec="seconds")+"Z",
    })
