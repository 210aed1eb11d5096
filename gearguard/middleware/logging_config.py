"""
Logging setup for GearGuard.

Two output shapes over the root logger:

- ReadableFormatter for development and tests: one colored line per record,
  suffixed with the request number a lifecycle event concerns and the
  request id of the HTTP call that caused it.
- JSONFormatter for production: one JSON object per record, carrying the
  HTTP fields written by ``middleware.timing`` and the maintenance fields
  written by the services.

``RequestContextFilter`` stamps ``request_id`` and ``actor_id`` from
``flask.g`` onto every record emitted inside a request, so service logs
can be joined to the access log without the services knowing about HTTP.

LOG_LEVEL overrides the level (default DEBUG in dev, INFO in prod).
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import g, has_request_context

# HTTP access fields (middleware.timing)
HTTP_FIELDS = ("method", "path", "status", "duration_ms", "remote_addr")
# Maintenance lifecycle fields (services.request_lifecycle, equipment_service)
LIFECYCLE_FIELDS = ("request_number", "equipment_id", "from_status", "to_status")
# Correlation fields (RequestContextFilter)
CONTEXT_FIELDS = ("request_id", "actor_id")


class RequestContextFilter(logging.Filter):
    """Copy the current request id and acting user id onto the record."""

    def filter(self, record):
        if has_request_context():
            if getattr(record, "request_id", None) is None:
                record.request_id = getattr(g, "request_id", None)
            if getattr(record, "actor_id", None) is None:
                actor = getattr(g, "current_user", None)
                record.actor_id = getattr(actor, "id", None)
        return True


def _fields(record, names):
    return {k: getattr(record, k) for k in names if getattr(record, k, None) is not None}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": f"{record.module}:{record.lineno}",
        }
        entry.update(_fields(record, CONTEXT_FIELDS))
        http = _fields(record, HTTP_FIELDS)
        if http:
            entry["http"] = http
        lifecycle = _fields(record, LIFECYCLE_FIELDS)
        if lifecycle:
            entry["maintenance"] = lifecycle
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, color=True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<8}"
        if self.color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"
        parts = [datetime.now().strftime("%H:%M:%S"), level, f"{record.name}:", record.getMessage()]

        number = getattr(record, "request_number", None)
        if number:
            parts.append(f"[{number}]")
        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            parts.append(f"[{duration:.0f}ms]")
        rid = getattr(record, "request_id", None)
        if rid:
            parts.append(f"({rid})")

        line = " ".join(parts)
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """Install a single stderr handler on the root logger for *app*."""
    is_testing = app.config.get("TESTING", False)
    is_prod = not app.config.get("DEBUG", False) and not is_testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if is_prod else "DEBUG")
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if is_prod else ReadableFormatter(color=not is_testing))
    handler.addFilter(RequestContextFilter())
    handler.setLevel(level)

    # Cleared first so repeated create_app() calls do not stack handlers
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("werkzeug", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    app.logger.setLevel(level)

    if not is_testing:
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "JSON" if is_prod else "readable")
