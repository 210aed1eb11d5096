"""Shared helpers for services and blueprints.

parse_datetime:           ISO-8601 input → aware UTC datetime (ValidationError on bad input)
as_utc:                   normalise datetimes read back without tzinfo (SQLite)
commit_or_raise:          commit the session, mapping outages to StoreUnavailableError
degrade_on_store_error:   read-path decorator returning an empty default on outage
require_text / optional_text / require_int / optional_int / check_choice:
                          field checks raising ValidationError before any write
"""
import functools
import logging
from datetime import date, datetime, timezone

from sqlalchemy.exc import IntegrityError, OperationalError

from gearguard.core.exceptions import StoreUnavailableError, ValidationError
from gearguard.models import db

logger = logging.getLogger(__name__)


def as_utc(value):
    """Attach UTC to a naive datetime; pass aware datetimes and None through."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def parse_datetime(value, field="date"):
    """Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Returns None for empty input.  Supports:
    - YYYY-MM-DD (midnight UTC)
    - YYYY-MM-DDTHH:MM:SS[.ffffff][+HH:MM|Z]
    - date / datetime objects

    Raises ValidationError on anything else.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value).astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = str(value)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"{field} must be an ISO-8601 date or datetime",
            details={field: str(value)},
        ) from exc
    return as_utc(parsed).astimezone(timezone.utc)


def commit_or_raise(operation: str):
    """Commit the current session.

    OperationalError → rollback + StoreUnavailableError (HTTP 503)
    IntegrityError   → rollback + re-raise (HTTP 409 via app handler)
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error on commit (%s): %s", operation, exc.orig)
        raise
    except OperationalError as exc:
        db.session.rollback()
        logger.exception("Database operational error on commit (%s)", operation)
        raise StoreUnavailableError(operation, exc) from exc


def degrade_on_store_error(default_factory=list):
    """Decorator: return ``default_factory()`` when the store is unreachable.

    Only for read paths.  Writes must fail hard and never use this.
    """
    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except OperationalError:
                db.session.rollback()
                logger.warning(
                    "Store unavailable in %s; returning empty result", f.__name__,
                    exc_info=True,
                )
                return default_factory()
        return wrapped
    return decorator


# ── Input validation ─────────────────────────────────────────────────────────

def require_text(data: dict, field: str, max_len: int = 255) -> str:
    """Return a required, non-blank string field or raise ValidationError."""
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", details={field: "required"})
    if len(value) > max_len:
        raise ValidationError(
            f"{field} must be <= {max_len} chars", details={field: "too long"},
        )
    return value.strip()


def optional_text(data: dict, field: str, max_len: int | None = None) -> str | None:
    """Return an optional string field (None when absent) or raise ValidationError."""
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", details={field: "not a string"})
    if max_len is not None and len(value) > max_len:
        raise ValidationError(
            f"{field} must be <= {max_len} chars", details={field: "too long"},
        )
    return value


def require_int(data: dict, field: str) -> int:
    value = data.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", details={field: "required integer"})
    return value


def optional_int(data: dict, field: str) -> int | None:
    if data.get(field) is None:
        return None
    return require_int(data, field)


def check_choice(value, field: str, choices) -> str:
    """Raise ValidationError unless *value* is one of *choices*."""
    if value not in choices:
        raise ValidationError(
            f"{field} must be one of: {', '.join(sorted(choices))}",
            details={field: f"invalid value {value!r}"},
        )
    return value
