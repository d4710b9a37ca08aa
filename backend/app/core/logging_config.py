"""
Logging for the School Admin backend

One ``schooladmin`` logger for the whole app. Plain text on the console in
development, one JSON object per line in production. Every record carries
the request id and user id of the request that produced it.
"""
import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.config import settings

LOGGER_NAME = "schooladmin"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024

_request_id: ContextVar[str] = ContextVar("request_id", default="")
_user_id: ContextVar[str] = ContextVar("user_id", default="")

# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "request_id", "user_id"}


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def set_user_id(user_id: Optional[str]) -> None:
    _user_id.set(user_id or "")


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestContextFilter(logging.Filter):
    """Stamp request_id / user_id on each record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "-"
        record.user_id = _user_id.get() or "-"
        return True


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for key in ("request_id", "user_id"):
            value = getattr(record, key, "-")
            if value != "-":
                entry[key] = value

        entry.update({
            key: value for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        })

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class SchoolAdminLogger(logging.Logger):
    """Logger with helpers for the events the dashboard cares about"""

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self.log(
            level,
            f"{method} {path} {status_code} ({duration_ms:.1f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        outcome = "ok" if success else f"failed ({reason})"
        self.log(
            logging.INFO if success else logging.WARNING,
            f"Auth {event} {outcome} for {user_email or 'unknown'}",
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_occupancy_update(self, room_id: str, occupancy: int, status: str,
                             written: bool, previous_occupancy: Optional[int] = None,
                             previous_status: Optional[str] = None, **kwargs) -> None:
        if written:
            message = (
                f"Room {room_id}: {previous_occupancy}/{previous_status} -> {occupancy}/{status}"
            )
        else:
            message = f"Room {room_id}: unchanged at {occupancy}/{status}"
        self.info(
            message,
            extra={
                "event_type": "occupancy_update",
                "room_id": room_id,
                "occupancy": occupancy,
                "room_status": status,
                "written": written,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        self.error(
            f"{context or 'unhandled'}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )


def _file_handler(formatter: logging.Formatter, backups: int) -> RotatingFileHandler:
    path = Path(settings.LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=backups)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> SchoolAdminLogger:
    logging.setLoggerClass(SchoolAdminLogger)
    log = logging.getLogger(LOGGER_NAME)
    log.__class__ = SchoolAdminLogger
    log.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    log.propagate = False

    log.handlers.clear()
    log.filters.clear()
    log.addFilter(RequestContextFilter())

    if settings.is_production:
        console_fmt = file_fmt = JSONFormatter()
        backups = 10
    else:
        console_fmt = logging.Formatter("%(levelname)-8s | %(message)s")
        file_fmt = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )
        backups = 5

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(console_fmt)
    log.addHandler(console)

    if settings.LOG_FILE:
        log.addHandler(_file_handler(file_fmt, backups))

    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return log


logger: SchoolAdminLogger = setup_logging()
