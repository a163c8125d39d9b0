"""
Structured logging configuration for the UNO room server.

Provides:
- JSONFormatter for production (machine-readable logs)
- Human-readable formatter for development
- Per-command context (request_id, player_id, room_code) via command_context()
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional

# Context variables for command-scoped data
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
player_id_var: ContextVar[Optional[str]] = ContextVar("player_id", default=None)
room_code_var: ContextVar[Optional[str]] = ContextVar("room_code", default=None)

_CONTEXT_FIELDS = (
    ("request_id", request_id_var),
    ("player_id", player_id_var),
    ("room_code", room_code_var),
)
_SHORT_LABELS = {"request_id": "req", "player_id": "player", "room_code": "room"}


def _context_value(record: logging.LogRecord, name: str, var: ContextVar) -> Optional[str]:
    """Prefer an explicit `extra=` value on the record over the context var."""
    return getattr(record, name, None) or var.get()


class JSONFormatter(logging.Formatter):
    """
    Format logs as JSON for production log aggregation.

    One object per line; context fields are only present when set.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name, var in _CONTEXT_FIELDS:
            value = _context_value(record, name, var)
            if value:
                log_data[name] = value

        # Add source location for errors
        if record.levelno >= logging.ERROR:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for development.

    Includes colors and the room/player context for easy debugging.
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET if color else ""

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        context_parts = []
        for name, var in _CONTEXT_FIELDS:
            value = _context_value(record, name, var)
            if value:
                context_parts.append(f"{_SHORT_LABELS[name]}={value[:8]}")
        context = f" [{' '.join(context_parts)}]" if context_parts else ""

        output = f"{timestamp} {color}{record.levelname:8}{reset} {record.name}{context} - {record.getMessage()}"

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        environment: Environment name (production uses JSON, else human-readable).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if environment == "production":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    # Reduce noise from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level}, environment={environment}",
    )


@contextmanager
def command_context(player_id: Optional[str] = None, room_code: Optional[str] = None) -> Iterator[None]:
    """
    Tag every log line emitted while handling one client command.

    Usage:
        with command_context(player_id=ctx.player_id, room_code="ABC123"):
            await handler(data, ctx, **deps)
    """
    tokens = [
        (player_id_var, player_id_var.set(player_id)),
        (room_code_var, room_code_var.set(room_code)),
    ]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
