# commandsync/utils/logging.py
"""Structured logging with JSON format and correlation ID support.

Provides:
- JSON-formatted log output for structured logging
- Request correlation ID via ContextVar for async-safe tracking
- Optional ``service``/``command`` fields passed through ``extra=``
- Centralized logger configuration driven by settings
"""

import json
import logging
from contextvars import ContextVar
from typing import Any

# Request correlation ID for tracking API calls across awaits
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Fields copied from ``extra=`` into the JSON payload
EXTRA_FIELDS = ("service", "command", "path")


def set_request_id(request_id: str) -> None:
    """Set the request correlation ID for the current context.

    Args:
        request_id: Unique identifier for the request.
    """
    request_id_var.set(request_id)


def get_request_id() -> str:
    """Get the request correlation ID for the current context.

    Returns:
        Current request ID, or empty string if not set.
    """
    return request_id_var.get()


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs log records as JSON with timestamp, level, logger name,
    message, optional request_id, and any of EXTRA_FIELDS attached to
    the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        for key in EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = str(value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def command_fields(command, service=None) -> dict[str, str | None]:
    """Build the ``extra=`` mapping that tags a log line with a command.

    Args:
        command: Any object with ``name``, ``source_service`` and
            ``file_path`` attributes.
        service: Service the line is about, when it is not the owner
            (e.g. a sync target).

    Returns:
        Values for the service, command and path fields.
    """
    owner = service if service is not None else command.source_service
    return {
        "service": getattr(owner, "value", owner),
        "command": command.name,
        "path": command.file_path,
    }


def configure_structured_logging(
    level: int | str = logging.INFO, json_output: bool = True
) -> None:
    """Configure logging for the application.

    Installs a single StreamHandler on the root logger, replacing any
    handler a previous call installed.

    Args:
        level: Logging level, as a number or a name such as "DEBUG".
        json_output: Emit JSON lines; plain text when False.
    """
    handler = logging.StreamHandler()
    handler.set_name("commandsync")
    if json_output:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    for existing in list(logging.root.handlers):
        if existing.get_name() == "commandsync":
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(level.upper() if isinstance(level, str) else level)
