"""Utility functions for commandsync."""

from commandsync.utils.logging import (
    command_fields,
    configure_structured_logging,
    set_request_id,
)

__all__ = [
    "command_fields",
    "set_request_id",
    "configure_structured_logging",
]
