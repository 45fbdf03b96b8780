# tests/test_logging.py
"""Tests for structured logging."""

import json
import logging

from commandsync.core.commands.models import Command, Service
from commandsync.utils.logging import (
    StructuredFormatter,
    command_fields,
    configure_structured_logging,
    get_request_id,
    set_request_id,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "commandsync.test", logging.INFO, __file__, 1, "hi %s", ("x",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for the JSON formatter."""

    def test_basic_fields(self) -> None:
        set_request_id("")
        data = json.loads(StructuredFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "commandsync.test"
        assert data["message"] == "hi x"
        assert "request_id" not in data

    def test_request_id_and_extras(self) -> None:
        set_request_id("req-1")
        try:
            data = json.loads(
                StructuredFormatter().format(_record(service="cursor", command="review"))
            )
        finally:
            set_request_id("")

        assert data["request_id"] == "req-1"
        assert data["service"] == "cursor"
        assert data["command"] == "review"
        assert get_request_id() == ""


class TestConfigure:
    """Tests for configure_structured_logging."""

    def test_replaces_previous_handler(self) -> None:
        previous_level = logging.root.level
        try:
            configure_structured_logging("debug")
            configure_structured_logging(logging.WARNING, json_output=False)

            ours = [h for h in logging.root.handlers if h.get_name() == "commandsync"]
            assert len(ours) == 1
            assert not isinstance(ours[0].formatter, StructuredFormatter)
            assert logging.root.level == logging.WARNING
        finally:
            for handler in list(logging.root.handlers):
                if handler.get_name() == "commandsync":
                    logging.root.removeHandler(handler)
            logging.root.setLevel(previous_level)


class TestCommandFields:
    """Tests for the extra= mapping attached to command log lines."""

    def test_owner_service_by_default(self) -> None:
        command = Command(
            name="review", source_service=Service.CURSOR, file_path="/h/review.md"
        )
        assert command_fields(command) == {
            "service": "cursor",
            "command": "review",
            "path": "/h/review.md",
        }

    def test_explicit_service_and_formatting(self) -> None:
        command = Command(name="review", source_service=Service.CLAUDE_CODE)
        fields = command_fields(command, service=Service.WINDSURF)

        data = json.loads(StructuredFormatter().format(_record(**fields)))

        assert data["service"] == "windsurf"
        assert data["command"] == "review"
        assert "path" not in data
