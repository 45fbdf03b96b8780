# tests/test_parser.py
"""Tests for the front matter codec."""

import pytest

from commandsync.core.commands.models import ActivationMode
from commandsync.core.commands.parser import (
    infer_activation_mode,
    parse_front_matter,
    render_description_header,
    render_rule_header,
    split_front_matter,
)


class TestSplitFrontMatter:
    """Tests for split_front_matter."""

    def test_header_and_body(self) -> None:
        header, body = split_front_matter("---\ndescription: Review\n---\n\nCheck it\n")
        assert header == ["description: Review"]
        assert body == "Check it"

    def test_no_header(self) -> None:
        header, body = split_front_matter("Just a prompt\n")
        assert header is None
        assert body == "Just a prompt\n"

    def test_unterminated_header_is_content(self) -> None:
        text = "---\ndescription: x\nno closing line"
        header, body = split_front_matter(text)
        assert header is None
        assert body == text

    def test_closing_line_must_be_exact(self) -> None:
        header, body = split_front_matter("---\na: b\n--- trailing\n---\nbody")
        assert header == ["a: b", "--- trailing"]
        assert body == "body"

    def test_empty_text(self) -> None:
        assert split_front_matter("") == (None, "")


class TestParseFrontMatter:
    """Tests for parse_front_matter."""

    def test_none_header_gives_defaults(self) -> None:
        front = parse_front_matter(None)
        assert front.description == ""
        assert front.globs is None
        assert front.always_apply is False
        assert front.has_header is False

    def test_globs_list(self) -> None:
        front = parse_front_matter(
            [
                "description: TS style",
                "globs:",
                '  - "**/*.ts"',
                "  - '**/*.tsx'",
                "alwaysApply: false",
            ]
        )
        assert front.description == "TS style"
        assert front.globs == ["**/*.ts", "**/*.tsx"]
        assert front.always_apply is False
        assert front.has_header is True

    def test_inline_globs(self) -> None:
        front = parse_front_matter(["globs: *.py, *.pyi"])
        assert front.globs == ["*.py", "*.pyi"]

    def test_list_items_under_other_keys_are_ignored(self) -> None:
        front = parse_front_matter(["tags:", "  - one", "description: d"])
        assert front.globs is None
        assert front.description == "d"

    def test_always_apply_is_case_insensitive(self) -> None:
        assert parse_front_matter(["alwaysApply: True"]).always_apply is True

    def test_description_keeps_colons(self) -> None:
        front = parse_front_matter(["description: Step 1: plan"])
        assert front.description == "Step 1: plan"

    def test_unknown_keys_and_blank_lines(self) -> None:
        front = parse_front_matter(["", "author: me", "description: x"])
        assert front.description == "x"


class TestActivationInference:
    """Tests for infer_activation_mode priority."""

    @pytest.mark.parametrize(
        ("always_apply", "globs", "description", "expected"),
        [
            (True, ["*.ts"], "desc", ActivationMode.ALWAYS),
            (False, ["**/*.ts"], "TypeScript style", ActivationMode.AUTO_ATTACH),
            (False, None, "Use when writing SQL", ActivationMode.MODEL_DECISION),
            (False, [], "", ActivationMode.MANUAL),
            (False, None, "", ActivationMode.MANUAL),
        ],
    )
    def test_priority(self, always_apply, globs, description, expected) -> None:
        assert infer_activation_mode(always_apply, globs, description) is expected


class TestRendering:
    """Tests for the header renderers."""

    def test_description_header(self) -> None:
        text = render_description_header("Review PRs", "Look at the diff")
        assert text == "---\ndescription: Review PRs\n---\n\nLook at the diff"

    def test_description_header_omitted_when_empty(self) -> None:
        assert render_description_header("", "Body") == "Body"

    def test_rule_header_field_order(self) -> None:
        text = render_rule_header("TS style", ["**/*.ts"], False, "Use strict")
        assert text == (
            "---\n"
            "description: TS style\n"
            "globs:\n"
            '  - "**/*.ts"\n'
            "alwaysApply: false\n"
            "---\n"
            "\n"
            "Use strict"
        )

    def test_rule_header_without_globs(self) -> None:
        text = render_rule_header("", None, True, "Always")
        assert "globs" not in text
        assert "alwaysApply: true" in text

    @pytest.mark.parametrize(
        ("description", "globs", "always_apply", "content"),
        [
            ("TS style", ["**/*.ts", "src/**"], False, "Use strict mode."),
            ("Everywhere", None, True, "Line one\n\nLine two"),
            ("", None, False, "Manual rule"),
            ("Key: value", ["*.md"], False, "Body with --- inside"),
        ],
    )
    def test_rule_round_trip(self, description, globs, always_apply, content) -> None:
        """A rendered rule parses back to the same fields."""
        header, body = split_front_matter(
            render_rule_header(description, globs, always_apply, content)
        )
        front = parse_front_matter(header)

        assert body == content
        assert front.description == description
        assert front.globs == globs
        assert front.always_apply is always_apply

    def test_empty_globs_read_back_as_absent(self) -> None:
        """An empty pattern list is not written, so it parses as None."""
        text = render_rule_header("Style", [], False, "Body")
        front = parse_front_matter(split_front_matter(text)[0])

        assert "globs" not in text
        assert front.globs is None
        assert text == render_rule_header("Style", None, False, "Body")
