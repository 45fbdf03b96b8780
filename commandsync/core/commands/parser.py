"""Pure function-based front matter codec for command files.

Command files may start with a ``---`` delimited header. Only the handful of
fields the services use are understood, by scanning line prefixes rather
than with a YAML parser.
"""

from dataclasses import dataclass

from commandsync.core.commands.models import ActivationMode

DELIMITER = "---"


@dataclass
class FrontMatter:
    """Fields extracted from a command file header.

    Attributes:
        description: Value of the ``description:`` line, empty if absent.
        globs: Patterns listed under ``globs:``; None when the key is absent.
        always_apply: Value of ``alwaysApply:``.
        has_header: Whether a delimited header was present at all.
    """

    description: str = ""
    globs: list[str] | None = None
    always_apply: bool = False
    has_header: bool = False


def split_front_matter(text: str) -> tuple[list[str] | None, str]:
    """Split a file into header lines and body.

    The header must open on the first line and close on a line that is
    exactly ``---``. The body is returned with surrounding whitespace
    trimmed. Files without a complete header are returned whole.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (header lines or None, body).

    Examples:
        >>> split_front_matter("---\\ndescription: x\\n---\\n\\nBody")
        (['description: x'], 'Body')

        >>> split_front_matter("Just a prompt")
        (None, 'Just a prompt')
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != DELIMITER:
        return None, text

    for index in range(1, len(lines)):
        if lines[index].strip() == DELIMITER:
            header = lines[1:index]
            body = "\n".join(lines[index + 1 :]).strip()
            return header, body

    # Unterminated header: treat the whole file as content
    return None, text


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_front_matter(header: list[str] | None) -> FrontMatter:
    """Parse header lines into a FrontMatter.

    Recognizes single-line ``key: value`` scalars and an indented list of
    quoted strings under ``globs:``. An inline ``globs: a, b`` scalar is
    split on commas. Unknown keys are ignored.

    Args:
        header: Lines between the delimiters, or None when absent.

    Returns:
        Parsed FrontMatter; defaults when header is None.
    """
    if header is None:
        return FrontMatter()

    result = FrontMatter(has_header=True)
    current_key = ""

    for line in header:
        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith("- "):
            if current_key == "globs":
                entry = _unquote(stripped[2:])
                if entry:
                    if result.globs is None:
                        result.globs = []
                    result.globs.append(entry)
            continue

        key, sep, value = stripped.partition(":")
        if not sep:
            continue
        current_key = key.strip()
        value = value.strip()

        if current_key == "description":
            result.description = value
        elif current_key == "alwaysApply":
            result.always_apply = value.lower() == "true"
        elif current_key == "globs" and value:
            patterns = [_unquote(p) for p in value.split(",")]
            result.globs = [p for p in patterns if p] or None

    return result


def infer_activation_mode(
    always_apply: bool, globs: list[str] | None, description: str
) -> ActivationMode:
    """Derive the normalized activation mode from Cursor rule fields.

    Priority: alwaysApply, then globs, then description, else manual.

    Examples:
        >>> infer_activation_mode(False, ["**/*.ts"], "TypeScript style")
        <ActivationMode.AUTO_ATTACH: 'auto_attach'>
    """
    if always_apply:
        return ActivationMode.ALWAYS
    if globs:
        return ActivationMode.AUTO_ATTACH
    if description:
        return ActivationMode.MODEL_DECISION
    return ActivationMode.MANUAL


def render_description_header(description: str, content: str) -> str:
    """Render a Claude Code command file.

    The header is omitted entirely when the description is empty.
    """
    if not description:
        return content
    return f"{DELIMITER}\ndescription: {description}\n{DELIMITER}\n\n{content}"


def render_rule_header(
    description: str,
    globs: list[str] | None,
    always_apply: bool,
    content: str,
) -> str:
    """Render a Cursor rule file.

    Fields are always emitted in the order description, globs (only when
    non-empty), alwaysApply. An empty globs list is therefore written like
    None and reads back as None.
    """
    lines = [DELIMITER, f"description: {description}"]
    if globs:
        lines.append("globs:")
        lines.extend(f'  - "{pattern}"' for pattern in globs)
    lines.append(f"alwaysApply: {'true' if always_apply else 'false'}")
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n\n" + content
