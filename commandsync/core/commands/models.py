# commandsync/core/commands/models.py
"""Command data model shared by every service adapter.

This module defines the Command dataclass, the service/scope/activation
enums, the command name predicate and the cross-service matching rule.
"""

import os
import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from commandsync.core.commands.errors import CommandValidationError

_NAME_PATTERN = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9_-]*[A-Za-z0-9])?")


class Service(str, Enum):
    """AI coding tools whose command files are kept in sync."""

    CLAUDE_CODE = "claude"
    CURSOR = "cursor"
    WINDSURF = "windsurf"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def file_extension(self) -> str:
        """Extension of newly written command files (without the dot)."""
        return "mdc" if self is Service.CURSOR else "md"


_DISPLAY_NAMES = {
    Service.CLAUDE_CODE: "Claude Code",
    Service.CURSOR: "Cursor",
    Service.WINDSURF: "Windsurf",
}


class CommandScope(str, Enum):
    """Whether a command is global to the host or bound to one project."""

    USER = "user"
    PROJECT = "project"


class ActivationMode(str, Enum):
    """Normalized trigger semantic across every service schema."""

    ALWAYS = "always"
    MANUAL = "manual"
    AUTO_ATTACH = "auto_attach"
    MODEL_DECISION = "model_decision"


def is_valid_name(name: str) -> bool:
    """Check whether a command name can be used as a file name.

    Names use letters, digits, dashes and underscores, and must start and
    end with a letter or digit.

    Examples:
        >>> is_valid_name("review-pr")
        True
        >>> is_valid_name("-draft")
        False
        >>> is_valid_name("a")
        True
    """
    return bool(name) and _NAME_PATTERN.fullmatch(name) is not None


def validate_name(name: str) -> None:
    """Raise CommandValidationError when name is not a legal command name."""
    if not is_valid_name(name):
        raise CommandValidationError(
            f"Invalid command name '{name}': use letters, numbers, '-' or '_', "
            "starting and ending with a letter or number"
        )


def _normalize_project_path(path: str | None) -> str | None:
    if path is None:
        return None
    return os.path.normpath(os.path.expanduser(path))


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Command:
    """A reusable prompt snippet, independent of its on-disk format.

    Attributes:
        name: Invocation token, also the file name without extension.
        source_service: Service whose adapter owns this on-disk copy.
        description: Free text; drives Cursor activation inference.
        content: The prompt body.
        scope: User (global) or Project (bound to project_path).
        namespace: Optional cosmetic prefix shown as ``namespace:name``.
        globs: File patterns, only meaningful for Cursor rules.
        activation_mode: Normalized trigger semantic.
        last_modified: File modification time at load, or creation time.
        project_path: Project root, required for project scope.
        file_path: Backing file; None until the command has been saved.
        id: Local identifier, never shared between services.

    Example:
        >>> cmd = Command(name="review", source_service=Service.CLAUDE_CODE,
        ...               content="Review the staged diff.")
        >>> cmd.full_name
        'review'
    """

    name: str
    source_service: Service
    description: str = ""
    content: str = ""
    scope: CommandScope = CommandScope.USER
    namespace: str | None = None
    globs: list[str] | None = None
    activation_mode: ActivationMode = ActivationMode.MANUAL
    last_modified: datetime = field(default_factory=datetime.now)
    project_path: str | None = None
    file_path: str | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if self.scope is CommandScope.PROJECT and not self.project_path:
            raise CommandValidationError(
                f"Project command '{self.name}' requires a project path",
                field="project_path",
            )

    @property
    def full_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}:{self.name}"
        return self.name

    def match_key(self) -> tuple[str, CommandScope, str | None, str | None]:
        """Fields that identify the same logical command across services."""
        project = (
            _normalize_project_path(self.project_path)
            if self.scope is CommandScope.PROJECT
            else None
        )
        return (self.name, self.scope, self.namespace, project)

    def is_same_command(self, other: "Command") -> bool:
        """Check whether other is the same logical command.

        Name, scope and namespace must be equal, and project commands must
        belong to the same project. The owning service is ignored.
        """
        return self.match_key() == other.match_key()

    def retarget(self, service: Service) -> "Command":
        """Copy this command for another service.

        The copy gets a fresh id and no backing file, so saving it writes to
        the target service's canonical location.
        """
        return replace(
            self,
            source_service=service,
            globs=list(self.globs) if self.globs is not None else None,
            file_path=None,
            id=_new_id(),
        )
