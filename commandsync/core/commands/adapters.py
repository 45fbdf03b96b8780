# commandsync/core/commands/adapters.py
"""Per-service translation between Command and on-disk files.

Each adapter owns load, save and delete for one service:

- ClaudeCodeAdapter: markdown with an optional description header
- CursorAdapter: markdown/MDC rules with description, globs and alwaysApply
- WindsurfAdapter: plain markdown, one global file plus project rule files
"""

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from commandsync.core.commands.errors import CommandIOError
from commandsync.core.commands.models import (
    ActivationMode,
    Command,
    CommandScope,
    Service,
)
from commandsync.core.commands.parser import (
    infer_activation_mode,
    parse_front_matter,
    render_description_header,
    render_rule_header,
    split_front_matter,
)
from commandsync.core.commands.paths import PathResolver
from commandsync.utils.logging import command_fields

logger = logging.getLogger(__name__)

WINDSURF_GLOBAL_RULES_NAME = "global_rules"
WINDSURF_GLOBAL_DESCRIPTION = "Windsurf global rules"
WINDSURF_RULE_DESCRIPTION = "Windsurf rule"


@runtime_checkable
class ServiceAdapter(Protocol):
    """Protocol every service adapter implements.

    Loads never fail on missing locations (they return an empty list);
    unexpected filesystem faults raise CommandIOError.
    """

    service: Service

    async def load_user_commands(self) -> list[Command]:
        """Load every user-scope command for this service."""
        ...

    async def load_project_commands(self, project_root: Path | str) -> list[Command]:
        """Load every project-scope command under project_root."""
        ...

    async def save_command(self, command: Command) -> None:
        """Write command, creating parent directories as needed."""
        ...

    async def delete_command(self, command: Command) -> None:
        """Remove command's backing file; no-op when it has none."""
        ...

    def target_path(self, command: Command) -> Path:
        """Get the file save_command would write for command."""
        ...


def command_name_for(path: Path) -> str:
    """Derive a command name from its file, dropping extension and leading dot.

    Examples:
        >>> command_name_for(Path("/p/.claude/commands/review.md"))
        'review'
        >>> command_name_for(Path("/p/.cursorrules"))
        'cursorrules'
    """
    return path.stem.lstrip(".")


class FileAdapter:
    """Shared filesystem plumbing for the concrete adapters.

    Attributes:
        paths: PathResolver used for every location lookup.
    """

    service: Service

    def __init__(self, paths: PathResolver) -> None:
        self.paths = paths

    def _read(self, path: Path) -> tuple[str, datetime]:
        try:
            text = path.read_text(encoding="utf-8")
            modified = datetime.fromtimestamp(path.stat().st_mtime)
        except (OSError, UnicodeDecodeError) as e:
            raise CommandIOError(f"Failed to read {path}: {e}", path=str(path)) from e
        return text, modified

    def _list(self, directory: Path, extensions: tuple[str, ...]) -> list[Path]:
        if not directory.is_dir():
            return []
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            raise CommandIOError(
                f"Failed to list {directory}: {e}", path=str(directory)
            ) from e
        return [p for p in entries if p.is_file() and p.suffix.lstrip(".") in extensions]

    def _write(self, path: Path, text: str) -> datetime:
        """Write text atomically by renaming a sibling temp file into place."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
            return datetime.fromtimestamp(path.stat().st_mtime)
        except OSError as e:
            raise CommandIOError(f"Failed to write {path}: {e}", path=str(path)) from e

    def target_path(self, command: Command) -> Path:
        """Pick the file a save goes to.

        A command that was loaded from a file named after it is rewritten in
        place (keeping e.g. a ``.md`` rule or a legacy single file); anything
        else goes to the canonical location for its scope.
        """
        if command.file_path:
            existing = Path(command.file_path)
            if command_name_for(existing) == command.name:
                return existing
        return self.paths.command_file(
            self.service, command.scope, command.name, command.project_path
        )

    def _store(self, command: Command, path: Path, text: str) -> None:
        command.last_modified = self._write(path, text)
        command.file_path = str(path)
        logger.debug(
            "Saved %s command '%s' to %s",
            self.service.value,
            command.name,
            path,
            extra=command_fields(command, service=self.service),
        )

    async def delete_command(self, command: Command) -> None:
        """Delete the command's backing file.

        Args:
            command: Command to delete. A missing file_path is a no-op.

        Raises:
            CommandIOError: If the file exists but cannot be removed.
        """
        if not command.file_path:
            return
        try:
            os.remove(command.file_path)
        except FileNotFoundError:
            logger.debug("File already gone: %s", command.file_path)
        except OSError as e:
            raise CommandIOError(
                f"Failed to delete {command.file_path}: {e}", path=command.file_path
            ) from e
        logger.debug(
            "Deleted %s command '%s' at %s",
            self.service.value,
            command.name,
            command.file_path,
            extra=command_fields(command, service=self.service),
        )


class ClaudeCodeAdapter(FileAdapter):
    """Claude Code slash commands: ``.claude/commands/<name>.md``."""

    service = Service.CLAUDE_CODE

    async def load_user_commands(self) -> list[Command]:
        directory = self.paths.user_location(self.service).path
        return self._load_directory(directory, CommandScope.USER)

    async def load_project_commands(self, project_root: Path | str) -> list[Command]:
        directory = self.paths.project_location(self.service, project_root).path
        return self._load_directory(directory, CommandScope.PROJECT, str(project_root))

    def _load_directory(
        self, directory: Path, scope: CommandScope, project_path: str | None = None
    ) -> list[Command]:
        return [
            self.parse_file(path, scope, project_path)
            for path in self._list(directory, ("md",))
        ]

    def parse_file(
        self, path: Path, scope: CommandScope, project_path: str | None = None
    ) -> Command:
        text, modified = self._read(path)
        header, body = split_front_matter(text)
        front = parse_front_matter(header)
        return Command(
            name=command_name_for(path),
            source_service=self.service,
            description=front.description,
            content=body,
            scope=scope,
            activation_mode=ActivationMode.MANUAL,
            last_modified=modified,
            project_path=project_path,
            file_path=str(path),
        )

    async def save_command(self, command: Command) -> None:
        text = render_description_header(command.description, command.content)
        self._store(command, self.target_path(command), text)


class CursorAdapter(FileAdapter):
    """Cursor commands and rules.

    User commands live in ``~/.cursor/commands``; project rules live in
    ``.cursor/rules`` as ``.mdc`` files, with the legacy ``.cursorrules``
    file probed as well.
    """

    service = Service.CURSOR
    extensions = ("md", "mdc")

    async def load_user_commands(self) -> list[Command]:
        directory = self.paths.user_location(self.service).path
        return [
            self.parse_file(path, CommandScope.USER)
            for path in self._list(directory, self.extensions)
        ]

    async def load_project_commands(self, project_root: Path | str) -> list[Command]:
        project_path = str(project_root)
        rules_dir = self.paths.project_location(self.service, project_root).path
        commands = [
            self.parse_file(path, CommandScope.PROJECT, project_path)
            for path in self._list(rules_dir, self.extensions)
        ]

        legacy = self.paths.legacy_project_file(self.service, project_root)
        if legacy is not None and legacy.is_file():
            commands.append(self.parse_file(legacy, CommandScope.PROJECT, project_path))

        return commands

    def parse_file(
        self, path: Path, scope: CommandScope, project_path: str | None = None
    ) -> Command:
        text, modified = self._read(path)
        header, body = split_front_matter(text)
        front = parse_front_matter(header)
        return Command(
            name=command_name_for(path),
            source_service=self.service,
            description=front.description,
            content=body,
            scope=scope,
            globs=front.globs,
            activation_mode=infer_activation_mode(
                front.always_apply, front.globs, front.description
            ),
            last_modified=modified,
            project_path=project_path,
            file_path=str(path),
        )

    @staticmethod
    def serialize(command: Command) -> str:
        return render_rule_header(
            command.description,
            command.globs,
            command.activation_mode is ActivationMode.ALWAYS,
            command.content,
        )

    async def save_command(self, command: Command) -> None:
        self._store(command, self.target_path(command), self.serialize(command))


class WindsurfAdapter(FileAdapter):
    """Windsurf rules: plain markdown without front matter.

    All user rules share one global file, which is loaded as a single
    command named ``global_rules``.
    """

    service = Service.WINDSURF

    async def load_user_commands(self) -> list[Command]:
        path = self.paths.user_location(self.service).path
        if not path.is_file():
            return []

        text, modified = self._read(path)
        return [
            Command(
                name=WINDSURF_GLOBAL_RULES_NAME,
                source_service=self.service,
                description=WINDSURF_GLOBAL_DESCRIPTION,
                content=text,
                scope=CommandScope.USER,
                activation_mode=ActivationMode.ALWAYS,
                last_modified=modified,
                file_path=str(path),
            )
        ]

    async def load_project_commands(self, project_root: Path | str) -> list[Command]:
        project_path = str(project_root)
        commands: list[Command] = []

        legacy = self.paths.legacy_project_file(self.service, project_root)
        if legacy is not None and legacy.is_file():
            commands.append(self.parse_file(legacy, project_path))

        rules_dir = self.paths.project_location(self.service, project_root).path
        for path in self._list(rules_dir, ("md",)):
            commands.append(self.parse_file(path, project_path))

        return commands

    def parse_file(self, path: Path, project_path: str) -> Command:
        text, modified = self._read(path)
        return Command(
            name=command_name_for(path),
            source_service=self.service,
            description=WINDSURF_RULE_DESCRIPTION,
            content=text,
            scope=CommandScope.PROJECT,
            activation_mode=ActivationMode.ALWAYS,
            last_modified=modified,
            project_path=project_path,
            file_path=str(path),
        )

    def target_path(self, command: Command) -> Path:
        if command.scope is CommandScope.USER:
            return self.paths.user_location(self.service).path
        return super().target_path(command)

    async def save_command(self, command: Command) -> None:
        self._store(command, self.target_path(command), command.content)


def build_adapters(paths: PathResolver) -> dict[Service, ServiceAdapter]:
    """Create one adapter per service.

    Args:
        paths: PathResolver shared by every adapter.

    Returns:
        Mapping from Service to its adapter.
    """
    return {
        Service.CLAUDE_CODE: ClaudeCodeAdapter(paths),
        Service.CURSOR: CursorAdapter(paths),
        Service.WINDSURF: WindsurfAdapter(paths),
    }
