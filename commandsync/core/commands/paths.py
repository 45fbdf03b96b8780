# commandsync/core/commands/paths.py
"""Filesystem locations used by each service.

PathResolver holds no state beyond its two roots, so every lookup is a pure
function of (service, scope, project root).
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from commandsync.core.commands.models import CommandScope, Service

CLAUDE_BINARY_CANDIDATES = (
    "~/.claude/bin/claude",
    "~/.local/bin/claude",
    "/opt/homebrew/bin/claude",
    "/usr/local/bin/claude",
)


class LocationKind(str, Enum):
    """Whether a location is a directory of commands or one fixed file."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class CommandLocation:
    kind: LocationKind
    path: Path


class PathResolver:
    """Resolve where each service reads and writes its commands.

    Attributes:
        home: Home directory that user-scope paths are relative to.
        applications_dir: Directory holding installed app bundles.

    Example:
        >>> paths = PathResolver(home=Path("/home/dev"))
        >>> paths.user_location(Service.CLAUDE_CODE).path
        PosixPath('/home/dev/.claude/commands')
    """

    def __init__(
        self, home: Path | str | None = None, applications_dir: Path | str = "/Applications"
    ) -> None:
        self.home = Path(home).expanduser() if home else Path.home()
        self.applications_dir = Path(applications_dir)

    def expand_tilde(self, path: str) -> Path:
        """Expand a leading ``~`` against the configured home."""
        if path == "~":
            return self.home
        if path.startswith("~/"):
            return self.home / path[2:]
        return Path(path)

    # Detection markers

    def config_dir(self, service: Service) -> Path:
        if service is Service.CLAUDE_CODE:
            return self.home / ".claude"
        if service is Service.CURSOR:
            return self.home / ".cursor"
        return self.home / ".codeium"

    def app_bundle(self, service: Service) -> Path | None:
        if service is Service.CURSOR:
            return self.applications_dir / "Cursor.app"
        if service is Service.WINDSURF:
            return self.applications_dir / "Windsurf.app"
        return None

    @property
    def cursor_support_dir(self) -> Path:
        return self.home / "Library" / "Application Support" / "Cursor"

    def claude_binary_candidates(self) -> list[Path]:
        return [self.expand_tilde(candidate) for candidate in CLAUDE_BINARY_CANDIDATES]

    # Command locations

    def user_location(self, service: Service) -> CommandLocation:
        """Get where a service keeps its user-scope commands.

        Windsurf keeps every global rule in a single file; the other
        services use a directory of command files.
        """
        if service is Service.CLAUDE_CODE:
            return CommandLocation(LocationKind.DIRECTORY, self.home / ".claude" / "commands")
        if service is Service.CURSOR:
            return CommandLocation(LocationKind.DIRECTORY, self.home / ".cursor" / "commands")
        return CommandLocation(
            LocationKind.FILE,
            self.home / ".codeium" / "windsurf" / "memories" / "global_rules.md",
        )

    def project_location(self, service: Service, project_root: Path | str) -> CommandLocation:
        """Get the directory a service uses for project-scope commands."""
        root = Path(project_root)
        if service is Service.CLAUDE_CODE:
            path = root / ".claude" / "commands"
        elif service is Service.CURSOR:
            path = root / ".cursor" / "rules"
        else:
            path = root / ".windsurf" / "rules"
        return CommandLocation(LocationKind.DIRECTORY, path)

    def legacy_project_file(self, service: Service, project_root: Path | str) -> Path | None:
        """Get the single-file project convention that predates rule directories.

        Returns:
            Path to ``.cursorrules`` or ``.windsurfrules``; None for Claude Code.
        """
        root = Path(project_root)
        if service is Service.CURSOR:
            return root / ".cursorrules"
        if service is Service.WINDSURF:
            return root / ".windsurfrules"
        return None

    def command_file(
        self,
        service: Service,
        scope: CommandScope,
        name: str,
        project_root: Path | str | None = None,
    ) -> Path:
        """Get the canonical file a new command is written to.

        Args:
            service: Target service.
            scope: Command scope; project scope needs project_root.
            name: Validated command name.
            project_root: Project root for project-scope commands.

        Returns:
            Absolute path of the command file.

        Raises:
            ValueError: If scope is project and project_root is missing.
        """
        if scope is CommandScope.PROJECT:
            if project_root is None:
                raise ValueError("project_root is required for project scope")
            directory = self.project_location(service, project_root).path
            return directory / f"{name}.{service.file_extension}"

        location = self.user_location(service)
        if location.kind is LocationKind.FILE:
            return location.path
        # Cursor user commands are plain markdown, rules use .mdc
        extension = "md" if service is Service.CURSOR else service.file_extension
        return location.path / f"{name}.{extension}"
