# commandsync/interfaces/api/schemas.py
"""Pydantic models for FastAPI request/response validation.

Defines request and response schemas for the command sync API endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from commandsync.core.commands.models import (
    ActivationMode,
    Command,
    CommandScope,
    Service,
)
from commandsync.core.commands.repository import SyncReport
from commandsync.core.sync.engine import ConflictResolution, SyncStrategy


class CommandResponse(BaseModel):
    """A command as seen by API clients.

    Attributes:
        linked_services: Other services holding the same logical command.
    """

    id: str
    name: str
    full_name: str
    description: str
    content: str
    scope: CommandScope
    namespace: str | None = None
    globs: list[str] | None = None
    activation_mode: ActivationMode
    source_service: Service
    last_modified: datetime
    project_path: str | None = None
    file_path: str | None = None
    linked_services: list[Service] = Field(default_factory=list)

    @classmethod
    def from_command(
        cls, command: Command, linked_services: list[Service] | None = None
    ) -> "CommandResponse":
        return cls(
            id=command.id,
            name=command.name,
            full_name=command.full_name,
            description=command.description,
            content=command.content,
            scope=command.scope,
            namespace=command.namespace,
            globs=command.globs,
            activation_mode=command.activation_mode,
            source_service=command.source_service,
            last_modified=command.last_modified,
            project_path=command.project_path,
            file_path=command.file_path,
            linked_services=linked_services or [],
        )


class CommandCreate(BaseModel):
    """Request body for POST /commands.

    One copy of the command is created in each selected service.
    """

    name: str = Field(..., description="Command name (letters, numbers, '-', '_')")
    description: str = ""
    content: str = ""
    scope: CommandScope = CommandScope.USER
    namespace: str | None = None
    globs: list[str] | None = None
    activation_mode: ActivationMode = ActivationMode.MANUAL
    project_path: str | None = Field(
        None, description="Project root, required for project scope"
    )
    services: list[Service] = Field(..., min_length=1)


class CreateFailure(BaseModel):
    service: Service
    error: str


class CommandCreateResponse(BaseModel):
    """Response body for POST /commands."""

    created: list[CommandResponse]
    failures: list[CreateFailure] = Field(default_factory=list)


class CommandUpdate(BaseModel):
    """Request body for PUT /commands/{id}.

    Omitted fields keep their current value. A new name renames the file.
    """

    name: str | None = None
    description: str | None = None
    content: str | None = None
    globs: list[str] | None = None
    activation_mode: ActivationMode | None = None

    @field_validator("name", "description", "content", "activation_mode", mode="before")
    @classmethod
    def _reject_null(cls, value):
        # Only globs may be cleared with null; the rest are omit-or-value
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ServicesUpdate(BaseModel):
    """Request body for PUT /commands/{id}/services."""

    services: list[Service] = Field(..., min_length=1)


class SyncRequest(BaseModel):
    """Request body for POST /commands/{id}/sync."""

    services: list[Service]


class SyncResultResponse(BaseModel):
    """Response body for POST /commands/{id}/sync.

    Attributes:
        started: False when another sync was already running.
    """

    started: bool
    written: list[CommandResponse] = Field(default_factory=list)


class SyncAllRequest(BaseModel):
    """Request body for POST /sync."""

    source: Service
    target: Service


class SyncReportResponse(BaseModel):
    """Response body for POST /sync."""

    started: bool
    source: Service
    target: Service
    synced: list[str] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_report(cls, report: SyncReport) -> "SyncReportResponse":
        return cls(
            started=True,
            source=report.source,
            target=report.target,
            synced=report.synced,
            failures={f.command_name: f.error for f in report.failures},
        )


class SyncConfig(BaseModel):
    """Sync engine configuration exposed at /sync/config."""

    sync_strategy: SyncStrategy
    conflict_resolution: ConflictResolution
    enabled_services: list[Service]


class SyncStatusResponse(SyncConfig):
    is_syncing: bool
    last_sync_date: datetime | None = None
    sync_error: str | None = None


class ServiceResponse(BaseModel):
    """Response item for GET /services."""

    service: Service
    display_name: str
    installed: bool
    user_commands_path: str | None = None
    user_command_count: int = 0


class ReloadResponse(BaseModel):
    count: int
    error: str | None = None


class ProjectLoadRequest(BaseModel):
    path: str = Field(..., description="Absolute path of the project root")


class RestoreRequest(BaseModel):
    path: str = Field(..., description="Command file to restore from its latest backup")


class RestoreResponse(BaseModel):
    restored: str
    backup: str
