# commandsync/interfaces/api/main.py
"""FastAPI application exposing the command repository and sync engine.

Provides a local REST API for listing, editing and synchronizing
commands across Claude Code, Cursor and Windsurf.
"""

import logging
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Load environment variables from .env file
load_dotenv()

from commandsync.config import settings  # noqa: E402
from commandsync.core.commands.errors import (  # noqa: E402
    AdapterNotFoundError,
    CommandIOError,
    CommandNotFoundError,
    CommandSyncError,
    CommandValidationError,
    NoBackupFoundError,
)
from commandsync.core.commands.models import (  # noqa: E402
    Command,
    CommandScope,
    Service,
)
from commandsync.core.factory import CommandSyncContext, build_context  # noqa: E402
from commandsync.core.sync.engine import SyncStrategy  # noqa: E402
from commandsync.interfaces.api.schemas import (  # noqa: E402
    CommandCreate,
    CommandCreateResponse,
    CommandResponse,
    CommandUpdate,
    CreateFailure,
    ProjectLoadRequest,
    ReloadResponse,
    RestoreRequest,
    RestoreResponse,
    ServiceResponse,
    ServicesUpdate,
    SyncAllRequest,
    SyncConfig,
    SyncReportResponse,
    SyncRequest,
    SyncResultResponse,
    SyncStatusResponse,
)
from commandsync.interfaces.api.security import (  # noqa: E402
    get_rate_limit_string,
    limiter,
    verify_api_key,
)
from commandsync.utils import (  # noqa: E402
    configure_structured_logging,
    set_request_id,
)

logger = logging.getLogger(__name__)

ApiKey = Annotated[str, Depends(verify_api_key)]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    configure_structured_logging(settings.log_level, json_output=settings.log_json)

    context = build_context()
    await context.repository.load_all()
    app.state.context = context
    logger.info("Loaded %d commands", len(context.repository.commands))

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="Command Sync API",
    description="REST API for keeping AI assistant commands in sync across tools",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def _validation_error_handler(
    request: Request, exc: CommandValidationError
) -> JSONResponse:
    return _error_response(400, exc)


async def _not_found_handler(request: Request, exc: CommandSyncError) -> JSONResponse:
    return _error_response(404, exc)


async def _internal_error_handler(
    request: Request, exc: CommandSyncError
) -> JSONResponse:
    logger.error("Request failed: %s", exc)
    return _error_response(500, exc)


app.add_exception_handler(CommandValidationError, _validation_error_handler)
app.add_exception_handler(CommandNotFoundError, _not_found_handler)
app.add_exception_handler(NoBackupFoundError, _not_found_handler)
app.add_exception_handler(AdapterNotFoundError, _internal_error_handler)
app.add_exception_handler(CommandIOError, _internal_error_handler)


@app.middleware("http")
async def request_id_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag every request with a correlation ID for the logs."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def get_context(request: Request) -> CommandSyncContext:
    """Get the component graph built at startup."""
    return request.app.state.context


Context = Annotated[CommandSyncContext, Depends(get_context)]


def _require_command(context: CommandSyncContext, command_id: str) -> Command:
    command = context.repository.get(command_id)
    if command is None:
        raise CommandNotFoundError(command_id)
    return command


def _to_response(context: CommandSyncContext, command: Command) -> CommandResponse:
    return CommandResponse.from_command(
        command, context.repository.synced_services(command)
    )


@app.get("/health")
@limiter.limit(get_rate_limit_string)
async def health_check(request: Request, context: Context) -> dict[str, Any]:
    """Health check endpoint.

    Returns:
        Dictionary with health status, command count and last load error.
    """
    repository = context.repository
    return {
        "status": "healthy",
        "commands": len(repository.commands),
        "error": repository.error,
    }


@app.get("/services", response_model=list[ServiceResponse])
@limiter.limit(get_rate_limit_string)
async def list_services(
    request: Request, context: Context, _api_key: ApiKey
) -> list[ServiceResponse]:
    """Re-run detection and describe every service."""
    detector = context.detector
    detector.refresh()
    responses = []
    for service in Service:
        info = detector.service_info[service]
        responses.append(
            ServiceResponse(
                service=service,
                display_name=service.display_name,
                installed=info.is_installed,
                user_commands_path=(
                    str(info.user_commands_path) if info.user_commands_path else None
                ),
                user_command_count=info.user_command_count,
            )
        )
    return responses


@app.get("/commands", response_model=list[CommandResponse])
@limiter.limit(get_rate_limit_string)
async def list_commands(
    request: Request,
    context: Context,
    _api_key: ApiKey,
    service: Service | None = None,
    scope: CommandScope | None = None,
    q: str = "",
) -> list[CommandResponse]:
    """List commands, optionally filtered by service, scope and a search query."""
    repository = context.repository
    if scope is not None:
        commands = repository.commands_for(service, scope)
    else:
        commands = sorted(
            (c for c in repository.commands if service is None or c.source_service is service),
            key=lambda c: c.name,
        )

    if q:
        matching_ids = {c.id for c in repository.search(q)}
        commands = [c for c in commands if c.id in matching_ids]

    return [_to_response(context, c) for c in commands]


@app.get("/commands/{command_id}", response_model=CommandResponse)
@limiter.limit(get_rate_limit_string)
async def get_command(
    request: Request, command_id: str, context: Context, _api_key: ApiKey
) -> CommandResponse:
    """Get a specific command by id."""
    return _to_response(context, _require_command(context, command_id))


@app.post("/commands", status_code=201, response_model=CommandCreateResponse)
@limiter.limit(get_rate_limit_string)
async def create_command(
    request: Request, cmd_request: CommandCreate, context: Context, _api_key: ApiKey
) -> CommandCreateResponse:
    """Create a command in each selected service.

    Each service is written independently. The request fails only when
    no copy could be created.

    Raises:
        CommandValidationError: If the name or scope fields are invalid.
        CommandIOError: If every write failed.
    """
    repository = context.repository
    created: list[Command] = []
    failures: list[CreateFailure] = []
    last_error: CommandSyncError | None = None

    for service in dict.fromkeys(cmd_request.services):
        command = Command(
            name=cmd_request.name,
            source_service=service,
            description=cmd_request.description,
            content=cmd_request.content,
            scope=cmd_request.scope,
            namespace=cmd_request.namespace,
            globs=cmd_request.globs,
            activation_mode=cmd_request.activation_mode,
            project_path=cmd_request.project_path,
        )
        try:
            created.append(await repository.add(command))
        except CommandValidationError:
            raise
        except CommandSyncError as e:
            logger.error("Failed to create '%s' in %s: %s", command.name, service.value, e)
            failures.append(CreateFailure(service=service, error=str(e)))
            last_error = e

    if not created and last_error is not None:
        raise last_error

    return CommandCreateResponse(
        created=[_to_response(context, c) for c in created],
        failures=failures,
    )


@app.put("/commands/{command_id}", response_model=CommandResponse)
@limiter.limit(get_rate_limit_string)
async def update_command(
    request: Request,
    command_id: str,
    cmd_request: CommandUpdate,
    context: Context,
    _api_key: ApiKey,
) -> CommandResponse:
    """Edit a command; a changed name renames its file.

    With the on_change sync strategy, a plain edit is pushed to the
    services that already hold the command.
    """
    repository = context.repository
    command = _require_command(context, command_id)
    linked = repository.synced_services(command)

    changes = cmd_request.model_dump(exclude_unset=True, exclude={"name"})
    edited = replace(command, **changes)

    if cmd_request.name is not None and cmd_request.name != command.name:
        saved = await repository.rename(edited, cmd_request.name)
    else:
        saved = await repository.update(edited)
        if context.engine.sync_strategy is SyncStrategy.ON_CHANGE and linked:
            await context.engine.sync_command(saved, linked)

    return _to_response(context, saved)


@app.delete("/commands/{command_id}", status_code=204)
@limiter.limit(get_rate_limit_string)
async def delete_command(
    request: Request,
    command_id: str,
    context: Context,
    _api_key: ApiKey,
    all_services: bool = False,
) -> Response:
    """Delete a command, optionally together with its copies in other services."""
    repository = context.repository
    command = _require_command(context, command_id)

    if all_services:
        await repository.delete_from_all_services(command)
    else:
        await repository.delete(command)

    return Response(status_code=204)


@app.put("/commands/{command_id}/services", response_model=list[CommandResponse])
@limiter.limit(get_rate_limit_string)
async def update_command_services(
    request: Request,
    command_id: str,
    services_request: ServicesUpdate,
    context: Context,
    _api_key: ApiKey,
) -> list[CommandResponse]:
    """Make exactly the selected services hold this command.

    Returns:
        Every copy of the command after the change.
    """
    repository = context.repository
    command = _require_command(context, command_id)

    await repository.update_command_services(command, services_request.services)

    copies = [c for c in repository.commands if c.is_same_command(command)]
    return [_to_response(context, c) for c in copies]


@app.post("/commands/{command_id}/sync", response_model=SyncResultResponse)
@limiter.limit(get_rate_limit_string)
async def sync_command(
    request: Request,
    command_id: str,
    sync_request: SyncRequest,
    context: Context,
    _api_key: ApiKey,
) -> SyncResultResponse:
    """Copy one command into the requested services."""
    command = _require_command(context, command_id)

    written = await context.engine.sync_command(command, sync_request.services)
    if written is None:
        return SyncResultResponse(started=False)

    return SyncResultResponse(
        started=True, written=[_to_response(context, c) for c in written]
    )


@app.post("/sync", response_model=SyncReportResponse)
@limiter.limit(get_rate_limit_string)
async def sync_all(
    request: Request, sync_request: SyncAllRequest, context: Context, _api_key: ApiKey
) -> SyncReportResponse:
    """Copy every command of one service into another."""
    report = await context.engine.sync_all(sync_request.source, sync_request.target)
    if report is None:
        return SyncReportResponse(
            started=False, source=sync_request.source, target=sync_request.target
        )
    return SyncReportResponse.from_report(report)


@app.post("/reload", response_model=ReloadResponse)
@limiter.limit(get_rate_limit_string)
async def reload_commands(
    request: Request, context: Context, _api_key: ApiKey
) -> ReloadResponse:
    """Re-detect services and reload user-scope commands from disk."""
    context.detector.refresh()
    repository = context.repository
    await repository.load_all()
    return ReloadResponse(count=len(repository.commands), error=repository.error)


@app.post("/projects", response_model=ReloadResponse)
@limiter.limit(get_rate_limit_string)
async def load_project(
    request: Request, project: ProjectLoadRequest, context: Context, _api_key: ApiKey
) -> ReloadResponse:
    """Load project-scope commands from a project root.

    Raises:
        HTTPException: 400 if the path is not a directory.
    """
    root = context.paths.expand_tilde(project.path)
    if not Path(root).is_dir():
        raise HTTPException(status_code=400, detail=f"Not a directory: {project.path}")

    repository = context.repository
    await repository.load_project_commands(root)
    return ReloadResponse(count=len(repository.commands), error=repository.error)


@app.get("/sync/config", response_model=SyncStatusResponse)
@limiter.limit(get_rate_limit_string)
async def get_sync_config(
    request: Request, context: Context, _api_key: ApiKey
) -> SyncStatusResponse:
    """Get the sync configuration and the state of the last sync."""
    return _sync_status(context)


def _sync_status(context: CommandSyncContext) -> SyncStatusResponse:
    engine = context.engine
    return SyncStatusResponse(
        sync_strategy=engine.sync_strategy,
        conflict_resolution=engine.conflict_resolution,
        enabled_services=sorted(engine.enabled_services, key=lambda s: s.value),
        is_syncing=engine.is_syncing,
        last_sync_date=engine.last_sync_date,
        sync_error=engine.sync_error,
    )


@app.put("/sync/config", response_model=SyncStatusResponse)
@limiter.limit(get_rate_limit_string)
async def update_sync_config(
    request: Request, config: SyncConfig, context: Context, _api_key: ApiKey
) -> SyncStatusResponse:
    """Replace the sync strategy, conflict policy and enabled services."""
    engine = context.engine
    engine.sync_strategy = config.sync_strategy
    engine.conflict_resolution = config.conflict_resolution
    for service in Service:
        engine.toggle_service(service, service in config.enabled_services)

    return _sync_status(context)


@app.post("/backups/restore", response_model=RestoreResponse)
@limiter.limit(get_rate_limit_string)
async def restore_backup(
    request: Request, restore: RestoreRequest, context: Context, _api_key: ApiKey
) -> RestoreResponse:
    """Restore a command file from its newest backup and reload."""
    original = context.paths.expand_tilde(restore.path)
    backup = context.backups.restore(original)
    await context.repository.load_all()
    return RestoreResponse(restored=str(original), backup=str(backup))
