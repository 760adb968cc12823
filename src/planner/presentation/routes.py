from __future__ import annotations

import logging
from typing import cast

import inject
from fastapi import APIRouter, HTTPException, Path, Response
from pydantic import BaseModel, Field

from src.planner.application.services import TaskSyncService
from src.planner.domain.exceptions import (
    MalformedFragmentError,
    NotConfiguredError,
    TaskNotFoundError,
    TrackerError,
    TrackerNotFoundError,
    WorkspaceBackendError,
)
from src.planner.domain.models import (
    Task,
    TaskCreate,
    TaskUpdate,
    TrackerConfig,
    TrackerIssue,
    WorkspaceConfig,
)
from src.planner.domain.repositories import TrackerConfigRepository, WorkspaceConfigRepository

router = APIRouter(tags=["tasks"])
logger = logging.getLogger(__name__)

# Resolved once at import; the app module configures DI before importing this one.
_service = cast(TaskSyncService, inject.instance(TaskSyncService))
_tracker_config = cast(TrackerConfigRepository, inject.instance(TrackerConfigRepository))
_workspace_config = cast(WorkspaceConfigRepository, inject.instance(WorkspaceConfigRepository))


class TrackerConfigView(BaseModel):
    domain: str
    email: str
    has_token: bool = Field(description="Whether an API token is stored.")


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotConfiguredError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, (TaskNotFoundError, TrackerNotFoundError)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (TrackerError, WorkspaceBackendError, MalformedFragmentError)):
        logger.warning("Upstream failure", extra={"error": str(exc)})
        return HTTPException(status_code=502, detail=str(exc))
    logger.exception("Unexpected failure")
    return HTTPException(status_code=500)


@router.get("/tasks", response_model=list[Task], summary="List tasks of the active workspace")
async def list_tasks() -> list[Task]:
    try:
        return await _service.list_tasks()
    except Exception as exc:
        raise _http_error(exc) from exc


@router.post("/tasks", response_model=Task, status_code=201, summary="Create a task")
async def create_task(body: TaskCreate) -> Task:
    try:
        return await _service.create_task(body)
    except Exception as exc:
        raise _http_error(exc) from exc


@router.patch(
    "/tasks/{task_id}",
    response_model=Task,
    summary="Update a task",
    description=(
        "Applies the given fields. Status changes on tasks linked to the tracker are "
        "pushed to the tracker in the background; failures there are only logged."
    ),
)
async def update_task(task_id: str, body: TaskUpdate) -> Task:
    try:
        return await _service.update_task(task_id, body)
    except Exception as exc:
        raise _http_error(exc) from exc


@router.delete("/tasks/{task_id}", status_code=204, summary="Delete a task")
async def delete_task(task_id: str) -> Response:
    try:
        await _service.delete_task(task_id)
    except Exception as exc:
        raise _http_error(exc) from exc
    return Response(status_code=204)


@router.get(
    "/tracker/issues/{issue_key}", response_model=TrackerIssue, summary="Preview a tracker issue"
)
async def get_issue(
    issue_key: str = Path(..., min_length=1, description="Tracker issue key."),
) -> TrackerIssue:
    try:
        return await _service.get_issue(issue_key)
    except Exception as exc:
        raise _http_error(exc) from exc


@router.post(
    "/tracker/issues/{issue_key}/import",
    response_model=Task,
    summary="Import a tracker issue as a task",
    description="Idempotent: returns the already linked task when the issue was imported before.",
)
async def import_issue(
    issue_key: str = Path(..., min_length=1, description="Tracker issue key."),
) -> Task:
    try:
        return await _service.import_issue(issue_key)
    except Exception as exc:
        raise _http_error(exc) from exc


@router.get("/tracker/config", response_model=TrackerConfigView | None)
def get_tracker_config() -> TrackerConfigView | None:
    config = _tracker_config.get()
    if config is None:
        return None
    return TrackerConfigView(
        domain=config.domain, email=config.email, has_token=bool(config.api_token)
    )


@router.put("/tracker/config", status_code=204)
def set_tracker_config(body: TrackerConfig) -> Response:
    _tracker_config.set(body)
    return Response(status_code=204)


@router.delete("/tracker/config", status_code=204)
def clear_tracker_config() -> Response:
    _tracker_config.clear()
    return Response(status_code=204)


@router.get("/workspace/config", response_model=WorkspaceConfig | None)
def get_workspace_config() -> WorkspaceConfig | None:
    return _workspace_config.get()


@router.put("/workspace/config", status_code=204)
def set_workspace_config(body: WorkspaceConfig) -> Response:
    _workspace_config.set(body)
    return Response(status_code=204)
