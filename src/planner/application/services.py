from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import cast

import inject

from src.planner.application.cache import TaskCache
from src.planner.application.status_resolver import (
    priority_from_tracker,
    select_transition,
    status_from_tracker,
    target_status_names,
    transition_target_name,
)
from src.planner.domain.exceptions import (
    NoMatchingTransitionError,
    NotConfiguredError,
    TaskNotFoundError,
    TrackerError,
    WorkspaceBackendError,
)
from src.planner.domain.models import (
    FragmentFilter,
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    TrackerIssue,
    WorkspaceConfig,
)
from src.planner.domain.repositories import (
    FragmentRepository,
    MemberDirectoryRepository,
    TrackerRepository,
    WorkspaceConfigRepository,
)
from src.planner.infrastructure.fragments.mappers import SOURCE_TAG, FragmentMapper

logger = logging.getLogger(__name__)

TRACKER_TAG = "jira"
_REQUIRED_FIELDS = {
    "title",
    "description",
    "status",
    "priority",
    "kanban_order",
    "list_order",
    "tags",
    "projects",
    "dependencies",
    "comments",
}


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _issue_description(issue: TrackerIssue) -> str:
    link = f"[JIRA: {issue.key}]({issue.browse_url})"
    if issue.description:
        return f"{issue.description}\n\n---\n{link}"
    return link


def _issue_project(issue: TrackerIssue) -> str | None:
    return issue.epic_name or issue.epic_key or issue.project_name or issue.project_key


class TaskSyncService:
    """Local task mutations plus import from, and status propagation to, the issue tracker."""

    def __init__(
        self,
        cache: TaskCache | None = None,
        fragments: FragmentRepository | None = None,
        tracker: TrackerRepository | None = None,
        members: MemberDirectoryRepository | None = None,
        workspace_config: WorkspaceConfigRepository | None = None,
    ) -> None:
        self._cache = cache or cast(TaskCache, inject.instance(TaskCache))
        self._fragments = fragments or cast(FragmentRepository, inject.instance(FragmentRepository))
        self._tracker = tracker or cast(TrackerRepository, inject.instance(TrackerRepository))
        self._members = members or cast(
            MemberDirectoryRepository, inject.instance(MemberDirectoryRepository)
        )
        self._workspace_config = workspace_config or cast(
            WorkspaceConfigRepository, inject.instance(WorkspaceConfigRepository)
        )
        self._propagations: set[asyncio.Task[None]] = set()
        self._import_locks: dict[str, asyncio.Lock] = {}

    def _require_workspace(self) -> WorkspaceConfig:
        workspace = self._workspace_config.get()
        if workspace is None or not workspace.task_fragment_type_id:
            raise NotConfiguredError("Workspace or task fragment type")
        return workspace

    async def list_tasks(self) -> list[Task]:
        workspace = self._require_workspace()
        return await self._cache.get(workspace.workspace_id)

    async def get_task(self, task_id: str) -> Task:
        workspace = self._require_workspace()
        return await self._find_task(workspace.workspace_id, task_id)

    async def _find_task(self, workspace_id: str, task_id: str) -> Task:
        for task in await self._cache.get(workspace_id):
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    async def _written(self, workspace_id: str) -> None:
        self._cache.invalidate(workspace_id)
        await self._cache.notify_changed(workspace_id)

    async def _next_order(self, workspace_id: str) -> int:
        return await self._fragments.count_fragments(
            workspace_id, FragmentFilter(tags=[SOURCE_TAG])
        )

    async def _tracker_url(self, tracker_key: str | None) -> str | None:
        if not tracker_key:
            return None
        try:
            return await self._tracker.browse_url(tracker_key)
        except NotConfiguredError:
            return None

    # --- Local mutations ---

    async def create_task(self, data: TaskCreate) -> Task:
        workspace = self._require_workspace()
        order = await self._next_order(workspace.workspace_id)
        now = _now_iso()
        draft = Task(
            id="",
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            kanban_order=order,
            list_order=order,
            created_at=now,
            updated_at=now,
            tags=list(data.tags),
            projects=list(data.projects),
            start_date=data.start_date,
            end_date=data.end_date,
            assignee_id=data.assignee_id,
            tracker_key=data.tracker_key or None,
            tracker_url=await self._tracker_url(data.tracker_key),
        )
        fragment_id = await self._fragments.create_fragment(
            workspace.workspace_id,
            cast(str, workspace.task_fragment_type_id),
            FragmentMapper.to_payload(draft),
        )
        await self._written(workspace.workspace_id)
        return draft.model_copy(update={"id": fragment_id})

    async def update_task(self, task_id: str, changes: TaskUpdate) -> Task:
        """
        Apply ``changes`` to a task.

        A status change on a tracker-linked task schedules a detached status
        propagation; this call returns before the tracker is contacted.
        """
        workspace = self._require_workspace()
        current = await self._find_task(workspace.workspace_id, task_id)

        updates = {name: getattr(changes, name) for name in changes.model_fields_set}
        for name in _REQUIRED_FIELDS & updates.keys():
            if updates[name] is None:
                updates.pop(name)
        if "tracker_key" in updates:
            updates["tracker_key"] = updates["tracker_key"] or None
            updates["tracker_url"] = await self._tracker_url(updates["tracker_key"])
        updates["updated_at"] = _now_iso()

        updated = Task.model_validate({**current.model_dump(), **updates})
        await self._fragments.update_fragment(task_id, FragmentMapper.to_payload(updated))
        await self._written(workspace.workspace_id)

        if updated.status != current.status and updated.tracker_key:
            self.propagate_status(updated, updated.status)
        return updated

    async def delete_task(self, task_id: str) -> None:
        workspace = self._require_workspace()
        await self._find_task(workspace.workspace_id, task_id)
        await self._fragments.delete_fragment(task_id)
        await self._written(workspace.workspace_id)

    # --- Import path ---

    async def get_issue(self, issue_key: str) -> TrackerIssue:
        return await self._tracker.fetch_issue(issue_key.strip())

    async def import_issue(self, issue_key: str) -> Task:
        """
        Import a tracker issue as a task, or return the task already linked to it.

        The returned task is built from the fields sent to the backend; it is
        not re-read after creation.
        """
        workspace = self._require_workspace()
        issue = await self._tracker.fetch_issue(issue_key.strip())
        if issue.epic_key and not issue.epic_name:
            issue.epic_name = await self._resolve_epic_name(issue.epic_key)

        lock = self._import_locks.setdefault(workspace.workspace_id, asyncio.Lock())
        async with lock:
            return await self._import_locked(workspace, issue)

    async def _import_locked(self, workspace: WorkspaceConfig, issue: TrackerIssue) -> Task:
        for task in await self._cache.get(workspace.workspace_id):
            if task.tracker_key == issue.key:
                logger.info(
                    "Tracker issue already imported",
                    extra={"tracker_key": issue.key, "task_id": task.id},
                )
                return task

        order = await self._next_order(workspace.workspace_id)
        project = _issue_project(issue)
        now = _now_iso()
        draft = Task(
            id="",
            title=f"[{issue.key}] {issue.summary}",
            description=_issue_description(issue),
            status=status_from_tracker(issue.status_name),
            priority=priority_from_tracker(issue.priority_name),
            kanban_order=order,
            list_order=order,
            created_at=now,
            updated_at=now,
            tags=[TRACKER_TAG] + ([issue.project_key] if issue.project_key else []),
            projects=[project] if project else [],
            assignee_id=await self._match_assignee(workspace.workspace_id, issue.assignee_email),
            tracker_key=issue.key,
            tracker_url=issue.browse_url,
        )
        fragment_id = await self._fragments.create_fragment(
            workspace.workspace_id,
            cast(str, workspace.task_fragment_type_id),
            FragmentMapper.to_payload(draft),
        )
        await self._written(workspace.workspace_id)
        logger.info(
            "Imported tracker issue",
            extra={"tracker_key": issue.key, "task_id": fragment_id},
        )
        return draft.model_copy(update={"id": fragment_id})

    async def _resolve_epic_name(self, epic_key: str) -> str:
        try:
            epic = await self._tracker.fetch_issue(epic_key)
        except TrackerError as exc:
            logger.warning(
                "Could not resolve epic name, using its key",
                extra={"epic_key": epic_key, "error": str(exc)},
            )
            return epic_key
        return epic.summary or epic_key

    async def _match_assignee(self, workspace_id: str, email: str | None) -> str | None:
        wanted = _normalize_email(email)
        if not wanted:
            return None
        try:
            members = await self._members.list_members(workspace_id)
        except WorkspaceBackendError as exc:
            logger.warning(
                "Member lookup failed, leaving task unassigned",
                extra={"workspace_id": workspace_id, "error": str(exc)},
            )
            return None
        for member in members:
            if _normalize_email(member.email) == wanted:
                return member.user_id
        return None

    # --- Status propagation ---

    def propagate_status(self, task: Task, new_status: TaskStatus) -> asyncio.Task[None] | None:
        """
        Push a status change to the tracker without waiting for it.

        Returns the detached job (or ``None`` for tasks not linked to the
        tracker). Its outcome is only reported through logging.
        """
        if not task.tracker_key:
            return None
        job = asyncio.create_task(
            self._propagate(task.id, task.tracker_key, TaskStatus(new_status)),
            name=f"propagate-status-{task.tracker_key}",
        )
        self._propagations.add(job)
        job.add_done_callback(self._on_propagation_done)
        return job

    async def _propagate(self, task_id: str, tracker_key: str, status: TaskStatus) -> None:
        context = {"task_id": task_id, "tracker_key": tracker_key, "status": status.value}
        try:
            transitions = await self._tracker.list_transitions(tracker_key)
        except NotConfiguredError:
            logger.info("Tracker not configured, skipping status propagation", extra=context)
            return
        except TrackerError as exc:
            logger.warning(
                "Could not list tracker transitions", extra={**context, "error": str(exc)}
            )
            return

        available = [transition_target_name(t) for t in transitions]
        transition = select_transition(status, transitions)
        if transition is None:
            no_match = NoMatchingTransitionError(
                tracker_key, list(target_status_names(status)), available
            )
            logger.warning(str(no_match), extra={**context, "available": available})
            return

        try:
            await self._tracker.execute_transition(tracker_key, transition.id)
        except (NotConfiguredError, TrackerError) as exc:
            logger.warning(
                "Tracker transition failed",
                extra={
                    **context,
                    "transition_id": transition.id,
                    "available": available,
                    "error": str(exc),
                },
            )
            return
        logger.info(
            "Propagated status to tracker",
            extra={**context, "transition": transition_target_name(transition)},
        )

    def _on_propagation_done(self, job: asyncio.Task[None]) -> None:
        self._propagations.discard(job)
        if job.cancelled():
            return
        exc = job.exception()
        if exc is not None:
            logger.error(
                "Status propagation crashed",
                exc_info=(type(exc), exc, exc.__traceback__),
                extra={"job": job.get_name()},
            )

    async def aclose(self) -> None:
        """Wait for outstanding status propagations."""
        if self._propagations:
            await asyncio.gather(*list(self._propagations), return_exceptions=True)
