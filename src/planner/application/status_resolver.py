"""Name heuristics between task statuses/priorities and tracker status names."""

from __future__ import annotations

from collections.abc import Iterable

from src.planner.domain.models.task_priority import TaskPriority
from src.planner.domain.models.task_status import TaskStatus
from src.planner.domain.models.tracker import TrackerTransition

_DONE_NAMES = ("Done", "Closed", "Resolved", "Complete")

TRACKER_STATUS_NAMES: dict[TaskStatus, tuple[str, ...]] = {
    TaskStatus.TODO: ("To Do", "Open", "Backlog", "Selected for Development"),
    TaskStatus.IN_PROGRESS: ("In Progress", "In Development", "In Review"),
    TaskStatus.DONE: _DONE_NAMES,
    TaskStatus.ARCHIVED: _DONE_NAMES,
}

_IN_PROGRESS_HINTS = ("progress", "development", "review")
_DONE_HINTS = ("done", "closed", "resolved", "complete")


def target_status_names(status: TaskStatus) -> tuple[str, ...]:
    """Ranked tracker status names acceptable for ``status``."""
    return TRACKER_STATUS_NAMES[TaskStatus(status)]


def transition_target_name(transition: TrackerTransition) -> str:
    return transition.to.name if transition.to is not None else transition.name


def select_transition(
    status: TaskStatus, transitions: Iterable[TrackerTransition]
) -> TrackerTransition | None:
    """
    Pick the first transition, in tracker order, whose target status is acceptable.

    The ranked names only decide membership; ties are broken by the order the
    tracker returned the transitions in.
    """
    wanted = {name.lower() for name in target_status_names(status)}
    for transition in transitions:
        if transition_target_name(transition).lower() in wanted:
            return transition
    return None


def status_from_tracker(status_name: str) -> TaskStatus:
    lower = status_name.lower()
    if any(hint in lower for hint in _IN_PROGRESS_HINTS):
        return TaskStatus.IN_PROGRESS
    if any(hint in lower for hint in _DONE_HINTS):
        return TaskStatus.DONE
    return TaskStatus.TODO


def priority_from_tracker(priority_name: str | None) -> TaskPriority:
    if not priority_name:
        return TaskPriority.MEDIUM
    lower = priority_name.lower()
    if "highest" in lower or "critical" in lower or lower == "urgent":
        return TaskPriority.URGENT
    if "high" in lower:
        return TaskPriority.HIGH
    if "low" in lower:
        return TaskPriority.LOW
    return TaskPriority.MEDIUM
