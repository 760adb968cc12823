from src.planner.domain.models.fragment import (
    Fragment,
    FragmentFilter,
    FragmentPayload,
    TaskFrontmatter,
)
from src.planner.domain.models.task import Task
from src.planner.domain.models.task_comment import TaskComment
from src.planner.domain.models.task_input import TaskCreate, TaskUpdate
from src.planner.domain.models.task_priority import TaskPriority
from src.planner.domain.models.task_status import TaskStatus
from src.planner.domain.models.tracker import (
    TrackerIssue,
    TrackerTransition,
    TrackerTransitionTarget,
    TransitionResult,
)
from src.planner.domain.models.workspace import TrackerConfig, WorkspaceConfig, WorkspaceMember

__all__ = [
    "Task",
    "TaskStatus",
    "TaskPriority",
    "TaskComment",
    "TaskCreate",
    "TaskUpdate",
    "Fragment",
    "FragmentFilter",
    "FragmentPayload",
    "TaskFrontmatter",
    "TrackerIssue",
    "TrackerTransition",
    "TrackerTransitionTarget",
    "TransitionResult",
    "TrackerConfig",
    "WorkspaceConfig",
    "WorkspaceMember",
]
