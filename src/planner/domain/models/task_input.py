from pydantic import BaseModel, Field, field_validator

from src.planner.domain.models.task_comment import TaskComment
from src.planner.domain.models.task_priority import TaskPriority
from src.planner.domain.models.task_status import TaskStatus
from src.planner.domain.models.task_tags import check_user_tags


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, description="Task title.")
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    start_date: str | None = None
    end_date: str | None = None
    assignee_id: str | None = None
    tracker_key: str | None = None

    @field_validator("tags")
    @classmethod
    def reject_reserved_tags(cls, tags):
        return check_user_tags(tags)


class TaskUpdate(BaseModel):
    """Partial update; only fields explicitly set are applied, ``None`` clears optionals."""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    kanban_order: float | None = None
    list_order: float | None = None
    tags: list[str] | None = None
    projects: list[str] | None = None
    dependencies: list[str] | None = None
    comments: list[TaskComment] | None = None
    start_date: str | None = None
    end_date: str | None = None
    assignee_id: str | None = None
    tracker_key: str | None = None

    @field_validator("tags")
    @classmethod
    def reject_reserved_tags(cls, tags):
        return check_user_tags(tags)
