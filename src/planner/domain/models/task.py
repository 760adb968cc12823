from pydantic import BaseModel, Field, field_validator

from src.planner.domain.models.task_comment import TaskComment
from src.planner.domain.models.task_priority import TaskPriority
from src.planner.domain.models.task_status import TaskStatus
from src.planner.domain.models.task_tags import check_user_tags


class Task(BaseModel):
    id: str = Field(description="Fragment identifier, stable for the task's lifetime.")
    title: str = Field(description="Task title.")
    description: str = Field(default="", description="Task description text.")
    status: TaskStatus = Field(description="Board column of the task.")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority.")
    kanban_order: float = Field(default=0, description="Position on the board.")
    list_order: float = Field(default=0, description="Position in the list view.")
    created_at: str = Field(description="ISO-8601 creation timestamp.")
    updated_at: str = Field(description="ISO-8601 timestamp assigned by the backend.")
    tags: list[str] = Field(default_factory=list, description="User tags.")
    projects: list[str] = Field(default_factory=list, description="Project names.")
    dependencies: list[str] = Field(
        default_factory=list, description="Ids of tasks this task depends on."
    )
    comments: list[TaskComment] = Field(default_factory=list, description="Task comments.")
    start_date: str | None = Field(default=None, description="Start date (YYYY-MM-DD).")
    end_date: str | None = Field(default=None, description="End date (YYYY-MM-DD).")
    assignee_id: str | None = Field(default=None, description="Assigned workspace user id.")
    tracker_key: str | None = Field(default=None, description="Linked tracker issue key.")
    tracker_url: str | None = Field(default=None, description="Browse URL of the linked issue.")

    @field_validator("tags")
    @classmethod
    def reject_reserved_tags(cls, tags):
        return check_user_tags(tags)
