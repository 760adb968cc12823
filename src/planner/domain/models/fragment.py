from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.planner.domain.models.task_comment import TaskComment
from src.planner.domain.models.task_priority import TaskPriority
from src.planner.domain.models.task_status import TaskStatus


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class TaskFrontmatter(_WireModel):
    """Structured task fields stored beside the fragment body."""

    status: TaskStatus
    priority: TaskPriority = TaskPriority.MEDIUM
    kanban_order: float = 0
    list_order: float = 0
    created_at: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    comments: list[TaskComment] = Field(default_factory=list)
    start_date: str | None = None
    end_date: str | None = None
    assignee_id: str | None = None
    tracker_key: str | None = Field(default=None, alias="jiraKey")
    tracker_url: str | None = Field(default=None, alias="jiraUrl")


class FragmentPayload(_WireModel):
    title: str = Field(description="Fragment title.")
    content: str = Field(default="", description="Fragment body.")
    tags: list[str] = Field(default_factory=list, description="Fragment tags.")
    frontmatter: dict[str, Any] = Field(
        default_factory=dict, description="Serialized task frontmatter."
    )


class Fragment(_WireModel):
    id: str = Field(description="Identifier assigned by the backend.")
    title: str
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    frontmatter: TaskFrontmatter
    created_at: str | None = None
    updated_at: str | None = None


class FragmentFilter(_WireModel):
    fragment_type_id: str | None = None
    tags: list[str] = Field(default_factory=list)
