from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from src.planner.domain.exceptions import MalformedFragmentError
from src.planner.domain.models.fragment import Fragment, FragmentPayload, TaskFrontmatter
from src.planner.domain.models.task import Task
from src.planner.domain.models.task_tags import PROJECT_TAG_PREFIX, SOURCE_TAG


def project_tag(name: str) -> str:
    return f"{PROJECT_TAG_PREFIX}{name}"


class FragmentMapper:
    @staticmethod
    def to_payload(task: Task) -> FragmentPayload:
        """Encode a task as the payload sent to the workspace backend."""
        frontmatter = TaskFrontmatter(
            status=task.status,
            priority=task.priority,
            kanban_order=task.kanban_order,
            list_order=task.list_order,
            created_at=task.created_at,
            dependencies=list(task.dependencies),
            comments=list(task.comments),
            start_date=task.start_date,
            end_date=task.end_date,
            assignee_id=task.assignee_id,
            tracker_key=task.tracker_key,
            tracker_url=task.tracker_url,
        )
        return FragmentPayload(
            title=task.title,
            content=task.description,
            tags=FragmentMapper.to_fragment_tags(task.tags, task.projects),
            frontmatter=frontmatter.model_dump(by_alias=True, exclude_none=True, mode="json"),
        )

    @staticmethod
    def to_task(raw: dict[str, Any]) -> Task:
        """Decode a raw backend fragment; raises ``MalformedFragmentError``."""
        if not isinstance(raw, dict):
            raise MalformedFragmentError(f"expected an object, got {type(raw).__name__}")
        try:
            fragment = Fragment.model_validate(raw)
        except ValidationError as exc:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
            raise MalformedFragmentError(f"invalid fields: {fields}", raw.get("id")) from exc

        meta = fragment.frontmatter
        tags, projects = FragmentMapper.split_fragment_tags(fragment.tags)
        created_at = meta.created_at or fragment.created_at or fragment.updated_at or ""
        return Task(
            id=fragment.id,
            title=fragment.title,
            description=fragment.content,
            status=meta.status,
            priority=meta.priority,
            kanban_order=meta.kanban_order,
            list_order=meta.list_order,
            created_at=created_at,
            updated_at=fragment.updated_at or created_at,
            tags=tags,
            projects=projects,
            dependencies=list(meta.dependencies),
            comments=list(meta.comments),
            start_date=meta.start_date,
            end_date=meta.end_date,
            assignee_id=meta.assignee_id,
            tracker_key=meta.tracker_key,
            tracker_url=meta.tracker_url,
        )

    @staticmethod
    def to_fragment_tags(tags: list[str], projects: list[str]) -> list[str]:
        encoded = [SOURCE_TAG]
        encoded.extend(tags)
        encoded.extend(project_tag(name) for name in projects)
        return encoded

    @staticmethod
    def split_fragment_tags(fragment_tags: list[str]) -> tuple[list[str], list[str]]:
        tags: list[str] = []
        projects: list[str] = []
        for tag in fragment_tags:
            if tag == SOURCE_TAG:
                continue
            if tag.startswith(PROJECT_TAG_PREFIX):
                projects.append(tag[len(PROJECT_TAG_PREFIX):])
            else:
                tags.append(tag)
        return tags, projects
