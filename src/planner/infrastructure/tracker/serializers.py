from __future__ import annotations

import re
from typing import Any

from pydantic import ValidationError

from src.planner.domain.models.tracker import TrackerIssue, TrackerTransition

_SCHEME = re.compile(r"^https?://")
_CLOUD_SUFFIX = re.compile(r"\.atlassian\.net.*$")


def base_url(domain: str) -> str:
    """Build the tracker host from a site name, a host, or a full URL."""
    site = _CLOUD_SUFFIX.sub("", _SCHEME.sub("", domain.strip()))
    return f"https://{site}.atlassian.net"


def browse_url(domain: str, issue_key: str) -> str:
    return f"{base_url(domain)}/browse/{issue_key}"


def flatten_description(value: Any) -> str:
    """
    Flatten a description to plain text.

    Rich documents are nested ``{"content": [...]}`` nodes; every ``text`` found
    while walking them in document order is joined with single spaces.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        parts: list[str] = []
        _collect_text(value.get("content"), parts)
        if isinstance(value.get("text"), str):
            parts.insert(0, value["text"])
        return " ".join(parts).strip()
    return str(value)


def _collect_text(nodes: Any, parts: list[str]) -> None:
    if not isinstance(nodes, list):
        return
    for node in nodes:
        if not isinstance(node, dict):
            continue
        text = node.get("text")
        if isinstance(text, str):
            parts.append(text)
        _collect_text(node.get("content"), parts)


def _name(value: Any, key: str = "name") -> str | None:
    if isinstance(value, dict) and isinstance(value.get(key), str):
        return value[key]
    return None


def to_tracker_issue(data: dict[str, Any], domain: str) -> TrackerIssue:
    fields = data.get("fields") if isinstance(data.get("fields"), dict) else {}
    key = str(data.get("key", ""))
    parent = fields.get("parent") if isinstance(fields.get("parent"), dict) else {}
    parent_fields = parent.get("fields") if isinstance(parent.get("fields"), dict) else {}
    epic_name = parent_fields.get("summary")
    summary = fields.get("summary")
    return TrackerIssue(
        key=key,
        summary=summary if isinstance(summary, str) and summary else key,
        description=flatten_description(fields.get("description")),
        status_name=_name(fields.get("status")) or "Unknown",
        priority_name=_name(fields.get("priority")),
        issue_type=_name(fields.get("issuetype")),
        browse_url=browse_url(domain, key),
        project_key=_name(fields.get("project"), "key"),
        project_name=_name(fields.get("project")),
        assignee_email=_name(fields.get("assignee"), "emailAddress"),
        assignee_name=_name(fields.get("assignee"), "displayName"),
        epic_key=parent.get("key") if isinstance(parent.get("key"), str) else None,
        epic_name=epic_name if isinstance(epic_name, str) else None,
    )


def to_transitions(data: Any) -> list[TrackerTransition]:
    rows = data.get("transitions") if isinstance(data, dict) else None
    transitions: list[TrackerTransition] = []
    for row in rows or []:
        try:
            transitions.append(TrackerTransition.model_validate(row))
        except ValidationError:
            continue
    return transitions
