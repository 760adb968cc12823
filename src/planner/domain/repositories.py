from __future__ import annotations

from typing import Any, Protocol

from src.planner.domain.models.fragment import FragmentFilter, FragmentPayload
from src.planner.domain.models.tracker import TrackerIssue, TrackerTransition, TransitionResult
from src.planner.domain.models.workspace import TrackerConfig, WorkspaceConfig, WorkspaceMember


class FragmentRepository(Protocol):
    """Contract for the remote workspace backend that stores task fragments."""

    async def create_fragment(
        self, workspace_id: str, fragment_type_id: str, payload: FragmentPayload
    ) -> str:
        """Create a fragment and return the id assigned by the backend."""

    async def update_fragment(self, fragment_id: str, payload: FragmentPayload) -> None:
        """Replace the title, body, tags and frontmatter of a fragment."""

    async def delete_fragment(self, fragment_id: str) -> None:
        """Delete a fragment."""

    async def list_fragments(
        self, workspace_id: str, fragment_filter: FragmentFilter | None = None
    ) -> list[dict[str, Any]]:
        """Return raw fragments of a workspace, optionally filtered."""

    async def count_fragments(self, workspace_id: str, fragment_filter: FragmentFilter) -> int:
        """Count fragments matching ``fragment_filter``."""


class MemberDirectoryRepository(Protocol):
    async def list_members(self, workspace_id: str) -> list[WorkspaceMember]:
        """Return the members of a workspace."""


class TrackerRepository(Protocol):
    """Contract for the external issue tracker."""

    async def fetch_issue(self, issue_key: str) -> TrackerIssue:
        """Fetch and normalize a tracker issue."""

    async def list_transitions(self, issue_key: str) -> list[TrackerTransition]:
        """List the transitions currently available for an issue."""

    async def execute_transition(self, issue_key: str, transition_id: str) -> TransitionResult:
        """Move an issue through the given transition."""

    async def browse_url(self, issue_key: str) -> str:
        """Return the tracker UI link for an issue."""


class WorkspaceConfigRepository(Protocol):
    def get(self) -> WorkspaceConfig | None:
        """Return the active workspace configuration, if any."""

    def set(self, config: WorkspaceConfig) -> None:
        """Persist the active workspace configuration."""

    def clear(self) -> None:
        """Remove the workspace configuration."""


class TrackerConfigRepository(Protocol):
    def get(self) -> TrackerConfig | None:
        """Return tracker credentials, or ``None`` when not configured."""

    def set(self, config: TrackerConfig) -> None:
        """Persist tracker credentials."""

    def clear(self) -> None:
        """Remove tracker credentials."""
