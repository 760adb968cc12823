from __future__ import annotations

import logging
from typing import Any

import httpx

from src.planner.domain.exceptions import MalformedFragmentError, WorkspaceBackendError
from src.planner.domain.models.fragment import FragmentFilter, FragmentPayload
from src.planner.domain.models.workspace import WorkspaceMember
from src.planner.domain.repositories import FragmentRepository, MemberDirectoryRepository

logger = logging.getLogger(__name__)


class WorkspaceApiClient:
    """Shared async HTTP client for the workspace backend. Create once and close at shutdown."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            raise WorkspaceBackendError(f"Workspace backend unreachable: {exc}") from exc
        if response.is_error:
            logger.warning(
                "Workspace backend request failed",
                extra={"method": method, "path": path, "status": response.status_code},
            )
            raise WorkspaceBackendError(
                f"Workspace backend error {response.status_code}: "
                f"{response.text or response.reason_phrase}",
                status_code=response.status_code,
            )
        return response

    async def close(self) -> None:
        await self._http.aclose()


def _filter_params(workspace_id: str, fragment_filter: FragmentFilter | None) -> dict[str, Any]:
    params: dict[str, Any] = {"workspaceId": workspace_id}
    if fragment_filter is not None:
        if fragment_filter.fragment_type_id:
            params["fragmentTypeId"] = fragment_filter.fragment_type_id
        if fragment_filter.tags:
            params["tags"] = fragment_filter.tags
    return params


class HttpFragmentRepository(FragmentRepository):
    """Fragment CRUD against the workspace backend REST API."""

    def __init__(self, client: WorkspaceApiClient) -> None:
        self._client = client

    async def create_fragment(
        self, workspace_id: str, fragment_type_id: str, payload: FragmentPayload
    ) -> str:
        body = {
            "workspaceId": workspace_id,
            "fragmentTypeId": fragment_type_id,
            **payload.model_dump(by_alias=True),
        }
        response = await self._client.request("POST", "/memory-fragments", json=body)
        data = response.json()
        fragment_id = data.get("fragmentId") if isinstance(data, dict) else None
        if not isinstance(fragment_id, str) or not fragment_id:
            raise WorkspaceBackendError("Workspace backend did not return a fragment id")
        return fragment_id

    async def update_fragment(self, fragment_id: str, payload: FragmentPayload) -> None:
        await self._client.request(
            "PATCH", f"/memory-fragments/{fragment_id}", json=payload.model_dump(by_alias=True)
        )

    async def delete_fragment(self, fragment_id: str) -> None:
        await self._client.request("DELETE", f"/memory-fragments/{fragment_id}")

    async def list_fragments(
        self, workspace_id: str, fragment_filter: FragmentFilter | None = None
    ) -> list[dict[str, Any]]:
        response = await self._client.request(
            "GET", "/memory-fragments", params=_filter_params(workspace_id, fragment_filter)
        )
        data = response.json()
        fragments = data.get("fragments") if isinstance(data, dict) else data
        if not isinstance(fragments, list) or not all(isinstance(f, dict) for f in fragments):
            raise MalformedFragmentError("fragment list response is not a list of objects")
        return fragments

    async def count_fragments(self, workspace_id: str, fragment_filter: FragmentFilter) -> int:
        response = await self._client.request(
            "GET", "/memory-fragments/count", params=_filter_params(workspace_id, fragment_filter)
        )
        data = response.json()
        count = data.get("count") if isinstance(data, dict) else data
        if not isinstance(count, int):
            raise WorkspaceBackendError("Workspace backend returned an invalid count")
        return count


class HttpMemberDirectory(MemberDirectoryRepository):
    def __init__(self, client: WorkspaceApiClient) -> None:
        self._client = client

    async def list_members(self, workspace_id: str) -> list[WorkspaceMember]:
        response = await self._client.request("GET", f"/workspaces/{workspace_id}/members")
        data = response.json()
        rows = data.get("members", []) if isinstance(data, dict) else data
        members = []
        for row in rows or []:
            if not isinstance(row, dict) or not row.get("userId"):
                continue
            members.append(
                WorkspaceMember(
                    user_id=row["userId"],
                    email=row.get("email") or "",
                    name=row.get("name"),
                )
            )
        return members
