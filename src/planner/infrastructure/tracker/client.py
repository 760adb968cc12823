from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from src.planner.domain.exceptions import (
    NotConfiguredError,
    TrackerNotFoundError,
    TrackerRejectedError,
    TrackerUnreachableError,
)
from src.planner.domain.models.tracker import TrackerIssue, TrackerTransition, TransitionResult
from src.planner.domain.models.workspace import TrackerConfig
from src.planner.domain.repositories import TrackerConfigRepository, TrackerRepository
from src.planner.infrastructure.tracker.serializers import (
    base_url,
    browse_url,
    to_tracker_issue,
    to_transitions,
)

logger = logging.getLogger(__name__)


class JiraTrackerRepository(TrackerRepository):
    """
    Issue tracker access over the cloud REST API with Basic authentication.

    Credentials are read from the config store on every call so that edits made
    through the settings endpoint apply without a restart.
    """

    def __init__(
        self,
        config_store: TrackerConfigRepository,
        *,
        api_prefix: str = "/rest/api/3",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config_store = config_store
        self._api_prefix = api_prefix.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _require_config(self) -> TrackerConfig:
        config = self._config_store.get()
        if config is None:
            raise NotConfiguredError("Issue tracker")
        return config

    def _issue_path(self, issue_key: str, suffix: str = "") -> str:
        return f"{self._api_prefix}/issue/{quote(issue_key, safe='')}{suffix}"

    async def _request(
        self,
        config: TrackerConfig,
        issue_key: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=base_url(config.domain),
            auth=httpx.BasicAuth(config.email, config.api_token),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, json=json)
            except httpx.TransportError as exc:
                raise TrackerUnreachableError(issue_key, str(exc) or type(exc).__name__) from exc
        if response.status_code == 404:
            raise TrackerNotFoundError(issue_key)
        if response.is_error:
            raise TrackerRejectedError(issue_key, response.status_code, response.text)
        return response

    @staticmethod
    def _json(issue_key: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise TrackerRejectedError(issue_key, response.status_code, "invalid JSON") from exc

    async def fetch_issue(self, issue_key: str) -> TrackerIssue:
        config = self._require_config()
        response = await self._request(config, issue_key, "GET", self._issue_path(issue_key))
        data = self._json(issue_key, response)
        if not isinstance(data, dict):
            raise TrackerRejectedError(issue_key, response.status_code, "unexpected issue payload")
        return to_tracker_issue(data, config.domain)

    async def list_transitions(self, issue_key: str) -> list[TrackerTransition]:
        config = self._require_config()
        response = await self._request(
            config, issue_key, "GET", self._issue_path(issue_key, "/transitions")
        )
        return to_transitions(self._json(issue_key, response))

    async def execute_transition(self, issue_key: str, transition_id: str) -> TransitionResult:
        config = self._require_config()
        response = await self._request(
            config,
            issue_key,
            "POST",
            self._issue_path(issue_key, "/transitions"),
            json={"transition": {"id": transition_id}},
        )
        logger.info(
            "Tracker transition executed",
            extra={"issue_key": issue_key, "transition_id": transition_id},
        )
        return TransitionResult(
            issue_key=issue_key,
            transition_id=transition_id,
            status_code=response.status_code,
        )

    async def browse_url(self, issue_key: str) -> str:
        return browse_url(self._require_config().domain, issue_key)
