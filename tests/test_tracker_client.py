import base64
import json

import httpx
import pytest

from src.planner.domain.exceptions import (
    NotConfiguredError,
    TrackerNotFoundError,
    TrackerRejectedError,
    TrackerUnreachableError,
)
from src.planner.domain.models import TrackerConfig
from src.planner.infrastructure.tracker.client import JiraTrackerRepository
from src.planner.infrastructure.tracker.serializers import base_url, flatten_description
from tests.fakes import InMemoryConfigStore

ISSUE_PAYLOAD = {
    "key": "PROJ-9",
    "fields": {
        "summary": "Fix login redirect",
        "description": {
            "type": "doc",
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": "Users land"}]},
                {"type": "paragraph", "content": [{"type": "text", "text": "on a blank page."}]},
            ],
        },
        "status": {"name": "In Progress"},
        "priority": {"name": "High"},
        "issuetype": {"name": "Bug"},
        "project": {"key": "PROJ", "name": "Project Phoenix"},
        "assignee": {"emailAddress": "Jane@Co.com", "displayName": "Jane Doe"},
        "parent": {"key": "PROJ-1", "fields": {"summary": "Auth revamp"}},
    },
}


def _repository(handler, config: TrackerConfig | None = None) -> JiraTrackerRepository:
    store = InMemoryConfigStore(
        config or TrackerConfig(domain="acme", email="bot@acme.io", api_token="secret")
    )
    return JiraTrackerRepository(store, transport=httpx.MockTransport(handler))


def test_flatten_nested_document_joins_leaf_text() -> None:
    document = {"content": [{"content": [{"text": "a"}]}, {"text": "b"}]}

    assert flatten_description(document) == "a b"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        ("plain text", "plain text"),
        ({"type": "doc"}, ""),
        ({"content": [{"content": [{"content": [{"content": [{"text": "deep"}]}]}]}]}, "deep"),
        ({"content": ["junk", {"type": "hardBreak"}, {"text": "ok"}]}, "ok"),
    ],
)
def test_flatten_tolerates_shapes(value, expected: str) -> None:
    assert flatten_description(value) == expected


@pytest.mark.parametrize(
    "domain",
    ["acme", "acme.atlassian.net", "https://acme.atlassian.net/", "http://acme.atlassian.net/jira"],
)
def test_base_url_from_site_name(domain: str) -> None:
    assert base_url(domain) == "https://acme.atlassian.net"


@pytest.mark.asyncio
async def test_fetch_issue_normalizes_fields_and_uses_basic_auth() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=ISSUE_PAYLOAD)

    issue = await _repository(handler).fetch_issue("PROJ-9")

    request = seen[0]
    assert str(request.url) == "https://acme.atlassian.net/rest/api/3/issue/PROJ-9"
    expected = base64.b64encode(b"bot@acme.io:secret").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"
    assert issue.summary == "Fix login redirect"
    assert issue.description == "Users land on a blank page."
    assert issue.status_name == "In Progress"
    assert issue.priority_name == "High"
    assert issue.issue_type == "Bug"
    assert issue.browse_url == "https://acme.atlassian.net/browse/PROJ-9"
    assert (issue.project_key, issue.project_name) == ("PROJ", "Project Phoenix")
    assert issue.assignee_email == "Jane@Co.com"
    assert (issue.epic_key, issue.epic_name) == ("PROJ-1", "Auth revamp")


@pytest.mark.asyncio
async def test_fetch_issue_with_sparse_fields() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"key": "PROJ-2"})

    issue = await _repository(handler).fetch_issue("PROJ-2")

    assert issue.summary == "PROJ-2"
    assert issue.status_name == "Unknown"
    assert issue.description == ""
    assert issue.priority_name is None and issue.epic_key is None


@pytest.mark.asyncio
async def test_missing_config_fails_before_any_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    repository = JiraTrackerRepository(
        InMemoryConfigStore(None), transport=httpx.MockTransport(handler)
    )

    with pytest.raises(NotConfiguredError):
        await repository.fetch_issue("PROJ-9")
    with pytest.raises(NotConfiguredError):
        await repository.list_transitions("PROJ-9")
    with pytest.raises(NotConfiguredError):
        await repository.execute_transition("PROJ-9", "31")
    assert calls == []


@pytest.mark.asyncio
async def test_http_failures_map_to_tracker_errors() -> None:
    def not_found(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="Issue does not exist")

    def forbidden(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="nope")

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(TrackerNotFoundError):
        await _repository(not_found).fetch_issue("PROJ-404")
    with pytest.raises(TrackerRejectedError) as rejected:
        await _repository(forbidden).list_transitions("PROJ-9")
    assert rejected.value.status_code == 403
    with pytest.raises(TrackerUnreachableError):
        await _repository(unreachable).fetch_issue("PROJ-9")


@pytest.mark.asyncio
async def test_list_and_execute_transitions() -> None:
    posted: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/rest/api/3/issue/PROJ-9/transitions"
        if request.method == "GET":
            return httpx.Response(
                200,
                json={
                    "transitions": [
                        {"id": "11", "name": "Start", "to": {"id": "3", "name": "In Progress"}},
                        {"id": "31", "name": "Close"},
                        {"name": "missing id"},
                    ]
                },
            )
        posted.append(json.loads(request.content))
        return httpx.Response(204)

    repository = _repository(handler)
    transitions = await repository.list_transitions("PROJ-9")
    result = await repository.execute_transition("PROJ-9", "31")

    assert [(t.id, t.name) for t in transitions] == [("11", "Start"), ("31", "Close")]
    assert transitions[0].to is not None and transitions[0].to.name == "In Progress"
    assert posted == [{"transition": {"id": "31"}}]
    assert result.status_code == 204


@pytest.mark.asyncio
async def test_non_json_success_body_is_a_rejection() -> None:
    def login_page(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>login</html>")

    repository = _repository(login_page)

    with pytest.raises(TrackerRejectedError) as rejected:
        await repository.fetch_issue("PROJ-9")
    assert rejected.value.status_code == 200
    with pytest.raises(TrackerRejectedError):
        await repository.list_transitions("PROJ-9")
