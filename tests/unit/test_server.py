"""Tool-level tests: call @mcp.tool functions via FastMCP Client with a mocked API."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import pytest
import respx
from conftest import TEST_TOKEN, TEST_URL
from fastmcp import Client, FastMCP
from httpx import Response

from glcli.client import GitLabClient
from glcli.config import GitLabConfig
from glcli.services.gitlab import GitLabService

PROJECT = {"id": 1, "name": "a", "path_with_namespace": "g/a"}


def _make_mcp(*, read_only: bool = False) -> tuple[FastMCP, Any]:
    """Swap the real server's lifespan for one backed by a test config."""
    config = GitLabConfig(url=TEST_URL, token=TEST_TOKEN, projects=["g/a"], read_only=read_only)
    client = GitLabClient(config)

    @asynccontextmanager
    async def mock_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        try:
            yield {"service": GitLabService(client), "config": config}
        finally:
            await client.close()

    from glcli.servers.gitlab import mcp

    original_lifespan = mcp._lifespan
    mcp._lifespan = mock_lifespan
    return mcp, original_lifespan


@pytest.fixture
async def tool_client():
    mcp, original_lifespan = _make_mcp()
    with respx.mock(base_url=f"{TEST_URL}/api/v4", assert_all_called=False) as router:
        async with Client(mcp) as client:
            yield client, router
    mcp._lifespan = original_lifespan


@pytest.fixture
async def readonly_client():
    mcp, original_lifespan = _make_mcp(read_only=True)
    with respx.mock(base_url=f"{TEST_URL}/api/v4", assert_all_called=False) as router:
        async with Client(mcp) as client:
            yield client, router
    mcp._lifespan = original_lifespan


def _parse(result: Any) -> dict | list:
    """Extract JSON from a tool call result."""
    if hasattr(result, "content"):
        for item in result.content:
            if hasattr(item, "text"):
                return json.loads(item.text)
    if hasattr(result, "__iter__") and not isinstance(result, (str, dict)):
        for item in result:
            if hasattr(item, "text"):
                return json.loads(item.text)
    return json.loads(str(result))


def _mock_project(router: respx.MockRouter) -> None:
    router.get("/projects/g%2Fa").mock(return_value=Response(200, json=PROJECT))


# ═══════════════════════════════════════════════════════
# Projects & pipelines
# ═══════════════════════════════════════════════════════


class TestProjects:
    async def test_list_projects(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        router.get("/projects/1/pipelines").mock(
            return_value=Response(200, json=[{"id": 7, "status": "running"}])
        )
        parsed = _parse(await client.call_tool("glcli_list_projects", {}))
        assert parsed[0]["path_with_namespace"] == "g/a"
        assert parsed[0]["active_count"] == 1


class TestPipelines:
    async def test_list_all_tracked(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        router.get("/projects/1/pipelines").mock(
            return_value=Response(
                200, json=[{"id": 7, "ref": "main", "status": "failed", "created_at": None}]
            )
        )
        parsed = _parse(await client.call_tool("glcli_list_pipelines", {}))
        assert parsed[0]["id"] == 7
        assert parsed[0]["project_path"] == "g/a"
        assert parsed[0]["status"] == "failed"

    async def test_list_jobs(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        router.get("/projects/1/pipelines/7/jobs").mock(
            return_value=Response(200, json=[{"id": 42, "name": "test", "status": "failed"}])
        )
        router.get("/projects/1/pipelines/7/bridges").mock(return_value=Response(200, json=[]))
        parsed = _parse(
            await client.call_tool("glcli_list_jobs", {"project": "g/a", "pipeline_id": 7})
        )
        assert parsed == [
            {
                "id": 42,
                "pipeline_id": 7,
                "project_id": 1,
                "name": "test",
                "stage": "",
                "status": "failed",
                "web_url": "",
            }
        ]

    async def test_job_log_tail(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        router.get("/projects/1/jobs/42/trace").mock(
            return_value=Response(200, text="one\ntwo\nthree", headers={"content-type": "text/plain"})
        )
        parsed = _parse(
            await client.call_tool(
                "glcli_get_job_log", {"project": "g/a", "job_id": 42, "tail_lines": 2}
            )
        )
        assert parsed == {"log": "two\nthree", "total_lines": 3, "shown_lines": 2}

    async def test_retry_job(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        route = router.post("/projects/1/jobs/42/retry").mock(
            return_value=Response(201, json={"id": 43, "status": "pending", "pipeline": {"id": 7}})
        )
        parsed = _parse(await client.call_tool("glcli_retry_job", {"project": "g/a", "job_id": 42}))
        assert route.called
        assert parsed["id"] == 43


class TestReadOnlyMode:
    async def test_retry_blocked(self, readonly_client):
        client, router = readonly_client
        _mock_project(router)
        route = router.post("/projects/1/jobs/42/retry")
        parsed = _parse(await client.call_tool("glcli_retry_job", {"project": "g/a", "job_id": 42}))
        assert "read-only" in parsed["hint"].lower()
        assert not route.called

    async def test_read_still_works(self, readonly_client):
        client, router = readonly_client
        _mock_project(router)
        router.get("/projects/1/repository/commits").mock(
            return_value=Response(200, json=[{"short_id": "abc1234", "title": "Fix"}])
        )
        parsed = _parse(
            await client.call_tool("glcli_list_commits", {"project": "g/a", "ref": "main"})
        )
        assert parsed[0]["short_id"] == "abc1234"


# ═══════════════════════════════════════════════════════
# Merge requests
# ═══════════════════════════════════════════════════════


class TestMergeRequests:
    async def test_list_for_project(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        router.get("/projects/1/merge_requests").mock(
            return_value=Response(200, json=[{"id": 1003, "iid": 3, "title": "Add"}])
        )
        parsed = _parse(await client.call_tool("glcli_list_merge_requests", {"project": "g/a"}))
        assert parsed[0]["iid"] == 3
        assert parsed[0]["project_path"] == "g/a"

    async def test_get_with_diffs_and_notes(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        router.get("/projects/1/merge_requests/3").mock(
            return_value=Response(200, json={"id": 1003, "iid": 3, "title": "Add"})
        )
        router.get("/projects/1/merge_requests/3/diffs").mock(
            return_value=Response(200, json=[{"new_path": "a.py", "diff": "+x"}])
        )
        router.get("/projects/1/merge_requests/3/notes").mock(
            return_value=Response(200, json=[{"id": 1, "body": "LGTM"}])
        )
        parsed = _parse(
            await client.call_tool("glcli_get_merge_request", {"project": "g/a", "mr_iid": 3})
        )
        assert parsed["title"] == "Add"
        assert parsed["diffs"][0]["new_path"] == "a.py"
        assert parsed["notes"][0]["body"] == "LGTM"

    async def test_get_without_extras(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        router.get("/projects/1/merge_requests/3").mock(
            return_value=Response(200, json={"id": 1003, "iid": 3, "title": "Add"})
        )
        parsed = _parse(
            await client.call_tool(
                "glcli_get_merge_request",
                {"project": "g/a", "mr_iid": 3, "include_diffs": False, "include_notes": False},
            )
        )
        assert "diffs" not in parsed
        assert "notes" not in parsed


# ═══════════════════════════════════════════════════════
# Error hints
# ═══════════════════════════════════════════════════════


class TestErrorHints:
    async def test_not_found(self, tool_client):
        client, router = tool_client
        router.get("/projects/g%2Fnope").mock(
            return_value=Response(404, json={"message": "404 Project Not Found"})
        )
        parsed = _parse(
            await client.call_tool("glcli_list_commits", {"project": "g/nope", "ref": "main"})
        )
        assert parsed["status_code"] == 404
        assert "Verify" in parsed["hint"]

    async def test_auth_error(self, tool_client):
        client, router = tool_client
        router.get("/projects/g%2Fa").mock(
            return_value=Response(401, json={"message": "401 Unauthorized"})
        )
        parsed = _parse(
            await client.call_tool("glcli_list_commits", {"project": "g/a", "ref": "main"})
        )
        assert "GITLAB_TOKEN" in parsed["hint"]

    async def test_409_conflict_hint(self, tool_client):
        client, router = tool_client
        _mock_project(router)
        router.post("/projects/1/jobs/42/play").mock(
            return_value=Response(409, json={"message": "Job is not playable"})
        )
        parsed = _parse(await client.call_tool("glcli_play_job", {"project": "g/a", "job_id": 42}))
        assert parsed["status_code"] == 409
        assert "Conflict" in parsed["hint"]

    async def test_429_rate_limit_hint(self, tool_client):
        client, router = tool_client
        router.get("/projects/g%2Fa").mock(return_value=Response(429, text="Rate limit exceeded"))
        parsed = _parse(
            await client.call_tool("glcli_list_commits", {"project": "g/a", "ref": "main"})
        )
        assert parsed["status_code"] == 429
        assert "Rate" in parsed["hint"]
