"""Tests for the GitLab data-access layer."""

from __future__ import annotations

import json

import httpx
import pytest

from glcli.exceptions import GitLabApiError, GitLabNotFoundError, GitLabWriteDisabledError
from glcli.models.merge_requests import CreateMROptions
from glcli.models.status import JobStatus, PipelineStatus


def _project(id: int, path: str) -> dict:
    return {"id": id, "name": path.rsplit("/", 1)[-1], "path_with_namespace": path}


def _pipeline(id: int, created: str, status: str = "success") -> dict:
    return {"id": id, "ref": "main", "status": status, "created_at": created}


class TestLoadAllPipelines:
    async def test_merges_newest_first(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(200, json=_project(1, "g/a")))
        mock_api.get("/projects/g%2Fb").mock(return_value=httpx.Response(200, json=_project(2, "g/b")))
        mock_api.get("/projects/1/pipelines").mock(
            return_value=httpx.Response(
                200,
                json=[_pipeline(10, "2024-05-01T10:00:00Z"), _pipeline(9, "2024-05-01T08:00:00Z")],
            )
        )
        mock_api.get("/projects/2/pipelines").mock(
            return_value=httpx.Response(200, json=[_pipeline(20, "2024-05-01T09:00:00Z")])
        )

        pipelines = await service.load_all_pipelines(["g/a", "g/b"], 50)

        assert [p.id for p in pipelines] == [10, 20, 9]
        assert pipelines[1].project_path == "g/b"
        assert pipelines[1].project_id == 2

    async def test_caps_at_limit(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(200, json=_project(1, "g/a")))
        route = mock_api.get("/projects/1/pipelines").mock(
            return_value=httpx.Response(
                200, json=[_pipeline(i, f"2024-05-01T{i:02d}:00:00Z") for i in range(1, 6)]
            )
        )

        pipelines = await service.load_all_pipelines(["g/a"], 3)

        assert [p.id for p in pipelines] == [5, 4, 3]
        assert route.calls.last.request.url.params["per_page"] == "3"

    async def test_per_page_capped_at_100(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(200, json=_project(1, "g/a")))
        route = mock_api.get("/projects/1/pipelines").mock(return_value=httpx.Response(200, json=[]))
        await service.load_all_pipelines(["g/a"], 200)
        assert route.calls.last.request.url.params["per_page"] == "100"

    async def test_skips_failing_project(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(404, text="Not Found"))
        mock_api.get("/projects/g%2Fb").mock(return_value=httpx.Response(200, json=_project(2, "g/b")))
        mock_api.get("/projects/2/pipelines").mock(
            return_value=httpx.Response(200, json=[_pipeline(20, "2024-05-01T09:00:00Z")])
        )

        pipelines = await service.load_all_pipelines(["g/a", "g/b"], 50)

        assert [p.id for p in pipelines] == [20]

    async def test_skips_project_on_timeout(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(side_effect=httpx.ReadTimeout("timed out"))
        mock_api.get("/projects/g%2Fb").mock(return_value=httpx.Response(200, json=_project(2, "g/b")))
        mock_api.get("/projects/2/pipelines").mock(
            return_value=httpx.Response(200, json=[_pipeline(20, "2024-05-01T09:00:00Z")])
        )

        pipelines = await service.load_all_pipelines(["g/a", "g/b"], 50)

        assert [p.id for p in pipelines] == [20]

    async def test_unknown_status_is_tolerated(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(200, json=_project(1, "g/a")))
        mock_api.get("/projects/1/pipelines").mock(
            return_value=httpx.Response(
                200, json=[_pipeline(1, "2024-05-01T09:00:00Z", status="brand_new_status")]
            )
        )
        [pipeline] = await service.load_all_pipelines(["g/a"], 50)
        assert pipeline.status is PipelineStatus.UNKNOWN


class TestLoadProjects:
    async def test_counts_active_pipelines(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(200, json=_project(1, "g/a")))
        mock_api.get("/projects/1/pipelines").mock(
            return_value=httpx.Response(
                200,
                json=[
                    _pipeline(3, "2024-05-01T10:00:00Z", "running"),
                    _pipeline(2, "2024-05-01T09:00:00Z", "pending"),
                    _pipeline(1, "2024-05-01T08:00:00Z", "failed"),
                ],
            )
        )

        [project] = await service.load_projects(["g/a"])

        assert project.pipeline_count == 3
        assert project.active_count == 2

    async def test_skips_failing_project(self, service, mock_api):
        mock_api.get("/projects/g%2Fmissing").mock(return_value=httpx.Response(404))
        assert await service.load_projects(["g/missing"]) == []

    async def test_skips_project_on_connect_error(self, service, mock_api):
        mock_api.get("/projects/g%2Fdown").mock(side_effect=httpx.ConnectError("down"))
        assert await service.load_projects(["g/down"]) == []


class TestJobs:
    async def test_includes_bridges(self, service, mock_api):
        mock_api.get("/projects/1/pipelines/7/jobs").mock(
            return_value=httpx.Response(
                200, json=[{"id": 42, "name": "test", "stage": "test", "status": "failed"}]
            )
        )
        mock_api.get("/projects/1/pipelines/7/bridges").mock(
            return_value=httpx.Response(
                200, json=[{"id": 43, "name": "deploy", "stage": "deploy", "status": "manual"}]
            )
        )

        jobs = await service.list_jobs(1, 7)

        assert [j.id for j in jobs] == [42, 43]
        assert all(j.pipeline_id == 7 for j in jobs)
        assert jobs[1].status is JobStatus.MANUAL

    async def test_bridge_failure_is_not_fatal(self, service, mock_api):
        mock_api.get("/projects/1/pipelines/7/jobs").mock(
            return_value=httpx.Response(200, json=[{"id": 42, "status": "success"}])
        )
        mock_api.get("/projects/1/pipelines/7/bridges").mock(
            return_value=httpx.Response(500, text="boom")
        )
        jobs = await service.list_jobs(1, 7)
        assert [j.id for j in jobs] == [42]

    async def test_jobs_failure_propagates(self, service, mock_api):
        mock_api.get("/projects/1/pipelines/7/jobs").mock(return_value=httpx.Response(500))
        with pytest.raises(GitLabApiError):
            await service.list_jobs(1, 7)

    async def test_retry(self, service, mock_api):
        route = mock_api.post("/projects/1/jobs/42/retry").mock(
            return_value=httpx.Response(
                201, json={"id": 99, "status": "pending", "pipeline": {"id": 7}}
            )
        )
        job = await service.retry_job(1, 42)
        assert route.called
        assert job.id == 99
        assert job.pipeline_id == 7

    async def test_read_only_blocks_actions(self, service, mock_api):
        service.client.config.read_only = True
        route = mock_api.post("/projects/1/jobs/42/play")
        with pytest.raises(GitLabWriteDisabledError):
            await service.play_job(1, 42)
        assert not route.called


class TestMergeRequests:
    async def test_aggregates_most_recent_first(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(200, json=_project(1, "g/a")))
        mock_api.get("/projects/g%2Fb").mock(return_value=httpx.Response(200, json=_project(2, "g/b")))
        mock_api.get("/projects/1/merge_requests").mock(
            return_value=httpx.Response(
                200,
                json=[{"id": 101, "iid": 1, "title": "old", "updated_at": "2024-04-01T00:00:00Z"}],
            )
        )
        mock_api.get("/projects/2/merge_requests").mock(
            return_value=httpx.Response(
                200,
                json=[{"id": 201, "iid": 5, "title": "new", "updated_at": "2024-05-01T00:00:00Z"}],
            )
        )

        mrs = await service.load_all_merge_requests(["g/a", "g/b"])

        assert [(mr.project_path, mr.iid) for mr in mrs] == [("g/b", 5), ("g/a", 1)]

    async def test_skips_project_on_connect_error(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(side_effect=httpx.ConnectError("down"))
        mock_api.get("/projects/g%2Fb").mock(return_value=httpx.Response(200, json=_project(2, "g/b")))
        mock_api.get("/projects/2/merge_requests").mock(
            return_value=httpx.Response(200, json=[{"id": 201, "iid": 5, "title": "new"}])
        )

        mrs = await service.load_all_merge_requests(["g/a", "g/b"])

        assert [(mr.project_path, mr.iid) for mr in mrs] == [("g/b", 5)]

    async def test_project_path_from_references(self, service, mock_api):
        mock_api.get("/projects/1/merge_requests/3").mock(
            return_value=httpx.Response(
                200,
                json={"id": 1003, "iid": 3, "references": {"full": "g/a!3"}, "state": "opened"},
            )
        )
        mr = await service.get_merge_request(1, 3)
        assert mr.project_path == "g/a"

    async def test_create_by_path_adds_draft_prefix(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(200, json=_project(1, "g/a")))
        route = mock_api.post("/projects/1/merge_requests").mock(
            return_value=httpx.Response(201, json={"id": 1009, "iid": 9, "title": "Draft: Add"})
        )
        opts = CreateMROptions(source_branch="feature", target_branch="main", title="Add", draft=True)

        mr = await service.create_merge_request_by_path("g/a", opts)

        body = json.loads(route.calls.last.request.content)
        assert body["title"] == "Draft: Add"
        assert "description" not in body
        assert mr.iid == 9
        assert mr.project_path == "g/a"

    async def test_create_by_path_unknown_project(self, service, mock_api):
        mock_api.get("/projects/g%2Fnope").mock(return_value=httpx.Response(404))
        opts = CreateMROptions(source_branch="feature", target_branch="main", title="Add")
        with pytest.raises(GitLabNotFoundError, match="g/nope"):
            await service.create_merge_request_by_path("g/nope", opts)

    async def test_notes_and_diffs(self, service, mock_api):
        mock_api.get("/projects/1/merge_requests/3/notes").mock(
            return_value=httpx.Response(
                200, json=[{"id": 1, "body": "LGTM", "author": {"username": "bob"}}]
            )
        )
        mock_api.get("/projects/1/merge_requests/3/diffs").mock(
            return_value=httpx.Response(200, json=[{"new_path": "a.py", "new_file": True}])
        )
        [note] = await service.list_notes(1, 3)
        [diff] = await service.get_diffs(1, 3)
        assert note.author == "bob"
        assert diff.label == "a.py (new)"

    async def test_merge_read_only(self, service):
        service.client.config.read_only = True
        with pytest.raises(GitLabWriteDisabledError):
            await service.merge_merge_request(1, 3)


class TestRepository:
    async def test_search_branches_by_path(self, service, mock_api):
        mock_api.get("/projects/g%2Fa").mock(return_value=httpx.Response(200, json=_project(1, "g/a")))
        mock_api.get("/projects/1/repository/branches").mock(
            return_value=httpx.Response(200, json=[{"name": "feature-x"}, {"name": "feature-y"}])
        )
        assert await service.search_branches_by_path("g/a", "feat") == ["feature-x", "feature-y"]

    async def test_list_commits(self, service, mock_api):
        mock_api.get("/projects/1/repository/commits").mock(
            return_value=httpx.Response(
                200, json=[{"id": "abcdef", "short_id": "abcdef1", "title": "Fix", "author_name": "A"}]
            )
        )
        [commit] = await service.list_commits(1, "main")
        assert commit.short_id == "abcdef1"
        assert commit.title == "Fix"
