"""Shared test fixtures for glcli."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import respx

from glcli.client import GitLabClient
from glcli.config import GitLabConfig
from glcli.models.merge_requests import MergeRequest
from glcli.models.pipelines import Job, Pipeline
from glcli.models.projects import Project
from glcli.services.gitlab import GitLabService

TEST_URL = "https://gitlab.example.com"
TEST_TOKEN = "test-token"
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config(tmp_path) -> GitLabConfig:
    return GitLabConfig(
        url=TEST_URL,
        token=TEST_TOKEN,
        projects=["g/a", "g/b"],
        path=tmp_path / "glcli.yaml",
    )


@pytest.fixture
def client(config: GitLabConfig) -> GitLabClient:
    return GitLabClient(config)


@pytest.fixture
def service(client: GitLabClient) -> GitLabService:
    return GitLabService(client)


@pytest.fixture
def mock_api() -> respx.MockRouter:
    with respx.mock(base_url=f"{TEST_URL}/api/v4", assert_all_called=False) as router:
        yield router


def make_project(id: int = 1, path: str = "g/a") -> Project:
    return Project(id=id, name=path.rsplit("/", 1)[-1], path_with_namespace=path)


def make_pipeline(
    id: int = 7, project_id: int = 1, project_path: str = "g/a", ref: str = "main",
    status: str = "success", age_minutes: int = 0,
) -> Pipeline:  # fmt: skip
    return Pipeline(
        id=id,
        project_id=project_id,
        project_path=project_path,
        ref=ref,
        status=status,
        created_at=NOW - timedelta(minutes=age_minutes),
    )


def make_job(
    id: int = 42, pipeline_id: int = 7, project_id: int = 1, name: str = "test",
    stage: str = "test", status: str = "failed",
) -> Job:  # fmt: skip
    return Job(
        id=id, pipeline_id=pipeline_id, project_id=project_id, name=name, stage=stage, status=status
    )


def make_mr(
    iid: int = 3, project_id: int = 1, project_path: str = "g/a", title: str = "Add feature",
    state: str = "opened", author: str = "alice", source: str = "feature", target: str = "main",
) -> MergeRequest:  # fmt: skip
    return MergeRequest(
        id=1000 + iid,
        iid=iid,
        project_id=project_id,
        project_path=project_path,
        title=title,
        state=state,
        author=author,
        source_branch=source,
        target_branch=target,
        updated_at=NOW,
    )
