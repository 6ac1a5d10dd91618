"""Pipeline and job models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import GitLabModel
from .status import JobStatus, PipelineStatus


class Pipeline(GitLabModel):
    id: int
    project_id: int
    project_path: str = ""
    ref: str = ""
    status: PipelineStatus = PipelineStatus.UNKNOWN
    created_at: datetime | None = None
    duration: float | None = None
    job_count: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any], project_id: int, project_path: str = "") -> Pipeline:
        return cls(
            id=data["id"],
            project_id=project_id,
            project_path=project_path,
            ref=data.get("ref") or "",
            status=data.get("status") or "unknown",
            created_at=data.get("created_at"),
            duration=data.get("duration"),
        )


class Job(GitLabModel):
    id: int
    pipeline_id: int = 0
    project_id: int = 0
    name: str = ""
    stage: str = ""
    status: JobStatus = JobStatus.UNKNOWN
    duration: float | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    web_url: str = ""

    @classmethod
    def from_api(
        cls, data: dict[str, Any], project_id: int, pipeline_id: int | None = None
    ) -> Job:
        if pipeline_id is None:
            pipeline_id = (data.get("pipeline") or {}).get("id", 0)
        return cls(
            id=data["id"],
            pipeline_id=pipeline_id,
            project_id=project_id,
            name=data.get("name") or "",
            stage=data.get("stage") or "",
            status=data.get("status") or "unknown",
            duration=data.get("duration"),
            started_at=data.get("started_at"),
            finished_at=data.get("finished_at"),
            web_url=data.get("web_url") or "",
        )
