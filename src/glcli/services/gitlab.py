"""Data-access layer: GitLab REST results mapped to glcli entity snapshots."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from ..client import GitLabClient
from ..exceptions import GitLabApiError, GitLabNotFoundError, GitLabWriteDisabledError
from ..models.merge_requests import CreateMROptions, MergeRequest, MRDiff, MRNote
from ..models.pipelines import Job, Pipeline
from ..models.projects import Project
from ..models.repositories import Commit

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

# failures that skip one project of an aggregate instead of aborting it
_PROJECT_ERRORS = (GitLabApiError, httpx.HTTPError)


def _newest_first(created_at: datetime | None) -> datetime:
    return created_at or _EPOCH


class GitLabService:
    """Every operation the terminal UI and the tool server consume.

    Aggregations over several tracked projects skip a project whose fetch
    fails and keep going; single-entity operations propagate errors.
    """

    def __init__(self, client: GitLabClient) -> None:
        self.client = client

    @property
    def read_only(self) -> bool:
        return self.client.config.read_only

    def _check_write(self) -> None:
        if self.read_only:
            raise GitLabWriteDisabledError

    # ── Projects ──────────────────────────────────────────────────

    async def resolve_project(self, path: str) -> Project:
        data = await self.client.get_project(path)
        return Project.from_api(data)

    async def load_projects(self, paths: list[str]) -> list[Project]:
        projects = []
        for path in paths:
            try:
                project = await self.resolve_project(path)
                pipelines = await self.list_pipelines(project.id)
            except _PROJECT_ERRORS as e:
                logger.warning("load_projects: skipping %s: %s", path, e)
                continue
            active = sum(1 for pl in pipelines if pl.status.is_active)
            projects.append(
                project.model_copy(
                    update={"pipeline_count": len(pipelines), "active_count": active}
                )
            )
        logger.debug("load_projects: %d projects", len(projects))
        return projects

    async def search_projects(self, query: str) -> list[Project]:
        results = await self.client.search_projects(query)
        logger.debug("search_projects: query=%r found %d", query, len(results))
        return [Project.from_api(p) for p in results]

    async def list_branches(self, project_id: int, query: str = "") -> list[str]:
        branches = await self.client.list_branches(project_id, search=query)
        return [b["name"] for b in branches]

    # ── Pipelines & jobs ──────────────────────────────────────────

    async def list_pipelines(self, project_id: int, project_path: str = "") -> list[Pipeline]:
        data = await self.client.list_pipelines(project_id)
        return [Pipeline.from_api(pl, project_id, project_path) for pl in data]

    async def load_all_pipelines(self, paths: list[str], limit: int) -> list[Pipeline]:
        pipelines: list[Pipeline] = []
        per_page = min(limit, 100) if limit > 0 else 20
        for path in paths:
            try:
                project = await self.resolve_project(path)
                data = await self.client.list_pipelines(project.id, per_page=per_page)
            except _PROJECT_ERRORS as e:
                logger.warning("load_all_pipelines: skipping %s: %s", path, e)
                continue
            logger.debug("load_all_pipelines: %s got %d pipelines", path, len(data))
            pipelines.extend(
                Pipeline.from_api(pl, project.id, project.path_with_namespace) for pl in data
            )

        pipelines.sort(key=lambda pl: _newest_first(pl.created_at), reverse=True)
        if limit > 0:
            pipelines = pipelines[:limit]
        return pipelines

    async def list_jobs(self, project_id: int, pipeline_id: int) -> list[Job]:
        data = await self.client.list_pipeline_jobs(project_id, pipeline_id)
        jobs = [Job.from_api(j, project_id, pipeline_id) for j in data]
        try:
            bridges = await self.client.list_pipeline_bridges(project_id, pipeline_id)
        except _PROJECT_ERRORS as e:
            logger.warning("list_jobs: bridges for pipeline %d unavailable: %s", pipeline_id, e)
        else:
            jobs.extend(Job.from_api(b, project_id, pipeline_id) for b in bridges)
        logger.debug("list_jobs: pipeline=%d total %d jobs", pipeline_id, len(jobs))
        return jobs

    async def get_log(self, project_id: int, job_id: int) -> str:
        return await self.client.get_job_log(project_id, job_id)

    async def play_job(self, project_id: int, job_id: int) -> Job:
        self._check_write()
        logger.info("play job %d in project %d", job_id, project_id)
        return Job.from_api(await self.client.play_job(project_id, job_id), project_id)

    async def retry_job(self, project_id: int, job_id: int) -> Job:
        self._check_write()
        logger.info("retry job %d in project %d", job_id, project_id)
        return Job.from_api(await self.client.retry_job(project_id, job_id), project_id)

    async def cancel_job(self, project_id: int, job_id: int) -> Job:
        self._check_write()
        logger.info("cancel job %d in project %d", job_id, project_id)
        return Job.from_api(await self.client.cancel_job(project_id, job_id), project_id)

    # ── Merge requests ────────────────────────────────────────────

    async def list_merge_requests(
        self, project_id: int, state: str = "opened", project_path: str = ""
    ) -> list[MergeRequest]:
        data = await self.client.list_merge_requests(project_id, state)
        return [MergeRequest.from_api(mr, project_id, project_path) for mr in data]

    async def load_all_merge_requests(
        self, paths: list[str], state: str = "opened"
    ) -> list[MergeRequest]:
        mrs: list[MergeRequest] = []
        for path in paths:
            try:
                project = await self.resolve_project(path)
                mrs.extend(
                    await self.list_merge_requests(project.id, state, project.path_with_namespace)
                )
            except _PROJECT_ERRORS as e:
                logger.warning("load_all_merge_requests: skipping %s: %s", path, e)
        mrs.sort(key=lambda mr: _newest_first(mr.updated_at), reverse=True)
        return mrs

    async def get_merge_request(
        self, project_id: int, iid: int, project_path: str = ""
    ) -> MergeRequest:
        data = await self.client.get_merge_request(project_id, iid)
        return MergeRequest.from_api(data, project_id, project_path or _path_from_refs(data))

    async def get_diffs(self, project_id: int, iid: int) -> list[MRDiff]:
        return [MRDiff.model_validate(d) for d in await self.client.list_mr_diffs(project_id, iid)]

    async def list_notes(self, project_id: int, iid: int) -> list[MRNote]:
        return [MRNote.from_api(n) for n in await self.client.list_mr_notes(project_id, iid)]

    async def approve_merge_request(self, project_id: int, iid: int) -> None:
        self._check_write()
        logger.info("approve !%d in project %d", iid, project_id)
        await self.client.approve_merge_request(project_id, iid)

    async def merge_merge_request(self, project_id: int, iid: int) -> MergeRequest:
        self._check_write()
        logger.info("merge !%d in project %d", iid, project_id)
        data = await self.client.merge_merge_request(project_id, iid)
        return MergeRequest.from_api(data, project_id, _path_from_refs(data))

    async def create_merge_request(
        self, project_id: int, opts: CreateMROptions, project_path: str = ""
    ) -> MergeRequest:
        self._check_write()
        logger.info(
            "create MR %s -> %s in project %d", opts.source_branch, opts.target_branch, project_id
        )
        data = await self.client.create_merge_request(project_id, opts.to_params())
        return MergeRequest.from_api(data, project_id, project_path or _path_from_refs(data))

    async def create_merge_request_by_path(
        self, project_path: str, opts: CreateMROptions
    ) -> MergeRequest:
        try:
            project = await self.resolve_project(project_path)
        except GitLabNotFoundError as e:
            msg = f"project {project_path!r} not found"
            raise GitLabNotFoundError(msg) from e
        return await self.create_merge_request(project.id, opts, project.path_with_namespace)

    async def search_branches_by_path(self, project_path: str, query: str) -> list[str]:
        project = await self.resolve_project(project_path)
        return await self.list_branches(project.id, query)

    # ── Commits ───────────────────────────────────────────────────

    async def list_commits(self, project_id: int, ref: str) -> list[Commit]:
        return [Commit.from_api(c) for c in await self.client.list_commits(project_id, ref)]


def _path_from_refs(data: dict) -> str:
    """Recover ``group/project`` from an MR's ``references.full`` (``group/project!12``)."""
    full = (data.get("references") or {}).get("full") or ""
    return full.rsplit("!", 1)[0]
