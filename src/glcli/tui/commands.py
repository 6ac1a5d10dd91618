"""Commands: asynchronous work the controller asks the runtime to perform.

A command is plain data. :meth:`Command.run` performs it against the
data-access layer and returns exactly one completion message;
:meth:`Command.failed` builds the message posted when ``run`` raises.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from ..models.merge_requests import CreateMROptions
from ..services.gitlab import GitLabService
from . import messages as msg


@dataclass(frozen=True)
class Command:
    generation: int = field(default=0, kw_only=True)

    async def run(self, service: GitLabService) -> msg.Message:
        raise NotImplementedError

    def failed(self, error: Exception) -> msg.Message:
        return msg.LoadFailed(str(error), self.generation)


@dataclass(frozen=True)
class Mutation(Command):
    """A command that changes data on the server."""

    def failed(self, error: Exception) -> msg.Message:
        return msg.ActionFailed(str(error), self.generation)


@dataclass(frozen=True)
class LoadProjects(Command):
    paths: tuple[str, ...]

    async def run(self, service: GitLabService) -> msg.Message:
        projects = await service.load_projects(list(self.paths))
        return msg.ProjectsLoaded(tuple(projects), self.generation)


@dataclass(frozen=True)
class LoadAllPipelines(Command):
    paths: tuple[str, ...]
    limit: int

    async def run(self, service: GitLabService) -> msg.Message:
        pipelines = await service.load_all_pipelines(list(self.paths), self.limit)
        return msg.PipelinesLoaded(tuple(pipelines), self.generation)


@dataclass(frozen=True)
class LoadJobs(Command):
    project_id: int
    pipeline_id: int

    async def run(self, service: GitLabService) -> msg.Message:
        jobs = await service.list_jobs(self.project_id, self.pipeline_id)
        return msg.JobsLoaded(tuple(jobs), self.generation)


@dataclass(frozen=True)
class LoadLog(Command):
    project_id: int
    job_id: int
    job_name: str

    async def run(self, service: GitLabService) -> msg.Message:
        content = await service.get_log(self.project_id, self.job_id)
        return msg.LogLoaded(content, self.job_name, self.generation)


@dataclass(frozen=True)
class RunJobAction(Mutation):
    action: str
    project_id: int
    job_id: int

    async def run(self, service: GitLabService) -> msg.Message:
        actions = {
            "play": service.play_job,
            "retry": service.retry_job,
            "cancel": service.cancel_job,
        }
        job = await actions[self.action](self.project_id, self.job_id)
        return msg.JobActionDone(job, self.generation)


@dataclass(frozen=True)
class LoadMergeRequests(Command):
    paths: tuple[str, ...]
    state: str = "opened"

    async def run(self, service: GitLabService) -> msg.Message:
        mrs = await service.load_all_merge_requests(list(self.paths), self.state)
        return msg.MergeRequestsLoaded(tuple(mrs), self.generation)


@dataclass(frozen=True)
class LoadMRDetail(Command):
    project_id: int
    iid: int
    project_path: str = ""

    async def run(self, service: GitLabService) -> msg.Message:
        mr = await service.get_merge_request(self.project_id, self.iid, self.project_path)
        return msg.MRDetailLoaded(mr, self.generation)


@dataclass(frozen=True)
class LoadMRDiffs(Command):
    project_id: int
    iid: int

    async def run(self, service: GitLabService) -> msg.Message:
        diffs = await service.get_diffs(self.project_id, self.iid)
        return msg.MRDiffsLoaded(tuple(diffs), self.generation)


@dataclass(frozen=True)
class LoadMRNotes(Command):
    project_id: int
    iid: int

    async def run(self, service: GitLabService) -> msg.Message:
        notes = await service.list_notes(self.project_id, self.iid)
        return msg.MRNotesLoaded(tuple(notes), self.generation)


@dataclass(frozen=True)
class LoadCommits(Command):
    project_id: int
    ref: str

    async def run(self, service: GitLabService) -> msg.Message:
        commits = await service.list_commits(self.project_id, self.ref)
        return msg.CommitsLoaded(tuple(commits), self.generation)


@dataclass(frozen=True)
class ApproveMR(Mutation):
    project_id: int
    iid: int

    async def run(self, service: GitLabService) -> msg.Message:
        await service.approve_merge_request(self.project_id, self.iid)
        return msg.MRApproved(self.generation)


@dataclass(frozen=True)
class MergeMR(Mutation):
    project_id: int
    iid: int

    async def run(self, service: GitLabService) -> msg.Message:
        mr = await service.merge_merge_request(self.project_id, self.iid)
        return msg.MRMerged(mr, self.generation)


@dataclass(frozen=True)
class CreateMR(Command):
    project_path: str
    options: CreateMROptions

    async def run(self, service: GitLabService) -> msg.Message:
        mr = await service.create_merge_request_by_path(self.project_path, self.options)
        return msg.MRCreated(mr, self.generation)

    def failed(self, error: Exception) -> msg.Message:
        return msg.MRCreateFailed(str(error), self.generation)


@dataclass(frozen=True)
class SearchProjects(Command):
    query: str

    async def run(self, service: GitLabService) -> msg.Message:
        projects = await service.search_projects(self.query)
        return msg.ProjectSearchResults(tuple(projects), self.generation)


@dataclass(frozen=True)
class SearchBranches(Command):
    project_path: str
    query: str
    field: int

    async def run(self, service: GitLabService) -> msg.Message:
        branches = await service.search_branches_by_path(self.project_path, self.query)
        return msg.BranchSearchResults(self.field, self.query, tuple(branches), self.generation)

    def failed(self, error: Exception) -> msg.Message:
        # suggestions are best effort; an empty list closes the dropdown
        return msg.BranchSearchResults(self.field, self.query, (), self.generation)


@dataclass(frozen=True)
class ScheduleTick(Command):
    delay: float

    async def run(self, service: GitLabService) -> msg.Message:
        await asyncio.sleep(self.delay)
        return msg.Tick()


# Effects on the host rather than the data-access layer; the runtime
# performs these itself.


@dataclass(frozen=True)
class SaveConfig(Command):
    projects: tuple[str, ...]
    pipeline_limit: int


@dataclass(frozen=True)
class Quit(Command):
    pass
