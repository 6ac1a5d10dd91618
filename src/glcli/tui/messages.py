"""Messages fed to the controller: input, completed commands, and view intents.

Completion messages echo the ``generation`` of the navigation that issued
the command so the controller can tell current results from late ones.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models.merge_requests import CreateMROptions, MergeRequest, MRDiff, MRNote
from ..models.pipelines import Job, Pipeline
from ..models.projects import Project
from ..models.repositories import Commit


class Message:
    """Marker base for everything the controller consumes."""


# ── Input ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class KeyPressed(Message):
    key: str


@dataclass(frozen=True)
class Resized(Message):
    width: int
    height: int


@dataclass(frozen=True)
class Tick(Message):
    pass


# ── Completions ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ProjectsLoaded(Message):
    projects: tuple[Project, ...]
    generation: int = 0


@dataclass(frozen=True)
class PipelinesLoaded(Message):
    pipelines: tuple[Pipeline, ...]
    generation: int = 0


@dataclass(frozen=True)
class JobsLoaded(Message):
    jobs: tuple[Job, ...]
    generation: int = 0


@dataclass(frozen=True)
class LogLoaded(Message):
    content: str
    job_name: str
    generation: int = 0


@dataclass(frozen=True)
class JobActionDone(Message):
    job: Job
    generation: int = 0


@dataclass(frozen=True)
class MergeRequestsLoaded(Message):
    merge_requests: tuple[MergeRequest, ...]
    generation: int = 0


@dataclass(frozen=True)
class MRDetailLoaded(Message):
    merge_request: MergeRequest
    generation: int = 0


@dataclass(frozen=True)
class MRDiffsLoaded(Message):
    diffs: tuple[MRDiff, ...]
    generation: int = 0


@dataclass(frozen=True)
class MRNotesLoaded(Message):
    notes: tuple[MRNote, ...]
    generation: int = 0


@dataclass(frozen=True)
class CommitsLoaded(Message):
    commits: tuple[Commit, ...]
    generation: int = 0


@dataclass(frozen=True)
class MRCreated(Message):
    merge_request: MergeRequest
    generation: int = 0


@dataclass(frozen=True)
class MRCreateFailed(Message):
    error: str
    generation: int = 0


@dataclass(frozen=True)
class MRApproved(Message):
    generation: int = 0


@dataclass(frozen=True)
class MRMerged(Message):
    merge_request: MergeRequest
    generation: int = 0


@dataclass(frozen=True)
class ProjectSearchResults(Message):
    projects: tuple[Project, ...]
    generation: int = 0


@dataclass(frozen=True)
class BranchSearchResults(Message):
    field: int
    query: str
    branches: tuple[str, ...] = ()
    generation: int = 0


@dataclass(frozen=True)
class ConfigSaved(Message):
    path: str
    generation: int = 0


@dataclass(frozen=True)
class LoadFailed(Message):
    error: str
    generation: int = 0


@dataclass(frozen=True)
class ActionFailed(Message):
    """A mutation failed; shown regardless of where the user has navigated."""

    error: str
    generation: int = 0


# ── View intents ──────────────────────────────────────────────────


@dataclass(frozen=True)
class ProjectSelected(Message):
    project: Project


@dataclass(frozen=True)
class ProjectSearchRequested(Message):
    query: str


@dataclass(frozen=True)
class ProjectAddRequested(Message):
    path: str


@dataclass(frozen=True)
class ProjectDeleteRequested(Message):
    path: str


@dataclass(frozen=True)
class MergeRequestsRequested(Message):
    pass


@dataclass(frozen=True)
class PipelineSelected(Message):
    pipeline: Pipeline


@dataclass(frozen=True)
class PipelineLimitCycled(Message):
    pass


@dataclass(frozen=True)
class CommitsRequested(Message):
    pipeline: Pipeline


@dataclass(frozen=True)
class JobSelected(Message):
    job: Job


@dataclass(frozen=True)
class JobActionRequested(Message):
    action: str
    job: Job


@dataclass(frozen=True)
class MRSelected(Message):
    merge_request: MergeRequest


@dataclass(frozen=True)
class MRRefreshRequested(Message):
    merge_request: MergeRequest


@dataclass(frozen=True)
class MRApproveRequested(Message):
    merge_request: MergeRequest


@dataclass(frozen=True)
class MRMergeRequested(Message):
    merge_request: MergeRequest


@dataclass(frozen=True)
class MRCreateRequested(Message):
    pass


@dataclass(frozen=True)
class MRCreateSubmitted(Message):
    project_path: str
    options: CreateMROptions


@dataclass(frozen=True)
class MRCreateCancelled(Message):
    pass


@dataclass(frozen=True)
class BranchSearchRequested(Message):
    project_path: str
    query: str
    field: int
