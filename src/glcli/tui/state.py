"""Application state owned by the controller."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum

from ..models.merge_requests import MergeRequest
from ..models.pipelines import Job, Pipeline
from ..models.projects import Project
from .components import ConfirmDialog
from .views.commits import CommitsView
from .views.jobs import JobsView
from .views.log import LogView
from .views.merge_requests import MergeRequestsView
from .views.mr_create import MRCreateView
from .views.mr_detail import MRDetailView
from .views.pipelines import PipelinesView
from .views.projects import ProjectsView


class ViewID(Enum):
    PROJECTS = "projects"
    PIPELINES = "pipelines"
    JOBS = "jobs"
    LOG = "log"
    MERGE_REQUESTS = "merge_requests"
    MR_DETAIL = "mr_detail"
    MR_CREATE = "mr_create"
    COMMITS = "commits"


# top-level views reachable with tab/shift+tab
TABS = (ViewID.PROJECTS, ViewID.PIPELINES, ViewID.MERGE_REQUESTS)

# tab a sub-view belongs to
TAB_PARENT = {
    ViewID.JOBS: ViewID.PIPELINES,
    ViewID.LOG: ViewID.PIPELINES,
    ViewID.COMMITS: ViewID.PIPELINES,
    ViewID.MR_DETAIL: ViewID.MERGE_REQUESTS,
    ViewID.MR_CREATE: ViewID.MERGE_REQUESTS,
}

# where esc leads
BACK = {
    ViewID.PROJECTS: ViewID.PROJECTS,
    ViewID.PIPELINES: ViewID.PROJECTS,
    ViewID.JOBS: ViewID.PIPELINES,
    ViewID.LOG: ViewID.JOBS,
    ViewID.MERGE_REQUESTS: ViewID.PROJECTS,
    ViewID.MR_DETAIL: ViewID.MERGE_REQUESTS,
    ViewID.MR_CREATE: ViewID.MERGE_REQUESTS,
    ViewID.COMMITS: ViewID.PIPELINES,
}


def tab_of(view: ViewID) -> ViewID:
    return TAB_PARENT.get(view, view)


@dataclass
class AppState:
    """Everything the screen shows, plus the tracked-project settings.

    Sub-view and dialog objects are replaced with copies before the
    controller mutates them; entity snapshots inside are immutable.
    """

    projects: tuple[str, ...] = ()
    refresh_interval: float = 5.0
    pipeline_limit: int = 50

    view: ViewID = ViewID.PIPELINES
    breadcrumb: tuple[str, ...] = ()
    selected_project: Project | None = None
    selected_pipeline: Pipeline | None = None
    selected_job: Job | None = None
    selected_mr: MergeRequest | None = None

    projects_view: ProjectsView = field(default_factory=ProjectsView)
    pipelines_view: PipelinesView = field(default_factory=PipelinesView)
    jobs_view: JobsView = field(default_factory=JobsView)
    log_view: LogView = field(default_factory=LogView)
    merge_requests_view: MergeRequestsView = field(default_factory=MergeRequestsView)
    mr_detail_view: MRDetailView = field(default_factory=MRDetailView)
    mr_create_view: MRCreateView = field(default_factory=MRCreateView)
    commits_view: CommitsView = field(default_factory=CommitsView)
    confirm: ConfirmDialog | None = None

    width: int = 80
    height: int = 24
    loading: bool = False
    loading_status: str = ""
    error: str = ""
    generation: int = 0

    def copy(self) -> AppState:
        return copy.copy(self)

    def current_view(self):
        return {
            ViewID.PROJECTS: self.projects_view,
            ViewID.PIPELINES: self.pipelines_view,
            ViewID.JOBS: self.jobs_view,
            ViewID.LOG: self.log_view,
            ViewID.MERGE_REQUESTS: self.merge_requests_view,
            ViewID.MR_DETAIL: self.mr_detail_view,
            ViewID.MR_CREATE: self.mr_create_view,
            ViewID.COMMITS: self.commits_view,
        }[self.view]

    def is_input_mode(self) -> bool:
        view = self.current_view()
        return bool(getattr(view, "is_input_mode", lambda: False)())
