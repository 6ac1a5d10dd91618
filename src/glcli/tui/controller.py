"""The navigation state machine.

:func:`update` is a pure reducer: it takes the current :class:`AppState` and
one message and returns a new state plus the commands to run. The input
state is never modified; every sub-view or dialog that changes is copied
first.

Each navigation bumps ``state.generation``. Commands are stamped with the
generation current when they were issued and their completions echo it.
Data from any generation is applied to the view it targets unless that view
has since been pointed at a different pipeline, job, ref or merge request.
Only a completion of the current generation clears the loading flag and the
error banner, and a failed load from an earlier generation is dropped.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable

from ..config import GitLabConfig, next_pipeline_limit
from . import commands as cmd
from . import keymap
from . import messages as msg
from .components import ConfirmDialog, ConfirmResult
from .state import BACK, TABS, AppState, ViewID, tab_of
from .views.mr_detail import CAPTURED_KEYS as MR_DETAIL_KEYS

logger = logging.getLogger(__name__)

Commands = list[cmd.Command]
Handler = Callable[[AppState, msg.Message], Commands]

_HANDLERS: dict[type[msg.Message], Handler] = {}

JOB_ACTION_LABELS = {"play": "Run", "retry": "Retry", "cancel": "Cancel"}

_VIEW_ATTRS = {
    ViewID.PROJECTS: "projects_view",
    ViewID.PIPELINES: "pipelines_view",
    ViewID.JOBS: "jobs_view",
    ViewID.LOG: "log_view",
    ViewID.MERGE_REQUESTS: "merge_requests_view",
    ViewID.MR_DETAIL: "mr_detail_view",
    ViewID.MR_CREATE: "mr_create_view",
    ViewID.COMMITS: "commits_view",
}

_CAPTURED_KEYS = {ViewID.MR_DETAIL: MR_DETAIL_KEYS}


def handles(*types: type[msg.Message]) -> Callable[[Handler], Handler]:
    def register(func: Handler) -> Handler:
        for message_type in types:
            _HANDLERS[message_type] = func
        return func

    return register


def init(config: GitLabConfig) -> tuple[AppState, Commands]:
    """Initial state: the aggregate Pipelines view, loading, with the first tick queued."""
    state = AppState(
        projects=tuple(config.projects),
        refresh_interval=config.refresh_interval,
        pipeline_limit=config.pipeline_limit,
    )
    state.pipelines_view.limit = config.pipeline_limit
    state.loading = True
    state.loading_status = _loading_projects(state)
    return state, [_load_all_pipelines(state), cmd.ScheduleTick(state.refresh_interval)]


def update(state: AppState, message: msg.Message) -> tuple[AppState, Commands]:
    state = state.copy()
    handler = _HANDLERS.get(type(message))
    if handler is None:
        logger.debug("ignoring %s", type(message).__name__)
        return state, []
    return state, handler(state, message)


def _dispatch(state: AppState, message: msg.Message) -> Commands:
    """Handle an intent raised while processing another message, on the same state."""
    handler = _HANDLERS.get(type(message))
    if handler is None:
        return []
    return handler(state, message)


# ── helpers ───────────────────────────────────────────────────────


def _edit(state: AppState, name: str):
    view = copy.copy(getattr(state, name))
    setattr(state, name, view)
    return view


def _navigate(state: AppState, view: ViewID, breadcrumb: tuple[str, ...] = ()) -> None:
    state.generation += 1
    state.view = view
    state.breadcrumb = breadcrumb
    state.loading = False
    state.loading_status = ""
    logger.debug("navigate to %s (generation %d)", view.value, state.generation)


def _start_loading(state: AppState, status: str = "") -> None:
    state.loading = True
    state.loading_status = status


def _for_other_subject(view, generation: int) -> bool:
    """True when a result was requested for what the view showed before its subject changed."""
    if generation < view.generation:
        logger.debug("dropping %s result from generation %d", type(view).__name__, generation)
        return True
    return False


def _finish(state: AppState, generation: int) -> None:
    if generation != state.generation:
        return
    state.loading = False
    state.loading_status = ""
    state.error = ""


def _loading_projects(state: AppState) -> str:
    return f"Loading {len(state.projects)} projects..."


def _pipeline_crumbs(state: AppState) -> tuple[str, ...]:
    pipeline = state.selected_pipeline
    if pipeline is None:
        return ()
    return (pipeline.project_path, f"#{pipeline.id}")


def _mr_crumbs(mr) -> tuple[str, ...]:
    return (mr.project_path, f"!{mr.iid}")


def _load_projects(state: AppState) -> cmd.Command:
    return cmd.LoadProjects(state.projects, generation=state.generation)


def _load_all_pipelines(state: AppState) -> cmd.Command:
    return cmd.LoadAllPipelines(state.projects, state.pipeline_limit, generation=state.generation)


def _load_merge_requests(state: AppState) -> cmd.Command:
    return cmd.LoadMergeRequests(state.projects, generation=state.generation)


def _load_selected_jobs(state: AppState) -> Commands:
    pipeline = state.selected_pipeline
    if pipeline is None:
        return []
    return [cmd.LoadJobs(pipeline.project_id, pipeline.id, generation=state.generation)]


def _load_mr(state: AppState, mr) -> Commands:
    generation = state.generation
    return [
        cmd.LoadMRDetail(mr.project_id, mr.iid, mr.project_path, generation=generation),
        cmd.LoadMRDiffs(mr.project_id, mr.iid, generation=generation),
        cmd.LoadMRNotes(mr.project_id, mr.iid, generation=generation),
    ]


def _save_config(state: AppState) -> cmd.Command:
    return cmd.SaveConfig(state.projects, state.pipeline_limit, generation=state.generation)


def _refreshing(state: AppState) -> str:
    view = state.view
    if view == ViewID.JOBS and state.selected_pipeline is not None:
        return f"Refreshing jobs of pipeline #{state.selected_pipeline.id}..."
    if view == ViewID.LOG and state.selected_job is not None:
        return f"Refreshing log of {state.selected_job.name}..."
    if view == ViewID.MERGE_REQUESTS:
        return "Refreshing merge requests..."
    if view == ViewID.MR_DETAIL and state.selected_mr is not None:
        return f"Refreshing MR !{state.selected_mr.iid}..."
    return f"Refreshing {len(state.projects)} projects..."


def _refresh(state: AppState) -> Commands:
    """Reload whatever backs the current view."""
    view = state.view
    if view == ViewID.PROJECTS:
        return [_load_projects(state)]
    if view == ViewID.PIPELINES:
        return [_load_all_pipelines(state)]
    if view == ViewID.JOBS:
        return _load_selected_jobs(state)
    if view == ViewID.LOG:
        job = state.selected_job
        if job is None:
            return []
        return [cmd.LoadLog(job.project_id, job.id, job.name, generation=state.generation)]
    if view == ViewID.MERGE_REQUESTS:
        return [_load_merge_requests(state)]
    if view == ViewID.MR_DETAIL and state.selected_mr is not None:
        return _load_mr(state, state.selected_mr)
    return []


def _switch_to(state: AppState, view: ViewID) -> Commands:
    """Jump to a top-level tab and reload it."""
    _navigate(state, view)
    if view == ViewID.PROJECTS:
        _start_loading(state, _loading_projects(state))
        return [_load_projects(state)]
    if view == ViewID.PIPELINES:
        _start_loading(state, _loading_projects(state))
        return [_load_all_pipelines(state)]
    _start_loading(state, "Loading merge requests...")
    return [_load_merge_requests(state)]


def _go_back(state: AppState) -> Commands:
    target = BACK[state.view]
    if state.view == ViewID.PROJECTS:
        return []
    if target == ViewID.PROJECTS:
        return _switch_to(state, target)
    if target == ViewID.JOBS:
        _navigate(state, target, _pipeline_crumbs(state))
    else:
        _navigate(state, target)
    return []


def _cycle_tab(state: AppState, step: int) -> Commands:
    index = TABS.index(tab_of(state.view))
    return _switch_to(state, TABS[(index + step) % len(TABS)])


def _open_confirm(state: AppState, dialog: ConfirmDialog) -> Commands:
    state.confirm = dialog
    return []


def _remove_project(state: AppState, path: str) -> Commands:
    state.projects = tuple(p for p in state.projects if p != path)
    logger.info("stopped tracking %s", path)
    return [_save_config(state), _load_projects(state), _load_all_pipelines(state)]


def _run_confirmed(state: AppState, result: ConfirmResult) -> Commands:
    if not result.confirmed:
        return []
    generation = state.generation
    if result.action in JOB_ACTION_LABELS:
        return [
            cmd.RunJobAction(
                result.action, result.project_id, result.target_id, generation=generation
            )
        ]
    if result.action == "approve_mr":
        return [cmd.ApproveMR(result.project_id, result.target_id, generation=generation)]
    if result.action == "merge_mr":
        return [cmd.MergeMR(result.project_id, result.target_id, generation=generation)]
    if result.action == "remove_project":
        return _remove_project(state, result.label)
    logger.warning("unknown confirm action %r", result.action)
    return []


# ── input ─────────────────────────────────────────────────────────


@handles(msg.KeyPressed)
def _on_key(state: AppState, message: msg.KeyPressed) -> Commands:
    if state.confirm is not None:
        dialog = copy.copy(state.confirm)
        result = dialog.handle_key(keymap.normalize(message.key))
        if result is None:
            state.confirm = dialog
            return []
        state.confirm = None
        return _run_confirmed(state, result)

    # text entry sees the characters as typed
    if state.is_input_mode():
        return _delegate(state, message.key)

    key = keymap.normalize(message.key)
    if key in _CAPTURED_KEYS.get(state.view, ()):
        return _delegate(state, key)

    if key in ("q", "ctrl+c"):
        return [cmd.Quit()]
    if key == "esc":
        return _go_back(state)
    if key == "tab":
        return _cycle_tab(state, 1)
    if key == "shift+tab":
        return _cycle_tab(state, -1)
    if key == "1":
        return _switch_to(state, ViewID.PROJECTS)
    if key == "2":
        return _switch_to(state, ViewID.PIPELINES)
    if key == "3":
        if state.selected_pipeline is not None:
            _navigate(state, ViewID.JOBS, _pipeline_crumbs(state))
        return []
    if key == "4":
        if state.selected_job is not None:
            _navigate(state, ViewID.LOG, (*_pipeline_crumbs(state), state.selected_job.name))
        return []
    if key == "5":
        return _switch_to(state, ViewID.MERGE_REQUESTS)
    return _delegate(state, key)


def _delegate(state: AppState, key: str) -> Commands:
    view = _edit(state, _VIEW_ATTRS[state.view])
    intent = view.handle_key(key)
    if intent is None:
        return []
    return _dispatch(state, intent)


@handles(msg.Resized)
def _on_resize(state: AppState, message: msg.Resized) -> Commands:
    state.width = message.width
    state.height = message.height
    for name in _VIEW_ATTRS.values():
        view = _edit(state, name)
        if hasattr(view, "set_height"):
            view.set_height(message.height)
    return []


@handles(msg.Tick)
def _on_tick(state: AppState, message: msg.Tick) -> Commands:
    commands: Commands = [cmd.ScheduleTick(state.refresh_interval)]
    if state.loading:
        return commands
    refresh = _refresh(state)
    if refresh:
        _start_loading(state, _refreshing(state))
        commands.extend(refresh)
    return commands


# ── completions ───────────────────────────────────────────────────


@handles(msg.ProjectsLoaded)
def _on_projects(state: AppState, message: msg.ProjectsLoaded) -> Commands:
    _edit(state, "projects_view").set_projects(message.projects)
    _finish(state, message.generation)
    return []


@handles(msg.PipelinesLoaded)
def _on_pipelines(state: AppState, message: msg.PipelinesLoaded) -> Commands:
    view = _edit(state, "pipelines_view")
    view.limit = state.pipeline_limit
    view.set_items(message.pipelines)
    _finish(state, message.generation)
    return []


@handles(msg.JobsLoaded)
def _on_jobs(state: AppState, message: msg.JobsLoaded) -> Commands:
    view = _edit(state, "jobs_view")
    if _for_other_subject(view, message.generation):
        return []
    view.set_jobs(message.jobs)
    _finish(state, message.generation)
    return []


@handles(msg.LogLoaded)
def _on_log(state: AppState, message: msg.LogLoaded) -> Commands:
    view = _edit(state, "log_view")
    if _for_other_subject(view, message.generation):
        return []
    view.set_content(message.content, message.job_name)
    _finish(state, message.generation)
    return []


@handles(msg.MergeRequestsLoaded)
def _on_merge_requests(state: AppState, message: msg.MergeRequestsLoaded) -> Commands:
    _edit(state, "merge_requests_view").set_items(message.merge_requests)
    _finish(state, message.generation)
    return []


@handles(msg.MRDetailLoaded)
def _on_mr_detail(state: AppState, message: msg.MRDetailLoaded) -> Commands:
    view = _edit(state, "mr_detail_view")
    if _for_other_subject(view, message.generation):
        return []
    view.set_mr(message.merge_request)
    _finish(state, message.generation)
    return []


@handles(msg.MRDiffsLoaded)
def _on_mr_diffs(state: AppState, message: msg.MRDiffsLoaded) -> Commands:
    view = _edit(state, "mr_detail_view")
    if _for_other_subject(view, message.generation):
        return []
    view.set_diffs(message.diffs)
    if message.generation == state.generation:
        state.error = ""
    return []


@handles(msg.MRNotesLoaded)
def _on_mr_notes(state: AppState, message: msg.MRNotesLoaded) -> Commands:
    view = _edit(state, "mr_detail_view")
    if _for_other_subject(view, message.generation):
        return []
    view.set_notes(message.notes)
    if message.generation == state.generation:
        state.error = ""
    return []


@handles(msg.CommitsLoaded)
def _on_commits(state: AppState, message: msg.CommitsLoaded) -> Commands:
    view = _edit(state, "commits_view")
    if _for_other_subject(view, message.generation):
        return []
    view.set_commits(message.commits)
    _finish(state, message.generation)
    return []


@handles(msg.JobActionDone)
def _on_job_action_done(state: AppState, message: msg.JobActionDone) -> Commands:
    logger.info("job %d is now %s", message.job.id, message.job.status.value)
    state.error = ""
    return _load_selected_jobs(state)


@handles(msg.MRApproved, msg.MRMerged)
def _on_mr_changed(state: AppState, message: msg.Message) -> Commands:
    state.error = ""
    mr = state.selected_mr
    if mr is None:
        return []
    return [cmd.LoadMRDetail(mr.project_id, mr.iid, mr.project_path, generation=state.generation)]


@handles(msg.MRCreated)
def _on_mr_created(state: AppState, message: msg.MRCreated) -> Commands:
    mr = message.merge_request
    _edit(state, "mr_create_view").close()
    state.selected_mr = mr
    state.error = ""
    _navigate(state, ViewID.MR_DETAIL, _mr_crumbs(mr))
    view = _edit(state, "mr_detail_view")
    view.set_mr(mr)
    view.generation = state.generation
    return _load_mr(state, mr)


@handles(msg.MRCreateFailed)
def _on_mr_create_failed(state: AppState, message: msg.MRCreateFailed) -> Commands:
    _edit(state, "mr_create_view").close()
    _navigate(state, ViewID.MERGE_REQUESTS)
    state.error = message.error
    return []


@handles(msg.ProjectSearchResults)
def _on_project_search(state: AppState, message: msg.ProjectSearchResults) -> Commands:
    _edit(state, "projects_view").set_search_results(message.projects)
    return []


@handles(msg.BranchSearchResults)
def _on_branch_search(state: AppState, message: msg.BranchSearchResults) -> Commands:
    _edit(state, "mr_create_view").set_branch_results(
        message.field, message.query, message.branches
    )
    return []


@handles(msg.ConfigSaved)
def _on_config_saved(state: AppState, message: msg.ConfigSaved) -> Commands:
    logger.debug("config saved to %s", message.path)
    return []


@handles(msg.LoadFailed)
def _on_load_failed(state: AppState, message: msg.LoadFailed) -> Commands:
    if message.generation != state.generation:
        logger.info(
            "dropping failure from generation %d (now %d): %s",
            message.generation,
            state.generation,
            message.error,
        )
        return []
    state.error = message.error
    state.loading = False
    state.loading_status = ""
    return []


@handles(msg.ActionFailed)
def _on_action_failed(state: AppState, message: msg.ActionFailed) -> Commands:
    state.error = message.error
    return []


# ── view intents ──────────────────────────────────────────────────


@handles(msg.ProjectSelected)
def _on_project_selected(state: AppState, message: msg.ProjectSelected) -> Commands:
    project = message.project
    state.selected_project = project
    _navigate(state, ViewID.PIPELINES, (project.path_with_namespace,))
    _start_loading(state, _loading_projects(state))
    return [_load_all_pipelines(state)]


@handles(msg.ProjectSearchRequested)
def _on_project_search_requested(
    state: AppState, message: msg.ProjectSearchRequested
) -> Commands:
    return [cmd.SearchProjects(message.query, generation=state.generation)]


@handles(msg.ProjectAddRequested)
def _on_project_add(state: AppState, message: msg.ProjectAddRequested) -> Commands:
    if message.path in state.projects:
        return []
    state.projects = (*state.projects, message.path)
    logger.info("tracking %s", message.path)
    return [_save_config(state), _load_projects(state), _load_all_pipelines(state)]


@handles(msg.ProjectDeleteRequested)
def _on_project_delete(state: AppState, message: msg.ProjectDeleteRequested) -> Commands:
    return _open_confirm(
        state,
        ConfirmDialog(
            f'Remove project "{message.path}"?', "remove_project", label=message.path
        ),
    )


@handles(msg.MergeRequestsRequested)
def _on_merge_requests_requested(
    state: AppState, message: msg.MergeRequestsRequested
) -> Commands:
    return _switch_to(state, ViewID.MERGE_REQUESTS)


@handles(msg.PipelineSelected)
def _on_pipeline_selected(state: AppState, message: msg.PipelineSelected) -> Commands:
    pipeline = message.pipeline
    previous = state.selected_pipeline
    state.selected_pipeline = pipeline
    _navigate(state, ViewID.JOBS, _pipeline_crumbs(state))
    if previous is None or previous.id != pipeline.id:
        view = _edit(state, "jobs_view")
        view.reset()
        view.generation = state.generation
    _start_loading(state)
    return _load_selected_jobs(state)


@handles(msg.PipelineLimitCycled)
def _on_limit_cycled(state: AppState, message: msg.PipelineLimitCycled) -> Commands:
    state.pipeline_limit = next_pipeline_limit(state.pipeline_limit)
    _edit(state, "pipelines_view").limit = state.pipeline_limit
    _start_loading(state, _loading_projects(state))
    return [_save_config(state), _load_all_pipelines(state)]


@handles(msg.CommitsRequested)
def _on_commits_requested(state: AppState, message: msg.CommitsRequested) -> Commands:
    pipeline = message.pipeline
    _navigate(state, ViewID.COMMITS, (pipeline.project_path, pipeline.ref, "commits"))
    view = _edit(state, "commits_view")
    view.reset(pipeline.ref)
    view.generation = state.generation
    _start_loading(state)
    return [cmd.LoadCommits(pipeline.project_id, pipeline.ref, generation=state.generation)]


@handles(msg.JobSelected)
def _on_job_selected(state: AppState, message: msg.JobSelected) -> Commands:
    job = message.job
    state.selected_job = job
    _navigate(state, ViewID.LOG, (*_pipeline_crumbs(state), job.name))
    view = _edit(state, "log_view")
    view.reset(job.name)
    view.generation = state.generation
    _start_loading(state)
    return [cmd.LoadLog(job.project_id, job.id, job.name, generation=state.generation)]


@handles(msg.JobActionRequested)
def _on_job_action_requested(state: AppState, message: msg.JobActionRequested) -> Commands:
    job = message.job
    label = JOB_ACTION_LABELS.get(message.action, message.action.title())
    return _open_confirm(
        state,
        ConfirmDialog(f'{label} job "{job.name}"?', message.action, job.project_id, job.id),
    )


@handles(msg.MRSelected)
def _on_mr_selected(state: AppState, message: msg.MRSelected) -> Commands:
    mr = message.merge_request
    state.selected_mr = mr
    _navigate(state, ViewID.MR_DETAIL, _mr_crumbs(mr))
    view = _edit(state, "mr_detail_view")
    view.set_mr(mr)
    view.generation = state.generation
    _start_loading(state)
    return _load_mr(state, mr)


@handles(msg.MRRefreshRequested)
def _on_mr_refresh(state: AppState, message: msg.MRRefreshRequested) -> Commands:
    _edit(state, "mr_detail_view").force_reset()
    return _load_mr(state, message.merge_request)


@handles(msg.MRApproveRequested)
def _on_mr_approve_requested(state: AppState, message: msg.MRApproveRequested) -> Commands:
    mr = message.merge_request
    return _open_confirm(
        state, ConfirmDialog(f"Approve MR !{mr.iid}?", "approve_mr", mr.project_id, mr.iid)
    )


@handles(msg.MRMergeRequested)
def _on_mr_merge_requested(state: AppState, message: msg.MRMergeRequested) -> Commands:
    mr = message.merge_request
    return _open_confirm(
        state, ConfirmDialog(f"Merge MR !{mr.iid}?", "merge_mr", mr.project_id, mr.iid)
    )


@handles(msg.MRCreateRequested)
def _on_mr_create_requested(state: AppState, message: msg.MRCreateRequested) -> Commands:
    _edit(state, "mr_create_view").activate(state.projects)
    _navigate(state, ViewID.MR_CREATE, ("New MR",))
    return []


@handles(msg.MRCreateSubmitted)
def _on_mr_create_submitted(state: AppState, message: msg.MRCreateSubmitted) -> Commands:
    _start_loading(state, "Creating merge request...")
    return [cmd.CreateMR(message.project_path, message.options, generation=state.generation)]


@handles(msg.MRCreateCancelled)
def _on_mr_create_cancelled(state: AppState, message: msg.MRCreateCancelled) -> Commands:
    _navigate(state, ViewID.MERGE_REQUESTS)
    return []


@handles(msg.BranchSearchRequested)
def _on_branch_search_requested(
    state: AppState, message: msg.BranchSearchRequested
) -> Commands:
    return [
        cmd.SearchBranches(
            message.project_path, message.query, message.field, generation=state.generation
        )
    ]
