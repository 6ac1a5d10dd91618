"""Tool-protocol front-end: the tracked projects' CI and merge requests as MCP tools."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Annotated, Any

import click
from dotenv import load_dotenv
from fastmcp import Context, FastMCP
from pydantic import Field

from ..client import GitLabClient
from ..config import GitLabConfig
from ..exceptions import (
    ConfigNotFoundError,
    GitLabApiError,
    GitLabAuthError,
    GitLabNotFoundError,
    GitLabWriteDisabledError,
)
from ..models.base import GitLabModel
from ..models.projects import Project
from ..services.gitlab import GitLabService

logger = logging.getLogger(__name__)


def load_config() -> GitLabConfig:
    """The glcli config file when there is one, else the environment alone."""
    try:
        config = GitLabConfig.load()
    except ConfigNotFoundError:
        config = GitLabConfig.from_env()
    config.validate()
    return config


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    config = load_config()
    client = GitLabClient(config)
    try:
        yield {"service": GitLabService(client), "config": config}
    finally:
        await client.close()


mcp = FastMCP(
    name="glcli",
    instructions=(
        "Read and act on GitLab CI pipelines, jobs and merge requests"
        " of the projects tracked in the glcli config."
    ),
    lifespan=lifespan,
)


def _get_service(ctx: Context) -> GitLabService:
    return ctx.request_context.lifespan_context["service"]


def _get_config(ctx: Context) -> GitLabConfig:
    return ctx.request_context.lifespan_context["config"]


def _dump(items: Sequence[GitLabModel]) -> list[dict[str, Any]]:
    return [item.to_dict() for item in items]


def _ok(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _err(error: Exception) -> str:
    detail: dict[str, Any] = {"error": str(error)}
    if isinstance(error, GitLabNotFoundError):
        detail["status_code"] = error.status_code
        detail["hint"] = "Verify the project path and IDs. Use glcli_list_projects to see them."
    elif isinstance(error, GitLabAuthError):
        detail["status_code"] = error.status_code
        detail["hint"] = "Check GITLAB_TOKEN permissions. Token needs 'api' scope."
    elif isinstance(error, GitLabWriteDisabledError):
        detail["hint"] = "Server is in read-only mode. Set GITLAB_READ_ONLY=false to enable writes."
    elif isinstance(error, GitLabApiError):
        detail["status_code"] = error.status_code
        detail["body"] = error.body
        if error.status_code == 409:
            detail["hint"] = "Conflict: the job or merge request changed state in the meantime."
        elif error.status_code == 429:
            detail["hint"] = "Rate limited. Wait before retrying."
    else:
        logger.exception("unexpected tool error")
    return json.dumps(detail, indent=2, ensure_ascii=False)


async def _project(ctx: Context, project: str) -> Project:
    return await _get_service(ctx).resolve_project(project)


ProjectArg = Annotated[
    str, Field(description="Project path (e.g. 'my-group/my-project') or ID", min_length=1)
]
JobArg = Annotated[int, Field(description="Job ID", ge=1)]
MRArg = Annotated[int, Field(description="Merge request IID (project-scoped)", ge=1)]


# ════════════════════════════════════════════════════════════════════
# Projects & pipelines
# ════════════════════════════════════════════════════════════════════


@mcp.tool(
    tags={"gitlab", "projects", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def glcli_list_projects(ctx: Context) -> str:
    """List the tracked projects with their pipeline and active-pipeline counts."""
    try:
        projects = await _get_service(ctx).load_projects(_get_config(ctx).projects)
        return _ok(_dump(projects))
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"gitlab", "pipelines", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def glcli_list_pipelines(
    ctx: Context,
    project: Annotated[
        str | None, Field(description="Only this project; all tracked projects when omitted")
    ] = None,
    limit: Annotated[int, Field(description="Maximum pipelines to return", ge=1, le=200)] = 20,
) -> str:
    """List recent pipelines, newest first."""
    try:
        service = _get_service(ctx)
        if project:
            found = await _project(ctx, project)
            pipelines = await service.list_pipelines(found.id, found.path_with_namespace)
            pipelines = pipelines[:limit]
        else:
            pipelines = await service.load_all_pipelines(_get_config(ctx).projects, limit)
        return _ok(_dump(pipelines))
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"gitlab", "pipelines", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def glcli_list_jobs(
    ctx: Context,
    project: ProjectArg,
    pipeline_id: Annotated[int, Field(description="Pipeline ID", ge=1)],
) -> str:
    """List the jobs of a pipeline, including bridge (trigger) jobs."""
    try:
        found = await _project(ctx, project)
        jobs = await _get_service(ctx).list_jobs(found.id, pipeline_id)
        return _ok(_dump(jobs))
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"gitlab", "jobs", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def glcli_get_job_log(
    ctx: Context,
    project: ProjectArg,
    job_id: JobArg,
    tail_lines: Annotated[int, Field(description="Number of lines from the end to return")] = 200,
) -> str:
    """Get the tail of a job's log."""
    try:
        found = await _project(ctx, project)
        log_text = await _get_service(ctx).get_log(found.id, job_id)
        lines = log_text.splitlines()
        shown = lines[-tail_lines:] if tail_lines and len(lines) > tail_lines else lines
        return _ok({"log": "\n".join(shown), "total_lines": len(lines), "shown_lines": len(shown)})
    except Exception as e:
        return _err(e)


async def _job_action(ctx: Context, action: str, project: str, job_id: int) -> str:
    try:
        service = _get_service(ctx)
        found = await _project(ctx, project)
        run = {
            "play": service.play_job,
            "retry": service.retry_job,
            "cancel": service.cancel_job,
        }[action]
        job = await run(found.id, job_id)
        return _ok(job.to_dict())
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"gitlab", "jobs", "write"},
    annotations={"readOnlyHint": False, "openWorldHint": True},
)
async def glcli_play_job(ctx: Context, project: ProjectArg, job_id: JobArg) -> str:
    """Start a manual job."""
    return await _job_action(ctx, "play", project, job_id)


@mcp.tool(
    tags={"gitlab", "jobs", "write"},
    annotations={"readOnlyHint": False, "openWorldHint": True},
)
async def glcli_retry_job(ctx: Context, project: ProjectArg, job_id: JobArg) -> str:
    """Retry a failed job."""
    return await _job_action(ctx, "retry", project, job_id)


@mcp.tool(
    tags={"gitlab", "jobs", "write"},
    annotations={"readOnlyHint": False, "destructiveHint": True, "openWorldHint": True},
)
async def glcli_cancel_job(ctx: Context, project: ProjectArg, job_id: JobArg) -> str:
    """Cancel a running or pending job."""
    return await _job_action(ctx, "cancel", project, job_id)


# ════════════════════════════════════════════════════════════════════
# Merge requests & commits
# ════════════════════════════════════════════════════════════════════


@mcp.tool(
    tags={"gitlab", "merge_requests", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def glcli_list_merge_requests(
    ctx: Context,
    project: Annotated[
        str | None, Field(description="Only this project; all tracked projects when omitted")
    ] = None,
    state: Annotated[str, Field(description="opened, closed, merged, or all")] = "opened",
) -> str:
    """List merge requests, most recently updated first."""
    try:
        service = _get_service(ctx)
        if project:
            found = await _project(ctx, project)
            mrs = await service.list_merge_requests(found.id, state, found.path_with_namespace)
        else:
            mrs = await service.load_all_merge_requests(_get_config(ctx).projects, state)
        return _ok(_dump(mrs))
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"gitlab", "merge_requests", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def glcli_get_merge_request(
    ctx: Context,
    project: ProjectArg,
    mr_iid: MRArg,
    include_diffs: Annotated[bool, Field(description="Include changed files")] = True,
    include_notes: Annotated[bool, Field(description="Include comments")] = True,
) -> str:
    """Get a merge request with its diffs and comments."""
    try:
        service = _get_service(ctx)
        found = await _project(ctx, project)
        mr = await service.get_merge_request(found.id, mr_iid, found.path_with_namespace)
        result = mr.to_dict()
        if include_diffs:
            result["diffs"] = _dump(await service.get_diffs(found.id, mr_iid))
        if include_notes:
            result["notes"] = _dump(await service.list_notes(found.id, mr_iid))
        return _ok(result)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"gitlab", "repositories", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def glcli_list_commits(
    ctx: Context,
    project: ProjectArg,
    ref: Annotated[str, Field(description="Branch or tag name", min_length=1)],
) -> str:
    """List recent commits on a branch or tag."""
    try:
        found = await _project(ctx, project)
        commits = await _get_service(ctx).list_commits(found.id, ref)
        return _ok(_dump(commits))
    except Exception as e:
        return _err(e)


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    help="MCP transport type",
)
@click.option("--port", default=8000, help="Port for HTTP transports")
@click.option("--host", default="127.0.0.1", help="Host for HTTP transports")
@click.option("--read-only", is_flag=True, help="Disable job and merge request actions")
def main(transport: str, port: int, host: str, read_only: bool) -> None:
    """Serve the tracked projects' pipelines and merge requests over MCP."""
    load_dotenv()
    if read_only:
        os.environ["GITLAB_READ_ONLY"] = "true"

    run_kwargs: dict = {"transport": transport}
    if transport != "stdio":
        run_kwargs["host"] = host
        run_kwargs["port"] = port

    asyncio.run(mcp.run_async(show_banner=False, **run_kwargs))


if __name__ == "__main__":
    main()
