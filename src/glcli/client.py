"""GitLab REST API client using httpx."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from .config import GitLabConfig
from .exceptions import GitLabApiError, GitLabAuthError, GitLabNotFoundError

logger = logging.getLogger(__name__)


class GitLabClient:
    """Async HTTP client for the subset of GitLab REST API v4 glcli needs."""

    def __init__(self, config: GitLabConfig | None = None) -> None:
        self.config = config or GitLabConfig.from_env()
        self.config.validate()
        self._client = httpx.AsyncClient(
            base_url=self.config.api_url,
            headers={
                "PRIVATE-TOKEN": self.config.token,
                "Content-Type": "application/json",
            },
            timeout=self.config.timeout,
            verify=self.config.ssl_verify,
        )

    async def close(self) -> None:
        await self._client.aclose()

    # ── HTTP helpers ──────────────────────────────────────────────

    @staticmethod
    def _encode_id(project_id: str | int) -> str:
        """Encode a project ID. Numeric IDs pass through; paths are URL-encoded."""
        if isinstance(project_id, int):
            return str(project_id)
        try:
            return str(int(project_id))
        except ValueError:
            return quote(project_id, safe="")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any = None,
        params: dict[str, Any] | None = None,
        raw: bool = False,
    ) -> Any:
        """Make an API request and return parsed JSON (or text if raw=True)."""
        kwargs: dict[str, Any] = {"params": params}
        if json_data is not None:
            kwargs["json"] = json_data

        logger.debug("%s %s params=%s", method, path, params)
        resp = await self._client.request(method, path, **kwargs)

        if resp.status_code in (401, 403):
            raise GitLabAuthError(resp.status_code, resp.text)
        if resp.status_code == 404:
            raise GitLabNotFoundError(resp.text)
        if not resp.is_success:
            raise GitLabApiError(resp.status_code, resp.reason_phrase or "", resp.text)

        if resp.status_code == 204 or not resp.content:
            return None

        if raw:
            return resp.text

        content_type = resp.headers.get("content-type", "")
        if "text/html" in content_type:
            msg = "Unexpected HTML response, check URL and authentication"
            raise GitLabApiError(resp.status_code, msg, resp.text[:500])

        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise GitLabApiError(
                resp.status_code,
                f"JSON parse error: {e}",
                resp.text[:500],
            ) from e

    async def get(
        self, path: str, params: dict[str, Any] | None = None, *, raw: bool = False
    ) -> Any:
        return await self._request("GET", path, params=params, raw=raw)

    async def post(self, path: str, json_data: Any = None) -> Any:
        return await self._request("POST", path, json_data=json_data)

    async def put(self, path: str, json_data: Any = None) -> Any:
        return await self._request("PUT", path, json_data=json_data)

    # ── Projects ──────────────────────────────────────────────────

    async def get_project(self, project_id: str | int) -> dict:
        enc = self._encode_id(project_id)
        return await self.get(f"/projects/{enc}")

    async def search_projects(self, query: str, per_page: int = 10) -> list[dict]:
        return await self.get(
            "/projects",
            params={"search": query, "order_by": "name", "per_page": per_page},
        )

    # ── Branches ──────────────────────────────────────────────────

    async def list_branches(
        self, project_id: str | int, search: str = "", per_page: int = 20
    ) -> list[dict]:
        enc = self._encode_id(project_id)
        params: dict[str, Any] = {"per_page": per_page}
        if search:
            params["search"] = search
        return await self.get(f"/projects/{enc}/repository/branches", params=params)

    # ── Commits ───────────────────────────────────────────────────

    async def list_commits(self, project_id: str | int, ref: str, per_page: int = 50) -> list[dict]:
        enc = self._encode_id(project_id)
        return await self.get(
            f"/projects/{enc}/repository/commits",
            params={"ref_name": ref, "per_page": per_page},
        )

    # ── Pipelines ─────────────────────────────────────────────────

    async def list_pipelines(self, project_id: str | int, per_page: int = 20) -> list[dict]:
        enc = self._encode_id(project_id)
        return await self.get(
            f"/projects/{enc}/pipelines",
            params={"order_by": "id", "sort": "desc", "per_page": per_page},
        )

    async def list_pipeline_jobs(self, project_id: str | int, pipeline_id: int) -> list[dict]:
        enc = self._encode_id(project_id)
        return await self.get(
            f"/projects/{enc}/pipelines/{pipeline_id}/jobs",
            params={"per_page": 100},
        )

    async def list_pipeline_bridges(self, project_id: str | int, pipeline_id: int) -> list[dict]:
        enc = self._encode_id(project_id)
        return await self.get(
            f"/projects/{enc}/pipelines/{pipeline_id}/bridges",
            params={"per_page": 100},
        )

    # ── Jobs ──────────────────────────────────────────────────────

    async def play_job(self, project_id: str | int, job_id: int) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/jobs/{job_id}/play")

    async def retry_job(self, project_id: str | int, job_id: int) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/jobs/{job_id}/retry")

    async def cancel_job(self, project_id: str | int, job_id: int) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/jobs/{job_id}/cancel")

    async def get_job_log(self, project_id: str | int, job_id: int) -> str:
        enc = self._encode_id(project_id)
        return await self.get(f"/projects/{enc}/jobs/{job_id}/trace", raw=True) or ""

    # ── Merge Requests ────────────────────────────────────────────

    async def list_merge_requests(
        self, project_id: str | int, state: str = "", per_page: int = 50
    ) -> list[dict]:
        enc = self._encode_id(project_id)
        params: dict[str, Any] = {
            "order_by": "updated_at",
            "sort": "desc",
            "per_page": per_page,
        }
        if state:
            params["state"] = state
        return await self.get(f"/projects/{enc}/merge_requests", params=params)

    async def get_merge_request(self, project_id: str | int, mr_iid: int) -> dict:
        enc = self._encode_id(project_id)
        return await self.get(f"/projects/{enc}/merge_requests/{mr_iid}")

    async def create_merge_request(self, project_id: str | int, params: dict[str, Any]) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/merge_requests", params)

    async def merge_merge_request(self, project_id: str | int, mr_iid: int) -> dict:
        enc = self._encode_id(project_id)
        return await self.put(f"/projects/{enc}/merge_requests/{mr_iid}/merge", {})

    async def approve_merge_request(self, project_id: str | int, mr_iid: int) -> dict:
        enc = self._encode_id(project_id)
        return await self.post(f"/projects/{enc}/merge_requests/{mr_iid}/approve")

    async def list_mr_diffs(self, project_id: str | int, mr_iid: int) -> list[dict]:
        enc = self._encode_id(project_id)
        return await self.get(
            f"/projects/{enc}/merge_requests/{mr_iid}/diffs",
            params={"per_page": 100},
        )

    async def list_mr_notes(self, project_id: str | int, mr_iid: int) -> list[dict]:
        enc = self._encode_id(project_id)
        return await self.get(
            f"/projects/{enc}/merge_requests/{mr_iid}/notes",
            params={"order_by": "created_at", "sort": "asc", "per_page": 100},
        )
