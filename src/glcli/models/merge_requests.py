"""Merge request models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import GitLabModel
from .status import MRState


def _username(user: dict[str, Any] | None) -> str:
    return (user or {}).get("username") or ""


class MergeRequest(GitLabModel):
    id: int
    iid: int
    project_id: int
    project_path: str = ""
    title: str = ""
    description: str = ""
    state: MRState = MRState.OPENED
    author: str = ""
    source_branch: str = ""
    target_branch: str = ""
    merge_status: str = ""
    draft: bool = False
    web_url: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api(
        cls, data: dict[str, Any], project_id: int, project_path: str = ""
    ) -> MergeRequest:
        return cls(
            id=data["id"],
            iid=data["iid"],
            project_id=project_id,
            project_path=project_path,
            title=data.get("title") or "",
            description=data.get("description") or "",
            state=data.get("state") or "opened",
            author=_username(data.get("author")),
            source_branch=data.get("source_branch") or "",
            target_branch=data.get("target_branch") or "",
            merge_status=data.get("detailed_merge_status") or data.get("merge_status") or "",
            draft=bool(data.get("draft") or data.get("work_in_progress")),
            web_url=data.get("web_url") or "",
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


class MRNote(GitLabModel):
    id: int
    author: str = ""
    body: str = ""
    created_at: datetime | None = None
    system: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> MRNote:
        return cls(
            id=data["id"],
            author=_username(data.get("author")),
            body=data.get("body") or "",
            created_at=data.get("created_at"),
            system=bool(data.get("system")),
        )


class MRDiff(GitLabModel):
    old_path: str = ""
    new_path: str = ""
    diff: str = ""
    new_file: bool = False
    deleted_file: bool = False
    renamed_file: bool = False

    @property
    def label(self) -> str:
        if self.new_file:
            return f"{self.new_path} (new)"
        if self.deleted_file:
            return f"{self.new_path} (deleted)"
        if self.renamed_file:
            return f"{self.old_path} → {self.new_path} (renamed)"
        return self.new_path


class CreateMROptions(GitLabModel):
    source_branch: str
    target_branch: str
    title: str
    description: str = ""
    draft: bool = False

    def to_params(self) -> dict[str, Any]:
        title = f"Draft: {self.title}" if self.draft else self.title
        params: dict[str, Any] = {
            "source_branch": self.source_branch,
            "target_branch": self.target_branch,
            "title": title,
        }
        if self.description:
            params["description"] = self.description
        return params
