"""Project model."""

from __future__ import annotations

from typing import Any

from .base import GitLabModel


class Project(GitLabModel):
    id: int
    name: str = ""
    path_with_namespace: str = ""
    web_url: str = ""
    pipeline_count: int = 0
    active_count: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Project:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            path_with_namespace=data.get("path_with_namespace") or "",
            web_url=data.get("web_url") or "",
        )
