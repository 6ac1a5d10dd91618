"""Repository models: commits."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import GitLabModel


class Commit(GitLabModel):
    short_id: str = ""
    title: str = ""
    author_name: str = ""
    author_email: str = ""
    created_at: datetime | None = None
    web_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Commit:
        return cls(
            short_id=data.get("short_id") or "",
            title=data.get("title") or "",
            author_name=data.get("author_name") or "",
            author_email=data.get("author_email") or "",
            created_at=data.get("created_at"),
            web_url=data.get("web_url") or "",
        )
