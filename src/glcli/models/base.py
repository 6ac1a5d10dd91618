"""Base model for GitLab entity snapshots."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class GitLabModel(BaseModel):
    """Immutable snapshot of a GitLab entity; replaced wholesale, never edited."""

    model_config = {"extra": "ignore", "populate_by_name": True, "frozen": True}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
