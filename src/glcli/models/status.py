"""Status value objects for pipelines, jobs and merge requests.

Display symbol and color class are pure functions of the status; so are the
job action predicates.
"""

from __future__ import annotations

from enum import Enum


class PipelineStatus(str, Enum):
    RUNNING = "running"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    MANUAL = "manual"
    CREATED = "created"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> PipelineStatus:
        return cls.UNKNOWN

    @property
    def symbol(self) -> str:
        return _SYMBOLS.get(self.value, "?")

    @property
    def style(self) -> str:
        return _STYLES.get(self.value, "pending")

    @property
    def is_active(self) -> bool:
        return self in (PipelineStatus.RUNNING, PipelineStatus.PENDING)


class JobStatus(str, Enum):
    RUNNING = "running"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    MANUAL = "manual"
    CREATED = "created"
    WAITING_FOR_RESOURCE = "waiting_for_resource"
    PREPARING = "preparing"
    SCHEDULED = "scheduled"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> JobStatus:
        return cls.UNKNOWN

    @property
    def symbol(self) -> str:
        return _SYMBOLS.get(self.value, "?")

    @property
    def style(self) -> str:
        return _STYLES.get(self.value, "pending")

    @property
    def can_play(self) -> bool:
        return self is JobStatus.MANUAL

    @property
    def can_retry(self) -> bool:
        return self is JobStatus.FAILED

    @property
    def can_cancel(self) -> bool:
        return self in (JobStatus.RUNNING, JobStatus.PENDING)


class MRState(str, Enum):
    OPENED = "opened"
    MERGED = "merged"
    CLOSED = "closed"
    LOCKED = "locked"

    @classmethod
    def _missing_(cls, value: object) -> MRState:
        return cls.OPENED

    @property
    def symbol(self) -> str:
        return {"opened": "◉", "merged": "✓", "closed": "✗"}.get(self.value, "?")

    @property
    def style(self) -> str:
        if self is MRState.MERGED:
            return "success"
        if self is MRState.CLOSED:
            return "failed"
        return "running"


_SYMBOLS = {
    "running": "●",
    "pending": "◌",
    "created": "◌",
    "waiting_for_resource": "◌",
    "preparing": "◌",
    "scheduled": "◌",
    "success": "✓",
    "failed": "✗",
    "canceled": "⊘",
    "skipped": "»",
    "manual": "⏸",
}

_STYLES = {
    "success": "success",
    "failed": "failed",
    "running": "running",
    "manual": "manual",
}
