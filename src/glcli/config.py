"""glcli configuration: YAML file on disk, overridable from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
import yaml

from .exceptions import ConfigError, ConfigNotFoundError

DEFAULT_REFRESH_INTERVAL = 5.0
DEFAULT_PIPELINE_LIMIT = 50
PIPELINE_LIMITS = (20, 50, 100, 200)

_TOKEN_VARS = (
    "GITLAB_TOKEN",
    "GITLAB_PAT",
    "GITLAB_PERSONAL_ACCESS_TOKEN",
    "GITLAB_API_TOKEN",
)


def default_path() -> Path:
    override = os.getenv("GLCLI_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".glcli.yaml"


def next_pipeline_limit(current: int) -> int:
    """Return the rung after *current* on the page-size ladder, wrapping to the first."""
    for limit in PIPELINE_LIMITS:
        if limit > current:
            return limit
    return PIPELINE_LIMITS[0]


def _env_token() -> str:
    for name in _TOKEN_VARS:
        value = os.getenv(name)
        if value:
            return value
    return ""


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in ("true", "1", "yes")


@dataclass
class GitLabConfig:
    """User settings for glcli.

    ``projects``, ``refresh_interval`` and ``pipeline_limit`` are mutated by
    the terminal UI and written back with :meth:`save`.
    """

    url: str = ""
    token: str = ""
    projects: list[str] = field(default_factory=list)
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    pipeline_limit: int = DEFAULT_PIPELINE_LIMIT
    read_only: bool = False
    timeout: int = 30
    ssl_verify: bool = True
    path: Path | None = None

    @classmethod
    def from_env(cls) -> GitLabConfig:
        config = cls()
        config.apply_env()
        return config

    @classmethod
    def load(cls, path: str | Path | None = None) -> GitLabConfig:
        path = Path(path) if path is not None else default_path()
        if not path.exists():
            raise ConfigNotFoundError(str(path))
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            msg = f"Parsing config {path}: {e}"
            raise ConfigError(msg) from e
        if not isinstance(data, dict):
            msg = f"Config {path} must be a mapping"
            raise ConfigError(msg)

        config = cls.from_dict(data)
        config.path = path
        config.apply_env()
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GitLabConfig:
        refresh = data.get("refresh_interval") or DEFAULT_REFRESH_INTERVAL
        limit = data.get("pipeline_limit") or DEFAULT_PIPELINE_LIMIT
        return cls(
            url=str(data.get("gitlab_url", "")).rstrip("/"),
            token=str(data.get("token", "")),
            projects=[str(p) for p in data.get("projects") or []],
            refresh_interval=float(refresh),
            pipeline_limit=int(limit),
        )

    def apply_env(self) -> None:
        url = os.getenv("GITLAB_URL")
        if url:
            self.url = url.rstrip("/")
        token = _env_token()
        if token:
            self.token = token
        self.read_only = _env_flag("GITLAB_READ_ONLY", self.read_only)
        self.timeout = int(os.getenv("GITLAB_TIMEOUT", str(self.timeout)))
        self.ssl_verify = os.getenv("GITLAB_SSL_VERIFY", "true").lower() not in (
            "false",
            "0",
            "no",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "gitlab_url": self.url,
            "token": self.token,
            "projects": list(self.projects),
            "refresh_interval": self.refresh_interval,
            "pipeline_limit": self.pipeline_limit,
        }

    def save(self, path: str | Path | None = None) -> Path:
        target = Path(path) if path is not None else (self.path or default_path())
        # the file holds the token: owner-only from the moment it exists
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
        self.path = target
        return target

    @property
    def api_url(self) -> str:
        return f"{self.url}/api/v4"

    def validate(self) -> None:
        if not self.url:
            msg = "GitLab URL is required (gitlab_url in config or GITLAB_URL)"
            raise ValueError(msg)
        if not self.token:
            msg = (
                "GitLab token is required. Set token in the config file or one of: "
                "GITLAB_TOKEN, GITLAB_PAT, GITLAB_PERSONAL_ACCESS_TOKEN, or GITLAB_API_TOKEN"
            )
            raise ValueError(msg)


def run_setup_wizard(path: str | Path | None = None) -> GitLabConfig:
    """Prompt for the essentials on first start and write them to *path*."""
    url = click.prompt("GitLab URL (e.g. https://gitlab.example.com)")
    token = click.prompt("Personal Access Token", hide_input=True)
    raw_projects = click.prompt(
        "Projects (comma-separated, e.g. group/project1,group/project2)",
        default="",
        show_default=False,
    )
    config = GitLabConfig(
        url=url.strip().rstrip("/"),
        token=token.strip(),
        projects=[p.strip() for p in raw_projects.split(",") if p.strip()],
    )
    saved = config.save(path)
    click.echo(f"Config saved to {saved}")
    return config
