"""Tests for the glcli command line entry point."""

from __future__ import annotations

import pytest
import yaml
from click.testing import CliRunner

import glcli
from glcli import main

ENV_VARS = (
    "GITLAB_URL",
    "GITLAB_TOKEN",
    "GITLAB_PAT",
    "GITLAB_PERSONAL_ACCESS_TOKEN",
    "GITLAB_API_TOKEN",
    "GITLAB_READ_ONLY",
    "GLCLI_CONFIG",
    "GLCLI_LOG",
)


class FakeApp:
    started: list = []

    def __init__(self, config):
        self.config = config

    def run(self):
        FakeApp.started.append(self.config)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so anything main() exports is rolled back afterwards
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr("glcli.tui.app.GlcliApp", FakeApp)
    FakeApp.started = []


def test_help():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "--gitlab-url" in result.output
    assert "--log-file" in result.output


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert glcli.__version__ in result.output


def test_runs_with_existing_config(tmp_path):
    path = tmp_path / "glcli.yaml"
    path.write_text("gitlab_url: https://gitlab.example.com\ntoken: secret\nprojects: [g/a]\n")
    result = CliRunner().invoke(main, ["--config", str(path)])
    assert result.exit_code == 0, result.output
    [config] = FakeApp.started
    assert config.projects == ["g/a"]
    assert config.path == path


def test_flags_override_file(tmp_path):
    path = tmp_path / "glcli.yaml"
    path.write_text("gitlab_url: https://file.example.com\ntoken: secret\n")
    result = CliRunner().invoke(
        main, ["--config", str(path), "--gitlab-url", "https://flag.example.com"]
    )
    assert result.exit_code == 0, result.output
    assert FakeApp.started[0].url == "https://flag.example.com"


def test_missing_config_runs_wizard(tmp_path):
    path = tmp_path / "glcli.yaml"
    result = CliRunner().invoke(
        main,
        ["--config", str(path)],
        input="https://gitlab.example.com\nsecret\ng/a,g/b\n",
    )
    assert result.exit_code == 0, result.output
    assert "No config found" in result.output
    assert yaml.safe_load(path.read_text())["projects"] == ["g/a", "g/b"]
    assert FakeApp.started[0].token == "secret"


def test_malformed_config(tmp_path):
    path = tmp_path / "glcli.yaml"
    path.write_text("projects: [oops\n")
    result = CliRunner().invoke(main, ["--config", str(path)])
    assert result.exit_code == 1
    assert "Parsing config" in result.output
    assert FakeApp.started == []


def test_missing_token(tmp_path):
    path = tmp_path / "glcli.yaml"
    path.write_text("gitlab_url: https://gitlab.example.com\n")
    result = CliRunner().invoke(main, ["--config", str(path)])
    assert result.exit_code == 1
    assert "token is required" in result.output
