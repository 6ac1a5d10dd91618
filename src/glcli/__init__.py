"""Terminal UI for GitLab pipelines, jobs and merge requests."""

import logging
import os

import click
from dotenv import load_dotenv

from .config import GitLabConfig, default_path, run_setup_wizard
from .exceptions import ConfigError, ConfigNotFoundError

__version__ = "0.3.0"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(log_file: str | None, level: int = logging.DEBUG) -> None:
    """Log to *log_file* when given; otherwise stay silent so the screen is never disturbed."""
    root = logging.getLogger("glcli")
    root.handlers.clear()
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.setLevel(level)
    else:
        handler = logging.NullHandler()
    root.addHandler(handler)
    root.propagate = False


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="GLCLI_CONFIG",
    help="Config file (default: ~/.glcli.yaml)",
)
@click.option("--gitlab-url", envvar="GITLAB_URL", help="GitLab instance URL")
@click.option("--gitlab-token", envvar="GITLAB_TOKEN", help="GitLab personal access token")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    envvar="GLCLI_LOG",
    help="Write debug logs to this file",
)
@click.version_option(__version__, prog_name="glcli")
def main(
    config_path: str | None,
    gitlab_url: str | None,
    gitlab_token: str | None,
    log_file: str | None,
) -> None:
    """Browse GitLab pipelines, jobs and merge requests in the terminal."""
    load_dotenv()
    configure_logging(log_file)

    if gitlab_url:
        os.environ["GITLAB_URL"] = gitlab_url
    if gitlab_token:
        os.environ["GITLAB_TOKEN"] = gitlab_token

    path = config_path or default_path()
    try:
        config = GitLabConfig.load(path)
    except ConfigNotFoundError:
        click.echo(f"No config found at {path}, let's create one.")
        config = run_setup_wizard(path)
        config.apply_env()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    try:
        config.validate()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    from .tui.app import GlcliApp

    GlcliApp(config).run()


if __name__ == "__main__":
    main()
