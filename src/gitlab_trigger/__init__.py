"""Trigger a GitLab pipeline, wait for it, and fetch its artifacts and logs."""

import asyncio
import dataclasses
import logging
import sys

import click
from dotenv import load_dotenv

from .config import TriggerConfig, parse_variables
from .exceptions import ConfigurationError


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


@click.command()
@click.option("--host", envvar="INPUT_HOST", help="GitLab host, e.g. gitlab.com")
@click.option("--id", "project_id", envvar="INPUT_ID", help="Project ID or path")
@click.option("--trigger-token", envvar="INPUT_TRIGGER_TOKEN", help="Pipeline trigger token")
@click.option(
    "--access-token",
    envvar="INPUT_ACCESS_TOKEN",
    help="Access token for status reads and downloads",
)
@click.option("--ref", envvar="INPUT_REF", help="Branch or tag to run the pipeline on")
@click.option("--variables", envvar="INPUT_VARIABLES", help="Pipeline variables as a JSON object")
@click.option(
    "--download-artifacts/--no-download-artifacts", default=None, help="Download job artifacts"
)
@click.option(
    "--download-on-failure/--no-download-on-failure",
    default=None,
    help="Also download artifacts when the pipeline failed",
)
@click.option(
    "--download-job-logs/--no-download-job-logs", default=None, help="Download every job's log"
)
@click.option(
    "--fail-if-no-artifacts/--no-fail-if-no-artifacts",
    default=None,
    help="Fail the run when no artifacts were downloaded",
)
@click.option(
    "--download-path", envvar="INPUT_DOWNLOAD_PATH", help="Directory for job artifacts and logs"
)
@click.option(
    "--poll-interval",
    envvar="INPUT_POLL_INTERVAL",
    type=float,
    help="Seconds between status checks",
)
@click.option("--verbose/--no-verbose", default=None, help="Include full error details in failures")
def main(
    host: str | None,
    project_id: str | None,
    trigger_token: str | None,
    access_token: str | None,
    ref: str | None,
    variables: str | None,
    download_artifacts: bool | None,
    download_on_failure: bool | None,
    download_job_logs: bool | None,
    fail_if_no_artifacts: bool | None,
    download_path: str | None,
    poll_interval: float | None,
    verbose: bool | None,
) -> None:
    """Trigger a GitLab pipeline and wait for it to finish."""
    load_dotenv()

    from .orchestrator import Orchestrator
    from .reporter import ActionReporter

    reporter = ActionReporter()
    try:
        config = TriggerConfig.from_env()
        overrides = {
            "host": host,
            "project_id": project_id,
            "trigger_token": trigger_token,
            "access_token": access_token,
            "ref": ref,
            "variables": parse_variables(variables) if variables is not None else None,
            "download_artifacts": download_artifacts,
            "download_on_failure": download_on_failure,
            "download_job_logs": download_job_logs,
            "fail_if_no_artifacts": fail_if_no_artifacts,
            "download_path": download_path,
            "poll_interval": poll_interval,
            "verbose": verbose,
        }
        config = dataclasses.replace(
            config, **{k: v for k, v in overrides.items() if v is not None}
        )
    except (ConfigurationError, ValueError) as e:
        reporter.set_failed(str(e))
        sys.exit(1)

    _setup_logging(config.verbose)
    result = asyncio.run(Orchestrator(config).run())
    sys.exit(reporter.report(result))


if __name__ == "__main__":
    main()
