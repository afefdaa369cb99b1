"""Report run outputs and failures back to the invoking workflow."""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

import click

from .orchestrator import RunResult

logger = logging.getLogger(__name__)


class ActionReporter:
    """Writes step outputs in the GitHub Actions ``GITHUB_OUTPUT`` file format."""

    def __init__(self, output_file: str | None = None) -> None:
        if output_file is None:
            output_file = os.getenv("GITHUB_OUTPUT", "")
        self.output_file = output_file

    def set_output(self, name: str, value: str) -> None:
        if not self.output_file:
            click.echo(f"{name}={value}")
            return
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            line = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
        else:
            line = f"{name}={value}\n"
        with Path(self.output_file).open("a", encoding="utf-8") as fh:
            fh.write(line)

    def set_failed(self, message: str) -> None:
        click.echo(f"::error::{message}", err=True)

    def report(self, result: RunResult) -> int:
        """Emit every output, then the failure if any. Returns the process exit code."""
        for name, value in result.outputs.items():
            self.set_output(name, value)
        if result.failed:
            self.set_failed(result.message or "Pipeline run failed")
            return 1
        return 0
