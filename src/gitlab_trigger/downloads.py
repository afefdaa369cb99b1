"""Per-job log and artifact retrieval.

Each job writes into its own directory under the download root, so one job's
failure never touches another's files. Failures are recorded as
:class:`JobDownloadResult` values and never abort the batch.
"""

from __future__ import annotations

import logging
import re
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .archive import extract_archive
from .client import GitLabClient
from .exceptions import GitLabError
from .models import Job

logger = logging.getLogger(__name__)

LOG_FILENAME = "job.log"

NO_CANDIDATES = "no_candidates"
ALL_FAILED = "all_failed"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def job_directory(root: Path, job: Job) -> Path:
    """Deterministic per-job directory: ``<id>_<sanitized name>``."""
    name = _UNSAFE_CHARS.sub("_", job.name).strip("._") or "job"
    return root / f"{job.id}_{name}"


@dataclass(frozen=True)
class JobDownloadResult:
    job_id: int
    kind: Literal["artifacts", "log"]
    ok: bool
    error: str | None = None


@dataclass
class DownloadSummary:
    """Aggregated outcome of a batch of per-job downloads."""

    results: list[JobDownloadResult] = field(default_factory=list)
    reason: str | None = None

    def _count(self, kind: str) -> int:
        return sum(1 for r in self.results if r.kind == kind and r.ok)

    @property
    def artifacts_downloaded(self) -> int:
        return self._count("artifacts")

    @property
    def logs_downloaded(self) -> int:
        return self._count("log")

    @property
    def failures(self) -> list[JobDownloadResult]:
        return [r for r in self.results if not r.ok]

    @property
    def success(self) -> bool:
        return any(r.ok for r in self.results)


class JobLogFetcher:
    """Downloads raw job traces into ``<job dir>/job.log``."""

    def __init__(self, client: GitLabClient, root: Path) -> None:
        self.client = client
        self.root = root

    async def fetch_log(self, job: Job) -> JobDownloadResult:
        try:
            trace = await self.client.get_job_log(job.id)
            target = job_directory(self.root, job)
            target.mkdir(parents=True, exist_ok=True)
            (target / LOG_FILENAME).write_text(trace, encoding="utf-8")
        except (GitLabError, OSError) as e:
            logger.warning("Failed to download log for job %s (%s): %s", job.id, job.name, e)
            return JobDownloadResult(job.id, "log", ok=False, error=str(e))

        logger.info("Downloaded log for job %s (%s)", job.id, job.name)
        return JobDownloadResult(job.id, "log", ok=True)

    async def fetch_all_logs(self, jobs: Sequence[Job]) -> DownloadSummary:
        summary = DownloadSummary()
        for job in jobs:
            summary.results.append(await self.fetch_log(job))

        if not summary.success:
            summary.reason = NO_CANDIDATES if not jobs else ALL_FAILED
        logger.info("Downloaded logs for %d/%d jobs", summary.logs_downloaded, len(jobs))
        return summary


class ArtifactFetcher:
    """Downloads and unpacks job artifact archives, optionally with every job's log."""

    def __init__(
        self, client: GitLabClient, root: Path, log_fetcher: JobLogFetcher | None = None
    ) -> None:
        self.client = client
        self.root = root
        self.log_fetcher = log_fetcher or JobLogFetcher(client, root)

    async def fetch_job_artifacts(self, job: Job) -> JobDownloadResult:
        target = job_directory(self.root, job)
        archive: Path | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            # Kept outside the job directory so archive members can't collide with it.
            with tempfile.NamedTemporaryFile(
                dir=self.root, prefix=f".{job.id}_", suffix=".zip", delete=False
            ) as fh:
                archive = Path(fh.name)
            size = await self.client.download_job_artifacts(job.id, archive)
            logger.debug("Downloaded %d byte archive for job %s", size, job.id)
            target.mkdir(parents=True, exist_ok=True)
            files = extract_archive(archive, target)
        except (GitLabError, OSError) as e:
            logger.warning("Failed to download artifacts for job %s (%s): %s", job.id, job.name, e)
            return JobDownloadResult(job.id, "artifacts", ok=False, error=str(e))
        finally:
            if archive is not None:
                archive.unlink(missing_ok=True)

        logger.info("Extracted %d artifact file(s) for job %s (%s)", len(files), job.id, job.name)
        return JobDownloadResult(job.id, "artifacts", ok=True)

    async def fetch_artifacts(
        self, jobs: Sequence[Job], download_logs: bool = False
    ) -> DownloadSummary:
        candidates = [job for job in jobs if job.has_artifacts]
        summary = DownloadSummary()

        if not candidates and not download_logs:
            logger.info("No jobs with artifacts found")
            summary.reason = NO_CANDIDATES
            return summary

        for job in candidates:
            summary.results.append(await self.fetch_job_artifacts(job))

        if download_logs:
            for job in jobs:
                summary.results.append(await self.log_fetcher.fetch_log(job))

        if not summary.success:
            summary.reason = NO_CANDIDATES if not candidates else ALL_FAILED
        logger.info(
            "Downloaded artifacts for %d/%d jobs, logs for %d jobs",
            summary.artifacts_downloaded,
            len(candidates),
            summary.logs_downloaded,
        )
        return summary
