"""Trigger → poll → fetch orchestration for a single run."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .client import GitLabClient
from .config import TriggerConfig
from .downloads import ArtifactFetcher, DownloadSummary, JobLogFetcher
from .exceptions import TRIGGER_NOT_FOUND_REASON, GitLabError, GitLabNotFoundError
from .models import Job, Pipeline, PipelineStatus
from .poller import PipelinePoller, Sleep

logger = logging.getLogger(__name__)


class RunStage(str, Enum):
    IDLE = "idle"
    TRIGGERING = "triggering"
    POLLING = "polling"
    FETCHING_JOBS = "fetching_jobs"
    DOWNLOADING_ARTIFACTS = "downloading_artifacts"
    DOWNLOADING_LOGS = "downloading_logs"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunResult:
    """Everything the host needs to report: outputs plus the final verdict."""

    outputs: dict[str, str] = field(default_factory=dict)
    failed: bool = False
    message: str | None = None
    stage: RunStage = RunStage.IDLE
    artifacts: DownloadSummary | None = None
    logs: DownloadSummary | None = None


class Orchestrator:
    """Runs one pipeline from trigger to terminal status and fetches its outputs.

    Components return values; only this class decides whether the run failed.
    """

    def __init__(
        self,
        config: TriggerConfig,
        client: GitLabClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self._client = client
        self._sleep = sleep

    def _describe(
        self, summary: str, error: BaseException | None, reason: str | None = None
    ) -> str:
        message = reason or (error.reason if isinstance(error, GitLabError) else summary)
        if self.config.verbose and error is not None:
            return f"{message} ({summary}: {error})"
        return message

    def _fail(self, result: RunResult, message: str) -> RunResult:
        logger.error(message)
        result.failed = True
        result.message = message
        result.stage = RunStage.FAILED
        return result

    def should_download_artifacts(self, status: str) -> bool:
        if status == PipelineStatus.SUCCESS.value:
            return True
        return status == PipelineStatus.FAILED.value and self.config.download_on_failure

    async def run(self) -> RunResult:
        result = RunResult()
        try:
            self.config.validate()
        except GitLabError as e:
            return self._fail(result, str(e))

        client = self._client or GitLabClient(self.config)
        try:
            return await self._run(client, result)
        except Exception as e:
            logger.exception("Unexpected error during run")
            return self._fail(result, self._describe("Pipeline run failed unexpectedly", e))
        finally:
            if self._client is None:
                await client.close()

    async def _run(self, client: GitLabClient, result: RunResult) -> RunResult:
        config = self.config

        result.stage = RunStage.TRIGGERING
        logger.info(
            "Triggering pipeline for project %s with ref %s on %s",
            config.project_id,
            config.ref,
            config.base_url,
        )
        try:
            pipeline = await client.trigger_pipeline(
                config.trigger_token, config.ref, config.variables
            )
        except GitLabNotFoundError as e:
            message = self._describe("Failed to trigger pipeline", e, TRIGGER_NOT_FOUND_REASON)
            return self._fail(result, message)
        except GitLabError as e:
            return self._fail(result, self._describe("Failed to trigger pipeline", e))

        result.outputs.update(
            id=str(pipeline.id), status=pipeline.status, web_url=pipeline.web_url
        )
        logger.info("Pipeline id %s triggered! See %s for details.", pipeline.id, pipeline.web_url)

        result.stage = RunStage.POLLING
        poller = PipelinePoller(client, interval=config.poll_interval, sleep=self._sleep)
        polled = await poller.poll(pipeline)
        result.outputs["status"] = polled.status
        if not polled.ok:
            message = self._describe("Failed to poll pipeline status", polled.error)
            return self._fail(result, message)

        pipeline_failed = polled.pipeline_failed
        result.outputs["artifacts_downloaded"] = "false"

        if config.wants_downloads:
            result.stage = RunStage.FETCHING_JOBS
            jobs = await self._list_jobs(client, pipeline)
            root = Path(config.download_path)
            log_fetcher = JobLogFetcher(client, root)
            logs_done = False

            if config.download_artifacts:
                if self.should_download_artifacts(polled.status):
                    result.stage = RunStage.DOWNLOADING_ARTIFACTS
                    fetcher = ArtifactFetcher(client, root, log_fetcher)
                    summary = await fetcher.fetch_artifacts(jobs, config.download_job_logs)
                    result.artifacts = summary
                    logs_done = config.download_job_logs
                    result.outputs["artifacts_downloaded"] = str(summary.success).lower()
                    if not summary.success:
                        logger.warning("No artifacts downloaded (%s)", summary.reason)
                        if config.fail_if_no_artifacts:
                            message = f"No artifacts were downloaded ({summary.reason})."
                            return self._fail(result, message)
                else:
                    logger.info("Skipping artifact download for pipeline status %s", polled.status)
                    result.outputs["artifacts_skipped_reason"] = f"pipeline_{polled.status}"

            if config.download_job_logs and not logs_done:
                result.stage = RunStage.DOWNLOADING_LOGS
                result.logs = await log_fetcher.fetch_all_logs(jobs)

        if pipeline_failed:
            return self._fail(result, "Pipeline failed!")

        result.stage = RunStage.DONE
        return result

    async def _list_jobs(self, client: GitLabClient, pipeline: Pipeline) -> list[Job]:
        """Listed once per run; a failed listing degrades to an empty set."""
        try:
            jobs = await client.list_pipeline_jobs(pipeline.id)
        except GitLabError as e:
            logger.warning("Could not list jobs for pipeline %s: %s", pipeline.id, e)
            return []
        logger.info("Pipeline %s has %d job(s)", pipeline.id, len(jobs))
        return jobs
