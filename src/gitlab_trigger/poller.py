"""Poll a triggered pipeline until it reaches a terminal status."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .client import GitLabClient
from .exceptions import GitLabError
from .models import Pipeline, PipelineStatus, is_terminal

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 15.0

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class PollResult:
    """Outcome of polling one pipeline.

    ``status`` is the last status observed. ``error`` is set when a status
    request failed, in which case ``status`` may still be non-terminal.
    """

    status: str
    error: GitLabError | None = None
    pipeline_failed: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class PipelinePoller:
    """Re-reads pipeline status on a fixed interval.

    There is no iteration cap or overall deadline: the loop ends on a terminal
    status or on the first failed request. Callers needing an upper bound
    must wrap :meth:`poll` (e.g. in ``asyncio.wait_for``).
    """

    def __init__(
        self,
        client: GitLabClient,
        interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.interval = interval
        self._sleep = sleep

    async def poll(self, pipeline: Pipeline) -> PollResult:
        logger.info("Polling pipeline %s on %s", pipeline.id, self.client.config.base_url)
        status = PipelineStatus.PENDING.value
        pipeline_failed = False

        while True:
            await self._sleep(self.interval)

            try:
                current = await self.client.get_pipeline(pipeline.id)
            except GitLabError as e:
                logger.error("Status request for pipeline %s failed: %s", pipeline.id, e)
                return PollResult(status=status, error=e, pipeline_failed=pipeline_failed)

            status = current.status
            logger.info("Pipeline status: %s (%s)", status, current.web_url or pipeline.web_url)

            if status == PipelineStatus.FAILED.value:
                pipeline_failed = True

            if is_terminal(status):
                logger.info('Status "%s" detected, stopping poll', status)
                return PollResult(status=status, pipeline_failed=pipeline_failed)
