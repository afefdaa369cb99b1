"""Pipeline and job models."""

from __future__ import annotations

from enum import Enum

from .base import GitLabModel


class PipelineStatus(str, Enum):
    """Pipeline status values reported by ``GET /projects/:id/pipelines/:id``."""

    CREATED = "created"
    PREPARING = "preparing"
    PENDING = "pending"
    WAITING_FOR_RESOURCE = "waiting_for_resource"
    RUNNING = "running"
    SCHEDULED = "scheduled"
    FAILED = "failed"
    SUCCESS = "success"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    MANUAL = "manual"


TERMINAL_STATUSES = frozenset(
    {
        PipelineStatus.FAILED.value,
        PipelineStatus.SUCCESS.value,
        PipelineStatus.CANCELED.value,
        PipelineStatus.SKIPPED.value,
    }
)


def is_terminal(status: str) -> bool:
    """Unknown statuses are treated as non-terminal."""
    return status in TERMINAL_STATUSES


class Pipeline(GitLabModel):
    id: int
    iid: int = 0
    status: str = ""
    ref: str = ""
    sha: str = ""
    web_url: str = ""


class ArtifactsFile(GitLabModel):
    filename: str = ""
    size: int = 0


class Job(GitLabModel):
    id: int
    name: str = ""
    stage: str = ""
    status: str = ""
    web_url: str = ""
    artifacts_file: ArtifactsFile | None = None

    @property
    def has_artifacts(self) -> bool:
        return self.artifacts_file is not None and bool(self.artifacts_file.filename)
