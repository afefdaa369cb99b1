"""GitLab API response models."""

from .base import GitLabModel
from .pipelines import (
    TERMINAL_STATUSES,
    ArtifactsFile,
    Job,
    Pipeline,
    PipelineStatus,
    is_terminal,
)

__all__ = [
    "TERMINAL_STATUSES",
    "ArtifactsFile",
    "GitLabModel",
    "Job",
    "Pipeline",
    "PipelineStatus",
    "is_terminal",
]
