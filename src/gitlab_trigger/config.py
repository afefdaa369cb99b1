"""GitLab trigger run configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from urllib.parse import quote

from .exceptions import ConfigurationError

_TRUE = ("true", "1", "yes")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE


def parse_variables(raw: str | None) -> dict[str, str]:
    """Parse the JSON ``variables`` input into a flat string mapping."""
    if raw is None or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        msg = f"variables must be a JSON object: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(data, dict):
        msg = "variables must be a JSON object"
        raise ConfigurationError(msg)
    return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items()}


@dataclass(frozen=True)
class TriggerConfig:
    """Immutable configuration for a single trigger-and-wait run."""

    host: str = ""
    project_id: str = ""
    trigger_token: str = ""
    access_token: str = ""
    ref: str = ""
    variables: dict[str, str] = field(default_factory=dict)
    download_artifacts: bool = False
    download_on_failure: bool = False
    download_job_logs: bool = False
    fail_if_no_artifacts: bool = False
    download_path: str = "./artifacts"
    verbose: bool = False
    poll_interval: float = 15.0
    timeout: int = 30
    ssl_verify: bool = True

    @classmethod
    def from_env(cls) -> TriggerConfig:
        return cls(
            host=os.getenv("INPUT_HOST", "").strip(),
            project_id=os.getenv("INPUT_ID", "").strip(),
            trigger_token=os.getenv("INPUT_TRIGGER_TOKEN", ""),
            access_token=os.getenv("INPUT_ACCESS_TOKEN", ""),
            ref=os.getenv("INPUT_REF", "").strip(),
            variables=parse_variables(os.getenv("INPUT_VARIABLES")),
            download_artifacts=_env_flag("INPUT_DOWNLOAD_ARTIFACTS"),
            download_on_failure=_env_flag("INPUT_DOWNLOAD_ARTIFACTS_ON_FAILURE"),
            download_job_logs=_env_flag("INPUT_DOWNLOAD_JOB_LOGS"),
            fail_if_no_artifacts=_env_flag("INPUT_FAIL_IF_NO_ARTIFACTS"),
            download_path=os.getenv("INPUT_DOWNLOAD_PATH") or "./artifacts",
            verbose=_env_flag("INPUT_VERBOSE"),
            poll_interval=float(os.getenv("INPUT_POLL_INTERVAL") or "15"),
            timeout=int(os.getenv("INPUT_TIMEOUT") or "30"),
            ssl_verify=os.getenv("INPUT_SSL_VERIFY", "true").lower()
            not in ("false", "0", "no"),
        )

    @property
    def base_url(self) -> str:
        host = self.host.rstrip("/")
        if not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        return host

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api/v4"

    @property
    def encoded_project_id(self) -> str:
        """Numeric IDs pass through; ``group/project`` paths are URL-encoded."""
        try:
            return str(int(self.project_id))
        except ValueError:
            return quote(self.project_id, safe="")

    @property
    def wants_downloads(self) -> bool:
        return self.download_artifacts or self.download_job_logs

    def validate(self) -> None:
        missing = [
            name
            for name, value in (
                ("host", self.host),
                ("id", self.project_id),
                ("trigger_token", self.trigger_token),
                ("ref", self.ref),
            )
            if not value
        ]
        if missing:
            msg = f"Missing required input(s): {', '.join(missing)}"
            raise ConfigurationError(msg)
        if self.wants_downloads and not self.access_token:
            msg = "access_token is required to download artifacts or job logs"
            raise ConfigurationError(msg)
        if self.poll_interval < 0:
            msg = "poll_interval must not be negative"
            raise ConfigurationError(msg)
