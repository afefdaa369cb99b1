"""GitLab trigger exceptions."""

from __future__ import annotations


class GitLabError(Exception):
    """Base exception for GitLab trigger operations."""

    @property
    def reason(self) -> str:
        return str(self)


class ConfigurationError(GitLabError):
    """Raised when the run configuration is incomplete or malformed."""


class GitLabApiError(GitLabError):
    """Raised when the GitLab API returns a non-success response."""

    def __init__(self, status_code: int, status_text: str, body: str = "") -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        super().__init__(f"GitLab API Error {status_code} {status_text}: {body}")

    @property
    def reason(self) -> str:
        return f"GitLab API returned status code {self.status_code}."


class GitLabAuthError(GitLabApiError):
    """Raised on 401/403 authentication failures."""

    def __init__(self, status_code: int, body: str = "") -> None:
        status_text = "Unauthorized" if status_code == 401 else "Forbidden"
        super().__init__(status_code, status_text, body)

    @property
    def reason(self) -> str:
        if self.status_code == 401:
            return "Unauthorized: invalid/expired access token was used."
        return super().reason


class GitLabNotFoundError(GitLabApiError):
    """Raised on 404 responses."""

    def __init__(self, body: str = "") -> None:
        super().__init__(404, "Not Found", body)


TRIGGER_NOT_FOUND_REASON = (
    "The specified resource does not exist, or an invalid/expired trigger token was used."
)


class GitLabTransportError(GitLabError):
    """Raised when a request could not complete (DNS, connection, timeout)."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Request to {url} failed: {detail}")


class ArtifactExtractionError(GitLabError):
    """Raised when a downloaded artifact archive cannot be extracted."""
