"""Tests for exceptions."""

from gitlab_trigger.exceptions import (
    TRIGGER_NOT_FOUND_REASON,
    ConfigurationError,
    GitLabApiError,
    GitLabAuthError,
    GitLabError,
    GitLabNotFoundError,
    GitLabTransportError,
)


def test_api_error():
    e = GitLabApiError(500, "Internal Server Error", "something broke")
    assert e.status_code == 500
    assert "500" in str(e)
    assert "something broke" in str(e)
    assert e.reason == "GitLab API returned status code 500."


def test_auth_error_401():
    e = GitLabAuthError(401)
    assert e.status_code == 401
    assert "Unauthorized" in str(e)
    assert "access token" in e.reason


def test_auth_error_403():
    e = GitLabAuthError(403)
    assert e.status_code == 403
    assert "Forbidden" in str(e)
    assert e.reason == "GitLab API returned status code 403."


def test_not_found_error():
    e = GitLabNotFoundError("resource not found")
    assert e.status_code == 404
    assert e.reason == "GitLab API returned status code 404."
    assert "trigger token" not in e.reason


def test_trigger_not_found_reason():
    assert "invalid/expired trigger token" in TRIGGER_NOT_FOUND_REASON


def test_transport_error_is_not_api_error():
    e = GitLabTransportError("https://x/api/v4/projects/1", "connection refused")
    assert isinstance(e, GitLabError)
    assert not isinstance(e, GitLabApiError)
    assert "connection refused" in e.reason


def test_configuration_error_reason():
    assert ConfigurationError("missing ref").reason == "missing ref"
