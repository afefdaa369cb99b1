"""Tests for run configuration."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from gitlab_trigger.config import TriggerConfig, parse_variables
from gitlab_trigger.exceptions import ConfigurationError

from ..conftest import make_config


def test_config_from_env():
    env = {
        "INPUT_HOST": "gitlab.example.com",
        "INPUT_ID": "42",
        "INPUT_TRIGGER_TOKEN": "tt",
        "INPUT_REF": "main",
        "INPUT_VARIABLES": '{"FOO": "bar", "N": 1}',
        "INPUT_DOWNLOAD_ARTIFACTS": "true",
    }
    with patch.dict(os.environ, env, clear=True):
        config = TriggerConfig.from_env()
    assert config.host == "gitlab.example.com"
    assert config.project_id == "42"
    assert config.variables == {"FOO": "bar", "N": "1"}
    assert config.download_artifacts is True
    assert config.download_job_logs is False
    assert config.download_path == "./artifacts"
    assert config.poll_interval == 15.0


def test_config_from_env_flags():
    env = {
        "INPUT_DOWNLOAD_ARTIFACTS_ON_FAILURE": "yes",
        "INPUT_DOWNLOAD_JOB_LOGS": "1",
        "INPUT_FAIL_IF_NO_ARTIFACTS": "TRUE",
        "INPUT_VERBOSE": "false",
    }
    with patch.dict(os.environ, env, clear=True):
        config = TriggerConfig.from_env()
    assert config.download_on_failure is True
    assert config.download_job_logs is True
    assert config.fail_if_no_artifacts is True
    assert config.verbose is False


def test_config_is_immutable():
    config = make_config()
    with pytest.raises(AttributeError):
        config.ref = "other"


def test_api_url_bare_host():
    assert make_config(host="gitlab.com").api_url == "https://gitlab.com/api/v4"


def test_api_url_keeps_scheme_and_strips_slash():
    config = make_config(host="http://localhost:8080/")
    assert config.api_url == "http://localhost:8080/api/v4"


def test_encoded_project_id():
    assert make_config(project_id="123").encoded_project_id == "123"
    assert make_config(project_id="group/project").encoded_project_id == "group%2Fproject"


def test_parse_variables_empty():
    assert parse_variables(None) == {}
    assert parse_variables("  ") == {}


def test_parse_variables_invalid_json():
    with pytest.raises(ConfigurationError, match="JSON"):
        parse_variables("{not json")


def test_parse_variables_not_an_object():
    with pytest.raises(ConfigurationError, match="object"):
        parse_variables('["a"]')


def test_validate_ok():
    make_config().validate()


def test_validate_missing_required():
    with pytest.raises(ConfigurationError, match="trigger_token"):
        make_config(trigger_token="").validate()


@pytest.mark.parametrize("flag", ["download_artifacts", "download_job_logs"])
def test_validate_downloads_require_access_token(flag):
    with pytest.raises(ConfigurationError, match="access_token"):
        make_config(access_token="", **{flag: True}).validate()


def test_validate_status_reads_without_access_token():
    make_config(access_token="").validate()
