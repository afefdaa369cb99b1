"""Shared test fixtures for gitlab-pipeline-trigger."""

from __future__ import annotations

import io
import zipfile

import pytest
import respx

from gitlab_trigger.client import GitLabClient
from gitlab_trigger.config import TriggerConfig

TEST_HOST = "gitlab.example.com"
TEST_API = "https://gitlab.example.com/api/v4"
TEST_TRIGGER_TOKEN = "trigger-token"
TEST_ACCESS_TOKEN = "access-token"


def make_config(**overrides) -> TriggerConfig:
    values = {
        "host": TEST_HOST,
        "project_id": "123",
        "trigger_token": TEST_TRIGGER_TOKEN,
        "access_token": TEST_ACCESS_TOKEN,
        "ref": "main",
        "poll_interval": 0,
    }
    values.update(overrides)
    return TriggerConfig(**values)


def make_zip(files: dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, text in files.items():
            zf.writestr(name, text)
    return buf.getvalue()


def make_unsupported_zip(name: str, text: str) -> bytes:
    """A stored zip whose member claims compression method 99."""
    data = bytearray(make_zip({name: text}))
    method = (99).to_bytes(2, "little")
    local = data.find(b"PK\x03\x04")
    data[local + 8 : local + 10] = method
    central = data.find(b"PK\x01\x02")
    data[central + 10 : central + 12] = method
    return bytes(data)


class FakeSleep:
    """Records requested delays instead of waiting."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def config() -> TriggerConfig:
    return make_config()


@pytest.fixture
def client(config: TriggerConfig) -> GitLabClient:
    return GitLabClient(config)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def mock_api() -> respx.MockRouter:
    with respx.mock(base_url=TEST_API, assert_all_called=False) as router:
        yield router
