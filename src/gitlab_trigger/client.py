"""GitLab API client using httpx."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from .config import TriggerConfig
from .exceptions import GitLabApiError, GitLabAuthError, GitLabNotFoundError, GitLabTransportError
from .models import GitLabModel, Job, Pipeline

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=GitLabModel)

JOBS_PER_PAGE = 100


class GitLabClient:
    """Async HTTP client for the pipeline trigger, status, job and artifact endpoints."""

    def __init__(self, config: TriggerConfig) -> None:
        self.config = config
        self._project = config.encoded_project_id
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            timeout=config.timeout,
            verify=config.ssl_verify,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitLabClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── HTTP helpers ──────────────────────────────────────────────

    def _auth_headers(self) -> dict[str, str]:
        """Anonymous reads are allowed on some projects, so the token is optional."""
        if self.config.access_token:
            return {"PRIVATE-TOKEN": self.config.access_token}
        return {}

    def _headers(self, accept: str, authenticated: bool) -> dict[str, str]:
        headers = {"Accept": accept}
        if authenticated:
            headers.update(self._auth_headers())
        return headers

    def _transport_error(self, path: str, error: Exception) -> GitLabTransportError:
        detail = str(error) or type(error).__name__
        return GitLabTransportError(f"{self.config.api_url}{path}", detail)

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code in (401, 403):
            raise GitLabAuthError(resp.status_code, resp.text)
        if resp.status_code == 404:
            raise GitLabNotFoundError(resp.text)
        if not resp.is_success:
            raise GitLabApiError(resp.status_code, resp.reason_phrase or "", resp.text)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any = None,
        params: dict[str, Any] | None = None,
        accept: str = "application/json",
        authenticated: bool = True,
    ) -> httpx.Response:
        """Send a request and return the response, raising on non-2xx or transport failure."""
        kwargs: dict[str, Any] = {
            "params": params,
            "headers": self._headers(accept, authenticated),
        }
        if json_data is not None:
            kwargs["json"] = json_data

        try:
            resp = await self._client.request(method, path, **kwargs)
        except (httpx.TransportError, httpx.InvalidURL) as e:
            raise self._transport_error(path, e) from e

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        self._raise_for_status(resp)
        return resp

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        content_type = resp.headers.get("content-type", "")
        if "text/html" in content_type:
            msg = "Unexpected HTML response, check host and authentication"
            raise GitLabApiError(resp.status_code, msg, resp.text[:500])

        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise GitLabApiError(
                resp.status_code,
                f"JSON parse error: {e}",
                resp.text[:500],
            ) from e

    @staticmethod
    def _parse(model: type[ModelT], payload: Any, status_code: int) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            msg = f"Unexpected {model.__name__} payload"
            raise GitLabApiError(status_code, msg, str(e)[:500]) from e

    # ── Pipelines ─────────────────────────────────────────────────

    async def trigger_pipeline(
        self,
        token: str,
        ref: str,
        variables: dict[str, str] | None = None,
    ) -> Pipeline:
        data = {"token": token, "ref": ref, "variables": variables or {}}
        resp = await self._request(
            "POST",
            f"/projects/{self._project}/trigger/pipeline",
            json_data=data,
            authenticated=False,
        )
        return self._parse(Pipeline, self._decode(resp), resp.status_code)

    async def get_pipeline(self, pipeline_id: int) -> Pipeline:
        resp = await self._request("GET", f"/projects/{self._project}/pipelines/{pipeline_id}")
        return self._parse(Pipeline, self._decode(resp), resp.status_code)

    async def list_pipeline_jobs(self, pipeline_id: int) -> list[Job]:
        """All jobs of a pipeline, following ``X-Next-Page`` across pages."""
        path = f"/projects/{self._project}/pipelines/{pipeline_id}/jobs"
        jobs: list[Job] = []
        page = 1
        while True:
            params = {"per_page": JOBS_PER_PAGE, "page": page}
            resp = await self._request("GET", path, params=params)
            payload = self._decode(resp)
            if not isinstance(payload, list):
                msg = "Unexpected job listing payload"
                raise GitLabApiError(resp.status_code, msg, str(payload)[:500])
            jobs.extend(self._parse(Job, item, resp.status_code) for item in payload)

            next_page = resp.headers.get("x-next-page", "").strip()
            if not next_page.isdigit() or not payload:
                return jobs
            page = int(next_page)

    # ── Jobs ──────────────────────────────────────────────────────

    async def get_job_log(self, job_id: int) -> str:
        resp = await self._request(
            "GET", f"/projects/{self._project}/jobs/{job_id}/trace", accept="text/plain"
        )
        return resp.text

    async def download_job_artifacts(self, job_id: int, destination: Path) -> int:
        """Stream a job's artifact archive into *destination*. Returns the bytes written."""
        path = f"/projects/{self._project}/jobs/{job_id}/artifacts"
        headers = self._headers("application/octet-stream", authenticated=True)
        written = 0
        try:
            async with self._client.stream("GET", path, headers=headers) as resp:
                logger.debug("GET %s -> %s", path, resp.status_code)
                if not resp.is_success:
                    await resp.aread()
                    self._raise_for_status(resp)
                with destination.open("wb") as fh:
                    async for chunk in resp.aiter_bytes():
                        fh.write(chunk)
                        written += len(chunk)
        except (httpx.TransportError, httpx.InvalidURL) as e:
            raise self._transport_error(path, e) from e
        return written
