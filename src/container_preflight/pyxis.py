"""Pyxis client and result submitters.

Submission is optional; when the client cannot be built (missing project id,
token or host) resolution yields a NoopSubmitter rather than an error.
"""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol, Union

import httpx
from pydantic import SecretStr

from .errors import SubmissionError
from .paths import results_filename
from .pipeline.context import RunContext

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS: float = 60.0


class PyxisClient:
    """Thin synchronous wrapper over the Pyxis certification project API."""

    def __init__(
        self,
        host: str,
        api_token: SecretStr,
        project_id: str,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.host = host
        self.project_id = project_id
        self._api_token = api_token
        self._transport = transport
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        host = self.host
        if not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        return host.rstrip("/")

    def _project_path(self, suffix: str = "") -> str:
        return f"/v1/projects/certification/id/{self.project_id}{suffix}"

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            headers={"X-API-KEY": self._api_token.get_secret_value()},
            timeout=self._timeout,
            transport=self._transport,
        )

    def _request(self, method: str, path: str, payload: Any = None) -> dict[str, Any]:
        try:
            with self._client() as client:
                resp = client.request(method, path, json=payload)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SubmissionError(
                f"pyxis {method} {path} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SubmissionError(f"pyxis {method} {path} failed: {exc}") from exc
        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as exc:
            raise SubmissionError(f"pyxis {method} {path} returned invalid JSON") from exc
        return body if isinstance(body, dict) else {"data": body}

    def get_project(self) -> dict[str, Any]:
        return self._request("GET", self._project_path())

    def update_project(self, patch: dict[str, Any]) -> dict[str, Any]:
        return self._request("PATCH", self._project_path(), patch)

    def create_test_results(self, results: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", self._project_path("/test-results"), results)

    def create_artifact(self, name: str, content: bytes, content_type: str) -> dict[str, Any]:
        payload = {
            "cert_project": self.project_id,
            "content": base64.b64encode(content).decode("ascii"),
            "content_type": content_type,
            "filename": name,
            "file_size": len(content),
        }
        return self._request("POST", self._project_path("/artifacts"), payload)


def new_pyxis_client(
    project_id: str,
    api_token: Union[SecretStr, str],
    host: str,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> Optional[PyxisClient]:
    """Return a client, or None when any of project id, token or host is empty."""
    token = api_token if isinstance(api_token, SecretStr) else SecretStr(api_token)
    if not project_id or not token.get_secret_value() or not host:
        return None
    return PyxisClient(host, token, project_id, transport=transport)


class ResultSubmitter(Protocol):
    def submit(self, ctx: RunContext) -> bool:  # pragma: no cover - interface
        """Return True only when results were actually sent."""
        ...


class NoopSubmitter:
    """Resolved when there is nothing to submit to."""

    def __init__(self, reason: str = "") -> None:
        self.reason = reason

    def submit(self, ctx: RunContext) -> bool:
        log = ctx.logger or logger
        log.info("results not submitted: %s", self.reason or "no pyxis client configured")
        return False


class ContainerCertificationSubmitter:
    """Sends results, logs and (optionally) registry credentials to Pyxis."""

    def __init__(self, client: PyxisClient, project_id: str, docker_config: str, logfile: Union[str, Path]) -> None:
        self.client = client
        self.project_id = project_id
        self.docker_config = docker_config
        self.logfile = Path(logfile)

    def _read(self, path: Path, what: str) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise SubmissionError(f"could not read {what} {path}: {exc}") from exc

    def submit(self, ctx: RunContext) -> bool:
        log = ctx.logger or logger
        writer = ctx.require_artifacts_writer()

        results_path = writer.path / results_filename("json")
        raw_results = self._read(results_path, "results file")
        try:
            results = json.loads(raw_results)
        except ValueError as exc:
            raise SubmissionError(f"results file {results_path} is not valid JSON") from exc

        project = self.client.get_project()
        log.debug("submitting to certification project %s", project.get("_id", self.project_id))

        if self.docker_config:
            docker_config = self._read(Path(self.docker_config), "docker config")
            self.client.update_project(
                {"container": {"docker_config_json": docker_config.decode("utf-8")}}
            )

        self.client.create_artifact(results_path.name, raw_results, "application/json")
        if self.logfile.exists():
            self.client.create_artifact(self.logfile.name, self._read(self.logfile, "log file"), "text/plain")

        created = self.client.create_test_results(results)
        log.info(
            "Test results have been submitted to Red Hat. Results id: %s",
            created.get("_id", "unknown"),
        )
        return True


def resolve_submitter(
    client: Optional[PyxisClient],
    project_id: str,
    docker_config: str,
    logfile: Union[str, Path],
) -> ResultSubmitter:
    if client is None:
        return NoopSubmitter("pyxis project id, api token or host not configured")
    return ContainerCertificationSubmitter(client, project_id, docker_config, logfile)
