from __future__ import annotations

import base64
import json
import logging
from pathlib import Path

import httpx
import pytest
from pydantic import SecretStr

from container_preflight.artifacts import FilesystemWriter
from container_preflight.errors import SubmissionError
from container_preflight.pipeline import RunContext
from container_preflight.pyxis import (
    ContainerCertificationSubmitter,
    NoopSubmitter,
    new_pyxis_client,
    resolve_submitter,
)


def test_client_requires_all_of_project_token_and_host() -> None:
    assert new_pyxis_client("", "secret", "catalog.redhat.com/api/containers") is None
    assert new_pyxis_client("123", "", "catalog.redhat.com/api/containers") is None
    assert new_pyxis_client("123", SecretStr("secret"), "") is None
    assert new_pyxis_client("123", "secret", "catalog.redhat.com/api/containers") is not None


def test_resolution_never_fails_without_a_client() -> None:
    assert isinstance(resolve_submitter(None, "", "", "preflight.log"), NoopSubmitter)


def test_base_url_gets_https_scheme() -> None:
    client = new_pyxis_client("123", "secret", "catalog.redhat.com/api/containers/")
    assert client is not None
    assert client.base_url == "https://catalog.redhat.com/api/containers"


def _prepare_run(tmp_path: Path) -> tuple[FilesystemWriter, Path]:
    writer = FilesystemWriter(tmp_path / "artifacts")
    writer.write_file("results.json", json.dumps({"test_target_image": "quay.io/r/n:v", "passed": True}))
    logfile = tmp_path / "preflight.log"
    logfile.write_text("log line\n", encoding="utf-8")
    return writer, logfile


def test_submitter_sends_artifacts_and_results(tmp_path: Path) -> None:
    writer, logfile = _prepare_run(tmp_path)
    docker_config = tmp_path / "auth.json"
    docker_config.write_text('{"auths": {}}', encoding="utf-8")
    seen: list[tuple[str, str, dict]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        seen.append((request.method, request.url.path, body))
        assert request.headers["X-API-KEY"] == "secret"
        return httpx.Response(200, json={"_id": "abc"})

    client = new_pyxis_client("123", "secret", "pyxis.test/api", transport=httpx.MockTransport(handler))
    submitter = resolve_submitter(client, "123", str(docker_config), logfile)
    assert isinstance(submitter, ContainerCertificationSubmitter)

    ctx = RunContext.create(logger=logging.getLogger("container_preflight.tests"))
    with ctx.with_writer(writer):
        assert submitter.submit(ctx) is True

    methods = [(m, p) for m, p, _ in seen]
    assert methods == [
        ("GET", "/api/v1/projects/certification/id/123"),
        ("PATCH", "/api/v1/projects/certification/id/123"),
        ("POST", "/api/v1/projects/certification/id/123/artifacts"),
        ("POST", "/api/v1/projects/certification/id/123/artifacts"),
        ("POST", "/api/v1/projects/certification/id/123/test-results"),
    ]
    results_artifact = seen[2][2]
    assert results_artifact["filename"] == "results.json"
    assert json.loads(base64.b64decode(results_artifact["content"]))["passed"] is True
    assert seen[4][2]["test_target_image"] == "quay.io/r/n:v"


def test_http_error_becomes_submission_error(tmp_path: Path) -> None:
    writer, logfile = _prepare_run(tmp_path)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"detail": "bad key"})

    client = new_pyxis_client("123", "secret", "pyxis.test/api", transport=httpx.MockTransport(handler))
    submitter = resolve_submitter(client, "123", "", logfile)

    ctx = RunContext.create(logger=logging.getLogger("container_preflight.tests"))
    with ctx.with_writer(writer):
        with pytest.raises(SubmissionError, match="401"):
            submitter.submit(ctx)


def test_missing_results_file_is_a_submission_error(tmp_path: Path) -> None:
    writer = FilesystemWriter(tmp_path / "artifacts")

    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - never reached
        return httpx.Response(200, json={})

    client = new_pyxis_client("123", "secret", "pyxis.test/api", transport=httpx.MockTransport(handler))
    submitter = resolve_submitter(client, "123", "", tmp_path / "preflight.log")

    ctx = RunContext.create(logger=logging.getLogger("container_preflight.tests"))
    with ctx.with_writer(writer):
        with pytest.raises(SubmissionError):
            submitter.submit(ctx)
