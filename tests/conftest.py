from __future__ import annotations

import logging
from pathlib import Path

import pytest

from container_preflight.config import ENV_KEYS


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep PFLT_* settings from the developer's shell out of the tests."""
    for name in ENV_KEYS.values():
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PFLT_CONFIG", str(tmp_path / "no-config.yaml"))
    monkeypatch.setenv("PFLT_ARTIFACTS", str(tmp_path / "artifacts"))
    monkeypatch.setenv("PFLT_LOGFILE", str(tmp_path / "preflight.log"))
    return tmp_path


@pytest.fixture
def run_logger() -> logging.Logger:
    return logging.getLogger("container_preflight.tests")
