from __future__ import annotations

import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

# platform.machine() spellings -> OCI/GOARCH platform names
_ARCH_ALIASES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def host_architecture() -> str:
    """
    Architecture of the running host in image-platform naming (amd64, arm64, ...).
    Unknown machines are passed through lowercased.
    """
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


def read_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def looks_like_flag(value: str) -> bool:
    """True when a value starts with the long-flag prefix, e.g. a swallowed `--submit`."""
    return value.startswith("--")
