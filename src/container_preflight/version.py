from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as get_version

PROJECT_NAME = "container-preflight"

try:
    VERSION = get_version(PROJECT_NAME)
except PackageNotFoundError:
    VERSION = "dev"


def version_info() -> dict[str, str]:
    return {"name": PROJECT_NAME, "version": VERSION}
