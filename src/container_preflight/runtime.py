from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .errors import PersistenceError


class ResultWriter(Protocol):
    def write(self, path: Path, content: str) -> Path:  # pragma: no cover - interface
        ...


class ResultWriterFile:
    """Persists formatted results to a file on the local filesystem."""

    def write(self, path: Path, content: str) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                f.write(content)
        except OSError as exc:
            raise PersistenceError(f"could not write results to {path}: {exc}") from exc
        return path
