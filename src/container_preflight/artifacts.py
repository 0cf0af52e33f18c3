from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, Optional, Union

from .errors import ArtifactsError

logger = logging.getLogger(__name__)

_CURRENT_WRITER: ContextVar[Optional["FilesystemWriter"]] = ContextVar("artifacts_writer", default=None)


class FilesystemWriter:
    """Writes check artifacts under a single directory.

    The directory is created on construction; an unusable directory fails
    with ArtifactsError before any check runs.
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        path = Path(directory)
        try:
            path = path.resolve()
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArtifactsError(f"could not create artifacts directory {directory}: {exc}") from exc
        if not path.is_dir():
            raise ArtifactsError(f"artifacts path {path} is not a directory")
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write_file(self, name: str, content: Union[str, bytes]) -> Path:
        """Write `name` below the artifacts directory and return its full path."""
        target = self._path / name
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ArtifactsError(f"could not write artifact {name}: {exc}") from exc
        logger.debug("wrote artifact %s", target)
        return target

    def __repr__(self) -> str:
        return f"FilesystemWriter({str(self._path)!r})"


@contextmanager
def context_with_writer(writer: FilesystemWriter) -> Iterator[FilesystemWriter]:
    """Make `writer` the current artifacts writer for the duration of the block."""
    token = _CURRENT_WRITER.set(writer)
    try:
        yield writer
    finally:
        _CURRENT_WRITER.reset(token)


def writer_from_context() -> Optional[FilesystemWriter]:
    return _CURRENT_WRITER.get()
