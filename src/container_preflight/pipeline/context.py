from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..artifacts import FilesystemWriter, context_with_writer, writer_from_context
from ..errors import ContextError, RunCancelledError


@dataclass
class RunContext:
    """Execution context handed from the CLI to the check engine.

    Carries the run's logger, the artifacts writer binding and a
    cancellation flag. Timeouts are the caller's business: set the
    cancel event from a timer if one is needed.
    """

    logger: Optional[logging.Logger]
    run_id: str
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def create(
        cls,
        *,
        logger: Optional[logging.Logger] = None,
        run_id: str | None = None,
    ) -> "RunContext":
        return cls(logger=logger, run_id=run_id or str(uuid.uuid4()))

    def require_logger(self) -> logging.Logger:
        if self.logger is None:
            raise ContextError("invalid logging configuration")
        return self.logger

    # ---- artifacts writer binding ----
    @contextmanager
    def with_writer(self, writer: FilesystemWriter) -> Iterator["RunContext"]:
        with context_with_writer(writer):
            yield self

    @property
    def artifacts_writer(self) -> Optional[FilesystemWriter]:
        return writer_from_context()

    def require_artifacts_writer(self) -> FilesystemWriter:
        writer = self.artifacts_writer
        if writer is None:
            raise ContextError("no artifacts writer bound to the run context")
        return writer

    # ---- cancellation ----
    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RunCancelledError("run cancelled")
