from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

LOGGER_NAME = "container_preflight"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_level(loglevel: str) -> int:
    level = logging.getLevelName(loglevel.strip().upper())
    if isinstance(level, int):
        return level
    # "trace" and unknown names fall back to the most verbose/default levels
    return logging.DEBUG if loglevel.strip().lower() == "trace" else logging.INFO


@contextmanager
def logging_for_run(logfile: Union[str, Path], loglevel: str = "info") -> Iterator[logging.Logger]:
    """Attach file and stderr handlers to the package logger for one run."""
    level = parse_level(loglevel)
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    path = Path(logfile)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding="utf-8")
    stream_handler = logging.StreamHandler(sys.stderr)
    for h in (file_handler, stream_handler):
        h.setLevel(level)
        h.setFormatter(formatter)
        log.addHandler(h)
    try:
        yield log
    finally:
        for h in (file_handler, stream_handler):
            log.removeHandler(h)
            h.close()
