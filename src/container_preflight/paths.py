from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

CONFIG_FILE_ENV = "PFLT_CONFIG"
CONFIG_FILE_NAME = "config.yaml"

RESULTS_BASENAME = "results"
JUNIT_RESULTS_FILENAME = "results-junit.xml"


def config_file_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Location of the optional YAML config file.

    PFLT_CONFIG wins; otherwise ./config.yaml relative to the working directory.
    """
    env = os.environ if environ is None else environ
    explicit = env.get(CONFIG_FILE_ENV)
    if explicit:
        return Path(explicit)
    return Path.cwd() / CONFIG_FILE_NAME


def results_filename(extension: str) -> str:
    return f"{RESULTS_BASENAME}.{extension}"
