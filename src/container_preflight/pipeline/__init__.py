"""Pipeline layer: the execution context and the check/format/write/submit run."""

from .context import RunContext
from .run import RunResult, run_preflight

__all__ = ["RunContext", "RunResult", "run_preflight"]
