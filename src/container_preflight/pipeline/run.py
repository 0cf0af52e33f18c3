from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from ..errors import CheckExecutionError, FormatterError, PreflightError, RunCancelledError
from ..formatters import JUnitXMLFormatter, ResponseFormatter
from ..models import CheckConfig, Results
from ..paths import JUNIT_RESULTS_FILENAME, results_filename
from ..runtime import ResultWriter
from .context import RunContext

if TYPE_CHECKING:
    from ..pyxis import ResultSubmitter

CheckFn = Callable[[RunContext], Results]


@dataclass(frozen=True)
class RunResult:
    """What a completed run produced on disk."""

    results: Results
    results_file: Path
    junit_file: Optional[Path] = None
    submitted: bool = False


def _execute_check(ctx: RunContext, check_fn: CheckFn) -> Results:
    ctx.raise_if_cancelled()
    try:
        results = check_fn(ctx)
    except KeyboardInterrupt as exc:
        ctx.cancel()
        raise RunCancelledError("run cancelled") from exc
    except PreflightError:
        raise
    except Exception as exc:
        raise CheckExecutionError(f"{exc}") from exc
    # A check engine that noticed cancellation late may still return.
    ctx.raise_if_cancelled()
    return results


def _format(formatter: ResponseFormatter, results: Results) -> str:
    try:
        return formatter.format(results)
    except Exception as exc:
        raise FormatterError(f"failed to format results with {formatter.name}: {exc}") from exc


def run_preflight(
    ctx: RunContext,
    check_fn: CheckFn,
    check_config: CheckConfig,
    formatter: ResponseFormatter,
    result_writer: ResultWriter,
    submitter: "ResultSubmitter",
) -> RunResult:
    """Run the checks, then format, persist and optionally submit the results.

    Results are written locally before any submission is attempted. The first
    failing stage aborts the remaining ones; files already written stay.
    """
    log = ctx.require_logger()
    artifacts_dir = ctx.require_artifacts_writer().path

    results = _execute_check(ctx, check_fn)

    formatted = _format(formatter, results)
    results_file = result_writer.write(artifacts_dir / results_filename(formatter.file_extension), formatted)
    log.info("results written to %s", results_file)

    junit_file: Optional[Path] = None
    if check_config.include_junit_results:
        junit = _format(JUnitXMLFormatter(), results)
        junit_file = result_writer.write(artifacts_dir / JUNIT_RESULTS_FILENAME, junit)
        log.info("junit results written to %s", junit_file)

    if not results.passed:
        log.info("preflight result: FAILED")
    else:
        log.info("preflight result: PASSED")

    submitted = False
    if check_config.submit_results:
        submitted = submitter.submit(ctx)

    return RunResult(results=results, results_file=results_file, junit_file=junit_file, submitted=submitted)
