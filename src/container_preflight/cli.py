from __future__ import annotations

from typing import List, NoReturn, Optional

import click
import typer
from click.core import ParameterSource

from .config import ConfigLayers, ParsedFlags
from .errors import PreflightError, ValidationPhaseError
from .logconfig import logging_for_run
from .models import DEFAULT_PYXIS_ENV
from .pipeline.context import RunContext
from .run_orchestrator import check_container_run
from .utils import host_architecture
from .validation import validate_check_container
from .version import VERSION

app = typer.Typer(add_completion=False, help="Preflight: certification checks for container images")

# ---- check commands ----
check_app = typer.Typer(help="Run checks for a container image.")
app.add_typer(check_app, name="check")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"preflight {VERSION}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print the version and exit."
    ),
) -> None:
    """Preflight: certification checks for container images."""


def _parsed_flags(ctx: click.Context, positional: str = "images") -> ParsedFlags:
    """Snapshot every option of the command, marking those given on the command line."""
    values: dict[str, object] = {}
    changed: list[str] = []
    for name, value in ctx.params.items():
        if name == positional:
            continue
        flag = name.replace("_", "-")
        values[flag] = value
        if ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE:
            changed.append(flag)
    return ParsedFlags.from_values(values, changed)


def _fail(message: str, usage: Optional[str] = None) -> NoReturn:
    if usage:
        typer.echo(usage, err=True)
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


@check_app.command(
    "container",
    epilog="Example:\n\n  preflight check container quay.io/repo-name/container-name:version",
)
def container(
    ctx: typer.Context,
    images: Optional[List[str]] = typer.Argument(None, help="Container image reference", show_default=False),
    submit: bool = typer.Option(False, "--submit", "-s", help="Submit check container results to Red Hat."),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Use insecure protocol for the registry. Default is False. Cannot be used with submit.",
    ),
    pyxis_api_token: str = typer.Option(
        "", "--pyxis-api-token", help="API token for Pyxis authentication (env: PFLT_PYXIS_API_TOKEN)", show_default=False
    ),
    pyxis_host: str = typer.Option(
        "",
        "--pyxis-host",
        help=(
            "Host to use for Pyxis submissions. This will override Pyxis Env. Only set this if you know what you "
            "are doing. If you do set it, it should include just the host, and the URI path. (env: PFLT_PYXIS_HOST)"
        ),
        show_default=False,
    ),
    pyxis_env: str = typer.Option(DEFAULT_PYXIS_ENV.value, "--pyxis-env", help="Env to use for Pyxis submissions."),
    certification_project_id: str = typer.Option(
        "",
        "--certification-project-id",
        help=(
            "Certification Project ID from connect.redhat.com/projects/{certification-project-id}/overview URL "
            "parameter. This value may differ from the PID on the overview page. (env: PFLT_CERTIFICATION_PROJECT_ID)"
        ),
        show_default=False,
    ),
    platform: str = typer.Option(
        host_architecture(), "--platform", help="Architecture of image to pull. Defaults to current platform."
    ),
) -> None:
    """
    Run the certification checks for a container image.
    """
    flags = _parsed_flags(ctx)
    args = list(images or [])

    try:
        layers = ConfigLayers.from_sources(flags)
        validate_check_container(args, flags, layers)
    except ValidationPhaseError as e:
        _fail(str(e), usage=ctx.get_usage())

    # Past this point failures are not usage errors.
    try:
        with logging_for_run(layers.get_string("logfile"), layers.get_string("loglevel")) as log:
            run_ctx = RunContext.create(logger=log)
            result = check_container_run(run_ctx, args[0], layers)
    except PreflightError as e:
        _fail(str(e))
    except OSError as e:
        _fail(f"unable to set up logging: {e}")

    typer.echo(f"Preflight result: {'PASSED' if result.results.passed else 'FAILED'}")
    typer.echo(f"Results: {result.results_file}")
    if result.junit_file:
        typer.echo(f"JUnit: {result.junit_file}")
    if result.submitted:
        typer.echo("Results submitted to Red Hat.")
