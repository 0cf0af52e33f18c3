from __future__ import annotations

from typing import Callable, Optional

import httpx

from .artifacts import FilesystemWriter
from .config import ConfigLayers, resolve_configuration
from .container import ContainerCheck
from .formatters import DEFAULT_FORMAT, new_by_name
from .models import CheckConfig
from .options import generate_container_check_options
from .pipeline.context import RunContext
from .pipeline.run import RunResult, run_preflight as default_run_preflight
from .pyxis import new_pyxis_client, resolve_submitter
from .runtime import ResultWriterFile
from .version import VERSION

# Same signature as pipeline.run.run_preflight; injectable for tests.
RunPreflight = Callable[..., RunResult]


def check_container_run(
    ctx: RunContext,
    image: str,
    layers: ConfigLayers,
    *,
    run_preflight: RunPreflight = default_run_preflight,
    format_name: str = DEFAULT_FORMAT,
    pyxis_transport: Optional[httpx.BaseTransport] = None,
) -> RunResult:
    """Set up and execute `check container` for `image`.

    Stages run strictly in order and the first failure propagates:
    logger, configuration, artifacts writer (bound to ctx for the whole
    run), formatter, check options, Pyxis submitter, then the run itself.
    Validation and identifier normalization must already have happened.
    """
    log = ctx.require_logger()
    log.info("certification library version %s", VERSION)

    cfg = resolve_configuration(layers)

    artifacts_writer = FilesystemWriter(cfg.artifacts)

    with ctx.with_writer(artifacts_writer):
        formatter = new_by_name(format_name)

        # Must run before CheckConfig is built: may force cfg.submit off.
        opts = generate_container_check_options(cfg)
        check = ContainerCheck(image, *opts)

        client = new_pyxis_client(
            cfg.certification_project_id,
            cfg.pyxis_api_token,
            cfg.pyxis_host,
            transport=pyxis_transport,
        )
        submitter = resolve_submitter(client, cfg.certification_project_id, cfg.docker_config, cfg.logfile)

        return run_preflight(
            ctx,
            check.run,
            CheckConfig(include_junit_results=cfg.write_junit, submit_results=cfg.submit),
            formatter,
            ResultWriterFile(),
            submitter,
        )
