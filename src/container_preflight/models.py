from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from .utils import now_iso


class PyxisEnv(str, Enum):
    """
    Pyxis environments a submission can target.

    The host for each environment is only a default; an explicit
    pyxis_host always wins.
    """
    PROD = "prod"
    UAT = "uat"
    QA = "qa"
    STAGE = "stage"


DEFAULT_PYXIS_ENV = PyxisEnv.PROD

PYXIS_HOSTS: dict[PyxisEnv, str] = {
    PyxisEnv.PROD: "catalog.redhat.com/api/containers",
    PyxisEnv.UAT: "catalog.uat.redhat.com/api/containers",
    PyxisEnv.QA: "catalog.qa.redhat.com/api/containers",
    PyxisEnv.STAGE: "catalog.stage.redhat.com/api/containers",
}


class RunConfiguration(BaseModel):
    """
    Resolved settings for a single `check container` invocation.

    Built once from the layered sources and read-only afterwards, except for
    two sanctioned updates made before options are assembled:
    certification_project_id normalization and forcing submit off when
    insecure is set.
    """
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    certification_project_id: str = ""
    pyxis_api_token: SecretStr = SecretStr("")
    pyxis_host: str
    pyxis_env: str = DEFAULT_PYXIS_ENV.value
    platform: str
    submit: bool = False
    insecure: bool = False
    docker_config: str = ""
    artifacts: Path = Path("artifacts")
    logfile: Path = Path("preflight.log")
    loglevel: str = "info"
    write_junit: bool = False


class CheckConfig(BaseModel):
    """Switches that control what happens after the checks ran."""
    include_junit_results: bool = False
    submit_results: bool = False


class CheckResult(BaseModel):
    """
    Outcome of one check against the image.

    elapsed_ms: wall time of the check
    help/suggestion/knowledgebase_url/check_url: remediation metadata
    """
    name: str
    elapsed_ms: int = 0
    description: str = ""
    help: str = ""
    suggestion: str = ""
    knowledgebase_url: str = ""
    check_url: str = ""


class Results(BaseModel):
    """
    Everything the check engine reports for one image.

    The orchestrator only threads this through to the formatter and writer;
    it never inspects the individual checks.
    """
    test_target_image: str
    image_digest: str = ""
    certification_hash: str = ""
    library_info: dict[str, str] = Field(default_factory=dict)
    passed_checks: List[CheckResult] = Field(default_factory=list)
    failed_checks: List[CheckResult] = Field(default_factory=list)
    errored_checks: List[CheckResult] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    platform: Optional[str] = None

    @property
    def passed(self) -> bool:
        return not self.failed_checks and not self.errored_checks
