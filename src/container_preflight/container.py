"""Check engine handle for a single container image.

Certification policy content lives outside this package. The engine here
parses the image reference, records what it inspected as an artifact and
runs whatever checks it was given; the built-in set only covers reference
sanity.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from pydantic import SecretStr

from .errors import CheckExecutionError
from .models import CheckResult, Results
from .options import CheckOption
from .pipeline.context import RunContext
from .version import version_info

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "docker.io"
REFERENCE_ARTIFACT = "image-reference.json"

_COMPONENT_RE = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
_DIGEST_RE = re.compile(r"^[a-z0-9]+(?:[+._-][a-z0-9]+)*:[a-fA-F0-9]{32,}$")


@dataclass(frozen=True)
class ImageReference:
    registry: str
    repository: str
    tag: str = ""
    digest: str = ""

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        if not reference or reference != reference.strip():
            raise ValueError(f"invalid image reference {reference!r}")

        rest, digest = reference, ""
        if "@" in rest:
            rest, digest = rest.split("@", 1)
            if not _DIGEST_RE.match(digest):
                raise ValueError(f"invalid digest in image reference {reference!r}")

        tag = ""
        slash = rest.rfind("/")
        colon = rest.rfind(":")
        if colon > slash:
            rest, tag = rest[:colon], rest[colon + 1 :]
            if not _TAG_RE.match(tag):
                raise ValueError(f"invalid tag in image reference {reference!r}")

        parts = rest.split("/")
        registry = DEFAULT_REGISTRY
        if len(parts) > 1 and ("." in parts[0] or ":" in parts[0] or parts[0] == "localhost"):
            registry = parts.pop(0)
        if not parts or not all(_COMPONENT_RE.match(p) for p in parts):
            raise ValueError(f"invalid repository in image reference {reference!r}")

        return cls(registry=registry, repository="/".join(parts), tag=tag, digest=digest)

    def __str__(self) -> str:
        out = f"{self.registry}/{self.repository}"
        if self.tag:
            out += f":{self.tag}"
        if self.digest:
            out += f"@{self.digest}"
        return out


@dataclass(frozen=True)
class Check:
    """A named predicate over the image under test."""

    name: str
    description: str
    validate: Callable[["ContainerCheck"], bool]
    help: str = ""
    suggestion: str = ""
    knowledgebase_url: str = ""
    check_url: str = ""

    def result(self, elapsed_ms: int) -> CheckResult:
        return CheckResult(
            name=self.name,
            elapsed_ms=elapsed_ms,
            description=self.description,
            help=self.help,
            suggestion=self.suggestion,
            knowledgebase_url=self.knowledgebase_url,
            check_url=self.check_url,
        )


def _has_valid_reference(check: "ContainerCheck") -> bool:
    return check.reference is not None


DEFAULT_CHECKS: tuple[Check, ...] = (
    Check(
        name="ValidImageReference",
        description="Checking that the image reference can be parsed",
        validate=_has_valid_reference,
        help="The image must be addressable as registry/repository[:tag][@digest].",
        suggestion="Pass a fully qualified image reference, e.g. quay.io/org/image:tag",
    ),
)


class ContainerCheck:
    """Check configuration and entry point for one image."""

    def __init__(self, image: str, *options: CheckOption, checks: Optional[Sequence[Check]] = None) -> None:
        self.image = image
        self.certification_project_id = ""
        self.pyxis_api_token = SecretStr("")
        self.pyxis_host = ""
        self.docker_config = ""
        self.platform = ""
        self.insecure = False
        self.checks: List[Check] = list(DEFAULT_CHECKS if checks is None else checks)
        self.reference: Optional[ImageReference] = None
        for opt in options:
            opt.apply(self)

    def _record_reference(self, ctx: RunContext) -> None:
        writer = ctx.require_artifacts_writer()
        payload = {
            "image": self.image,
            "reference": str(self.reference) if self.reference else None,
            "platform": self.platform,
            "insecure": self.insecure,
        }
        writer.write_file(REFERENCE_ARTIFACT, json.dumps(payload, indent=2, sort_keys=True) + "\n")

    def run(self, ctx: RunContext) -> Results:
        log = ctx.logger or logger
        ctx.raise_if_cancelled()

        try:
            self.reference = ImageReference.parse(self.image)
        except ValueError as exc:
            log.warning("%s", exc)
            self.reference = None

        if self.insecure:
            log.warning("using an insecure connection to the registry for %s", self.image)

        self._record_reference(ctx)

        results = Results(
            test_target_image=self.image,
            image_digest=self.reference.digest if self.reference else "",
            library_info=version_info(),
            platform=self.platform or None,
        )
        for check in self.checks:
            ctx.raise_if_cancelled()
            start = time.monotonic()
            try:
                ok = check.validate(self)
            except Exception as exc:
                log.error("check %s errored: %s", check.name, exc)
                results.errored_checks.append(check.result(int((time.monotonic() - start) * 1000)))
                continue
            elapsed = int((time.monotonic() - start) * 1000)
            if ok:
                log.info("check completed: %s result=PASSED", check.name)
                results.passed_checks.append(check.result(elapsed))
            else:
                log.info("check completed: %s result=FAILED", check.name)
                results.failed_checks.append(check.result(elapsed))

        if not results.passed_checks and not results.failed_checks and not results.errored_checks:
            raise CheckExecutionError("no checks were run")
        return results
