from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Protocol

from pydantic import SecretStr

from .models import RunConfiguration

if TYPE_CHECKING:
    from .container import ContainerCheck


class CheckOption(Protocol):
    """Applied in order to a ContainerCheck; later options override earlier ones."""

    def apply(self, check: "ContainerCheck") -> None:  # pragma: no cover - interface
        ...


@dataclass(frozen=True)
class WithCertificationProject:
    project_id: str
    token: SecretStr = field(repr=False)

    def apply(self, check: "ContainerCheck") -> None:
        check.certification_project_id = self.project_id
        check.pyxis_api_token = self.token


@dataclass(frozen=True)
class WithDockerConfigJSONFromFile:
    path: str

    def apply(self, check: "ContainerCheck") -> None:
        check.docker_config = self.path


@dataclass(frozen=True)
class WithPyxisHost:
    host: str

    def apply(self, check: "ContainerCheck") -> None:
        check.pyxis_host = self.host


@dataclass(frozen=True)
class WithPlatform:
    platform: str

    def apply(self, check: "ContainerCheck") -> None:
        check.platform = self.platform


@dataclass(frozen=True)
class WithInsecureConnection:
    def apply(self, check: "ContainerCheck") -> None:
        check.insecure = True


def generate_container_check_options(cfg: RunConfiguration) -> List[CheckOption]:
    """Translate the resolved configuration into ContainerCheck options.

    Sets cfg.submit to False when cfg.insecure is set.
    """
    token = cfg.pyxis_api_token
    opts: List[CheckOption] = [
        WithCertificationProject(cfg.certification_project_id, token),
        WithDockerConfigJSONFromFile(cfg.docker_config),
        # pyxis_host always has a value after configuration resolution
        WithPyxisHost(cfg.pyxis_host),
        WithPlatform(cfg.platform),
    ]

    if token.get_secret_value() and cfg.certification_project_id:
        opts.append(WithCertificationProject(cfg.certification_project_id, token))

    if cfg.insecure:
        # Never submit results gathered over an insecure connection.
        cfg.submit = False
        opts.append(WithInsecureConnection())

    return opts
