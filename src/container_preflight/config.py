"""Layered configuration for `preflight check container`.

Precedence, highest first: explicit overrides made during the run
(identifier normalization), flags changed on the command line, `PFLT_*`
environment variables, the YAML config file, defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigurationError
from .models import DEFAULT_PYXIS_ENV, PYXIS_HOSTS, PyxisEnv, RunConfiguration
from .paths import config_file_path
from .utils import host_architecture, read_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "PFLT_"

# config key -> environment variable
ENV_KEYS: dict[str, str] = {
    "submit": "PFLT_SUBMIT",
    "insecure": "PFLT_INSECURE",
    "pyxis_api_token": "PFLT_PYXIS_API_TOKEN",
    "pyxis_host": "PFLT_PYXIS_HOST",
    "pyxis_env": "PFLT_PYXIS_ENV",
    "certification_project_id": "PFLT_CERTIFICATION_PROJECT_ID",
    "platform": "PFLT_PLATFORM",
    "docker_config": "PFLT_DOCKERCONFIG",
    "artifacts": "PFLT_ARTIFACTS",
    "logfile": "PFLT_LOGFILE",
    "loglevel": "PFLT_LOGLEVEL",
    "junit": "PFLT_JUNIT",
}

# config key -> RunConfiguration field, where they differ
_FIELD_NAMES: dict[str, str] = {"junit": "write_junit"}


def default_settings() -> dict[str, Any]:
    return {
        "submit": False,
        "insecure": False,
        "pyxis_api_token": "",
        "pyxis_host": "",
        "pyxis_env": DEFAULT_PYXIS_ENV.value,
        "certification_project_id": "",
        "platform": host_architecture(),
        "docker_config": "",
        "artifacts": "artifacts",
        "logfile": "preflight.log",
        "loglevel": "info",
        "junit": False,
    }


def flag_to_key(flag_name: str) -> str:
    return flag_name.replace("-", "_").lower()


@dataclass(frozen=True)
class FlagValue:
    """One command-line flag as parsed: its value and whether the user set it."""

    name: str
    value: Any
    changed: bool

    @property
    def key(self) -> str:
        return flag_to_key(self.name)

    def as_text(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        if self.value is None:
            return ""
        return str(self.value)


@dataclass(frozen=True)
class ParsedFlags:
    """Immutable snapshot of the command's flags, passed explicitly to validation."""

    flags: tuple[FlagValue, ...] = ()

    @classmethod
    def from_values(cls, values: Mapping[str, Any], changed: Iterable[str] = ()) -> "ParsedFlags":
        changed_set = set(changed)
        return cls(tuple(FlagValue(name=n, value=v, changed=n in changed_set) for n, v in values.items()))

    def __iter__(self) -> Iterator[FlagValue]:
        return iter(self.flags)

    def lookup(self, name: str) -> Optional[FlagValue]:
        for f in self.flags:
            if f.name == name:
                return f
        return None

    def changed(self, name: str) -> bool:
        f = self.lookup(name)
        return bool(f and f.changed)

    def value(self, name: str, default: Any = None) -> Any:
        f = self.lookup(name)
        return default if f is None else f.value


def _load_config_file(path: Optional[Path]) -> dict[str, Any]:
    if path is None or not path.exists():
        return {}
    try:
        raw = read_yaml(path)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"invalid configuration: unable to read {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"invalid configuration: {path} must contain a mapping")
    logger.debug("loaded config file %s", path)
    return {flag_to_key(str(k)): v for k, v in raw.items()}


class ConfigLayers:
    """
    Merged view over flags, overrides, environment, config file and defaults.

    `is_set` mirrors "provided by some source": a default never counts.
    """

    def __init__(
        self,
        *,
        flags: Optional[ParsedFlags] = None,
        environ: Optional[Mapping[str, str]] = None,
        file_values: Optional[Mapping[str, Any]] = None,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._flags = flags or ParsedFlags()
        self._environ: Mapping[str, str] = dict(os.environ if environ is None else environ)
        self._file: dict[str, Any] = dict(file_values or {})
        self._defaults: dict[str, Any] = dict(default_settings() if defaults is None else defaults)
        self._overrides: dict[str, Any] = {}

    @classmethod
    def from_sources(
        cls,
        flags: ParsedFlags,
        environ: Optional[Mapping[str, str]] = None,
        config_file: Optional[Path] = None,
    ) -> "ConfigLayers":
        path = config_file if config_file is not None else config_file_path(environ)
        return cls(flags=flags, environ=environ, file_values=_load_config_file(path))

    @property
    def flags(self) -> ParsedFlags:
        return self._flags

    def _changed_flag(self, key: str) -> Optional[FlagValue]:
        for f in self._flags:
            if f.changed and f.key == key:
                return f
        return None

    def _env_value(self, key: str) -> Optional[str]:
        env_name = ENV_KEYS.get(key, ENV_PREFIX + key.upper())
        # An empty variable counts as unset.
        return self._environ.get(env_name) or None

    def get(self, key: str) -> Any:
        if key in self._overrides:
            return self._overrides[key]
        flag = self._changed_flag(key)
        if flag is not None:
            return flag.value
        env = self._env_value(key)
        if env is not None:
            return env
        if key in self._file:
            return self._file[key]
        return self._defaults.get(key)

    def get_string(self, key: str) -> str:
        value = self.get(key)
        return "" if value is None else str(value)

    def is_set(self, key: str) -> bool:
        return (
            self._changed_flag(key) is not None
            or key in self._overrides
            or self._env_value(key) is not None
            or key in self._file
        )

    def set(self, key: str, value: Any) -> None:
        """Explicit override; later reads (and resolution) see this value."""
        self._overrides[key] = value


def default_pyxis_host(pyxis_env: str) -> str:
    try:
        env = PyxisEnv(pyxis_env.strip().lower())
    except ValueError:
        logger.warning("unknown pyxis env %r, using %s", pyxis_env, DEFAULT_PYXIS_ENV.value)
        env = DEFAULT_PYXIS_ENV
    return PYXIS_HOSTS[env]


def resolve_configuration(layers: ConfigLayers) -> RunConfiguration:
    """Render the layered settings as a RunConfiguration snapshot."""
    data: dict[str, Any] = {}
    for key in default_settings():
        data[_FIELD_NAMES.get(key, key)] = layers.get(key)

    if not data.get("pyxis_host"):
        data["pyxis_host"] = default_pyxis_host(str(data.get("pyxis_env") or DEFAULT_PYXIS_ENV.value))

    try:
        return RunConfiguration(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc
