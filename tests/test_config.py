from __future__ import annotations

from pathlib import Path

import pytest

from container_preflight.config import ConfigLayers, ParsedFlags, resolve_configuration
from container_preflight.errors import ConfigurationError


def test_flag_beats_env_beats_file_beats_default(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("platform: s390x\npyxis-env: qa\nloglevel: debug\n", encoding="utf-8")
    flags = ParsedFlags.from_values({"platform": "arm64", "pyxis-env": "prod"}, changed=["platform"])

    layers = ConfigLayers.from_sources(flags, environ={"PFLT_PYXIS_ENV": "uat"}, config_file=cfg_file)

    assert layers.get("platform") == "arm64"
    assert layers.get("pyxis_env") == "uat"
    assert layers.get("loglevel") == "debug"
    assert layers.get("artifacts") == "artifacts"


def test_defaults_do_not_count_as_set() -> None:
    flags = ParsedFlags.from_values({"certification-project-id": ""}, changed=[])
    layers = ConfigLayers(flags=flags, environ={})
    assert not layers.is_set("certification_project_id")
    layers.set("certification_project_id", "1")
    assert layers.is_set("certification_project_id")


def test_empty_environment_variables_are_unset() -> None:
    layers = ConfigLayers(environ={"PFLT_CERTIFICATION_PROJECT_ID": "", "PFLT_PYXIS_ENV": ""})
    assert not layers.is_set("certification_project_id")
    assert layers.get("pyxis_env") == "prod"
    cfg = resolve_configuration(layers)
    assert cfg.pyxis_host == "catalog.redhat.com/api/containers"


def test_pyxis_host_defaults_from_env() -> None:
    cfg = resolve_configuration(ConfigLayers(environ={"PFLT_PYXIS_ENV": "stage"}))
    assert cfg.pyxis_host == "catalog.stage.redhat.com/api/containers"


def test_unknown_pyxis_env_falls_back_to_prod_host() -> None:
    cfg = resolve_configuration(ConfigLayers(environ={"PFLT_PYXIS_ENV": "nowhere"}))
    assert cfg.pyxis_host == "catalog.redhat.com/api/containers"


def test_explicit_pyxis_host_wins() -> None:
    cfg = resolve_configuration(ConfigLayers(environ={"PFLT_PYXIS_HOST": "pyxis.example.com/api", "PFLT_PYXIS_ENV": "qa"}))
    assert cfg.pyxis_host == "pyxis.example.com/api"


def test_env_booleans_and_paths_are_parsed() -> None:
    cfg = resolve_configuration(
        ConfigLayers(environ={"PFLT_JUNIT": "true", "PFLT_SUBMIT": "1", "PFLT_ARTIFACTS": "/tmp/out"})
    )
    assert cfg.write_junit is True
    assert cfg.submit is True
    assert cfg.artifacts == Path("/tmp/out")


def test_type_mismatch_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        resolve_configuration(ConfigLayers(environ={"PFLT_INSECURE": "definitely"}))


def test_non_mapping_config_file_is_rejected(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigLayers.from_sources(ParsedFlags(), environ={}, config_file=cfg_file)


def test_unparseable_config_file_is_rejected(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("platform: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigLayers.from_sources(ParsedFlags(), environ={}, config_file=cfg_file)


def test_token_is_not_exposed_in_repr() -> None:
    cfg = resolve_configuration(ConfigLayers(environ={"PFLT_PYXIS_API_TOKEN": "s3cr3t-value"}))
    assert "s3cr3t-value" not in repr(cfg)
    assert "s3cr3t-value" not in str(cfg.model_dump())
    assert cfg.pyxis_api_token.get_secret_value() == "s3cr3t-value"
