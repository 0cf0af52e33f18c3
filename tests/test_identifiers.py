from __future__ import annotations

import pytest

from container_preflight.config import ConfigLayers, ParsedFlags
from container_preflight.errors import MalformedIdentifierError
from container_preflight.identifiers import apply_certification_project_id, normalize_certification_project_id


def test_legacy_identifier_collapses_to_second_part() -> None:
    assert normalize_certification_project_id("ospid-12345") == "12345"


def test_canonical_identifier_is_unchanged_and_idempotent() -> None:
    assert normalize_certification_project_id("12345") == "12345"
    assert normalize_certification_project_id(normalize_certification_project_id("ospid-12345")) == "12345"


def test_two_parts_with_other_prefix_pass_through() -> None:
    assert normalize_certification_project_id("foo-12345") == "foo-12345"


def test_empty_identifier_passes_through() -> None:
    assert normalize_certification_project_id("") == ""


@pytest.mark.parametrize("value", ["a-b-c", "ospid-1-2", "ospid-62423-f26c346-6cc1dc7fae92"])
def test_more_than_two_parts_is_rejected(value: str) -> None:
    with pytest.raises(MalformedIdentifierError) as ei:
        normalize_certification_project_id(value)
    assert value in str(ei.value)


def test_apply_rewrites_layered_value_for_later_readers() -> None:
    flags = ParsedFlags.from_values({"certification-project-id": "ospid-777"}, changed=["certification-project-id"])
    layers = ConfigLayers(flags=flags, environ={})
    assert apply_certification_project_id(layers) == "777"
    assert layers.get_string("certification_project_id") == "777"


def test_apply_rewrites_env_sourced_value() -> None:
    layers = ConfigLayers(environ={"PFLT_CERTIFICATION_PROJECT_ID": "ospid-42"})
    apply_certification_project_id(layers)
    assert layers.get_string("certification_project_id") == "42"
