from __future__ import annotations

from .config import ConfigLayers
from .errors import MalformedIdentifierError

LEGACY_PREFIX = "ospid"

CERTIFICATION_PROJECT_ID_KEY = "certification_project_id"


def normalize_certification_project_id(value: str) -> str:
    """Return the canonical certification project id.

    `ospid-<id>` is the legacy form and collapses to `<id>`. Values with more
    than two dash-separated parts cannot be used to query Pyxis and are
    rejected; anything else is returned as given.
    """
    parts = value.split("-")
    if len(parts) > 2:
        raise MalformedIdentifierError(value)
    if len(parts) == 2 and parts[0] == LEGACY_PREFIX:
        return parts[1]
    return value


def apply_certification_project_id(layers: ConfigLayers) -> str:
    """Normalize the configured project id in place and return the result."""
    current = layers.get_string(CERTIFICATION_PROJECT_ID_KEY)
    normalized = normalize_certification_project_id(current)
    if normalized != current:
        layers.set(CERTIFICATION_PROJECT_ID_KEY, normalized)
    return normalized
