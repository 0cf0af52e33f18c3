from __future__ import annotations

from typing import Sequence

from .config import ConfigLayers, ParsedFlags
from .errors import (
    ArgumentError,
    EmptyCredentialError,
    MalformedCredentialError,
    MissingCredentialError,
)
from .identifiers import apply_certification_project_id
from .utils import looks_like_flag

SUBMIT_MARKER = "--submit"

PROJECT_ID_FLAG = "certification-project-id"
API_TOKEN_FLAG = "pyxis-api-token"

PROJECT_ID_CREDENTIAL = "certification project id"
API_TOKEN_CREDENTIAL = "pyxis api token"

MUTUALLY_EXCLUSIVE_FLAGS: tuple[str, ...] = ("submit", "insecure")


def check_positional_args(args: Sequence[str]) -> None:
    if len(args) != 1:
        raise ArgumentError("a container image positional argument is required")


def check_mutually_exclusive(flags: ParsedFlags) -> None:
    """Reject --submit and --insecure given together on the command line."""
    present = [n for n in MUTUALLY_EXCLUSIVE_FLAGS if flags.changed(n) and bool(flags.value(n))]
    if len(present) > 1:
        group = " ".join(MUTUALLY_EXCLUSIVE_FLAGS)
        raise ArgumentError(
            f"if any flags in the group [{group}] are set none of the others can be; "
            f"[{' '.join(sorted(present))}] were all set"
        )


def flags_embed_submit_marker(flags: ParsedFlags) -> bool:
    """
    True when any flag given on the command line carries `--submit` inside its value.

    This happens when a value-taking flag is left empty and the parser swallows
    the next token, e.g. `--pyxis-api-token --submit`. Such a run is treated as
    one that asked for submission.
    """
    return any(f.changed and SUBMIT_MARKER in f.as_text() for f in flags)


def submission_requested(flags: ParsedFlags) -> bool:
    return bool(flags.value("submit", False)) or flags_embed_submit_marker(flags)


def apply_submission_intent(flags: ParsedFlags, layers: ConfigLayers) -> None:
    """Turn submission on for the run when only the embedded marker asked for it.

    A submit value from the command line, environment or config file is left alone.
    """
    if flags_embed_submit_marker(flags) and not layers.is_set("submit"):
        layers.set("submit", True)


def check_submission_prerequisites(flags: ParsedFlags, layers: ConfigLayers) -> None:
    """
    Ensure a submission has usable credentials.

    Checks run in a fixed order and the first failure is reported:
    missing project id, missing token, empty project id, empty token,
    then either value looking like a flag.
    """
    if not submission_requested(flags):
        return

    project_key = PROJECT_ID_FLAG.replace("-", "_")
    token_key = API_TOKEN_FLAG.replace("-", "_")

    # Not given on the command line and not provided by env or config file
    if not flags.changed(PROJECT_ID_FLAG) and not layers.is_set(project_key):
        raise MissingCredentialError(PROJECT_ID_CREDENTIAL)
    if not flags.changed(API_TOKEN_FLAG) and not layers.is_set(token_key):
        raise MissingCredentialError(API_TOKEN_CREDENTIAL)

    # Given on the command line but empty
    if flags.changed(PROJECT_ID_FLAG) and layers.get_string(project_key) == "":
        raise EmptyCredentialError(PROJECT_ID_CREDENTIAL)
    if flags.changed(API_TOKEN_FLAG) and layers.get_string(token_key) == "":
        raise EmptyCredentialError(API_TOKEN_CREDENTIAL)

    if looks_like_flag(layers.get_string(token_key)) or looks_like_flag(layers.get_string(project_key)):
        raise MalformedCredentialError()


def validate_check_container(args: Sequence[str], flags: ParsedFlags, layers: ConfigLayers) -> None:
    """Gate for `check container`; runs before any side effect.

    Order: positional count, submission prerequisites, identifier
    normalization, then the submit/insecure exclusion. Only after all of them
    pass is an embedded submit marker turned into a submitting run.
    """
    check_positional_args(args)
    check_submission_prerequisites(flags, layers)
    apply_certification_project_id(layers)
    check_mutually_exclusive(flags)
    apply_submission_intent(flags, layers)
