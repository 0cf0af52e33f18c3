from __future__ import annotations


class PreflightError(Exception):
    """Base class for every failure surfaced by `preflight check container`."""


class ValidationPhaseError(PreflightError):
    """Raised before any network or filesystem side effect.

    The CLI prints these after the command usage line.
    """


class ExecutionPhaseError(PreflightError):
    """Raised once the run has started; usage text is no longer printed."""


# ---- validation phase ----


class ArgumentError(ValidationPhaseError):
    """Wrong positional arguments or conflicting flags."""


class ConfigurationError(ValidationPhaseError):
    """Layered settings could not be turned into a RunConfiguration."""


class CredentialError(ValidationPhaseError):
    """A submission credential (project id or API token) is unusable."""

    def __init__(self, credential: str, message: str) -> None:
        super().__init__(message)
        self.credential = credential


class MissingCredentialError(CredentialError):
    def __init__(self, credential: str) -> None:
        super().__init__(credential, f"{credential} must be specified when --submit is present")


class EmptyCredentialError(CredentialError):
    def __init__(self, credential: str) -> None:
        super().__init__(credential, f"{credential} cannot be empty when --submit is present")


class MalformedCredentialError(CredentialError):
    def __init__(self, credential: str = "pyxis api token and certification project id") -> None:
        super().__init__(credential, f"{credential} are required when --submit is present")


class MalformedIdentifierError(ValidationPhaseError):
    def __init__(self, identifier: str) -> None:
        super().__init__(
            f"certification project id: {identifier} is improperly formatted "
            "see help command for instructions on obtaining proper value"
        )
        self.identifier = identifier


# ---- execution phase ----


class ContextError(ExecutionPhaseError):
    """The execution context is missing something the run requires."""


class ArtifactsError(ExecutionPhaseError):
    pass


class FormatterError(ExecutionPhaseError):
    pass


class CheckExecutionError(ExecutionPhaseError):
    pass


class RunCancelledError(ExecutionPhaseError):
    """The check engine call was cancelled through the run context."""


class PersistenceError(ExecutionPhaseError):
    pass


class SubmissionError(ExecutionPhaseError):
    pass
