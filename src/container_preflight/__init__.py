"""Run orchestration and pre-flight validation for container certification checks."""

from .version import VERSION as __version__

__all__ = ["__version__"]
