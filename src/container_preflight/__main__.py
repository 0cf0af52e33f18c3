"""Package entry point.

Preferred invocation is via the installed console script:

    preflight check container <image>

For convenience we also support:

    python -m container_preflight check container <image>
"""

from __future__ import annotations

from .cli import app


def main() -> None:
    """Entry point used by `python -m container_preflight` and the console script."""

    app()


if __name__ == "__main__":
    main()
