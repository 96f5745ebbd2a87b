"""Entry point for `python -m kuberestart`.

Usage:
    python -m kuberestart --event-reason ContainerRestart
    uv run python -m kuberestart
"""

from __future__ import annotations

from kuberestart.cli import cli

cli(prog_name="kuberestart")
