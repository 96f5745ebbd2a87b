"""KubeRestart command-line interface.

Exposes:
    cli -- Click command entry point (registered as ``kuberestart`` script).
"""

from kuberestart.cli.main import cli

__all__ = ["cli"]
