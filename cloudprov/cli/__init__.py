"""cloudprov command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``cloudprov`` script).
"""

from cloudprov.cli.main import cli

__all__ = ["cli"]
