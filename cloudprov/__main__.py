"""Entry point for `python -m cloudprov`.

Usage:
    python -m cloudprov wait 113200000000 --timeout 600
    python -m cloudprov can-edit 113200000000
"""

from __future__ import annotations

from cloudprov.cli import cli

cli()
