"""Allow ``python -m pis`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m pis`` behaves identically to the ``pis`` console
script.
"""

from __future__ import annotations

from pis.cli.app import cli

if __name__ == "__main__":
    cli()
