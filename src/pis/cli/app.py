"""CLI application entry point for pis.

This module is the **sole error boundary** for the entire application.
It renders dispatch outcomes, catches :class:`~pis.exceptions.PisError`,
``KeyboardInterrupt`` and any unexpected ``Exception``, and returns
well-defined exit codes.

Architecture notes
------------------
* No business logic lives here: resolution happens in
  :func:`pis.core.commands.dispatch`, work happens in the leaf handlers.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from pis.cli import exit_codes
from pis.cli.commands import build_command_tree
from pis.cli.console import console, escape, out
from pis.cli.context import AppContext
from pis.cli.logging_setup import init_logging
from pis.config import Settings
from pis.core.commands import Failure, HelpPrinted, Outcome, dispatch, render_help
from pis.exceptions import PisError


# ---------------------------------------------------------------------------
# Outcome rendering
# ---------------------------------------------------------------------------

def render_outcome(outcome: Outcome) -> int:
    """Print help or a dispatch failure and return the exit code."""
    if isinstance(outcome, HelpPrinted):
        for line in render_help(outcome.entries):
            out.plain(line)
        return exit_codes.SUCCESS
    if isinstance(outcome, Failure):
        console.print(f"[bold red]ERROR:[/bold red] {escape(outcome.message)}", highlight=False)
        return exit_codes.USAGE_ERROR
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    context: AppContext | None = None,
) -> int:
    """Run the pis CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    context:
        Pre-built dependencies; built from the environment when ``None``.

    Returns
    -------
    int
        OS process exit code.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if context is None:
        context = AppContext(settings=Settings.from_env())

    init_logging(context.settings.log_level)
    tree = build_command_tree(context)
    return render_outcome(dispatch(tree, args))


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except PisError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(exc)}", highlight=False)
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}", highlight=False)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(exc)}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
