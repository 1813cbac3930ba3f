"""Shared CLI utilities for scatr.

Provides the run-log console, standardised error/JSON output helpers, and the
re-usable Typer options shared by the subcommands.

Usage in a command::

    from scatr.cli import VerboseOption, error_exit, log, set_verbose

    @app.command()
    def main(verbose: bool = VerboseOption) -> None:
        set_verbose(verbose)
        log("Running the checks test script")
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

VerboseOption: bool = typer.Option(False, "--verbose", "-v", help="Use verbose logging.")

# ---------------------------------------------------------------------------
# Run log
# ---------------------------------------------------------------------------

# Silent until a command asks for verbose output.
log_console = Console(stderr=True, quiet=True, highlight=False)


def set_verbose(verbose: bool) -> None:
    """Turn the run log on or off."""
    log_console.quiet = not verbose


def log(*objects: Any) -> None:
    """Write a timestamped line to the run log (stderr)."""
    log_console.log(*objects, markup=False, _stack_offset=2)


# ---------------------------------------------------------------------------
# Standardised output helpers
# ---------------------------------------------------------------------------

_err_console = Console(stderr=True)


def error_exit(msg: str, *, json_mode: bool = False, code: int = 1) -> NoReturn:
    """Print *msg* as an error and ``raise typer.Exit(code)``."""
    if json_mode:
        print(json.dumps({"error": msg}, indent=2))
    else:
        _err_console.print(f"[red bold]error:[/red bold] {escape(msg)}", highlight=False)
    raise typer.Exit(code=code)


def json_print(data: dict[str, Any] | list[Any]) -> None:
    """Print *data* as pretty-printed JSON to stdout."""
    print(json.dumps(data, indent=2))
