"""run_cli.py - ``scatr run``: execute a test suite.

Usage::

    scatr run --cwd tests/go -v
    scatr run -f main.go -f util/util.go
"""

import subprocess
import sys
from pathlib import Path

import typer

from scatr.cli import VerboseOption, error_exit, set_verbose
from scatr.config import CONFIG_FILE_NAME
from scatr.printer import DefaultIssuePrinter, IssuePrinter, PrettyIssuePrinter
from scatr.runner import run

_EPILOG = f"""\
[bold]Examples:[/bold]
  scatr run                          Run the suite described by ./{CONFIG_FILE_NAME}
  scatr run -c tests/go              Run the suite in another directory
  scatr run -f main.go -f lib/a.go   Only test these fixtures
  scatr run -a /tmp/autofix          Autofix into a separate directory

[dim]Exits with status 1 when a test fails or the run errors out.[/dim]"""

app = typer.Typer(
    help="Run the tests in a provided directory.",
    rich_markup_mode="rich",
    epilog=_EPILOG,
)


@app.callback(invoke_without_command=True)
def main(
    cwd: Path = typer.Option(
        Path("."), "--cwd", "-c", help="Directory holding the suite's config."
    ),
    pretty: bool = typer.Option(
        sys.stdout.isatty(), "--pretty/--no-pretty", "-p", help="Pretty print the results."
    ),
    verbose: bool = VerboseOption,
    files: list[str] = typer.Option(
        None,
        "--files",
        "-f",
        help="Only run the tests on these files (relative to the code path). Repeatable.",
    ),
    autofix_dir: str = typer.Option(
        "",
        "--autofix-dir",
        "-a",
        help="Run Autofix on copies in this directory (relative to --cwd) instead of in "
        "place. Exported to the Autofix script as OUTPUT_DIR. Not cleaned up afterwards.",
    ),
) -> None:
    """Run the tests in a provided directory."""
    set_verbose(verbose)

    printer: IssuePrinter
    if pretty:
        printer = PrettyIssuePrinter(base_dir=cwd.resolve())
    else:
        printer = DefaultIssuePrinter()

    try:
        passed = run(printer, cwd / CONFIG_FILE_NAME, files or [], autofix_dir)
    except (OSError, ValueError, subprocess.CalledProcessError) as exc:
        error_exit(str(exc))

    if not passed:
        raise typer.Exit(code=1)
