"""main.py – Umbrella CLI entry point for scatr.

Imports and registers every subcommand module as a flat ``app.command()``.
"""

import importlib
import platform

import typer

from scatr import __version__

app = typer.Typer(
    help="Static Code Analysis Testing Runner: test analyzers against annotated fixtures.",
    rich_markup_mode="rich",
    no_args_is_help=True,
    epilog="""\
[bold]Typical workflow:[/bold]
  scatr run                    Run the suite in the current directory
  scatr run --pretty -v        Same, with colours and the run log

[dim]Suites are described by .scatr.toml. Run 'scatr <cmd> --help' for details.[/dim]""",
)

# ---------------------------------------------------------------------------
# Subcommand registry
# ---------------------------------------------------------------------------

_COMMANDS: list[tuple[str, str, str]] = [
    ("run", "scatr.run_cli", "Run the tests in a provided directory."),
    (
        "process-marvin-result",
        "scatr.marvin_cli",
        "Convert a Marvin result (INPUT_FILE) into a scatr result.",
    ),
]

for _name, _module, _help in _COMMANDS:
    _mod = importlib.import_module(_module)
    _epilog = getattr(_mod.app.info, "epilog", None)
    if not isinstance(_epilog, str):
        _epilog = None
    app.command(name=_name, help=_help, epilog=_epilog)(_mod.main)


@app.command()
def version() -> None:
    """Print the scatr version and the environment."""
    print("SCATR analyzer testing framework")
    print(f"  Version: {__version__}")
    print()
    print("Environment:")
    print(f"  OS:   {platform.system().lower()}")
    print(f"  ARCH: {platform.machine()}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
