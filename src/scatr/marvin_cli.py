"""marvin_cli.py - ``scatr process-marvin-result``.

Meant to be used as the suite's processor script::

    [processor]
    script = "scatr process-marvin-result"

Reads the file named by ``INPUT_FILE`` and prints scatr's result JSON.
"""

import os
from pathlib import Path

import typer

from scatr.cli import VerboseOption, error_exit, json_print, set_verbose
from scatr.marvin import load_marvin_result, marvin_to_result

app = typer.Typer(
    help="Convert a Marvin result (INPUT_FILE) into a scatr result.",
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True)
def main(verbose: bool = VerboseOption) -> None:
    """Convert a Marvin result (INPUT_FILE) into a scatr result."""
    set_verbose(verbose)

    input_file = os.environ.get("INPUT_FILE", "")
    if not input_file:
        error_exit("INPUT_FILE not set")

    try:
        result = marvin_to_result(load_marvin_result(Path(input_file)))
    except (OSError, ValueError) as exc:
        error_exit(str(exc))

    json_print(result.to_dict())
