"""runner.py - Drive one test run: scripts, processor, reconciliation.

Scripts always run with the config directory as their working directory and
get ``CODE_PATH`` (the absolute fixture directory) in their environment.  The
Autofix script also gets ``OUTPUT_DIR``.  The scatr process's own working
directory and environment are never modified.
"""

from __future__ import annotations

import os
import subprocess
import tempfile
import time
from pathlib import Path

from scatr.backup import AutofixBackup
from scatr.cli import log
from scatr.config import ScatrConfig, ScriptConfig, load_config
from scatr.diff import (
    AutofixDiff,
    ChecksDiff,
    check_identical_golden_files,
    diff_autofix_result,
    diff_checks_result,
)
from scatr.files import normalize_file_list, normalize_file_path, read_files
from scatr.printer import (
    IssuePrinter,
    print_autofix_diff,
    print_checks_diff,
    print_identical_files,
    print_unmatched_files,
)
from scatr.result import AnalysisResult, parse_result

STDERR_FD = 2


def run_script(
    script: ScriptConfig, config: ScatrConfig, env: dict[str, str] | None = None
) -> None:
    """Run *script* through its interpreter.

    The script body goes to a temporary file passed as the last argument.
    Non-interactive scripts get no stdin and have their stdout sent to
    stderr.  Raises ``subprocess.CalledProcessError`` on a non-zero exit.
    """
    run_env = dict(os.environ)
    run_env.update(env or {})
    run_env["CODE_PATH"] = normalize_file_path(config.code_dir)

    fd, script_path = tempfile.mkstemp(prefix="scatr-script-")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(script.script)

        cmd = [script.interpreter, *script.args, script_path]
        log(f"Running {cmd!r} in {config.root}")
        if script.interactive:
            subprocess.run(cmd, cwd=config.root, env=run_env, check=True)
        else:
            subprocess.run(
                cmd,
                cwd=config.root,
                env=run_env,
                stdin=subprocess.DEVNULL,
                stdout=STDERR_FD,
                check=True,
            )
    finally:
        try:
            os.unlink(script_path)
        except OSError as exc:
            log(f"Cleanup error: {exc}")


def run_processor(config: ScatrConfig) -> AnalysisResult:
    """Turn the checks script's output file into an ``AnalysisResult``.

    With ``skip_processing`` the output file already holds scatr's JSON.
    Otherwise the processor script is piped into its interpreter with
    ``INPUT_FILE`` set and its stdout is decoded.
    """
    if not config.checks.output_file:
        raise ValueError("checks.output_file is not set")
    output_file = config.root / config.checks.output_file
    processor = config.processor

    if processor.skip_processing:
        log("Skipping processing of the test script output")
        return parse_result(output_file.read_bytes(), config.code_dir)

    log(f"Processing the test script output using {processor.interpreter!r}")
    env = dict(os.environ)
    env["INPUT_FILE"] = str(output_file)
    proc = subprocess.run(
        [processor.interpreter],
        input=processor.script.encode("utf-8"),
        stdout=subprocess.PIPE,
        cwd=config.root,
        env=env,
        check=True,
    )
    return parse_result(proc.stdout, config.code_dir)


def run_checks(
    config: ScatrConfig, included_files: set[str], printer: IssuePrinter
) -> tuple[ChecksDiff, bool]:
    """Run the checks script and reconcile its result with the fixtures."""
    log(f"Running the checks test script with the interpreter {config.checks.interpreter!r}")
    log("--- Checks run log ---")

    start = time.monotonic()
    run_script(config.checks, config)
    log(f"Checks test script completed in {time.monotonic() - start:.2f}s")

    result = run_processor(config)
    files = read_files(config, included_files)

    print_unmatched_files(result, files, printer)
    return diff_checks_result(files, config.excluded_paths, included_files, result)


def run_autofix(
    config: ScatrConfig, included_files: set[str], autofix_dir: Path | None = None
) -> tuple[AutofixDiff, set[str], bool]:
    """Back up the fixtures, run the Autofix script and compare with golden files.

    Returns the golden-file diffs, the fixtures already identical to their
    golden file, and whether both sets are empty.  The backup is restored
    even when the run fails.
    """
    log("Backing up the potentially Autofix'able files")
    backup = AutofixBackup.create(config, included_files, autofix_dir)

    try:
        log("Checking for identical original and golden files")
        identical, identical_ok = check_identical_golden_files(
            config.code_dir, config.excluded_paths, backup
        )

        log(f"Running the Autofix test script with the interpreter {config.autofix.interpreter!r}")
        log("--- Autofix run log ---")

        output_dir = autofix_dir if autofix_dir is not None else config.root
        output_dir.mkdir(parents=True, exist_ok=True)

        start = time.monotonic()
        run_script(config.autofix, config, {"OUTPUT_DIR": normalize_file_path(output_dir)})
        log(f"Autofix test script completed in {time.monotonic() - start:.2f}s")

        diff, diff_ok = diff_autofix_result(config.code_dir, config.excluded_paths, backup)
    finally:
        log("Restoring the Autofix backup")
        backup.restore_and_destroy()

    return diff, identical, identical_ok and diff_ok


def run(
    printer: IssuePrinter,
    config_path: Path,
    files: list[str] | None = None,
    autofix_dir: str | None = None,
) -> bool:
    """Run every enabled test of the suite described by *config_path*.

    *files* (relative to the fixture directory) restrict the run.
    *autofix_dir* (relative to the config directory) moves Autofix output out
    of the fixture tree.  Returns whether everything passed.
    """
    config = load_config(config_path)
    if not config.test_checks and not config.test_autofix:
        raise ValueError("nothing to do")

    included_files = normalize_file_list(files or [], config.code_dir)

    autofix_path = None
    if autofix_dir is not None and autofix_dir.strip():
        autofix_path = (config.root / autofix_dir.strip()).resolve()

    passed = True

    if config.test_checks:
        printer.print_header("Testing checks")
        checks_diff, checks_ok = run_checks(config, included_files, printer)
        if not checks_ok:
            print_checks_diff(checks_diff, printer)
            passed = False

    if config.test_autofix:
        printer.print_header("Testing Autofix")
        autofix_diff, identical, autofix_ok = run_autofix(config, included_files, autofix_path)
        if not autofix_ok:
            print_autofix_diff(autofix_diff, printer)
            print_identical_files(identical, printer)
            passed = False

    printer.print_status(passed)
    return passed
