"""printer.py - Rendering of test failures.

Three printers share one interface:

- ``DefaultIssuePrinter``: plain ``file:line:col`` lines, for CI logs.
- ``PrettyIssuePrinter``: grouped, coloured output via rich, for terminals.
- ``NullIssuePrinter``: prints nothing.

The ``print_*`` functions at the bottom walk a diff and feed a printer.
"""

from __future__ import annotations

import json
import os
import re
import sys
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Protocol

from rich.console import Console
from rich.text import Text

from scatr.diff import AutofixDiff, ChecksDiff
from scatr.pragma_file import PragmaFile
from scatr.result import AnalysisResult, Issue

_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@")


class IssueKind(Enum):
    UNEXPECTED = "Unexpected Issue"
    NOT_RAISED = "Issue not raised"

    def __str__(self) -> str:
        return self.value


class IssuePrinter(Protocol):
    def print_header(self, header: str) -> None: ...

    def print_issue(
        self, file: str, line: int, column: int, kind: IssueKind, issue: Issue
    ) -> None: ...

    def print_unified_diff(self, file: str, diff: list[str]) -> None: ...

    def print_identical_golden_file(self, file: str) -> None: ...

    def print_status(self, passed: bool) -> None: ...

    def print_warning(self, warning: str) -> None: ...


def _position(file: str, line: int, column: int) -> str:
    pos = f"{file}:{line}"
    if column != 0:
        pos += f":{column}"
    return pos


class DefaultIssuePrinter:
    """Plain-text printer; one line per failure on stdout."""

    def print_header(self, header: str) -> None:
        print(header, file=sys.stderr)

    def print_issue(
        self, file: str, line: int, column: int, kind: IssueKind, issue: Issue
    ) -> None:
        print(f"{_position(file, line, column)} {kind} {issue.code}: {json.dumps(issue.title)}")

    def print_unified_diff(self, file: str, diff: list[str]) -> None:
        print(file)
        print("".join(line if line.endswith("\n") else line + "\n" for line in diff), end="")

    def print_identical_golden_file(self, file: str) -> None:
        print(f"{file}: file is identical to the golden file")

    def print_status(self, passed: bool) -> None:
        # The exit code carries the verdict in CI.
        pass

    def print_warning(self, warning: str) -> None:
        print(f"Warn: {warning}")


class PrettyIssuePrinter:
    """Coloured printer grouping failures under a per-file heading.

    File headings are shown relative to *base_dir* (the current directory by
    default) when possible.
    """

    def __init__(self, base_dir: Path | None = None, console: Console | None = None) -> None:
        self.base_dir = base_dir if base_dir is not None else Path.cwd()
        self.console = console if console is not None else Console(highlight=False)
        self._files_printed: set[str] = set()

    def _relative(self, file: str) -> str:
        try:
            return os.path.relpath(file, self.base_dir)
        except ValueError:
            return file

    def print_header(self, header: str) -> None:
        self.console.print(Text(header, style="bold underline yellow"))

    def print_issue(
        self, file: str, line: int, column: int, kind: IssueKind, issue: Issue
    ) -> None:
        if file not in self._files_printed:
            self._files_printed.add(file)
            self.console.print()
            self.console.print(Text(f"# {self._relative(file)}", style="bold bright_red"))

        position = f"Line: {line}"
        if column != 0:
            position += f", Col: {column}"

        text = Text()
        text.append(f"{position:<20}{issue.code:<18}", style="blue")
        text.append(f"  {kind}", style="red")
        text.append(f"  {issue.title}")
        self.console.print(text)

    def print_unified_diff(self, file: str, diff: list[str]) -> None:
        self.console.print()
        self.console.print(Text(f"# {file}", style="bold bright_red"))

        old_line = new_line = 0
        for raw in diff:
            line = raw.rstrip("\n")
            if line.startswith(("---", "+++")):
                continue

            m = _HUNK_RE.match(line)
            if m:
                old_line, new_line = int(m.group(1)), int(m.group(2))
                self.console.print()
                continue

            marker, content = line[:1], line[1:]
            if marker == "-":
                self.console.print(Text(f"- {old_line:>4}│ {content}", style="red"))
                old_line += 1
            elif marker == "+":
                self.console.print(Text(f"+ {new_line:>4}│ {content}", style="green"))
                new_line += 1
            else:
                self.console.print(Text(f"  {new_line:>4}│ {content}"))
                old_line += 1
                new_line += 1

    def print_identical_golden_file(self, file: str) -> None:
        self.console.print(
            Text(f"# {file}: Input file identical to the golden file", style="bold bright_red")
        )

    def print_status(self, passed: bool) -> None:
        self.console.print()
        if passed:
            self.console.print(Text("Passed", style="black on green"))
        else:
            self.console.print(Text("Failed", style="black on bright_red"))

    def print_warning(self, warning: str) -> None:
        text = Text()
        text.append("WARN", style="black on yellow")
        text.append(" ")
        text.append(warning, style="yellow")
        self.console.print(text)


class NullIssuePrinter:
    """Discards everything."""

    def print_header(self, header: str) -> None:
        pass

    def print_issue(
        self, file: str, line: int, column: int, kind: IssueKind, issue: Issue
    ) -> None:
        pass

    def print_unified_diff(self, file: str, diff: list[str]) -> None:
        pass

    def print_identical_golden_file(self, file: str) -> None:
        pass

    def print_status(self, passed: bool) -> None:
        pass

    def print_warning(self, warning: str) -> None:
        pass


# ---------------------------------------------------------------------------
# Diff walkers
# ---------------------------------------------------------------------------


def print_checks_diff(diff: ChecksDiff, printer: IssuePrinter) -> None:
    for file in sorted(diff):
        issues = diff[file]
        for issue in issues.unexpected:
            start = issue.position.start
            printer.print_issue(file, start.line, start.column, IssueKind.UNEXPECTED, issue)
        for issue in issues.not_raised:
            start = issue.position.start
            printer.print_issue(file, start.line, start.column, IssueKind.NOT_RAISED, issue)


def print_autofix_diff(diff: AutofixDiff, printer: IssuePrinter) -> None:
    for file in sorted(diff):
        printer.print_unified_diff(file, diff[file])


def print_identical_files(files: Iterable[str], printer: IssuePrinter) -> None:
    for file in sorted(files):
        printer.print_identical_golden_file(file)


def print_unmatched_files(
    result: AnalysisResult, files: dict[str, PragmaFile], printer: IssuePrinter
) -> None:
    """Warn once per result file that is not one of the fixture files."""
    warned: set[str] = set()
    for issue in result.issues:
        path = issue.position.file_normalized
        if path in files or path in warned:
            continue
        warned.add(path)
        printer.print_warning(
            f"{json.dumps(issue.position.file)} is present in the analysis result "
            "but is not checked by SCATR."
        )
