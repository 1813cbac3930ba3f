"""diff.py - Reconcile reported issues with the pragmas of the fixture files.

Two passes, in this order (the second relies on hit flags set by the first):

1. every reported issue is matched against the pragma of its file and line;
   matches mark the pragma's hit flags, everything else is *unexpected*;
2. every pragma entry whose hit flag is still unset is *not raised*.

A file's check mode (``scatr-check`` / ``scatr-ignore`` directives, or a file
named after an issue code) limits which codes take part in the verdict.

Autofix golden-file comparisons live here as well.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from scatr.files import normalize_file_path
from scatr.pragma_file import CheckMode, PragmaFile
from scatr.result import AnalysisResult, Issue, IssuePosition, Location

if TYPE_CHECKING:
    from scatr.backup import AutofixBackup

GOLDEN_SUFFIX = ".golden"


@dataclass
class IssuesForFile:
    """Failures of one file: issues raised but not expected, and vice versa."""

    unexpected: list[Issue] = field(default_factory=list)
    not_raised: list[Issue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.unexpected and not self.not_raised

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "unexpected": [issue.to_dict() for issue in self.unexpected],
            "not-raised": [issue.to_dict() for issue in self.not_raised],
        }


# Normalized file path -> failures of that file.
ChecksDiff = dict[str, IssuesForFile]

# Code file path -> unified diff lines (autofixed file vs. golden file).
AutofixDiff = dict[str, list[str]]


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


def is_excluded(path: str, excluded_dirs: list[str]) -> bool:
    """True if *path* lies under one of the excluded directory prefixes."""
    return any(path.startswith(d) for d in excluded_dirs)


def should_report(file: PragmaFile | None, issue_code: str) -> bool:
    """Apply the file's include/exclude policy to *issue_code*.

    Issues outside any known file are always reported.
    """
    if file is None or file.check_mode == CheckMode.CHECK_ALL or not file.issue_codes:
        return True

    if file.check_mode == CheckMode.CHECK_INCLUDE:
        return issue_code in file.issue_codes

    return issue_code not in file.issue_codes


def match_file_name_issue_codes(files: dict[str, PragmaFile], result: AnalysisResult) -> None:
    """Restrict files named after a reported issue code to that code.

    A ``CHECK_ALL`` file whose base name (e.g. ``PY-W1000`` for
    ``PY-W1000.py``) equals a code present anywhere in *result* switches to
    ``CHECK_INCLUDE`` for that code.  Explicit directives take priority.
    """
    codes = result.issue_codes()
    for file in files.values():
        if file.check_mode != CheckMode.CHECK_ALL:
            continue
        if file.name not in codes:
            continue

        file.issue_codes = [file.name]
        file.check_mode = CheckMode.CHECK_INCLUDE


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _not_raised(path: str, code: str, line: int, column: int = 0, message: str = "") -> Issue:
    return Issue(
        code=code,
        title=message,
        position=IssuePosition(
            file=path,
            start=Location(line=line, column=column),
            file_normalized=path,
        ),
    )


def diff_checks_result(
    files: dict[str, PragmaFile],
    excluded_dirs: list[str],
    included_files: set[str],
    result: AnalysisResult,
) -> tuple[ChecksDiff, bool]:
    """Compare *result* with the pragmas of *files*.

    *files* is keyed by normalized path.  When *included_files* is non-empty,
    issues of files outside it are ignored.  Hit flags of the pragmas are
    updated in place, so a fresh set of files is needed for every call.

    Returns the per-file failures and whether the run passed.
    """
    diff: ChecksDiff = {}
    passed = True

    match_file_name_issue_codes(files, result)

    for issue in result.issues:
        path = issue.position.file_normalized
        if is_excluded(path, excluded_dirs):
            continue

        issues = diff.setdefault(path, IssuesForFile())

        file = files.get(path)
        if file is None:
            if included_files and path not in included_files:
                continue
            if should_report(file, issue.code):
                issues.unexpected.append(issue)
                passed = False
            continue

        pragma = file.pragmas.get(issue.position.start.line)
        if pragma is None:
            if should_report(file, issue.code):
                issues.unexpected.append(issue)
                passed = False
            continue

        details = pragma.issues.get(issue.code)
        if details is None:
            # Code mismatch.  The code did fire, so it must not also show up
            # as not raised.
            pragma.hit[issue.code] = True
            if should_report(file, issue.code):
                issues.unexpected.append(issue)
                passed = False
            continue

        pragma.hit[issue.code] = True
        if not details:
            # No column / message constraint.
            continue

        detail = next(
            (d for d in details if d.matches(issue.position.start.column, issue.title)),
            None,
        )
        if detail is None:
            if should_report(file, issue.code):
                issues.unexpected.append(issue)
                passed = False
            continue

        detail.hit = True

    for path, file in files.items():
        if is_excluded(path, excluded_dirs):
            continue

        issues = diff.setdefault(path, IssuesForFile())

        for line in sorted(file.pragmas):
            pragma = file.pragmas[line]
            for code, details in pragma.issues.items():
                for detail in details:
                    if detail.hit:
                        continue
                    # Reported per detail; the code itself is accounted for.
                    pragma.hit[code] = True
                    if should_report(file, code):
                        issues.not_raised.append(
                            _not_raised(path, code, line, detail.column, detail.message)
                        )
                        passed = False

            for code, hit in pragma.hit.items():
                if not hit and should_report(file, code):
                    issues.not_raised.append(_not_raised(path, code, line))
                    passed = False

    return diff, passed


# ---------------------------------------------------------------------------
# Autofix
# ---------------------------------------------------------------------------


def golden_file_path(code_file: Path) -> Path:
    """``main.go`` -> ``main.go.golden``."""
    return code_file.with_name(code_file.name + GOLDEN_SUFFIX)


def _golden_candidates(
    code_dir: Path, excluded_dirs: list[str], backup: AutofixBackup
) -> list[tuple[str, Path, Path]]:
    """(relative path, code file, golden file) for backed-up files with a golden file."""
    candidates = []
    for rel in backup.copied_files:
        code_file = code_dir / rel
        if is_excluded(normalize_file_path(code_file), excluded_dirs):
            continue

        golden = golden_file_path(code_file)
        if not golden.is_file():
            continue

        candidates.append((rel, code_file, golden))
    return candidates


def diff_autofix_result(
    code_dir: Path, excluded_dirs: list[str], backup: AutofixBackup
) -> tuple[AutofixDiff, bool]:
    """Unified diffs between each autofixed file and its golden file.

    Files without a golden file are skipped; identical files are omitted.
    Returns the diffs and whether all compared files matched.
    """
    result: AutofixDiff = {}

    for rel, code_file, golden in _golden_candidates(code_dir, excluded_dirs, backup):
        fixed = code_file if backup.in_place else backup.autofix_dir / rel
        fixed_text = fixed.read_text(encoding="utf-8", errors="replace")
        golden_text = golden.read_text(encoding="utf-8", errors="replace")

        lines = list(
            difflib.unified_diff(
                fixed_text.splitlines(keepends=True),
                golden_text.splitlines(keepends=True),
                fromfile=rel,
                tofile=rel + GOLDEN_SUFFIX,
            )
        )
        if lines:
            result[str(code_file)] = lines

    return result, not result


def check_identical_golden_files(
    code_dir: Path, excluded_dirs: list[str], backup: AutofixBackup
) -> tuple[set[str], bool]:
    """Backed-up files whose original content already equals the golden file.

    Such a fixture cannot tell whether Autofix did anything.  Returns the
    offending files and whether there were none.
    """
    identical: set[str] = set()

    for _rel, code_file, golden in _golden_candidates(code_dir, excluded_dirs, backup):
        if code_file.read_bytes() == golden.read_bytes():
            identical.add(str(code_file))

    return identical, not identical
