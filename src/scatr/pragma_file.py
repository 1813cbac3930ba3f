"""pragma_file.py - Per-file pragma index and check-mode directives.

Builds a line-indexed map of :class:`~scatr.pragma.Pragma` objects from a
fixture file.  Where a pragma lands depends on the comment's layout:

* a trailing comment (``code()  // [GO-W1000]``) annotates its own line;
* a comment-only line (``// [GO-W1000]``) annotates the line below it;
* consecutive comment-only lines stack onto the code line under them.

The first line may also carry a directive restricting which issue codes the
file is checked for::

    # scatr-check: PY-W1000, PY-S1024
    # scatr-ignore: PY-W1000
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from scatr.pragma import Pragma, is_issue_code, parse_pragma


class CheckMode(Enum):
    """Which issue codes of a file take part in the verdict."""

    CHECK_ALL = "CheckAll"
    CHECK_INCLUDE = "CheckInclude"
    CHECK_EXCLUDE = "CheckExclude"

    def __str__(self) -> str:
        return self.value


# First-line directive keywords (case-sensitive literal prefixes).
CHECK_DIRECTIVES = {
    "scatr-check:": CheckMode.CHECK_INCLUDE,
    "scatr-ignore:": CheckMode.CHECK_EXCLUDE,
}


def _find_prefix(line: str, prefixes: list[str]) -> str | None:
    """Return the first configured prefix occurring anywhere in *line*."""
    for prefix in prefixes:
        if prefix and prefix in line:
            return prefix
    return None


def _is_comment_line(line: str, prefixes: list[str]) -> bool:
    stripped = line.strip()
    return any(prefix and stripped.startswith(prefix) for prefix in prefixes)


@dataclass
class PragmaFile:
    """Pragma index of one fixture file.

    ``name`` is the file's base name without extension; it doubles as a
    directive when it equals an issue code the analyzer reported (see
    :func:`scatr.diff.match_file_name_issue_codes`).  ``issue_codes`` is the
    restriction list for ``CHECK_INCLUDE`` / ``CHECK_EXCLUDE``.
    """

    name: str
    content: str
    comment_prefixes: list[str]
    pragmas: dict[int, Pragma] = field(default_factory=dict)
    check_mode: CheckMode = CheckMode.CHECK_ALL
    issue_codes: list[str] | None = None

    @classmethod
    def from_source(cls, name: str, content: str, comment_prefixes: list[str]) -> PragmaFile:
        """Index the pragmas of *content*.  *name* may include an extension."""
        pragma_file = cls(
            name=Path(name).stem if name else "",
            content=content,
            comment_prefixes=list(comment_prefixes),
        )
        pragma_file._extract()
        return pragma_file

    def read_check_mode(self, comment: str) -> None:
        """Apply a ``scatr-check:`` / ``scatr-ignore:`` directive, if any.

        Tokens that are not shaped like issue codes are dropped.
        """
        if self.check_mode != CheckMode.CHECK_ALL:
            return

        comment = comment.strip()
        for keyword, mode in CHECK_DIRECTIVES.items():
            if comment.startswith(keyword):
                break
        else:
            return

        self.check_mode = mode
        codes = [token.strip() for token in comment[len(keyword) :].split(",")]
        valid = [code for code in codes if is_issue_code(code)]
        if valid:
            self.issue_codes = (self.issue_codes or []) + valid

    def _extract(self) -> None:
        lines = [line.removesuffix("\r") for line in self.content.split("\n")]

        for line_num, raw_line in enumerate(lines, start=1):
            line = raw_line.strip()
            prefix = _find_prefix(line, self.comment_prefixes)
            if prefix is None:
                continue

            comment = line.partition(prefix)[2]
            if line_num == 1:
                self.read_check_mode(comment)

            pragma = parse_pragma(comment)
            if pragma is None:
                continue

            self._place(pragma, line_num, line.startswith(prefix), lines)

    def _place(self, pragma: Pragma, line_num: int, comment_only: bool, lines: list[str]) -> None:
        # A comment-only line documents the code line below it.
        target = line_num + 1 if comment_only else line_num
        pragma.from_comment_line = comment_only

        existing = self.pragmas.get(target)
        if existing is not None:
            pragma.merge(existing)
            if existing.from_comment_line and not comment_only:
                pragma.folded = True

        # Stack a comment-only annotation sitting right above onto this one.
        previous = self.pragmas.get(target - 1)
        if (
            previous is not None
            and previous.from_comment_line
            and not previous.folded
            and _is_comment_line(lines[target - 2], self.comment_prefixes)
        ):
            pragma.merge(previous)
            del self.pragmas[target - 1]

        self.pragmas[target] = pragma


def read_pragma_file(path: Path, comment_prefixes: list[str]) -> PragmaFile:
    """Read *path* and index its pragmas.  I/O errors propagate."""
    text = path.read_text(encoding="utf-8", errors="replace")
    return PragmaFile.from_source(path.name, text, comment_prefixes)
