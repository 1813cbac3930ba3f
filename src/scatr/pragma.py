"""pragma.py - Expected-issue annotations ("pragmas") embedded in comments.

A pragma is the text following a comment prefix that lists the issues an
analyzer is expected to raise for a line of a fixture file::

    x = eval(data)  # [PY-W1000]
    // [GO-W1000]: 10 "Hello", 20, "World"; [GO-W1001]

Grammar (leading free text before the first ``[CODE]`` is ignored):

* segments are separated by ``;`` (a trailing ``;`` is allowed, and a ``;``
  inside a quoted message does not split);
* each segment holds ``[CODE]``, optionally followed by ``:`` and a
  comma-separated list of details;
* each detail is a column (``10``), a double-quoted message (``"Hello"``,
  with ``\\"`` escapes), or both in either order (``10 "Hello"``).

Segments that do not look like ``[CODE]`` are skipped, so garbage before or
after a valid segment never hides it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# Issue code shape: word characters, a hyphen, an optional letter, 1-4 digits.
#   GO-W1000, PY-1234, RS-E1017, CXX-S111
ISSUE_CODE_PATTERN = r"\w+-[A-Za-z]?\d{1,4}"

# A double-quoted message, possibly containing escaped quotes.
_QUOTED = r'"(?:\\.|[^"\\])*"'

# One ``;``-separated segment.  Quoted messages are consumed whole so that a
# ``;`` inside them does not end the segment.
_SEGMENT_RE = re.compile(r'(?:"(?:\\.|[^"\\])*"|[^;"])+')

# ``[CODE]`` with an optional ``: details`` tail.
_SEGMENT_CODE_RE = re.compile(
    r"\[(?P<code>" + ISSUE_CODE_PATTERN + r")\]"
    r"(?:\s*:(?P<details>.*))?",
    re.DOTALL,
)

# One detail item: ``<column> ["message"]`` or ``"message" [<column>]``.
_DETAIL_RE = re.compile(
    r"\s*(?:"
    r"(?P<column>\d+)(?:\s*(?P<message>" + _QUOTED + r"))?"
    r"|(?P<message_first>" + _QUOTED + r")(?:\s*(?P<column_last>\d+))?"
    r")\s*"
)

_ESCAPE_RE = re.compile(r'\\(["\\])')


def is_issue_code(token: str) -> bool:
    """True if the whole of *token* has the shape of an issue code."""
    return re.fullmatch(ISSUE_CODE_PATTERN, token) is not None


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class Detail:
    """One expected occurrence of an issue code.

    ``column == 0`` matches any column and an empty ``message`` matches any
    message.  ``hit`` is set once a reported issue consumed this entry.
    """

    column: int = 0
    message: str = ""
    hit: bool = False

    def matches(self, column: int, message: str) -> bool:
        """Check a reported column/title pair against this expectation."""
        return (self.column == 0 or self.column == column) and (
            self.message == "" or self.message == message
        )


@dataclass
class Pragma:
    """Expected issues for one source line, keyed by issue code.

    An empty detail list means "the code is expected, nothing more".  ``hit``
    carries one flag per issue code, all ``False`` until reconciliation sees
    the code reported on this line.
    """

    issues: dict[str, list[Detail]] = field(default_factory=dict)
    hit: dict[str, bool] = field(default_factory=dict)

    # Extraction bookkeeping, not part of the expected data.
    from_comment_line: bool = field(default=False, compare=False, repr=False)
    folded: bool = field(default=False, compare=False, repr=False)

    def add(self, code: str, details: list[Detail]) -> None:
        """Record *details* for *code*, keeping ``hit`` in step with ``issues``."""
        self.issues.setdefault(code, []).extend(details)
        self.hit.setdefault(code, False)

    def merge(self, other: Pragma) -> None:
        """Fold *other* into this pragma.

        Codes are unioned.  For a code present on both sides, this pragma's
        details stay first and *other*'s are appended after them.
        """
        for code, details in other.issues.items():
            if code in self.issues:
                self.issues[code].extend(details)
            else:
                self.issues[code] = details

        for code, hit in other.hit.items():
            self.hit[code] = self.hit.get(code, False) or hit


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _unquote(quoted: str) -> str:
    return _ESCAPE_RE.sub(r"\1", quoted[1:-1])


def parse_details(text: str) -> list[Detail]:
    """Parse a comma-separated detail list.

    Parsing stops at the first item that is neither a column nor a message,
    so trailing comment terminators such as ``-->`` or ``*/`` are ignored.
    """
    details: list[Detail] = []
    pos = 0
    while True:
        m = _DETAIL_RE.match(text, pos)
        if m is None or m.end() == pos:
            break

        column = m.group("column") or m.group("column_last")
        message = m.group("message") or m.group("message_first")
        details.append(
            Detail(
                column=int(column) if column else 0,
                message=_unquote(message) if message else "",
            )
        )

        pos = m.end()
        if not text.startswith(",", pos):
            break
        pos += 1

    return details


def parse_pragma(comment: str) -> Pragma | None:
    """Parse the text after a comment prefix.

    Returns ``None`` when the comment holds no ``[CODE]`` segment.
    """
    pragma = Pragma()
    for segment in _SEGMENT_RE.finditer(comment):
        m = _SEGMENT_CODE_RE.search(segment.group(0))
        if m is None:
            continue

        details = m.group("details")
        pragma.add(m.group("code"), parse_details(details) if details else [])

    if not pragma.issues:
        return None

    return pragma
