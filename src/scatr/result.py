"""result.py - Issues reported by the analyzer under test.

The analyzer's output (after the optional processor script) is JSON::

    {"issues": [
        {"code": "GO-W1000", "title": "...",
         "position": {"file": "main.go",
                      "start": {"line": 9, "column": 2},
                      "end": {"line": 9, "column": 14}}}
    ]}

Each issue gets a normalized (absolute, symlink-resolved) copy of its file
path on ingestion; that path is the key used when matching against pragmas.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from scatr.cli import log
from scatr.files import normalize_file_path


@dataclass
class Location:
    line: int = 0
    column: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Location:
        return cls(line=int(data.get("line") or 0), column=int(data.get("column") or 0))

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass
class IssuePosition:
    file: str = ""
    start: Location = field(default_factory=Location)
    end: Location | None = None

    # Normalized path used internally for matching; never serialized.
    file_normalized: str = field(default="", compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "start": self.start.to_dict(),
            "end": self.end.to_dict() if self.end is not None else None,
        }


@dataclass
class Issue:
    """One analyzer finding."""

    code: str
    title: str = ""
    position: IssuePosition = field(default_factory=IssuePosition)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Issue:
        """Build an issue from its JSON form.  Raises ``ValueError`` if malformed."""
        if not isinstance(data, dict) or not isinstance(data.get("code"), str):
            raise ValueError(f"Invalid issue in analysis result: {data!r}")

        position = data.get("position") or {}
        try:
            end = position.get("end")
            return cls(
                code=data["code"],
                title=str(data.get("title") or ""),
                position=IssuePosition(
                    file=str(position.get("file") or ""),
                    start=Location.from_dict(position.get("start") or {}),
                    end=Location.from_dict(end) if end is not None else None,
                ),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid issue position in analysis result: {data!r}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "title": self.title, "position": self.position.to_dict()}


@dataclass
class AnalysisResult:
    issues: list[Issue] = field(default_factory=list)

    def issue_codes(self) -> set[str]:
        """All distinct issue codes present in the result."""
        return {issue.code for issue in self.issues}

    def to_dict(self) -> dict[str, Any]:
        return {"issues": [issue.to_dict() for issue in self.issues]}


def parse_result(data: str | bytes, code_dir: Path) -> AnalysisResult:
    """Decode the analyzer's JSON output.

    Issue paths are resolved against *code_dir*.  A path that cannot be
    normalized (e.g. the file does not exist) is logged and left empty, so the
    issue still shows up as unexpected.
    """
    raw = json.loads(data)
    if not isinstance(raw, dict):
        raise ValueError("Analysis result must be a JSON object with an 'issues' list")

    issues_raw = raw.get("issues") or []
    if not isinstance(issues_raw, list):
        raise ValueError("'issues' in the analysis result must be a list")

    result = AnalysisResult(issues=[Issue.from_dict(item) for item in issues_raw])
    for issue in result.issues:
        try:
            issue.position.file_normalized = normalize_file_path(code_dir / issue.position.file)
        except OSError as exc:
            log(f"Error normalizing file path for {issue.code} in {issue.position.file!r}: {exc}")

    return result
