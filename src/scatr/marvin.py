"""marvin.py - Convert Marvin analyzer output into scatr's result format.

Marvin results come as JSON, or as MessagePack when the file ends in
``.mpack``::

    {"issues": [
        {"issue_code": "GO-W1000", "issue_text": "...",
         "location": {"path": "main.go",
                      "position": {"begin": {"line": 3, "column": 1},
                                   "end": {"line": 3, "column": 9}}}}
    ]}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from scatr.cli import log
from scatr.result import AnalysisResult, Issue, IssuePosition, Location

MSGPACK_SUFFIX = ".mpack"


def load_marvin_result(path: Path) -> dict[str, Any]:
    """Decode a Marvin result file.  Raises ``ValueError`` if malformed."""
    content = path.read_bytes()

    if path.suffix == MSGPACK_SUFFIX:
        log("MessagePack result detected")
        import msgpack

        try:
            data = msgpack.unpackb(content, raw=False)
        except ValueError as exc:
            raise ValueError(f"Invalid MessagePack in {path}: {exc}") from exc
    else:
        log("JSON result detected")
        data = json.loads(content)

    if not isinstance(data, dict):
        raise ValueError(f"Marvin result in {path} must be an object")
    return data


def _location(data: Any) -> Location:
    if not isinstance(data, dict):
        return Location()
    return Location.from_dict(data)


def _object(data: Any, what: str) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {what} in Marvin result: {data!r}")
    return data


def marvin_to_result(data: dict[str, Any]) -> AnalysisResult:
    """Map Marvin fields onto an ``AnalysisResult``.

    Missing fields default to empty/zero.  The end position is always set.
    """
    result = AnalysisResult()
    for raw in data.get("issues") or []:
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid issue in Marvin result: {raw!r}")
        location = _object(raw.get("location"), "location")
        position = _object(location.get("position"), "position")
        result.issues.append(
            Issue(
                code=str(raw.get("issue_code") or ""),
                title=str(raw.get("issue_text") or ""),
                position=IssuePosition(
                    file=str(location.get("path") or ""),
                    start=_location(position.get("begin")),
                    end=_location(position.get("end")),
                ),
            )
        )
    return result
