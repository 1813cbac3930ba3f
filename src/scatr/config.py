"""Test-suite configuration loader for scatr.

Reads ``.scatr.toml`` from the directory scatr runs in::

    files = "**/*.go"
    comment_prefix = ["//"]
    code_path = "checks"
    excluded_dirs = ["vendor"]

    [checks]
    script = "analyzer run --output $CODE_PATH/../result.json"
    output_file = "result.json"

    [processor]
    skip_processing = true

    [autofix]
    script = "analyzer autofix --output $OUTPUT_DIR"

``test_checks`` / ``test_autofix`` default to whether the ``[checks]`` /
``[autofix]`` tables are present.  Interpreters default to ``sh``.

Usage::

    from scatr.config import load_config
    cfg = load_config(Path(".scatr.toml"))
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILE_NAME = ".scatr.toml"
DEFAULT_INTERPRETER = "sh"


@dataclass
class ScriptConfig:
    """A ``[checks]`` or ``[autofix]`` table: a script and how to run it."""

    interpreter: str = DEFAULT_INTERPRETER
    script: str = ""
    output_file: str = ""
    interactive: bool = False
    args: list[str] = field(default_factory=list)


@dataclass
class ProcessorConfig:
    """The ``[processor]`` table converting analyzer output to scatr's JSON."""

    interpreter: str = DEFAULT_INTERPRETER
    script: str = ""
    skip_processing: bool = False


@dataclass
class ScatrConfig:
    """Parsed configuration with computed paths."""

    # Directory holding .scatr.toml; relative paths resolve against it.
    root: Path

    files: str = ""
    comment_prefix: list[str] = field(default_factory=list)
    code_path: str = "."
    excluded_dirs: list[str] = field(default_factory=list)

    checks: ScriptConfig = field(default_factory=ScriptConfig)
    autofix: ScriptConfig = field(default_factory=ScriptConfig)
    processor: ProcessorConfig = field(default_factory=ProcessorConfig)

    test_checks: bool = False
    test_autofix: bool = False

    @property
    def code_dir(self) -> Path:
        """Absolute fixture directory."""
        return _resolve(self.root, self.code_path.strip() or ".").resolve()

    @property
    def excluded_paths(self) -> list[str]:
        """Excluded directories as normalized path prefixes."""
        return [
            os.path.join(_resolve(self.code_dir, d).resolve(), "")
            for d in self.excluded_dirs
            if d.strip()
        ]


def _resolve(root: Path, rel: str) -> Path:
    """Resolve a path relative to *root*."""
    p = Path(rel)
    if p.is_absolute():
        return p
    return root / p


def _get(table: dict[str, Any], key: str, expected: type, default: Any, where: str) -> Any:
    """Fetch *key* from a TOML table, checking its type."""
    if key not in table:
        return default
    value = table[key]
    if not isinstance(value, expected):
        raise ValueError(
            f"{where}{key}: expected {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _get_str_list(table: dict[str, Any], key: str, where: str) -> list[str]:
    values = _get(table, key, list, [], where)
    if not all(isinstance(v, str) for v in values):
        raise ValueError(f"{where}{key}: expected a list of strings")
    return list(values)


def _script_config(raw: dict[str, Any], name: str) -> ScriptConfig:
    table = _get(raw, name, dict, {}, "")
    where = f"{name}."
    return ScriptConfig(
        interpreter=_get(table, "interpreter", str, "", where) or DEFAULT_INTERPRETER,
        script=_get(table, "script", str, "", where),
        output_file=_get(table, "output_file", str, "", where),
        interactive=_get(table, "interactive", bool, False, where),
        args=_get_str_list(table, "args", where),
    )


def _processor_config(raw: dict[str, Any]) -> ProcessorConfig:
    table = _get(raw, "processor", dict, {}, "")
    where = "processor."
    return ProcessorConfig(
        interpreter=_get(table, "interpreter", str, "", where) or DEFAULT_INTERPRETER,
        script=_get(table, "script", str, "", where),
        skip_processing=_get(table, "skip_processing", bool, False, where),
    )


def load_config(path: Path) -> ScatrConfig:
    """Load a ``.scatr.toml`` file.

    Raises ``FileNotFoundError`` if it is missing and ``ValueError`` (including
    ``tomllib.TOMLDecodeError``) if it is malformed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    # Only test the checks if `test_checks` is true, or if it is absent while
    # the `[checks]` table is present.  Same for Autofix.
    test_checks = _get(raw, "test_checks", bool, "checks" in raw, "")
    test_autofix = _get(raw, "test_autofix", bool, "autofix" in raw, "")

    return ScatrConfig(
        root=path.resolve().parent,
        files=_get(raw, "files", str, "", ""),
        comment_prefix=_get_str_list(raw, "comment_prefix", ""),
        code_path=_get(raw, "code_path", str, ".", ""),
        excluded_dirs=_get_str_list(raw, "excluded_dirs", ""),
        checks=_script_config(raw, "checks"),
        autofix=_script_config(raw, "autofix"),
        processor=_processor_config(raw),
        test_checks=test_checks,
        test_autofix=test_autofix,
    )
