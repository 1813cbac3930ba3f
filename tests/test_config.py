"""Tests for the .scatr.toml loader."""

import os
import tomllib
from pathlib import Path

import pytest

from scatr.config import (
    CONFIG_FILE_NAME,
    DEFAULT_INTERPRETER,
    ScatrConfig,
    _resolve,
    load_config,
)

# ---------------------------------------------------------------------------
# Helper: create a temp .scatr.toml and return its path
# ---------------------------------------------------------------------------


def _make_config(tmp_path: Path, toml_content: str) -> Path:
    """Write a .scatr.toml and return its path."""
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text(toml_content, encoding="utf-8")
    return path


FULL_CONFIG = """\
files = "**/*.go"
comment_prefix = ["//"]
code_path = "checks"
excluded_dirs = ["vendor", " "]

[checks]
interpreter = "bash"
script = "analyzer run"
output_file = "result.json"
args = ["-e"]

[processor]
interpreter = "python3"
script = "print(1)"

[autofix]
script = "analyzer autofix"
interactive = true
"""


# ---------------------------------------------------------------------------
# _resolve()
# ---------------------------------------------------------------------------


class TestResolve:
    def test_relative_path(self, tmp_path: Path) -> None:
        assert _resolve(tmp_path, "foo/bar") == tmp_path / "foo" / "bar"

    def test_absolute_path(self, tmp_path: Path) -> None:
        assert _resolve(tmp_path, "/absolute/dir") == Path("/absolute/dir")


# ---------------------------------------------------------------------------
# load_config()
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_full(self, tmp_path: Path) -> None:
        cfg = load_config(_make_config(tmp_path, FULL_CONFIG))

        assert cfg.root == tmp_path.resolve()
        assert cfg.files == "**/*.go"
        assert cfg.comment_prefix == ["//"]
        assert cfg.code_path == "checks"
        assert cfg.checks.interpreter == "bash"
        assert cfg.checks.script == "analyzer run"
        assert cfg.checks.output_file == "result.json"
        assert cfg.checks.args == ["-e"]
        assert cfg.checks.interactive is False
        assert cfg.processor.interpreter == "python3"
        assert cfg.processor.skip_processing is False
        assert cfg.autofix.interpreter == DEFAULT_INTERPRETER
        assert cfg.autofix.interactive is True
        assert cfg.test_checks is True
        assert cfg.test_autofix is True

    def test_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(_make_config(tmp_path, 'files = "*.py"\n'))
        assert cfg.code_path == "."
        assert cfg.comment_prefix == []
        assert cfg.excluded_dirs == []
        assert cfg.checks.interpreter == DEFAULT_INTERPRETER
        assert cfg.processor.interpreter == DEFAULT_INTERPRETER
        assert cfg.test_checks is False
        assert cfg.test_autofix is False

    def test_explicit_flags_override_table_presence(self, tmp_path: Path) -> None:
        content = 'test_checks = false\ntest_autofix = true\n[checks]\nscript = "x"\n'
        cfg = load_config(_make_config(tmp_path, content))
        assert cfg.test_checks is False
        assert cfg.test_autofix is True

    def test_empty_interpreter_falls_back_to_sh(self, tmp_path: Path) -> None:
        cfg = load_config(_make_config(tmp_path, '[checks]\ninterpreter = ""\n'))
        assert cfg.checks.interpreter == "sh"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / CONFIG_FILE_NAME)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(_make_config(tmp_path, "files = \n"))

    def test_invalid_toml_is_value_error(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            load_config(_make_config(tmp_path, "[checks\n"))

    def test_wrong_type(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="comment_prefix"):
            load_config(_make_config(tmp_path, 'comment_prefix = "//"\n'))

    def test_wrong_type_in_table(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match=r"checks\.interactive"):
            load_config(_make_config(tmp_path, '[checks]\ninteractive = "yes"\n'))

    def test_wrong_list_item_type(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="excluded_dirs"):
            load_config(_make_config(tmp_path, "excluded_dirs = [1, 2]\n"))


# ---------------------------------------------------------------------------
# Computed paths
# ---------------------------------------------------------------------------


class TestComputedPaths:
    def test_code_dir(self, tmp_path: Path) -> None:
        cfg = ScatrConfig(root=tmp_path, code_path="checks")
        assert cfg.code_dir == (tmp_path / "checks").resolve()

    def test_blank_code_path_is_root(self, tmp_path: Path) -> None:
        cfg = ScatrConfig(root=tmp_path, code_path="  ")
        assert cfg.code_dir == tmp_path.resolve()

    def test_excluded_paths(self, tmp_path: Path) -> None:
        cfg = load_config(_make_config(tmp_path, FULL_CONFIG))
        expected = str((tmp_path / "checks" / "vendor").resolve()) + os.sep
        assert cfg.excluded_paths == [expected]
