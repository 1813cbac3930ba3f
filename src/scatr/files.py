"""files.py - Fixture discovery and path normalization.

Every path handed to the matching engine is normalized here: absolute and
symlink-resolved, so that the analyzer's relative paths, user-provided
``--files`` and glob matches all compare equal.  Nothing in here changes the
process working directory.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from scatr.cli import log
from scatr.config import ScatrConfig
from scatr.pragma_file import PragmaFile, read_pragma_file


def normalize_file_path(path: Path | str) -> str:
    """Return the absolute, symlink-resolved form of an existing *path*.

    Raises ``FileNotFoundError`` if the path does not exist.
    """
    return str(Path(path).resolve(strict=True))


def normalize_file_list(files: Iterable[str], code_dir: Path) -> set[str]:
    """Normalize user-provided paths (relative to *code_dir*).

    Paths that cannot be resolved are logged and skipped.
    """
    normalized: set[str] = set()
    for f in files:
        try:
            normalized.add(normalize_file_path(code_dir / f))
        except OSError as exc:
            log(f"Error normalizing the file path {f!r}: {exc}")
    return normalized


def glob_files(code_dir: Path, pattern: str) -> list[str]:
    """Return files under *code_dir* matching *pattern* (``**`` recurses).

    Paths are relative to *code_dir*, POSIX-style, sorted.
    """
    if not pattern.strip():
        return []
    return sorted(
        p.relative_to(code_dir).as_posix() for p in code_dir.glob(pattern) if p.is_file()
    )


def read_files(config: ScatrConfig, included_files: set[str]) -> dict[str, PragmaFile]:
    """Index the pragmas of every fixture file, keyed by normalized path.

    When *included_files* is non-empty only those files are read.
    """
    code_dir = config.code_dir
    files: dict[str, PragmaFile] = {}

    for rel in glob_files(code_dir, config.files):
        path = code_dir / rel
        try:
            normalized = normalize_file_path(path)
        except OSError as exc:
            log(f"Error normalizing the file path {rel!r}: {exc}")
            continue

        if included_files and normalized not in included_files:
            continue

        files[normalized] = read_pragma_file(path, config.comment_prefix)

    return files
