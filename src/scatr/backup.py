"""backup.py - Snapshot fixture files around an Autofix run.

In place mode (no ``--autofix-dir``) the Autofix script rewrites the fixtures
themselves, so the originals are copied to a temporary directory first and put
back afterwards.  With an Autofix directory the fixtures are copied there and
the script works on the copies; nothing needs restoring.

Files ignored by the fixture directory's root ``.gitignore`` are skipped.
"""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import pathspec

from scatr.cli import log
from scatr.config import ScatrConfig
from scatr.files import glob_files, normalize_file_path


def _load_gitignore(code_dir: Path) -> pathspec.GitIgnoreSpec | None:
    gitignore = code_dir / ".gitignore"
    if not gitignore.is_file():
        return None
    lines = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
    return pathspec.GitIgnoreSpec.from_lines(lines)


def _copy_file(src: Path, dst: Path) -> None:
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)


@dataclass
class AutofixBackup:
    """Files copied before an Autofix run, relative to ``code_dir``."""

    code_dir: Path
    copied_files: list[str] = field(default_factory=list)
    tmp_dir: Path | None = None
    autofix_dir: Path | None = None
    _restored: bool = field(default=False, repr=False)

    @property
    def in_place(self) -> bool:
        return self.autofix_dir is None

    @classmethod
    def create(
        cls,
        config: ScatrConfig,
        included_files: set[str],
        autofix_dir: Path | None = None,
    ) -> AutofixBackup:
        """Copy every fixture matched by ``config.files``.

        *autofix_dir* ``None`` means in place: originals go to a fresh
        temporary directory.  Otherwise they are copied into *autofix_dir*.
        When *included_files* (normalized paths) is non-empty, only those
        files are copied.
        """
        code_dir = config.code_dir
        spec = _load_gitignore(code_dir)

        backup = cls(code_dir=code_dir, autofix_dir=autofix_dir)
        if autofix_dir is None:
            backup.tmp_dir = Path(tempfile.mkdtemp(prefix="autofix_backup_"))
            dest = backup.tmp_dir
        else:
            dest = autofix_dir

        try:
            for rel in glob_files(code_dir, config.files):
                try:
                    normalized = normalize_file_path(code_dir / rel)
                except OSError as exc:
                    log(f"Error normalizing the file path {rel!r}: {exc}")
                    continue

                if included_files and normalized not in included_files:
                    continue
                if spec is not None and spec.match_file(rel):
                    continue

                _copy_file(code_dir / rel, dest / rel)
                backup.copied_files.append(rel)
        except OSError:
            if backup.tmp_dir is not None:
                shutil.rmtree(backup.tmp_dir, ignore_errors=True)
            raise

        log(f"Backed up {len(backup.copied_files)} file(s) to {dest}")
        return backup

    def restore_and_destroy(self) -> None:
        """Put the originals back and delete the temporary directory.

        Only the first call does anything.  No-op outside in place mode.
        """
        if self._restored:
            return
        self._restored = True

        if not self.in_place or self.tmp_dir is None:
            return

        for rel in self.copied_files:
            _copy_file(self.tmp_dir / rel, self.code_dir / rel)

        shutil.rmtree(self.tmp_dir)
