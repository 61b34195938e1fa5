"""
Local staging directory and deferred cleanup for one sync run.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Any

from catalogpdf.exceptions import CleanupWarning
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.sync.staging")


class DeferredCleanup:
    """
    Files whose immediate deletion failed, retried once at run teardown.

    Scoped to a single run; nothing is registered with the interpreter.
    """

    def __init__(self) -> None:
        self._pending: list[Path] = []

    def schedule(self, path: Path) -> None:
        self._pending.append(Path(path))

    @property
    def pending(self) -> list[Path]:
        return list(self._pending)

    def run(self) -> list[Path]:
        """Attempt every pending deletion. Returns the paths still left behind."""
        leftover = []
        for path in self._pending:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"{CleanupWarning.__name__}: deferred delete of {path} failed: {e}")
                leftover.append(path)
        self._pending = []
        return leftover


class StagingArea:
    """
    Ephemeral directory owning downloaded documents and generated artifacts.

    Use as a context manager; the directory is removed on every exit path.
    """

    def __init__(self, prefix: str = "sftp-sync-", base_dir: str | Path | None = None):
        self.prefix = prefix
        self.base_dir = str(base_dir) if base_dir is not None else None
        self.path: Path | None = None

    def create(self) -> Path:
        if self.path is None:
            self.path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.base_dir))
            logger.debug(f"Created staging directory {self.path}")
        return self.path

    def document_dirs(self, index: int, name: str) -> tuple[Path, Path]:
        """Return (input file path, output directory) for the index-th document."""
        root = self.create() / f"{index:04d}"
        out_dir = root / "out"
        out_dir.mkdir(parents=True, exist_ok=True)
        return root / _safe_name(name), out_dir

    def destroy(self) -> None:
        if self.path is None:
            return
        path, self.path = self.path, None

        try:
            shutil.rmtree(path)
            logger.debug(f"Removed staging directory {path}")
        except OSError as e:
            logger.warning(f"{CleanupWarning.__name__}: could not remove staging directory {path}: {e}")

    def __enter__(self) -> StagingArea:
        self.create()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.destroy()


def _safe_name(name: str) -> str:
    name = name.replace("\\", "/").rsplit("/", 1)[-1]
    return name.replace("..", "__") or "document"
