# src/repofetch/extract.py: Subtree extraction from a throwaway clone.
# This module clones a repository into a private scratch directory, moves one
# of its subdirectories to a caller-chosen destination and removes the scratch
# clone afterwards. Every extraction gets its own uniquely named scratch
# directory, so concurrent extractions of the same subtree never collide.

from __future__ import annotations

import re
import tempfile
from pathlib import Path, PurePath
from typing import Optional

from .config import Config
from .repoops import Cloner
from .util.errors import CleanupError, FilesystemIOError, PathMissingError
from .util.fs import move_to_new_path, remove_tree
from .util.log import get_logger
from .util.paths import get_scratch_root

logger = get_logger(__name__)


def _scratch_prefix(label: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9._-]+", "-", label).strip("-.") or "subtree"
    return f"repofetch-{slug[:40]}-"


class TransientClone:
    """
    A scratch directory that lives for exactly one extraction.

    The directory is created on entry and removed on exit whatever happened
    inside the block. If removal fails while the block succeeded, CleanupError
    is raised; if the block itself failed, that error wins and the cleanup
    failure is only logged.
    """

    def __init__(self, label: str, scratch_root: Optional[Path] = None):
        self.label = label
        self.scratch_root = get_scratch_root(scratch_root)
        self.path: Optional[Path] = None

    @property
    def repo_path(self) -> Path:
        return self.path / "repo"

    def __enter__(self) -> TransientClone:
        try:
            self.scratch_root.mkdir(parents=True, exist_ok=True)
            self.path = Path(tempfile.mkdtemp(prefix=_scratch_prefix(self.label), dir=self.scratch_root))
        except OSError as e:
            raise FilesystemIOError(f"Failed to create temp directory: {e}", step="allocate-scratch")
        logger.debug(f"Allocated scratch clone directory {self.path}")
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.path is None or not self.path.exists():
            return False
        try:
            remove_tree(self.path)
        except OSError as e:
            if exc is None:
                raise CleanupError(f"Failed to delete temp repo: {e}", step="cleanup")
            logger.error(f"Failed to delete temp repo {self.path} after an earlier failure: {e}")
        return False


class SubtreeExtractor:
    """Copies one directory of a repository's default branch to a new location."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.cloner = Cloner(self.config.git)

    def extract(self, source: str, subtree: str, destination: str | Path) -> Path:
        relative = self._validate_subtree(subtree)
        dest_path = Path(destination)

        with TransientClone(subtree, self.config.scratch_dir) as scratch:
            working_copy = self.cloner.clone(source, scratch.repo_path)
            folder_path = self._locate(working_copy.path, relative, subtree)
            move_to_new_path(folder_path, dest_path)
            logger.info(f"Moved '{subtree}' from {source} to {dest_path}")

        return dest_path

    def _validate_subtree(self, subtree: str) -> PurePath:
        relative = PurePath(subtree or "")
        if not relative.parts or relative.is_absolute() or ".." in relative.parts:
            raise PathMissingError(
                f"Folder '{subtree}' not found in repository.", step="locate-subtree"
            )
        return relative

    def _locate(self, clone_root: Path, relative: PurePath, subtree: str) -> Path:
        folder_path = clone_root / relative
        missing = PathMissingError(f"Folder '{subtree}' not found in repository.", step="locate-subtree")
        if folder_path.is_symlink() or not folder_path.is_dir():
            raise missing
        # A symlinked parent component could point outside the clone.
        if not folder_path.resolve().is_relative_to(clone_root.resolve()):
            raise missing
        return folder_path
