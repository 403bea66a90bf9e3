# src/repofetch/util/fs.py: Filesystem utilities.
# This module provides the destructive filesystem primitives: emptying a
# directory in place, removing a whole tree (including read-only git object
# files), and a create-only move used to relocate an extracted subtree. Every
# failure is raised as a typed error naming the path and the step involved.

import os
import shutil
import stat
import sys
from pathlib import Path

from .errors import (
    FilesystemIOError,
    NotADirectoryPathError,
    PathConflictError,
    PathMissingError,
)
from .log import get_logger

logger = get_logger(__name__)


def prune_directory(path: str | Path) -> None:
    """
    Remove every entry beneath `path` while keeping `path` itself.

    Subdirectories are removed recursively, files and symbolic links are
    unlinked. A symlink is always removed as a link, even when it points at a
    directory, so nothing outside `path` is touched. Removal stops at the first
    failing entry; entries removed before it stay removed.

    Raises:
        PathMissingError: If `path` does not exist.
        NotADirectoryPathError: If `path` is not a directory.
        FilesystemIOError: If the directory cannot be listed or an entry cannot be removed.
    """
    dir_path = Path(path)
    if not dir_path.exists():
        raise PathMissingError("Directory does not exist.", step="prune")
    if not dir_path.is_dir():
        raise NotADirectoryPathError("Provided path is not a directory.", step="prune")

    try:
        entries = list(os.scandir(dir_path))
    except OSError as e:
        raise FilesystemIOError(f"Failed to read directory: {e}", step="prune")

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            try:
                remove_tree(entry.path)
            except OSError as e:
                raise FilesystemIOError(f"Failed to remove dir: {e}", step="prune")
        else:
            try:
                os.unlink(entry.path)
            except OSError as e:
                raise FilesystemIOError(f"Failed to remove file: {e}", step="prune")

    logger.info(f"Pruned {len(entries)} entries from {dir_path}")


def _clear_readonly(func, path, exc):
    # git marks pack and object files read-only, which blocks unlink on Windows.
    # Links are never chmodded: that would change their target instead.
    if isinstance(exc, tuple):
        exc = exc[1]
    if not isinstance(exc, PermissionError) or os.path.islink(path):
        raise exc
    os.chmod(path, os.stat(path).st_mode | stat.S_IWRITE)
    func(path)


def remove_tree(path: str | Path) -> None:
    """
    Remove a directory and everything beneath it. Raises OSError on failure.

    A permission error on a regular entry is retried once with its write bit
    added. Any other failure, or one on a symbolic link, is raised as-is.
    """
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_clear_readonly)
    else:
        shutil.rmtree(path, onerror=_clear_readonly)


def move_to_new_path(src: Path, dst: Path) -> None:
    """
    Rename `src` to `dst`, refusing to overwrite anything at `dst`.

    Missing parents of `dst` are created first. The move is a single rename, so
    it is atomic on one filesystem and fails across devices.
    """
    if dst.exists() or dst.is_symlink():
        raise PathConflictError("Destination path already exists.", step="move")

    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemIOError(f"Failed to create parent directories: {e}", step="create-parents")

    try:
        os.rename(src, dst)
    except OSError as e:
        raise FilesystemIOError(f"Failed to move folder: {e}", step="move")
