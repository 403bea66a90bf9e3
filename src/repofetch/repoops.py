# src/repofetch/repoops.py: Repository acquisition operations.
# This module implements cloning a repository and pinning a working copy to a
# specific commit. Pinning runs as a fixed sequence (parse the reference, look
# up the commit, detach HEAD, resolve the tree, force checkout) and every step
# raises its own typed error, so a caller can tell exactly how far it got.

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from .config import GitSettings
from .gitwrap import (
    git_checkout_tree,
    git_clone,
    git_commit_tree,
    git_detach_head,
    git_object_type,
)
from .util.errors import (
    FilesystemIOError,
    GitError,
    PathConflictError,
    PathMissingError,
    ReferenceInvalidError,
    ReferenceNotFoundError,
    RepositoryStateError,
    SourceUnreachableError,
)
from .util.log import get_logger

logger = get_logger(__name__)

_OID_RE = re.compile(r"^[0-9a-f]{40}$")

# stderr fragments git emits when the local side, not the remote, is at fault
_CONFLICT_MARKERS = ("already exists and is not an empty directory",)
_LOCAL_IO_MARKERS = (
    "could not create",
    "unable to create",
    "unable to write",
    "No space left on device",
    "Read-only file system",
)


class WorkingCopy(BaseModel):
    """A local clone. Valid only while its directory exists."""
    path: Path
    source: str

    def exists(self) -> bool:
        return self.path.is_dir()


class CommitReference:
    """A full hexadecimal commit id, not yet checked against any repository."""

    def __init__(self, oid: str):
        self.oid = oid

    @classmethod
    def parse(cls, value: str) -> CommitReference:
        candidate = (value or "").strip().lower()
        if not _OID_RE.match(candidate):
            raise ReferenceInvalidError(
                f"Invalid commit SHA: '{value}' is not a 40-character hexadecimal object id",
                step="parse-commit",
            )
        return cls(candidate)

    def __str__(self) -> str:
        return self.oid

    def __eq__(self, other) -> bool:
        return isinstance(other, CommitReference) and other.oid == self.oid

    def __hash__(self) -> int:
        return hash(self.oid)


class CloneOutcome(BaseModel):
    working_copy: WorkingCopy
    commit: Optional[str] = None

    def describe(self) -> str:
        if self.commit:
            return f"Cloned {self.working_copy.source} and checked out commit {self.commit}"
        return f"Cloned {self.working_copy.source} into {self.working_copy.path}"


class Cloner:
    """Materializes a remote repository into a destination directory."""

    def __init__(self, settings: Optional[GitSettings] = None):
        self.settings = settings or GitSettings()

    def clone(self, source: str, destination: str | Path) -> WorkingCopy:
        dest_path = Path(destination)
        self._check_destination(dest_path)

        logger.info(f"Cloning {source} into {dest_path}")
        try:
            git_clone(source, dest_path, self.settings)
        except GitError as e:
            raise self._classify(e)
        logger.info(f"Clone of {source} complete")
        return WorkingCopy(path=dest_path, source=source)

    def _check_destination(self, dest_path: Path) -> None:
        if dest_path.is_dir():
            try:
                occupied = any(dest_path.iterdir())
            except OSError as e:
                raise FilesystemIOError(f"Failed to clone repo: cannot inspect '{dest_path}': {e}", step="clone")
            if occupied:
                raise PathConflictError(
                    f"Failed to clone repo: destination '{dest_path}' already exists and is not empty",
                    step="clone",
                )
        elif dest_path.exists():
            raise PathConflictError(
                f"Failed to clone repo: destination '{dest_path}' exists and is not a directory",
                step="clone",
            )

    def _classify(self, error: GitError):
        detail = error.stderr or str(error)
        message = f"Failed to clone repo: {detail}"
        if any(marker in detail for marker in _CONFLICT_MARKERS):
            return PathConflictError(message, step="clone")
        if any(marker in detail for marker in _LOCAL_IO_MARKERS):
            return FilesystemIOError(message, step="clone")
        return SourceUnreachableError(message, step="clone")


class CommitPinner:
    """
    Detaches a working copy's HEAD to a commit and force-checks-out its tree.

    HEAD is detached before the checkout runs. If the checkout fails, HEAD is
    left pointing at the target commit and the working directory is in
    whatever state git reached; nothing is rolled back.
    """

    def __init__(self, settings: Optional[GitSettings] = None):
        self.settings = settings or GitSettings()

    def pin(self, working_copy: WorkingCopy, commit: str | CommitReference) -> str:
        reference = commit if isinstance(commit, CommitReference) else CommitReference.parse(commit)
        path = working_copy.path
        if not working_copy.exists() or not (path / ".git").exists():
            raise PathMissingError(f"Not a git working copy: {path}", step="pin")

        self._find_commit(path, reference)

        try:
            git_detach_head(path, reference.oid, self.settings)
        except GitError as e:
            raise RepositoryStateError(f"Failed to detach HEAD: {e}", step="detach-head")

        try:
            tree = git_commit_tree(path, reference.oid, self.settings)
        except GitError as e:
            raise RepositoryStateError(f"Failed to get tree: {e}", step="tree-lookup")

        try:
            git_checkout_tree(path, tree, self.settings)
        except GitError as e:
            raise RepositoryStateError(f"Failed to checkout commit tree: {e}", step="checkout")

        logger.info(f"Pinned {path} to commit {reference.oid}")
        return reference.oid

    def _find_commit(self, path: Path, reference: CommitReference) -> None:
        object_type = git_object_type(path, reference.oid, self.settings)
        if object_type is None:
            raise ReferenceNotFoundError(
                f"Commit not found: {reference.oid} does not exist in {path}",
                step="find-commit",
            )
        if object_type != "commit":
            raise ReferenceNotFoundError(
                f"Commit not found: {reference.oid} is a {object_type}, not a commit",
                step="find-commit",
            )


def clone_at(
    source: str,
    destination: str | Path,
    commit: Optional[str] = None,
    settings: Optional[GitSettings] = None,
) -> CloneOutcome:
    """Clone `source` and, when `commit` is given, pin the new working copy to it."""
    working_copy = Cloner(settings).clone(source, destination)
    if commit is None:
        return CloneOutcome(working_copy=working_copy)
    pinned = CommitPinner(settings).pin(working_copy, commit)
    return CloneOutcome(working_copy=working_copy, commit=pinned)
