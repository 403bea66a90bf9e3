# src/repofetch/util/errors.py: Typed exceptions and exit codes.
# This module defines the error taxonomy shared by every operation. Each
# exception carries a kind (independent of its message), the step that failed,
# and an exit code so the command boundary and the CLI can report failures
# without inspecting message text.

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of a failure, independent of its message."""
    SOURCE_UNREACHABLE = "SourceUnreachable"
    REFERENCE_INVALID = "ReferenceInvalid"
    REFERENCE_NOT_FOUND = "ReferenceNotFound"
    REPOSITORY_STATE = "RepositoryStateFailure"
    PATH_CONFLICT = "PathConflict"
    PATH_MISSING = "PathMissing"
    NOT_A_DIRECTORY = "NotADirectory"
    FILESYSTEM_IO = "FilesystemIO"
    CLEANUP = "CleanupFailure"
    CONFIG = "Config"
    GIT = "Git"
    WORKER_CRASHED = "WorkerCrashed"


class RepofetchError(Exception):
    """Base exception for the application."""
    exit_code = 1
    kind = ErrorKind.FILESYSTEM_IO

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.step = step


class ConfigError(RepofetchError):
    """Configuration-related errors."""
    exit_code = 2
    kind = ErrorKind.CONFIG


class GitError(RepofetchError):
    """A git command failed. Callers translate this into a more specific kind."""
    exit_code = 3
    kind = ErrorKind.GIT

    def __init__(self, message: str, stderr: str = "", step: Optional[str] = None):
        super().__init__(message, step=step)
        self.stderr = stderr


class SourceUnreachableError(RepofetchError):
    """The repository source could not be reached or authenticated."""
    exit_code = 4
    kind = ErrorKind.SOURCE_UNREACHABLE


class ReferenceInvalidError(RepofetchError):
    """A commit identifier is not well-formed."""
    exit_code = 5
    kind = ErrorKind.REFERENCE_INVALID


class ReferenceNotFoundError(RepofetchError):
    """A well-formed commit identifier is absent from the object store."""
    exit_code = 6
    kind = ErrorKind.REFERENCE_NOT_FOUND


class RepositoryStateError(RepofetchError):
    """Mutating repository state (HEAD, tree lookup, checkout) failed."""
    exit_code = 7
    kind = ErrorKind.REPOSITORY_STATE


class PathConflictError(RepofetchError):
    """The target path is already occupied."""
    exit_code = 8
    kind = ErrorKind.PATH_CONFLICT


class PathMissingError(RepofetchError):
    """An expected path does not exist."""
    exit_code = 9
    kind = ErrorKind.PATH_MISSING


class NotADirectoryPathError(RepofetchError):
    """A path exists but is not a directory."""
    exit_code = 10
    kind = ErrorKind.NOT_A_DIRECTORY


class FilesystemIOError(RepofetchError):
    """Generic OS-level failure (permissions, space, cross-device move)."""
    exit_code = 11
    kind = ErrorKind.FILESYSTEM_IO


class CleanupError(RepofetchError):
    """Transient artifacts could not be removed after the work was done."""
    exit_code = 12
    kind = ErrorKind.CLEANUP


class WorkerCrashedError(RepofetchError):
    """A worker raised something outside the error taxonomy."""
    exit_code = 13
    kind = ErrorKind.WORKER_CRASHED
