# src/repofetch/gitwrap.py: Safe subprocess wrappers for Git.
# This module provides functions for interacting with the system's 'git' command
# in a safe and controlled manner. The repository object graph (commit, tree,
# HEAD) is only ever reached through the small set of operations defined here:
# clone, object lookup, tree resolution, HEAD detachment and tree checkout.

import os
import subprocess
from pathlib import Path
from typing import List, Optional

from .config import GitSettings
from .util.errors import FilesystemIOError, GitError

# --- Core Git Execution ---

def run_git(
    args: List[str],
    cwd: Optional[Path] = None,
    timeout: Optional[int] = None,
    check: bool = True,
    env: Optional[dict] = None,
    executable: str = "git",
) -> subprocess.CompletedProcess:
    """
    Runs a git command, optionally inside a working directory.

    Args:
        args: A list of arguments for the git command.
        cwd: The working directory for the command. None runs in the process cwd.
        timeout: The command timeout in seconds. None waits indefinitely.
        check: If True, raises GitError on a non-zero exit code.
        env: An optional dictionary of environment variables.
        executable: The git binary to invoke.

    Returns:
        The CompletedProcess object.

    Raises:
        GitError: If the command fails or times out.
        FilesystemIOError: If the git binary cannot be found.
    """
    if cwd is not None and not Path(cwd).is_dir():
        raise GitError(f"Git working directory not found: {cwd}")

    # Secure the environment by default
    base_env = os.environ.copy()
    base_env["GIT_TERMINAL_PROMPT"] = "0"  # Disable interactive prompts
    base_env["LC_ALL"] = "C"  # Stable stderr wording for error classification
    if env:
        base_env.update(env)

    try:
        return subprocess.run(
            [executable] + args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=check,
            env=base_env,
        )
    except FileNotFoundError:
        raise FilesystemIOError(
            f"The '{executable}' command was not found. Is it installed and in your PATH?"
        )
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip() or (e.stdout or "").strip()
        raise GitError(f"Git command '{' '.join(args)}' failed: {stderr}", stderr=stderr)
    except subprocess.TimeoutExpired:
        raise GitError(f"Git command '{' '.join(args)}' timed out after {timeout} seconds.")


def _opts(settings: Optional[GitSettings]) -> dict:
    settings = settings or GitSettings()
    return {"executable": settings.executable, "timeout": settings.timeout_sec}


# --- High-Level Git Operations ---

def git_clone(source: str, destination: Path, settings: Optional[GitSettings] = None) -> None:
    """Clones `source` into `destination`, checking out the default branch."""
    run_git(["clone", "--", source, str(destination)], **_opts(settings))

def git_object_type(cwd: Path, oid: str, settings: Optional[GitSettings] = None) -> Optional[str]:
    """Returns the type of an object ('commit', 'tree', ...) or None if it is absent."""
    result = run_git(["cat-file", "-t", oid], cwd=cwd, check=False, **_opts(settings))
    if result.returncode != 0:
        return None
    return result.stdout.strip()

def git_detach_head(cwd: Path, oid: str, settings: Optional[GitSettings] = None) -> None:
    """Points HEAD directly at a commit without moving any branch."""
    run_git(["update-ref", "--no-deref", "HEAD", oid], cwd=cwd, **_opts(settings))

def git_commit_tree(cwd: Path, oid: str, settings: Optional[GitSettings] = None) -> str:
    """Gets the tree id recorded by a commit."""
    result = run_git(["rev-parse", "--verify", f"{oid}^{{tree}}"], cwd=cwd, **_opts(settings))
    return result.stdout.strip()

def git_checkout_tree(cwd: Path, tree: str, settings: Optional[GitSettings] = None) -> None:
    """
    Force-checks-out a tree onto the index and working directory.

    Tracked files are overwritten and local modifications discarded; files
    tracked before but absent from `tree` are deleted. Untracked files are
    left alone.
    """
    run_git(["read-tree", "--reset", "-u", tree], cwd=cwd, **_opts(settings))
