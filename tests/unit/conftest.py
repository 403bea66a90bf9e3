# tests/unit/conftest.py: Shared fixtures, including throwaway git repositories.

import os
import shutil
import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

_GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test Author",
    "GIT_AUTHOR_EMAIL": "author@example.test",
    "GIT_COMMITTER_NAME": "Test Author",
    "GIT_COMMITTER_EMAIL": "author@example.test",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(cwd: Path, *args: str) -> str:
    """Run a git command for test setup and return its stdout."""
    env = {**os.environ, **_GIT_ENV}
    result = subprocess.run(
        ["git", *args], cwd=cwd, env=env, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def head_sha(cwd: Path) -> str:
    """The commit HEAD currently points at."""
    return git(cwd, "rev-parse", "HEAD")


def is_detached(cwd: Path) -> bool:
    """True when HEAD names a commit rather than a branch."""
    result = subprocess.run(["git", "symbolic-ref", "-q", "HEAD"], cwd=cwd, capture_output=True)
    return result.returncode != 0


@pytest.fixture
def source_repo(tmp_path: Path):
    """
    A local repository with two commits on 'main'.

    The first commit has README.md, docs/guide.md and src/app.py. The second
    rewrites README.md and adds docs/extra.md.
    """
    repo = tmp_path / "origin"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")

    (repo / "README.md").write_text("first\n")
    (repo / "docs").mkdir()
    (repo / "docs" / "guide.md").write_text("guide v1\n")
    (repo / "src").mkdir()
    (repo / "src" / "app.py").write_text("print('v1')\n")
    git(repo, "add", ".")
    git(repo, "commit", "-q", "-m", "first")
    first = git(repo, "rev-parse", "HEAD")

    (repo / "README.md").write_text("second\n")
    (repo / "docs" / "extra.md").write_text("extra\n")
    git(repo, "add", ".")
    git(repo, "commit", "-q", "-m", "second")
    second = git(repo, "rev-parse", "HEAD")

    return SimpleNamespace(path=repo, url=str(repo), first=first, second=second)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch):
    """Keep the user's real config file out of every test."""
    monkeypatch.setenv("REPOFETCH_CONFIG", str(tmp_path / "no-such-config.yaml"))
