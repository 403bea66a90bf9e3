# tests/unit/test_extract.py: Unit tests for subtree extraction.

from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import requires_git
from repofetch.config import Config
from repofetch.extract import SubtreeExtractor, TransientClone
from repofetch.util.errors import (
    CleanupError,
    PathConflictError,
    PathMissingError,
    SourceUnreachableError,
)


@pytest.fixture
def scratch(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def extractor(scratch: Path) -> SubtreeExtractor:
    return SubtreeExtractor(Config(scratch_dir=scratch))


# --- TransientClone ---

def test_transient_clone_is_removed_on_exit(scratch: Path):
    """Tests that the scratch directory disappears after the block."""
    with TransientClone("docs", scratch) as clone:
        (clone.path / "file.txt").write_text("x")
        assert clone.path.parent == scratch.resolve()
        assert clone.path.name.startswith("repofetch-docs-")

    assert list(scratch.iterdir()) == []


def test_transient_clone_names_are_unique(scratch: Path):
    """Tests that two clones of the same subtree never share a directory."""
    with TransientClone("docs", scratch) as first, TransientClone("docs", scratch) as second:
        assert first.path != second.path


def test_transient_clone_slugifies_nested_labels(scratch: Path):
    """Tests that path separators in the label do not leak into the scratch name."""
    with TransientClone("docs/api v2", scratch) as clone:
        assert clone.path.parent == scratch.resolve()
        assert clone.path.name.startswith("repofetch-docs-api-v2-")


def test_transient_clone_cleanup_failure_is_reported(scratch: Path):
    """Tests that a failed removal after successful work raises CleanupError."""
    with patch("repofetch.extract.remove_tree", side_effect=OSError("busy")):
        with pytest.raises(CleanupError, match="Failed to delete temp repo"):
            with TransientClone("docs", scratch):
                pass


def test_transient_clone_cleanup_failure_does_not_mask_error(scratch: Path):
    """Tests that the original failure wins over a cleanup failure."""
    with patch("repofetch.extract.remove_tree", side_effect=OSError("busy")):
        with pytest.raises(PathMissingError):
            with TransientClone("docs", scratch):
                raise PathMissingError("Folder 'docs' not found in repository.")


# --- SubtreeExtractor ---

@pytest.mark.parametrize("subtree", ["", ".", "../outside", "/etc"])
def test_extract_rejects_paths_outside_the_repository(extractor, subtree, tmp_path: Path):
    """Tests that subtree paths which cannot name a folder in the clone are refused."""
    with patch("repofetch.repoops.git_clone") as mock_clone:
        with pytest.raises(PathMissingError):
            extractor.extract("https://example.test/repo.git", subtree, tmp_path / "out")
        mock_clone.assert_not_called()


@requires_git
def test_extract_moves_subtree_and_cleans_up(source_repo, extractor, scratch: Path, tmp_path: Path):
    """Tests a successful extraction into a destination with missing parents."""
    dest = tmp_path / "out" / "nested" / "docs"

    result = extractor.extract(source_repo.url, "docs", dest)

    assert result == dest
    assert (dest / "guide.md").read_text() == "guide v1\n"
    assert (dest / "extra.md").read_text() == "extra\n"
    assert not (dest / ".git").exists()
    assert list(scratch.iterdir()) == []


@requires_git
def test_extract_is_create_only(source_repo, extractor, scratch: Path, tmp_path: Path):
    """Tests that a second extraction to the same destination fails and changes nothing."""
    dest = tmp_path / "docs"
    extractor.extract(source_repo.url, "docs", dest)
    before = {p.name: p.read_text() for p in dest.iterdir()}

    with pytest.raises(PathConflictError, match="Destination path already exists"):
        extractor.extract(source_repo.url, "docs", dest)

    assert {p.name: p.read_text() for p in dest.iterdir()} == before
    assert list(scratch.iterdir()) == []


@requires_git
def test_extract_missing_folder(source_repo, extractor, scratch: Path, tmp_path: Path):
    """Tests that an absent folder is PathMissingError and the clone is removed."""
    with pytest.raises(PathMissingError, match="Folder 'manual' not found"):
        extractor.extract(source_repo.url, "manual", tmp_path / "out")

    assert not (tmp_path / "out").exists()
    assert list(scratch.iterdir()) == []


@requires_git
def test_extract_file_is_not_a_folder(source_repo, extractor, tmp_path: Path):
    """Tests that naming a file instead of a folder is PathMissingError."""
    with pytest.raises(PathMissingError):
        extractor.extract(source_repo.url, "README.md", tmp_path / "out")


@requires_git
def test_extract_clone_failure_propagates(extractor, scratch: Path, tmp_path: Path):
    """Tests that clone errors pass through unchanged and leave no scratch behind."""
    with pytest.raises(SourceUnreachableError, match="Failed to clone repo"):
        extractor.extract(str(tmp_path / "no-such-repo"), "docs", tmp_path / "out")

    assert list(scratch.iterdir()) == []


@requires_git
def test_extract_cleanup_failure_keeps_completed_move(source_repo, extractor, tmp_path: Path):
    """Tests that a cleanup failure is reported without undoing the move."""
    dest = tmp_path / "docs"

    with patch("repofetch.extract.remove_tree", side_effect=OSError("busy")):
        with pytest.raises(CleanupError):
            extractor.extract(source_repo.url, "docs", dest)

    assert (dest / "guide.md").is_file()
