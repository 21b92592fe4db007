"""Tests for file utility functions."""

from __future__ import annotations

from pathlib import Path

from docassist.utils.files import ensure_parent, iter_mdx_paths


class TestIterMdxPaths:
    """Test iter_mdx_paths function."""

    def test_single_file(self, tmp_path: Path) -> None:
        page = tmp_path / "intro.mdx"
        page.write_text("x")

        assert list(iter_mdx_paths([page])) == [page]

    def test_directory_filters_suffix(self, tmp_path: Path) -> None:
        (tmp_path / "b.mdx").write_text("b")
        (tmp_path / "a.mdx").write_text("a")
        (tmp_path / "notes.txt").write_text("t")

        paths = list(iter_mdx_paths([tmp_path]))

        assert [p.name for p in paths] == ["a.mdx", "b.mdx"]

    def test_nested_directories(self, tmp_path: Path) -> None:
        nested = tmp_path / "guides"
        nested.mkdir()
        (nested / "deep.mdx").write_text("d")

        paths = list(iter_mdx_paths([tmp_path]))

        assert paths == [nested / "deep.mdx"]

    def test_missing_path_ignored(self, tmp_path: Path) -> None:
        assert list(iter_mdx_paths([tmp_path / "missing.mdx"])) == []


class TestEnsureParent:
    def test_creates_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "db.json"
        ensure_parent(target)
        assert target.parent.is_dir()
