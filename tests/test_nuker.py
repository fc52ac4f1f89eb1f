"""Tests for the deletion engine."""

from __future__ import annotations

import asyncio
import os

import pytest

from modnuke.core import nuker
from modnuke.core.nuker import nuke, remove_path


@pytest.fixture
def matches(tmp_path):
    """A populated node_modules and a lock file."""
    modules = tmp_path / "project" / "node_modules"
    (modules / "react" / "lib").mkdir(parents=True)
    (modules / "react" / "lib" / "index.js").write_text("x")
    (modules / ".bin").mkdir()
    lock = tmp_path / "project" / "package-lock.json"
    lock.write_text("{}")
    return [modules, lock]


class TestRemovePath:
    def test_removes_tree(self, matches):
        remove_path(matches[0])
        assert not matches[0].exists()

    def test_removes_file(self, matches):
        remove_path(matches[1])
        assert not matches[1].exists()

    def test_missing_path_is_fine(self, tmp_path):
        remove_path(tmp_path / "nope")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlink_removed_target_kept(self, tmp_path):
        target = tmp_path / "store"
        target.mkdir()
        (target / "pkg.js").write_text("x")
        link = tmp_path / "node_modules"
        link.symlink_to(target, target_is_directory=True)

        remove_path(link)

        assert not os.path.lexists(link)
        assert (target / "pkg.js").exists()


class TestNuke:
    def test_removes_all_and_reports_in_order(self, matches):
        seen = []
        result = asyncio.run(nuke(matches, on_nuked=seen.append))

        assert seen == matches
        assert result == matches
        assert not any(p.exists() for p in matches)

    def test_second_run_is_harmless(self, matches):
        asyncio.run(nuke(matches))
        seen = []
        asyncio.run(nuke(matches, on_nuked=seen.append))
        assert seen == matches
        assert not any(p.exists() for p in matches)

    def test_empty_list(self):
        assert asyncio.run(nuke([])) == []

    def test_failure_aborts_remaining(self, tmp_path, monkeypatch):
        paths = [tmp_path / name for name in ("a", "b", "c")]
        for p in paths:
            p.mkdir()
        real_remove = nuker.remove_path

        def remove(path):
            if path.name == "b":
                raise PermissionError(13, "Permission denied", str(path))
            real_remove(path)

        monkeypatch.setattr(nuker, "remove_path", remove)
        seen = []
        with pytest.raises(PermissionError):
            asyncio.run(nuke(paths, on_nuked=seen.append))

        assert seen == [paths[0]]
        assert not paths[0].exists()
        assert paths[2].exists()

    def test_concurrent_removal(self, tmp_path):
        paths = []
        for i in range(8):
            p = tmp_path / f"pkg{i}" / "node_modules"
            (p / "dep").mkdir(parents=True)
            paths.append(p)

        seen = []
        result = asyncio.run(nuke(paths, on_nuked=seen.append, concurrency=3))

        assert sorted(seen) == sorted(paths)
        assert result == seen
        assert not any(p.exists() for p in paths)

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            asyncio.run(nuke([], concurrency=0))
