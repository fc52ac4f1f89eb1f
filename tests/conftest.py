"""Shared test fixtures."""

from __future__ import annotations

import pytest

from modnuke.settings import Settings


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Point the settings file at a temp config dir and drop the singleton."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setattr(Settings, "_instance", None)
    return config_dir / "modnuke" / "settings.json"


@pytest.fixture
def project(tmp_path):
    """A project with installed deps, sources and a Next.js build cache.

    project/
      node_modules/left-pad/node_modules/    (nested, must not be reported)
      src/file.js
      .next/cache/node_modules/              (ignored)
    """
    root = tmp_path / "project"
    nested = root / "node_modules" / "left-pad" / "node_modules"
    nested.mkdir(parents=True)
    (root / "node_modules" / "left-pad" / "index.js").write_text("module.exports = 1\n")
    (root / "src").mkdir()
    (root / "src" / "file.js").write_text("console.log('hi')\n")
    (root / ".next" / "cache" / "node_modules").mkdir(parents=True)
    return root
