"""Depth-first search for node_modules directories and lock files."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from pathlib import Path
from typing import AsyncIterator, Callable

from modnuke.models.scan_rules import ScanRules

log = logging.getLogger(__name__)

FoundCallback = Callable[[Path], None]


async def iter_matches(root: Path | str, rules: ScanRules) -> AsyncIterator[Path]:
    """Yield every path under *root* whose name matches *rules*.

    The walk is pre-order and keeps the order in which the filesystem lists
    entries. Matched directories are never descended into, ignored names are
    skipped without being stat'ed, and symlinks are not followed.

    Entries are checked with ``lstat``, not ``stat``: a symlink to a
    directory is skipped rather than descended into, so link cycles and
    links pointing outside *root* are never walked. A symlink whose own
    name matches is still yielded.

    Any ``OSError`` from listing or stat'ing aborts the walk.
    """
    root = Path(root)
    names = await asyncio.to_thread(os.listdir, root)

    for name in names:
        path = root / name
        verdict = rules.classify(name)

        if verdict == "match":
            log.debug("Matched %s", path)
            yield path
            continue

        if verdict == "ignore":
            log.debug("Ignoring %s", path)
            continue

        st = await asyncio.to_thread(os.lstat, path)
        if not stat.S_ISDIR(st.st_mode):
            continue

        async for match in iter_matches(path, rules):
            yield match


async def find(
    root: Path | str,
    *,
    include_lock_files: bool = False,
    on_found: FoundCallback | None = None,
    rules: ScanRules | None = None,
) -> list[Path]:
    """Scan *root* and return all matches in traversal order.

    Args:
        root: Directory to start from.
        include_lock_files: Also match package-manager lock files.
        on_found: Called with each match before the walk continues.
        rules: Override the default match/ignore sets.
    """
    if rules is None:
        rules = ScanRules.default(include_lock_files)

    found: list[Path] = []
    async for path in iter_matches(root, rules):
        found.append(path)
        if on_found:
            on_found(path)

    log.info("Found %d match(es) under %s", len(found), root)
    return found
