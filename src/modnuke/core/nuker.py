"""Forced recursive removal of the paths found by the scanner."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterable

log = logging.getLogger(__name__)

NukedCallback = Callable[[Path], None]


def remove_path(path: Path | str) -> None:
    """Remove *path* like ``rm -rf``.

    Directories are removed recursively, files and symlinks are unlinked.
    A path that is already gone is not an error.
    """
    path = Path(path)
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        # Something under the tree vanished mid-removal; retry what is left.
        if os.path.lexists(path):
            remove_path(path)
        else:
            log.debug("Already absent: %s", path)


async def nuke(
    paths: Iterable[Path | str],
    *,
    on_nuked: NukedCallback | None = None,
    concurrency: int = 1,
) -> list[Path]:
    """Remove every path, reporting each completed removal.

    With ``concurrency == 1`` removals run one at a time in input order.
    Higher values keep up to that many removals in flight and report them
    in completion order.

    Returns:
        The removed paths, in the order ``on_nuked`` saw them.

    Raises:
        OSError: The first removal failure; remaining removals are abandoned.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    paths = [Path(p) for p in paths]
    nuked: list[Path] = []

    def _done(path: Path) -> None:
        nuked.append(path)
        if on_nuked:
            on_nuked(path)

    if concurrency == 1:
        for path in paths:
            await asyncio.to_thread(remove_path, path)
            _done(path)
        return nuked

    semaphore = asyncio.Semaphore(concurrency)

    async def _remove(path: Path) -> None:
        async with semaphore:
            await asyncio.to_thread(remove_path, path)
            _done(path)

    tasks = [asyncio.create_task(_remove(path)) for path in paths]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return nuked
