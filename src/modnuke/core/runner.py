"""Wires the scanner, the nuker and the spinner into one run."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import click

from modnuke.core.installer import reinstall
from modnuke.core.nuker import nuke
from modnuke.core.scanner import find
from modnuke.models.nuke_summary import NukeSummary
from modnuke.spinner import Spinner
from modnuke.utils import format_elapsed

log = logging.getLogger(__name__)

SUCCESS_ICON = "🍄"


@dataclass(slots=True)
class RunOptions:
    """Everything one run needs, already resolved against settings."""

    cwd: Path
    lock_file: bool = False
    install: bool = True
    package_manager: str | None = None
    concurrency: int = 1
    speed: float = 1.0


def _count(n: int) -> str:
    return click.style(str(n), fg="green")


async def run(
    options: RunOptions,
    *,
    spinner: Spinner | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> NukeSummary:
    """Find and delete everything under ``options.cwd``, then reinstall.

    The spinner is started here. Any failure during the scan or the
    deletion turns it into an error line before the exception propagates.
    """
    started_at = clock()
    summary = NukeSummary()

    if spinner is None:
        spinner = Spinner("Searching for node_modules", speed=options.speed, success_icon=SUCCESS_ICON)
    spinner.start()

    def on_found(path: Path) -> None:
        summary.found.append(path)
        spinner.message(f"Found {_count(summary.found_count)}")

    def on_nuked(path: Path) -> None:
        summary.nuked.append(path)
        spinner.message(f"Nuked {_count(summary.nuked_count)}")

    try:
        await find(options.cwd, include_lock_files=options.lock_file, on_found=on_found)
        spinner.message(f"Nuking {_count(summary.found_count)}")
        await nuke(summary.found, on_nuked=on_nuked, concurrency=options.concurrency)
    except Exception as exc:
        spinner.error(f"Failed: {exc}")
        raise

    summary.elapsed = max(clock() - started_at, 0.0)
    spinner.success(
        f"Nuked {_count(summary.found_count)} in {click.style(format_elapsed(summary.elapsed), fg='green')}"
    )
    log.info("Removed %d path(s) in %.3fs", summary.nuked_count, summary.elapsed)

    if options.install:
        click.echo()
        summary.install_returncode = await reinstall(options.cwd, options.package_manager)

    return summary
