"""CLI interface for modnuke."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import click
from click.core import ParameterSource

from modnuke import __version__
from modnuke.core.installer import AGENTS, InstallError
from modnuke.core.runner import RunOptions, run
from modnuke.settings import Settings

log = logging.getLogger(__name__)

# Command-line parameter -> settings key that supplies its default.
_SETTINGS_KEYS = {
    "lock_file": "defaults.lock_file",
    "install": "defaults.install",
    "package_manager": "defaults.package_manager",
    "concurrency": "defaults.concurrency",
    "speed": "spinner.speed",
}


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _option(ctx: click.Context, settings: Settings, name: str, value: Any) -> Any:
    """Prefer an explicit command-line value, then the settings file.

    Settings values go through the same click type as the option, so a
    bad value in the file is a usage error rather than a traceback.
    """
    if ctx.get_parameter_source(name) is ParameterSource.COMMANDLINE:
        return value

    key = _SETTINGS_KEYS[name]
    raw = settings.get(key)
    if raw is None and value is None:
        return None

    param = next(p for p in ctx.command.params if p.name == name)
    try:
        return param.type.convert(raw, param, ctx)
    except (click.BadParameter, TypeError, ValueError) as exc:
        raise click.UsageError(f"Invalid {key} in {settings.path}: {raw!r}") from exc


@click.command()
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="The directory to run the command in (default: current directory)",
)
@click.option("-l", "--lock-file", "lock_file", is_flag=True, help="Remove lock files as well")
@click.option("--install/--no-install", default=True, help="Reinstall dependencies after nuking")
@click.option("--package-manager", type=click.Choice(AGENTS), default=None, help="The package manager to use")
@click.option("-j", "--concurrency", type=click.IntRange(min=1), default=1, help="Deletions to run at once")
@click.option("--speed", type=click.FloatRange(min=0, min_open=True), default=1.0, help="Spinner speed multiplier")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v info, -vv debug; debug lines interleave with the progress line)",
)
@click.version_option(__version__, prog_name="modnuke")
@click.pass_context
def main(
    ctx: click.Context,
    cwd: Path | None,
    lock_file: bool,
    install: bool,
    package_manager: str | None,
    concurrency: int,
    speed: float,
    verbose: int,
) -> None:
    """Delete every node_modules under a directory, then reinstall."""
    _setup_logging(verbose)
    settings = Settings.instance()

    options = RunOptions(
        cwd=(cwd or Path.cwd()).resolve(),
        lock_file=_option(ctx, settings, "lock_file", lock_file),
        install=_option(ctx, settings, "install", install),
        package_manager=_option(ctx, settings, "package_manager", package_manager),
        concurrency=_option(ctx, settings, "concurrency", concurrency),
        speed=_option(ctx, settings, "speed", speed),
    )
    log.debug("Running with %s", options)

    try:
        summary = asyncio.run(run(options))
    except (OSError, InstallError) as exc:
        click.echo(f"modnuke: {exc}", err=True)
        sys.exit(1)

    if summary.install_returncode:
        sys.exit(summary.install_returncode)
