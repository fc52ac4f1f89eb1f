"""Package manager detection and the post-nuke reinstall."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import click

log = logging.getLogger(__name__)

AGENTS = ("npm", "yarn", "yarn@berry", "pnpm", "pnpm@6", "bun", "deno")

# Checked in this order within each directory.
_LOCK_FILE_AGENTS = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
    ("npm-shrinkwrap.json", "npm"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("deno.lock", "deno"),
)

_INSTALL_COMMANDS: dict[str, tuple[str, ...]] = {
    "npm": ("npm", "i"),
    "yarn": ("yarn", "install"),
    "yarn@berry": ("yarn", "install"),
    "pnpm": ("pnpm", "i"),
    "pnpm@6": ("pnpm", "i"),
    "bun": ("bun", "install"),
    "deno": ("deno", "install"),
}

_READ_CHUNK = 64 * 1024


class InstallError(Exception):
    """Raised when the install command cannot be started."""


@dataclass(frozen=True, slots=True)
class ResolvedCommand:
    command: str
    args: list[str] = field(default_factory=list)

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    def __str__(self) -> str:
        return " ".join(self.argv)


def detect(cwd: Path | str) -> str | None:
    """Guess the package manager used by the project at *cwd*.

    Looks for lock files, then the ``packageManager`` field of
    ``package.json``, in *cwd* and each of its parents.
    """
    directory = Path(cwd).resolve()
    for candidate in (directory, *directory.parents):
        for lock_file, agent in _LOCK_FILE_AGENTS:
            if (candidate / lock_file).exists():
                log.debug("Detected %s from %s", agent, candidate / lock_file)
                return agent

        agent = _agent_from_package_json(candidate / "package.json")
        if agent is not None:
            return agent
    return None


def _agent_from_package_json(path: Path) -> str | None:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        log.warning("Could not read %s: %s", path, e)
        return None

    field_value = data.get("packageManager") if isinstance(data, dict) else None
    if not isinstance(field_value, str) or not field_value:
        return None

    name, _, version = field_value.partition("@")
    major = _major_version(version)
    match name:
        case "yarn" if major is not None and major > 1:
            agent = "yarn@berry"
        case "pnpm" if major is not None and major < 7:
            agent = "pnpm@6"
        case _ if name in AGENTS:
            agent = name
        case _:
            log.info("Unknown packageManager '%s' in %s", field_value, path)
            return None

    log.debug("Detected %s from %s", agent, path)
    return agent


def _major_version(version: str) -> int | None:
    head = version.split(".", 1)[0]
    return int(head) if head.isdigit() else None


def resolve_install_command(agent: str) -> ResolvedCommand:
    """Return the install invocation for *agent*, defaulting to npm."""
    argv = _INSTALL_COMMANDS.get(agent)
    if argv is None:
        log.warning("No install command known for '%s', using npm", agent)
        argv = _INSTALL_COMMANDS["npm"]
    return ResolvedCommand(argv[0], list(argv[1:]))


def _decode(line: bytes) -> str:
    return line.decode(errors="replace").rstrip("\r")


async def run_streaming(
    command: ResolvedCommand,
    cwd: Path | str,
    echo: Callable[[str], None],
) -> int:
    """Run *command* in *cwd*, passing each output line to *echo*.

    stderr is merged into stdout. Returns the exit code.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *command.argv,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except FileNotFoundError as exc:
        raise InstallError(f"'{command.command}' is not installed or not on PATH") from exc
    except OSError as exc:
        raise InstallError(f"Could not run '{command}': {exc}") from exc

    assert proc.stdout is not None
    pending = bytearray()
    try:
        while True:
            chunk = await proc.stdout.read(_READ_CHUNK)
            if not chunk:
                break
            pending += chunk
            *lines, rest = pending.split(b"\n")
            for line in lines:
                echo(_decode(line))
            pending = rest
        if pending:
            echo(_decode(pending))
        returncode = await proc.wait()
    finally:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()

    if returncode != 0:
        log.warning("'%s' exited with status %d", command, returncode)
    return returncode


async def reinstall(
    cwd: Path | str,
    package_manager: str | None = None,
    *,
    echo: Callable[[str], None] = click.echo,
) -> int:
    """Reinstall dependencies in *cwd* and return the installer's exit code.

    Uses *package_manager* when given, otherwise the detected one, otherwise npm.
    """
    agent = package_manager or detect(cwd) or "npm"
    command = resolve_install_command(agent)

    echo(f"Installing dependencies with {click.style(str(command), fg='cyan')}")
    return await run_streaming(command, cwd, lambda line: echo(click.style(line, dim=True)))
