"""Single-line terminal spinner driven by the asyncio event loop."""

from __future__ import annotations

import asyncio
import enum
import logging
import sys
from typing import Awaitable, Callable, Sequence, TextIO

import click

log = logging.getLogger(__name__)

FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

# Carriage return, then erase the whole line.
_CLEAR_LINE = "\r\x1b[2K"


class SpinnerStateError(RuntimeError):
    """Raised when a spinner method is called in the wrong state."""


class SpinnerState(enum.Enum):
    CREATED = "created"
    STARTED = "started"
    SUCCEEDED = "succeeded"
    ERRORED = "errored"


class Spinner:
    """Animated status line that shares the event loop with real work.

    ``start()`` schedules a task that redraws the line every
    ``0.1 / speed`` seconds until ``success()`` or ``error()`` writes the
    final line. Only one coroutine runs at a time, so callers may update
    the text from any callback on the same loop without locking. Calling
    the spinner from another thread is not supported.

    When the stream is not a terminal there is no animation and no control
    sequences; only the final line is written, with styling removed.
    """

    def __init__(
        self,
        text: str,
        *,
        frames: Sequence[str] = FRAMES,
        speed: float = 1.0,
        success_icon: str = "✔",
        error_icon: str = "✖",
        stream: TextIO | None = None,
        is_tty: bool | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        if not frames:
            raise ValueError("frames must not be empty")

        self._stream = stream if stream is not None else sys.stdout
        self._is_tty = is_tty if is_tty is not None else _isatty(self._stream)
        self._interval = 0.1 / speed
        self._frames = tuple(frames)
        self._success_icon = success_icon
        self._error_icon = error_icon
        self._sleep = sleep

        self._text = text
        self._frame_index = 0
        self._done = False
        self._state = SpinnerState.CREATED
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SpinnerState:
        return self._state

    @property
    def text(self) -> str:
        return self._text

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def interval(self) -> float:
        """Seconds between two frames."""
        return self._interval

    @property
    def is_tty(self) -> bool:
        return self._is_tty

    def start(self) -> Spinner:
        """Begin animating. Must be called from a running event loop."""
        if self._state is not SpinnerState.CREATED:
            raise SpinnerStateError("Spinner already started.")
        if self._is_tty:
            self._task = asyncio.get_running_loop().create_task(self._animate())
        self._state = SpinnerState.STARTED
        return self

    def message(self, text: str) -> None:
        """Replace the status text and redraw the current frame."""
        self._require_started()
        self._text = text
        if self._is_tty:
            self._write(self._frame())

    def success(self, text: str) -> None:
        """Stop the animation and leave a success line behind."""
        self._finish(SpinnerState.SUCCEEDED, self._success_icon, text)

    def error(self, text: str) -> None:
        """Stop the animation and leave an error line behind."""
        self._finish(SpinnerState.ERRORED, self._error_icon, text)

    async def _animate(self) -> None:
        while not self._done:
            self._write(self._frame())
            self._frame_index = (self._frame_index + 1) % len(self._frames)
            await self._sleep(self._interval)

    def _finish(self, state: SpinnerState, icon: str, text: str) -> None:
        self._require_started()
        self._done = True
        self._state = state
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._write(f"{icon} {text}\n")

    def _require_started(self) -> None:
        if self._state is SpinnerState.CREATED:
            raise SpinnerStateError("Spinner not started. Call start() first.")
        if self._state is not SpinnerState.STARTED:
            raise SpinnerStateError("Spinner already finished.")

    def _frame(self) -> str:
        return f"{self._frames[self._frame_index]} {self._text}"

    def _write(self, line: str) -> None:
        if self._is_tty:
            self._stream.write(_CLEAR_LINE + line)
        else:
            self._stream.write(click.unstyle(line))
        self._stream.flush()


def _isatty(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        log.debug("Cannot tell whether %r is a terminal", stream)
        return False
