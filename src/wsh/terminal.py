"""Terminal abstraction for raw-mode line editing.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that puts
the controlling terminal into raw mode, reads one key sequence at a time with
a blocking read, and restores the saved terminal attributes when it stops.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import sys
import termios
import tty
from collections import deque
from contextlib import AbstractContextManager, contextmanager
from typing import IO, Iterator, Protocol

from wsh.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

# Ctrl+D, reported once when stdin reaches end of stream
_END_OF_INPUT = "\x04"

# How long a lone ESC waits for the rest of its sequence
_ESCAPE_TIMEOUT = 0.01


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O used by the interactive shell."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def read_sequence(self) -> str: ...

    def write(self, data: str) -> None: ...

    def cooked(self) -> AbstractContextManager[None]: ...

    def __enter__(self) -> Terminal: ...

    def __exit__(self, exc_type, exc, tb) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin/stdout.

    Raw mode is a scoped resource: use the terminal as a context manager (or
    pair :meth:`start` with :meth:`stop` in ``try``/``finally``) so the saved
    attributes are restored on every exit path.
    """

    def __init__(
        self,
        stdin: IO[str] | None = None,
        stdout: IO[str] | None = None,
        *,
        escape_timeout: float = _ESCAPE_TIMEOUT,
    ) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._escape_timeout = escape_timeout
        self._original_termios: list | None = None
        self._stdin_buffer = StdinBuffer()
        self._pending: deque[str] = deque()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._at_eof = False

    # -- properties ---------------------------------------------------------

    @property
    def is_raw(self) -> bool:
        return self._original_termios is not None

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Save the terminal attributes and switch to raw mode."""
        if self._original_termios is not None:
            return
        fd = self._stdin.fileno()
        try:
            self._original_termios = termios.tcgetattr(fd)
        except termios.error as exc:
            raise OSError(f"stdin is not a terminal: {exc}") from exc
        tty.setraw(fd)
        self.write(_BRACKETED_PASTE_ENABLE)
        logger.debug("raw mode enabled on fd %d", fd)

    def stop(self) -> None:
        """Restore the saved terminal attributes."""
        if self._original_termios is None:
            return
        fd = self._stdin.fileno()
        try:
            self.write(_BRACKETED_PASTE_DISABLE)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None
            self._stdin_buffer.clear()
            logger.debug("terminal attributes restored on fd %d", fd)

    def __enter__(self) -> ProcessTerminal:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @contextmanager
    def cooked(self) -> Iterator[None]:
        """Temporarily leave raw mode, e.g. while a command runs."""
        was_raw = self.is_raw
        if was_raw:
            self.stop()
        try:
            yield
        finally:
            if was_raw:
                self.start()

    # -- input --------------------------------------------------------------

    def read_sequence(self) -> str:
        """Block until one complete key sequence is available and return it.

        Raises ``EOFError`` once end of stream has already been reported.
        """
        while not self._pending:
            self._fill()
        return self._pending.popleft()

    def _fill(self) -> None:
        fd = self._stdin.fileno()

        # A partial escape sequence gets a short grace period before it is
        # taken as typed
        if self._stdin_buffer.get_buffer() and not self._wait_readable(fd, self._escape_timeout):
            self._pending.extend(self._stdin_buffer.flush())
            return

        if self._at_eof:
            raise EOFError("end of input")

        raw = os.read(fd, 4096)
        if not raw:
            self._at_eof = True
            self._pending.extend(self._stdin_buffer.flush())
            self._pending.append(_END_OF_INPUT)
            return

        self._pending.extend(self._stdin_buffer.process(self._decoder.decode(raw)))

    @staticmethod
    def _wait_readable(fd: int, timeout: float) -> bool:
        readable, _, _ = select.select([fd], [], [], timeout)
        return bool(readable)

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* to the terminal and flush it."""
        self._stdout.write(data)
        self._stdout.flush()
