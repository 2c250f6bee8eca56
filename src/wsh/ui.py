"""Screen output for the interactive shell.

``LineRenderer`` paints the prompt line, keeps the terminal cursor at the
editor's cursor, and prints the completion summary, help, history listing
and banners. Raw mode turns off output post-processing, so every line it
writes ends in ``\\r\\n``.
"""

from __future__ import annotations

import os
from typing import Callable, Iterable

from wsh.completion import CompletionSummary
from wsh.terminal import Terminal
from wsh.utils import visible_width

# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------

_RESET = "\x1b[0m"
_GREEN = "\x1b[32m"
_RED = "\x1b[31m"
_BOLD = "\x1b[1m"

_CLEAR_TO_END = "\x1b[0J"

NEWLINE = "\r\n"


def _style(code: str) -> Callable[[str], str]:
    return lambda text: f"{code}{text}{_RESET}"


def _plain(text: str) -> str:
    return text


def _cursor_horizontal(columns: int) -> str:
    if columns > 0:
        return f"\x1b[{columns}C"
    if columns < 0:
        return f"\x1b[{-columns}D"
    return ""


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def format_prompt(template: str, cwd: str, home: str | None = None) -> str:
    """Fill ``{cwd}`` in *template*, abbreviating *home* as ``~``."""
    if home and (cwd == home or cwd.startswith(home.rstrip("/") + "/")):
        cwd = "~" + cwd[len(home.rstrip("/")) :]
    return template.replace("{cwd}", cwd)


HELP_TEXT = """\
WSH - a small interactive shell

Built-in commands:
  cd [path]          Change directory (no path goes home)
  pwd                Print the working directory
  alias [name cmd]   Define an alias, or list all aliases
  history            Show command history
  help               Show this help
  exit               Leave the shell

Keyboard shortcuts:
  Tab                Complete commands and paths, press again to cycle
  Up / Down          Browse command history
  Left / Right       Move the cursor
  Home / End         Jump to the start or end of the line
  Backspace / Del    Delete before / at the cursor
  Ctrl+C             Exit
  Ctrl+D             Exit on an empty line

Completion:
  The first word completes built-ins, aliases, programs on PATH and
  commands from history. Later words complete file and directory names;
  a leading ~ stands for the home directory and dot-files are offered
  once the name starts with a dot."""


class LineRenderer:
    """Paints the prompt line and shell messages on a :class:`Terminal`."""

    def __init__(
        self,
        terminal: Terminal,
        prompt: str = "$ ",
        enable_colors: bool = True,
        home: str | None = None,
        cwd: Callable[[], str] = os.getcwd,
    ) -> None:
        self.terminal = terminal
        self.prompt_template = prompt
        self.home = home
        self._cwd = cwd
        self._green = _style(_GREEN) if enable_colors else _plain
        self._red = _style(_RED) if enable_colors else _plain
        self._bold = _style(_BOLD) if enable_colors else _plain

    # -- prompt line ---------------------------------------------------------

    def prompt(self) -> str:
        """The prompt text for the current working directory."""
        try:
            cwd = self._cwd()
        except OSError:
            cwd = "unknown"
        return format_prompt(self.prompt_template, cwd, self.home)

    def draw_prompt(self, text: str = "", cursor: int | None = None) -> None:
        """Paint the prompt and *text* from the current column."""
        self.terminal.write(self._prompt_line(text, cursor))

    def redraw(self, text: str, cursor: int, summary: CompletionSummary | None = None) -> None:
        """Repaint the whole prompt line, then the completion summary if any."""
        self.terminal.write("\r" + _CLEAR_TO_END + self._prompt_line(text, cursor))
        if summary is not None:
            self.show_completion_summary(summary, text, cursor)

    def move_cursor(self, text: str, old: int, new: int) -> None:
        """Move the terminal cursor between two buffer offsets of *text*."""
        delta = visible_width(text[:new]) - visible_width(text[:old])
        if delta:
            self.terminal.write(_cursor_horizontal(delta))

    def _prompt_line(self, text: str, cursor: int | None) -> str:
        out = self._green(self.prompt()) + text
        if cursor is not None and cursor < len(text):
            out += _cursor_horizontal(-visible_width(text[cursor:]))
        return out

    # -- completion summary --------------------------------------------------

    def summary_lines(self, summary: CompletionSummary) -> list[str]:
        lines = [f"Completions ({summary.selected + 1}/{summary.total}):"]
        for offset, entry in enumerate(summary.entries):
            if summary.start + offset == summary.selected:
                lines.append(f"  {self._bold('>' + entry)}")
            else:
                lines.append(f"   {entry}")
        if summary.hidden:
            lines.append(f"  ... ({summary.hidden} more)")
        return lines

    def show_completion_summary(self, summary: CompletionSummary, text: str, cursor: int) -> None:
        """List candidates below the prompt line and return to the cursor."""
        lines = self.summary_lines(summary)
        out = NEWLINE + NEWLINE.join(lines)
        # Back up to the prompt line and across to the editing position
        out += f"\x1b[{len(lines)}A\r"
        out += _cursor_horizontal(visible_width(self.prompt()) + visible_width(text[:cursor]))
        self.terminal.write(out)

    # -- messages ------------------------------------------------------------

    def print_newline(self) -> None:
        self.terminal.write(NEWLINE)

    def print_line(self, text: str = "") -> None:
        self.terminal.write(text.replace("\n", NEWLINE) + NEWLINE)

    def print_error(self, message: str) -> None:
        self.print_line(self._red(f"Error: {message}"))

    def display_welcome(self) -> None:
        self.print_line(self._bold("Welcome to WSH - a small interactive shell"))
        self.print_line("Type 'help' for available commands or 'exit' to quit.")
        self.print_line()

    def display_goodbye(self) -> None:
        self.terminal.write(NEWLINE)
        self.print_line("Goodbye!")

    def show_help(self) -> None:
        self.print_line(HELP_TEXT)

    def show_history(self, entries: Iterable[str]) -> None:
        """Numbered listing, oldest first."""
        entries = list(entries)
        if not entries:
            self.print_line("No history available")
            return
        for number, command in enumerate(entries, start=1):
            self.print_line(f"{number:4}: {command}")

    def show_aliases(self, aliases: dict[str, str]) -> None:
        if not aliases:
            self.print_line("No aliases defined")
            return
        for name in sorted(aliases):
            self.print_line(f"{name} -> {aliases[name]}")
