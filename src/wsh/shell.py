"""Command dispatcher and interactive loop."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping

from wsh.completion import BUILTIN_COMMANDS, CompletionContext, CompletionEngine
from wsh.config import ShellConfig
from wsh.history import HistoryStore
from wsh.input_engine import EXIT, InputEngine, KeyResult
from wsh.keybindings import InputKeybindings
from wsh.terminal import ProcessTerminal, Terminal
from wsh.tokenizer import tokenize
from wsh.ui import LineRenderer
from wsh.utils import expand_tilde

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A command could not be run or reported failure."""


class ShellExit(Exception):
    """Raised by the ``exit`` built-in to leave the shell."""

    def __init__(self, status: int = 0) -> None:
        super().__init__(status)
        self.status = status


class Shell:
    """Runs command lines and drives the interactive prompt."""

    def __init__(
        self,
        config: ShellConfig | None = None,
        terminal: Terminal | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config if config is not None else ShellConfig()
        env = os.environ if environ is None else environ

        self.home = env.get("HOME")
        self.aliases: dict[str, str] = dict(self.config.aliases)
        self.history = HistoryStore(self.config.history_size)
        self.terminal: Terminal = terminal if terminal is not None else ProcessTerminal()
        self.renderer = LineRenderer(
            self.terminal,
            prompt=self.config.prompt,
            enable_colors=self.config.enable_colors,
            home=self.home,
        )
        self.completion = CompletionEngine(CompletionContext.from_environ(self.aliases.keys(), env))
        self.input = InputEngine(
            self.completion,
            self.history,
            self.renderer,
            InputKeybindings(self.config.keybindings),
        )

    # -- command execution ---------------------------------------------------

    def execute_command(self, line: str) -> None:
        """Run one command line.

        Raises ``CommandError`` when the command fails and ``ShellExit`` for
        the ``exit`` built-in.
        """
        self._execute(line, record=True, expanding=frozenset())

    def _execute(self, line: str, *, record: bool, expanding: frozenset[str]) -> None:
        trimmed = line.strip()
        if not trimmed:
            return

        if record:
            self.history.append(trimmed)

        tokens = tokenize(trimmed)
        if not tokens:
            return

        name, args = tokens[0], tokens[1:]

        # An alias is not expanded again inside its own expansion
        if name in self.aliases and name not in expanding:
            expansion = self.aliases[name]
            if args:
                expansion = f"{expansion} {shlex.join(args)}"
            logger.debug("alias %s -> %r", name, expansion)
            self._execute(expansion, record=False, expanding=expanding | {name})
            return

        if name in BUILTIN_COMMANDS:
            logger.debug("builtin %s %r", name, args)
            self._execute_builtin(name, args)
        else:
            logger.debug("external %s %r", name, args)
            self._execute_external(name, args)

    def _execute_builtin(self, name: str, args: list[str]) -> None:
        if name == "cd":
            self._change_directory(args[0] if args else "")
        elif name == "pwd":
            self.renderer.print_line(os.getcwd())
        elif name == "exit":
            raise ShellExit(0)
        elif name == "help":
            self.renderer.show_help()
        elif name == "history":
            self.renderer.show_history(self.history)
        elif name == "alias":
            if len(args) == 2:
                self.aliases[args[0]] = args[1]
                self.renderer.print_line(f"Alias '{args[0]}' -> '{args[1]}' added")
            else:
                self.renderer.show_aliases(self.aliases)
        else:
            raise CommandError(f"Unknown built-in command: {name}")

    def _change_directory(self, path: str) -> None:
        target = expand_tilde(path, self.home) if path else (self.home or "/")
        try:
            os.chdir(target)
        except OSError as e:
            raise CommandError(f"cd: {target}: {e.strerror or e}") from e

    def _execute_external(self, name: str, args: list[str]) -> None:
        try:
            with self.terminal.cooked():
                result = subprocess.run([name, *args])
        except KeyboardInterrupt:
            raise CommandError(f"Command '{name}' interrupted") from None
        except OSError as e:
            raise CommandError(f"Failed to execute '{name}': {e.strerror or e}") from e

        if result.returncode != 0:
            logger.debug("%s exited with status %d", name, result.returncode)
            raise CommandError(f"Command '{name}' exited with non-zero status")

    # -- interactive loop ----------------------------------------------------

    def run_interactive(self) -> int:
        """Read and run commands until exit. Returns the exit status.

        Raw mode is held only while the loop runs and is restored before any
        terminal error propagates.
        """
        self.renderer.display_welcome()
        status = 0
        try:
            with self.terminal:
                self._loop()
        except ShellExit as e:
            status = e.status
        self.renderer.display_goodbye()
        return status

    def _loop(self) -> None:
        while True:
            self.renderer.draw_prompt(self.input.text, self.input.cursor)
            result = self._read_line()
            if result.kind == "exit":
                return

            command = result.command or ""
            # Repaint without the completion summary before moving on
            self.renderer.redraw(command, len(command))
            self.renderer.print_newline()
            try:
                self.execute_command(command)
            except CommandError as e:
                self.renderer.print_error(str(e))
            finally:
                self.input.reset()

    def _read_line(self) -> KeyResult:
        while True:
            try:
                data = self.terminal.read_sequence()
            except EOFError:
                return EXIT
            result = self.input.handle_key(data)
            if result.kind != "continue":
                return result
