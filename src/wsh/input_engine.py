"""Input engine - the line-editing state machine behind the prompt.

The engine owns the edit buffer and cursor, the history browsing position
and the Tab-completion session. It consumes one raw key sequence at a time
and tells the caller whether to keep reading, run a command, or exit.
Painting is delegated to a :class:`Renderer`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from wsh.completion import CompletionEngine, CompletionSummary
from wsh.history import HistoryStore
from wsh.keybindings import InputAction, InputKeybindings
from wsh.keys import has_control_chars
from wsh.stdin_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START
from wsh.utils import next_grapheme_length, previous_grapheme_length

KeyResultKind = Literal["continue", "command", "exit"]


@dataclass(frozen=True)
class KeyResult:
    """Outcome of a single key press."""

    kind: KeyResultKind
    command: str | None = None


CONTINUE = KeyResult("continue")
EXIT = KeyResult("exit")


class Renderer(Protocol):
    """What the engine needs from the screen."""

    def redraw(self, text: str, cursor: int, summary: CompletionSummary | None = None) -> None: ...

    def move_cursor(self, text: str, old: int, new: int) -> None: ...


class InputEngine:
    """Single-line editor with history browsing and Tab completion.

    The cursor is a ``str`` index that always sits on a grapheme-cluster
    boundary. ``history_index`` is ``None`` while not browsing history.
    """

    def __init__(
        self,
        completion: CompletionEngine,
        history: HistoryStore,
        renderer: Renderer,
        keybindings: InputKeybindings | None = None,
    ) -> None:
        self._completion = completion
        self._history = history
        self._renderer = renderer
        self._keybindings = keybindings if keybindings is not None else InputKeybindings()

        self._text: str = ""
        self._cursor: int = 0
        self._history_index: int | None = None
        # Line being edited before history browsing replaced it
        self._draft: str = ""

    # -- accessors -----------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def history_index(self) -> int | None:
        return self._history_index

    @property
    def completion(self) -> CompletionEngine:
        return self._completion

    def reset(self) -> None:
        """Clear the line for the next prompt."""
        self._text = ""
        self._cursor = 0
        self._history_index = None
        self._draft = ""
        self._completion.reset()

    # -- key handling --------------------------------------------------------

    def handle_key(self, data: str) -> KeyResult:
        """Apply one complete key sequence to the editor state."""
        if data.startswith(BRACKETED_PASTE_START) and data.endswith(BRACKETED_PASTE_END):
            pasted = data[len(BRACKETED_PASTE_START) : -len(BRACKETED_PASTE_END)]
            # Line breaks, tabs and stray escapes never reach the buffer
            printable = "".join(ch for ch in pasted if not has_control_chars(ch))
            if printable:
                self._insert(printable)
            return CONTINUE

        action = self._keybindings.action_for(data)
        if action is not None:
            return self._dispatch(action)

        if not has_control_chars(data):
            self._insert(data)
        return CONTINUE

    def _dispatch(self, action: InputAction) -> KeyResult:  # noqa: C901
        if action == "submit":
            return KeyResult("command", self._text)

        if action == "interrupt":
            return EXIT

        if action == "endOfInput":
            return EXIT if not self._text else CONTINUE

        if action == "deleteCharBackward":
            self._completion.reset()
            if self._cursor > 0:
                length = previous_grapheme_length(self._text, self._cursor)
                self._text = self._text[: self._cursor - length] + self._text[self._cursor :]
                self._cursor -= length
            self._redraw()
            return CONTINUE

        if action == "deleteCharForward":
            self._completion.reset()
            if self._cursor < len(self._text):
                length = next_grapheme_length(self._text, self._cursor)
                self._text = self._text[: self._cursor] + self._text[self._cursor + length :]
            self._redraw()
            return CONTINUE

        if action == "cursorLeft":
            self._move_to(self._cursor - previous_grapheme_length(self._text, self._cursor))
            return CONTINUE

        if action == "cursorRight":
            self._move_to(self._cursor + next_grapheme_length(self._text, self._cursor))
            return CONTINUE

        if action == "cursorLineStart":
            self._move_to(0)
            return CONTINUE

        if action == "cursorLineEnd":
            self._move_to(len(self._text))
            return CONTINUE

        if action == "historyPrevious":
            self._history_previous()
            return CONTINUE

        if action == "historyNext":
            self._history_next()
            return CONTINUE

        if action == "complete":
            self._complete()
            return CONTINUE

        return CONTINUE

    # -- editing -------------------------------------------------------------

    def _insert(self, chars: str) -> None:
        if not chars:
            return
        self._completion.reset()
        self._text = self._text[: self._cursor] + chars + self._text[self._cursor :]
        self._cursor += len(chars)
        self._redraw()

    def _move_to(self, position: int) -> None:
        position = max(0, min(position, len(self._text)))
        if position == self._cursor:
            return
        old = self._cursor
        self._cursor = position
        self._renderer.move_cursor(self._text, old, position)

    def _redraw(self, summary: CompletionSummary | None = None) -> None:
        self._renderer.redraw(self._text, self._cursor, summary)

    # -- history -------------------------------------------------------------

    def _history_previous(self) -> None:
        if self._history_index is None:
            if not self._history:
                return
            self._draft = self._text
            index = len(self._history) - 1
        elif self._history_index > 0:
            index = self._history_index - 1
        else:
            return

        self._show_history_entry(index)

    def _history_next(self) -> None:
        if self._history_index is None:
            return

        if self._history_index < len(self._history) - 1:
            self._show_history_entry(self._history_index + 1)
            return

        # Moving past the newest entry goes back to the line being edited
        self._history_index = None
        self._completion.reset()
        self._text = self._draft
        self._cursor = len(self._text)
        self._draft = ""
        self._redraw()

    def _show_history_entry(self, index: int) -> None:
        self._history_index = index
        self._completion.reset()
        self._text = self._history[index]
        self._cursor = len(self._text)
        self._redraw()

    # -- completion ----------------------------------------------------------

    def _complete(self) -> None:
        if self._completion.is_active:
            self._completion.cycle_next()
        else:
            _, candidates = self._completion.generate(self._text, self._cursor, self._history)
            if not candidates:
                return
            self._completion.start(self._text, self._cursor)

        self._text, self._cursor = self._completion.apply(self._text, self._cursor)
        self._redraw(self._completion.summary())
