"""Tab completion for command names and filesystem paths.

The text before the cursor decides what is being completed:

* the first word (or an empty line) completes a **command** from the
  built-in names, configured aliases, executables found on ``PATH`` and the
  first words of earlier commands;
* any later word completes a **path** relative to the working directory.

A :class:`CompletionEngine` keeps the candidates of the last Tab press and,
while a session is active, lets repeated presses cycle through them. Every
substitution is applied to the line as it was before the session started,
so cycling never compounds earlier substitutions.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Collection, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal

from wsh.tokenizer import first_token, tokenize
from wsh.utils import expand_tilde, is_executable, split_search_path

logger = logging.getLogger(__name__)

BUILTIN_COMMANDS: tuple[str, ...] = ("cd", "pwd", "exit", "help", "alias", "history")

# Candidates shown at once in the completion summary
MAX_DISPLAY = 10

CompletionMode = Literal["command", "path"]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Classification:
    """What kind of word the cursor is on and the partial text typed so far."""

    mode: CompletionMode
    prefix: str


def classify(text_before_cursor: str) -> Classification:
    """Classify the completion context for *text_before_cursor*."""
    tokens = tokenize(text_before_cursor)
    ends_with_space = text_before_cursor.endswith(" ")

    if not tokens or (len(tokens) == 1 and not ends_with_space):
        return Classification(mode="command", prefix=tokens[0] if tokens else "")

    # A trailing space means a new argument has not been typed yet
    prefix = "" if ends_with_space else tokens[-1]
    return Classification(mode="path", prefix=prefix)


# ---------------------------------------------------------------------------
# Candidate sources
# ---------------------------------------------------------------------------


@dataclass
class CompletionContext:
    """Environment the candidate sources read from.

    ``PATH`` and the home directory are captured here instead of being read
    from the process environment on every key press.
    """

    alias_keys: Collection[str] = ()
    path_dirs: Sequence[str] = ()
    is_executable: Callable[[str], bool] = is_executable
    home: str | None = None
    builtins: Sequence[str] = BUILTIN_COMMANDS

    @classmethod
    def from_environ(
        cls,
        alias_keys: Collection[str] = (),
        environ: Mapping[str, str] | None = None,
    ) -> CompletionContext:
        env = os.environ if environ is None else environ
        return cls(
            alias_keys=alias_keys,
            path_dirs=split_search_path(env.get("PATH")),
            home=env.get("HOME"),
        )


def _path_executables(prefix: str, context: CompletionContext) -> list[str]:
    """Executable file names on the search path starting with *prefix*.

    A name found in several directories is reported once.
    """
    found: list[str] = []
    seen: set[str] = set()

    for directory in context.path_dirs:
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    name = entry.name
                    if not name.startswith(prefix) or name in seen:
                        continue
                    if entry.is_file() and context.is_executable(entry.path):
                        found.append(name)
                        seen.add(name)
        except OSError as exc:
            logger.debug("skipping search path entry %s: %s", directory, exc)

    return found


def command_candidates(
    prefix: str,
    context: CompletionContext,
    history: Iterable[str] = (),
) -> list[str]:
    """Sorted, de-duplicated command names starting with *prefix*."""
    candidates: list[str] = [name for name in context.builtins if name.startswith(prefix)]
    candidates.extend(alias for alias in context.alias_keys if alias.startswith(prefix))
    candidates.extend(_path_executables(prefix, context))

    for command in history:
        word = first_token(command)
        if word is not None and word.startswith(prefix):
            candidates.append(word)

    return sorted(set(candidates))


def _is_directory(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def path_candidates(prefix: str, home: str | None = None) -> list[str]:
    """Sorted filesystem paths completing *prefix*.

    Dot-files are only offered when the typed file name starts with a dot.
    Directories carry a trailing ``/``.
    """
    expanded = expand_tilde(prefix, home)

    if expanded.endswith("/"):
        directory, name_prefix = expanded, ""
    else:
        directory = os.path.dirname(expanded) or "."
        name_prefix = os.path.basename(expanded)

    show_hidden = name_prefix.startswith(".")
    candidates: list[str] = []

    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                name = entry.name
                if not name.startswith(name_prefix):
                    continue
                if name.startswith(".") and not show_hidden:
                    continue

                if directory == ".":
                    candidate = name
                elif directory.endswith("/"):
                    candidate = directory + name
                else:
                    candidate = f"{directory}/{name}"

                if _is_directory(entry):
                    candidate += "/"
                candidates.append(candidate)
    except OSError as exc:
        logger.debug("cannot list %s for completion: %s", directory, exc)
        return []

    candidates.sort()
    return candidates


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@dataclass
class CompletionSession:
    """An active Tab-cycling session.

    ``anchor`` is where ``prefix`` starts in ``snapshot``, the line as it was
    before the first Tab press.
    """

    candidates: list[str]
    prefix: str
    anchor: int
    snapshot: str
    selected: int = 0

    @property
    def current(self) -> str:
        return self.candidates[self.selected]


@dataclass(frozen=True)
class CompletionSummary:
    """The slice of candidates to display around the selection."""

    total: int
    selected: int
    start: int
    entries: list[str] = field(default_factory=list)

    @property
    def hidden(self) -> int:
        """Number of candidates that do not fit in the window."""
        return self.total - len(self.entries)


def summary_window(total: int, selected: int, limit: int = MAX_DISPLAY) -> range:
    """Indices of the candidates to show, keeping *selected* in view.

    The window sticks to the start while the selection is within the first
    half-window and to the end while it is within the last half-window;
    otherwise it is centered on the selection.
    """
    if total <= limit:
        return range(total)

    half = limit // 2
    if selected < half:
        start = 0
    elif selected > total - half:
        start = total - limit
    else:
        start = selected - half
    return range(start, start + limit)


class CompletionEngine:
    """Generates candidates and tracks the Tab-cycling session."""

    def __init__(self, context: CompletionContext | None = None) -> None:
        self.context = context if context is not None else CompletionContext()
        self._mode: CompletionMode | None = None
        self._prefix: str = ""
        self._candidates: list[str] = []
        self._session: CompletionSession | None = None

    # -- queries -------------------------------------------------------------

    @property
    def mode(self) -> CompletionMode | None:
        return self._mode

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def candidates(self) -> list[str]:
        return list(self._candidates)

    @property
    def session(self) -> CompletionSession | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def selected(self) -> int | None:
        return self._session.selected if self._session is not None else None

    def is_empty(self) -> bool:
        return not self._candidates

    def should_show_summary(self) -> bool:
        return len(self._candidates) > 1

    # -- operations ----------------------------------------------------------

    def generate(
        self,
        buffer: str,
        cursor: int,
        history: Iterable[str] = (),
    ) -> tuple[str, list[str]]:
        """Compute candidates for the word before *cursor*.

        Returns ``(prefix, candidates)`` and remembers them for :meth:`start`.
        """
        cursor = max(0, min(cursor, len(buffer)))
        classification = classify(buffer[:cursor])

        if classification.mode == "command":
            candidates = command_candidates(classification.prefix, self.context, history)
        else:
            candidates = path_candidates(classification.prefix, self.context.home)

        self._mode = classification.mode
        self._prefix = classification.prefix
        self._candidates = candidates
        logger.debug(
            "%s completion for %r: %d candidate(s)",
            classification.mode,
            classification.prefix,
            len(candidates),
        )
        return self._prefix, list(candidates)

    def start(self, buffer: str, cursor: int) -> None:
        """Begin cycling through the generated candidates."""
        if not self._candidates:
            return
        self._session = CompletionSession(
            candidates=list(self._candidates),
            prefix=self._prefix,
            anchor=max(0, cursor - len(self._prefix)),
            snapshot=buffer,
        )

    def apply(self, buffer: str, cursor: int) -> tuple[str, int]:
        """Substitute the selected candidate for the prefix.

        The substitution is made on the snapshot taken by :meth:`start`, so
        applying twice gives the same line. Returns the new line and cursor;
        without an active session *buffer* and *cursor* come back unchanged.
        """
        session = self._session
        if session is None:
            return buffer, cursor

        completion = session.current
        end = session.anchor + len(session.prefix)
        text = session.snapshot[: session.anchor] + completion + session.snapshot[end:]
        return text, session.anchor + len(completion)

    def cycle_next(self) -> None:
        if self._session is None:
            return
        self._session.selected = (self._session.selected + 1) % len(self._session.candidates)

    def reset(self) -> None:
        self._mode = None
        self._prefix = ""
        self._candidates = []
        self._session = None

    def summary(self, limit: int = MAX_DISPLAY) -> CompletionSummary | None:
        """Window of candidates for display, or None when there is nothing to choose."""
        session = self._session
        if session is None or not self.should_show_summary():
            return None
        window = summary_window(len(session.candidates), session.selected, limit)
        return CompletionSummary(
            total=len(session.candidates),
            selected=session.selected,
            start=window.start,
            entries=[session.candidates[i] for i in window],
        )
