"""wsh: a small interactive shell with a raw-mode line editor."""

__version__ = "0.1.0"

from wsh.completion import (
    BUILTIN_COMMANDS,
    CompletionContext,
    CompletionEngine,
    CompletionSession,
    CompletionSummary,
    classify,
)
from wsh.config import ShellConfig, load_config
from wsh.history import HistoryStore
from wsh.input_engine import InputEngine, KeyResult
from wsh.keybindings import InputKeybindings
from wsh.keys import matches_key, parse_key
from wsh.shell import CommandError, Shell, ShellExit
from wsh.stdin_buffer import StdinBuffer
from wsh.terminal import ProcessTerminal, Terminal
from wsh.tokenizer import tokenize
from wsh.ui import LineRenderer, format_prompt

__all__ = [
    "BUILTIN_COMMANDS",
    "CommandError",
    "CompletionContext",
    "CompletionEngine",
    "CompletionSession",
    "CompletionSummary",
    "HistoryStore",
    "InputEngine",
    "InputKeybindings",
    "KeyResult",
    "LineRenderer",
    "ProcessTerminal",
    "Shell",
    "ShellConfig",
    "ShellExit",
    "StdinBuffer",
    "Terminal",
    "classify",
    "format_prompt",
    "load_config",
    "matches_key",
    "parse_key",
    "tokenize",
]
