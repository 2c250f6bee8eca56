"""Line-editor keybindings manager."""

from __future__ import annotations

from typing import Literal, Mapping

from wsh.keys import KeyId, matches_key

InputAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    # History
    "historyPrevious",
    "historyNext",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    # Completion
    "complete",
    # Line control
    "submit",
    "interrupt",
    "endOfInput",
]

InputKeybindingsConfig = Mapping[InputAction, KeyId | list[KeyId]]

DEFAULT_INPUT_KEYBINDINGS: dict[InputAction, KeyId | list[KeyId]] = {
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    "historyPrevious": ["up", "ctrl+p"],
    "historyNext": ["down", "ctrl+n"],
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    "complete": "tab",
    "submit": "enter",
    "interrupt": "ctrl+c",
    "endOfInput": "ctrl+d",
}


class InputKeybindings:
    """Maps raw key input to line-editor actions."""

    def __init__(self, config: InputKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[InputAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: InputKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_INPUT_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        for action, keys in config.items():
            if action not in DEFAULT_INPUT_KEYBINDINGS:
                raise ValueError(f"Unknown input action: {action}")
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, data: str, action: InputAction) -> bool:
        """Check if input matches a specific action."""
        return any(matches_key(data, key) for key in self._action_to_keys.get(action, []))

    def action_for(self, data: str) -> InputAction | None:
        """Return the first action bound to *data*, or None."""
        for action in self._action_to_keys:
            if self.matches(data, action):
                return action
        return None
