"""Keyboard input parsing for raw-mode terminals.

Turns one raw input sequence (a control byte, a printable character, or a
VT/xterm escape sequence) into a key identifier such as ``"a"``,
``"ctrl+c"``, ``"up"`` or ``"ctrl+left"``, and checks raw input against
identifiers with :func:`matches_key`.
"""

from __future__ import annotations

import re

KeyId = str


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

# CSI/SS3 final byte -> key name (ESC [ A, ESC O A, ESC [ 1 ; 5 A, ...)
_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

# Numeric code of ESC [ <code> ~ sequences -> key name
_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    7: "home",
    8: "end",
}

_CSI_LETTER_RE = re.compile(r"^\x1b\[(?:1;(\d+))?([ABCDHF])$")
_SS3_LETTER_RE = re.compile(r"^\x1bO([ABCDHF])$")
_CSI_TILDE_RE = re.compile(r"^\x1b\[(\d+)(?:;(\d+))?~$")


def _modifier_prefix(bits: int) -> str:
    prefix = ""
    if bits & MODIFIERS["ctrl"]:
        prefix += "ctrl+"
    if bits & MODIFIERS["shift"]:
        prefix += "shift+"
    if bits & MODIFIERS["alt"]:
        prefix += "alt+"
    return prefix


def _csi_modifier_prefix(param: str | None) -> str:
    """Decode the xterm modifier parameter (1 + bitmask) into a key-id prefix."""
    if not param:
        return ""
    return _modifier_prefix(max(int(param) - 1, 0))


# ---------------------------------------------------------------------------
# Key ID handling
# ---------------------------------------------------------------------------


def normalize_key_id(key_id: str) -> KeyId | None:
    """Return *key_id* with its modifiers in canonical ``ctrl+shift+alt+`` order.

    Returns ``None`` for an empty identifier.
    """
    if not key_id:
        return None
    if key_id == "+":
        return key_id

    parts = key_id.split("+")
    bits = 0
    key_parts: list[str] = []
    for part in parts:
        lower = part.lower()
        if lower in MODIFIERS and len(parts) > 1:
            bits |= MODIFIERS[lower]
        else:
            key_parts.append(part)

    key = "+".join(key_parts)
    if not key:
        return None
    return _modifier_prefix(bits) + key


def parse_key(data: str) -> KeyId | None:  # noqa: C901
    """Parse raw terminal input and return its key identifier, or ``None``."""
    if not data:
        return None

    match = _CSI_LETTER_RE.match(data)
    if match:
        return _csi_modifier_prefix(match.group(1)) + _LETTER_KEYS[match.group(2)]

    match = _SS3_LETTER_RE.match(data)
    if match:
        return _LETTER_KEYS[match.group(1)]

    match = _CSI_TILDE_RE.match(data)
    if match:
        name = _TILDE_KEYS.get(int(match.group(1)))
        if name is None:
            return None
        return _csi_modifier_prefix(match.group(2)) + name

    if data == "\x1b[Z":
        return "shift+tab"

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return "escape"
    if data == "\r" or data == "\n":
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data == "\x7f" or data == "\x08":
        return "backspace"
    if data == "\x00":
        return "ctrl+space"

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\x7f" or ch == "\x08":
            return "alt+backspace"
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isprintable():
            return "alt+" + ch.lower()

    # --- Plain printable character ---
    if len(data) == 1 and data.isprintable():
        return data

    return None


def matches_key(data: str, key_id: KeyId) -> bool:
    """Return ``True`` if raw *data* is the key named by *key_id*."""
    expected = normalize_key_id(key_id)
    if expected is None:
        return False
    return parse_key(data) == expected


def has_control_chars(data: str) -> bool:
    """True if *data* contains C0/C1 control characters or DEL."""
    return any(ord(ch) < 32 or ord(ch) == 0x7F or 0x80 <= ord(ch) <= 0x9F for ch in data)
