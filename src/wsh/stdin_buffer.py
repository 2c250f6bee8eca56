"""StdinBuffer splits raw terminal input into complete key sequences.

Reads from a raw-mode terminal can end in the middle of an escape sequence,
and one read can carry several keys at once. The buffer keeps partial
sequences until the rest arrives and hands back whole ones.
"""

from __future__ import annotations

import re
from typing import Literal

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

SequenceStatus = Literal["complete", "incomplete", "not-escape"]

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


# Introducers of string sequences -> the terminators that end them
_STRING_TERMINATORS: dict[str, tuple[str, ...]] = {
    "]": (f"{ESC}\\", "\x07"),  # OSC
    "P": (f"{ESC}\\",),  # DCS
    "_": (f"{ESC}\\",),  # APC
}


def _csi_status(payload: str) -> SequenceStatus:
    """Status of a CSI sequence given everything after ``ESC [``."""
    if not payload:
        return "incomplete"
    # Legacy X10 mouse reports carry three raw bytes after ESC [ M
    if payload[0] == "M":
        return "complete" if len(payload) >= 4 else "incomplete"
    if not 0x40 <= ord(payload[-1]) <= 0x7E:
        return "incomplete"
    if payload[0] == "<" and not _SGR_MOUSE_RE.match(payload):
        return "incomplete"
    return "complete"


def _is_complete_sequence(data: str) -> SequenceStatus:
    """Whether *data* is a whole escape sequence, a prefix of one, or plain text."""
    if not data.startswith(ESC):
        return "not-escape"
    if len(data) == 1:
        return "incomplete"

    introducer, body = data[1], data[2:]
    if introducer == "[":
        return _csi_status(body)
    if introducer in _STRING_TERMINATORS:
        return "complete" if data.endswith(_STRING_TERMINATORS[introducer]) else "incomplete"
    if introducer == "O":
        return "complete" if body else "incomplete"
    # ESC + any other character is a meta key
    return "complete"


def _extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Split accumulated *buffer* into complete sequences.

    Returns ``(sequences, remainder)``.
    """
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        remaining = buffer[pos:]

        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        seq_end = 1
        while seq_end <= len(remaining):
            candidate = remaining[:seq_end]
            if _is_complete_sequence(candidate) == "incomplete":
                seq_end += 1
                continue
            sequences.append(candidate)
            pos += seq_end
            break
        else:
            return sequences, remaining

    return sequences, ""


class StdinBuffer:
    """Buffers stdin input and returns complete sequences.

    Bracketed paste content comes back as a single sequence, still wrapped
    in the paste markers, so the consumer can tell it apart from typing.
    """

    def __init__(self) -> None:
        self._buffer: str = ""
        self._paste_mode: bool = False
        self._paste_buffer: str = ""

    def process(self, data: str) -> list[str]:
        """Feed input *data* and return every sequence it completes."""
        if self._paste_mode:
            self._paste_buffer += data
            return self._finish_paste()

        self._buffer += data

        start_index = self._buffer.find(BRACKETED_PASTE_START)
        if start_index != -1:
            sequences, _ = _extract_complete_sequences(self._buffer[:start_index])
            self._paste_mode = True
            self._paste_buffer = self._buffer[start_index + len(BRACKETED_PASTE_START) :]
            self._buffer = ""
            return sequences + self._finish_paste()

        sequences, self._buffer = _extract_complete_sequences(self._buffer)
        return sequences

    def _finish_paste(self) -> list[str]:
        end_index = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end_index == -1:
            return []

        pasted = self._paste_buffer[:end_index]
        remaining = self._paste_buffer[end_index + len(BRACKETED_PASTE_END) :]
        self._paste_mode = False
        self._paste_buffer = ""

        sequences = [BRACKETED_PASTE_START + pasted + BRACKETED_PASTE_END]
        if remaining:
            sequences.extend(self.process(remaining))
        return sequences

    def flush(self) -> list[str]:
        """Give up waiting and return any partial sequence as-is.

        An unterminated paste comes back wrapped in the paste markers like a
        complete one, so the text already received is not lost.
        """
        if self._paste_mode:
            sequences = [BRACKETED_PASTE_START + self._paste_buffer + BRACKETED_PASTE_END]
            self._paste_mode = False
            self._paste_buffer = ""
            return sequences
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def clear(self) -> None:
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

    def get_buffer(self) -> str:
        return self._buffer
