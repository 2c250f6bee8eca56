"""Tests for wsh.stdin_buffer.StdinBuffer."""

from __future__ import annotations

from wsh.stdin_buffer import (
    BRACKETED_PASTE_END,
    BRACKETED_PASTE_START,
    ESC,
    StdinBuffer,
    _extract_complete_sequences,
    _is_complete_sequence,
)


# ---------------------------------------------------------------------------
# _is_complete_sequence (internal helper, tested for confidence)
# ---------------------------------------------------------------------------


class TestIsCompleteSequence:
    def test_non_escape_returns_not_escape(self) -> None:
        assert _is_complete_sequence("a") == "not-escape"

    def test_lone_esc_is_incomplete(self) -> None:
        assert _is_complete_sequence(ESC) == "incomplete"

    def test_meta_key_sequence_is_complete(self) -> None:
        assert _is_complete_sequence(f"{ESC}a") == "complete"

    def test_csi_needs_final_byte(self) -> None:
        assert _is_complete_sequence(f"{ESC}[") == "incomplete"
        assert _is_complete_sequence(f"{ESC}[1;") == "incomplete"
        assert _is_complete_sequence(f"{ESC}[1;5A") == "complete"

    def test_ss3_needs_one_char(self) -> None:
        assert _is_complete_sequence(f"{ESC}O") == "incomplete"
        assert _is_complete_sequence(f"{ESC}OA") == "complete"

    def test_osc_terminators(self) -> None:
        assert _is_complete_sequence(f"{ESC}]0;title") == "incomplete"
        assert _is_complete_sequence(f"{ESC}]0;title\x07") == "complete"
        assert _is_complete_sequence(f"{ESC}]0;title{ESC}\\") == "complete"

    def test_sgr_mouse(self) -> None:
        assert _is_complete_sequence(f"{ESC}[<0;10") == "incomplete"
        assert _is_complete_sequence(f"{ESC}[<0;10;20M") == "complete"


class TestExtractCompleteSequences:
    def test_splits_mixed_input(self) -> None:
        sequences, rest = _extract_complete_sequences(f"ab{ESC}[A{ESC}[3~c")
        assert sequences == ["a", "b", f"{ESC}[A", f"{ESC}[3~", "c"]
        assert rest == ""

    def test_keeps_incomplete_tail(self) -> None:
        sequences, rest = _extract_complete_sequences(f"x{ESC}[1;")
        assert sequences == ["x"]
        assert rest == f"{ESC}[1;"


# ---------------------------------------------------------------------------
# StdinBuffer
# ---------------------------------------------------------------------------


class TestStdinBuffer:
    def test_initial_state(self) -> None:
        buf = StdinBuffer()
        assert buf.get_buffer() == ""
        assert buf.flush() == []

    def test_plain_characters(self) -> None:
        buf = StdinBuffer()
        assert buf.process("ls") == ["l", "s"]

    def test_split_escape_sequence_is_joined(self) -> None:
        buf = StdinBuffer()
        assert buf.process(f"{ESC}[") == []
        assert buf.get_buffer() == f"{ESC}["
        assert buf.process("A") == [f"{ESC}[A"]
        assert buf.get_buffer() == ""

    def test_flush_returns_partial_sequence(self) -> None:
        buf = StdinBuffer()
        buf.process(ESC)
        assert buf.flush() == [ESC]
        assert buf.flush() == []

    def test_clear_discards_everything(self) -> None:
        buf = StdinBuffer()
        buf.process(f"{ESC}[1")
        buf.clear()
        assert buf.get_buffer() == ""
        buf.process(f"{BRACKETED_PASTE_START}half")
        buf.clear()
        assert buf.flush() == []


class TestBracketedPaste:
    def test_paste_in_one_chunk(self) -> None:
        buf = StdinBuffer()
        data = f"{BRACKETED_PASTE_START}echo hi{BRACKETED_PASTE_END}"
        assert buf.process(data) == [data]

    def test_paste_across_chunks(self) -> None:
        buf = StdinBuffer()
        assert buf.process(f"a{BRACKETED_PASTE_START}one ") == ["a"]
        assert buf.process(f"two{BRACKETED_PASTE_END}b") == [
            f"{BRACKETED_PASTE_START}one two{BRACKETED_PASTE_END}",
            "b",
        ]
        assert buf.flush() == []

    def test_escape_inside_paste_is_not_parsed(self) -> None:
        buf = StdinBuffer()
        data = f"{BRACKETED_PASTE_START}x{ESC}[Ay{BRACKETED_PASTE_END}"
        assert buf.process(data) == [data]

    def test_flush_returns_unterminated_paste(self) -> None:
        buf = StdinBuffer()
        assert buf.process(f"{BRACKETED_PASTE_START}git sta") == []
        assert buf.flush() == [f"{BRACKETED_PASTE_START}git sta{BRACKETED_PASTE_END}"]
        # Paste mode is over, later input is parsed as keys again
        assert buf.process(f"{ESC}[A") == [f"{ESC}[A"]
        assert buf.flush() == []
