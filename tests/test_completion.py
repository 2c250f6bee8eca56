"""Tests for wsh.completion -- classification, candidate sources and cycling."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from wsh.completion import (
    BUILTIN_COMMANDS,
    CompletionContext,
    CompletionEngine,
    classify,
    command_candidates,
    path_candidates,
    summary_window,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_executable(directory: Path, name: str) -> Path:
    path = directory / name
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


def make_engine(*names: str) -> CompletionEngine:
    """Engine whose only command source is *names*."""
    return CompletionEngine(CompletionContext(builtins=names))


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    @pytest.mark.parametrize(
        "text, mode, prefix",
        [
            ("", "command", ""),
            ("ec", "command", "ec"),
            ("  ec", "command", "ec"),
            ("ls ", "path", ""),
            ("ls /tm", "path", "/tm"),
            ("cp a b", "path", "b"),
            ("cat 'my fi", "path", "my fi"),
        ],
    )
    def test_classification(self, text: str, mode: str, prefix: str) -> None:
        result = classify(text)
        assert result.mode == mode
        assert result.prefix == prefix


# ---------------------------------------------------------------------------
# Command candidates
# ---------------------------------------------------------------------------


class TestCommandCandidates:
    def test_builtins_filtered_by_prefix(self) -> None:
        context = CompletionContext()
        assert command_candidates("h", context) == ["help", "history"]

    def test_all_builtins_for_empty_prefix(self) -> None:
        context = CompletionContext()
        assert command_candidates("", context) == sorted(BUILTIN_COMMANDS)

    def test_alias_keys_are_offered(self) -> None:
        context = CompletionContext(alias_keys={"ll": "ls -l", "la": "ls -a"}.keys())
        assert command_candidates("l", context) == ["la", "ll"]

    def test_history_first_words_are_offered(self) -> None:
        context = CompletionContext()
        history = ["git status", "grep -r x .", "  gzip file"]
        assert command_candidates("g", context, history) == ["git", "grep", "gzip"]

    def test_path_executables_deduplicated_across_directories(self, tmp_path: Path) -> None:
        first = tmp_path / "bin1"
        second = tmp_path / "bin2"
        first.mkdir()
        second.mkdir()
        make_executable(first, "echo")
        make_executable(second, "echo")
        make_executable(second, "ed")

        context = CompletionContext(path_dirs=[str(first), str(second)])
        assert command_candidates("e", context) == ["echo", "ed", "exit"]

    def test_non_executable_files_are_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "readme").write_text("hello")
        make_executable(tmp_path, "run")
        context = CompletionContext(path_dirs=[str(tmp_path)], builtins=())
        assert command_candidates("r", context) == ["run"]

    def test_directories_on_path_are_not_commands(self, tmp_path: Path) -> None:
        (tmp_path / "subdir").mkdir()
        context = CompletionContext(path_dirs=[str(tmp_path)], builtins=())
        assert command_candidates("s", context) == []

    def test_missing_path_directory_contributes_nothing(self, tmp_path: Path) -> None:
        context = CompletionContext(path_dirs=[str(tmp_path / "missing")])
        assert command_candidates("cd", context) == ["cd"]

    def test_injected_executable_predicate(self, tmp_path: Path) -> None:
        (tmp_path / "tool").write_text("")
        (tmp_path / "toy").write_text("")
        context = CompletionContext(
            path_dirs=[str(tmp_path)],
            is_executable=lambda path: path.endswith("tool"),
            builtins=(),
        )
        assert command_candidates("to", context) == ["tool"]

    def test_from_environ_reads_path_and_home(self) -> None:
        context = CompletionContext.from_environ(
            ["ll"], {"PATH": f"/usr/bin{os.pathsep}{os.pathsep}/bin", "HOME": "/home/me"}
        )
        assert list(context.path_dirs) == ["/usr/bin", "/bin"]
        assert context.home == "/home/me"
        assert list(context.alias_keys) == ["ll"]

    def test_from_environ_without_path_or_home(self) -> None:
        context = CompletionContext.from_environ(environ={})
        assert list(context.path_dirs) == []
        assert context.home is None


# ---------------------------------------------------------------------------
# Path candidates
# ---------------------------------------------------------------------------


class TestPathCandidates:
    @pytest.fixture
    def workdir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        (tmp_path / ".bashrc").write_text("")
        (tmp_path / ".config").mkdir()
        (tmp_path / "notes.txt").write_text("")
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "guide.md").write_text("")
        (tmp_path / "docs" / "index.md").write_text("")
        monkeypatch.chdir(tmp_path)
        return tmp_path

    def test_hidden_files_skipped_for_empty_prefix(self, workdir: Path) -> None:
        assert path_candidates("") == ["docs/", "notes.txt"]

    def test_dot_prefix_shows_hidden_files(self, workdir: Path) -> None:
        candidates = path_candidates(".")
        assert ".bashrc" in candidates
        assert ".config/" in candidates
        assert "notes.txt" not in candidates

    def test_directories_get_trailing_slash(self, workdir: Path) -> None:
        assert path_candidates("d") == ["docs/"]

    def test_prefix_ending_in_slash_lists_directory(self, workdir: Path) -> None:
        assert path_candidates("docs/") == ["docs/guide.md", "docs/index.md"]

    def test_nested_name_prefix(self, workdir: Path) -> None:
        assert path_candidates("docs/g") == ["docs/guide.md"]

    def test_absolute_prefix(self, workdir: Path) -> None:
        assert path_candidates(f"{workdir}/no") == [f"{workdir}/notes.txt"]

    def test_tilde_is_expanded(self, workdir: Path) -> None:
        assert path_candidates("~/no", home=str(workdir)) == [f"{workdir}/notes.txt"]

    def test_tilde_without_home_is_literal(self, workdir: Path) -> None:
        assert path_candidates("~/no", home=None) == []

    def test_unreadable_directory_yields_nothing(self, workdir: Path) -> None:
        assert path_candidates("missing/x") == []

    def test_results_are_sorted(self, workdir: Path) -> None:
        for name in ("b.txt", "a.txt", "c.txt"):
            (workdir / name).write_text("")
        assert path_candidates("") == ["a.txt", "b.txt", "c.txt", "docs/", "notes.txt"]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class TestCompletionSession:
    def test_generate_returns_prefix_and_candidates(self) -> None:
        engine = make_engine("cat", "cd", "ls")
        prefix, candidates = engine.generate("c", 1)
        assert prefix == "c"
        assert candidates == ["cat", "cd"]
        assert engine.mode == "command"
        assert not engine.is_active

    def test_start_anchors_at_prefix(self) -> None:
        engine = make_engine("cat", "cd")
        engine.generate("c", 1)
        engine.start("c", 1)
        session = engine.session
        assert session is not None
        assert session.anchor == 0
        assert session.snapshot == "c"
        assert engine.selected == 0

    def test_start_without_candidates_is_noop(self) -> None:
        engine = make_engine("cat")
        engine.generate("zz", 2)
        engine.start("zz", 2)
        assert engine.is_empty()
        assert not engine.is_active

    def test_apply_then_cycle_does_not_compound(self) -> None:
        engine = make_engine("cat", "cd")
        engine.generate("c", 1)
        engine.start("c", 1)

        text, cursor = engine.apply("c", 1)
        text, cursor = engine.apply(text, cursor)
        assert (text, cursor) == ("cat", 3)

        engine.cycle_next()
        assert engine.apply(text, cursor) == ("cd", 2)

    def test_apply_keeps_text_after_cursor(self) -> None:
        engine = make_engine("cat", "cd")
        engine.generate("c foo", 1)
        engine.start("c foo", 1)
        assert engine.apply("c foo", 1) == ("cat foo", 3)

    def test_cycle_wraps_around(self) -> None:
        engine = make_engine("cat", "cd")
        engine.generate("c", 1)
        engine.start("c", 1)
        engine.cycle_next()
        engine.cycle_next()
        assert engine.selected == 0
        assert engine.apply("cd", 2) == ("cat", 3)

    def test_apply_without_session_returns_input(self) -> None:
        engine = make_engine("cat")
        assert engine.apply("x", 1) == ("x", 1)

    def test_reset_is_safe_when_idle(self) -> None:
        engine = make_engine()
        engine.reset()
        engine.reset()
        assert not engine.is_active
        assert engine.candidates == []

    def test_should_show_summary_needs_two_candidates(self) -> None:
        engine = make_engine("cat", "cd")
        engine.generate("ca", 2)
        assert not engine.should_show_summary()
        engine.generate("c", 1)
        assert engine.should_show_summary()


# ---------------------------------------------------------------------------
# Summary window
# ---------------------------------------------------------------------------


class TestSummaryWindow:
    def test_everything_fits(self) -> None:
        assert summary_window(4, 3) == range(0, 4)

    @pytest.mark.parametrize(
        "selected, start",
        [(0, 0), (4, 0), (5, 0), (12, 7), (20, 15), (24, 15)],
    )
    def test_window_follows_selection(self, selected: int, start: int) -> None:
        window = summary_window(25, selected, 10)
        assert window.start == start
        assert len(window) == 10
        assert selected in window

    def test_engine_summary_reports_hidden_count(self) -> None:
        names = tuple(f"cmd{i:02d}" for i in range(12))
        engine = make_engine(*names)
        engine.generate("cmd", 3)
        engine.start("cmd", 3)
        summary = engine.summary()
        assert summary is not None
        assert summary.total == 12
        assert summary.entries == list(names[:10])
        assert summary.hidden == 2

    def test_no_summary_for_single_candidate(self) -> None:
        engine = make_engine("cat")
        engine.generate("c", 1)
        engine.start("c", 1)
        assert engine.summary() is None
