"""Text and filesystem helpers shared by the line editor and the shell.

Provides grapheme-cluster stepping for cursor motion, visible terminal width
measurement, tilde expansion, and the executable-permission check used when
scanning ``PATH`` directories.
"""

from __future__ import annotations

import os
import re
import stat
import unicodedata

import grapheme
import wcwidth as _wcwidth


# ---------------------------------------------------------------------------
# Grapheme clusters
# ---------------------------------------------------------------------------


def graphemes(text: str) -> list[str]:
    """Split *text* into user-perceived characters."""
    return list(grapheme.graphemes(text))


def previous_grapheme_length(text: str, index: int) -> int:
    """Return the length of the grapheme cluster ending at *index*.

    Returns 0 when *index* is at the start of the text.
    """
    if index <= 0:
        return 0
    clusters = graphemes(text[:index])
    return len(clusters[-1]) if clusters else 1


def next_grapheme_length(text: str, index: int) -> int:
    """Return the length of the grapheme cluster starting at *index*.

    Returns 0 when *index* is at the end of the text.
    """
    if index >= len(text):
        return 0
    clusters = graphemes(text[index:])
    return len(clusters[0]) if clusters else 1


# ---------------------------------------------------------------------------
# Width measurement
# ---------------------------------------------------------------------------

_STRIP_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _grapheme_width(g: str) -> int:
    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tones and regional indicators all mean emoji presentation
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    if unicodedata.category(first).startswith("M") or unicodedata.category(first) == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Return the number of terminal columns *text* occupies.

    ANSI escape sequences are ignored. Pure ASCII takes a fast path; other
    strings are measured per grapheme cluster and cached.
    """
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = total
    return total


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------


def expand_tilde(path: str, home: str | None) -> str:
    """Replace a leading ``~`` in *path* with *home*.

    The path is returned unchanged when it does not start with ``~`` or when
    no home directory is known.
    """
    if path.startswith("~") and home is not None:
        return home + path[1:]
    return path


def is_executable(path: str) -> bool:
    """Return True if any execute permission bit is set on *path*."""
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return False
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def split_search_path(value: str | None) -> list[str]:
    """Split a ``PATH``-style string into its non-empty directories."""
    if not value:
        return []
    return [entry for entry in value.split(os.pathsep) if entry]
