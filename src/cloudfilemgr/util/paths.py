"""Logical path helpers.

A logical path is a ``/``-separated string. Leading and trailing slashes are
optional, backslashes count as separators and empty segments are dropped, so
``"/a//b/"``, ``"a/b"`` and ``"a\\b"`` all name the same location. The empty
string names the storage root.
"""

from __future__ import annotations

import posixpath

SEPARATOR: str = "/"


def split(path: str | None) -> list[str]:
    """Return the non-empty segments of ``path``."""
    if not path:
        return []
    return [part for part in path.replace("\\", SEPARATOR).split(SEPARATOR) if part]


def normalize(path: str | None) -> str:
    """Return ``path`` without leading/trailing or repeated separators."""
    return SEPARATOR.join(split(path))


def join(*parts: str | None) -> str:
    segments: list[str] = []
    for part in parts:
        segments.extend(split(part))
    return SEPARATOR.join(segments)


def parent(path: str | None) -> str:
    """
    Return the directory part of ``path`` ("" for top-level entries).

    A path ending with a separator is itself the directory part, matching
    ``basename``.
    """
    if path and path.replace("\\", SEPARATOR).endswith(SEPARATOR):
        return normalize(path)
    return SEPARATOR.join(split(path)[:-1])


def basename(path: str | None) -> str:
    """
    Return the final segment of ``path``.

    A path ending with a separator names a directory and has no file segment,
    so ``basename("a/b/")`` is ``""``.
    """
    if not path or path.replace("\\", SEPARATOR).endswith(SEPARATOR):
        return ""
    segments = split(path)
    return segments[-1] if segments else ""


def extension(name: str) -> str:
    """Return the extension of ``name`` including the dot ("" if none)."""
    return posixpath.splitext(name)[1]


def ancestors(path: str | None) -> list[str]:
    """
    Return every prefix of ``path``, shortest first.

    ``ancestors("a/b/c")`` is ``["a", "a/b", "a/b/c"]``.
    """
    segments = split(path)
    return [SEPARATOR.join(segments[: i + 1]) for i in range(len(segments))]
