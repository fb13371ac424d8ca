from __future__ import annotations

import mimetypes

FOLDER_MIME: str = "application/vnd.google-apps.folder"
DEFAULT_CONTENT_TYPE: str = "application/octet-stream"


def is_folder(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME


def guess_content_type(name: str, declared: str | None = None) -> str:
    """
    Return the content type to store for ``name``.

    The caller-declared type wins; otherwise it is guessed from the extension,
    falling back to ``application/octet-stream``.
    """
    if declared and declared.strip():
        return declared.strip()
    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_CONTENT_TYPE


def matches_extensions(name: str, extensions) -> bool:
    """
    Return True if ``name`` ends with one of ``extensions``.

    Matching is case-insensitive and accepts extensions with or without the
    leading dot. An empty or None filter matches everything.
    """
    if not extensions:
        return True
    lowered = name.lower()
    for ext in extensions:
        if not ext:
            continue
        suffix = ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        if lowered.endswith(suffix):
            return True
    return False
