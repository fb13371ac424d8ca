"""Listing record returned to the file manager UI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class FileManagerEntry:
    """
    One file or directory in a listing.

    ``created``/``modified`` are in the host's local timezone and
    ``created_utc``/``modified_utc`` in UTC. For files, ``created`` reflects
    the tagged upload time when one was recorded.
    """

    name: str
    path: str
    is_directory: bool
    created: datetime
    created_utc: datetime
    modified: datetime
    modified_utc: datetime

    extension: str = ""
    has_directories: bool = False
    size: int = 0
