"""Data model for Drive items."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from cloudfilemgr.util.mime import is_folder


@dataclass(slots=True)
class DriveItem:
    """
    A Drive file or folder as reported by the Drive API.

    Notes:
        - ``app_properties`` holds the custom key/value tags private to this
          application (Drive ``appProperties``).
    """

    file_id: str
    name: str
    mime_type: str
    parents: list[str] = field(default_factory=list)

    trashed: bool = False
    modified_time: Optional[datetime] = None
    created_time: Optional[datetime] = None
    size: Optional[int] = None
    md5_checksum: Optional[str] = None
    app_properties: dict[str, str] = field(default_factory=dict)

    @property
    def is_folder(self) -> bool:
        return is_folder(self.mime_type)
