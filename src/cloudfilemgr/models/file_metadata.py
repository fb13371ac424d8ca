"""File attribute snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from cloudfilemgr.util.time import from_ticks


@dataclass(slots=True)
class FileMetadata:
    """Attributes of a stored file. ``upload_date_time`` is a tick count."""

    file_name: str
    content_length: int
    last_modified: datetime
    upload_date_time: int

    content_type: Optional[str] = None
    etag: Optional[str] = None

    @property
    def uploaded(self) -> datetime:
        """``upload_date_time`` as a UTC datetime."""
        return from_ticks(self.upload_date_time)
