"""Public model exports for cloudfilemgr."""

from __future__ import annotations

from .drive_item import DriveItem
from .file_entry import FileManagerEntry
from .file_metadata import FileMetadata
from .upload import FileUploadMetaData

__all__ = [
    "FileUploadMetaData",
    "FileManagerEntry",
    "FileMetadata",
    "DriveItem",
]
