"""Storage driver exports for cloudfilemgr."""

from __future__ import annotations

from .azure_files import AzureFileStorage
from .base import (
    UPLOAD_DATETIME_KEY,
    UPLOAD_SIZE_KEY,
    UPLOAD_UID_KEY,
    FileStorage,
)
from .google_drive import GoogleDriveStorage

__all__ = [
    "FileStorage",
    "AzureFileStorage",
    "GoogleDriveStorage",
    "UPLOAD_UID_KEY",
    "UPLOAD_SIZE_KEY",
    "UPLOAD_DATETIME_KEY",
]
