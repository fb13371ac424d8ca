"""cloudfilemgr public API."""

from __future__ import annotations

from cloudfilemgr.auth import OAuthClient
from cloudfilemgr.config import AzureStorageConfig, DriveConfig
from cloudfilemgr.drivers import (
    UPLOAD_DATETIME_KEY,
    UPLOAD_SIZE_KEY,
    UPLOAD_UID_KEY,
    AzureFileStorage,
    FileStorage,
    GoogleDriveStorage,
)
from cloudfilemgr.errors import (
    AuthError,
    CloudFileMgrError,
    InvalidArgumentError,
    NotFoundError,
    UnsupportedOperationError,
)
from cloudfilemgr.models import (
    DriveItem,
    FileManagerEntry,
    FileMetadata,
    FileUploadMetaData,
)

__all__ = [
    # Drivers
    "FileStorage",
    "AzureFileStorage",
    "GoogleDriveStorage",
    "UPLOAD_UID_KEY",
    "UPLOAD_SIZE_KEY",
    "UPLOAD_DATETIME_KEY",
    # Config / Auth
    "AzureStorageConfig",
    "DriveConfig",
    "OAuthClient",
    # Models
    "FileUploadMetaData",
    "FileManagerEntry",
    "FileMetadata",
    "DriveItem",
    # Errors
    "CloudFileMgrError",
    "InvalidArgumentError",
    "NotFoundError",
    "AuthError",
    "UnsupportedOperationError",
]
