"""Public configuration exports for cloudfilemgr."""

from __future__ import annotations

from .azure import AzureStorageConfig
from .drive import DRIVE_SCOPE, DriveConfig

__all__ = ["AzureStorageConfig", "DriveConfig", "DRIVE_SCOPE"]
