"""Public error exports for cloudfilemgr."""

from __future__ import annotations

from .exceptions import (
    AuthError,
    CloudFileMgrError,
    InvalidArgumentError,
    NotFoundError,
    UnsupportedOperationError,
)

__all__ = [
    "CloudFileMgrError",
    "InvalidArgumentError",
    "NotFoundError",
    "AuthError",
    "UnsupportedOperationError",
]
