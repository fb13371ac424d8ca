"""Exception hierarchy for cloudfilemgr.

Failures raised by the storage SDKs themselves (Azure ``azure.core`` errors,
Drive ``HttpError``, network errors) are not wrapped and reach the caller
unchanged. The classes below cover the signals this library raises on its own.
"""

from __future__ import annotations

from typing import Any, Optional


class CloudFileMgrError(Exception):
    """
    Base exception for cloudfilemgr.

    Attributes:
        details: Optional structured information (e.g., path, share name).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidArgumentError(CloudFileMgrError):
    """Raised when a caller passes a path or value the operation cannot use."""


class NotFoundError(CloudFileMgrError):
    """Raised when an operation requires a directory or file that is absent."""


class AuthError(CloudFileMgrError):
    """Raised when OAuth authentication/refresh fails."""


class UnsupportedOperationError(CloudFileMgrError, NotImplementedError):
    """Raised by operations a driver deliberately does not implement."""
