"""Public auth exports for cloudfilemgr."""

from __future__ import annotations

from .oauth_client import OAuthClient

__all__ = ["OAuthClient"]
