"""OAuth credentials and Drive service construction."""

from __future__ import annotations

import logging
import os

from cloudfilemgr.config import DriveConfig
from cloudfilemgr.errors import AuthError

logger = logging.getLogger(__name__)


class OAuthClient:
    """Load, refresh and persist OAuth credentials for the Drive driver."""

    def __init__(self, config: DriveConfig) -> None:
        self._config = config

    def get_credentials(self, ensure_valid: bool = True):
        """
        Return OAuth credentials for the configured scopes.

        Args:
            ensure_valid: If True, refresh (or re-authorize) when the stored
                token is not valid.

        Returns:
            google.oauth2.credentials.Credentials

        Raises:
            AuthError: on load/refresh/flow failures.
        """
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials
        from google_auth_oauthlib.flow import InstalledAppFlow

        scopes = list(self._config.scopes)
        token_file = self._config.token_file

        if os.path.exists(token_file):
            try:
                creds = Credentials.from_authorized_user_file(token_file, scopes=scopes)
            except Exception as exc:
                raise AuthError(
                    "Failed to load token_file",
                    details={"token_file": token_file},
                    cause=exc,
                ) from exc

            if not ensure_valid:
                return creds

            if not creds.valid and creds.refresh_token:
                logger.debug("Refreshing OAuth token from %s", token_file)
                try:
                    creds.refresh(Request())
                except Exception as exc:
                    raise AuthError(
                        "Failed to refresh OAuth credentials",
                        details={"token_file": token_file},
                        cause=exc,
                    ) from exc
                self._save_credentials(creds)

            if creds.valid:
                return creds

        client_secrets = self._config.client_secrets_file
        logger.info("Running OAuth authorization flow with %s", client_secrets)
        try:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets, scopes=scopes)
            creds = flow.run_local_server(port=0)
        except Exception as exc:
            raise AuthError(
                "OAuth authorization flow failed",
                details={
                    "client_secrets_file": client_secrets,
                    "token_file": token_file,
                },
                cause=exc,
            ) from exc
        self._save_credentials(creds)
        return creds

    def build_drive_service(self, ensure_valid: bool = True):
        """
        Build a Drive v3 service resource.

        Returns:
            googleapiclient.discovery.Resource
        """
        from googleapiclient.discovery import build

        creds = self.get_credentials(ensure_valid=ensure_valid)
        try:
            return build("drive", "v3", credentials=creds, cache_discovery=False)
        except Exception as exc:
            raise AuthError("Failed to build Drive service", cause=exc) from exc

    def _save_credentials(self, creds) -> None:
        token_file = self._config.token_file
        token_dir = os.path.dirname(token_file)
        if token_dir:
            os.makedirs(token_dir, exist_ok=True)

        try:
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            raise AuthError(
                "Failed to save OAuth token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
        logger.debug("Saved OAuth token to %s", token_file)
