"""Google Drive connection settings (OAuth only)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DRIVE_SCOPE: str = "https://www.googleapis.com/auth/drive"

CLIENT_SECRETS_ENV: str = "CLOUDFILEMGR_DRIVE_CLIENT_SECRETS"
TOKEN_FILE_ENV: str = "CLOUDFILEMGR_DRIVE_TOKEN_FILE"
ROOT_ID_ENV: str = "CLOUDFILEMGR_DRIVE_ROOT_ID"


@dataclass(slots=True, frozen=True)
class DriveConfig:
    """
    OAuth and scope settings for the Drive driver.

    Attributes:
        client_secrets_file: Path to OAuth client secrets JSON.
        token_file: Path to OAuth token JSON (authorized user); written on
            first authorization and on refresh.
        root_folder_id: Drive folder that logical path "" maps to.
        scopes: OAuth scopes requested.
    """

    client_secrets_file: str
    token_file: str
    root_folder_id: str = "root"
    scopes: tuple[str, ...] = (DRIVE_SCOPE,)

    def __post_init__(self) -> None:
        for key in ("client_secrets_file", "token_file", "root_folder_id"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"DriveConfig.{key} must be a non-empty string")

        if not isinstance(self.scopes, tuple):
            raise TypeError("DriveConfig.scopes must be a tuple")
        if not self.scopes or not all(isinstance(s, str) and s.strip() for s in self.scopes):
            raise ValueError("DriveConfig.scopes must be a non-empty tuple of strings")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DriveConfig":
        env = os.environ if environ is None else environ
        missing = [
            name
            for name in (CLIENT_SECRETS_ENV, TOKEN_FILE_ENV)
            if not env.get(name, "").strip()
        ]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")
        return cls(
            client_secrets_file=env[CLIENT_SECRETS_ENV].strip(),
            token_file=env[TOKEN_FILE_ENV].strip(),
            root_folder_id=env.get(ROOT_ID_ENV, "").strip() or "root",
        )
