"""Azure File Share connection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

CONNECTION_STRING_ENV: str = "AZURE_STORAGE_CONNECTION_STRING"
FILE_SHARE_ENV: str = "AZURE_FILE_SHARE"


@dataclass(slots=True, frozen=True)
class AzureStorageConfig:
    """
    Connection settings for one Azure File Share.

    Both values are required:
        - connection_string: storage account connection string
        - share_name: name of the file share (created on first use)
    """

    connection_string: str
    share_name: str

    def __post_init__(self) -> None:
        for key in ("connection_string", "share_name"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AzureStorageConfig.{key} must be a non-empty string")

    @classmethod
    def from_env(
        cls,
        *,
        connection_string_env: str = CONNECTION_STRING_ENV,
        share_name_env: str = FILE_SHARE_ENV,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "AzureStorageConfig":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        missing = [
            name
            for name in (connection_string_env, share_name_env)
            if not env.get(name, "").strip()
        ]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")
        return cls(
            connection_string=env[connection_string_env].strip(),
            share_name=env[share_name_env].strip(),
        )

    def __repr__(self) -> str:
        return f"AzureStorageConfig(share_name={self.share_name!r})"
