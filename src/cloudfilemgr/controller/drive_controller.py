"""Google Drive API controller (internal use only)."""

from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, Optional

from cloudfilemgr.auth import OAuthClient
from cloudfilemgr.config import DriveConfig
from cloudfilemgr.models import DriveItem
from cloudfilemgr.util.mime import FOLDER_MIME
from cloudfilemgr.util.time import parse_iso8601

logger = logging.getLogger(__name__)

# Partial-response masks. appProperties carries the upload tags.
FILE_FIELDS: str = ",".join(
    (
        "id",
        "name",
        "mimeType",
        "parents",
        "trashed",
        "modifiedTime",
        "createdTime",
        "size",
        "md5Checksum",
        "appProperties",
    )
)
LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"
PROBE_FIELDS: str = "files(id)"


class GoogleDriveController:
    """
    Drive API controller (internal only).

    Notes:
        - The Drive `service` object is NOT exposed.
        - `supports_all_drives` is applied to all requests consistently.
        - Trashed items are never returned.
        - HttpError and transport errors propagate unchanged.
    """

    def __init__(self, config: DriveConfig, *, supports_all_drives: bool = True) -> None:
        self._supports_all_drives = supports_all_drives
        self._service = OAuthClient(config).build_drive_service(ensure_valid=True)

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        supports_all_drives: bool = True,
    ) -> "GoogleDriveController":
        """Create controller from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._supports_all_drives = supports_all_drives
        obj._service = service
        return obj

    # ----------------------------
    # Queries
    # ----------------------------
    def get(self, file_id: str) -> DriveItem:
        req = self._service.files().get(
            fileId=file_id,
            fields=FILE_FIELDS,
            **self._common_kwargs(),
        )
        return _file_dict_to_drive_item(req.execute())

    def list_children(self, parent_id: str) -> list[DriveItem]:
        return self._find_by_query(_build_parent_query(parent_id))

    def find_child(
        self,
        parent_id: str,
        name: str,
        *,
        folder: Optional[bool] = None,
    ) -> Optional[DriveItem]:
        """
        Return the first child of parent_id called name, or None.

        Args:
            folder: True to match folders only, False for non-folders only,
                None for either.
        """
        q = f"{_build_parent_query(parent_id)} and name = '{_escape(name)}'"
        if folder is True:
            q += f" and mimeType = '{FOLDER_MIME}'"
        elif folder is False:
            q += f" and mimeType != '{FOLDER_MIME}'"

        matches = self._find_by_query(q)
        return matches[0] if matches else None

    def has_child_folder(self, parent_id: str) -> bool:
        """Return True if parent_id holds at least one folder (single-item probe)."""
        q = f"{_build_parent_query(parent_id)} and mimeType = '{FOLDER_MIME}'"
        req = self._service.files().list(
            q=q,
            fields=PROBE_FIELDS,
            pageSize=1,
            **self._common_list_kwargs(),
        )
        return bool(req.execute().get("files"))

    # ----------------------------
    # Mutations
    # ----------------------------
    def create_folder(self, name: str, parent_id: str) -> DriveItem:
        body = {"name": name, "mimeType": FOLDER_MIME, "parents": [parent_id]}
        req = self._service.files().create(
            body=body,
            fields=FILE_FIELDS,
            **self._common_kwargs(),
        )
        item = _file_dict_to_drive_item(req.execute())
        logger.debug("Created Drive folder %s (%s) under %s", name, item.file_id, parent_id)
        return item

    def rename(self, file_id: str, new_name: str) -> DriveItem:
        req = self._service.files().update(
            fileId=file_id,
            body={"name": new_name},
            fields=FILE_FIELDS,
            **self._common_kwargs(),
        )
        return _file_dict_to_drive_item(req.execute())

    def copy(
        self,
        file_id: str,
        new_parent_id: str,
        *,
        new_name: Optional[str] = None,
    ) -> DriveItem:
        body: dict[str, Any] = {"parents": [new_parent_id]}
        if new_name is not None:
            body["name"] = new_name

        req = self._service.files().copy(
            fileId=file_id,
            body=body,
            fields=FILE_FIELDS,
            **self._common_kwargs(),
        )
        return _file_dict_to_drive_item(req.execute())

    def delete_permanently(self, file_id: str) -> None:
        req = self._service.files().delete(
            fileId=file_id,
            **self._common_kwargs(),
        )
        req.execute()

    def upload(
        self,
        stream: BinaryIO,
        parent_id: str,
        name: str,
        *,
        mime_type: str,
        app_properties: Optional[dict[str, str]] = None,
    ) -> DriveItem:
        """Create a new file under parent_id with the content of stream."""
        from googleapiclient.http import MediaIoBaseUpload

        body: dict[str, Any] = {"name": name, "parents": [parent_id], "mimeType": mime_type}
        if app_properties:
            body["appProperties"] = dict(app_properties)

        req = self._service.files().create(
            body=body,
            media_body=MediaIoBaseUpload(stream, mimetype=mime_type, resumable=False),
            fields=FILE_FIELDS,
            **self._common_kwargs(),
        )
        return _file_dict_to_drive_item(req.execute())

    def update_content(
        self,
        file_id: str,
        stream: BinaryIO,
        *,
        mime_type: str,
        app_properties: Optional[dict[str, str]] = None,
    ) -> DriveItem:
        """Replace the content (and optionally appProperties) of an existing file."""
        from googleapiclient.http import MediaIoBaseUpload

        body: dict[str, Any] = {}
        if app_properties:
            body["appProperties"] = dict(app_properties)

        req = self._service.files().update(
            fileId=file_id,
            body=body,
            media_body=MediaIoBaseUpload(stream, mimetype=mime_type, resumable=False),
            fields=FILE_FIELDS,
            **self._common_kwargs(),
        )
        return _file_dict_to_drive_item(req.execute())

    def download(self, file_id: str) -> bytes:
        from googleapiclient.http import MediaIoBaseDownload

        req = self._service.files().get_media(
            fileId=file_id,
            **self._common_kwargs(),
        )
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, req)
        done = False
        while not done:
            _, done = downloader.next_chunk()
        return buffer.getvalue()

    # ----------------------------
    # Internals
    # ----------------------------
    def _common_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _common_list_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True, "includeItemsFromAllDrives": True}

    def _find_by_query(self, q: str) -> list[DriveItem]:
        items: list[DriveItem] = []
        page_token: Optional[str] = None

        while True:
            req = self._service.files().list(
                q=q,
                fields=LIST_FIELDS,
                pageToken=page_token,
                **self._common_list_kwargs(),
            )
            data = req.execute()
            for f in data.get("files", []):
                items.append(_file_dict_to_drive_item(f))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return items


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _build_parent_query(parent_id: str) -> str:
    return f"'{_escape(parent_id)}' in parents and trashed = false"


def _parse_time(value: Any):
    if not isinstance(value, str):
        return None
    try:
        return parse_iso8601(value)
    except ValueError:
        return None


def _file_dict_to_drive_item(data: dict[str, Any]) -> DriveItem:
    file_id = data.get("id")
    name = data.get("name", "")
    mime_type = data.get("mimeType", "")
    parents = data.get("parents", []) or []

    size = None
    if isinstance(data.get("size"), str) and data["size"].isdigit():
        size = int(data["size"])
    elif isinstance(data.get("size"), int):
        size = data["size"]

    md5 = data.get("md5Checksum")
    app_properties = data.get("appProperties")

    return DriveItem(
        file_id=file_id if isinstance(file_id, str) else "",
        name=name if isinstance(name, str) else "",
        mime_type=mime_type if isinstance(mime_type, str) else "",
        parents=list(parents) if isinstance(parents, list) else [],
        trashed=bool(data.get("trashed", False)),
        modified_time=_parse_time(data.get("modifiedTime")),
        created_time=_parse_time(data.get("createdTime")),
        size=size,
        md5_checksum=md5 if isinstance(md5, str) else None,
        app_properties=dict(app_properties) if isinstance(app_properties, dict) else {},
    )
