"""Google Drive driver.

Logical paths are resolved by walking folder names down from a configured root
folder. Drive allows several siblings with the same name; the first match the
API returns is used.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import BinaryIO, Iterable, Iterator, Optional

from cloudfilemgr.config import DriveConfig
from cloudfilemgr.controller import GoogleDriveController
from cloudfilemgr.errors import InvalidArgumentError, NotFoundError
from cloudfilemgr.models import DriveItem, FileManagerEntry, FileMetadata, FileUploadMetaData
from cloudfilemgr.util.mime import guess_content_type, matches_extensions
from cloudfilemgr.util.paths import basename, join, normalize, parent, split
from cloudfilemgr.util.time import now_utc

from .base import FileStorage, directory_entry, file_entry, file_metadata, upload_tags

logger = logging.getLogger(__name__)


class GoogleDriveStorage(FileStorage):
    """Driver exposing a Drive folder tree through logical paths."""

    def __init__(self, config: DriveConfig, *, supports_all_drives: bool = True) -> None:
        self._controller = GoogleDriveController(
            config,
            supports_all_drives=supports_all_drives,
        )
        self._root_id = config.root_folder_id

    @classmethod
    def from_controller(
        cls,
        controller: GoogleDriveController,
        root_folder_id: str = "root",
    ) -> "GoogleDriveStorage":
        """Create driver with an injected controller (useful for tests)."""
        obj = cls.__new__(cls)
        obj._controller = controller
        obj._root_id = root_folder_id
        return obj

    # ----------------------------
    # Folders
    # ----------------------------
    def create_folder(self, path: str) -> None:
        self._folder_id(path, create=True)

    def delete_folder(self, path: str) -> int:
        if not normalize(path):
            raise InvalidArgumentError("Cannot delete the root folder", details={"path": path})

        folder_id = self._folder_id(path)
        if folder_id is None:
            logger.debug("Folder %s does not exist; nothing to delete", normalize(path))
            return 0

        deleted = self._delete_tree(folder_id)
        logger.info("Deleted folder %s (%d entries)", normalize(path), deleted)
        return deleted

    def _delete_tree(self, folder_id: str) -> int:
        deleted = 0
        for child in self._controller.list_children(folder_id):
            if child.is_folder:
                deleted += self._delete_tree(child.file_id)
            else:
                self._controller.delete_permanently(child.file_id)
                deleted += 1

        self._controller.delete_permanently(folder_id)
        return deleted + 1

    # ----------------------------
    # Listing
    # ----------------------------
    def get_objects(self, path: str) -> list[FileManagerEntry]:
        dir_path = normalize(path)
        folder_id = self._folder_id(dir_path)
        if folder_id is None:
            return []

        items: list[FileManagerEntry] = []
        for child in self._controller.list_children(folder_id):
            entry_path = join(dir_path, child.name)
            if child.is_folder:
                items.append(
                    directory_entry(
                        child.name,
                        entry_path,
                        _modified(child),
                        self._controller.has_child_folder(child.file_id),
                    )
                )
            else:
                items.append(
                    file_entry(
                        child.name,
                        entry_path,
                        child.size or 0,
                        _modified(child),
                        child.app_properties,
                    )
                )

        logger.debug("Listed %d entries under %s", len(items), dir_path or "/")
        return items

    def get_blob_names_by_path(
        self,
        path: str,
        filter: Optional[Iterable[str]] = None,
    ) -> list[str]:
        dir_path = normalize(path)
        folder_id = self._folder_id(dir_path)
        if folder_id is None:
            return []

        extensions = list(filter) if filter is not None else None
        return [
            file_path
            for file_path in self._walk_files(folder_id, dir_path)
            if matches_extensions(basename(file_path), extensions)
        ]

    def _walk_files(self, folder_id: str, dir_path: str) -> Iterator[str]:
        children = self._controller.list_children(folder_id)
        for child in children:
            if child.is_folder:
                yield from self._walk_files(child.file_id, join(dir_path, child.name))
        for child in children:
            if not child.is_folder:
                yield join(dir_path, child.name)

    # ----------------------------
    # Single files
    # ----------------------------
    def get_blob(self, path: str) -> Optional[FileManagerEntry]:
        item = self._existing_file(path)
        if item is None:
            return None
        return file_entry(
            item.name,
            join(parent(path), item.name),
            item.size or 0,
            _modified(item),
            item.app_properties,
        )

    def get_file_metadata(self, path: str) -> Optional[FileMetadata]:
        item = self._existing_file(path)
        if item is None:
            return None
        return file_metadata(
            item.name,
            item.size or 0,
            _modified(item),
            item.app_properties,
            content_type=item.mime_type,
            etag=item.md5_checksum,
        )

    def get_stream(self, path: str) -> BinaryIO:
        dir_path = parent(path)
        folder_id = self._folder_id(dir_path)
        if folder_id is None:
            raise NotFoundError(
                f"Directory not found: {dir_path or '/'}",
                details={"path": path},
            )

        name = basename(path)
        item = self._controller.find_child(folder_id, name, folder=False) if name else None
        if item is None:
            raise NotFoundError(f"File not found: {name}", details={"path": path})
        return io.BytesIO(self._controller.download(item.file_id))

    def blob_exists(self, path: str) -> bool:
        return self._existing_file(path) is not None

    def delete_if_exists(self, path: str) -> None:
        item = self._existing_file(path)
        if item is None:
            return
        self._controller.delete_permanently(item.file_id)
        logger.info("Deleted file %s", normalize(path))

    # ----------------------------
    # Writes
    # ----------------------------
    def append_blob(
        self,
        data: bytes,
        file_meta: FileUploadMetaData,
        upload_datetime: datetime,
    ) -> None:
        self._write(io.BytesIO(data), file_meta, app_properties=None)
        logger.info(
            "Wrote %d bytes to %s (upload %s)",
            len(data),
            join(parent(file_meta.relative_path), file_meta.file_name),
            file_meta.upload_uid,
        )

    def upload_stream(
        self,
        stream: BinaryIO,
        file_meta: FileUploadMetaData,
        upload_datetime: datetime,
    ) -> bool:
        self._write(stream, file_meta, app_properties=upload_tags(file_meta, upload_datetime))
        logger.info(
            "Uploaded %s (%d bytes, upload %s)",
            join(parent(file_meta.relative_path), file_meta.file_name),
            file_meta.total_file_size,
            file_meta.upload_uid,
        )
        return True

    def _write(
        self,
        stream: BinaryIO,
        file_meta: FileUploadMetaData,
        *,
        app_properties: Optional[dict[str, str]],
    ) -> DriveItem:
        folder_id = self._folder_id(parent(file_meta.relative_path), create=True)
        name = basename(file_meta.file_name)
        mime_type = guess_content_type(name, file_meta.content_type)

        existing = self._controller.find_child(folder_id, name, folder=False)
        if existing is not None:
            return self._controller.update_content(
                existing.file_id,
                stream,
                mime_type=mime_type,
                app_properties=app_properties,
            )
        return self._controller.upload(
            stream,
            folder_id,
            name,
            mime_type=mime_type,
            app_properties=app_properties,
        )

    def copy_blob(self, source: str, destination: str) -> None:
        source_dir_path = parent(source)
        source_folder_id = self._folder_id(source_dir_path)
        if source_folder_id is None:
            raise NotFoundError(
                f"Source directory not found: {source_dir_path or '/'}",
                details={"source": source},
            )

        dest_folder_id = self._folder_id(parent(destination), create=True)

        source_name = basename(source)
        source_item = (
            self._controller.find_child(source_folder_id, source_name, folder=False)
            if source_name
            else None
        )
        if source_item is None:
            raise NotFoundError(f"File not found: {source_name}", details={"source": source})

        dest_name = basename(destination) or source_name
        if dest_folder_id == source_folder_id and dest_name == source_name:
            logger.debug("Copy of %s onto itself skipped", join(source_dir_path, source_name))
            return

        existing = self._controller.find_child(dest_folder_id, dest_name, folder=False)
        if existing is not None:
            self._controller.delete_permanently(existing.file_id)

        self._controller.copy(source_item.file_id, dest_folder_id, new_name=dest_name)
        logger.info(
            "Copied %s to %s",
            join(source_dir_path, source_name),
            join(parent(destination), dest_name),
        )

    def rename(self, target: str, new_name: str) -> None:
        if not new_name or "/" in new_name.strip("/") or "\\" in new_name:
            raise InvalidArgumentError(
                "new_name must be a plain file name",
                details={"new_name": new_name},
            )

        item = self._existing_file(target)
        if item is None:
            raise NotFoundError(f"File not found: {normalize(target)}", details={"target": target})

        self._controller.rename(item.file_id, new_name.strip("/"))
        logger.info("Renamed %s to %s", normalize(target), new_name.strip("/"))

    # ----------------------------
    # Internals
    # ----------------------------
    def _folder_id(self, path: str, *, create: bool = False) -> Optional[str]:
        """
        Resolve a logical folder path to a Drive folder id.

        Returns None when a segment is missing, unless ``create`` is set, in
        which case missing folders are created shortest prefix first.
        """
        folder_id = self._root_id
        walked: list[str] = []
        for name in split(path):
            walked.append(name)
            child = self._controller.find_child(folder_id, name, folder=True)
            if child is None:
                if not create:
                    return None
                child = self._controller.create_folder(name, folder_id)
                logger.info("Created directory %s", "/".join(walked))
            folder_id = child.file_id
        return folder_id

    def _existing_file(self, path: str) -> Optional[DriveItem]:
        name = basename(path)
        if not name:
            return None

        folder_id = self._folder_id(parent(path))
        if folder_id is None:
            return None
        return self._controller.find_child(folder_id, name, folder=False)


def _modified(item: DriveItem) -> datetime:
    return item.modified_time or item.created_time or now_utc()
