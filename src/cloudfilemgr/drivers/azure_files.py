"""Azure File Share driver."""

from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import Any, BinaryIO, Iterable, Iterator, Optional

from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.storage.fileshare import ContentSettings, ShareClient

from cloudfilemgr.config import AzureStorageConfig
from cloudfilemgr.errors import InvalidArgumentError, NotFoundError
from cloudfilemgr.models import FileManagerEntry, FileMetadata, FileUploadMetaData
from cloudfilemgr.util.mime import guess_content_type, matches_extensions
from cloudfilemgr.util.paths import ancestors, basename, join, normalize, parent

from .base import FileStorage, directory_entry, file_entry, file_metadata, upload_tags

logger = logging.getLogger(__name__)

# The File service accepts at most 4 MiB per range write.
MAX_RANGE_SIZE: int = 4 * 1024 * 1024


class AzureFileStorage(FileStorage):
    """
    Driver for one Azure File Share.

    Notes:
        - Directory and file clients are created per call and never reused.
        - Existence is checked remotely before each use; nothing is cached.
        - Errors raised by the Azure SDK are not wrapped.
    """

    def __init__(self, config: AzureStorageConfig) -> None:
        share = ShareClient.from_connection_string(
            conn_str=config.connection_string,
            share_name=config.share_name,
        )
        try:
            share.create_share()
            logger.info("Created Azure file share %s", config.share_name)
        except ResourceExistsError:
            pass
        self._share = share

    @classmethod
    def from_share_client(cls, share: Any) -> "AzureFileStorage":
        """Create driver from a pre-built ShareClient (useful for tests)."""
        obj = cls.__new__(cls)
        obj._share = share
        return obj

    # ----------------------------
    # Folders
    # ----------------------------
    def create_folder(self, path: str) -> None:
        chain = ancestors(path)
        if not chain:
            logger.debug("create_folder called with root path; nothing to do")
            return

        for dir_path in chain:
            directory = self._share.get_directory_client(dir_path)
            try:
                directory.create_directory()
                logger.info("Created directory %s", dir_path)
            except ResourceExistsError:
                continue

    def delete_folder(self, path: str) -> int:
        target = normalize(path)
        if not target:
            raise InvalidArgumentError("Cannot delete the share root", details={"path": path})

        directory = self._share.get_directory_client(target)
        if not directory.exists():
            logger.debug("Folder %s does not exist; nothing to delete", target)
            return 0

        deleted = self._delete_tree(directory, target)
        logger.info("Deleted folder %s (%d entries)", target, deleted)
        return deleted

    def _delete_tree(self, directory: Any, dir_path: str) -> int:
        deleted = 0
        for item in directory.list_directories_and_files():
            if item.is_directory:
                sub_dir = directory.get_subdirectory_client(item.name)
                deleted += self._delete_tree(sub_dir, join(dir_path, item.name))
            else:
                directory.delete_file(item.name)
                logger.debug("Deleted file %s", join(dir_path, item.name))
                deleted += 1

        directory.delete_directory()
        return deleted + 1

    # ----------------------------
    # Listing
    # ----------------------------
    def get_objects(self, path: str) -> list[FileManagerEntry]:
        dir_path = normalize(path)
        directory = self._share.get_directory_client(dir_path)
        if not directory.exists():
            logger.debug("Directory %s does not exist; empty listing", dir_path or "/")
            return []

        items: list[FileManagerEntry] = []
        for item in directory.list_directories_and_files():
            entry_path = join(dir_path, item.name)
            if item.is_directory:
                sub_dir = directory.get_subdirectory_client(item.name)
                props = sub_dir.get_directory_properties()
                items.append(
                    directory_entry(
                        item.name,
                        entry_path,
                        props.last_modified,
                        _has_subdirectories(sub_dir),
                    )
                )
            else:
                props = directory.get_file_client(item.name).get_file_properties()
                items.append(
                    file_entry(
                        item.name,
                        entry_path,
                        props.size,
                        props.last_modified,
                        props.metadata,
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
        directory = self._share.get_directory_client(dir_path)
        if not directory.exists():
            return []

        extensions = list(filter) if filter is not None else None
        return [
            file_path
            for file_path in self._walk_files(directory, dir_path)
            if matches_extensions(basename(file_path), extensions)
        ]

    def _walk_files(self, directory: Any, dir_path: str) -> Iterator[str]:
        sub_dirs: list[str] = []
        files: list[str] = []
        for item in directory.list_directories_and_files():
            (sub_dirs if item.is_directory else files).append(item.name)

        for name in sub_dirs:
            yield from self._walk_files(
                directory.get_subdirectory_client(name),
                join(dir_path, name),
            )
        for name in files:
            yield join(dir_path, name)

    # ----------------------------
    # Single files
    # ----------------------------
    def get_blob(self, path: str) -> Optional[FileManagerEntry]:
        file = self._existing_file(path)
        if file is None:
            return None

        props = file.get_file_properties()
        name = basename(path)
        return file_entry(
            name,
            join(parent(path), name),
            props.size,
            props.last_modified,
            props.metadata,
        )

    def get_file_metadata(self, path: str) -> Optional[FileMetadata]:
        file = self._existing_file(path)
        if file is None:
            return None

        props = file.get_file_properties()
        content_settings = getattr(props, "content_settings", None)
        return file_metadata(
            basename(path),
            props.size,
            props.last_modified,
            props.metadata,
            content_type=getattr(content_settings, "content_type", None),
            etag=props.etag,
        )

    def get_stream(self, path: str) -> BinaryIO:
        dir_path = parent(path)
        directory = self._share.get_directory_client(dir_path)
        if not directory.exists():
            raise NotFoundError(
                f"Directory not found: {dir_path or '/'}",
                details={"path": path},
            )

        name = basename(path)
        file = directory.get_file_client(name) if name else None
        if file is None or not file.exists():
            raise NotFoundError(f"File not found: {name}", details={"path": path})

        return io.BufferedReader(_ChunkReader(file.download_file().chunks()))

    def blob_exists(self, path: str) -> bool:
        return self._existing_file(path) is not None

    def delete_if_exists(self, path: str) -> None:
        name = basename(path)
        if not name:
            return

        directory = self._share.get_directory_client(parent(path))
        if not directory.exists():
            return
        try:
            directory.delete_file(name)
            logger.info("Deleted file %s", join(parent(path), name))
        except ResourceNotFoundError:
            logger.debug("File %s already absent", join(parent(path), name))

    # ----------------------------
    # Writes
    # ----------------------------
    def append_blob(
        self,
        data: bytes,
        file_meta: FileUploadMetaData,
        upload_datetime: datetime,
    ) -> None:
        dir_path = parent(file_meta.relative_path)
        directory = self._share.get_directory_client(dir_path)
        if not directory.exists():
            self.create_folder(dir_path)

        name = basename(file_meta.file_name)
        file = directory.get_file_client(name)
        if not file.exists():
            file.create_file(
                file_meta.total_file_size,
                content_settings=ContentSettings(
                    content_type=guess_content_type(name, file_meta.content_type)
                ),
            )

        written = _upload_ranges(file, [data])
        logger.info(
            "Wrote %d bytes to %s (upload %s)",
            written,
            join(dir_path, name),
            file_meta.upload_uid,
        )

    def upload_stream(
        self,
        stream: BinaryIO,
        file_meta: FileUploadMetaData,
        upload_datetime: datetime,
    ) -> bool:
        dir_path = parent(file_meta.relative_path)
        self.create_folder(dir_path)

        name = basename(file_meta.file_name)
        file = self._share.get_directory_client(dir_path).get_file_client(name)
        file.upload_file(
            stream,
            length=file_meta.total_file_size,
            metadata=upload_tags(file_meta, upload_datetime),
            content_settings=ContentSettings(
                content_type=guess_content_type(name, file_meta.content_type)
            ),
        )
        logger.info(
            "Uploaded %s (%d bytes, upload %s)",
            join(dir_path, name),
            file_meta.total_file_size,
            file_meta.upload_uid,
        )
        return True

    def copy_blob(self, source: str, destination: str) -> None:
        source_dir_path = parent(source)
        source_dir = self._share.get_directory_client(source_dir_path)
        if not source_dir.exists():
            raise NotFoundError(
                f"Source directory not found: {source_dir_path or '/'}",
                details={"source": source},
            )

        dest_dir_path = parent(destination)
        dest_dir = self._share.get_directory_client(dest_dir_path)
        if not dest_dir.exists():
            self.create_folder(dest_dir_path)

        source_name = basename(source)
        source_file = source_dir.get_file_client(source_name) if source_name else None
        if source_file is None or not source_file.exists():
            raise NotFoundError(
                f"File not found: {source_name}",
                details={"source": source},
            )

        # A destination ending in "/" keeps the source's name.
        dest_name = basename(destination) or source_name
        if join(dest_dir_path, dest_name) == join(source_dir_path, source_name):
            logger.debug("Copy of %s onto itself skipped", join(source_dir_path, dest_name))
            return

        props = source_file.get_file_properties()
        dest_file = dest_dir.get_file_client(dest_name)
        try:
            dest_file.delete_file()
        except ResourceNotFoundError:
            pass

        content_settings = getattr(props, "content_settings", None)
        dest_file.create_file(
            props.size,
            content_settings=ContentSettings(
                content_type=getattr(content_settings, "content_type", None)
            ),
        )
        written = _upload_ranges(dest_file, source_file.download_file().chunks())
        logger.info(
            "Copied %s to %s (%d bytes)",
            join(source_dir_path, source_name),
            join(dest_dir_path, dest_name),
            written,
        )

    def rename(self, target: str, new_name: str) -> None:
        if not new_name or "/" in new_name.strip("/") or "\\" in new_name:
            raise InvalidArgumentError(
                "new_name must be a plain file name",
                details={"new_name": new_name},
            )

        dir_path = parent(target)
        name = basename(target)
        if not name:
            raise InvalidArgumentError("target must name a file", details={"target": target})

        file = self._share.get_directory_client(dir_path).get_file_client(name)
        new_path = join(dir_path, new_name)
        file.rename_file(new_path)
        logger.info("Renamed %s to %s", join(dir_path, name), new_path)

    # ----------------------------
    # Internals
    # ----------------------------
    def _existing_file(self, path: str) -> Optional[Any]:
        """Return a file client if both the directory and the file exist."""
        name = basename(path)
        if not name:
            return None

        directory = self._share.get_directory_client(parent(path))
        if not directory.exists():
            return None

        file = directory.get_file_client(name)
        if not file.exists():
            return None
        return file


def _has_subdirectories(directory: Any) -> bool:
    for item in directory.list_directories_and_files():
        if item.is_directory:
            return True
    return False


def _upload_ranges(file: Any, chunks: Iterable[bytes]) -> int:
    """Write ``chunks`` to ``file`` from offset 0; returns the bytes written."""
    offset = 0
    for chunk in chunks:
        view = memoryview(chunk)
        for start in range(0, len(view), MAX_RANGE_SIZE):
            piece = bytes(view[start : start + MAX_RANGE_SIZE])
            file.upload_range(piece, offset=offset, length=len(piece))
            offset += len(piece)
    return offset


class _ChunkReader(io.RawIOBase):
    """Read-only raw stream over downloaded chunks, fetched as they are read."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks = iter(chunks)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size
