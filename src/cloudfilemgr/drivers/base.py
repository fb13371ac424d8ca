"""Path-addressed storage driver interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO, Iterable, Mapping, Optional

from cloudfilemgr.errors import UnsupportedOperationError
from cloudfilemgr.models import FileManagerEntry, FileMetadata, FileUploadMetaData
from cloudfilemgr.util.paths import extension
from cloudfilemgr.util.time import as_local, as_utc, resolve_upload_time, to_ticks

# Custom metadata keys written with uploaded files.
UPLOAD_UID_KEY: str = "ccmsuploaduid"
UPLOAD_SIZE_KEY: str = "ccmssize"
UPLOAD_DATETIME_KEY: str = "ccmsdatetime"


class FileStorage(ABC):
    """
    Virtual filesystem over a remote directory/file tree.

    Folders and files are addressed by logical ``/``-separated paths. Every
    call works on fresh remote handles and re-checks existence immediately
    before use; drivers keep no cache between calls. Failures raised by the
    underlying SDK propagate unchanged.
    """

    @abstractmethod
    def create_folder(self, path: str) -> None:
        """
        Create ``path`` and every missing ancestor, shortest prefix first.

        Existing directories are left untouched. An empty path is a no-op.
        """

    @abstractmethod
    def delete_folder(self, path: str) -> int:
        """
        Delete ``path`` with all files and subfolders below it, depth-first.

        Returns:
            Number of deleted entries (files and directories, including
            ``path`` itself). 0 if ``path`` does not exist.

        Raises:
            InvalidArgumentError: if ``path`` names the storage root.
        """

    @abstractmethod
    def get_objects(self, path: str) -> list[FileManagerEntry]:
        """
        List the immediate children of ``path``.

        A missing directory yields an empty list. Entries come back in the
        order the store lists them.
        """

    @abstractmethod
    def get_blob_names_by_path(
        self,
        path: str,
        filter: Optional[Iterable[str]] = None,
    ) -> list[str]:
        """
        Return the full paths of all files below ``path``.

        Subdirectories are explored before the files of the same level.

        Args:
            path: Directory to walk.
            filter: Optional extensions (".jpg" or "jpg") files must match.
        """

    @abstractmethod
    def get_blob(self, path: str) -> Optional[FileManagerEntry]:
        """Return the listing entry for a file, or None if it is absent."""

    @abstractmethod
    def get_file_metadata(self, path: str) -> Optional[FileMetadata]:
        """Return the attributes of a file, or None if it is absent."""

    @abstractmethod
    def append_blob(
        self,
        data: bytes,
        file_meta: FileUploadMetaData,
        upload_datetime: datetime,
    ) -> None:
        """
        Write ``data`` as the full content of ``file_meta.relative_path``.

        Creates the ancestor chain, and the file sized to
        ``file_meta.total_file_size`` when absent.
        """

    @abstractmethod
    def upload_stream(
        self,
        stream: BinaryIO,
        file_meta: FileUploadMetaData,
        upload_datetime: datetime,
    ) -> bool:
        """
        Upload ``stream`` tagged with upload id, declared size and upload time.

        Returns:
            True once the content is written.
        """

    @abstractmethod
    def get_stream(self, path: str) -> BinaryIO:
        """
        Open a file for reading.

        Raises:
            NotFoundError: if the directory or the file is absent.
        """

    @abstractmethod
    def copy_blob(self, source: str, destination: str) -> None:
        """
        Copy a file, replacing any file already at ``destination``.

        Raises:
            NotFoundError: if the source directory or file is absent.
        """

    @abstractmethod
    def rename(self, target: str, new_name: str) -> None:
        """
        Rename the file at ``target`` to ``new_name`` in the same directory.

        Raises:
            InvalidArgumentError: if ``new_name`` is not a plain file name.

        A missing ``target`` raises the store's own not-found error where the
        store addresses files by path (Azure: ``ResourceNotFoundError``). The
        Drive driver resolves paths itself and raises ``NotFoundError``.
        """

    @abstractmethod
    def blob_exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def delete_if_exists(self, path: str) -> None:
        """Delete a file; absent directories or files are ignored."""

    def get_inventory(self) -> list[FileMetadata]:
        """Inventory listing is not supported by any driver."""
        raise UnsupportedOperationError(
            "get_inventory is not implemented",
            details={"driver": type(self).__name__},
        )


def upload_tags(file_meta: FileUploadMetaData, upload_datetime: datetime) -> dict[str, str]:
    """Custom metadata recorded with an uploaded file."""
    return {
        UPLOAD_UID_KEY: file_meta.upload_uid,
        UPLOAD_SIZE_KEY: str(file_meta.total_file_size),
        UPLOAD_DATETIME_KEY: str(to_ticks(upload_datetime)),
    }


def directory_entry(
    name: str,
    path: str,
    modified: datetime,
    has_directories: bool,
) -> FileManagerEntry:
    modified_utc = as_utc(modified)
    return FileManagerEntry(
        name=name,
        path=path,
        is_directory=True,
        has_directories=has_directories,
        created=as_local(modified_utc),
        created_utc=modified_utc,
        modified=as_local(modified_utc),
        modified_utc=modified_utc,
    )


def file_entry(
    name: str,
    path: str,
    size: int,
    modified: datetime,
    tags: Optional[Mapping[str, str]],
) -> FileManagerEntry:
    """Build a file entry; ``created`` prefers the tagged upload time."""
    modified_utc = as_utc(modified)
    created_utc = resolve_upload_time(tags, UPLOAD_DATETIME_KEY, modified_utc)
    return FileManagerEntry(
        name=name,
        path=path,
        is_directory=False,
        extension=extension(name),
        size=size,
        created=as_local(created_utc),
        created_utc=created_utc,
        modified=as_local(modified_utc),
        modified_utc=modified_utc,
    )


def file_metadata(
    name: str,
    size: int,
    modified: datetime,
    tags: Optional[Mapping[str, str]],
    *,
    content_type: Optional[str] = None,
    etag: Optional[str] = None,
) -> FileMetadata:
    modified_utc = as_utc(modified)
    uploaded = resolve_upload_time(tags, UPLOAD_DATETIME_KEY, modified_utc)
    return FileMetadata(
        file_name=name,
        content_length=size,
        last_modified=modified_utc,
        upload_date_time=to_ticks(uploaded),
        content_type=content_type,
        etag=etag,
    )
