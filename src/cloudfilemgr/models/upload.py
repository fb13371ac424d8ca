"""Upload input model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class FileUploadMetaData:
    """
    Describes one upload request.

    Notes:
        - ``relative_path`` is the full logical path of the target file,
          including its name.
        - ``chunk_index`` / ``total_chunks`` are accepted for callers that
          track chunked uploads, but every upload is written as one complete
          payload. Parts are never reassembled.
    """

    upload_uid: str
    file_name: str
    relative_path: str
    content_type: str = ""
    chunk_index: int = 0
    total_chunks: int = 1
    total_file_size: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.file_name, str) or not self.file_name.strip():
            raise ValueError("FileUploadMetaData.file_name must be a non-empty string")
        if not isinstance(self.relative_path, str):
            raise TypeError("FileUploadMetaData.relative_path must be a string")
        if self.total_file_size < 0:
            raise ValueError("FileUploadMetaData.total_file_size must be >= 0")
        if self.total_chunks < 1:
            raise ValueError("FileUploadMetaData.total_chunks must be >= 1")
        if not 0 <= self.chunk_index < self.total_chunks:
            raise ValueError(
                "FileUploadMetaData.chunk_index must be in [0, total_chunks)"
            )
