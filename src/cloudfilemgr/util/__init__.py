from .mime import (
    DEFAULT_CONTENT_TYPE,
    FOLDER_MIME,
    guess_content_type,
    is_folder,
    matches_extensions,
)
from .paths import ancestors, basename, extension, join, normalize, parent, split
from .time import (
    as_local,
    as_utc,
    from_ticks,
    now_utc,
    parse_iso8601,
    parse_upload_timestamp,
    resolve_upload_time,
    to_ticks,
)

__all__ = [
    "FOLDER_MIME",
    "DEFAULT_CONTENT_TYPE",
    "is_folder",
    "guess_content_type",
    "matches_extensions",
    "split",
    "normalize",
    "join",
    "parent",
    "basename",
    "extension",
    "ancestors",
    "now_utc",
    "as_utc",
    "as_local",
    "to_ticks",
    "from_ticks",
    "parse_iso8601",
    "parse_upload_timestamp",
    "resolve_upload_time",
]
