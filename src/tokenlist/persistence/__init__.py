"""Persistence layer exports."""

from .cache import (
    CacheCorruptError,
    CacheEnvelope,
    DOCUMENT_BLOB,
    ETAG_BLOB,
    JsonFileCache,
)

__all__ = [
    "CacheCorruptError",
    "CacheEnvelope",
    "DOCUMENT_BLOB",
    "ETAG_BLOB",
    "JsonFileCache",
]
