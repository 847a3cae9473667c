"""Cached, versioned token list for wallet clients."""

from .bootstrap import build_store
from .engine import (
    DerivedIndices,
    NATIVE_TOKEN,
    TokenListStore,
    UpdateOutcome,
    UpdateResult,
    build_indices,
)
from .schema import DocumentShapeError, TokenListDocument, load_bundled_document

__all__ = [
    "DerivedIndices",
    "DocumentShapeError",
    "NATIVE_TOKEN",
    "TokenListDocument",
    "TokenListStore",
    "UpdateOutcome",
    "UpdateResult",
    "build_indices",
    "build_store",
    "load_bundled_document",
]
