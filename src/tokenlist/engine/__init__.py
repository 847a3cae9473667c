"""Token list engine: derived indices and the accepted-document store."""

from .indices import (
    CURATION_FLAG,
    DerivedIndices,
    NATIVE_TOKEN,
    Token,
    build_indices,
    normalize_token,
)
from .store import TokenListStore, UpdateOutcome, UpdateResult

__all__ = [
    "CURATION_FLAG",
    "DerivedIndices",
    "NATIVE_TOKEN",
    "Token",
    "TokenListStore",
    "UpdateOutcome",
    "UpdateResult",
    "build_indices",
    "normalize_token",
]
