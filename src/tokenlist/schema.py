"""Token list document model and timestamp handling."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

BUNDLED_PATH = Path(__file__).resolve().parent / "data" / "rainbow-token-list.json"

# epoch values above this are milliseconds
_MS_THRESHOLD = 1e11


class DocumentShapeError(ValueError):
    """Raised when a payload does not look like a token list document."""


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime.

    Accepts ISO-8601 strings (``Z`` suffix allowed) and epoch numbers.
    ``None`` means the document carries no version marker.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise DocumentShapeError(f"invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        try:
            secs = float(value)
            if not math.isfinite(secs):
                raise ValueError("non-finite timestamp")
            if secs > _MS_THRESHOLD:
                secs /= 1000.0
            return datetime.fromtimestamp(secs, tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as exc:
            raise DocumentShapeError(f"invalid timestamp: {value!r}") from exc
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError as exc:
            raise DocumentShapeError(f"invalid timestamp: {value!r}") from exc
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts
    raise DocumentShapeError(f"invalid timestamp: {value!r}")


@dataclass(frozen=True)
class TokenListDocument:
    """Versioned token list as published by the list maintainers.

    ``raw`` keeps the payload exactly as received so that it can be written
    back to the cache without loss.
    """

    timestamp: Optional[datetime]
    tokens: Tuple[Mapping[str, Any], ...]
    raw: Mapping[str, Any] = field(repr=False, compare=False)

    @classmethod
    def from_dict(cls, payload: Any) -> "TokenListDocument":
        if not isinstance(payload, Mapping):
            raise DocumentShapeError("document is not an object")
        tokens = payload.get("tokens")
        if not isinstance(tokens, list):
            raise DocumentShapeError("document has no token list")
        for i, token in enumerate(tokens):
            if not isinstance(token, Mapping) or not isinstance(token.get("address"), str):
                raise DocumentShapeError(f"token {i} has no address")
            ext = token.get("extensions")
            if ext is not None and not isinstance(ext, Mapping):
                raise DocumentShapeError(f"token {i} has malformed extensions")
        return cls(
            timestamp=parse_timestamp(payload.get("timestamp")),
            tokens=tuple(tokens),
            raw=payload,
        )

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw)

    def is_newer_than(self, other: "TokenListDocument") -> bool:
        return is_newer(self.timestamp, other.timestamp)


def is_newer(candidate: Optional[datetime], current: Optional[datetime]) -> bool:
    """True only when both timestamps exist and ``candidate`` is strictly later."""

    if candidate is None or current is None:
        return False
    return candidate > current


def load_bundled_document(path: Optional[Path] = None) -> TokenListDocument:
    """Load the baseline document shipped with the package."""

    with open(path or BUNDLED_PATH, "r", encoding="utf-8") as fh:
        return TokenListDocument.from_dict(json.load(fh))


__all__ = [
    "BUNDLED_PATH",
    "DocumentShapeError",
    "TokenListDocument",
    "is_newer",
    "load_bundled_document",
    "parse_timestamp",
]
