"""On-disk cache envelope for the token list document and its ETag."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from prometheus_client import Counter

from ..schema import DocumentShapeError, TokenListDocument

DOCUMENT_BLOB = "rb-token-list.json"
ETAG_BLOB = "rb-token-list-etag.json"

CACHE_READS = Counter(
    "tokenlist_cache_reads_total", "Cache envelope reads by result", ["result"]
)
CACHE_WRITE_FAILURES = Counter(
    "tokenlist_cache_write_failures_total", "Failed cache envelope writes"
)


def reset_metrics() -> None:
    """Reset Prometheus metrics for tests."""

    for result in ("hit", "miss", "corrupt"):
        CACHE_READS.labels(result)._value.set(0)
    CACHE_WRITE_FAILURES._value.set(0)


class CacheCorruptError(ValueError):
    """A cache blob exists but its content cannot be decoded."""


@dataclass
class CacheEnvelope:
    document: Optional[TokenListDocument]
    etag: Optional[str]


class JsonFileCache:
    """Named JSON blobs stored under a cache directory.

    Blocking file access runs in the default executor so callers on the event
    loop are never stalled by disk I/O.
    """

    def __init__(self, directory: str, *, logger: Optional[logging.Logger] = None) -> None:
        self.directory = Path(directory).expanduser()
        self._logger = logger or logging.getLogger(__name__)

    def path(self, name: str) -> Path:
        return self.directory / name

    def _read(self, name: str) -> Optional[Any]:
        try:
            raw = self.path(name).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CacheCorruptError(f"{name}: {exc}") from exc

    def _write(self, name: str, value: Any) -> None:
        os.makedirs(self.directory, exist_ok=True)
        target = self.path(name)
        tmp = target.with_suffix(target.suffix + ".tmp")
        tmp.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, target)

    async def read_json(self, name: str) -> Optional[Any]:
        """Return the decoded blob, ``None`` when it does not exist.

        Raises :class:`CacheCorruptError` when the blob is not valid JSON.
        """

        return await asyncio.to_thread(self._read, name)

    async def write_json(self, name: str, value: Any) -> None:
        await asyncio.to_thread(self._write, name, value)

    async def read_document(self) -> Optional[TokenListDocument]:
        """Return the cached document or ``None``.

        A missing file is expected. Corrupt or malformed content is logged as
        an anomaly and otherwise treated the same as a missing file.
        """

        try:
            payload = await self.read_json(DOCUMENT_BLOB)
            if payload is None:
                CACHE_READS.labels("miss").inc()
                self._logger.debug("no cached token list at %s", self.path(DOCUMENT_BLOB))
                return None
            document = TokenListDocument.from_dict(payload)
        except (CacheCorruptError, DocumentShapeError, OSError) as exc:
            CACHE_READS.labels("corrupt").inc()
            self._logger.warning("ignoring unreadable token list cache: %s", exc)
            return None
        CACHE_READS.labels("hit").inc()
        return document

    async def read_etag(self) -> Optional[str]:
        try:
            value = await self.read_json(ETAG_BLOB)
        except (CacheCorruptError, OSError) as exc:
            self._logger.warning("ignoring unreadable etag cache: %s", exc)
            return None
        if value is not None and not isinstance(value, str):
            self._logger.warning("ignoring non-string etag cache value")
            return None
        return value

    async def read_envelope(self) -> CacheEnvelope:
        return CacheEnvelope(document=await self.read_document(), etag=await self.read_etag())

    async def write_envelope(self, document: TokenListDocument, etag: Optional[str]) -> bool:
        """Persist ``document`` and its ``etag``.

        A missing ``etag`` is stored as ``null`` so a stale tag never
        outlives the document it described.

        Returns ``False`` instead of raising when the disk write fails.
        """

        try:
            await self.write_json(DOCUMENT_BLOB, document.to_dict())
            await self.write_json(ETAG_BLOB, etag)
        except (OSError, TypeError, ValueError) as exc:
            CACHE_WRITE_FAILURES.inc()
            self._logger.warning("failed to persist token list cache: %s", exc)
            return False
        return True


__all__ = [
    "CACHE_READS",
    "CACHE_WRITE_FAILURES",
    "CacheCorruptError",
    "CacheEnvelope",
    "DOCUMENT_BLOB",
    "ETAG_BLOB",
    "JsonFileCache",
    "reset_metrics",
]
