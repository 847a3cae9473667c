"""Authoritative token list state with cached, conditional refresh.

The store starts from the bundled baseline so reads are valid immediately,
then adopts the on-disk cache or a freshly fetched list whenever those carry a
strictly newer timestamp.  The accepted document and its indices live in one
immutable snapshot that is replaced in a single assignment, so readers never
see a document paired with another document's indices.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from prometheus_client import Counter, Gauge

from ..persistence import JsonFileCache
from ..remote import FetchError, NOT_MODIFIED, TokenListFetcher
from ..schema import TokenListDocument, load_bundled_document
from ..service.publisher import Publisher, READY, UPDATE
from .indices import DerivedIndices, Token, build_indices

UPDATES = Counter(
    "tokenlist_updates_total", "Completed token list refreshes", ["outcome"]
)
FETCHES = Counter("tokenlist_fetches_total", "Token list network requests issued")
DOCUMENT_TIMESTAMP = Gauge(
    "tokenlist_document_timestamp_seconds", "Timestamp of the accepted token list"
)


def reset_metrics() -> None:
    """Reset Prometheus metrics for tests."""

    for outcome in UpdateOutcome:
        UPDATES.labels(outcome.value)._value.set(0)
    FETCHES._value.set(0)


class UpdateOutcome(str, Enum):
    UPDATED = "updated"
    NO_CHANGE = "no_change"
    ERROR = "error"


@dataclass(frozen=True)
class UpdateResult:
    outcome: UpdateOutcome
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class _Snapshot:
    document: TokenListDocument
    indices: DerivedIndices


class TokenListStore:
    """Owner of the accepted token list document.

    Parameters
    ----------
    fetcher:
        Remote fetch collaborator used by :meth:`update`.
    cache:
        Cache envelope holding the last accepted remote document and its ETag.
    url:
        Location of the remote token list.
    baseline:
        Document to start from.  Defaults to the bundled list.
    publisher:
        Receives ``"update"`` with the new :class:`DerivedIndices` after every
        adoption and ``"ready"`` once the startup cache read has finished.
    """

    def __init__(
        self,
        fetcher: TokenListFetcher,
        cache: JsonFileCache,
        url: str,
        *,
        baseline: Optional[TokenListDocument] = None,
        publisher: Optional[Publisher] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.url = url
        self.publisher = publisher or Publisher()
        self._fetcher = fetcher
        self._cache = cache
        self._logger = logger or logging.getLogger(__name__)
        document = baseline if baseline is not None else load_bundled_document()
        self._snapshot = _Snapshot(document, build_indices(document))
        self._record_timestamp(document)
        self._job: Optional[asyncio.Task] = None
        # the persisted ETag is sent only while it describes a readable cached list
        self._etag_trusted = False
        self._ready = asyncio.Event()
        self._init_task: Optional[asyncio.Task] = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._init_task = loop.create_task(self._load_cached())

    # -- reads -------------------------------------------------------------

    @property
    def document(self) -> TokenListDocument:
        return self._snapshot.document

    @property
    def indices(self) -> DerivedIndices:
        return self._snapshot.indices

    def get_full_list(self) -> Mapping[str, Token]:
        return self._snapshot.indices.full

    def get_curated(self) -> Mapping[str, Token]:
        return self._snapshot.indices.curated

    def get_safe_names(self) -> Mapping[str, str]:
        return self._snapshot.indices.safe_names

    def get_token(self, address: str) -> Optional[Token]:
        return self._snapshot.indices.full.get(address.lower())

    def is_safe_name(self, text: str) -> bool:
        return text.lower() in self._snapshot.indices.safe_names

    @property
    def refreshing(self) -> bool:
        return self._job is not None

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    # -- transitions -------------------------------------------------------

    def set_accepted_document(self, document: TokenListDocument) -> bool:
        """Adopt ``document`` if it is strictly newer than the accepted one.

        Swaps the snapshot and notifies ``"update"`` subscribers without
        yielding to the event loop in between.
        """

        current = self._snapshot.document
        if not document.is_newer_than(current):
            return False
        self._snapshot = _Snapshot(document, build_indices(document))
        self._record_timestamp(document)
        self._logger.info(
            "adopted token list %s (%d tokens)", document.timestamp, len(document.tokens)
        )
        self.publisher.publish(UPDATE, self._snapshot.indices)
        return True

    async def initialize(self) -> bool:
        """Wait for the startup cache read, starting it if necessary.

        Returns whether the cached document was adopted.
        """

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._load_cached())
        return await asyncio.shield(self._init_task)

    async def update(self) -> UpdateResult:
        """Refresh from the remote list.

        Concurrent callers share the in-flight refresh and its result.
        """

        if self._job is None:
            self._job = asyncio.ensure_future(self._refresh())
        return await asyncio.shield(self._job)

    async def aclose(self) -> None:
        await self._fetcher.aclose()

    # -- internals ---------------------------------------------------------

    async def _load_cached(self) -> bool:
        adopted = False
        try:
            document = await self._cache.read_document()
            if document is not None:
                self._etag_trusted = True
                adopted = self.set_accepted_document(document)
                if not adopted:
                    self._logger.debug(
                        "cached token list %s is not newer than %s",
                        document.timestamp,
                        self.document.timestamp,
                    )
        finally:
            self._ready.set()
            self.publisher.publish(READY, {"adopted": adopted})
        return adopted

    async def _refresh(self) -> UpdateResult:
        try:
            result = await self._fetch_and_adopt()
        except Exception as exc:
            self._logger.warning("token list refresh failed: %s", exc)
            result = UpdateResult(UpdateOutcome.ERROR, exc)
        finally:
            self._job = None
        UPDATES.labels(result.outcome.value).inc()
        return result

    async def _fetch_and_adopt(self) -> UpdateResult:
        etag = await self._cache.read_etag() if self._etag_trusted else None
        headers = {"If-None-Match": etag} if etag else {}
        FETCHES.inc()
        resp = await self._fetcher.fetch(self.url, headers)
        if resp.status == NOT_MODIFIED:
            self._logger.debug("token list not modified (etag %s)", etag)
            return UpdateResult(UpdateOutcome.NO_CHANGE)
        if resp.status != 200:
            raise FetchError(f"unexpected status {resp.status} from {self.url}")

        document = TokenListDocument.from_dict(resp.data)
        if not self.set_accepted_document(document):
            self._logger.debug(
                "remote token list %s is not newer than %s",
                document.timestamp,
                self.document.timestamp,
            )
            return UpdateResult(UpdateOutcome.NO_CHANGE)

        # persisted only once accepted, so the cached list never regresses
        if await self._cache.write_envelope(document, resp.etag):
            self._etag_trusted = True
        return UpdateResult(UpdateOutcome.UPDATED)

    @staticmethod
    def _record_timestamp(document: TokenListDocument) -> None:
        if document.timestamp is not None:
            DOCUMENT_TIMESTAMP.set(document.timestamp.timestamp())


__all__ = [
    "TokenListStore",
    "UpdateOutcome",
    "UpdateResult",
    "reset_metrics",
]
