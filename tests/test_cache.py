import logging

import pytest

from tokenlist.persistence import DOCUMENT_BLOB, ETAG_BLOB, CacheCorruptError, JsonFileCache
from tokenlist.persistence.cache import CACHE_READS, CACHE_WRITE_FAILURES
from tokenlist.schema import TokenListDocument

from tests.fakes import T1, make_document


@pytest.mark.asyncio
async def test_missing_cache_is_a_plain_miss(cache, caplog):
    caplog.set_level(logging.DEBUG)
    envelope = await cache.read_envelope()
    assert envelope.document is None
    assert envelope.etag is None
    assert CACHE_READS.labels("miss")._value.get() == 1
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


@pytest.mark.asyncio
async def test_corrupt_document_is_reported_and_ignored(cache, caplog):
    cache.directory.mkdir(parents=True)
    cache.path(DOCUMENT_BLOB).write_text("{not json", encoding="utf-8")
    assert await cache.read_document() is None
    assert CACHE_READS.labels("corrupt")._value.get() == 1
    assert any("unreadable" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_wrong_shape_document_counts_as_corrupt(cache):
    await cache.write_json(DOCUMENT_BLOB, {"timestamp": T1})
    assert await cache.read_document() is None
    assert CACHE_READS.labels("corrupt")._value.get() == 1


@pytest.mark.asyncio
async def test_read_json_distinguishes_missing_from_corrupt(cache):
    assert await cache.read_json(ETAG_BLOB) is None
    cache.directory.mkdir(parents=True)
    cache.path(ETAG_BLOB).write_text('"v1', encoding="utf-8")
    with pytest.raises(CacheCorruptError):
        await cache.read_json(ETAG_BLOB)
    assert await cache.read_etag() is None


@pytest.mark.asyncio
async def test_envelope_write_then_read(cache):
    doc = TokenListDocument.from_dict(make_document(T1))
    assert await cache.write_envelope(doc, '"v1"')
    envelope = await cache.read_envelope()
    assert envelope.document.timestamp == doc.timestamp
    assert envelope.document.to_dict() == doc.to_dict()
    assert envelope.etag == '"v1"'
    assert not list(cache.directory.glob("*.tmp"))


@pytest.mark.asyncio
async def test_envelope_without_etag_clears_previous_etag(cache):
    await cache.write_json(ETAG_BLOB, "old")
    doc = TokenListDocument.from_dict(make_document(T1))
    assert await cache.write_envelope(doc, None)
    assert await cache.read_etag() is None
    assert cache.path(ETAG_BLOB).exists()


@pytest.mark.asyncio
async def test_write_failure_is_reported_not_raised(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    cache = JsonFileCache(str(blocker))
    doc = TokenListDocument.from_dict(make_document(T1))
    assert await cache.write_envelope(doc, "v1") is False
    assert CACHE_WRITE_FAILURES._value.get() == 1
    assert any("failed to persist" in r.getMessage() for r in caplog.records)
