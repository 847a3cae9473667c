from fastapi.testclient import TestClient

from tokenlist.engine import TokenListStore
from tokenlist.persistence import JsonFileCache
from tokenlist.remote import FetchError, FetchResponse
from tokenlist.server import create_app
from tokenlist.utils import TokenListConfig

from tests.fakes import DAI, T3, URL, USDC, FakeFetcher, make_document


def build_app(tmp_path, fetcher, metrics=False):
    cfg = TokenListConfig(token_list_url=URL, cache_dir=str(tmp_path / "cache"))
    store = TokenListStore(fetcher, JsonFileCache(cfg.cache_dir), cfg.token_list_url)
    return create_app(cfg, store, metrics=metrics), store


def test_read_endpoints_serve_bundled_list(tmp_path):
    app, store = build_app(tmp_path, FakeFetcher())
    with TestClient(app) as client:
        status = client.get("/status").json()
        assert status["ready"] is True
        assert status["refreshing"] is False
        assert status["tokens"] == len(store.get_full_list())

        tokens = client.get("/tokens").json()
        assert tokens[0]["address"] == "eth"
        assert all(t["address"] == t["address"].lower() for t in tokens)

        curated = client.get("/tokens/curated").json()
        assert all(t["isRainbowCurated"] for t in curated)

        safe = client.get("/tokens/safe-names").json()
        assert safe["usdc"] == "USDC"


def test_token_lookup_is_case_insensitive(tmp_path):
    app, _ = build_app(tmp_path, FakeFetcher())
    with TestClient(app) as client:
        resp = client.get(f"/tokens/{DAI['address']}")
        assert resp.status_code == 200
        assert resp.json()["uniqueId"] == DAI["address"].lower()
        assert client.get("/tokens/0x0000000000000000000000000000000000000001").status_code == 404


def test_safety_check(tmp_path):
    app, _ = build_app(tmp_path, FakeFetcher())
    with TestClient(app) as client:
        assert client.get("/safety", params={"name": "Dai"}).json()["safe"] is True
        assert client.get("/safety", params={"name": "DAl"}).json()["safe"] is False
        assert client.get("/safety").status_code == 422


def test_update_endpoint_adopts_remote_list(tmp_path):
    response = FetchResponse(200, make_document(T3, [USDC]), {"etag": "v9"})
    app, store = build_app(tmp_path, FakeFetcher([response]))
    with TestClient(app) as client:
        resp = client.post("/tokens/update")
        assert resp.status_code == 200
        assert resp.json() == {"outcome": "updated", "detail": None}
        assert client.get("/status").json()["timestamp"].startswith("2021-06-01")
        assert DAI["address"].lower() not in {t["address"] for t in client.get("/tokens").json()}


def test_update_endpoint_reports_failure_as_outcome(tmp_path):
    app, store = build_app(tmp_path, FakeFetcher(exc=FetchError("boom")))
    with TestClient(app) as client:
        resp = client.post("/tokens/update")
        assert resp.status_code == 200
        assert resp.json()["outcome"] == "error"
        assert "boom" in resp.json()["detail"]


def test_shutdown_closes_fetcher(tmp_path):
    fetcher = FakeFetcher()
    app, _ = build_app(tmp_path, fetcher)
    with TestClient(app):
        pass
    assert fetcher.closed


def test_prometheus_endpoint(tmp_path):
    app, _ = build_app(tmp_path, FakeFetcher(), metrics=True)
    with TestClient(app) as client:
        client.get("/health")
        body = client.get("/metrics/prometheus").text
        assert "tokenlist_document_timestamp_seconds" in body
