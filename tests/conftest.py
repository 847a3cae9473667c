import pytest

from tokenlist.engine import store
from tokenlist.persistence import JsonFileCache, cache as cache_module
from tokenlist.schema import TokenListDocument

from tests.fakes import T0, make_document


@pytest.fixture(autouse=True)
def _reset_metrics():
    store.reset_metrics()
    cache_module.reset_metrics()
    yield


@pytest.fixture
def cache(tmp_path):
    return JsonFileCache(str(tmp_path / "cache"))


@pytest.fixture
def baseline():
    return TokenListDocument.from_dict(make_document(T0))
