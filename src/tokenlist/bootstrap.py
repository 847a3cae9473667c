from __future__ import annotations

import logging
from typing import Optional

from .engine import TokenListStore
from .persistence import JsonFileCache
from .remote import HttpxFetcher, TokenListFetcher
from .service import Publisher
from .utils import TokenListConfig


def build_store(
    cfg: TokenListConfig,
    fetcher: Optional[TokenListFetcher] = None,
    publisher: Optional[Publisher] = None,
) -> TokenListStore:
    """Wire a store from configuration.

    When called inside a running event loop the startup cache read is
    scheduled immediately; otherwise it starts on the first
    :meth:`TokenListStore.initialize` call.
    """

    logger = logging.getLogger("tokenlist")
    return TokenListStore(
        fetcher or HttpxFetcher(timeout=cfg.request_timeout),
        JsonFileCache(cfg.cache_dir, logger=logger),
        cfg.token_list_url,
        publisher=publisher,
        logger=logger,
    )
