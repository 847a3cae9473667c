"""FastAPI application exposing the accepted token list.

Every read endpoint serves the store's current snapshot without I/O.

Endpoints:
* ``GET /health`` – service liveness
* ``GET /status`` – accepted list version and refresh state
* ``GET /tokens`` – every token, native asset first
* ``GET /tokens/curated`` – curated tokens
* ``GET /tokens/safe-names`` – lowercased curated names/symbols
* ``GET /tokens/{address}`` – single token lookup
* ``GET /safety`` – whether a name or symbol belongs to a curated token
* ``POST /tokens/update`` – refresh from the remote list
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from pydantic import BaseModel, ConfigDict

from ..engine import TokenListStore, UpdateOutcome
from ..utils import TokenListConfig

logger = logging.getLogger(__name__)


class TokenModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    address: str
    uniqueId: str
    decimals: Optional[int] = None
    name: Optional[str] = None
    symbol: Optional[str] = None


class StatusResponse(BaseModel):
    timestamp: Optional[datetime]
    tokens: int
    curated: int
    ready: bool
    refreshing: bool


class SafetyResponse(BaseModel):
    name: str
    safe: bool


class UpdateResponse(BaseModel):
    outcome: UpdateOutcome
    detail: Optional[str] = None


def create_app(
    cfg: TokenListConfig,
    store: TokenListStore,
    metrics: bool = True,
) -> FastAPI:
    app = FastAPI(title="token list API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    if metrics:
        Instrumentator().instrument(app).expose(
            app, endpoint="/metrics/prometheus", include_in_schema=False
        )
    app.state.store = store
    background: List[asyncio.Task] = []

    @app.on_event("startup")
    async def load_cache() -> None:
        adopted = await store.initialize()
        logger.info(
            "token list ready: %s (cache adopted=%s)", store.document.timestamp, adopted
        )
        if cfg.refresh:
            background.append(asyncio.create_task(store.update()))

    @app.on_event("shutdown")
    async def close_fetcher() -> None:
        for task in background:
            if not task.done():
                task.cancel()
        await store.aclose()

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/status", response_model=StatusResponse)
    async def status() -> StatusResponse:
        indices = store.indices
        return StatusResponse(
            timestamp=store.document.timestamp,
            tokens=len(indices.full),
            curated=len(indices.curated),
            ready=store.ready,
            refreshing=store.refreshing,
        )

    @app.get("/tokens", response_model=List[TokenModel])
    async def tokens() -> list:
        return [dict(t) for t in store.get_full_list().values()]

    @app.get("/tokens/curated", response_model=List[TokenModel])
    async def curated_tokens() -> list:
        return [dict(t) for t in store.get_curated().values()]

    @app.get("/tokens/safe-names", response_model=Dict[str, str])
    async def safe_names() -> Dict[str, str]:
        return dict(store.get_safe_names())

    @app.get("/tokens/{address}", response_model=TokenModel)
    async def token(address: str) -> dict:
        found = store.get_token(address)
        if found is None:
            raise HTTPException(status_code=404, detail="unknown token")
        return dict(found)

    @app.get("/safety", response_model=SafetyResponse)
    async def safety(name: str = Query(..., min_length=1)) -> SafetyResponse:
        return SafetyResponse(name=name, safe=store.is_safe_name(name))

    @app.post("/tokens/update", response_model=UpdateResponse)
    async def update() -> UpdateResponse:
        result = await store.update()
        detail = str(result.error) if result.error is not None else None
        return UpdateResponse(outcome=result.outcome, detail=detail)

    return app
