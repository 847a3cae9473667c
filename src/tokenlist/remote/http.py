"""Conditional HTTP fetch of the remote token list."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import httpx

NOT_MODIFIED = 304


class FetchError(RuntimeError):
    """Transport failure or unexpected response from the token list host."""


@dataclass
class FetchResponse:
    status: int
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def etag(self) -> Optional[str]:
        return self.headers.get("etag")


class TokenListFetcher:
    async def fetch(
        self, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> FetchResponse:  # pragma: no cover - interface
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class HttpxFetcher(TokenListFetcher):
    """Fetch token lists with ``httpx``.

    Only 200 and 304 are treated as valid answers. Anything else, as well as
    network errors and undecodable bodies, raises :class:`FetchError`.
    """

    def __init__(
        self, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0
    ) -> None:
        self._owns_client = client is None
        self.session = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "HttpxFetcher":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.session.aclose()

    async def fetch(
        self, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> FetchResponse:
        try:
            resp = await self.session.get(url, headers=dict(headers or {}))
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {url} failed: {exc}") from exc
        resp_headers = {k.lower(): v for k, v in resp.headers.items()}
        if resp.status_code == NOT_MODIFIED:
            return FetchResponse(status=NOT_MODIFIED, headers=resp_headers)
        if resp.status_code != 200:
            raise FetchError(f"GET {url} returned HTTP {resp.status_code}")
        try:
            data = resp.json()
        except json.JSONDecodeError as exc:
            raise FetchError(f"GET {url} returned invalid JSON: {exc}") from exc
        return FetchResponse(status=resp.status_code, data=data, headers=resp_headers)
