from .http import FetchError, FetchResponse, HttpxFetcher, NOT_MODIFIED, TokenListFetcher

__all__ = [
    "FetchError",
    "FetchResponse",
    "HttpxFetcher",
    "NOT_MODIFIED",
    "TokenListFetcher",
]
