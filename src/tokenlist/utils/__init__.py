"""Generic utility functions."""

from .config import DEFAULT_TOKEN_LIST_URL, TokenListConfig, parse_args

__all__ = [
    "DEFAULT_TOKEN_LIST_URL",
    "TokenListConfig",
    "parse_args",
]
