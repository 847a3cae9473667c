"""Configuration management utilities."""

from dataclasses import dataclass
import argparse
import os
from typing import Optional, List

DEFAULT_TOKEN_LIST_URL = (
    "https://metadata.p.rainbow.me/token-list/rainbow-token-list.json"
)


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments or provided list."""
    parser = argparse.ArgumentParser(description="token list cache configuration")
    parser.add_argument(
        "--token-list-url",
        default=os.getenv("TOKEN_LIST_URL", DEFAULT_TOKEN_LIST_URL),
        help="Remote token list location",
    )
    parser.add_argument(
        "--cache-dir",
        default=os.getenv(
            "TOKEN_LIST_CACHE_DIR", os.path.expanduser("~/.tokenlist/cache")
        ),
        help="Directory holding the cached list and its ETag",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=float(os.getenv("TOKEN_LIST_TIMEOUT", "10")),
        help="HTTP timeout in seconds for the remote fetch",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "127.0.0.1"),
        help="API bind address",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="API port",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Refresh from the remote list after loading the cache",
    )
    return parser.parse_args(args)


@dataclass
class TokenListConfig:
    token_list_url: str
    cache_dir: str
    log_level: str = "INFO"
    request_timeout: float = 10.0
    host: str = "127.0.0.1"
    port: int = 8000
    refresh: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "TokenListConfig":
        return cls(
            token_list_url=args.token_list_url,
            cache_dir=args.cache_dir,
            log_level=args.log_level,
            request_timeout=args.request_timeout,
            host=args.host,
            port=args.port,
            refresh=args.refresh,
        )
