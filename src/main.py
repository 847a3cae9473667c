"""Entry point for one-shot token list refreshes.

Loads the cached list, optionally refreshes it from the remote source and
prints a one-line summary of the accepted document.
"""

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent))

import asyncio
import logging

from tokenlist import build_store
from tokenlist.utils import parse_args, TokenListConfig


async def run(cfg: TokenListConfig) -> str:
    store = build_store(cfg)
    try:
        await store.initialize()
        outcome = "skipped"
        if cfg.refresh:
            result = await store.update()
            outcome = result.outcome.value
    finally:
        await store.aclose()
    return (
        f"{store.document.timestamp} tokens={len(store.get_full_list())} "
        f"curated={len(store.get_curated())} outcome={outcome}"
    )


def main() -> None:
    args = parse_args()
    cfg = TokenListConfig.from_args(args)
    logging.basicConfig(level=getattr(logging, cfg.log_level.upper(), logging.INFO))
    print(asyncio.run(run(cfg)))


if __name__ == "__main__":
    main()
