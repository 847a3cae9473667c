"""Run the token list HTTP API server."""

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent))

import logging

import uvicorn

from tokenlist import build_store
from tokenlist.server import create_app
from tokenlist.utils import parse_args, TokenListConfig


def main() -> None:
    args = parse_args()
    cfg = TokenListConfig.from_args(args)
    logging.basicConfig(level=getattr(logging, cfg.log_level.upper(), logging.INFO))
    store = build_store(cfg)
    app = create_app(cfg, store)
    uvicorn.run(app, host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    main()
