from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from ..config import Settings
from ..protocol.http.app import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the bitboard chess engine over HTTP")
    parser.add_argument("--host", type=str, default=None, help="Bind address (env BBCHESS_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (env BBCHESS_PORT)")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (env BBCHESS_LOG_LEVEL)")
    parser.add_argument(
        "--strict-fen",
        action="store_true",
        default=None,
        help="Reject malformed FEN by default (env BBCHESS_STRICT_FEN)",
    )
    parser.add_argument("--max-boards", type=int, default=None, help="Cap on live boards (env BBCHESS_MAX_BOARDS)")
    return parser


def resolve_settings(argv: Optional[List[str]] = None) -> Settings:
    """Environment settings with any CLI flags applied on top."""
    args = build_parser().parse_args(argv)
    overrides = {
        k: v
        for k, v in {
            "host": args.host,
            "port": args.port,
            "log_level": args.log_level,
            "strict_fen": args.strict_fen,
            "max_boards": args.max_boards,
        }.items()
        if v is not None
    }
    base = Settings.from_env()
    return Settings.model_validate({**base.model_dump(), **overrides})


def main(argv: Optional[List[str]] = None) -> None:
    settings = resolve_settings(argv)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
