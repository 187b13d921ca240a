from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

import uvicorn
from pydantic import ValidationError

from tapebf.config import InterpreterConfig

from .app import create_app


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run the tapebf HTTP API server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
    parser.add_argument(
        "--max-operations",
        type=int,
        default=None,
        help="Server-wide operation ceiling (default: $TAPEBF_MAX_OPERATIONS or 100000)",
    )
    parser.add_argument("--log-level", default="info", help="Log level for the server (default: info)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    try:
        config = InterpreterConfig.from_env().override(args.max_operations)
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    app = create_app(config=config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
