from __future__ import annotations

import argparse
from dataclasses import replace
from typing import List, Optional

import uvicorn

from src.config import EngineConfig


def main(argv: Optional[List[str]] = None) -> None:
    config = EngineConfig.from_env()
    parser = argparse.ArgumentParser(description="Serve the hex chess engine over HTTP")
    parser.add_argument("--host", default=config.host)
    parser.add_argument("--port", type=int, default=config.port)
    parser.add_argument("--log-level", default=config.log_level)
    args = parser.parse_args(argv)

    config = replace(config, host=args.host, port=args.port, log_level=args.log_level.upper())
    config.configure_logging()
    uvicorn.run(
        "src.protocol.http.app:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
