"""
Command-line entrypoint.

    python -m openfoodfacts_mcp                    # MCP over stdio
    python -m openfoodfacts_mcp --transport http   # HTTP API on MCP_HOST:MCP_PORT
"""

import argparse
import asyncio
import sys

from .config import configure_logging, load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openfoodfacts-mcp",
        description="Open Food Facts tools over MCP",
    )
    parser.add_argument("--transport", choices=("stdio", "http"), default="stdio",
                        help="Transport to serve on (default: stdio)")
    parser.add_argument("--host", type=str, default=None, help="HTTP bind host (overrides MCP_HOST)")
    parser.add_argument("--port", type=int, default=None, help="HTTP bind port (overrides MCP_PORT)")
    parser.add_argument("--base-url", type=str, default=None,
                        help="Open Food Facts base URL (overrides OFF_BASE_URL)")
    parser.add_argument("--log-level", type=str, default=None,
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
                        help="Logging level (overrides LOG_LEVEL)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings().with_overrides(
        host=args.host,
        port=args.port,
        base_url=args.base_url.rstrip("/") if args.base_url else None,
        log_level=args.log_level,
    )

    if args.transport == "stdio":
        configure_logging(settings.log_level, stream=sys.stderr)
        from .stdio import run_stdio

        asyncio.run(run_stdio(settings))
    else:
        configure_logging(settings.log_level)
        from .server import main as run_http

        run_http(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
