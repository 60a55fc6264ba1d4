"""Entry-point for the Kite MCP Server."""
import argparse
import logging

import uvicorn

from .config import settings
from .logger import setup_logging


def _run_mcp_stdio():
    from .server import build_mcp_server

    logging.info("Starting Kite MCP Server (stdio transport)")
    build_mcp_server().run(transport="stdio")


def _run_rest_api():
    """Start the HTTP app (passes the app object directly)."""
    from .api import app as rest_app

    logging.info("Starting HTTP API on %s:%s", settings.server_host, settings.server_port)
    uvicorn.run(
        rest_app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


def main():
    setup_logging(settings.log_level)

    parser = argparse.ArgumentParser(description="Kite MCP Server")
    parser.add_argument(
        "--mode",
        choices=["rest", "mcp-stdio"],
        default="rest",
        help="rest | mcp-stdio",
    )
    args = parser.parse_args()

    if args.mode == "mcp-stdio":
        _run_mcp_stdio()
    else:
        _run_rest_api()


if __name__ == "__main__":
    main()
