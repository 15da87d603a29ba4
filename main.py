# =============================================================================
# main.py  —  Entry Point for the Taxo MX MCP HTTP Server
# =============================================================================
#
# HOW TO RUN:
#   taxo-mx-mcp                 (installed console script)
#   python main.py              (from a checkout)
#
# WHAT HAPPENS:
#   1. Settings are loaded from the environment (and .env, if present)
#   2. The stateless HTTP app is built (taxo_mcp/http.py)
#   3. uvicorn serves it on HOST:PORT
#
# CONNECTING A CLIENT:
#   Point any MCP client that speaks Streamable HTTP at either
#     <BASE_URL>/mcp/<YOUR_TOKEN>
#   or
#     <BASE_URL>/mcp   with header   Authorization: Bearer <YOUR_TOKEN>
#
# For local, single-account use over stdin/stdout see taxo_mcp/stdio.py.
# =============================================================================

import logging
import sys

import uvicorn

from taxo.config import load_settings
from taxo.errors import ConfigError
from taxo_mcp.http import create_http_app
from taxo_mcp.server import configure_logging

logger = logging.getLogger("taxo_mcp")


def run() -> None:
    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level)
    app = create_http_app(settings)

    logger.info(f"Taxo MX MCP Server running on {settings.base_url} (stateless mode)")
    logger.info(f"MCP endpoint: {settings.base_url}/mcp")
    logger.info(f"Health check: {settings.base_url}/health")
    logger.info("Provide token via Authorization: Bearer header or URL path (/mcp/YOUR_TOKEN)")

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
