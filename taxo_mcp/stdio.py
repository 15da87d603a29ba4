# =============================================================================
# taxo_mcp/stdio.py  —  Stdio Transport (local process embedding)
# =============================================================================
#
# HOW TO RUN:
#   taxo-mx-mcp-stdio --token <YOUR_TAXO_TOKEN>
#   TAXO_MX_TOKEN=<YOUR_TAXO_TOKEN> python -m taxo_mcp.stdio
#
# WHAT HAPPENS:
#   1. The token is resolved ONCE: --token first, then TAXO_MX_TOKEN
#   2. One TaxoMxClient, one Dispatcher and one FastMCP server are built
#   3. The server speaks MCP over stdin/stdout until the host closes it
#
# The assistant host (Claude Desktop, an IDE, an agent framework) starts
# this as a subprocess.  Logs go to stderr; stdout belongs to the protocol.
# =============================================================================

import argparse
import logging
import sys
from typing import Sequence

from taxo.client import TaxoMxClient
from taxo.config import TOKEN_ENV_VAR, load_settings, resolve_stdio_token
from taxo.dispatcher import Dispatcher
from taxo.errors import ConfigError
from taxo_mcp.server import configure_logging, create_server

logger = logging.getLogger("taxo_mcp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taxo-mx-mcp-stdio",
        description="Serve the Taxo MX tools over MCP stdio.",
    )
    parser.add_argument("--token", help=f"Taxo API token (defaults to ${TOKEN_ENV_VAR})")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args, _ = build_parser().parse_known_args(argv)
    try:
        settings = load_settings(http=False)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    configure_logging(settings.log_level)

    token = resolve_stdio_token(args.token, settings)
    if not token:
        print("Error: Taxo MX token required", file=sys.stderr)
        print(f"Provide via --token argument or {TOKEN_ENV_VAR} environment variable", file=sys.stderr)
        sys.exit(1)

    # Built once, lives as long as the process.
    client = TaxoMxClient(
        token,
        app_base_url=settings.app_base_url,
        demo_base_url=settings.demo_base_url,
        timeout=settings.timeout_seconds,
    )
    dispatcher = Dispatcher(client)
    server = create_server(lambda: dispatcher)

    logger.info("Taxo MX MCP server running on stdio")
    server.run(transport="stdio", show_banner=False)


if __name__ == "__main__":
    main()
