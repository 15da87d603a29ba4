# =============================================================================
# taxo/__init__.py
# =============================================================================
# This package contains ALL domain logic for the Taxo MX MCP server.
#
# CRITICAL ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP, Starlette, or any transport.
#   The upstream client, the tool catalog, the argument validators and the
#   dispatcher are plain Python + httpx + pydantic.  The taxo_mcp/ package
#   wraps them for the MCP runtime; this package never knows it exists.
# =============================================================================

SERVER_NAME = "taxo-mx-mcp"
SERVER_VERSION = "1.0.0"
