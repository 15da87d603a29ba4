# =============================================================================
# taxo_mcp/__init__.py
# =============================================================================
# This package is the MCP "translation layer" around taxo/.
#
#   server.py → FastMCP server built from the shared tool catalog
#   stdio.py  → one token, one client, one process (local embedding)
#   http.py   → per-request token, per-request client (remote, stateless)
#
# Nothing here talks to Taxo directly; every tool call goes through
# taxo.dispatcher.Dispatcher.
# =============================================================================
