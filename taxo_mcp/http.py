# =============================================================================
# taxo_mcp/http.py  —  Stateless HTTP Transport (remote, multi-tenant)
# =============================================================================
#
# ROUTES:
#   GET  /health        → liveness probe, no auth
#   POST /mcp/{token}   → one MCP exchange, token taken from the path
#   POST /mcp           → one MCP exchange, token from "Authorization: Bearer"
#
#   Any other method on /mcp* → 405.  No token at all → 401 with a hint.
#
# STATELESS BY CONSTRUCTION:
#   The HTTP transport serves many Taxo accounts from one process.  No
#   session id is issued and nothing is remembered between requests:
#     1. TokenResolver reads the token and stashes it in the request scope
#     2. FastMCP (stateless mode) handles the JSON-RPC message
#     3. When a tool runs, it builds a NEW TaxoMxClient + Dispatcher from
#        that request's token, uses it once, and drops it
#   Two concurrent requests for two different accounts can never see each
#   other's token or client.
#
# CORS:
#   Fully open.  The bearer token is the trust boundary, not the origin.
# =============================================================================

import logging
from typing import Callable

from fastmcp.server.dependencies import get_http_request
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from taxo import SERVER_NAME, SERVER_VERSION
from taxo.client import TaxoMxClient
from taxo.config import Settings
from taxo.dispatcher import Dispatcher
from taxo_mcp.server import create_server

logger = logging.getLogger("taxo_mcp")

MCP_PATH = "/mcp"
TOKEN_STATE_KEY = "taxo_token"

ClientFactory = Callable[[str], TaxoMxClient]

AUTH_HINT = "Provide token in URL path (/mcp/YOUR_TOKEN) or Authorization: Bearer header"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


class TokenResolver:
    """ASGI middleware guarding /mcp and /mcp/{token}.

    Resolves the caller's token (path segment wins over the Authorization
    header), rewrites /mcp/{token} to /mcp so FastMCP's single route
    handles both, and stores the token in ``scope["state"]`` where the
    per-request dispatcher factory can find it.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        if path == MCP_PATH or path == MCP_PATH + "/":
            path_token = None
        elif path.startswith(MCP_PATH + "/") and "/" not in path[len(MCP_PATH) + 1:]:
            path_token = path[len(MCP_PATH) + 1:]
        else:
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        if method == "OPTIONS":
            await Response(status_code=200)(scope, receive, send)
            return
        if method != "POST":
            response = JSONResponse(
                {"error": "Method not allowed. Use POST for MCP requests."},
                status_code=405,
                headers={"Allow": "POST"},
            )
            await response(scope, receive, send)
            return

        token = path_token or extract_bearer_token(Request(scope).headers.get("authorization"))
        if not token:
            response = JSONResponse(
                {"error": "Authentication required", "hint": AUTH_HINT},
                status_code=401,
            )
            await response(scope, receive, send)
            return

        scope = dict(scope)
        scope["path"] = MCP_PATH
        scope["raw_path"] = MCP_PATH.encode()
        scope["state"] = {**(scope.get("state") or {}), TOKEN_STATE_KEY: token}
        await self.app(scope, receive, send)


def create_http_app(settings: Settings, client_factory: ClientFactory | None = None) -> Starlette:
    """Build the ASGI app for the HTTP transport.

    Args:
        settings: Upstream URLs and timeout used for every per-request client.
        client_factory: Builds a TaxoMxClient from a token.  Defaults to a
            real client configured from ``settings``; tests inject one backed
            by httpx.MockTransport.
    """
    if client_factory is None:
        def client_factory(token: str) -> TaxoMxClient:
            return TaxoMxClient(
                token,
                app_base_url=settings.app_base_url,
                demo_base_url=settings.demo_base_url,
                timeout=settings.timeout_seconds,
            )

    def request_dispatcher() -> Dispatcher:
        # Called inside a tool run: the MCP runtime exposes the HTTP
        # request being served, and TokenResolver already put the token in it.
        token = get_http_request().scope.get("state", {}).get(TOKEN_STATE_KEY)
        if not token:
            raise RuntimeError("No Taxo token bound to the current request")
        return Dispatcher(client_factory(token))

    mcp = create_server(request_dispatcher)

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> Response:
        return JSONResponse({"status": "ok", "server": SERVER_NAME, "version": SERVER_VERSION})

    return mcp.http_app(
        path=MCP_PATH,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=[
                    "Content-Type",
                    "Authorization",
                    "Accept",
                    "Mcp-Protocol-Version",
                    "Mcp-Session-Id",
                ],
            ),
            Middleware(TokenResolver),
        ],
        json_response=True,
        stateless_http=True,
    )
