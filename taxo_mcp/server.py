# =============================================================================
# taxo_mcp/server.py  —  FastMCP Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the FastMCP server that both transports serve.  Every entry of
#   taxo.catalog.TOOLS becomes one MCP tool; every tool call is handed to a
#   taxo.dispatcher.Dispatcher.
#
# HOW IT WORKS (the flow):
#   1. An MCP client calls a tool by name (e.g., "get_tax_status")
#   2. FastMCP routes the call to the matching CatalogTool below
#      (names outside the catalog are caught by UnknownToolGuard first)
#   3. The tool asks its dispatcher factory for a Dispatcher
#        - stdio: always the same one, built at startup
#        - HTTP:  a fresh one, built from the current request's token
#   4. The dispatcher validates, calls Taxo, and returns an envelope
#   5. Success → text content.  Failure → ToolError, which the MCP runtime
#      turns into a result with isError: true and the same text
#
# WHY NOT @mcp.tool() DECORATORS?
#   Decorated functions get their schema inferred from Python signatures.
#   Our schemas are a fixed protocol contract that lives in taxo/catalog.py,
#   so each tool is registered from its descriptor instead.
# =============================================================================

import json
import logging
import sys
from typing import Any, Callable

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent

from taxo import SERVER_NAME, SERVER_VERSION
from taxo.catalog import TOOLS, get_tool
from taxo.dispatcher import Dispatcher
from taxo.models import ToolDescriptor, ToolEnvelope

DispatcherFactory = Callable[[], Dispatcher]

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the stdio transport speaks MCP over STDOUT.  A
# single stray log line on stdout would corrupt the JSON-RPC stream.
#
# ANSI COLOR CODES:
#     - CYAN for incoming tool calls (name + arguments)
#     - YELLOW for intermediate status
#     - GREEN for successful responses
#     - RED for error envelopes
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"

# Never written to logs, whatever the log level.
_SENSITIVE_ARGUMENTS = {"ciec"}

logger = logging.getLogger("taxo_mcp")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _redact(arguments: dict[str, Any]) -> dict[str, Any]:
    return {k: ("***" if k in _SENSITIVE_ARGUMENTS else v) for k, v in arguments.items()}


def _log_request(tool_name: str, arguments: dict[str, Any]) -> None:
    """Log an incoming tool call with its (redacted) arguments in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in _redact(arguments).items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, envelope: ToolEnvelope) -> ToolEnvelope:
    """Log the envelope compactly (GREEN on success, RED on error), then return it."""
    try:
        compact = json.dumps(json.loads(envelope.text), separators=(",", ":"), ensure_ascii=False)
    except ValueError:
        compact = envelope.text
    if envelope.is_error:
        logger.info(f"{_RED}  ← {tool_name} error: {compact}{_RESET}")
    else:
        logger.debug(f"{_GREEN}  ← {tool_name} response: {compact}{_RESET}")
        _log_status(f"{tool_name} succeeded ({len(envelope.text)} chars)")
    return envelope


# =============================================================================
# CatalogTool — one MCP tool backed by a catalog descriptor
# =============================================================================
class CatalogTool(Tool):
    """An MCP tool whose schema comes from the catalog and whose work is
    done by a Dispatcher."""

    dispatcher_factory: Callable[[], Any]

    @classmethod
    def from_descriptor(cls, descriptor: ToolDescriptor, dispatcher_factory: DispatcherFactory) -> "CatalogTool":
        return cls(
            name=descriptor.name,
            description=descriptor.description,
            parameters=descriptor.input_schema,
            dispatcher_factory=dispatcher_factory,
        )

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        arguments = arguments or {}
        _log_request(self.name, arguments)

        dispatcher = self.dispatcher_factory()
        envelope = _log_response(self.name, await dispatcher.dispatch(self.name, arguments))

        if envelope.is_error:
            raise ToolError(envelope.text)
        return ToolResult(content=[TextContent(type="text", text=envelope.text)])


# =============================================================================
# UnknownToolGuard — names outside the catalog still get a JSON envelope
# =============================================================================
# FastMCP rejects unregistered tool names before any CatalogTool runs, with
# a plain-text "Unknown tool" message.  This middleware intercepts those
# calls first and lets the Dispatcher produce its usual error envelope.
class UnknownToolGuard(Middleware):
    def __init__(self, dispatcher_factory: DispatcherFactory):
        self.dispatcher_factory = dispatcher_factory

    async def on_call_tool(self, context: MiddlewareContext, call_next):
        name = context.message.name
        if get_tool(name) is not None:
            return await call_next(context)

        arguments = context.message.arguments or {}
        _log_request(name, arguments)
        envelope = _log_response(name, await self.dispatcher_factory().dispatch(name, arguments))
        raise ToolError(envelope.text)


# =============================================================================
# Server factory
# =============================================================================
def create_server(dispatcher_factory: DispatcherFactory) -> FastMCP:
    """Create the FastMCP server exposing every catalog tool.

    Args:
        dispatcher_factory: Called once per tool call to obtain the
            Dispatcher that runs it.  The stdio transport returns a single
            long-lived instance; the HTTP transport builds a new one from
            the current request's token.
    """
    mcp = FastMCP(SERVER_NAME, version=SERVER_VERSION)
    mcp.add_middleware(UnknownToolGuard(dispatcher_factory))
    for descriptor in TOOLS:
        mcp.add_tool(CatalogTool.from_descriptor(descriptor, dispatcher_factory))
    return mcp
