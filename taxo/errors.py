# =============================================================================
# taxo/errors.py  —  Error Taxonomy
# =============================================================================
#
# Every failure a tool call can produce is one of four kinds:
#
#   ValidationError        → caller arguments do not match the tool's schema
#   UpstreamError          → the Taxo API answered with a non-2xx status
#   TransportError         → no response at all (DNS, connect, timeout, ...)
#   UnknownOperationError  → the tool name is not in the catalog
#
# Each error knows how to render itself as the JSON payload that goes into
# an error envelope.  Keys whose value is None are left out, so a
# TransportError never carries a bogus "statusCode": null.
# =============================================================================

from typing import Any


class TaxoError(Exception):
    """Base class for every error the dispatcher knows how to classify."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": True, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(TaxoError):
    """Raised when tool arguments fail their schema.  Never reaches upstream."""


class UpstreamError(TaxoError):
    """The Taxo API responded, but with a non-success status code.

    ``details`` holds the parsed JSON body when the body is JSON, otherwise
    the raw response text.
    """

    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(message, details)
        self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": True,
            "message": self.message,
            "statusCode": self.status_code,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class TransportError(TaxoError):
    """The request never produced a response (network failure or timeout)."""


class UnknownOperationError(TaxoError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ConfigError(Exception):
    """Invalid process configuration.  Raised at startup, never per request."""
