# =============================================================================
# taxo/client.py  —  Taxo REST API Client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns named domain operations ("get the tax status of RFC X") into HTTP
#   calls against the Taxo platform.  One method per operation, nothing
#   more: no retries, no caching, no interpretation of the response.
#
# TWO UPSTREAM HOSTS:
#   The Taxo API is split across two base URLs, and the routing is fixed:
#     - app  (primary)   → extractions and taxpayer management
#     - demo (secondary) → tax reports, contacts, invoices, categories
#   Both default to the production hosts and can be overridden for staging.
#
# ERROR TRANSLATION:
#   The client is the ONLY place that knows about HTTP.  Everything it
#   raises is one of the domain errors from taxo/errors.py:
#     - the server answered with a non-2xx status  → UpstreamError
#     - the request never got an answer           → TransportError
#   Callers can tell "Taxo said no" apart from "we never reached Taxo".
#
# LIFECYCLE:
#   A TaxoMxClient is cheap.  It holds a token and two URLs.  Every request
#   opens its own httpx.AsyncClient and closes it when the response is read,
#   so an instance can be created per HTTP request and simply dropped.
# =============================================================================

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from taxo.config import DEFAULT_APP_BASE_URL, DEFAULT_DEMO_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from taxo.errors import TransportError, UpstreamError

logger = logging.getLogger(__name__)

# Optional invoice filters, in the order the API documents them.
INVOICE_FILTERS = (
    "type",
    "year",
    "month",
    "status",
    "category",
    "search",
    "issuer",
    "paymentType",
    "paymentWay",
)


def _segment(value: str) -> str:
    """Percent-encode a caller-supplied value used as a single path segment."""
    return quote(value, safe="")


class TaxoMxClient:
    """Async client for the Taxo MX API, bound to one bearer token."""

    def __init__(
        self,
        token: str,
        app_base_url: str | None = None,
        demo_base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not token:
            raise ValueError("A Taxo API token is required")
        self._token = token
        self.app_base_url = (app_base_url or DEFAULT_APP_BASE_URL).rstrip("/")
        self.demo_base_url = (demo_base_url or DEFAULT_DEMO_BASE_URL).rstrip("/")
        self._timeout = timeout
        # Only tests set this (httpx.MockTransport); production uses the default.
        self._transport = transport

    # -------------------------------------------------------------------------
    # Opinión de Cumplimiento (Compliance Opinion)
    # -------------------------------------------------------------------------

    async def extract_compliance_opinion_by_rfc(self, rfc: str) -> Any:
        return await self._request(
            self.app_base_url, "/api/extractions/oc/client", method="POST", body={"rfc": rfc}
        )

    async def extract_compliance_opinion_by_accountant(self, accountant_id: str) -> Any:
        return await self._request(
            self.app_base_url,
            "/api/extractions/oc/accountant",
            method="POST",
            body={"accountant_id": accountant_id},
        )

    async def extract_compliance_opinion_all(self) -> Any:
        return await self._request(self.app_base_url, "/api/extractions/oc/extract-all", method="POST")

    async def get_compliance_opinion(self, rfc: str) -> Any:
        return await self._request(self.app_base_url, f"/api/extractions/oc/client/{_segment(rfc)}")

    # -------------------------------------------------------------------------
    # Constancia de Situación Fiscal (Tax Status Certificate)
    # -------------------------------------------------------------------------

    async def extract_tax_status_by_rfc(self, rfc: str) -> Any:
        return await self._request(
            self.app_base_url, "/api/extractions/csf/client", method="POST", body={"rfc": rfc}
        )

    async def extract_tax_status_by_accountant(self, accountant_id: str) -> Any:
        return await self._request(
            self.app_base_url,
            "/api/extractions/csf/accountant",
            method="POST",
            body={"accountant_id": accountant_id},
        )

    async def extract_tax_status_all(self) -> Any:
        return await self._request(self.app_base_url, "/api/extractions/csf/extract-all", method="POST")

    async def get_tax_status(self, rfc: str) -> Any:
        return await self._request(self.app_base_url, f"/api/extractions/csf/client/{_segment(rfc)}")

    # -------------------------------------------------------------------------
    # CFDI (electronic invoices)
    # -------------------------------------------------------------------------

    async def extract_cfdi_by_rfc(
        self, rfc: str, start_date: str, end_date: str, extraction_type: str
    ) -> Any:
        """Request a CFDI extraction for one taxpayer.

        Args:
            rfc: Taxpayer RFC.
            start_date / end_date: Date range, passed through untouched.
            extraction_type: "all", "issued" or "received".  The validators
                enforce the enumeration before we get here.
        """
        return await self._request(
            self.app_base_url,
            "/api/extractions/cfdi/client",
            method="POST",
            body={
                "rfc": rfc,
                "start_date": start_date,
                "end_date": end_date,
                "extraction_type": extraction_type,
            },
        )

    async def extract_cfdi_by_accountant(self, accountant_id: str, start_date: str, end_date: str) -> Any:
        return await self._request(
            self.app_base_url,
            "/api/extractions/cfdi/accountant",
            method="POST",
            body={
                "accountant_id": accountant_id,
                "start_date": start_date,
                "end_date": end_date,
            },
        )

    # -------------------------------------------------------------------------
    # Reports, contacts, invoices, categories (secondary host)
    # -------------------------------------------------------------------------

    async def get_monthly_tax_report(self, rfc: str, year: str, month: str) -> Any:
        path = f"/api/v1/tax-reports/monthly/{_segment(rfc)}/{_segment(year)}/{_segment(month)}"
        return await self._request(self.demo_base_url, path)

    async def get_contacts(self, rfc: str) -> Any:
        return await self._request(self.demo_base_url, f"/api/v1/contacts/{_segment(rfc)}")

    async def get_invoices(self, rfc: str, **filters: str | None) -> Any:
        """List invoices for a taxpayer.

        Only filters with a truthy value make it into the query string, so
        ``status=""`` and a missing ``status`` produce the same request.
        Unknown filter names raise TypeError; the validators never pass any.
        """
        unknown = set(filters) - set(INVOICE_FILTERS)
        if unknown:
            raise TypeError(f"Unknown invoice filters: {', '.join(sorted(unknown))}")

        params = {key: filters[key] for key in INVOICE_FILTERS if filters.get(key)}
        return await self._request(self.demo_base_url, f"/api/v1/invoices/{_segment(rfc)}", params=params)

    async def get_categories(self) -> Any:
        return await self._request(self.demo_base_url, "/api/categorization/categories")

    # -------------------------------------------------------------------------
    # Taxpayer management
    # -------------------------------------------------------------------------

    async def create_taxpayer(self, accountant_id: str, rfc: str, ciec: str) -> Any:
        return await self._request(
            self.app_base_url,
            f"/api/v1/accountant/{_segment(accountant_id)}/clients",
            method="POST",
            body={"rfc": rfc, "ciec": ciec},
        )

    # -------------------------------------------------------------------------
    # The single HTTP round-trip every method above goes through
    # -------------------------------------------------------------------------

    async def _request(
        self,
        base_url: str,
        path: str,
        method: str = "GET",
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }
        content = json.dumps(body).encode() if body is not None else None

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.request(
                    method,
                    f"{base_url}{path}",
                    headers=headers,
                    content=content,
                    params=params or None,
                )
        except httpx.RequestError as e:
            logger.error(f"Taxo request {method} {path} failed: {type(e).__name__}")
            raise TransportError(f"Failed to reach the Taxo API: {type(e).__name__}") from e

        if not resp.is_success:
            logger.warning(f"Taxo API {method} {path} returned {resp.status_code}")
            raise UpstreamError(
                resp.status_code,
                f"API request failed: {resp.reason_phrase}",
                _error_details(resp),
            )

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            raise UpstreamError(
                resp.status_code, "API returned a non-JSON response", resp.text
            ) from None


def _error_details(resp: httpx.Response) -> Any:
    """Parsed JSON body when possible, otherwise the raw text."""
    try:
        return resp.json()
    except ValueError:
        return resp.text
