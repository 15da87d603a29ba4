"""Tests for the Dispatcher: one tool call in, one envelope out."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from taxo.dispatcher import Dispatcher
from tests.fixtures import (
    APP_BASE_URL,
    CATEGORIES,
    DEMO_BASE_URL,
    EXTRACTION_ACCEPTED,
    MONTHLY_TAX_REPORT,
    NOT_FOUND_BODY,
)

RFC = "ZAHM8212203I2"

# (tool, minimal arguments, host, method, path, expected JSON body)
ROUTES = [
    ("extract_compliance_opinion", {"rfc": RFC}, APP_BASE_URL, "POST", "/api/extractions/oc/client", {"rfc": RFC}),
    (
        "extract_compliance_opinion_by_accountant",
        {"accountantId": "2896"},
        APP_BASE_URL,
        "POST",
        "/api/extractions/oc/accountant",
        {"accountant_id": "2896"},
    ),
    ("extract_compliance_opinion_all", {}, APP_BASE_URL, "POST", "/api/extractions/oc/extract-all", None),
    ("get_compliance_opinion", {"rfc": RFC}, APP_BASE_URL, "GET", f"/api/extractions/oc/client/{RFC}", None),
    ("extract_tax_status", {"rfc": RFC}, APP_BASE_URL, "POST", "/api/extractions/csf/client", {"rfc": RFC}),
    (
        "extract_tax_status_by_accountant",
        {"accountantId": "2896"},
        APP_BASE_URL,
        "POST",
        "/api/extractions/csf/accountant",
        {"accountant_id": "2896"},
    ),
    ("extract_tax_status_all", {}, APP_BASE_URL, "POST", "/api/extractions/csf/extract-all", None),
    ("get_tax_status", {"rfc": RFC}, APP_BASE_URL, "GET", f"/api/extractions/csf/client/{RFC}", None),
    (
        "extract_cfdi",
        {"rfc": RFC, "startDate": "2025-01-01", "endDate": "2025-01-31", "extractionType": "received"},
        APP_BASE_URL,
        "POST",
        "/api/extractions/cfdi/client",
        {"rfc": RFC, "start_date": "2025-01-01", "end_date": "2025-01-31", "extraction_type": "received"},
    ),
    (
        "extract_cfdi_by_accountant",
        {"accountantId": "2896", "startDate": "2025-01-01", "endDate": "2025-01-31"},
        APP_BASE_URL,
        "POST",
        "/api/extractions/cfdi/accountant",
        {"accountant_id": "2896", "start_date": "2025-01-01", "end_date": "2025-01-31"},
    ),
    (
        "get_monthly_tax_report",
        {"rfc": RFC, "year": "2025", "month": "04"},
        DEMO_BASE_URL,
        "GET",
        f"/api/v1/tax-reports/monthly/{RFC}/2025/04",
        None,
    ),
    ("get_contacts", {"rfc": RFC}, DEMO_BASE_URL, "GET", f"/api/v1/contacts/{RFC}", None),
    ("get_invoices", {"rfc": RFC}, DEMO_BASE_URL, "GET", f"/api/v1/invoices/{RFC}", None),
    ("get_categories", {}, DEMO_BASE_URL, "GET", "/api/categorization/categories", None),
    (
        "create_taxpayer",
        {"accountantId": "2896", "rfc": RFC, "ciec": "secret"},
        APP_BASE_URL,
        "POST",
        "/api/v1/accountant/2896/clients",
        {"rfc": RFC, "ciec": "secret"},
    ),
]


@pytest.fixture
def dispatcher(client) -> Dispatcher:
    return Dispatcher(client)


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


def test_routes_cover_every_tool():
    from taxo.catalog import tool_names

    assert sorted(route[0] for route in ROUTES) == sorted(tool_names())


@pytest.mark.asyncio
@pytest.mark.parametrize("name,arguments,host,method,path,body", ROUTES)
async def test_tool_makes_exactly_one_documented_request(dispatcher, taxo_api, name, arguments, host, method, path, body):
    envelope = await dispatcher.dispatch(name, arguments)

    assert not envelope.is_error, envelope.text
    assert len(taxo_api.requests) == 1
    request = taxo_api.last
    assert request.method == method
    assert str(request.url) == f"{host}{path}"
    assert taxo_api.last_body() == body


@pytest.mark.asyncio
async def test_invoice_filters_reach_query_string(dispatcher, taxo_api):
    await dispatcher.dispatch(
        "get_invoices",
        {"rfc": RFC, "type": "I", "month": "", "category": "Nómina", "paymentWay": "03", "page": "2"},
    )

    assert dict(taxo_api.last.url.params) == {"type": "I", "category": "Nómina", "paymentWay": "03"}


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_categories_success_envelope(dispatcher, taxo_api):
    taxo_api.reply(200, CATEGORIES)

    envelope = await dispatcher.dispatch("get_categories", {})

    assert envelope.is_error is False
    assert envelope.text == json.dumps(CATEGORIES, indent=2, ensure_ascii=False)
    assert envelope.to_dict() == {
        "content": [{"type": "text", "text": envelope.text}],
        "isError": False,
    }


@pytest.mark.asyncio
async def test_arbitrary_payload_round_trips(dispatcher, taxo_api):
    taxo_api.reply(200, MONTHLY_TAX_REPORT)

    envelope = await dispatcher.dispatch("get_monthly_tax_report", {"rfc": RFC, "year": "2025", "month": "04"})

    assert json.loads(envelope.text) == MONTHLY_TAX_REPORT


@pytest.mark.asyncio
async def test_upstream_404_envelope(dispatcher, taxo_api):
    taxo_api.reply(404, NOT_FOUND_BODY)

    envelope = await dispatcher.dispatch("get_compliance_opinion", {"rfc": RFC})

    assert envelope.is_error is True
    payload = json.loads(envelope.text)
    assert payload == {
        "error": True,
        "message": "API request failed: Not Found",
        "statusCode": 404,
        "details": {"detail": "not found"},
    }


@pytest.mark.asyncio
async def test_invalid_extraction_type_never_reaches_upstream(dispatcher, taxo_api):
    envelope = await dispatcher.dispatch(
        "extract_cfdi",
        {"rfc": RFC, "startDate": "2025-01-01", "endDate": "2025-01-31", "extractionType": "cancelled"},
    )

    assert envelope.is_error is True
    payload = json.loads(envelope.text)
    assert payload["error"] is True
    assert "extractionType" in payload["message"]
    assert "statusCode" not in payload
    assert taxo_api.requests == []


@pytest.mark.asyncio
async def test_unknown_tool(dispatcher, taxo_api):
    envelope = await dispatcher.dispatch("delete_taxpayer", {"rfc": RFC})

    assert envelope.is_error is True
    assert json.loads(envelope.text) == {"error": True, "message": "Unknown tool: delete_taxpayer"}
    assert taxo_api.requests == []


@pytest.mark.asyncio
async def test_transport_failure_envelope(dispatcher, taxo_api):
    taxo_api.error = httpx.ConnectError("connection refused")

    envelope = await dispatcher.dispatch("get_categories")

    assert envelope.is_error is True
    payload = json.loads(envelope.text)
    assert payload["error"] is True
    assert payload["message"].startswith("Failed to reach the Taxo API")
    assert "statusCode" not in payload


@pytest.mark.asyncio
async def test_unexpected_exception_still_returns_envelope(client):
    client.get_categories = AsyncMock(side_effect=RuntimeError("boom"))

    envelope = await Dispatcher(client).dispatch("get_categories", {})

    assert envelope.is_error is True
    assert json.loads(envelope.text) == {"error": True, "message": "boom"}


@pytest.mark.asyncio
async def test_empty_exception_message_gets_generic_text(client):
    client.get_categories = AsyncMock(side_effect=RuntimeError())

    envelope = await Dispatcher(client).dispatch("get_categories", {})

    assert json.loads(envelope.text) == {"error": True, "message": "An unknown error occurred"}


@pytest.mark.asyncio
async def test_extraction_accepted_passthrough(dispatcher, taxo_api):
    taxo_api.reply(202, EXTRACTION_ACCEPTED)

    envelope = await dispatcher.dispatch("extract_tax_status", {"rfc": RFC})

    assert not envelope.is_error
    assert json.loads(envelope.text) == EXTRACTION_ACCEPTED
