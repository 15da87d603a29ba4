# =============================================================================
# taxo/dispatcher.py  —  Tool Name → Upstream Call → Envelope
# =============================================================================
#
# HOW A CALL FLOWS (the whole algorithm):
#   1. Look the name up in the catalog          → UnknownOperationError
#   2. Validate the raw arguments               → ValidationError
#   3. Call the matching TaxoMxClient method    → UpstreamError / TransportError
#   4. Wrap the result as pretty-printed JSON   → success envelope
#   5. Wrap any error from 1-3                  → error envelope
#
# dispatch() NEVER raises.  Every outcome, including bugs, comes back as a
# well-formed ToolEnvelope so the transport never sees a domain error as a
# protocol fault.
# =============================================================================

import logging
from typing import Any, Awaitable, Callable

from taxo.catalog import get_tool
from taxo.client import TaxoMxClient
from taxo.errors import TaxoError, UnknownOperationError
from taxo.models import ToolEnvelope
from taxo.validation import validate_arguments

logger = logging.getLogger(__name__)

Handler = Callable[[TaxoMxClient, dict[str, Any]], Awaitable[Any]]


# -----------------------------------------------------------------------------
# Routing table: validated arguments (camelCase, as the tools declare them)
# → client method parameters (snake_case).
# -----------------------------------------------------------------------------
_HANDLERS: dict[str, Handler] = {
    "extract_compliance_opinion": lambda c, a: c.extract_compliance_opinion_by_rfc(a["rfc"]),
    "extract_compliance_opinion_by_accountant": lambda c, a: c.extract_compliance_opinion_by_accountant(
        a["accountantId"]
    ),
    "extract_compliance_opinion_all": lambda c, a: c.extract_compliance_opinion_all(),
    "get_compliance_opinion": lambda c, a: c.get_compliance_opinion(a["rfc"]),
    "extract_tax_status": lambda c, a: c.extract_tax_status_by_rfc(a["rfc"]),
    "extract_tax_status_by_accountant": lambda c, a: c.extract_tax_status_by_accountant(a["accountantId"]),
    "extract_tax_status_all": lambda c, a: c.extract_tax_status_all(),
    "get_tax_status": lambda c, a: c.get_tax_status(a["rfc"]),
    "extract_cfdi": lambda c, a: c.extract_cfdi_by_rfc(
        rfc=a["rfc"],
        start_date=a["startDate"],
        end_date=a["endDate"],
        extraction_type=a["extractionType"],
    ),
    "extract_cfdi_by_accountant": lambda c, a: c.extract_cfdi_by_accountant(
        accountant_id=a["accountantId"],
        start_date=a["startDate"],
        end_date=a["endDate"],
    ),
    "get_monthly_tax_report": lambda c, a: c.get_monthly_tax_report(a["rfc"], a["year"], a["month"]),
    "get_contacts": lambda c, a: c.get_contacts(a["rfc"]),
    "get_invoices": lambda c, a: c.get_invoices(
        a["rfc"], **{key: value for key, value in a.items() if key != "rfc"}
    ),
    "get_categories": lambda c, a: c.get_categories(),
    "create_taxpayer": lambda c, a: c.create_taxpayer(a["accountantId"], a["rfc"], a["ciec"]),
}


class Dispatcher:
    """Runs tool calls against one TaxoMxClient.

    Holds no state besides the client, so the HTTP transport creates one
    per request and the stdio transport keeps one for the process lifetime.
    """

    def __init__(self, client: TaxoMxClient):
        self.client = client

    async def dispatch(self, name: str, arguments: Any = None) -> ToolEnvelope:
        try:
            if get_tool(name) is None or name not in _HANDLERS:
                raise UnknownOperationError(name)
            validated = validate_arguments(name, arguments)
            result = await _HANDLERS[name](self.client, validated)
        except TaxoError as e:
            return ToolEnvelope.failure(e.to_payload())
        except Exception as e:
            logger.exception(f"Unexpected error while running tool {name}")
            return ToolEnvelope.failure(
                {"error": True, "message": str(e) or "An unknown error occurred"}
            )

        return ToolEnvelope.success(result)
