# =============================================================================
# taxo/catalog.py  —  The Tool Catalog (ONE definition, both transports)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Declares every tool an MCP client can call: its name, the description
#   the LLM reads to decide WHEN to call it, and the JSON schema that says
#   WHAT to pass.
#
# WHY IT MATTERS:
#   Names and schemas here are a protocol contract.  External assistants
#   are configured against them, so changing a name or a required field is
#   a breaking change.  The order is stable too: listing tools twice gives
#   the same fifteen entries in the same order.
#
# BOTH transports (stdio and HTTP) import TOOLS from here.  There is no
# second copy anywhere.
# =============================================================================

from taxo.models import ToolDescriptor

# Reused parameter specs
_RFC = {"type": "string", "description": "Taxpayer RFC"}
_ACCOUNTANT_ID = {"type": "string", "description": "Internal accountant ID"}
_START_DATE = {"type": "string", "description": "Start date in YYYY-MM-DD format"}
_END_DATE = {"type": "string", "description": "End date in YYYY-MM-DD format"}

EXTRACTION_TYPES = ("all", "issued", "received")


TOOLS: tuple[ToolDescriptor, ...] = (
    # -------------------------------------------------------------------------
    # Opinión de Cumplimiento (Compliance Opinion)
    # -------------------------------------------------------------------------
    ToolDescriptor(
        name="extract_compliance_opinion",
        description=(
            "Requests extraction of SAT compliance opinion (Opinión de Cumplimiento) "
            "for a taxpayer by RFC. This is an async operation."
        ),
        properties={
            "rfc": {
                "type": "string",
                "description": "Taxpayer RFC (Registro Federal de Contribuyentes)",
            },
        },
        required=("rfc",),
    ),
    ToolDescriptor(
        name="extract_compliance_opinion_by_accountant",
        description=(
            "Requests extraction of compliance opinions for all taxpayers of an "
            "accountant. This is an async operation."
        ),
        properties={"accountantId": _ACCOUNTANT_ID},
        required=("accountantId",),
    ),
    ToolDescriptor(
        name="extract_compliance_opinion_all",
        description=(
            "Requests extraction of compliance opinions for all valid taxpayers in "
            "the platform. This is an async operation."
        ),
    ),
    ToolDescriptor(
        name="get_compliance_opinion",
        description=(
            "Retrieves the SAT compliance opinion (Opinión de Cumplimiento) for a "
            "taxpayer. Returns the latest extracted opinion."
        ),
        properties={"rfc": _RFC},
        required=("rfc",),
    ),
    # -------------------------------------------------------------------------
    # Constancia de Situación Fiscal (Tax Status Certificate)
    # -------------------------------------------------------------------------
    ToolDescriptor(
        name="extract_tax_status",
        description=(
            "Requests extraction of tax status certificate (Constancia de Situación "
            "Fiscal) for a taxpayer by RFC. This is an async operation."
        ),
        properties={"rfc": _RFC},
        required=("rfc",),
    ),
    ToolDescriptor(
        name="extract_tax_status_by_accountant",
        description=(
            "Requests extraction of tax status certificates for all taxpayers of an "
            "accountant. This is an async operation."
        ),
        properties={"accountantId": _ACCOUNTANT_ID},
        required=("accountantId",),
    ),
    ToolDescriptor(
        name="extract_tax_status_all",
        description=(
            "Requests extraction of tax status certificates for all valid taxpayers. "
            "This is an async operation."
        ),
    ),
    ToolDescriptor(
        name="get_tax_status",
        description=(
            "Retrieves the tax status certificate (Constancia de Situación Fiscal) for "
            "a taxpayer. Returns the latest extracted certificate."
        ),
        properties={"rfc": _RFC},
        required=("rfc",),
    ),
    # -------------------------------------------------------------------------
    # CFDI (electronic invoices)
    # -------------------------------------------------------------------------
    ToolDescriptor(
        name="extract_cfdi",
        description=(
            "Requests extraction of CFDI (electronic invoices) for a taxpayer. Can "
            "extract issued, received, or all invoices within a date range. This is "
            "an async operation."
        ),
        properties={
            "rfc": _RFC,
            "startDate": _START_DATE,
            "endDate": _END_DATE,
            "extractionType": {
                "type": "string",
                "enum": list(EXTRACTION_TYPES),
                "description": (
                    "Type of invoices to extract: all, issued (emitidos), or received (recibidos)"
                ),
            },
        },
        required=("rfc", "startDate", "endDate", "extractionType"),
    ),
    ToolDescriptor(
        name="extract_cfdi_by_accountant",
        description=(
            "Requests extraction of CFDI for all clients of an accountant within a "
            "date range. This is an async operation."
        ),
        properties={
            "accountantId": _ACCOUNTANT_ID,
            "startDate": _START_DATE,
            "endDate": _END_DATE,
        },
        required=("accountantId", "startDate", "endDate"),
    ),
    # -------------------------------------------------------------------------
    # Tax reports
    # -------------------------------------------------------------------------
    ToolDescriptor(
        name="get_monthly_tax_report",
        description=(
            "Retrieves the monthly tax report for a taxpayer. Includes ISR, IVA, and "
            "other tax calculations."
        ),
        properties={
            "rfc": _RFC,
            "year": {"type": "string", "description": 'Year (e.g., "2025")'},
            "month": {"type": "string", "description": 'Month in MM format (e.g., "04" for April)'},
        },
        required=("rfc", "year", "month"),
    ),
    # -------------------------------------------------------------------------
    # Contacts
    # -------------------------------------------------------------------------
    ToolDescriptor(
        name="get_contacts",
        description="Retrieves the contacts associated with a taxpayer.",
        properties={"rfc": _RFC},
        required=("rfc",),
    ),
    # -------------------------------------------------------------------------
    # Invoices / documents
    # -------------------------------------------------------------------------
    ToolDescriptor(
        name="get_invoices",
        description=(
            "Retrieves invoices/documents for a taxpayer with optional filters. "
            "Supports filtering by type, date, status, category, and more."
        ),
        properties={
            "rfc": _RFC,
            "type": {"type": "string", "description": "Invoice type filter"},
            "year": {"type": "string", "description": "Filter by year"},
            "month": {"type": "string", "description": "Filter by month"},
            "status": {"type": "string", "description": "Invoice status filter"},
            "category": {"type": "string", "description": "Category filter"},
            "search": {"type": "string", "description": "Search term"},
            "issuer": {"type": "string", "description": "Filter by issuer"},
            "paymentType": {"type": "string", "description": "Payment type filter"},
            "paymentWay": {"type": "string", "description": "Payment method filter"},
        },
        required=("rfc",),
    ),
    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------
    ToolDescriptor(
        name="get_categories",
        description="Retrieves all categories defined in Taxo for invoice classification.",
    ),
    # -------------------------------------------------------------------------
    # Taxpayer management
    # -------------------------------------------------------------------------
    ToolDescriptor(
        name="create_taxpayer",
        description=(
            "Creates a new taxpayer under an accountant. Requires the RFC and CIEC "
            "(SAT password) to enable document extraction."
        ),
        properties={
            "accountantId": _ACCOUNTANT_ID,
            "rfc": _RFC,
            "ciec": {"type": "string", "description": "CIEC password for SAT access"},
        },
        required=("accountantId", "rfc", "ciec"),
    ),
)

_BY_NAME: dict[str, ToolDescriptor] = {tool.name: tool for tool in TOOLS}


def get_tool(name: str) -> ToolDescriptor | None:
    """Look up a tool by name, or None if the catalog doesn't have it."""
    return _BY_NAME.get(name)


def tool_names() -> list[str]:
    return [tool.name for tool in TOOLS]
