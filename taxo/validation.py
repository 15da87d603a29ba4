# =============================================================================
# taxo/validation.py  —  Argument Validators
# =============================================================================
#
# Each tool's raw arguments are run through a pydantic model before any
# HTTP request is attempted.  The rules are deliberately minimal:
#
#   - every field is a STRICT string: 2025 (int) is rejected, "2025" is fine
#   - no format checks: RFCs, dates and months are opaque; Taxo decides
#   - extractionType is the one enumeration: all | issued | received
#   - unknown keys are dropped, never rejected
#
# A failure raises taxo.errors.ValidationError, which the dispatcher turns
# into an error envelope.  It never escapes as a protocol fault.
# =============================================================================

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, StrictStr
from pydantic import ValidationError as PydanticValidationError

from taxo.errors import ValidationError


class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class NoArgs(ToolArgs):
    pass


class RfcArgs(ToolArgs):
    rfc: StrictStr


class AccountantArgs(ToolArgs):
    accountantId: StrictStr


class ExtractCfdiArgs(ToolArgs):
    rfc: StrictStr
    startDate: StrictStr
    endDate: StrictStr
    extractionType: Literal["all", "issued", "received"]


class ExtractCfdiByAccountantArgs(ToolArgs):
    accountantId: StrictStr
    startDate: StrictStr
    endDate: StrictStr


class TaxReportArgs(ToolArgs):
    rfc: StrictStr
    year: StrictStr
    month: StrictStr


class InvoiceQueryArgs(ToolArgs):
    rfc: StrictStr
    type: StrictStr | None = None
    year: StrictStr | None = None
    month: StrictStr | None = None
    status: StrictStr | None = None
    category: StrictStr | None = None
    search: StrictStr | None = None
    issuer: StrictStr | None = None
    paymentType: StrictStr | None = None
    paymentWay: StrictStr | None = None


class CreateTaxpayerArgs(ToolArgs):
    accountantId: StrictStr
    rfc: StrictStr
    ciec: StrictStr


# Tool name → argument model.  Must cover every entry in taxo.catalog.TOOLS.
ARGUMENT_MODELS: dict[str, type[ToolArgs]] = {
    "extract_compliance_opinion": RfcArgs,
    "extract_compliance_opinion_by_accountant": AccountantArgs,
    "extract_compliance_opinion_all": NoArgs,
    "get_compliance_opinion": RfcArgs,
    "extract_tax_status": RfcArgs,
    "extract_tax_status_by_accountant": AccountantArgs,
    "extract_tax_status_all": NoArgs,
    "get_tax_status": RfcArgs,
    "extract_cfdi": ExtractCfdiArgs,
    "extract_cfdi_by_accountant": ExtractCfdiByAccountantArgs,
    "get_monthly_tax_report": TaxReportArgs,
    "get_contacts": RfcArgs,
    "get_invoices": InvoiceQueryArgs,
    "get_categories": NoArgs,
    "create_taxpayer": CreateTaxpayerArgs,
}


def validate_arguments(name: str, arguments: Any) -> dict[str, Any]:
    """Validate raw tool arguments and return the cleaned mapping.

    Absent optional fields are left out of the result entirely, so callers
    can't tell "not passed" from "passed as null".

    Raises:
        KeyError: If ``name`` has no registered model (a programming error).
        ValidationError: If the arguments don't match the model.
    """
    model = ARGUMENT_MODELS[name]

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ValidationError(
            f"Invalid arguments for {name}: expected an object, got {type(arguments).__name__}"
        )

    try:
        parsed = model.model_validate(arguments)
    except PydanticValidationError as e:
        problems = [_describe(err) for err in e.errors()]
        raise ValidationError(
            f"Invalid arguments for {name}: " + "; ".join(problems),
            details=problems,
        ) from None

    return parsed.model_dump(exclude_none=True)


def _describe(err: dict[str, Any]) -> str:
    field = ".".join(str(part) for part in err.get("loc", ())) or "arguments"
    return f"{field}: {err.get('msg', 'invalid value')}"
