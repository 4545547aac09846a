"""Tax Calc MCP Server - FastMCP implementation for tax computation tools."""

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field, ValidationError

from taxcalc.sdk import (
    BracketScheduleError,
    ConfigNotFoundError,
    IncomeTaxRecord,
    TaxCalcError,
    calculate_income_tax,
    describe_validation_error,
    load_bracket_schedule,
    run_batch_csv,
    to_cents,
    to_response,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("tax-calc")


# --- Tools ---

@mcp.tool()
async def calculate_tax(
    total_income: float = Field(description="Gross income before allowances"),
    withholding_tax: float = Field(default=0, description="Tax already withheld at source"),
    allowances: list[dict[str, Any]] | None = Field(
        default=None,
        description=(
            "Allowances as [{'AllowanceType': 'donation', 'Amount': 10000}]. "
            "Types containing 'personal' or 'receipt', or exactly 'donation', are accepted."
        ),
    ),
) -> dict[str, Any]:
    """Compute tax owed or refundable for one taxpayer.

    Returns TotalTax (positive = owed, negative = refund), taxable income,
    gross liability and the per-level breakdown.
    """
    try:
        record = IncomeTaxRecord.model_validate({
            "TotalIncome": total_income,
            "WithholdingTax": withholding_tax,
            "Allowances": allowances or [],
        })
        result = calculate_income_tax(record, load_bracket_schedule())
    except ValidationError as e:
        return {"error": describe_validation_error(e), "result": None}
    except (TaxCalcError, ConfigNotFoundError) as e:
        return {"error": str(e), "result": None}

    position = result.position
    return {
        "result": to_response(result),
        "summary": {
            "position": position.kind,
            "amount": float(to_cents(position.amount)),
        },
    }


@mcp.tool()
async def calculate_tax_batch(
    csv_text: str = Field(
        description="CSV with a header row, then rows of totalIncome,withholdingTax,donation"
    ),
) -> dict[str, Any]:
    """Compute taxes for many taxpayers from CSV text.

    The first invalid row aborts the batch and its error is returned instead.
    """
    if not csv_text.strip():
        return {"error": "empty CSV", "Taxes": None}

    try:
        result = run_batch_csv(csv_text, load_bracket_schedule())
    except (TaxCalcError, ConfigNotFoundError) as e:
        logger.warning(f"Batch rejected: {e}")
        return {"error": str(e), "Taxes": None}

    return to_response(result)


# --- Resources ---

@mcp.resource("taxcalc://brackets")
async def brackets_resource() -> str:
    """The active bracket schedule."""
    try:
        schedule = load_bracket_schedule()
    except (BracketScheduleError, ConfigNotFoundError) as e:
        return json.dumps({"error": str(e)})
    return json.dumps(schedule.model_dump(mode="json"), indent=2)


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
