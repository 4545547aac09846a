"""Pydantic schemas for tax-calc inputs, bracket schedules and results.

External (JSON) names are the PascalCase aliases; Python code uses the
snake_case attribute names. Monetary values are Decimal and are only rounded
to cents when serialized to JSON.

Input schemas check structure only (types, unknown fields, magnitude no
larger than MAX_AMOUNT). Business rules
such as "withholding cannot exceed income" live in taxes.validation so that
rule order and messages stay under our control.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    model_validator,
)


CENTS = Decimal("0.01")

# Largest accepted monetary magnitude. Amounts up to this size stay exact to
# the cent within the default 28-digit decimal context.
MAX_AMOUNT = Decimal("1000000000000000")


def to_cents(amount: Decimal) -> Decimal:
    """Round a monetary amount to two decimals (half up) for reporting."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_response(model: BaseModel) -> dict:
    """Dump a result model the way transports emit it (aliases, no nulls)."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Input Schemas
# =============================================================================


class Allowance(BaseModel):
    """A named deduction category with a monetary amount."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    allowance_type: str = Field(..., alias="AllowanceType")
    amount: Decimal = Field(
        ..., alias="Amount", allow_inf_nan=False, ge=-MAX_AMOUNT, le=MAX_AMOUNT,
    )


class IncomeTaxRecord(BaseModel):
    """One taxpayer's inputs for one computation."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    total_income: Decimal = Field(
        ..., alias="TotalIncome", allow_inf_nan=False, ge=-MAX_AMOUNT, le=MAX_AMOUNT,
        description="Gross income before allowances",
    )
    withholding_tax: Decimal = Field(
        ..., alias="WithholdingTax", allow_inf_nan=False, ge=-MAX_AMOUNT, le=MAX_AMOUNT,
        description="Tax already withheld at source",
    )
    allowances: List[Allowance] = Field(
        default_factory=list, alias="Allowances",
        description="Deductions, in submission order",
    )


# The single-record endpoint historically called this IncomeTaxDetail.
IncomeTaxDetail = IncomeTaxRecord


# =============================================================================
# Bracket Schedule Schemas
# =============================================================================


class TaxBracket(BaseModel):
    """Single tier of a progressive schedule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to: Optional[Decimal] = Field(
        default=None,
        description="Upper bound of the tier (None for the open-ended top tier)",
    )
    rate: Decimal = Field(..., ge=0, le=1, description="Marginal rate as decimal")


class BracketSchedule(BaseModel):
    """Ordered tiers of (upper bound, marginal rate)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(default="custom", description="Label shown in reports")
    brackets: List[TaxBracket] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_ordering(self) -> "BracketSchedule":
        """Bounds must strictly increase; only the last tier may be open-ended."""
        previous = Decimal("0")
        for i, bracket in enumerate(self.brackets):
            if bracket.up_to is None:
                if i != len(self.brackets) - 1:
                    raise ValueError(
                        f"bracket {i + 1} has no upper bound but is not the last tier"
                    )
                continue
            if bracket.up_to <= previous:
                raise ValueError(
                    f"bracket {i + 1} upper bound ({bracket.up_to}) must be greater "
                    f"than the previous bound ({previous})"
                )
            if bracket.up_to > MAX_AMOUNT:
                raise ValueError(
                    f"bracket {i + 1} upper bound ({bracket.up_to}) exceeds {MAX_AMOUNT:,}"
                )
            previous = bracket.up_to
        return self


# =============================================================================
# Result Schemas
# =============================================================================


class TaxLevel(BaseModel):
    """Liability attributable to one schedule tier."""

    model_config = ConfigDict(populate_by_name=True)

    level: str = Field(..., alias="Level")
    tax: Decimal = Field(..., alias="Tax")

    @field_serializer("tax", when_used="json")
    def serialize_tax(self, value: Decimal) -> float:
        return float(to_cents(value))


class TaxPosition(BaseModel):
    """Net position after withholding: either tax owed or a refund."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["owed", "refund"] = Field(..., alias="Kind")
    amount: Decimal = Field(..., ge=0, alias="Amount")

    @classmethod
    def from_total_tax(cls, total_tax: Decimal) -> "TaxPosition":
        if total_tax >= 0:
            return cls(kind="owed", amount=total_tax)
        return cls(kind="refund", amount=-total_tax)

    @property
    def is_refund(self) -> bool:
        return self.kind == "refund"

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, value: Decimal) -> float:
        return float(to_cents(value))


class TaxComputationResult(BaseModel):
    """Output of the tax engine for one record.

    total_tax is signed: positive is tax still owed, negative is a refund.
    Use `position` for the owed/refund variant.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_tax: Decimal = Field(..., alias="TotalTax")
    total_allowances: Decimal = Field(..., alias="TotalAllowances")
    taxable_income: Decimal = Field(..., ge=0, alias="TaxableIncome")
    gross_liability: Decimal = Field(..., ge=0, alias="GrossLiability")
    withholding_tax: Decimal = Field(..., alias="WithholdingTax")
    tax_levels: List[TaxLevel] = Field(default_factory=list, alias="TaxLevels")

    @property
    def position(self) -> TaxPosition:
        return TaxPosition.from_total_tax(self.total_tax)

    @field_serializer(
        "total_tax", "total_allowances", "taxable_income",
        "gross_liability", "withholding_tax",
        when_used="json",
    )
    def serialize_money(self, value: Decimal) -> float:
        return float(to_cents(value))


class BatchRowOutcome(BaseModel):
    """Per-row batch outcome. Exactly one of tax / tax_refund is set."""

    model_config = ConfigDict(populate_by_name=True)

    total_income: Decimal = Field(..., alias="TotalIncome")
    tax: Optional[Decimal] = Field(default=None, alias="Tax")
    tax_refund: Optional[Decimal] = Field(default=None, alias="TaxRefund")

    @model_validator(mode="after")
    def check_exactly_one(self) -> "BatchRowOutcome":
        if (self.tax is None) == (self.tax_refund is None):
            raise ValueError("exactly one of Tax or TaxRefund must be set")
        return self

    @classmethod
    def from_result(cls, total_income: Decimal, result: TaxComputationResult) -> "BatchRowOutcome":
        position = result.position
        if position.is_refund:
            return cls(total_income=total_income, tax_refund=position.amount)
        return cls(total_income=total_income, tax=position.amount)

    @field_serializer("total_income", "tax", "tax_refund", when_used="json")
    def serialize_money(self, value: Optional[Decimal]) -> Optional[float]:
        if value is None:
            return None
        return float(to_cents(value))


class BatchResult(BaseModel):
    """Output of a batch submission, one outcome per data row in input order."""

    model_config = ConfigDict(populate_by_name=True)

    taxes: List[BatchRowOutcome] = Field(default_factory=list, alias="Taxes")
