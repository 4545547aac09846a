"""Income tax computation.

Pipeline for one record:
1. Sum allowances
2. Taxable income = max(0, total income - allowances)
3. Gross liability from the progressive bracket schedule
4. Total tax = gross liability - withholding (negative means refund)

Arithmetic stays in Decimal with no intermediate rounding; results are
rounded to cents only when serialized.
"""

import logging
from decimal import Decimal
from typing import Optional

from ..schemas import BracketSchedule, IncomeTaxRecord, TaxComputationResult
from .brackets import calculate_tax_levels, load_bracket_schedule
from .validation import validate_record

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def compute_tax(
    record: IncomeTaxRecord,
    schedule: Optional[BracketSchedule] = None,
) -> TaxComputationResult:
    """Compute liability and net position for an already validated record.

    Args:
        record: Record that passed validate_record()
        schedule: Bracket schedule (default: configured schedule)

    Returns:
        TaxComputationResult with signed total_tax and intermediate values
    """
    if schedule is None:
        schedule = load_bracket_schedule()

    total_allowances = sum((a.amount for a in record.allowances), ZERO)
    taxable_income = max(ZERO, record.total_income - total_allowances)

    tax_levels = calculate_tax_levels(taxable_income, schedule)
    gross_liability = sum((level.tax for level in tax_levels), ZERO)
    total_tax = gross_liability - record.withholding_tax

    logger.debug(
        f"taxable={taxable_income} (income {record.total_income} - allowances {total_allowances}), "
        f"liability={gross_liability}, wht={record.withholding_tax}, total_tax={total_tax}"
    )

    return TaxComputationResult(
        total_tax=total_tax,
        total_allowances=total_allowances,
        taxable_income=taxable_income,
        gross_liability=gross_liability,
        withholding_tax=record.withholding_tax,
        tax_levels=tax_levels,
    )


def calculate_income_tax(
    record: IncomeTaxRecord,
    schedule: Optional[BracketSchedule] = None,
) -> TaxComputationResult:
    """Single-record pipeline: validate, then compute.

    Raises:
        IncomeTaxValidationError: On the first business-rule failure
    """
    validate_record(record)
    return compute_tax(record, schedule)
