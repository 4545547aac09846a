"""Business-rule validation for income tax records.

Rules are applied in a fixed order and the first failure wins:
1. Total income cannot be negative
2. Withholding tax cannot be negative
3. Withholding tax cannot exceed total income
4. Each allowance (in order): type must be recognized, amount non-negative
"""

import logging

from ..errors import IncomeTaxValidationError
from ..schemas import IncomeTaxRecord
from .allowances import classify_allowance

logger = logging.getLogger(__name__)


def validate_record(record: IncomeTaxRecord) -> None:
    """Validate a record, raising IncomeTaxValidationError on the first failure.

    Returns None when the record can be handed to the tax engine as-is.
    """
    if record.total_income < 0:
        raise IncomeTaxValidationError(
            f"total income ({record.total_income:.2f}) cannot be negative",
            field="TotalIncome", value=record.total_income,
        )

    if record.withholding_tax < 0:
        raise IncomeTaxValidationError(
            f"withholding tax ({record.withholding_tax:.2f}) cannot be negative",
            field="WithholdingTax", value=record.withholding_tax,
        )

    if record.withholding_tax > record.total_income:
        raise IncomeTaxValidationError(
            f"withholding tax ({record.withholding_tax:.2f}) cannot be greater than "
            f"total income ({record.total_income:.2f})",
            field="WithholdingTax", value=record.withholding_tax,
        )

    for allowance in record.allowances:
        if classify_allowance(allowance.allowance_type) is None:
            raise IncomeTaxValidationError(
                f"invalid allowance type: {allowance.allowance_type}",
                field="AllowanceType", value=allowance.allowance_type,
            )
        if allowance.amount < 0:
            raise IncomeTaxValidationError(
                f"allowance amount ({allowance.amount:.2f}) cannot be negative",
                field="Amount", value=allowance.amount,
            )

    logger.debug(
        f"record valid: income={record.total_income}, "
        f"wht={record.withholding_tax}, allowances={len(record.allowances)}"
    )
