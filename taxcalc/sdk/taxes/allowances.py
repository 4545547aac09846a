"""Allowance type classification.

The accepted vocabulary is deliberately loose: any type containing
"personal" or "receipt" (case-insensitive) is accepted, plus the exact
literal "donation". Everything that decides whether an allowance type is
recognized goes through classify_allowance().
"""

from enum import Enum
from typing import Optional


class AllowanceFamily(Enum):
    PERSONAL = "personal"
    RECEIPT = "receipt"
    DONATION = "donation"


def classify_allowance(allowance_type: str) -> Optional[AllowanceFamily]:
    """Map an allowance type onto its family, or None if unrecognized.

    Examples:
        classify_allowance("Personal")    # -> PERSONAL
        classify_allowance("k-receipt")   # -> RECEIPT
        classify_allowance("donation")    # -> DONATION
        classify_allowance("Donation")    # -> None (exact match only)
    """
    lowered = allowance_type.lower()
    if "personal" in lowered:
        return AllowanceFamily.PERSONAL
    if "receipt" in lowered:
        return AllowanceFamily.RECEIPT
    if allowance_type == "donation":
        return AllowanceFamily.DONATION
    return None


def is_recognized_allowance(allowance_type: str) -> bool:
    return classify_allowance(allowance_type) is not None
