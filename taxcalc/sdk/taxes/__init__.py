"""taxes - Income tax validation and computation.

Scope:
- Allowance type classification
- Business-rule validation of income tax records
- Progressive bracket schedules (loading, per-tier liability)
- Tax engine: taxable income, gross liability, owed/refund position

Constraints:
- Pure calculation - no CSV, HTTP or CLI concerns (see batch, api, cli)
- Engine trusts its input; callers run validate_record() first
- Bracket schedule is injected; the default comes from tax-rules/default.yaml

Usage:
    from taxcalc.sdk.taxes import calculate_income_tax, load_bracket_schedule

    schedule = load_bracket_schedule()
    result = calculate_income_tax(record, schedule)
"""

from .allowances import (
    AllowanceFamily,
    classify_allowance,
    is_recognized_allowance,
)

from .validation import validate_record

from .brackets import (
    load_bracket_schedule,
    parse_bracket_schedule,
    resolve_schedule_path,
    get_default_schedule_path,
    calculate_tax_levels,
    calculate_gross_liability,
)

from .engine import (
    compute_tax,
    calculate_income_tax,
)

__all__ = [
    # Allowances
    "AllowanceFamily",
    "classify_allowance",
    "is_recognized_allowance",
    # Validation
    "validate_record",
    # Brackets
    "load_bracket_schedule",
    "parse_bracket_schedule",
    "resolve_schedule_path",
    "get_default_schedule_path",
    "calculate_tax_levels",
    "calculate_gross_liability",
    # Engine
    "compute_tax",
    "calculate_income_tax",
]
