"""Tax Calc SDK - Core functionality for income tax computation."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    clear_setting,
    get_default_output_format,
    OUTPUT_FORMATS,
    SETTINGS_KEYS,
    ConfigNotFoundError,
)

from .errors import (
    TaxCalcError,
    IncomeTaxValidationError,
    RecordParseError,
    BatchError,
    BracketScheduleError,
    describe_validation_error,
)

from .schemas import (
    Allowance,
    IncomeTaxRecord,
    IncomeTaxDetail,
    TaxBracket,
    BracketSchedule,
    TaxLevel,
    TaxPosition,
    TaxComputationResult,
    BatchRowOutcome,
    BatchResult,
    MAX_AMOUNT,
    to_cents,
    to_response,
)

from .taxes import (
    AllowanceFamily,
    classify_allowance,
    validate_record,
    load_bracket_schedule,
    parse_bracket_schedule,
    resolve_schedule_path,
    calculate_tax_levels,
    calculate_gross_liability,
    compute_tax,
    calculate_income_tax,
)

from .batch import (
    parse_row,
    run_batch,
    run_batch_csv,
    read_csv_rows,
    iter_csv_rows,
    batch_to_csv_string,
    write_batch_csv,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "clear_setting",
    "get_default_output_format",
    "OUTPUT_FORMATS",
    "SETTINGS_KEYS",
    "ConfigNotFoundError",
    # Errors
    "TaxCalcError",
    "IncomeTaxValidationError",
    "RecordParseError",
    "BatchError",
    "BracketScheduleError",
    "describe_validation_error",
    # Schemas
    "Allowance",
    "IncomeTaxRecord",
    "IncomeTaxDetail",
    "TaxBracket",
    "BracketSchedule",
    "TaxLevel",
    "TaxPosition",
    "TaxComputationResult",
    "BatchRowOutcome",
    "BatchResult",
    "MAX_AMOUNT",
    "to_cents",
    "to_response",
    # Tax computation
    "AllowanceFamily",
    "classify_allowance",
    "validate_record",
    "load_bracket_schedule",
    "parse_bracket_schedule",
    "resolve_schedule_path",
    "calculate_tax_levels",
    "calculate_gross_liability",
    "compute_tax",
    "calculate_income_tax",
    # Batch
    "parse_row",
    "run_batch",
    "run_batch_csv",
    "read_csv_rows",
    "iter_csv_rows",
    "batch_to_csv_string",
    "write_batch_csv",
]
