"""Batch tax computation from CSV rows.

Input layout: a header row followed by rows of exactly three numeric
columns - total income, withholding tax, donation. The header is skipped
without being parsed.

Batches are fail-fast: the first row that fails to parse or validate aborts
the whole batch with a BatchError naming the row. No partial results.

Row numbers are 1-based. For CSV text they are file line numbers, so blank
lines are counted even though they are skipped.
"""

import csv
import io
import logging
import re
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import BatchError, RecordParseError, TaxCalcError
from .schemas import (
    MAX_AMOUNT,
    Allowance,
    BatchResult,
    BatchRowOutcome,
    BracketSchedule,
    IncomeTaxRecord,
    to_cents,
)
from .taxes import compute_tax, load_bracket_schedule, validate_record

logger = logging.getLogger(__name__)

BATCH_COLUMNS = ("total income", "withholding tax", "donation")
BATCH_CSV_HEADER = ["total_income", "tax", "tax_refund"]

# Plain decimal literal: optional sign, digits with optional fraction, optional exponent.
# Rejects nan/inf and underscore separators that float() would accept.
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def parse_amount(raw: str, column: str) -> Decimal:
    """Parse one numeric CSV field, raising RecordParseError on bad format."""
    value = raw.strip()
    if not _NUMBER_RE.match(value):
        raise RecordParseError(f"invalid format: {column} '{raw}'", column=column, value=raw)

    amount = Decimal(value)
    # Comparison only; arithmetic on an out-of-range exponent raises Overflow.
    if amount > MAX_AMOUNT or amount < -MAX_AMOUNT:
        raise RecordParseError(
            f"invalid format: {column} '{raw}' is out of range (limit {MAX_AMOUNT:,})",
            column=column, value=raw,
        )
    return amount


def parse_row(fields: Sequence[str]) -> IncomeTaxRecord:
    """Turn one raw CSV row into a record with a single donation allowance.

    Checks, in order: field count, non-empty fields, numeric format.

    Raises:
        RecordParseError: On the first problem found
    """
    if len(fields) != len(BATCH_COLUMNS):
        raise RecordParseError(
            f"expected {len(BATCH_COLUMNS)} fields ({', '.join(BATCH_COLUMNS)}), got {len(fields)}"
        )

    for column, field in zip(BATCH_COLUMNS, fields):
        if field.strip() == "":
            raise RecordParseError(
                f"all values must be non-empty ({column} is empty)", column=column, value=field
            )

    total_income, withholding_tax, donation = (
        parse_amount(field, column) for column, field in zip(BATCH_COLUMNS, fields)
    )

    return IncomeTaxRecord(
        total_income=total_income,
        withholding_tax=withholding_tax,
        allowances=[Allowance(allowance_type="donation", amount=donation)],
    )


def _run_numbered_rows(
    numbered_rows: Iterable[Tuple[int, Sequence[str]]],
    schedule: Optional[BracketSchedule],
) -> BatchResult:
    if schedule is None:
        schedule = load_bracket_schedule()

    result = BatchResult()
    for i, (row_number, row) in enumerate(numbered_rows):
        if i == 0:
            continue  # header

        try:
            record = parse_row(row)
            validate_record(record)
        except TaxCalcError as e:
            logger.debug(f"batch aborted at row {row_number}: {e}")
            raise BatchError(row_number, e) from e

        computed = compute_tax(record, schedule)
        result.taxes.append(BatchRowOutcome.from_result(record.total_income, computed))

    logger.debug(f"batch complete: {len(result.taxes)} row(s)")
    return result


def run_batch(
    rows: Iterable[Sequence[str]],
    schedule: Optional[BracketSchedule] = None,
) -> BatchResult:
    """Parse, validate and compute every data row.

    Args:
        rows: All rows including the header (the first row is skipped)
        schedule: Bracket schedule (default: configured schedule)

    Returns:
        BatchResult with one outcome per data row, in input order

    Raises:
        BatchError: For the first row that fails; carries its 1-based position in rows
    """
    return _run_numbered_rows(enumerate(rows, start=1), schedule)


def iter_csv_rows(text: str) -> Iterator[Tuple[int, List[str]]]:
    """Yield (line number, fields) for each non-blank CSV row.

    The line number is where the row starts, so a quoted field spanning
    several lines is reported at its first line.

    Raises:
        BatchError: If the CSV itself is malformed, naming the line
    """
    reader = csv.reader(io.StringIO(text), strict=True)
    while True:
        line_number = reader.line_num + 1
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise BatchError(reader.line_num, e) from e
        if row:
            yield line_number, row


def read_csv_rows(text: str) -> List[List[str]]:
    """Split CSV text into rows, skipping blank lines.

    Raises:
        BatchError: If the CSV itself is malformed
    """
    return [row for _, row in iter_csv_rows(text)]


def run_batch_csv(text: str, schedule: Optional[BracketSchedule] = None) -> BatchResult:
    """CSV text in, BatchResult out. Errors name the file line of the bad row."""
    return _run_numbered_rows(iter_csv_rows(text), schedule)


def _write_batch_rows(writer, result: BatchResult) -> None:
    writer.writerow(BATCH_CSV_HEADER)
    for outcome in result.taxes:
        writer.writerow([
            f"{to_cents(outcome.total_income):.2f}",
            f"{to_cents(outcome.tax):.2f}" if outcome.tax is not None else "",
            f"{to_cents(outcome.tax_refund):.2f}" if outcome.tax_refund is not None else "",
        ])


def batch_to_csv_string(result: BatchResult) -> str:
    """Render a batch result as CSV text."""
    output = io.StringIO()
    _write_batch_rows(csv.writer(output), result)
    return output.getvalue()


def write_batch_csv(result: BatchResult, output_path: Path) -> Path:
    """Write a batch result to a CSV file."""
    output_path = Path(output_path)
    with open(output_path, "w", newline="") as f:
        _write_batch_rows(csv.writer(f), result)
    return output_path
