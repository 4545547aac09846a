"""Tax Calc CLI - Command-line interface for income tax computation."""

import json
import logging
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click
from pydantic import ValidationError

from taxcalc import __version__
from taxcalc.sdk import (
    BracketScheduleError,
    ConfigNotFoundError,
    IncomeTaxRecord,
    TaxCalcError,
    batch_to_csv_string,
    calculate_income_tax,
    describe_validation_error,
    get_default_output_format,
    load_bracket_schedule,
    run_batch_csv,
    to_cents,
    to_response,
)

from .brackets_commands import brackets as brackets_group
from .settings_commands import settings as settings_group

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="tax-calc")
def cli():
    """Tax Calc - Personal income tax computation.

    Computes tax owed or refundable from income, withholding and
    allowances, for one record or a CSV batch.

    The bracket schedule is loaded from (in order):

    \b
    1. --brackets option
    2. settings.json 'brackets' key (set via 'tax-calc settings brackets')
    3. Bundled default schedule

    Run 'tax-calc brackets show' to see the active schedule.
    """
    pass


cli.add_command(brackets_group)
cli.add_command(settings_group)


def _load_schedule(brackets_path):
    try:
        return load_bracket_schedule(brackets_path)
    except (BracketScheduleError, ConfigNotFoundError) as e:
        raise click.ClickException(str(e))


def _resolve_format(output_format, allowed):
    """Use the explicit --format, else settings.json default, else text."""
    return output_format or get_default_output_format(allowed)


def _parse_decimal(ctx, param, value):
    """Click callback: parse a monetary option as Decimal."""
    if value is None:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"'{value}' is not a number")


def _parse_allowances(values) -> list:
    """Parse repeated --allowance TYPE=AMOUNT options."""
    allowances = []
    for raw in values:
        allowance_type, sep, amount = raw.rpartition("=")
        if not sep or not allowance_type:
            raise click.BadParameter(
                f"'{raw}' must be TYPE=AMOUNT (e.g. donation=10000)", param_hint="'--allowance'"
            )
        try:
            allowances.append({"AllowanceType": allowance_type, "Amount": Decimal(amount)})
        except InvalidOperation:
            raise click.BadParameter(f"'{amount}' is not a number", param_hint="'--allowance'")
    return allowances


def _format_result_text(result) -> str:
    """Format a single computation result for terminal output."""
    lines = [
        f"{'Total allowances:':<20}{to_cents(result.total_allowances):>16,.2f}",
        f"{'Taxable income:':<20}{to_cents(result.taxable_income):>16,.2f}",
        f"{'Gross liability:':<20}{to_cents(result.gross_liability):>16,.2f}",
        f"{'Withholding tax:':<20}{to_cents(result.withholding_tax):>16,.2f}",
        "",
        "Tax by level:",
    ]
    for level in result.tax_levels:
        lines.append(f"  {level.level:<28}{to_cents(level.tax):>12,.2f}")

    position = result.position
    caption = "Tax refund:" if position.is_refund else "Tax owed:"
    lines.append("")
    lines.append(f"{caption:<20}{to_cents(position.amount):>16,.2f}")
    return "\n".join(lines)


def _format_batch_text(result) -> str:
    if not result.taxes:
        return "No data rows."
    lines = [f"{'Row':>4}  {'Total income':>16}  {'Tax':>14}  {'Tax refund':>14}"]
    for i, outcome in enumerate(result.taxes, start=1):
        tax = f"{to_cents(outcome.tax):,.2f}" if outcome.tax is not None else "-"
        refund = f"{to_cents(outcome.tax_refund):,.2f}" if outcome.tax_refund is not None else "-"
        lines.append(f"{i:>4}  {to_cents(outcome.total_income):>16,.2f}  {tax:>14}  {refund:>14}")
    return "\n".join(lines)


@cli.command("calculate")
@click.option("--income", callback=_parse_decimal, help="Total income before allowances.")
@click.option("--withholding", callback=_parse_decimal, default="0", show_default=True,
              help="Tax already withheld at source.")
@click.option("--allowance", "allowance_values", multiple=True, metavar="TYPE=AMOUNT",
              help="Allowance, repeatable (e.g. --allowance donation=10000).")
@click.option("--input", "input_file", type=click.File("r"),
              help="JSON record file ('-' for stdin) instead of --income/--allowance.")
@click.option("--brackets", "brackets_path", type=click.Path(),
              help="Bracket schedule YAML (default: configured schedule).")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default=None,
              help="Output format (default: settings.json or text).")
def calculate(income, withholding, allowance_values, input_file, brackets_path, output_format):
    """Compute tax owed or refundable for a single record.

    Examples:
        tax-calc calculate --income 500000 --withholding 25000 --allowance donation=10000
        echo '{"TotalIncome": 500000, "WithholdingTax": 0}' | tax-calc calculate --input -
    """
    fmt = _resolve_format(output_format, ("text", "json"))

    if input_file is not None:
        if income is not None or allowance_values:
            raise click.UsageError("--input cannot be combined with --income or --allowance")
        body = input_file.read()
        if not body.strip():
            raise click.ClickException("empty input")
    else:
        if income is None:
            raise click.UsageError("--income is required (or use --input)")
        body = {
            "TotalIncome": income,
            "WithholdingTax": withholding,
            "Allowances": _parse_allowances(allowance_values),
        }

    try:
        if isinstance(body, str):
            record = IncomeTaxRecord.model_validate_json(body)
        else:
            record = IncomeTaxRecord.model_validate(body)
    except ValidationError as e:
        raise click.ClickException(f"invalid record: {describe_validation_error(e)}")

    schedule = _load_schedule(brackets_path)

    try:
        result = calculate_income_tax(record, schedule)
    except TaxCalcError as e:
        raise click.ClickException(str(e))

    if fmt == "json":
        click.echo(json.dumps(to_response(result), indent=2))
    else:
        click.echo(_format_result_text(result))


@cli.command("batch")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--brackets", "brackets_path", type=click.Path(),
              help="Bracket schedule YAML (default: configured schedule).")
@click.option("--format", "output_format", type=click.Choice(["text", "json", "csv"]), default=None,
              help="Output format (default: settings.json or text).")
@click.option("--output", "-o", "output_path", type=click.Path(dir_okay=False),
              help="Write output to this file instead of stdout.")
def batch(csv_file, brackets_path, output_format, output_path):
    """Compute taxes for every row of a CSV file.

    CSV_FILE has a header row, then rows of: totalIncome,withholdingTax,donation.
    The first bad row aborts the batch.
    """
    fmt = _resolve_format(output_format, ("text", "json", "csv"))

    try:
        text = Path(csv_file).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        raise click.ClickException(f"cannot read {csv_file}: not UTF-8 text")

    if not text.strip():
        raise click.ClickException(f"{csv_file} is empty")

    schedule = _load_schedule(brackets_path)

    try:
        result = run_batch_csv(text, schedule)
    except TaxCalcError as e:
        raise click.ClickException(str(e))
    logger.debug(f"{csv_file}: {len(result.taxes)} data row(s)")

    if fmt == "json":
        output = json.dumps(to_response(result), indent=2)
    elif fmt == "csv":
        output = batch_to_csv_string(result).rstrip("\r\n")
    else:
        output = _format_batch_text(result)

    if output_path:
        Path(output_path).write_text(output + "\n")
        click.echo(f"Wrote {len(result.taxes)} row(s) to {output_path}")
    else:
        click.echo(output)


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on.")
@click.option("--brackets", "brackets_path", type=click.Path(),
              help="Bracket schedule YAML (default: configured schedule).")
def serve(host, port, brackets_path):
    """Run the HTTP API (requires the 'api' extra)."""
    try:
        import uvicorn
        from taxcalc.api import create_app
    except ImportError as e:
        raise click.ClickException(
            f"HTTP API dependencies missing ({e.name}). Install with: pip install 'tax-calc[api]'"
        )

    schedule = _load_schedule(brackets_path)
    click.echo(f"Serving tax-calc API on http://{host}:{port} (schedule: {schedule.name})")
    uvicorn.run(create_app(schedule), host=host, port=port)


def main():
    """Entry point for the CLI."""
    log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    cli()


if __name__ == "__main__":
    main()
