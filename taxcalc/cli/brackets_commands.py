"""Bracket schedule CLI commands."""

import json

import click

from taxcalc.sdk import (
    BracketScheduleError,
    ConfigNotFoundError,
    load_bracket_schedule,
    resolve_schedule_path,
)


def _rate_percent(rate) -> str:
    return f"{(rate * 100).normalize():f}%"


@click.group()
def brackets():
    """Inspect and check progressive bracket schedules."""
    pass


@brackets.command("show")
@click.option("--brackets", "brackets_path", type=click.Path(),
              help="Schedule YAML to show (default: configured schedule).")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def brackets_show(brackets_path, output_format):
    """Show the active bracket schedule."""
    try:
        path = resolve_schedule_path(brackets_path)
        schedule = load_bracket_schedule(path)
    except (BracketScheduleError, ConfigNotFoundError) as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(json.dumps(schedule.model_dump(mode="json"), indent=2))
        return

    click.echo(f"Schedule: {schedule.name}")
    click.echo(f"Source:   {path}")
    click.echo()
    previous = None
    for i, bracket in enumerate(schedule.brackets):
        lower = f"{previous:,}" if previous is not None else "0"
        if bracket.up_to is None or i == len(schedule.brackets) - 1:
            span = f"over {lower}"
        else:
            span = f"{lower} - {bracket.up_to:,}"
        click.echo(f"  {span:<32}{_rate_percent(bracket.rate):>8}")
        previous = bracket.up_to


@brackets.command("validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def brackets_validate(path):
    """Check that PATH is a valid bracket schedule."""
    try:
        schedule = load_bracket_schedule(path)
    except BracketScheduleError as e:
        raise click.ClickException(str(e))

    click.echo(f"OK: '{schedule.name}' with {len(schedule.brackets)} tier(s)")
