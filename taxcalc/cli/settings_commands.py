"""Settings CLI commands for Tax Calc.

Manages settings.json - bracket schedule path, output preferences.
"""

import click
from pathlib import Path

from taxcalc.sdk import (
    BracketScheduleError,
    ConfigNotFoundError,
    OUTPUT_FORMATS,
    SETTINGS_KEYS,
    clear_setting,
    get_setting,
    get_settings_path,
    load_bracket_schedule,
    load_settings,
    resolve_schedule_path,
    set_setting,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:

    \b
    - brackets: path to a bracket schedule YAML
    - default_output_format: text, json or csv
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    click.echo("Settings:")
    for key, description in SETTINGS_KEYS.items():
        value = current.get(key, "(not set)")
        click.echo(f"  {key}: {value}  # {description}")
    for key in sorted(set(current) - set(SETTINGS_KEYS)):
        click.echo(f"  {key}: {current[key]}  # unknown, ignored")

    click.echo()
    click.echo("Effective paths:")
    try:
        click.echo(f"  brackets: {resolve_schedule_path()}")
    except ConfigNotFoundError:
        click.echo(f"  brackets: {get_setting('brackets')} (missing)")


@settings.command("brackets")
@click.argument("path", required=False, type=click.Path())
@click.option("--clear", is_flag=True, help="Clear custom schedule, revert to bundled default")
def settings_brackets(path, clear):
    """Set or clear the bracket schedule used by default.

    PATH is a YAML schedule file. It is validated before being saved.

    Examples:
        tax-calc settings brackets ~/tax/schedule-2025.yaml
        tax-calc settings brackets --clear
    """
    if clear:
        if clear_setting("brackets"):
            click.echo("Cleared brackets setting.")
        else:
            click.echo("brackets was not set.")
        return

    if not path:
        current = get_setting("brackets")
        if current:
            click.echo(f"Current brackets: {current}")
        else:
            click.echo("No custom brackets set. Using bundled default schedule.")
        return

    schedule_path = Path(path).expanduser().resolve()
    try:
        schedule = load_bracket_schedule(schedule_path)
    except BracketScheduleError as e:
        raise click.ClickException(str(e))

    set_setting("brackets", str(schedule_path))
    click.echo(f"Set brackets: {schedule_path} ('{schedule.name}')")
    click.echo(f"Saved to: {get_settings_path()}")


@settings.command("output-format")
@click.argument("fmt", type=click.Choice(OUTPUT_FORMATS))
def settings_output_format(fmt):
    """Set the default output format for calculate and batch."""
    set_setting("default_output_format", fmt)
    click.echo(f"Set default_output_format: {fmt}")
