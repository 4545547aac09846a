"""Bracket schedule loading and progressive liability calculation."""

import logging
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import ValidationError

from ..config import ConfigNotFoundError, get_setting, get_settings_path
from ..errors import BracketScheduleError
from ..schemas import BracketSchedule, TaxLevel

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE_FILENAME = "default.yaml"
ZERO = Decimal("0")


def _get_tax_rules_dir() -> Path:
    """Get the bundled tax-rules directory path."""
    package_root = Path(__file__).parent.parent.parent  # taxes -> sdk -> taxcalc
    return package_root / "tax-rules"


def get_default_schedule_path() -> Path:
    return _get_tax_rules_dir() / DEFAULT_SCHEDULE_FILENAME


def resolve_schedule_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Resolve which schedule file to load.

    Resolution order:
    1. Explicit path argument
    2. settings.json 'brackets' key
    3. Bundled tax-rules/default.yaml

    Raises:
        ConfigNotFoundError: If settings.json points at a file that doesn't exist
    """
    if path:
        return Path(path).expanduser()

    configured = get_setting("brackets")
    if configured:
        configured_path = Path(configured).expanduser()
        if not configured_path.exists():
            raise ConfigNotFoundError(
                f"Bracket schedule not found at configured path: {configured_path}\n\n"
                f"Update with: tax-calc settings brackets /path/to/schedule.yaml\n"
                f"Or clear it in {get_settings_path()} with: tax-calc settings brackets --clear"
            )
        return configured_path

    return get_default_schedule_path()


def parse_bracket_schedule(data: dict, source: str = "<data>") -> BracketSchedule:
    """Validate raw schedule data (e.g. parsed YAML) into a BracketSchedule."""
    if not isinstance(data, dict):
        raise BracketScheduleError(f"{source}: schedule must be a mapping with a 'brackets' list")
    try:
        return BracketSchedule.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'schedule'}: {err['msg']}"
            for err in e.errors()
        )
        raise BracketScheduleError(f"{source}: invalid bracket schedule ({details})") from e


def load_bracket_schedule(path: Optional[Union[str, Path]] = None) -> BracketSchedule:
    """Load and validate a bracket schedule from YAML."""
    config_file = resolve_schedule_path(path)
    if not config_file.exists():
        raise BracketScheduleError(f"Bracket schedule file not found: {config_file}")

    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise BracketScheduleError(f"{config_file}: not valid YAML ({e})") from e

    schedule = parse_bracket_schedule(data, source=str(config_file))
    logger.debug(f"loaded schedule '{schedule.name}' ({len(schedule.brackets)} tiers) from {config_file}")
    return schedule


def _format_bound(amount: Decimal) -> str:
    if amount == amount.to_integral_value():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def _level_label(lower: Decimal, upper: Optional[Decimal]) -> str:
    """Human label for a tier, e.g. '0-150,000' or '2,000,001 and up'."""
    if lower == 0:
        start = "0"
    elif lower == lower.to_integral_value():
        start = _format_bound(lower + 1)
    else:
        start = _format_bound(lower)

    if upper is None:
        return f"{start} and up"
    return f"{start}-{_format_bound(upper)}"


def calculate_tax_levels(taxable_income: Decimal, schedule: BracketSchedule) -> List[TaxLevel]:
    """Split liability across schedule tiers.

    Each tier taxes the slice of income between the previous bound and its
    own bound at its marginal rate. The last tier keeps taxing income beyond
    its bound, so a schedule never leaves top income untaxed.
    """
    levels = []
    previous_max = ZERO
    last_index = len(schedule.brackets) - 1

    for i, bracket in enumerate(schedule.brackets):
        upper = bracket.up_to if i != last_index else None

        if upper is None:
            income_in_bracket = max(taxable_income - previous_max, ZERO)
        else:
            income_in_bracket = max(min(taxable_income, upper) - previous_max, ZERO)

        levels.append(TaxLevel(
            level=_level_label(previous_max, upper),
            tax=income_in_bracket * bracket.rate,
        ))

        if upper is not None:
            previous_max = upper

    return levels


def calculate_gross_liability(taxable_income: Decimal, schedule: BracketSchedule) -> Decimal:
    """Tax on taxable income before crediting withholding."""
    return sum((level.tax for level in calculate_tax_levels(taxable_income, schedule)), ZERO)
