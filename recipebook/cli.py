"""CLI entry point for recipebook."""

import json
import logging
import math

import click

from . import __version__
from .config import APP_NAME, get_log_level
from .conversion import calculate_all_units, convert_quantity, find_optimal_unit
from .form_errors import RecipeErrors, apply_error_details, create_error_state, has_errors
from .units import (
    BASE_UNITS,
    Dimension,
    IncompatibleUnitsError,
    UnitError,
    UnsupportedUnitError,
    get_dimension,
    get_unit,
    resolve_unit_code,
    units_for,
)


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr at the configured level."""
    level = logging.DEBUG if verbose else getattr(logging, get_log_level())
    logger = logging.getLogger("recipebook")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)


def resolve_unit(text: str) -> tuple[str, Dimension]:
    """Resolve a unit typed on the command line to a catalog code and its dimension."""
    code = resolve_unit_code(text)
    dimension = get_dimension(code)
    if code is None or dimension is None:
        raise UnsupportedUnitError(text)
    return code, dimension


def validate_amount(ctx: click.Context, param: click.Parameter, value: float) -> float:
    """Reject amounts that are negative, NaN or infinite."""
    if not math.isfinite(value) or value < 0:
        click.echo("✗ Amount must be a non-negative number", err=True)
        raise SystemExit(1)
    return value


def format_amount(amount: float | None) -> str:
    """Format a quantity without trailing zeros."""
    if amount is None:
        return "-"
    if not math.isfinite(amount):
        return str(amount)
    if amount == int(amount):
        return str(int(amount))
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def display_errors(errors: RecipeErrors) -> None:
    """Display an error tree grouped by form section."""
    if not has_errors(errors):
        click.echo("✓ No errors")
        return

    if errors.general:
        click.echo("General:")
        for message in errors.general:
            click.echo(f"  • {message}")

    for field_name, messages in errors.fields.items():
        for message in messages:
            click.echo(f"{field_name}: {message}")

    for section, entries in (("Ingredient", errors.ingredients), ("Step", errors.steps)):
        for i, entry in enumerate(entries, 1):
            if not any(entry.values()):
                continue
            click.echo(f"{section} {i}:")
            for field_name, messages in entry.items():
                for message in messages:
                    click.echo(f"  {field_name}: {message}")


# ============================================================================
# Main CLI Group
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name=APP_NAME)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Recipe unit conversion and validation-error tools.

    Convert ingredient quantities between volume and weight units, and
    inspect how validation errors map onto a recipe form.
    """
    setup_logging(verbose)


# ============================================================================
# Unit Commands
# ============================================================================


@cli.command("units")
@click.option(
    "--dimension",
    "-d",
    type=click.Choice([d.value for d in Dimension]),
    help="Only list units of one dimension",
)
def list_units(dimension: str | None):
    """List supported units in catalog order."""
    dimensions = [Dimension(dimension)] if dimension else list(Dimension)

    for dim in dimensions:
        click.echo(f"{dim.value.title()} (base: {BASE_UNITS[dim]})")
        for unit in units_for(dim):
            click.echo(f"  {unit.code:<6} {unit.label:<12} = {unit.factor_to_base:.6g} {BASE_UNITS[dim]}")


@cli.command("convert")
@click.argument("amount", type=float, callback=validate_amount)
@click.argument("from_unit")
@click.argument("to_unit")
def convert_cmd(amount: float, from_unit: str, to_unit: str):
    """Convert AMOUNT from one unit to another.

    Examples:

    \b
        recipebook convert 16 tbsp cup
        recipebook convert 1 cup ml
        recipebook convert 2.5 pounds kg
    """
    try:
        from_code, dimension = resolve_unit(from_unit)
        to_code, to_dimension = resolve_unit(to_unit)
        if dimension != to_dimension:
            raise IncompatibleUnitsError(from_code, to_code)
        result = convert_quantity(amount, from_code, to_code, dimension)
    except UnitError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    click.echo(f"{format_amount(amount)} {from_code} = {format_amount(result)} {to_code}")


@cli.command("all")
@click.argument("amount", type=float, callback=validate_amount)
@click.argument("unit")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def all_units_cmd(amount: float, unit: str, as_json: bool):
    """Show AMOUNT expressed in every unit of its dimension."""
    try:
        code, dimension = resolve_unit(unit)
    except UnitError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    values = calculate_all_units(amount, code, dimension)

    if as_json:
        click.echo(json.dumps(values, indent=2))
        return

    for unit_code, value in values.items():
        label = get_unit(unit_code).label
        click.echo(f"  {format_amount(value):>10} {unit_code:<6} ({label})")


@cli.command("optimal")
@click.argument("amount", type=float, callback=validate_amount)
@click.argument("unit")
def optimal_cmd(amount: float, unit: str):
    """Find the most readable unit for AMOUNT.

    Examples:

    \b
        recipebook optimal 0.5 cup     # 4 fl_oz
        recipebook optimal 1500 g      # 1.5 kg
    """
    try:
        code, dimension = resolve_unit(unit)
    except UnitError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    optimal = find_optimal_unit(amount, code, dimension)
    click.echo(f"{format_amount(optimal.amount)} {optimal.unit_code}")


# ============================================================================
# Validation Error Commands
# ============================================================================


@cli.command("errors")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--ingredients", "-i", "ingredient_count", default=0, help="Ingredient rows in the form")
@click.option("--steps", "-s", "step_count", default=0, help="Step rows in the form")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def errors_cmd(source, ingredient_count: int, step_count: int, as_json: bool):
    """Normalize a validation-error response read from SOURCE (default: stdin).

    Examples:

    \b
        recipebook errors response.json --ingredients 3 --steps 2
        echo '{"detail": "Invalid"}' | recipebook errors
    """
    try:
        payload = json.load(source)
    except json.JSONDecodeError as e:
        click.echo(f"✗ Invalid JSON: {e}", err=True)
        raise SystemExit(1) from None

    errors = create_error_state(ingredient_count, step_count)
    apply_error_details(errors, payload)

    if as_json:
        click.echo(json.dumps(errors.to_dict(), indent=2, ensure_ascii=False))
    else:
        display_errors(errors)


if __name__ == "__main__":
    cli()
