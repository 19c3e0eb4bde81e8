"""Quantity conversion between catalog units and optimal display unit selection."""

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from .config import QUANTITY_PRECISION
from .units import Dimension, UnsupportedUnitError, get_unit, unit_codes

logger = logging.getLogger(__name__)


@dataclass
class OptimalUnit:
    """A quantity expressed in the unit chosen for display."""

    amount: float | None
    unit_code: str | None


def round_half_up(value: float, places: int = QUANTITY_PRECISION) -> float:
    """
    Round to a fixed number of decimal places, halves away from zero.

    The float's shortest repr is used so 1.005 rounds to 1.01 rather than
    following its binary expansion down to 1.0.
    """
    if not math.isfinite(value):
        return value
    exact = Decimal(repr(value))
    with localcontext() as ctx:
        # quantize needs every digit down to the last kept decimal place
        ctx.prec = max(28, exact.adjusted() + places + 1)
        return float(exact.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _factor(code: str, dimension: Dimension, strict: bool) -> float:
    unit = get_unit(code, dimension)
    if unit is not None:
        return unit.factor_to_base
    if strict:
        raise UnsupportedUnitError(code, dimension)
    logger.warning("Unknown %s unit %r, conversion yields NaN", dimension.value, code)
    return math.nan


def convert_quantity(
    amount: float | None,
    from_code: str | None,
    to_code: str | None,
    dimension: Dimension,
    *,
    strict: bool = True,
) -> float | None:
    """
    Convert a quantity from one unit to another within a dimension.

    Missing amount (None or 0), missing units, or identical units are not
    errors: the amount is returned unchanged.

    Args:
        amount: The quantity to convert
        from_code: Unit code to convert from
        to_code: Unit code to convert to
        dimension: Dimension both units must belong to
        strict: Raise for unknown units instead of returning NaN

    Returns:
        The converted quantity, rounded to 2 decimal places

    Raises:
        UnsupportedUnitError: If a unit is not in the dimension's catalog
            and strict is True
    """
    if not amount or not from_code or not to_code or from_code == to_code:
        return amount

    from_factor = _factor(from_code, dimension, strict)
    to_factor = _factor(to_code, dimension, strict)

    # Go through the base unit (cup or gram)
    converted = amount * from_factor / to_factor
    return round_half_up(converted)


def calculate_all_units(
    amount: float | None,
    unit_code: str | None,
    dimension: Dimension,
) -> dict[str, float]:
    """
    Express a quantity in every unit of its dimension.

    Args:
        amount: The quantity
        unit_code: The unit the quantity is given in
        dimension: Dimension of the unit

    Returns:
        Mapping of unit code to converted amount in catalog order, or an
        empty mapping when amount or unit is missing
    """
    if not amount or not unit_code:
        return {}

    return {
        code: convert_quantity(amount, unit_code, code, dimension)
        for code in unit_codes(dimension)
    }


def find_optimal_unit(
    amount: float | None,
    current_code: str | None,
    dimension: Dimension,
) -> OptimalUnit:
    """
    Find the most readable unit for a quantity.

    Picks the unit whose value is closest to 1 among those giving at least 1.
    Ties go to the unit listed first in the catalog. When no unit gives at
    least 1, the first catalog unit is used.

    Examples:
        0.5 cup -> 4 fl_oz
        1000 g -> 1 kg
    """
    if not amount or not current_code:
        return OptimalUnit(amount=amount, unit_code=current_code)

    candidates = [
        OptimalUnit(
            amount=convert_quantity(amount, current_code, code, dimension),
            unit_code=code,
        )
        for code in unit_codes(dimension)
    ]

    at_least_one = [c for c in candidates if c.amount is not None and c.amount >= 1]
    if not at_least_one:
        logger.debug("No unit gives >= 1 for %s %s", amount, current_code)
        return candidates[0]

    best = at_least_one[0]
    for candidate in at_least_one[1:]:
        if abs(candidate.amount - 1) < abs(best.amount - 1):
            best = candidate

    return OptimalUnit(amount=round_half_up(best.amount), unit_code=best.unit_code)
