"""Unit catalog: the supported volume and weight units and their conversion factors."""

from dataclasses import dataclass
from enum import Enum

from rapidfuzz import fuzz, process

from .config import get_fuzzy_cutoff


class Dimension(str, Enum):
    """Measurement family a unit belongs to."""

    VOLUME = "volume"
    WEIGHT = "weight"


class UnitError(Exception):
    """Base exception for unit lookup and conversion errors."""

    pass


class UnsupportedUnitError(UnitError):
    """Raised when a unit code is not in the catalog for a dimension."""

    def __init__(self, code: str, dimension: Dimension | None = None):
        self.code = code
        self.dimension = dimension
        if dimension is None:
            message = f"Unsupported unit: {code!r}"
        else:
            message = f"Unsupported {dimension.value} unit: {code!r}"
        suggestion = suggest_unit_code(code, dimension)
        if suggestion:
            message += f" (did you mean {suggestion!r}?)"
        super().__init__(message)


class IncompatibleUnitsError(UnitError):
    """Raised when two units belong to different dimensions."""

    def __init__(self, from_code: str, to_code: str):
        self.from_code = from_code
        self.to_code = to_code
        super().__init__(f"Cannot convert between {from_code!r} and {to_code!r}")


@dataclass(frozen=True)
class UnitDefinition:
    """A catalog unit.

    ``factor_to_base`` is how many base units (cup for volume, gram for
    weight) one of this unit equals.
    """

    code: str
    label: str
    factor_to_base: float
    dimension: Dimension


# Catalog order is used for iteration and tie-breaking; it is not sorted by size.
VOLUME_UNITS: tuple[UnitDefinition, ...] = (
    UnitDefinition("tsp", "Teaspoon", 1 / 48, Dimension.VOLUME),
    UnitDefinition("tbsp", "Tablespoon", 1 / 16, Dimension.VOLUME),
    UnitDefinition("fl_oz", "Fluid Ounce", 1 / 8, Dimension.VOLUME),
    UnitDefinition("cup", "Cup", 1.0, Dimension.VOLUME),
    UnitDefinition("pt", "Pint", 2.0, Dimension.VOLUME),
    UnitDefinition("qt", "Quart", 4.0, Dimension.VOLUME),
    UnitDefinition("gal", "Gallon", 16.0, Dimension.VOLUME),
    UnitDefinition("ml", "Milliliter", 1 / 236.588, Dimension.VOLUME),
    UnitDefinition("l", "Liter", 4.22675, Dimension.VOLUME),
)

WEIGHT_UNITS: tuple[UnitDefinition, ...] = (
    UnitDefinition("g", "Gram", 1.0, Dimension.WEIGHT),
    UnitDefinition("kg", "Kilogram", 1000.0, Dimension.WEIGHT),
    UnitDefinition("oz", "Ounce", 28.3495, Dimension.WEIGHT),
    UnitDefinition("lb", "Pound", 453.592, Dimension.WEIGHT),
)

BASE_UNITS: dict[Dimension, str] = {
    Dimension.VOLUME: "cup",
    Dimension.WEIGHT: "g",
}

_CATALOG: dict[Dimension, tuple[UnitDefinition, ...]] = {
    Dimension.VOLUME: VOLUME_UNITS,
    Dimension.WEIGHT: WEIGHT_UNITS,
}


def _index_units() -> dict[str, UnitDefinition]:
    index: dict[str, UnitDefinition] = {}
    for units in _CATALOG.values():
        for unit in units:
            if unit.code in index:
                raise ValueError(f"Duplicate unit code in catalog: {unit.code!r}")
            if unit.factor_to_base <= 0:
                raise ValueError(f"Unit {unit.code!r} must have a positive factor")
            index[unit.code] = unit
    return index


UNITS_BY_CODE: dict[str, UnitDefinition] = _index_units()

# Free-text spellings accepted for each catalog code (codes and labels are added below)
UNIT_ALIASES: dict[str, str] = {
    "teaspoons": "tsp",
    "tsk": "tsp",
    "tablespoons": "tbsp",
    "tbs": "tbsp",
    "tbl": "tbsp",
    "spsk": "tbsp",
    "fl oz": "fl_oz",
    "fl. oz": "fl_oz",
    "floz": "fl_oz",
    "fluid ounces": "fl_oz",
    "cups": "cup",
    "pints": "pt",
    "quarts": "qt",
    "gallons": "gal",
    "milliliters": "ml",
    "millilitres": "ml",
    "millilitre": "ml",
    "liters": "l",
    "litres": "l",
    "litre": "l",
    "grams": "g",
    "gr": "g",
    "kilograms": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "ounces": "oz",
    "pounds": "lb",
    "lbs": "lb",
}
for _unit in UNITS_BY_CODE.values():
    UNIT_ALIASES.setdefault(_unit.code, _unit.code)
    UNIT_ALIASES.setdefault(_unit.label.lower(), _unit.code)


def units_for(dimension: Dimension) -> tuple[UnitDefinition, ...]:
    """Get the catalog units of a dimension, in catalog order."""
    return _CATALOG[dimension]


def unit_codes(dimension: Dimension) -> list[str]:
    """Get the catalog codes of a dimension, in catalog order."""
    return [unit.code for unit in _CATALOG[dimension]]


def get_unit(code: str | None, dimension: Dimension | None = None) -> UnitDefinition | None:
    """Look up a unit by code, optionally restricted to one dimension."""
    if not code:
        return None
    unit = UNITS_BY_CODE.get(code)
    if unit is None or (dimension is not None and unit.dimension != dimension):
        return None
    return unit


def get_dimension(code: str | None) -> Dimension | None:
    """Get the dimension of a unit code, or None if unknown."""
    unit = get_unit(code)
    return unit.dimension if unit else None


def is_compatible(code_a: str | None, code_b: str | None) -> bool:
    """
    Check if two unit codes can be converted into each other.

    Args:
        code_a: First unit code
        code_b: Second unit code

    Returns:
        True if both codes are known and share a dimension
    """
    dimension_a = get_dimension(code_a)
    dimension_b = get_dimension(code_b)

    if dimension_a is None or dimension_b is None:
        return False

    return dimension_a == dimension_b


def resolve_unit_code(text: str | None) -> str | None:
    """
    Resolve free text (code, label or alias) to a catalog code.

    Examples:
        "cups" -> "cup"
        "Tablespoon" -> "tbsp"
        "fl oz" -> "fl_oz"
        "handful" -> None
    """
    if not text:
        return None
    key = " ".join(text.lower().split())
    return UNIT_ALIASES.get(key)


def suggest_unit_code(text: str | None, dimension: Dimension | None = None) -> str | None:
    """Suggest the closest catalog code for misspelled unit text."""
    if not text:
        return None

    choices = {
        alias: code
        for alias, code in UNIT_ALIASES.items()
        if dimension is None or UNITS_BY_CODE[code].dimension == dimension
    }
    match = process.extractOne(
        text.lower().strip(),
        list(choices),
        scorer=fuzz.ratio,
        score_cutoff=get_fuzzy_cutoff(),
    )
    if match is None:
        return None
    return choices[match[0]]
