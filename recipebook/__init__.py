"""Recipebook - unit conversion and validation-error handling for recipe forms."""

__version__ = "1.0.0"

from .conversion import OptimalUnit, calculate_all_units, convert_quantity, find_optimal_unit
from .editor import AVAILABLE_TAGS, IngredientDraft, RecipeDraft, StepDraft
from .form_errors import (
    ErrorContext,
    RecipeErrors,
    add_field_error,
    add_general_error,
    add_ingredient_error,
    add_step_error,
    apply_error_details,
    clone_error_state,
    create_error_state,
    has_errors,
)
from .units import (
    VOLUME_UNITS,
    WEIGHT_UNITS,
    Dimension,
    IncompatibleUnitsError,
    UnitDefinition,
    UnitError,
    UnsupportedUnitError,
    is_compatible,
)

__all__ = [
    "Dimension",
    "UnitDefinition",
    "VOLUME_UNITS",
    "WEIGHT_UNITS",
    "UnitError",
    "UnsupportedUnitError",
    "IncompatibleUnitsError",
    "is_compatible",
    "convert_quantity",
    "calculate_all_units",
    "find_optimal_unit",
    "OptimalUnit",
    "RecipeErrors",
    "ErrorContext",
    "create_error_state",
    "clone_error_state",
    "add_general_error",
    "add_field_error",
    "add_ingredient_error",
    "add_step_error",
    "apply_error_details",
    "has_errors",
    "AVAILABLE_TAGS",
    "IngredientDraft",
    "StepDraft",
    "RecipeDraft",
]
