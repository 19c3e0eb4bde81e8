"""In-memory recipe drafts for the create/edit recipe form."""

import logging
from dataclasses import dataclass, field
from typing import Any

from .conversion import calculate_all_units, find_optimal_unit
from .form_errors import RecipeErrors, apply_error_details, create_error_state
from .units import Dimension, UnsupportedUnitError, get_unit

logger = logging.getLogger(__name__)


# Dietary/allergen tags a recipe can carry: (value, label)
AVAILABLE_TAGS: tuple[tuple[str, str], ...] = (
    ("contains_nuts", "Contains Nuts"),
    ("contains_dairy", "Contains Dairy"),
    ("contains_gluten", "Contains Gluten"),
    ("vegetarian", "Vegetarian"),
    ("vegan", "Vegan"),
    ("contains_shellfish", "Contains Shellfish"),
    ("contains_eggs", "Contains Eggs"),
    ("spicy", "Spicy"),
)

TAG_VALUES = frozenset(value for value, _ in AVAILABLE_TAGS)


def parse_quantity(value: Any) -> float:
    """Parse a quantity typed into the form; blank input means 0."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return 0.0
    quantity = float(value)
    if quantity < 0:
        raise ValueError(f"Quantity cannot be negative: {quantity}")
    return quantity


@dataclass
class IngredientDraft:
    """One ingredient row.

    ``unit_values`` holds the row's quantity in every unit of the selected
    dimension, computed from the last quantity the user typed. Switching
    units reads from it instead of converting an already-rounded value.
    """

    name: str = ""
    quantity: float = 0.0
    volume_unit: str = ""
    weight_unit: str = ""
    unit_values: dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if self.volume_unit and self.weight_unit:
            raise ValueError("An ingredient has either a volume or a weight unit, not both")
        self.quantity = parse_quantity(self.quantity)
        if not self.unit_values:
            self.unit_values = self._recalculate(self.quantity)

    @property
    def active_dimension(self) -> Dimension | None:
        if self.volume_unit:
            return Dimension.VOLUME
        if self.weight_unit:
            return Dimension.WEIGHT
        return None

    @property
    def active_unit(self) -> str:
        return self.volume_unit or self.weight_unit

    def _recalculate(self, quantity: float) -> dict[str, float]:
        dimension = self.active_dimension
        if dimension is None:
            return {}
        return calculate_all_units(quantity, self.active_unit, dimension)

    def set_quantity(self, value: Any) -> None:
        """Set the typed quantity and rebuild the whole unit map from it."""
        self.quantity = parse_quantity(value)
        self.unit_values = self._recalculate(self.quantity)

    def set_unit(self, dimension: Dimension, code: str | None) -> None:
        """
        Select, switch or clear the unit for one dimension.

        - Clearing the unit resets the quantity to 0.
        - Selecting a first unit builds the unit map from the current quantity.
        - Switching units takes the quantity from the unit map.
        - Selecting a unit clears the other dimension's unit.

        Raises:
            UnsupportedUnitError: If code is not a unit of the dimension
        """
        code = code or ""
        if code and get_unit(code, dimension) is None:
            raise UnsupportedUnitError(code, dimension)

        old_code = self.volume_unit if dimension == Dimension.VOLUME else self.weight_unit

        if dimension == Dimension.VOLUME:
            self.volume_unit = code
            if code:
                self.weight_unit = ""
        else:
            self.weight_unit = code
            if code:
                self.volume_unit = ""

        if not code:
            self.quantity = 0.0
            self.unit_values = {}
        elif not old_code:
            self.unit_values = calculate_all_units(self.quantity, code, dimension)
        elif old_code != code:
            cached = self.unit_values.get(code)
            if cached is not None:
                self.quantity = cached
            logger.debug("Switched %s from %s to %s: %s", self.name, old_code, code, self.quantity)

    def optimize(self) -> None:
        """Switch to the most readable unit for the current quantity."""
        dimension = self.active_dimension
        if dimension is None or not self.quantity:
            return
        optimal = find_optimal_unit(self.quantity, self.active_unit, dimension)
        if not optimal.amount:
            # Too small to show in any unit without rounding to 0
            return
        if dimension == Dimension.VOLUME:
            self.volume_unit = optimal.unit_code
        else:
            self.weight_unit = optimal.unit_code
        self.quantity = optimal.amount
        self.unit_values = self._recalculate(self.quantity)

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "volume_unit": self.volume_unit,
            "weight_unit": self.weight_unit,
        }


@dataclass
class StepDraft:
    """One numbered instruction step."""

    step: int
    description: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {"step": self.step, "description": self.description}


@dataclass
class RecipeDraft:
    """A recipe being created or edited, before it is submitted."""

    title: str = ""
    notes: str = ""
    favorite: bool = False
    ingredients: list[IngredientDraft] = field(default_factory=lambda: [IngredientDraft()])
    steps: list[StepDraft] = field(default_factory=lambda: [StepDraft(step=1)])
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "RecipeDraft":
        """Build a draft from a stored recipe, e.g. when opening the edit form."""
        ingredients = [
            IngredientDraft(
                name=item.get("name") or "",
                quantity=item.get("quantity") or 0.0,
                volume_unit=item.get("volume_unit") or "",
                weight_unit=item.get("weight_unit") or "",
            )
            for item in data.get("ingredients") or []
        ]
        steps = sorted(
            (
                StepDraft(step=int(item.get("step") or 0), description=item.get("description") or "")
                for item in data.get("steps") or []
            ),
            key=lambda s: s.step,
        )
        tags = [tag for tag in data.get("tags") or [] if tag in TAG_VALUES]
        return cls(
            title=data.get("title") or "",
            notes=data.get("notes") or "",
            favorite=bool(data.get("favorite")),
            ingredients=ingredients,
            steps=steps,
            tags=tags,
        )

    def add_ingredient(self, ingredient: IngredientDraft | None = None) -> IngredientDraft:
        ingredient = ingredient or IngredientDraft()
        self.ingredients.append(ingredient)
        return ingredient

    def remove_ingredient(self, index: int) -> None:
        del self.ingredients[index]

    def add_step(self, description: str = "") -> StepDraft:
        step = StepDraft(step=len(self.steps) + 1, description=description)
        self.steps.append(step)
        return step

    def remove_step(self, index: int) -> None:
        """Remove a step and renumber the remaining ones from 1."""
        del self.steps[index]
        for number, step in enumerate(self.steps, 1):
            step.step = number

    def toggle_tag(self, tag: str) -> bool:
        """
        Add a tag if absent, remove it if present.

        Returns:
            True if the tag is now set

        Raises:
            ValueError: If the tag is not in AVAILABLE_TAGS
        """
        if tag not in TAG_VALUES:
            raise ValueError(f"Unknown tag: {tag!r}")
        if tag in self.tags:
            self.tags.remove(tag)
            return False
        self.tags.append(tag)
        return True

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "notes": self.notes,
            "favorite": self.favorite,
            "tags": list(self.tags),
            "ingredients": [ingredient.to_payload() for ingredient in self.ingredients],
            "steps": [step.to_payload() for step in self.steps],
        }

    def empty_errors(self) -> RecipeErrors:
        """Create an empty error tree with one entry per ingredient and step row."""
        return create_error_state(len(self.ingredients), len(self.steps))

    def errors_from_response(self, payload: Any) -> RecipeErrors:
        """Build the error tree for a failed submission of this draft."""
        errors = self.empty_errors()
        apply_error_details(errors, payload)
        return errors
