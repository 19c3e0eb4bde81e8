"""Tests for recipe drafts."""

import pytest

from recipebook.editor import (
    AVAILABLE_TAGS,
    IngredientDraft,
    RecipeDraft,
    StepDraft,
    parse_quantity,
)
from recipebook.form_errors import has_errors
from recipebook.units import Dimension, UnsupportedUnitError

VOLUME = Dimension.VOLUME
WEIGHT = Dimension.WEIGHT


class TestParseQuantity:
    """Tests for parse_quantity function."""

    def test_numbers(self):
        assert parse_quantity(2) == 2.0
        assert parse_quantity(0.5) == 0.5

    def test_strings(self):
        assert parse_quantity("1.5") == 1.5
        assert parse_quantity(" 1,5 ") == 1.5

    def test_blank_is_zero(self):
        assert parse_quantity("") == 0.0
        assert parse_quantity(None) == 0.0

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            parse_quantity("-1")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            parse_quantity("a lot")


# ============================================================================
# Ingredient Draft Tests
# ============================================================================


class TestIngredientDraft:
    """Tests for IngredientDraft unit handling."""

    def test_initial_unit_values(self):
        ingredient = IngredientDraft(name="milk", quantity=1, volume_unit="cup")
        assert ingredient.unit_values["tbsp"] == 16
        assert ingredient.unit_values["ml"] == 236.59

    def test_no_unit_no_values(self):
        assert IngredientDraft(name="eggs", quantity=2).unit_values == {}

    def test_both_units_rejected(self):
        with pytest.raises(ValueError):
            IngredientDraft(quantity=1, volume_unit="cup", weight_unit="g")

    def test_active_unit(self):
        ingredient = IngredientDraft(quantity=1, weight_unit="kg")
        assert ingredient.active_unit == "kg"
        assert ingredient.active_dimension == WEIGHT
        assert IngredientDraft().active_dimension is None

    def test_set_quantity_rebuilds_values(self):
        ingredient = IngredientDraft(quantity=1, volume_unit="cup")
        ingredient.set_quantity("2")
        assert ingredient.quantity == 2.0
        assert ingredient.unit_values["tbsp"] == 32

    def test_set_quantity_without_unit(self):
        ingredient = IngredientDraft()
        ingredient.set_quantity(3)
        assert ingredient.quantity == 3.0
        assert ingredient.unit_values == {}

    def test_switch_uses_cached_values(self):
        ingredient = IngredientDraft(quantity=1, volume_unit="cup")

        ingredient.set_unit(VOLUME, "tbsp")
        assert ingredient.quantity == 16

        ingredient.set_unit(VOLUME, "ml")
        assert ingredient.quantity == 236.59

        # Back to cups without drifting through the rounded ml value
        ingredient.set_unit(VOLUME, "cup")
        assert ingredient.quantity == 1
        assert ingredient.volume_unit == "cup"

    def test_first_selection_builds_values(self):
        ingredient = IngredientDraft(name="flour", quantity=200)
        ingredient.set_unit(WEIGHT, "g")
        assert ingredient.quantity == 200
        assert ingredient.unit_values["kg"] == 0.2

    def test_clearing_unit_resets(self):
        ingredient = IngredientDraft(quantity=2, weight_unit="kg")
        ingredient.set_unit(WEIGHT, "")
        assert ingredient.quantity == 0
        assert ingredient.weight_unit == ""
        assert ingredient.unit_values == {}

    def test_selecting_weight_clears_volume(self):
        ingredient = IngredientDraft(quantity=100, volume_unit="ml")
        ingredient.set_unit(WEIGHT, "g")
        assert ingredient.volume_unit == ""
        assert ingredient.weight_unit == "g"
        assert ingredient.unit_values["kg"] == 0.1

    def test_same_unit_keeps_quantity(self):
        ingredient = IngredientDraft(quantity=3, volume_unit="tsp")
        ingredient.set_unit(VOLUME, "tsp")
        assert ingredient.quantity == 3

    def test_unknown_unit_rejected(self):
        ingredient = IngredientDraft(quantity=1, volume_unit="cup")
        with pytest.raises(UnsupportedUnitError):
            ingredient.set_unit(VOLUME, "pinch")
        with pytest.raises(UnsupportedUnitError):
            ingredient.set_unit(VOLUME, "g")
        assert ingredient.volume_unit == "cup"

    def test_optimize(self):
        ingredient = IngredientDraft(quantity=0.5, volume_unit="cup")
        ingredient.optimize()
        assert ingredient.volume_unit == "fl_oz"
        assert ingredient.quantity == 4
        assert ingredient.unit_values["cup"] == 0.5

    def test_optimize_keeps_amount_too_small_for_any_unit(self):
        ingredient = IngredientDraft(quantity=0.001, volume_unit="ml")
        ingredient.optimize()
        assert ingredient.volume_unit == "ml"
        assert ingredient.quantity == 0.001

    def test_optimize_without_unit(self):
        ingredient = IngredientDraft(quantity=2)
        ingredient.optimize()
        assert ingredient.quantity == 2
        assert ingredient.active_unit == ""

    def test_to_payload(self):
        ingredient = IngredientDraft(name="sugar", quantity=100, weight_unit="g")
        assert ingredient.to_payload() == {
            "name": "sugar",
            "quantity": 100,
            "volume_unit": "",
            "weight_unit": "g",
        }


# ============================================================================
# Recipe Draft Tests
# ============================================================================


class TestRecipeDraft:
    """Tests for RecipeDraft."""

    def test_new_draft_has_one_row_each(self):
        draft = RecipeDraft()
        assert len(draft.ingredients) == 1
        assert draft.steps == [StepDraft(step=1)]

    def test_add_and_remove_ingredient(self, sample_draft):
        sample_draft.add_ingredient(IngredientDraft(name="salt"))
        assert sample_draft.ingredients[-1].name == "salt"
        sample_draft.remove_ingredient(0)
        assert [i.name for i in sample_draft.ingredients] == ["milk", "eggs", "salt"]

    def test_add_step_numbers(self, sample_draft):
        step = sample_draft.add_step("Serve")
        assert step.step == 3

    def test_remove_step_renumbers(self, sample_draft):
        sample_draft.add_step("Serve")
        sample_draft.remove_step(0)
        assert [(s.step, s.description) for s in sample_draft.steps] == [
            (1, "Fry in butter"),
            (2, "Serve"),
        ]

    def test_toggle_tag(self, sample_draft):
        assert sample_draft.toggle_tag("vegetarian") is True
        assert sample_draft.tags == ["vegetarian"]
        assert sample_draft.toggle_tag("vegetarian") is False
        assert sample_draft.tags == []

    def test_unknown_tag(self, sample_draft):
        with pytest.raises(ValueError, match="Unknown tag"):
            sample_draft.toggle_tag("keto")

    def test_tag_catalog(self):
        values = [value for value, _ in AVAILABLE_TAGS]
        assert values[0] == "contains_nuts"
        assert "spicy" in values
        assert len(values) == len(set(values))

    def test_to_payload(self, sample_draft):
        sample_draft.toggle_tag("contains_eggs")
        payload = sample_draft.to_payload()
        assert payload["title"] == "Pancakes"
        assert payload["tags"] == ["contains_eggs"]
        assert payload["ingredients"][1] == {
            "name": "milk",
            "quantity": 1.5,
            "volume_unit": "cup",
            "weight_unit": "",
        }
        assert payload["steps"][0] == {"step": 1, "description": "Whisk everything together"}

    def test_from_payload(self):
        draft = RecipeDraft.from_payload(
            {
                "title": "Soup",
                "favorite": True,
                "tags": ["vegan", "unknown"],
                "ingredients": [{"name": "water", "quantity": "2", "volume_unit": "l"}],
                "steps": [
                    {"step": 2, "description": "Simmer"},
                    {"step": 1, "description": "Boil"},
                ],
            }
        )
        assert draft.title == "Soup"
        assert draft.favorite is True
        assert draft.tags == ["vegan"]
        assert draft.ingredients[0].quantity == 2.0
        assert draft.ingredients[0].unit_values["cup"] == 8.45
        assert [s.description for s in draft.steps] == ["Boil", "Simmer"]

    def test_empty_errors_sized_to_rows(self, sample_draft):
        errors = sample_draft.empty_errors()
        assert len(errors.ingredients) == 3
        assert len(errors.steps) == 2
        assert not has_errors(errors)

    def test_errors_from_response(self, sample_draft, drf_error_response):
        errors = sample_draft.errors_from_response(drf_error_response)
        assert errors.fields["title"] == ["This field is required."]
        assert errors.ingredients[2]["general"] == ["Pick a unit."]
        assert errors.steps[1] == {}
        assert has_errors(errors)
