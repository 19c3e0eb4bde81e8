"""Shared fixtures for recipebook tests."""

import pytest

from recipebook.editor import IngredientDraft, RecipeDraft, StepDraft
from recipebook.form_errors import create_error_state


@pytest.fixture
def empty_errors():
    """Error tree for a form with two ingredients and two steps."""
    return create_error_state(ingredient_count=2, step_count=2)


@pytest.fixture
def sample_draft():
    """A pancake recipe draft with mixed volume and weight ingredients."""
    return RecipeDraft(
        title="Pancakes",
        notes="Rest the batter",
        ingredients=[
            IngredientDraft(name="flour", quantity=200, weight_unit="g"),
            IngredientDraft(name="milk", quantity=1.5, volume_unit="cup"),
            IngredientDraft(name="eggs", quantity=2),
        ],
        steps=[
            StepDraft(step=1, description="Whisk everything together"),
            StepDraft(step=2, description="Fry in butter"),
        ],
    )


@pytest.fixture
def drf_error_response():
    """Validation error body as returned by the recipe API."""
    return {
        "title": ["This field is required."],
        "ingredients": [
            {},
            {"quantity": ["Ensure this value is greater than 0."]},
            {"name": ["This field may not be blank."], "non_field_errors": ["Pick a unit."]},
        ],
        "steps": [{"description": ["This field may not be blank."]}],
        "non_field_errors": ["Recipe could not be saved."],
    }
