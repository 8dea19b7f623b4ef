"""
Pytest configuration and shared fixtures.

Fixtures are reusable test setup that can be injected into tests.
"""

import random

import pytest
import tempfile
import shutil

from pantry_planner.data.database import DatabaseInterface
from pantry_planner.data.models import (
    IngredientQuantity,
    MealPlan,
    NutritionProfile,
    Recipe,
)


@pytest.fixture
def temp_db_dir():
    """
    Create a temporary database directory for testing.

    This fixture is automatically cleaned up after each test.
    """
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def db(temp_db_dir):
    """
    Create a fresh DatabaseInterface for each test.

    Usage in tests:
        def test_something(db):
            db.save_favorites(1, [...])
    """
    return DatabaseInterface(db_dir=temp_db_dir)


@pytest.fixture
def rng():
    """Seeded random source so generated recipes are reproducible."""
    return random.Random(42)


def make_recipe(recipe_id="recipe_1", title="Asian Stir-Fried Chicken", missing=None, **overrides):
    """Build a hand-written recipe; keyword overrides replace any field."""
    fields = dict(
        id=recipe_id,
        title=title,
        description="Quick and healthy stir-fry with chicken and broccoli and aromatic seasonings.",
        cook_time="13 min",
        servings=2,
        used_ingredients=["chicken", "broccoli"],
        missing_ingredients=list(missing) if missing is not None else ["garlic", "ginger"],
        full_ingredient_list=[
            IngredientQuantity("chicken", "1", "lb"),
            IngredientQuantity("broccoli", "1", "head"),
            IngredientQuantity("garlic", "3", "cloves"),
            IngredientQuantity("ginger", "1", "tablespoon fresh"),
        ],
        dietary_tags=["Gluten-Free", "High-Protein"],
        cuisine="Chinese",
        nutrition=NutritionProfile(
            calories=225, protein_g=27.1, carbs_g=6.5, fat_g=2.4, fiber_g=2.0, sugar_g=1.0
        ),
        instructions=["Heat oil in a large pan or wok over medium-high heat."],
    )
    fields.update(overrides)
    return Recipe(**fields)


@pytest.fixture
def recipe_factory():
    """The make_recipe builder, for tests that need several custom recipes."""
    return make_recipe


@pytest.fixture
def sample_recipe():
    """Sample recipe for testing."""
    return make_recipe()


@pytest.fixture
def sample_recipes():
    """Three recipes with different tags and cuisines."""
    return [
        make_recipe("r1", "Asian Stir-Fried Chicken"),
        make_recipe(
            "r2", "Italian Baked Tofu",
            used_ingredients=["tofu", "spinach"],
            missing=["basil", "parmesan"],
            dietary_tags=["Vegan", "Vegetarian", "Gluten-Free"],
            cuisine="Italian",
        ),
        make_recipe(
            "r3", "Mexican Grilled Beef",
            used_ingredients=["beef", "rice"],
            missing=["cumin", "lime"],
            dietary_tags=["High-Protein"],
            cuisine="Mexican",
        ),
    ]


@pytest.fixture
def sample_meal_plan():
    """
    Plan with Monday meal1 needing garlic and ginger, and Tuesday meal2
    needing garlic and soy sauce.
    """
    plan = MealPlan()
    plan.assign("Monday", 1, make_recipe("m1", missing=["garlic", "ginger"]))
    plan.assign("Tuesday", 2, make_recipe("t2", "Japanese Steamed Fish", missing=["garlic", "soy sauce"]))
    return plan
