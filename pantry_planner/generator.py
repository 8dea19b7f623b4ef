"""
Procedural recipe generator.

Builds recipes by combining a cooking method, a cuisine style and a handful of
the user's pantry ingredients, then derives everything else (missing
ingredients, tags, nutrition, quantities, steps) from reference tables.

Output is random. Pass a seeded random.Random as `rng` to get a
reproducible batch.
"""

import logging
import random
import re
import string
import time
from typing import Collection, List, Optional, Sequence, Set

from .data.models import IngredientQuantity, NutritionProfile, Recipe
from .dietary import classify
from .instructions import synthesize_instructions
from .tables import (
    COMPLEMENTARY_INGREDIENTS,
    COOKING_METHODS,
    CUISINE_STYLES,
    DEFAULT_QUANTITY,
    NUTRITION_TABLE,
    QUANTITY_TABLE,
    CookingMethod,
    CuisineStyle,
    cuisine_for_style,
    fuzzy_lookup,
    fuzzy_match,
    matches_any,
)

logger = logging.getLogger(__name__)

DEFAULT_RECIPE_COUNT = 5

# Attempts per slot before giving up on finding an unused title
MAX_TITLE_ATTEMPTS = 20

# A complementary protein/vegetable is only added when a draw exceeds these
PROTEIN_ADD_THRESHOLD = 0.5
VEGETABLE_ADD_THRESHOLD = 0.3

MIN_NUTRITION_MATCHES = 2
MIN_COOK_MINUTES = 5

_ID_ALPHABET = string.ascii_lowercase + string.digits


def capitalize_first(text: str) -> str:
    """Upper-case the first character and lower-case the rest."""
    return text[:1].upper() + text[1:].lower()


def parse_pantry_input(text: str) -> List[str]:
    """
    Split free-form pantry text into ingredient tokens.

    Splits on commas and whitespace, lowercases, drops one-character tokens
    and duplicates.

    Examples:
        parse_pantry_input("Chicken, broccoli rice") -> ["chicken", "broccoli", "rice"]
    """
    if not isinstance(text, str):
        raise TypeError(f"Pantry input must be a string, got {type(text).__name__}")

    tokens = []
    for token in re.split(r"[,\s]+", text.lower()):
        token = token.strip()
        if len(token) > 1 and token not in tokens:
            tokens.append(token)
    return tokens


def normalize_pantry(pantry_ingredients: Sequence[str]) -> List[str]:
    """Strip and lowercase a pantry list, dropping blank entries."""
    if not isinstance(pantry_ingredients, (list, tuple)):
        raise TypeError(
            f"Pantry ingredients must be a list, got {type(pantry_ingredients).__name__}"
        )
    normalized = []
    for ingredient in pantry_ingredients:
        if not isinstance(ingredient, str):
            raise TypeError(f"Ingredient must be a string, got {type(ingredient).__name__}")
        name = ingredient.strip().lower()
        if name:
            normalized.append(name)
    return normalized


def _make_recipe_id(rng: random.Random) -> str:
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(9))
    return f"recipe_{int(time.time() * 1000)}_{suffix}"


def available_cuisine_styles(cuisine_filter: Optional[Collection[str]]) -> List[CuisineStyle]:
    """
    Cuisine styles allowed by the filter.

    Falls back to every style when the filter is empty or none of the styles
    maps into it.
    """
    if not cuisine_filter:
        return list(CUISINE_STYLES)
    matching = [style for style in CUISINE_STYLES if cuisine_for_style(style.style) in cuisine_filter]
    return matching or list(CUISINE_STYLES)


def generate_missing_ingredients(
    used_ingredients: Sequence[str],
    cuisine_style: CuisineStyle,
    rng: random.Random,
) -> List[str]:
    """
    Pick ingredients the recipe needs beyond what the user has.

    Two or three of the style's seasonings, plus possibly a protein and a
    vegetable when the used ingredients lack them. Anything overlapping a used
    ingredient is dropped, and the result is capped at 2-4 items.
    """
    seasonings = list(cuisine_style.seasonings)
    rng.shuffle(seasonings)
    missing = seasonings[:rng.randint(2, 3)]

    proteins = COMPLEMENTARY_INGREDIENTS["proteins"]
    vegetables = COMPLEMENTARY_INGREDIENTS["vegetables"]
    has_protein = any(matches_any(ing, proteins) for ing in used_ingredients)
    has_vegetable = any(matches_any(ing, vegetables) for ing in used_ingredients)

    if not has_protein and rng.random() > PROTEIN_ADD_THRESHOLD:
        missing.append(rng.choice(proteins))
    if not has_vegetable and rng.random() > VEGETABLE_ADD_THRESHOLD:
        missing.append(rng.choice(vegetables))

    unique = []
    for ingredient in missing:
        if ingredient in unique:
            continue
        if any(fuzzy_match(ingredient, used) for used in used_ingredients):
            continue
        unique.append(ingredient)

    return unique[:rng.randint(2, 4)]


def estimate_nutrition(ingredients: Sequence[str], servings: int) -> Optional[NutritionProfile]:
    """
    Per-serving nutrition from 100g reference portions.

    Returns None unless at least MIN_NUTRITION_MATCHES ingredients are in the
    nutrition table; callers must treat None as unknown.
    """
    totals = [0.0] * 6
    matched = 0
    for ingredient in ingredients:
        profile = fuzzy_lookup(ingredient, NUTRITION_TABLE)
        if profile is None:
            continue
        matched += 1
        totals = [total + value for total, value in zip(totals, profile)]

    if matched < MIN_NUTRITION_MATCHES:
        return None

    calories, protein, carbs, fat, fiber, sugar = (value / servings for value in totals)
    return NutritionProfile(
        calories=int(round(calories)),
        protein_g=round(protein, 1),
        carbs_g=round(carbs, 1),
        fat_g=round(fat, 1),
        fiber_g=round(fiber, 1),
        sugar_g=round(sugar, 1),
    )


def build_ingredient_list(ingredients: Sequence[str]) -> List[IngredientQuantity]:
    """Attach default display quantities to each ingredient, in order."""
    result = []
    for ingredient in ingredients:
        quantity, unit = fuzzy_lookup(ingredient, QUANTITY_TABLE) or DEFAULT_QUANTITY
        result.append(IngredientQuantity(name=ingredient, quantity=quantity, unit=unit))
    return result


def _build_recipe(
    title: str,
    method: CookingMethod,
    style: CuisineStyle,
    used: List[str],
    missing: List[str],
    rng: random.Random,
) -> Recipe:
    description = f"{method.description} {' and '.join(used[:2])} and aromatic seasonings."

    servings = rng.randint(2, 4)
    minutes = max(MIN_COOK_MINUTES, method.base_minutes + rng.randint(-2, 2))

    all_ingredients = used + missing
    full_ingredient_list = build_ingredient_list(all_ingredients)

    return Recipe(
        id=_make_recipe_id(rng),
        title=title,
        description=description,
        cook_time=f"{minutes} min",
        servings=servings,
        used_ingredients=used,
        missing_ingredients=missing,
        full_ingredient_list=full_ingredient_list,
        dietary_tags=classify(all_ingredients, rng),
        cuisine=cuisine_for_style(style.style),
        nutrition=estimate_nutrition(all_ingredients, servings),
        instructions=synthesize_instructions(title, used, missing, full_ingredient_list),
    )


def create_unique_recipe(
    pantry: List[str],
    used_titles: Set[str],
    cuisine_filter: Optional[Collection[str]],
    rng: random.Random,
) -> Optional[Recipe]:
    """
    Build one recipe whose title is not in used_titles.

    Returns:
        The recipe, or None after MAX_TITLE_ATTEMPTS collisions
    """
    styles = available_cuisine_styles(cuisine_filter)

    for attempt in range(1, MAX_TITLE_ATTEMPTS + 1):
        method = rng.choice(COOKING_METHODS)
        style = rng.choice(styles)

        shuffled = list(pantry)
        rng.shuffle(shuffled)
        used = shuffled[:min(len(pantry), rng.randint(2, 4))]

        missing = generate_missing_ingredients(used, style, rng)

        title = f"{style.style} {method.method} {capitalize_first(used[0])}"
        if title in used_titles:
            logger.debug(f"Title collision on attempt {attempt}: {title}")
            continue

        return _build_recipe(title, method, style, used, missing, rng)

    logger.debug(f"Gave up after {MAX_TITLE_ATTEMPTS} title collisions")
    return None


def generate_recipes(
    pantry_ingredients: Sequence[str],
    cuisine_filter: Optional[Collection[str]] = None,
    count: int = DEFAULT_RECIPE_COUNT,
    rng: Optional[random.Random] = None,
) -> List[Recipe]:
    """
    Generate a batch of recipes with distinct titles.

    Args:
        pantry_ingredients: Ingredient names the user has
        cuisine_filter: Displayed cuisine names to restrict styles to
        count: Number of recipe slots to fill
        rng: Random source (a fresh unseeded one if omitted)

    Returns:
        Up to `count` recipes; fewer when slots run out of unused titles, and
        none for an empty pantry

    Raises:
        TypeError: If pantry_ingredients is not a list of strings or
            cuisine_filter is a bare string
        ValueError: If count is negative
    """
    pantry = normalize_pantry(pantry_ingredients)
    if cuisine_filter is not None and not isinstance(cuisine_filter, (list, tuple, set, frozenset)):
        raise TypeError(
            f"cuisine_filter must be a collection of cuisine names, got {type(cuisine_filter).__name__}"
        )
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    if not pantry:
        logger.info("No pantry ingredients given - nothing to generate")
        return []

    rng = rng or random.Random()
    recipes = []
    used_titles: Set[str] = set()

    for _ in range(count):
        recipe = create_unique_recipe(pantry, used_titles, cuisine_filter, rng)
        if recipe:
            recipes.append(recipe)
            used_titles.add(recipe.title)

    logger.info(f"Generated {len(recipes)}/{count} recipes from {len(pantry)} pantry ingredients")
    return recipes
