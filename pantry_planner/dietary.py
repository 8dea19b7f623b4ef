"""
Dietary tag classification.

Labels are derived from an ingredient list by keyword rules, evaluated
independently:
- Vegan: no animal protein, dairy or egg
- Vegetarian: no animal protein
- Gluten-Free: no gluten-bearing ingredient
- Low-Carb: no high-carbohydrate ingredient
- High-Protein: at least one protein source

classify() then sprinkles in extra labels at random so generated batches show
more variety in the filter UI.
"""

import random
from typing import List, Optional, Sequence

from .tables import (
    ANIMAL_PROTEIN_KEYWORDS,
    DAIRY_KEYWORDS,
    DIETARY_TAGS,
    EGG_KEYWORDS,
    GLUTEN_KEYWORDS,
    HIGH_CARB_KEYWORDS,
    PROTEIN_SOURCE_KEYWORDS,
    matches_any,
)

# Chance that each label not earned by the rules is added anyway
BONUS_TAG_PROBABILITY = 0.3


def _contains_any(ingredients: List[str], keywords: List[str]) -> bool:
    return any(matches_any(ingredient, keywords) for ingredient in ingredients)


def _lowercase_names(ingredients: Sequence[str]) -> List[str]:
    if not isinstance(ingredients, (list, tuple)):
        raise TypeError(f"Ingredients must be a list, got {type(ingredients).__name__}")
    return [ing.lower() for ing in ingredients]


def deterministic_tags(ingredients: Sequence[str]) -> List[str]:
    """
    Dietary labels implied by the ingredients alone.

    Args:
        ingredients: Ingredient names (any case)

    Returns:
        Labels in canonical DIETARY_TAGS order

    Raises:
        TypeError: If ingredients is not a list or tuple
    """
    names = _lowercase_names(ingredients)

    has_animal = _contains_any(names, ANIMAL_PROTEIN_KEYWORDS)
    has_dairy = _contains_any(names, DAIRY_KEYWORDS)
    has_egg = _contains_any(names, EGG_KEYWORDS)

    tags = set()
    if not has_animal and not has_dairy and not has_egg:
        tags.add("Vegan")
    if not has_animal:
        tags.add("Vegetarian")
    if not _contains_any(names, GLUTEN_KEYWORDS):
        tags.add("Gluten-Free")
    if not _contains_any(names, HIGH_CARB_KEYWORDS):
        tags.add("Low-Carb")
    if _contains_any(names, PROTEIN_SOURCE_KEYWORDS):
        tags.add("High-Protein")

    return [tag for tag in DIETARY_TAGS if tag in tags]


def classify(ingredients: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """
    Dietary labels for a recipe, including randomized bonus labels.

    Each label the rules did not produce is added independently with
    BONUS_TAG_PROBABILITY.

    Args:
        ingredients: Ingredient names
        rng: Random source (a fresh unseeded one if omitted)

    Returns:
        Labels in canonical DIETARY_TAGS order
    """
    rng = rng or random.Random()
    tags = set(deterministic_tags(ingredients))

    for tag in DIETARY_TAGS:
        if tag not in tags and rng.random() < BONUS_TAG_PROBABILITY:
            tags.add(tag)

    return [tag for tag in DIETARY_TAGS if tag in tags]
