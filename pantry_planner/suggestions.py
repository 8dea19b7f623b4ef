"""
Personalized suggestions and trending recipes.
"""

import logging
import random
from typing import Collection, List, Optional, Sequence

from .data.models import Recipe
from .generator import generate_recipes

logger = logging.getLogger(__name__)

MAX_RECENT_INGREDIENTS = 10
MAX_SUGGESTIONS = 4
MAX_TRENDING = 6

POPULAR_COMBINATIONS: List[List[str]] = [
    ["chicken", "broccoli", "rice"],
    ["salmon", "asparagus", "quinoa"],
    ["beef", "carrots", "potatoes"],
    ["tofu", "spinach", "noodles"],
]

# (ingredients, average rating); favorites counts only ordered the list
TRENDING_DATA = [
    (["chicken", "garlic", "herbs"], 4.8),
    (["salmon", "lemon", "asparagus"], 4.7),
    (["pasta", "tomatoes", "basil"], 4.6),
    (["beef", "mushrooms", "onions"], 4.9),
    (["tofu", "soy sauce", "broccoli"], 4.5),
    (["eggs", "spinach", "cheese"], 4.7),
]


def remember_ingredients(new_ingredients: Sequence[str], recent: Sequence[str]) -> List[str]:
    """
    Merge newly entered ingredients into the recent list.

    Newest first, no duplicates, at most MAX_RECENT_INGREDIENTS entries.
    """
    merged = []
    for ingredient in list(new_ingredients) + list(recent):
        if ingredient not in merged:
            merged.append(ingredient)
    return merged[:MAX_RECENT_INGREDIENTS]


def smart_suggestions(
    recent_ingredients: Sequence[str],
    favorites: Sequence[Recipe],
    dietary_filters: Optional[Collection[str]] = None,
    cuisines: Optional[Collection[str]] = None,
    rng: Optional[random.Random] = None,
) -> List[Recipe]:
    """
    Suggest recipes from the user's history.

    Two recipes from recent ingredients, two built from favorites'
    ingredients, or three from a random popular combination when the user has
    neither. Suggestions sharing at least one selected dietary tag are kept.
    """
    rng = rng or random.Random()
    cuisine_filter = list(cuisines) if cuisines else None
    suggestions: List[Recipe] = []

    if recent_ingredients:
        suggestions.extend(
            generate_recipes(list(recent_ingredients[:5]), cuisine_filter, rng=rng)[:2]
        )

    if favorites:
        favorite_ingredients = [ing for recipe in favorites for ing in recipe.all_ingredients][:8]
        suggestions.extend(generate_recipes(favorite_ingredients, cuisine_filter, rng=rng)[:2])

    if not suggestions:
        combo = rng.choice(POPULAR_COMBINATIONS)
        suggestions.extend(generate_recipes(combo, cuisine_filter, rng=rng)[:3])

    if dietary_filters:
        suggestions = [
            recipe for recipe in suggestions
            if any(recipe.has_tag(tag) for tag in dietary_filters)
        ]

    logger.debug(f"Prepared {min(len(suggestions), MAX_SUGGESTIONS)} smart suggestions")
    return suggestions[:MAX_SUGGESTIONS]


def trending_recipes(rng: Optional[random.Random] = None) -> List[Recipe]:
    """
    One recipe per trending ingredient set, with its showcase rating.

    Cuisine filters are not applied here.
    """
    rng = rng or random.Random()
    trending = []
    for ingredients, rating in TRENDING_DATA:
        recipes = generate_recipes(ingredients, rng=rng)
        if not recipes:
            continue
        recipe = recipes[0]
        recipe.average_rating = rating
        recipe.total_ratings = rng.randint(20, 69)
        trending.append(recipe)
    return trending[:MAX_TRENDING]
