"""
Recipe filtering and rating enrichment.
"""

from typing import Dict, List, Optional, Sequence

from .data.models import Rating, Recipe


def filter_recipes(
    recipes: Sequence[Recipe],
    dietary_filters: Optional[Sequence[str]] = None,
    cuisines: Optional[Sequence[str]] = None,
) -> List[Recipe]:
    """
    Keep recipes matching the user's selections.

    A recipe passes when it carries every selected dietary tag and, if any
    cuisines are selected, its cuisine is one of them. Empty selections let
    everything through.
    """
    result = list(recipes)
    if dietary_filters:
        result = [r for r in result if all(r.has_tag(tag) for tag in dietary_filters)]
    if cuisines:
        result = [r for r in result if r.cuisine in cuisines]
    return result


def enrich_recipes_with_ratings(
    recipes: Sequence[Recipe],
    ratings_by_recipe: Dict[str, List[Rating]],
    user_id: Optional[int] = None,
) -> List[Recipe]:
    """
    Return copies of recipes carrying their rating summary.

    Args:
        recipes: Recipes to enrich (left untouched)
        ratings_by_recipe: Recipe id -> all stored ratings for it
        user_id: Current user, whose own rating is attached if present

    Returns:
        Copies with average_rating (None when unrated), total_ratings and
        user_rating set
    """
    enriched = []
    for recipe in recipes:
        recipe_ratings = ratings_by_recipe.get(recipe.id, [])
        copy = recipe.copy()
        copy.total_ratings = len(recipe_ratings)
        copy.average_rating = (
            sum(r.rating for r in recipe_ratings) / len(recipe_ratings)
            if recipe_ratings else None
        )
        copy.user_rating = None
        if user_id is not None:
            copy.user_rating = next(
                (r for r in recipe_ratings if r.user_id == user_id),
                None,
            )
        enriched.append(copy)
    return enriched
