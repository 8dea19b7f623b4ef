"""
Grocery list aggregation.

Collects the missing ingredients of every planned meal into one deduplicated,
categorized shopping list. Quantities count how many planned meals need an
ingredient; there is no unit arithmetic.
"""

import logging
from collections import Counter
from typing import Dict, List, Tuple

from .data.models import GroceryItem, GroceryList, MealPlan
from .generator import capitalize_first
from .tables import categorize_ingredient

logger = logging.getLogger(__name__)


def _count_missing_ingredients(meal_plan: MealPlan) -> Counter:
    counts = Counter()
    for _, _, recipe in meal_plan.iter_slots():
        for ingredient in recipe.missing_ingredients:
            key = ingredient.lower().strip()
            if key:
                counts[key] += 1
    return counts


def aggregate(meal_plan: MealPlan) -> Tuple[List[GroceryItem], Dict[str, List[GroceryItem]]]:
    """
    Build grocery items from a meal plan.

    Args:
        meal_plan: Plan whose assigned slots are scanned

    Returns:
        (items sorted by (category, name), items grouped by category in the
        same order). The groups share item objects with the flat list.

    Raises:
        TypeError: If meal_plan is not a MealPlan
    """
    if not isinstance(meal_plan, MealPlan):
        raise TypeError(f"Expected a MealPlan, got {type(meal_plan).__name__}")

    counts = _count_missing_ingredients(meal_plan)
    items = [
        GroceryItem(
            name=capitalize_first(key),
            quantity=count,
            category=categorize_ingredient(key),
        )
        for key, count in counts.items()
    ]
    items.sort(key=lambda item: (item.category, item.name))

    by_category: Dict[str, List[GroceryItem]] = {}
    for item in items:
        by_category.setdefault(item.category, []).append(item)

    return items, by_category


def aggregate_grocery_list(meal_plan: MealPlan) -> GroceryList:
    """Recompute the full grocery list for a meal plan."""
    items, by_category = aggregate(meal_plan)
    grocery_list = GroceryList(items=items, by_category=by_category)
    logger.info(
        f"Built grocery list: {len(items)} items in {len(by_category)} categories "
        f"from {len(meal_plan)} planned meals"
    )
    return grocery_list
