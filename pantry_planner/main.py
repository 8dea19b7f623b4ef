#!/usr/bin/env python3
"""
Main orchestrator for the Pantry Planner.

Binds recipe generation, meal planning and grocery lists to per-user storage
and plan limits. Storage failures on reads degrade to empty defaults so the
app keeps working; limit refusals come back as result dicts with
"upgrade_required" set.
"""

import argparse
import logging
import random
import sqlite3
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .data.database import DatabaseInterface
from .data.models import GroceryItem, GroceryList, MealPlan, Rating, Recipe, Subscription
from .export import format_recipe_text
from .filters import enrich_recipes_with_ratings, filter_recipes
from .generator import DEFAULT_RECIPE_COUNT, generate_recipes, normalize_pantry, parse_pantry_input
from .grocery import aggregate_grocery_list
from .subscription import (
    DIETARY_FILTER,
    FAVORITE_RECIPE,
    GROCERY_LIST,
    PRO_PLAN,
    USAGE_TYPES,
    can_perform_action,
    current_week_start,
    upgrade_message,
)
from .suggestions import remember_ingredients, smart_suggestions, trending_recipes
from .tables import CUISINE_TYPES, DIETARY_TAGS

logger = logging.getLogger(__name__)


def _refusal(action: str, current_count: int) -> Dict[str, Any]:
    return {
        "success": False,
        "upgrade_required": True,
        "reason": upgrade_message(action, current_count),
    }


class PantryPlannerAssistant:
    """Main orchestrator for the pantry planner."""

    def __init__(self, db_dir: str = "data", rng: Optional[random.Random] = None):
        """
        Initialize the Pantry Planner Assistant.

        Args:
            db_dir: Directory containing the database
            rng: Random source for generation (unseeded if omitted)
        """
        self.db = DatabaseInterface(db_dir=db_dir)
        self.rng = rng or random.Random()

        # Latest grocery list per user; rebuilt on every request to create one
        self._grocery_lists: Dict[int, GroceryList] = {}

        logger.info(f"Pantry Planner Assistant initialized (db_dir={db_dir})")

    def _load(self, description: str, default: Any, loader: Callable, *args) -> Any:
        """Run a storage read, falling back to default if the database fails."""
        try:
            return loader(*args)
        except sqlite3.Error as e:
            logger.error(f"Error loading {description}: {e}", exc_info=True)
            return default

    # ==================== Recipes ====================

    def generate(
        self,
        user_id: int,
        pantry: Union[str, Sequence[str]],
        cuisines: Optional[List[str]] = None,
        count: int = DEFAULT_RECIPE_COUNT,
    ) -> Dict[str, Any]:
        """
        Generate recipes for a user's pantry.

        Args:
            user_id: Current user
            pantry: Free text ("chicken, rice") or a list of ingredients
            cuisines: Displayed cuisine names to keep
            count: Number of recipes to attempt

        Returns:
            Result dict with the parsed pantry and the filtered, rating-enriched
            recipes
        """
        if isinstance(pantry, str):
            pantry_ingredients = parse_pantry_input(pantry)
        else:
            pantry_ingredients = normalize_pantry(list(pantry))

        if cuisines:
            unknown = [c for c in cuisines if c not in CUISINE_TYPES]
            if unknown:
                raise ValueError(f"Unknown cuisines: {unknown}")

        recipes = generate_recipes(pantry_ingredients, cuisines or None, count, rng=self.rng)

        if pantry_ingredients:
            try:
                recent = self.db.get_recent_ingredients(user_id)
                self.db.set_recent_ingredients(
                    user_id, remember_ingredients(pantry_ingredients, recent)
                )
            except sqlite3.Error as e:
                logger.error(f"Error saving recent ingredients: {e}", exc_info=True)

        dietary_filters = self.get_dietary_filters(user_id)
        filtered = filter_recipes(recipes, dietary_filters, cuisines)
        enriched = self._enrich(filtered, user_id)

        logger.info(
            f"User {user_id}: {len(enriched)} of {len(recipes)} generated recipes "
            f"passed filters {dietary_filters} / {cuisines or []}"
        )
        return {
            "success": True,
            "pantry": pantry_ingredients,
            "recipes": enriched,
            "total_generated": len(recipes),
        }

    def _enrich(self, recipes: List[Recipe], user_id: Optional[int]) -> List[Recipe]:
        ratings = self._load(
            "ratings", {}, self.db.get_ratings_for_recipes, [r.id for r in recipes]
        )
        return enrich_recipes_with_ratings(recipes, ratings, user_id)

    def suggestions(self, user_id: int, cuisines: Optional[List[str]] = None) -> List[Recipe]:
        """Personalized suggestions from recent ingredients and favorites."""
        recent = self._load("recent ingredients", [], self.db.get_recent_ingredients, user_id)
        favorites = self.get_favorites(user_id)
        dietary_filters = self.get_dietary_filters(user_id)
        return smart_suggestions(recent, favorites, dietary_filters, cuisines, rng=self.rng)

    def trending(self) -> List[Recipe]:
        return trending_recipes(rng=self.rng)

    # ==================== Favorites ====================

    def get_favorites(self, user_id: int) -> List[Recipe]:
        return self._load("favorites", [], self.db.get_favorites, user_id)

    def toggle_favorite(self, user_id: int, recipe: Recipe) -> Dict[str, Any]:
        """
        Save a recipe as favorite, or unsave it if it already is one.

        Returns:
            Result dict with "favorited" and the updated favorites, or a
            refusal when the plan's favorite limit is reached
        """
        favorites = self.get_favorites(user_id)
        if any(fav.id == recipe.id for fav in favorites):
            favorites = [fav for fav in favorites if fav.id != recipe.id]
            favorited = False
        else:
            plan = self.get_subscription(user_id).plan
            if not can_perform_action(plan, FAVORITE_RECIPE, len(favorites)):
                logger.info(f"User {user_id} hit the favorites limit ({len(favorites)})")
                return _refusal(FAVORITE_RECIPE, len(favorites))
            favorites.append(recipe.copy())
            favorited = True

        try:
            self.db.save_favorites(user_id, favorites)
        except sqlite3.Error as e:
            logger.error(f"Error saving favorites: {e}", exc_info=True)
            return {"success": False, "error": "Could not save favorites"}

        return {"success": True, "favorited": favorited, "favorites": favorites}

    def remove_favorite(self, user_id: int, recipe_id: str) -> bool:
        removed = self.db.remove_favorite(user_id, recipe_id)
        if removed:
            logger.info(f"User {user_id} removed favorite {recipe_id}")
        return removed

    # ==================== Meal Plan ====================

    def get_meal_plan(self, user_id: int) -> MealPlan:
        return self._load("meal plan", MealPlan(), self.db.get_meal_plan, user_id)

    def _save_meal_plan(self, user_id: int, meal_plan: MealPlan) -> Dict[str, Any]:
        try:
            self.db.save_meal_plan(user_id, meal_plan)
        except sqlite3.Error as e:
            logger.error(f"Error saving meal plan: {e}", exc_info=True)
            return {"success": False, "error": "Could not save meal plan"}
        return {"success": True, "meal_plan": meal_plan}

    def assign_meal(self, user_id: int, day: str, slot: int, recipe: Recipe) -> Dict[str, Any]:
        """
        Put a recipe into a day's meal slot.

        Raises:
            ValueError: If day or slot is invalid
        """
        meal_plan = self.get_meal_plan(user_id)
        meal_plan.assign(day, slot, recipe)
        logger.info(f"User {user_id}: {recipe.title} -> {day} meal{slot}")
        return self._save_meal_plan(user_id, meal_plan)

    def remove_meal(self, user_id: int, day: str, slot: int) -> Dict[str, Any]:
        meal_plan = self.get_meal_plan(user_id)
        meal_plan.remove(day, slot)
        return self._save_meal_plan(user_id, meal_plan)

    def clear_meal_plan(self, user_id: int) -> Dict[str, Any]:
        logger.info(f"User {user_id} cleared their meal plan")
        return self._save_meal_plan(user_id, MealPlan())

    # ==================== Grocery List ====================

    def create_grocery_list(self, user_id: int) -> Dict[str, Any]:
        """
        Build a grocery list from the user's meal plan.

        Counts against the weekly grocery list limit; an empty plan is
        rejected without being counted.
        """
        week_start = current_week_start()
        plan = self.get_subscription(user_id).plan
        used = self._load("usage", 0, self.db.get_usage, user_id, GROCERY_LIST, week_start)

        if not can_perform_action(plan, GROCERY_LIST, used):
            logger.info(f"User {user_id} hit the weekly grocery list limit ({used})")
            return _refusal(GROCERY_LIST, used)

        meal_plan = self.get_meal_plan(user_id)
        if len(meal_plan) == 0:
            return {"success": False, "error": "No meals planned"}

        grocery_list = aggregate_grocery_list(meal_plan)
        self._grocery_lists[user_id] = grocery_list

        try:
            used = self.db.increment_usage(user_id, GROCERY_LIST, week_start)
        except sqlite3.Error as e:
            logger.error(f"Error tracking grocery list usage: {e}", exc_info=True)

        return {"success": True, "grocery_list": grocery_list, "usage_count": used}

    def get_grocery_list(self, user_id: int) -> Optional[GroceryList]:
        return self._grocery_lists.get(user_id)

    def toggle_grocery_item(self, user_id: int, name: str) -> Optional[GroceryItem]:
        """Flip an item's checked flag; None if there is no list or no such item."""
        grocery_list = self._grocery_lists.get(user_id)
        if grocery_list is None:
            return None
        return grocery_list.toggle_checked(name)

    # ==================== Preferences ====================

    def get_dietary_filters(self, user_id: int) -> List[str]:
        return self._load("dietary filters", [], self.db.get_dietary_filters, user_id)

    def set_dietary_filters(self, user_id: int, filters: List[str]) -> Dict[str, Any]:
        """
        Replace the user's dietary filters.

        Raises:
            ValueError: If a filter is not a known dietary tag
        """
        unknown = [f for f in filters if f not in DIETARY_TAGS]
        if unknown:
            raise ValueError(f"Unknown dietary filters: {unknown}")

        filters = list(dict.fromkeys(filters))
        current = self.get_dietary_filters(user_id)
        if len(filters) > len(current):
            plan = self.get_subscription(user_id).plan
            if not can_perform_action(plan, DIETARY_FILTER, len(current), len(filters) - len(current)):
                return _refusal(DIETARY_FILTER, len(current))

        try:
            self.db.set_dietary_filters(user_id, filters)
        except sqlite3.Error as e:
            logger.error(f"Error saving dietary filters: {e}", exc_info=True)
            return {"success": False, "error": "Could not save preferences"}

        return {"success": True, "dietary_filters": filters}

    # ==================== Ratings ====================

    def submit_rating(
        self,
        user_id: int,
        recipe_id: str,
        rating: int,
        review: Optional[str] = None,
    ) -> Rating:
        """
        Store (or replace) the user's rating of a recipe.

        Raises:
            ValueError: If rating is outside 1-5
        """
        review = review.strip() if review else None
        new_rating = Rating(user_id=user_id, recipe_id=recipe_id, rating=rating, review=review or None)
        self.db.save_rating(new_rating)
        return new_rating

    def get_ratings(self, recipe_id: str) -> List[Rating]:
        return self._load("ratings", [], self.db.get_ratings_for_recipe, recipe_id)

    # ==================== Subscription ====================

    def get_subscription(self, user_id: int) -> Subscription:
        """
        Load the user's subscription, creating a free one on first use.

        Falls back to an unsaved free subscription if the database fails.
        """
        try:
            subscription = self.db.get_subscription(user_id)
            if subscription is None:
                subscription = Subscription(user_id=user_id)
                self.db.save_subscription(subscription)
                logger.info(f"Created free subscription for user {user_id}")
            return subscription
        except sqlite3.Error as e:
            logger.error(f"Error loading subscription: {e}", exc_info=True)
            return Subscription(user_id=user_id, id=f"sub_{user_id}_fallback")

    def upgrade_to_pro(self, user_id: int) -> Subscription:
        subscription = self.get_subscription(user_id)
        subscription.plan = PRO_PLAN
        self.db.save_subscription(subscription)
        logger.info(f"User {user_id} upgraded to {PRO_PLAN}")
        return subscription

    def get_usage_summary(self, user_id: int) -> Dict[str, int]:
        """This week's usage per metered action."""
        week_start = current_week_start()
        summary = {
            usage_type: self._load("usage", 0, self.db.get_usage, user_id, usage_type, week_start)
            for usage_type in USAGE_TYPES
        }
        # Favorites and filters are limited by how many are held, not by weekly use
        summary[FAVORITE_RECIPE] = len(self.get_favorites(user_id))
        summary[DIETARY_FILTER] = len(self.get_dietary_filters(user_id))
        return summary


def main():
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Pantry Planner")
    parser.add_argument(
        "command",
        choices=["generate", "trending"],
        help="Command to run",
    )
    parser.add_argument(
        "--pantry",
        type=str,
        help="Pantry ingredients, e.g. \"chicken, broccoli, rice\"",
    )
    parser.add_argument(
        "--cuisine",
        action="append",
        choices=CUISINE_TYPES,
        help="Restrict to a cuisine (repeatable)",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=DEFAULT_RECIPE_COUNT,
        help=f"Number of recipes (default: {DEFAULT_RECIPE_COUNT})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible output",
    )

    args = parser.parse_args()
    rng = random.Random(args.seed)

    if args.command == "generate":
        if not args.pantry:
            print("❌ Error: --pantry required for 'generate' command")
            return

        recipes = generate_recipes(
            parse_pantry_input(args.pantry), args.cuisine, args.count, rng=rng
        )

    elif args.command == "trending":
        recipes = trending_recipes(rng=rng)

    if not recipes:
        print("No recipes found. Try adding more ingredients.")
        return

    for recipe in recipes:
        print("\n" + "=" * 70)
        print(format_recipe_text(recipe))
        print("\nSteps:")
        for i, step in enumerate(recipe.instructions, 1):
            print(f"  {i}. {step}")


if __name__ == "__main__":
    main()
