"""
Pantry Planner - recipes from what's in your pantry, a weekly meal plan and a
grocery list to match.
"""

from pantry_planner.generator import generate_recipes, parse_pantry_input
from pantry_planner.grocery import aggregate_grocery_list

__version__ = "0.1.0"

__all__ = [
    "generate_recipes",
    "parse_pantry_input",
    "aggregate_grocery_list",
]
