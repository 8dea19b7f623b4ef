"""
Plain-text and printable renderings of grocery lists and recipes.
"""

import logging
from datetime import date
from typing import Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from .data.models import GroceryList, Recipe

logger = logging.getLogger(__name__)

FOOTER = "Generated by Pantry Planner"

_env = Environment(
    loader=PackageLoader("pantry_planner", "templates"),
    autoescape=select_autoescape(["html"]),
)


def _format_date(generated_on: Optional[date]) -> str:
    return (generated_on or date.today()).strftime("%m/%d/%Y")


def format_grocery_list_text(grocery_list: GroceryList, generated_on: Optional[date] = None) -> str:
    """
    Format a grocery list as a downloadable text file.

    Args:
        grocery_list: List to format
        generated_on: Date printed in the header (today if omitted)

    Returns:
        Text with one section per category and a checkbox per item
    """
    lines = [
        "GROCERY LIST",
        f"Generated on {_format_date(generated_on)}",
        f"Total items: {len(grocery_list)}",
        "",
    ]

    for category, items in grocery_list.by_category.items():
        lines.append(category.upper())
        lines.append("=" * len(category))
        for item in items:
            checkbox = "[✓]" if item.checked else "[ ]"
            quantity = f" ({item.quantity} units)" if item.quantity > 1 else ""
            lines.append(f"{checkbox} {item.name}{quantity}")
        lines.append("")

    lines.append("")
    lines.append("---")
    lines.append(FOOTER)
    return "\n".join(lines)


def render_grocery_list_html(grocery_list: GroceryList, generated_on: Optional[date] = None) -> str:
    """Render a print-ready HTML page (the browser's print dialog makes the PDF)."""
    template = _env.get_template("grocery_list_print.html")
    html = template.render(
        grocery_list=grocery_list,
        generated_on=_format_date(generated_on),
        footer=FOOTER,
    )
    logger.debug(f"Rendered printable grocery list with {len(grocery_list)} items")
    return html


def format_recipe_text(recipe: Recipe) -> str:
    """Plain-text recipe card."""
    if recipe.average_rating:
        rating = f"{recipe.average_rating:.1f}/5"
    else:
        rating = "Not rated yet"

    lines = [
        recipe.title,
        "",
        recipe.description,
        "",
        f"Cook Time: {recipe.cook_time}",
        f"Serves: {recipe.servings}",
        f"Rating: {rating}",
        "",
        f"You have: {', '.join(recipe.used_ingredients)}",
        f"You need: {', '.join(recipe.missing_ingredients)}",
        "",
        f"Tags: {', '.join(recipe.dietary_tags)}",
        "",
        FOOTER,
    ]
    return "\n".join(lines)
