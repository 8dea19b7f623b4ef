"""
Tests for grocery list and recipe exports.
"""

from datetime import date

from pantry_planner.data.models import GroceryItem, GroceryList
from pantry_planner.export import (
    FOOTER,
    format_grocery_list_text,
    format_recipe_text,
    render_grocery_list_html,
)
from pantry_planner.grocery import aggregate_grocery_list

GENERATED_ON = date(2025, 11, 3)


class TestGroceryListText:

    def test_layout(self, sample_meal_plan):
        grocery_list = aggregate_grocery_list(sample_meal_plan)
        grocery_list.toggle_checked("Ginger")

        text = format_grocery_list_text(grocery_list, generated_on=GENERATED_ON)

        assert text.split("\n") == [
            "GROCERY LIST",
            "Generated on 11/03/2025",
            "Total items: 3",
            "",
            "PRODUCE",
            "=======",
            "[ ] Garlic (2 units)",
            "[✓] Ginger",
            "",
            "SPICES & SEASONINGS",
            "===================",
            "[ ] Soy sauce",
            "",
            "",
            "---",
            FOOTER,
        ]

    def test_empty_list(self):
        text = format_grocery_list_text(GroceryList(items=[]), generated_on=GENERATED_ON)
        assert "Total items: 0" in text
        assert text.endswith(FOOTER)


class TestGroceryListHtml:

    def test_contains_items_and_badges(self, sample_meal_plan):
        grocery_list = aggregate_grocery_list(sample_meal_plan)
        grocery_list.toggle_checked("Garlic")

        html = render_grocery_list_html(grocery_list, generated_on=GENERATED_ON)

        assert html.startswith("<!DOCTYPE html>")
        assert "Generated on 11/03/2025" in html
        assert "Total items: 3" in html
        assert "<h2>Spices &amp; Seasonings</h2>" in html
        assert '<div class="checkbox checked"></div>' in html
        assert '<span class="quantity">2 units</span>' in html
        assert html.count('class="item-name"') == 3

    def test_names_are_escaped(self):
        grocery_list = GroceryList(items=[GroceryItem("<b>Salt</b>", 1, "Other")])
        html = render_grocery_list_html(grocery_list, generated_on=GENERATED_ON)
        assert "<b>Salt</b>" not in html
        assert "&lt;b&gt;Salt&lt;/b&gt;" in html


class TestRecipeText:

    def test_card(self, sample_recipe):
        sample_recipe.average_rating = 4.5
        text = format_recipe_text(sample_recipe)
        lines = text.split("\n")
        assert lines[0] == "Asian Stir-Fried Chicken"
        assert "Cook Time: 13 min" in lines
        assert "Serves: 2" in lines
        assert "Rating: 4.5/5" in lines
        assert "You have: chicken, broccoli" in lines
        assert "You need: garlic, ginger" in lines
        assert "Tags: Gluten-Free, High-Protein" in lines

    def test_unrated(self, sample_recipe):
        assert "Rating: Not rated yet" in format_recipe_text(sample_recipe)
