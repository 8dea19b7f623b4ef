"""
Cooking instruction synthesis.

Turns a recipe's cooking method into ordered step text, then rewrites each
step so ingredient mentions carry their quantities ("garlic" becomes
"3 cloves garlic").
"""

import logging
import re
from typing import Dict, List, Sequence

from .data.models import IngredientQuantity

logger = logging.getLogger(__name__)


# Method keyword (matched in the lowercased title) -> step templates.
# {primary} is the first used ingredient.
INSTRUCTION_TEMPLATES: Dict[str, List[str]] = {
    "stir-fried": [
        "Heat oil in a large pan or wok over medium-high heat.",
        "Add garlic and aromatics, sauté until fragrant (about 30 seconds).",
        "Add {primary} and cook until browned.",
        "Stir in remaining vegetables and cook for 3-4 minutes.",
        "Add seasonings and sauces. Toss everything together.",
        "Cook for another 2-3 minutes until heated through.",
        "Serve hot with rice or noodles.",
    ],
    "roasted": [
        "Preheat oven to 400°F (200°C).",
        "Prepare ingredients by washing and cutting into even pieces.",
        "Season {primary} with salt, pepper, and herbs.",
        "Arrange ingredients on a baking sheet in a single layer.",
        "Drizzle with olive oil and toss to coat evenly.",
        "Roast for 20-25 minutes, turning once halfway through.",
        "Check for doneness and serve immediately.",
    ],
    "sautéed": [
        "Heat oil in a pan over medium heat.",
        "Add garlic and sauté until fragrant.",
        "Add {primary} and cook until tender.",
        "Season with herbs and spices to taste.",
        "Cook for 8-10 minutes, stirring occasionally.",
        "Adjust seasoning and serve hot.",
    ],
    "braised": [
        "Heat oil in a heavy-bottomed pot over medium-high heat.",
        "Brown {primary} on all sides.",
        "Add aromatics like onions and garlic, cook until softened.",
        "Add liquid (broth or wine) to cover halfway.",
        "Bring to a simmer, then reduce heat to low.",
        "Cover and cook slowly for 30-35 minutes.",
        "Check tenderness and adjust seasoning before serving.",
    ],
    "grilled": [
        "Preheat grill to medium-high heat.",
        "Clean and oil the grill grates.",
        "Season {primary} with salt, pepper, and desired spices.",
        "Place on grill and cook for 6-8 minutes per side.",
        "Check for proper doneness with a thermometer if needed.",
        "Let rest for 2-3 minutes before serving.",
        "Serve with fresh herbs or sauce.",
    ],
    "steamed": [
        "Set up a steamer basket over boiling water.",
        "Prepare ingredients by washing and cutting uniformly.",
        "Place {primary} in steamer basket.",
        "Cover and steam for 15-18 minutes.",
        "Check for tenderness with a fork.",
        "Season lightly with salt and herbs.",
        "Serve immediately while hot.",
    ],
    "pan-seared": [
        "Heat oil in a heavy skillet over medium-high heat.",
        "Pat {primary} dry and season both sides.",
        "Place in hot pan and don't move for 3-4 minutes.",
        "Flip and cook for another 3-4 minutes.",
        "Add butter and herbs to the pan.",
        "Baste with the flavored butter.",
        "Rest for 2 minutes before serving.",
    ],
    "baked": [
        "Preheat oven to 375°F (190°C).",
        "Grease a baking dish with oil or butter.",
        "Layer {primary} in the prepared dish.",
        "Add seasonings and any liquid ingredients.",
        "Cover with foil and bake for 25-30 minutes.",
        "Remove foil and bake for 5-10 minutes more.",
        "Let cool for 5 minutes before serving.",
    ],
}

DEFAULT_METHOD = "sautéed"

# Generic word -> fragment identifying the ingredient that can stand in for it
PLACEHOLDER_INGREDIENTS: Dict[str, str] = {
    "aromatics": "onion",
    "herbs": "herb",
    "seasonings": "soy sauce",
}


def select_template(title: str) -> List[str]:
    """Pick the step template whose method keyword appears in the title."""
    title_lower = title.lower()
    for method, template in INSTRUCTION_TEMPLATES.items():
        if method in title_lower:
            return template
    return INSTRUCTION_TEMPLATES[DEFAULT_METHOD]


def _build_replacements(
    used_ingredients: Sequence[str],
    missing_ingredients: Sequence[str],
    full_ingredient_list: Sequence[IngredientQuantity],
) -> Dict[str, str]:
    """
    Map lowercase words/phrases to their quantity-bearing replacements.

    Ingredient names map to "{quantity} {unit} {name}". Placeholder words map
    to the phrase of the ingredient that stands in for them, if the recipe has
    one.
    """
    replacements = {}
    for ingredient in full_ingredient_list:
        name = ingredient.name.lower().strip()
        if name:
            replacements.setdefault(name, str(ingredient))

    all_ingredients = [ing.lower() for ing in list(used_ingredients) + list(missing_ingredients)]
    for word, fragment in PLACEHOLDER_INGREDIENTS.items():
        if word in replacements:
            continue
        if not any(fragment in ing for ing in all_ingredients):
            continue
        match = next(
            (ing for ing in full_ingredient_list if fragment in ing.name.lower()),
            None,
        )
        phrase = str(match) if match else fragment
        if word == "seasonings":
            phrase = f"{phrase} and seasonings"
        replacements[word] = phrase

    return replacements


def _apply_replacements(step: str, replacements: Dict[str, str]) -> str:
    """Replace whole-word mentions in a single pass, longest phrases first."""
    if not replacements:
        return step
    keys = sorted(replacements, key=len, reverse=True)
    pattern = re.compile(
        r"\b(" + "|".join(re.escape(key) for key in keys) + r")\b",
        re.IGNORECASE,
    )
    return pattern.sub(lambda m: replacements[m.group(0).lower()], step)


def synthesize_instructions(
    title: str,
    used_ingredients: Sequence[str],
    missing_ingredients: Sequence[str],
    full_ingredient_list: Sequence[IngredientQuantity],
) -> List[str]:
    """
    Generate ordered cooking steps for a recipe.

    Args:
        title: Recipe title (its method word selects the template)
        used_ingredients: Pantry ingredients in the recipe; the first one is
            named in the template
        missing_ingredients: Ingredients the user must buy
        full_ingredient_list: Ingredients with display quantities

    Returns:
        Step strings in template order

    Raises:
        TypeError: If an ingredient argument is not a list or tuple
    """
    for name, value in (
        ("used_ingredients", used_ingredients),
        ("missing_ingredients", missing_ingredients),
        ("full_ingredient_list", full_ingredient_list),
    ):
        if not isinstance(value, (list, tuple)):
            raise TypeError(f"{name} must be a list, got {type(value).__name__}")

    template = select_template(title)
    primary = used_ingredients[0] if used_ingredients else "the main ingredient"
    replacements = _build_replacements(used_ingredients, missing_ingredients, full_ingredient_list)

    steps = [
        _apply_replacements(step.format(primary=primary), replacements)
        for step in template
    ]
    logger.debug(f"Synthesized {len(steps)} steps for '{title}'")
    return steps
