"""
Tests for cooking instruction synthesis.
"""

import pytest

from pantry_planner.data.models import IngredientQuantity
from pantry_planner.generator import build_ingredient_list
from pantry_planner.instructions import (
    INSTRUCTION_TEMPLATES,
    select_template,
    synthesize_instructions,
)


def _synthesize(title, used, missing):
    return synthesize_instructions(title, used, missing, build_ingredient_list(used + missing))


class TestSelectTemplate:

    def test_method_from_title(self):
        assert select_template("Italian Roasted Chicken") is INSTRUCTION_TEMPLATES["roasted"]

    def test_hyphenated_method(self):
        assert select_template("Thai Pan-Seared Salmon") is INSTRUCTION_TEMPLATES["pan-seared"]

    def test_default_is_sauteed(self):
        assert select_template("Mystery Dish") is INSTRUCTION_TEMPLATES["sautéed"]


class TestSynthesizeInstructions:

    def test_step_count_and_order_follow_template(self):
        steps = _synthesize("Asian-Inspired Braised Beef", ["beef", "carrots"], ["soy sauce", "ginger"])
        assert len(steps) == len(INSTRUCTION_TEMPLATES["braised"])
        assert steps[0] == "Heat oil in a heavy-bottomed pot over medium-high heat."

    def test_primary_ingredient_gets_quantity(self):
        steps = _synthesize("Asian-Inspired Braised Beef", ["beef", "carrots"], ["soy sauce"])
        assert steps[1] == "Brown 1 lb beef on all sides."

    def test_ingredient_mentions_get_quantities(self):
        steps = _synthesize("Mexican Sautéed Chicken", ["chicken", "rice"], ["garlic", "cumin"])
        assert steps[1] == "Add 3 cloves garlic and sauté until fragrant."

    def test_replacement_is_single_pass(self):
        """A replaced phrase is never expanded a second time."""
        steps = _synthesize("Asian-Inspired Stir-Fried Chicken", ["chicken", "onions"], ["garlic"])
        for step in steps:
            assert "3 cloves 3 cloves" not in step
            assert "1 lb 1 lb" not in step

    def test_placeholder_replaced_when_ingredient_present(self):
        steps = _synthesize("Asian-Inspired Braised Beef", ["beef", "onions"], ["garlic"])
        assert steps[2] == (
            "Add 1 medium onions like 1 medium onions and 3 cloves garlic, cook until softened."
        )

    def test_seasonings_placeholder_keeps_word(self):
        steps = _synthesize("Asian-Inspired Stir-Fried Tofu", ["tofu", "broccoli"], ["soy sauce"])
        assert steps[4] == (
            "Add 2 tablespoons soy sauce and seasonings and sauces. Toss everything together."
        )

    def test_placeholder_left_alone_without_ingredient(self):
        steps = _synthesize("American Stir-Fried Beef", ["beef", "carrots"], ["salt", "pepper"])
        assert "aromatics" in steps[1]
        assert "seasonings" in steps[4]

    def test_whole_words_only(self):
        """'oil' inside 'boiling' is not replaced."""
        full_list = [IngredientQuantity("fish", "1", "lb"), IngredientQuantity("oil", "2", "tablespoons")]
        steps = synthesize_instructions("Steamed Fish", ["fish", "oil"], [], full_list)
        assert steps[0] == "Set up a steamer basket over boiling water."
        assert steps[2] == "Place 1 lb fish in steamer basket."

    def test_case_insensitive_replacement(self):
        full_list = [IngredientQuantity("garlic", "3", "cloves")]
        steps = synthesize_instructions("Sautéed Greens", ["Garlic"], [], full_list)
        assert steps[1] == "Add 3 cloves garlic and sauté until fragrant."
        assert steps[2] == "Add 3 cloves garlic and cook until tender."

    def test_ingredient_arguments_must_be_lists(self):
        full_list = [IngredientQuantity("tofu", "14", "oz")]
        with pytest.raises(TypeError):
            synthesize_instructions("Sautéed Tofu", "tofu", [], full_list)
        with pytest.raises(TypeError):
            synthesize_instructions("Sautéed Tofu", ["tofu"], "basil", full_list)
        with pytest.raises(TypeError):
            synthesize_instructions("Sautéed Tofu", ["tofu"], [], None)
