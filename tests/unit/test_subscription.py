"""
Tests for plan limits.
"""

from datetime import date

import pytest

from pantry_planner.subscription import (
    DIETARY_FILTER,
    FAVORITE_RECIPE,
    GROCERY_LIST,
    PRICING_LIMITS,
    UNLIMITED,
    can_perform_action,
    current_week_start,
    get_limit,
    upgrade_message,
)


class TestLimits:

    def test_free_limits(self):
        assert get_limit("free", GROCERY_LIST) == 3
        assert get_limit("free", FAVORITE_RECIPE) == 10
        assert get_limit("free", DIETARY_FILTER) == 1

    def test_pro_is_unlimited(self):
        for action in (GROCERY_LIST, FAVORITE_RECIPE, DIETARY_FILTER):
            assert get_limit("pro", action) == UNLIMITED
        assert PRICING_LIMITS["pro"]["has_early_access"]

    def test_unknown_plan_or_action(self):
        with pytest.raises(ValueError):
            get_limit("enterprise", GROCERY_LIST)
        with pytest.raises(ValueError):
            get_limit("free", "export")


class TestCanPerformAction:

    @pytest.mark.parametrize("count,allowed", [(0, True), (2, True), (3, False), (7, False)])
    def test_free_grocery_lists(self, count, allowed):
        assert can_perform_action("free", GROCERY_LIST, count) is allowed

    def test_additional_count(self):
        assert can_perform_action("free", FAVORITE_RECIPE, 8, additional=2)
        assert not can_perform_action("free", FAVORITE_RECIPE, 8, additional=3)

    def test_second_filter_refused_on_free(self):
        assert can_perform_action("free", DIETARY_FILTER, 0)
        assert not can_perform_action("free", DIETARY_FILTER, 1)

    def test_pro_never_refused(self):
        assert can_perform_action("pro", GROCERY_LIST, 10_000)


class TestWeekStart:

    @pytest.mark.parametrize("today,monday", [
        (date(2025, 11, 3), "2025-11-03"),   # Monday
        (date(2025, 11, 6), "2025-11-03"),   # Thursday
        (date(2025, 11, 9), "2025-11-03"),   # Sunday
        (date(2026, 1, 1), "2025-12-29"),    # across a year boundary
    ])
    def test_monday(self, today, monday):
        assert current_week_start(today) == monday

    def test_defaults_to_today(self):
        assert date.fromisoformat(current_week_start()).weekday() == 0


class TestUpgradeMessage:

    def test_grocery_list_at_limit(self):
        assert "3 grocery lists this week" in upgrade_message(GROCERY_LIST, 3)

    def test_grocery_list_below_threshold(self):
        assert upgrade_message(GROCERY_LIST, 1).startswith("You can only generate 3 grocery lists")

    def test_favorites(self):
        assert "unlimited favorites" in upgrade_message(FAVORITE_RECIPE, 10)
        assert "up to 10 favorite recipes" in upgrade_message(FAVORITE_RECIPE, 2)

    def test_filters(self):
        assert "stack unlimited filters" in upgrade_message(DIETARY_FILTER, 1)
