"""
Plan limits for free and pro users.

Three actions are metered:
- grocery_list: grocery lists generated per calendar week (Monday start)
- favorite_recipe: favorites saved at once
- dietary_filter: dietary filters active at once

A limit of UNLIMITED (-1) means the action is never refused.
"""

from datetime import date, timedelta
from typing import Dict, Optional

UNLIMITED = -1

FREE_PLAN = "free"
PRO_PLAN = "pro"

GROCERY_LIST = "grocery_list"
FAVORITE_RECIPE = "favorite_recipe"
DIETARY_FILTER = "dietary_filter"
USAGE_TYPES = (GROCERY_LIST, FAVORITE_RECIPE, DIETARY_FILTER)

PRICING_LIMITS: Dict[str, Dict[str, object]] = {
    FREE_PLAN: {
        "grocery_lists_per_week": 3,
        "max_favorite_recipes": 10,
        "max_dietary_filters": 1,
        "has_early_access": False,
    },
    PRO_PLAN: {
        "grocery_lists_per_week": UNLIMITED,
        "max_favorite_recipes": UNLIMITED,
        "max_dietary_filters": UNLIMITED,
        "has_early_access": True,
    },
}

_LIMIT_KEYS = {
    GROCERY_LIST: "grocery_lists_per_week",
    FAVORITE_RECIPE: "max_favorite_recipes",
    DIETARY_FILTER: "max_dietary_filters",
}

# Counts at which the friendlier "you're getting good use out of this" prompt
# replaces the plain limit message
_SMART_PROMPT_THRESHOLDS = {
    FAVORITE_RECIPE: 5,
    GROCERY_LIST: 3,
}

_SMART_PROMPTS = {
    FAVORITE_RECIPE: (
        "You're building quite a collection! You've saved 5 favorite recipes. "
        "Upgrade to Pro to save unlimited favorites and never lose a great recipe again."
    ),
    GROCERY_LIST: (
        "You're really getting organized! You've generated 3 grocery lists this week. "
        "Pro users get unlimited grocery lists plus PDF export for easy shopping."
    ),
    DIETARY_FILTER: (
        "Looking for something specific? Combine multiple filters like 'Vegan + Italian' "
        "to find exactly what you're craving. Pro users can stack unlimited filters."
    ),
}


def get_limit(plan: str, action: str) -> int:
    """
    Limit for an action under a plan.

    Raises:
        ValueError: If the plan or action is unknown
    """
    if plan not in PRICING_LIMITS:
        raise ValueError(f"Unknown plan '{plan}'")
    if action not in _LIMIT_KEYS:
        raise ValueError(f"Unknown action '{action}', expected one of {USAGE_TYPES}")
    return PRICING_LIMITS[plan][_LIMIT_KEYS[action]]


def can_perform_action(plan: str, action: str, current_count: int, additional: int = 1) -> bool:
    """True if doing `additional` more of action stays within the plan's limit."""
    limit = get_limit(plan, action)
    return limit == UNLIMITED or current_count + additional <= limit


def current_week_start(today: Optional[date] = None) -> str:
    """ISO date of the Monday starting the week that contains today."""
    today = today or date.today()
    return (today - timedelta(days=today.weekday())).isoformat()


def upgrade_message(action: str, current_count: int) -> str:
    """Explain to a free user why an action was refused."""
    threshold = _SMART_PROMPT_THRESHOLDS.get(action)
    if action == DIETARY_FILTER or (threshold is not None and current_count >= threshold):
        return _SMART_PROMPTS[action]

    free = PRICING_LIMITS[FREE_PLAN]
    if action == FAVORITE_RECIPE:
        return (
            f"You can only save up to {free['max_favorite_recipes']} favorite recipes "
            "on the free plan. Upgrade to Pro for unlimited favorites."
        )
    return (
        f"You can only generate {free['grocery_lists_per_week']} grocery lists per week "
        "on the free plan. Upgrade to Pro for unlimited grocery lists."
    )
