"""
Data models for the Pantry Planner.

These models define the core entities used throughout the system:
- Recipe: Procedurally generated recipes (with versioned snapshots)
- MealPlan: Weekly plan of up to two meals per day
- GroceryList: Categorized shopping list derived from a meal plan
- Rating, Subscription, Usage: User-scoped records kept in storage
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

# Version of the serialized Recipe snapshot stored in favorites and meal plans.
SNAPSHOT_VERSION = 1

DAYS_OF_WEEK: List[str] = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
]
MEAL_SLOTS: Tuple[int, int] = (1, 2)


@dataclass
class NutritionProfile:
    """Per-serving nutrition estimate for a generated recipe."""
    calories: int = 0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0
    sugar_g: float = 0.0

    def __str__(self) -> str:
        """Human-readable nutrition summary."""
        return (
            f"{self.calories} cal, {self.protein_g}g protein, "
            f"{self.carbs_g}g carbs, {self.fat_g}g fat"
        )

    def to_dict(self) -> Dict:
        return {
            "calories": self.calories,
            "protein_g": self.protein_g,
            "carbs_g": self.carbs_g,
            "fat_g": self.fat_g,
            "fiber_g": self.fiber_g,
            "sugar_g": self.sugar_g,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "NutritionProfile":
        """Create NutritionProfile from dictionary (current or legacy keys)."""
        return cls(
            calories=data.get("calories", 0),
            protein_g=data.get("protein_g", data.get("protein", 0.0)),
            carbs_g=data.get("carbs_g", data.get("carbohydrates", 0.0)),
            fat_g=data.get("fat_g", data.get("fat", 0.0)),
            fiber_g=data.get("fiber_g", data.get("fiber", 0.0)),
            sugar_g=data.get("sugar_g", data.get("sugar", 0.0)),
        )


@dataclass
class IngredientQuantity:
    """An ingredient with display quantity and unit (e.g. "2 tablespoons olive oil")."""
    name: str
    quantity: str = "1"
    unit: str = "piece"

    def __str__(self) -> str:
        return f"{self.quantity} {self.unit} {self.name.lower()}"

    def to_dict(self) -> Dict:
        return {"name": self.name, "quantity": self.quantity, "unit": self.unit}

    @classmethod
    def from_dict(cls, data: Dict) -> "IngredientQuantity":
        return cls(
            name=data["name"],
            quantity=data.get("quantity", "1"),
            unit=data.get("unit", "piece"),
        )


@dataclass
class Rating:
    """A user's star rating (1-5) and optional review of a recipe."""

    user_id: int
    recipe_id: str
    rating: int
    review: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    id: Optional[str] = None

    def __post_init__(self):
        if not 1 <= int(self.rating) <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {self.rating}")
        if self.id is None:
            self.id = f"rating_{self.user_id}_{self.recipe_id}"

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "recipeId": self.recipe_id,
            "rating": self.rating,
            "review": self.review,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Rating":
        """Create Rating from dictionary."""
        return cls(
            id=data.get("id"),
            user_id=data["userId"],
            recipe_id=data["recipeId"],
            rating=data["rating"],
            review=data.get("review"),
            created_at=datetime.fromisoformat(data["createdAt"]),
        )


@dataclass
class Recipe:
    """A generated recipe built from pantry ingredients."""

    id: str
    title: str
    description: str
    cook_time: str  # Display text, e.g. "14 min"
    servings: int
    used_ingredients: List[str]  # Pantry ingredients the recipe uses
    missing_ingredients: List[str]  # Ingredients the user still needs
    full_ingredient_list: List[IngredientQuantity] = field(default_factory=list)
    dietary_tags: List[str] = field(default_factory=list)
    cuisine: str = "Other"
    nutrition: Optional[NutritionProfile] = None  # None means unknown, not zero
    instructions: List[str] = field(default_factory=list)

    # Merged in from stored ratings
    average_rating: Optional[float] = None
    total_ratings: int = 0
    user_rating: Optional[Rating] = None

    def __post_init__(self):
        if self.servings < 1:
            raise ValueError(f"Recipe '{self.title}' must serve at least 1, got {self.servings}")

    @property
    def all_ingredients(self) -> List[str]:
        """Used ingredients followed by missing ingredients."""
        return list(self.used_ingredients) + list(self.missing_ingredients)

    def has_tag(self, tag: str) -> bool:
        return tag in self.dietary_tags

    def copy(self) -> "Recipe":
        """Deep copy, so plan slots and favorites never share state with a batch."""
        return copy.deepcopy(self)

    def __str__(self) -> str:
        """Human-readable string."""
        return f"{self.title} ({self.cook_time}, serves {self.servings})"

    def to_dict(self) -> Dict:
        """Convert to a versioned snapshot for JSON serialization."""
        data = {
            "schema_version": SNAPSHOT_VERSION,
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "cook_time": self.cook_time,
            "servings": self.servings,
            "used_ingredients": list(self.used_ingredients),
            "missing_ingredients": list(self.missing_ingredients),
            "full_ingredient_list": [ing.to_dict() for ing in self.full_ingredient_list],
            "dietary_tags": list(self.dietary_tags),
            "cuisine": self.cuisine,
            "nutrition": self.nutrition.to_dict() if self.nutrition else None,
            "instructions": list(self.instructions),
            "average_rating": self.average_rating,
            "total_ratings": self.total_ratings,
            "user_rating": self.user_rating.to_dict() if self.user_rating else None,
        }
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "Recipe":
        """
        Create Recipe from a snapshot dictionary.

        Accepts the current versioned format and the legacy un-versioned
        camelCase format written by earlier clients.

        Raises:
            ValueError: If the snapshot comes from a newer schema version
        """
        version = data.get("schema_version")
        if version is None:
            data = _upgrade_legacy_recipe(data)
        elif version > SNAPSHOT_VERSION:
            raise ValueError(
                f"Recipe snapshot version {version} is newer than supported version {SNAPSHOT_VERSION}"
            )

        nutrition = None
        if data.get("nutrition"):
            nutrition = NutritionProfile.from_dict(data["nutrition"])

        user_rating = None
        if data.get("user_rating"):
            user_rating = Rating.from_dict(data["user_rating"])

        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            cook_time=data.get("cook_time", ""),
            servings=data.get("servings", 2),
            used_ingredients=list(data.get("used_ingredients", [])),
            missing_ingredients=list(data.get("missing_ingredients", [])),
            full_ingredient_list=[
                IngredientQuantity.from_dict(ing) for ing in data.get("full_ingredient_list", [])
            ],
            dietary_tags=list(data.get("dietary_tags", [])),
            cuisine=data.get("cuisine") or "Other",
            nutrition=nutrition,
            instructions=list(data.get("instructions", [])),
            average_rating=data.get("average_rating"),
            total_ratings=data.get("total_ratings") or 0,
            user_rating=user_rating,
        )


def _upgrade_legacy_recipe(data: Dict) -> Dict:
    """Map a legacy camelCase recipe payload onto the current snapshot keys."""
    return {
        "id": data["id"],
        "title": data["title"],
        "description": data.get("description", ""),
        "cook_time": data.get("cookTime", ""),
        "servings": data.get("servings", 2),
        "used_ingredients": data.get("usedIngredients", []),
        "missing_ingredients": data.get("missingIngredients", []),
        "full_ingredient_list": data.get("fullIngredientList") or [],
        "dietary_tags": data.get("dietaryTags", []),
        "cuisine": data.get("cuisine"),
        "nutrition": data.get("nutrition"),
        "instructions": data.get("instructions") or [],
        "average_rating": data.get("averageRating"),
        "total_ratings": data.get("totalRatings"),
        "user_rating": data.get("userRating"),
    }


@dataclass
class DayMeals:
    """Up to two meals planned for one day."""
    meal1: Optional[Recipe] = None
    meal2: Optional[Recipe] = None

    def get(self, slot: int) -> Optional[Recipe]:
        return self.meal1 if slot == 1 else self.meal2

    def set(self, slot: int, recipe: Optional[Recipe]):
        if slot == 1:
            self.meal1 = recipe
        else:
            self.meal2 = recipe

    def is_empty(self) -> bool:
        return self.meal1 is None and self.meal2 is None

    def recipes(self) -> List[Recipe]:
        return [r for r in (self.meal1, self.meal2) if r is not None]


@dataclass
class MealPlan:
    """Weekly meal plan; each slot holds its own copy of a recipe."""

    days: Dict[str, DayMeals] = field(default_factory=dict)

    @staticmethod
    def _validate_slot(day: str, slot: int):
        if day not in DAYS_OF_WEEK:
            raise ValueError(f"Unknown day '{day}', expected one of {DAYS_OF_WEEK}")
        if slot not in MEAL_SLOTS:
            raise ValueError(f"Meal slot must be 1 or 2, got {slot}")

    def assign(self, day: str, slot: int, recipe: Recipe):
        """
        Put a copy of recipe into a day's slot, replacing any previous meal.

        Args:
            day: Day of week, e.g. "Monday"
            slot: 1 or 2

        Raises:
            ValueError: If day or slot is invalid
        """
        self._validate_slot(day, slot)
        self.days.setdefault(day, DayMeals()).set(slot, recipe.copy())

    def remove(self, day: str, slot: int):
        """Empty a slot; the day is dropped once both slots are empty."""
        self._validate_slot(day, slot)
        day_meals = self.days.get(day)
        if day_meals is None:
            return
        day_meals.set(slot, None)
        if day_meals.is_empty():
            del self.days[day]

    def get(self, day: str, slot: int) -> Optional[Recipe]:
        self._validate_slot(day, slot)
        day_meals = self.days.get(day)
        return day_meals.get(slot) if day_meals else None

    def clear(self):
        self.days = {}

    def iter_slots(self) -> Iterator[Tuple[str, int, Recipe]]:
        """Yield (day, slot, recipe) for every filled slot in week order."""
        for day in DAYS_OF_WEEK:
            day_meals = self.days.get(day)
            if day_meals is None:
                continue
            for slot in MEAL_SLOTS:
                recipe = day_meals.get(slot)
                if recipe is not None:
                    yield day, slot, recipe

    def recipes(self) -> List[Recipe]:
        return [recipe for _, _, recipe in self.iter_slots()]

    def __len__(self) -> int:
        return len(self.recipes())

    def __str__(self) -> str:
        return f"Meal Plan: {len(self.days)} days, {len(self)} meals"

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        data = {}
        for day, slot, recipe in self.iter_slots():
            data.setdefault(day, {})[f"meal{slot}"] = recipe.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "MealPlan":
        """Create MealPlan from dictionary."""
        plan = cls()
        for day, meals in data.items():
            for slot in MEAL_SLOTS:
                recipe_data = meals.get(f"meal{slot}")
                if recipe_data:
                    plan.assign(day, slot, Recipe.from_dict(recipe_data))
        return plan


@dataclass
class GroceryItem:
    """Single item on a grocery list."""

    name: str  # Display name, e.g. "Garlic"
    quantity: int  # Number of planned meals that need it
    category: str  # "Produce", "Dairy", ...
    checked: bool = False

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "quantity": self.quantity,
            "category": self.category,
            "checked": self.checked,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "GroceryItem":
        """Create GroceryItem from dictionary."""
        return cls(
            name=data["name"],
            quantity=data["quantity"],
            category=data["category"],
            checked=data.get("checked", False),
        )


@dataclass
class GroceryList:
    """Shopping list for a week of meals."""

    items: List[GroceryItem]
    by_category: Dict[str, List[GroceryItem]] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Organize items by category if not already done."""
        if not self.by_category and self.items:
            self._organize_by_category()

    def _organize_by_category(self):
        """Group items by category, keeping list order within each group."""
        for item in self.items:
            self.by_category.setdefault(item.category, []).append(item)

    def find_item(self, name: str) -> Optional[GroceryItem]:
        """Find an item by name (case-insensitive)."""
        name_lower = name.lower()
        for item in self.items:
            if item.name.lower() == name_lower:
                return item
        return None

    def toggle_checked(self, name: str) -> Optional[GroceryItem]:
        """
        Flip the checked flag of an item.

        Items are shared between the flat list and the category groups, so
        both views see the change.

        Returns:
            The toggled item, or None if no item has that name
        """
        item = self.find_item(name)
        if item is not None:
            item.checked = not item.checked
        return item

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "items": [item.to_dict() for item in self.items],
            "by_category": {
                category: [item.to_dict() for item in items]
                for category, items in self.by_category.items()
            },
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "GroceryList":
        """Create GroceryList from dictionary; category groups share the item objects."""
        items = [GroceryItem.from_dict(i) for i in data["items"]]
        return cls(
            items=items,
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class Subscription:
    """A user's plan record."""

    user_id: int
    plan: str = "free"  # "free" or "pro"
    status: str = "active"  # "active" or "cancelled"
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    id: Optional[str] = None

    def __post_init__(self):
        if self.id is None:
            self.id = f"sub_{self.user_id}"

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "plan": self.plan,
            "status": self.status,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Subscription":
        """Create Subscription from dictionary."""
        return cls(
            id=data.get("id"),
            user_id=data["userId"],
            plan=data.get("plan", "free"),
            status=data.get("status", "active"),
            created_at=datetime.fromisoformat(data["createdAt"]),
            updated_at=datetime.fromisoformat(data.get("updatedAt", data["createdAt"])),
        )


@dataclass
class Usage:
    """Weekly counter of a metered action."""

    user_id: int
    usage_type: str  # "grocery_list", "favorite_recipe", "dietary_filter"
    week_start: str  # ISO date of the Monday
    usage_count: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    id: Optional[str] = None

    def __post_init__(self):
        if self.id is None:
            self.id = f"usage_{self.user_id}_{self.usage_type}_{self.week_start}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "usageType": self.usage_type,
            "usageCount": self.usage_count,
            "weekStart": self.week_start,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Usage":
        """Create Usage from dictionary."""
        return cls(
            id=data.get("id"),
            user_id=data["userId"],
            usage_type=data["usageType"],
            usage_count=data.get("usageCount", 0),
            week_start=data["weekStart"],
            created_at=datetime.fromisoformat(data["createdAt"]),
            updated_at=datetime.fromisoformat(data.get("updatedAt", data["createdAt"])),
        )
