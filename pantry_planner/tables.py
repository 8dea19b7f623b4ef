"""
Reference tables for recipe generation and grocery categorization.

This module is the single source of static vocabulary used by the generator,
the dietary classifier, the instruction synthesizer and the grocery aggregator:
- Cooking methods and cuisine styles (generation templates)
- Complementary ingredients by role
- Nutrition per 100g and default display quantities
- Dietary and grocery-category keyword lists

All ingredient matching goes through fuzzy_match(): two names match when either
one contains the other, case-insensitively. Tables are ordered and lookups are
first-match-wins, so table order matters.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


# =============================================================================
# FUZZY MATCHING
# =============================================================================

def fuzzy_match(a: str, b: str) -> bool:
    """True if either name contains the other (case-insensitive)."""
    a_lower = a.lower().strip()
    b_lower = b.lower().strip()
    if not a_lower or not b_lower:
        return False
    return a_lower in b_lower or b_lower in a_lower


def fuzzy_lookup(token: str, pairs: Sequence[Tuple[str, T]]) -> Optional[T]:
    """
    Find the value of the first (keyword, value) pair whose keyword fuzzily
    matches token.

    Args:
        token: Ingredient name to look up
        pairs: Ordered (keyword, value) pairs

    Returns:
        Matched value, or None if nothing matches
    """
    for keyword, value in pairs:
        if fuzzy_match(token, keyword):
            return value
    return None


def matches_any(token: str, keywords: Iterable[str]) -> bool:
    """True if token fuzzily matches at least one keyword."""
    return any(fuzzy_match(token, keyword) for keyword in keywords)


# =============================================================================
# GENERATION TEMPLATES
# =============================================================================

@dataclass(frozen=True)
class CookingMethod:
    """A cooking technique used in recipe titles."""
    method: str  # Title word, e.g. "Stir-Fried"
    time: str  # Time range text, e.g. "12-15 min"
    description: str  # Description lead-in

    @property
    def base_minutes(self) -> int:
        """Lower bound of the time range."""
        return int(self.time.split("-")[0])


@dataclass(frozen=True)
class CuisineStyle:
    """A seasoning template that flavors a recipe and names its cuisine."""
    style: str
    seasonings: Tuple[str, ...]


COOKING_METHODS: List[CookingMethod] = [
    CookingMethod("Stir-Fried", "12-15 min", "Quick and flavorful stir-fry with"),
    CookingMethod("Roasted", "25-30 min", "Perfectly roasted dish featuring"),
    CookingMethod("Sautéed", "10-12 min", "Light and healthy sauté with"),
    CookingMethod("Braised", "35-40 min", "Tender braised dish with"),
    CookingMethod("Grilled", "15-20 min", "Smoky grilled combination of"),
    CookingMethod("Steamed", "18-22 min", "Delicate steamed preparation with"),
    CookingMethod("Pan-Seared", "8-10 min", "Crispy pan-seared dish with"),
    CookingMethod("Baked", "30-35 min", "Comforting baked dish featuring"),
]

CUISINE_STYLES: List[CuisineStyle] = [
    CuisineStyle("Asian-Inspired", ("soy sauce", "ginger", "sesame oil", "garlic", "green onions")),
    CuisineStyle("Mediterranean", ("olive oil", "herbs", "lemon juice", "garlic", "tomatoes")),
    CuisineStyle("Italian", ("olive oil", "basil", "garlic", "parmesan", "tomatoes")),
    CuisineStyle("Mexican", ("cumin", "chili powder", "lime juice", "cilantro", "onions")),
    CuisineStyle("Indian", ("curry powder", "turmeric", "garam masala", "ginger", "garlic")),
    CuisineStyle("American", ("salt", "pepper", "butter", "herbs", "onions")),
    CuisineStyle("Thai", ("fish sauce", "lime juice", "chili", "basil", "coconut milk")),
    CuisineStyle("French", ("butter", "herbs", "wine", "cream", "shallots")),
    CuisineStyle("Japanese", ("soy sauce", "miso", "sake", "mirin", "ginger")),
    CuisineStyle("Middle Eastern", ("cumin", "coriander", "sumac", "tahini", "lemon juice")),
]

# Displayed cuisine names (the filter vocabulary)
CUISINE_TYPES: List[str] = [
    "Italian",
    "Indian",
    "Mexican",
    "Mediterranean",
    "Chinese",
    "Thai",
    "American",
    "Middle Eastern",
    "French",
    "Japanese",
    "Other",
]

# Style substring -> displayed cuisine, checked in order
STYLE_TO_CUISINE: List[Tuple[str, str]] = [
    ("Asian", "Chinese"),
    ("Mediterranean", "Mediterranean"),
    ("Italian", "Italian"),
    ("Mexican", "Mexican"),
    ("Indian", "Indian"),
    ("American", "American"),
    ("Thai", "Thai"),
    ("French", "French"),
    ("Japanese", "Japanese"),
    ("Middle Eastern", "Middle Eastern"),
]


def cuisine_for_style(style: str) -> str:
    """Map a cuisine style name to its displayed cuisine ("Other" if unmapped)."""
    for fragment, cuisine in STYLE_TO_CUISINE:
        if fragment in style:
            return cuisine
    return "Other"


COMPLEMENTARY_INGREDIENTS: Dict[str, List[str]] = {
    "proteins": ["chicken", "beef", "pork", "fish", "tofu", "eggs", "beans", "lentils"],
    "vegetables": [
        "onions", "garlic", "bell peppers", "carrots", "celery",
        "mushrooms", "tomatoes", "spinach", "broccoli",
    ],
    "grains": ["rice", "pasta", "quinoa", "bread", "noodles", "couscous", "barley"],
    "dairy": ["cheese", "milk", "butter", "cream", "yogurt"],
    "seasonings": [
        "salt", "pepper", "olive oil", "soy sauce", "herbs",
        "spices", "lemon juice", "vinegar",
    ],
}


# =============================================================================
# NUTRITION (per 100g reference portion)
# =============================================================================

# (calories, protein_g, carbs_g, fat_g, fiber_g, sugar_g)
NUTRITION_TABLE: List[Tuple[str, Tuple[float, float, float, float, float, float]]] = [
    # Proteins
    ("chicken", (165, 31, 0, 3.6, 0, 0)),
    ("beef", (250, 26, 0, 15, 0, 0)),
    ("pork", (242, 27, 0, 14, 0, 0)),
    ("fish", (206, 22, 0, 12, 0, 0)),
    ("salmon", (208, 20, 0, 13, 0, 0)),
    ("tuna", (144, 30, 0, 1, 0, 0)),
    ("tofu", (76, 8, 1.9, 4.8, 0.3, 0.6)),
    ("eggs", (155, 13, 1.1, 11, 0, 1.1)),
    ("beans", (127, 8.7, 23, 0.5, 6.4, 0.3)),
    ("lentils", (116, 9, 20, 0.4, 7.9, 1.8)),
    # Vegetables
    ("spinach", (23, 2.9, 3.6, 0.4, 2.2, 0.4)),
    ("broccoli", (34, 2.8, 7, 0.4, 2.6, 1.5)),
    ("carrots", (41, 0.9, 10, 0.2, 2.8, 4.7)),
    ("tomatoes", (18, 0.9, 3.9, 0.2, 1.2, 2.6)),
    ("onions", (40, 1.1, 9.3, 0.1, 1.7, 4.2)),
    ("garlic", (149, 6.4, 33, 0.5, 2.1, 1)),
    ("bell peppers", (31, 1, 7, 0.3, 2.5, 4.2)),
    ("mushrooms", (22, 3.1, 3.3, 0.3, 1, 2)),
    ("celery", (16, 0.7, 3, 0.2, 1.6, 1.3)),
    ("cabbage", (25, 1.3, 6, 0.1, 2.5, 3.2)),
    # Grains & starches
    ("rice", (130, 2.7, 28, 0.3, 0.4, 0.1)),
    ("pasta", (131, 5, 25, 1.1, 1.8, 0.6)),
    ("quinoa", (120, 4.4, 22, 1.9, 2.8, 0.9)),
    ("bread", (265, 9, 49, 3.2, 2.7, 5.7)),
    ("potatoes", (77, 2, 17, 0.1, 2.2, 0.8)),
    ("noodles", (138, 4.5, 25, 2.2, 1.2, 0.6)),
    # Dairy
    ("cheese", (113, 7, 1, 9, 0, 1)),
    ("milk", (42, 3.4, 5, 1, 0, 5)),
    ("butter", (717, 0.9, 0.1, 81, 0, 0.1)),
    ("cream", (345, 2.8, 3.4, 37, 0, 3.4)),
    ("yogurt", (59, 10, 3.6, 0.4, 0, 3.2)),
]


# =============================================================================
# DEFAULT QUANTITIES (display text only, no unit arithmetic)
# =============================================================================

DEFAULT_QUANTITY: Tuple[str, str] = ("1", "piece")

QUANTITY_TABLE: List[Tuple[str, Tuple[str, str]]] = [
    # Proteins
    ("chicken", ("1", "lb")),
    ("beef", ("1", "lb")),
    ("pork", ("1", "lb")),
    ("fish", ("1", "lb")),
    ("salmon", ("1", "lb")),
    ("tuna", ("1", "can")),
    ("tofu", ("1", "block")),
    ("eggs", ("2", "large")),
    ("beans", ("1", "can")),
    ("lentils", ("1", "cup")),
    # Vegetables
    ("onions", ("1", "medium")),
    ("garlic", ("3", "cloves")),
    ("bell peppers", ("1", "large")),
    ("carrots", ("2", "medium")),
    ("celery", ("2", "stalks")),
    ("mushrooms", ("8", "oz")),
    ("tomatoes", ("2", "medium")),
    ("spinach", ("4", "cups")),
    ("broccoli", ("1", "head")),
    ("cabbage", ("½", "head")),
    ("potatoes", ("2", "medium")),
    ("ginger", ("1", "inch piece")),
    # Grains & starches
    ("rice", ("1", "cup")),
    ("pasta", ("8", "oz")),
    ("quinoa", ("1", "cup")),
    ("bread", ("4", "slices")),
    ("noodles", ("8", "oz")),
    # Dairy
    ("cheese", ("1", "cup shredded")),
    ("milk", ("1", "cup")),
    ("butter", ("2", "tablespoons")),
    ("cream", ("½", "cup")),
    ("yogurt", ("1", "cup")),
    # Seasonings & liquids
    ("salt", ("1", "teaspoon")),
    ("pepper", ("½", "teaspoon")),
    ("olive oil", ("2", "tablespoons")),
    ("soy sauce", ("2", "tablespoons")),
    ("vinegar", ("1", "tablespoon")),
    ("herbs", ("1", "tablespoon fresh")),
    ("spices", ("1", "teaspoon")),
    ("lemon juice", ("2", "tablespoons")),
    ("broth", ("2", "cups")),
    ("stock", ("2", "cups")),
]


# =============================================================================
# DIETARY KEYWORDS
# =============================================================================

DIETARY_TAGS: List[str] = [
    "Vegan",
    "Vegetarian",
    "Gluten-Free",
    "Low-Carb",
    "High-Protein",
]

ANIMAL_PROTEIN_KEYWORDS: List[str] = [
    "chicken", "beef", "pork", "fish", "salmon", "tuna", "meat", "bacon", "ham",
]
DAIRY_KEYWORDS: List[str] = ["cheese", "milk", "butter", "cream", "yogurt"]
EGG_KEYWORDS: List[str] = ["egg"]
# soy sauce is brewed with wheat
GLUTEN_KEYWORDS: List[str] = ["pasta", "bread", "flour", "wheat", "noodles", "soy sauce"]
HIGH_CARB_KEYWORDS: List[str] = [
    "rice", "pasta", "bread", "potatoes", "quinoa", "noodles", "couscous", "barley",
]
PROTEIN_SOURCE_KEYWORDS: List[str] = [
    "chicken", "beef", "pork", "fish", "salmon", "tuna",
    "eggs", "beans", "lentils", "tofu", "cheese",
]


# =============================================================================
# GROCERY CATEGORIES
# =============================================================================

GROCERY_CATEGORIES: List[Tuple[str, List[str]]] = [
    ("Produce", [
        "onions", "garlic", "bell peppers", "carrots", "celery", "mushrooms",
        "tomatoes", "spinach", "broccoli", "cabbage", "lettuce", "cucumber",
        "potatoes", "sweet potatoes", "avocado", "lemon", "lime", "ginger",
        "herbs", "cilantro", "parsley", "basil", "thyme", "rosemary",
    ]),
    ("Meat & Seafood", [
        "chicken", "beef", "pork", "fish", "salmon", "tuna", "eggs", "tofu",
        "beans", "lentils", "chickpeas", "turkey", "shrimp", "bacon", "ham",
    ]),
    ("Dairy", [
        "cheese", "milk", "butter", "cream", "yogurt", "sour cream",
        "mozzarella", "parmesan", "cheddar",
    ]),
    ("Grains & Pantry", [
        "rice", "pasta", "quinoa", "bread", "flour", "noodles", "couscous",
        "barley", "oats", "cereal",
    ]),
    ("Spices & Seasonings", [
        "salt", "pepper", "olive oil", "soy sauce", "vinegar", "cumin",
        "paprika", "chili powder", "curry powder", "turmeric", "garam masala",
        "oregano", "bay leaves", "cinnamon", "nutmeg", "vanilla", "sesame oil",
        "coconut oil", "balsamic", "mustard",
    ]),
    ("Canned & Packaged", [
        "broth", "stock", "sauce", "paste", "canned", "coconut milk",
        "tomato sauce", "tomato paste",
    ]),
]

OTHER_CATEGORY = "Other"

# Flattened (keyword, category) pairs for fuzzy_lookup
CATEGORY_KEYWORDS: List[Tuple[str, str]] = [
    (keyword, category)
    for category, keywords in GROCERY_CATEGORIES
    for keyword in keywords
]


def categorize_ingredient(name: str) -> str:
    """Grocery category of an ingredient; the first matching category wins."""
    return fuzzy_lookup(name, CATEGORY_KEYWORDS) or OTHER_CATEGORY
