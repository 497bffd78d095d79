# smartcart/domain/labels.py
"""Decides whether a vision label names something edible and normalizes it for matching."""

FOOD_KEYWORDS = (
    "fruit", "vegetable", "food", "produce", "grocery", "edible",
    "apple", "banana", "orange", "grape", "berry", "citrus",
    "strawberry", "blueberry", "raspberry", "blackberry", "melon",
    "watermelon", "cantaloupe", "pineapple", "mango", "peach", "pear",
    "plum", "cherry", "kiwi", "fig", "date", "apricot", "lemon", "lime",
    "tomato", "potato", "carrot", "broccoli", "lettuce", "spinach", "kale",
    "onion", "garlic", "pepper", "cucumber", "zucchini", "eggplant",
    "bread", "pasta", "rice", "cereal", "oats", "meat", "chicken", "beef",
    "pork", "fish", "seafood", "dairy", "milk", "cheese", "yogurt",
    "beverage", "drink", "juice", "water", "soda", "coffee", "tea",
    "snack", "candy", "chocolate", "cookies", "crackers", "chips",
    "natural food", "organic", "product", "grocery item", "supermarket",
)

# liczba mnoga, ktorej nie skracamy
PLURAL_EXCEPTIONS = ("grapes", "chips", "oats", "cookies", "crackers")


def is_food(label: str) -> bool:
    normalized = label.lower().strip()
    return any(keyword in normalized for keyword in FOOD_KEYWORDS)


def normalize_label(label: str) -> str:
    """
    Lower-case, trim, and drop one trailing "s".

    Only the whole-label exceptions in PLURAL_EXCEPTIONS keep their "s";
    there is no other stemming, so "Tomatoes" becomes "tomatoe".
    """
    normalized = label.lower().strip()

    if normalized.endswith("s") and normalized not in PLURAL_EXCEPTIONS:
        normalized = normalized[:-1]

    return normalized
