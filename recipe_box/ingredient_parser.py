"""Rules-based ingredient line parsing and grocery categorization.

Turns free-text lines such as ``"2 cups flour"`` into structured
Ingredient records. Parsing never fails: anything that does not look
like ``<quantity> [unit] <name>`` becomes a single unit of the whole line.
"""

from __future__ import annotations

import re

from recipe_box.models import GroceryCategory, Ingredient

# Digits with an optional decimal point. Signs, exponents, nan/inf and
# fractions are not quantities.
_NUMBER_RE = re.compile(r"^(?:\d+\.?\d*|\.\d+)$")

# Checked in order; the first list with a matching keyword wins, so
# "pepper" always lands in produce.
CATEGORY_KEYWORDS: list[tuple[GroceryCategory, list[str]]] = [
    (
        GroceryCategory.PRODUCE,
        [
            "lettuce",
            "tomato",
            "onion",
            "garlic",
            "carrot",
            "celery",
            "potato",
            "apple",
            "banana",
            "orange",
            "lemon",
            "lime",
            "pepper",
            "cucumber",
            "spinach",
            "kale",
            "broccoli",
            "cauliflower",
        ],
    ),
    (
        GroceryCategory.DAIRY,
        [
            "milk",
            "cream",
            "cheese",
            "yogurt",
            "butter",
            "sour cream",
            "cottage cheese",
            "mozzarella",
            "cheddar",
            "parmesan",
        ],
    ),
    (
        GroceryCategory.MEAT_AND_SEAFOOD,
        [
            "chicken",
            "beef",
            "pork",
            "fish",
            "salmon",
            "shrimp",
            "bacon",
            "sausage",
            "ground",
            "steak",
            "turkey",
            "ham",
        ],
    ),
    (
        GroceryCategory.PANTRY,
        [
            "flour",
            "sugar",
            "salt",
            "pepper",
            "oil",
            "vinegar",
            "rice",
            "pasta",
            "beans",
            "sauce",
            "spice",
            "seasoning",
            "baking powder",
            "baking soda",
        ],
    ),
    (
        GroceryCategory.BAKERY,
        [
            "bread",
            "rolls",
            "bagel",
            "muffin",
            "croissant",
            "tortilla",
            "pita",
        ],
    ),
]


def parse_quantity(token: str) -> float | None:
    """Parse a token as a plain decimal quantity.

    Args:
        token: Candidate quantity text, e.g. ``"2"`` or ``"1.5"``.

    Returns:
        The numeric value, or None if the token is not a plain number.
    """
    if not _NUMBER_RE.fullmatch(token):
        return None
    return float(token)


def categorize(name: str) -> GroceryCategory:
    """Assign a grocery category by case-insensitive keyword match.

    Args:
        name: Ingredient name.

    Returns:
        The first category whose keyword list matches, else OTHER.
    """
    lowered = name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return GroceryCategory.OTHER


def _split_unit_and_name(remainder: str) -> tuple[str, str]:
    """Split the text after a quantity into its first token and the rest."""
    parts = remainder.split(maxsplit=1)
    unit = parts[0] if parts else ""
    name = parts[1] if len(parts) > 1 else ""
    return unit, name


def parse_ingredient(line: str) -> Ingredient:
    """Parse one free-text ingredient line.

    Surrounding whitespace is stripped and the line is split into at most
    three parts: quantity, unit, and the rest as the name. A line whose
    first token is not a number, or that has no spaces, becomes a
    quantity of 1 with the whole line as the name.

    Args:
        line: Raw ingredient text as written in a recipe.

    Returns:
        Best-effort Ingredient; never raises.
    """
    text = line.strip()
    parts = text.split(maxsplit=2)

    quantity = 1.0
    unit = ""
    name = text

    if len(parts) >= 3:
        first = parse_quantity(parts[0])
        joined = parse_quantity(parts[0] + parts[1])
        if first is not None:
            quantity, unit, name = first, parts[1], parts[2]
        elif joined is not None:
            quantity = joined
            unit, name = _split_unit_and_name(parts[2])
    elif len(parts) == 2:
        first = parse_quantity(parts[0])
        if first is not None:
            quantity, name = first, parts[1]

    return Ingredient(
        name=name,
        quantity=quantity,
        unit=unit,
        category=categorize(name),
    )
