"""Shopping list consolidation from a selection of recipes.

Parses every ingredient line of the selected recipes, merges lines that
share a name and unit, and offers the orderings and groupings used to
display the resulting list. Everything here is a pure function of its
input; checked / already-have state belongs to the caller's session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recipe_box.ingredient_parser import parse_ingredient
from recipe_box.models import GroceryCategory, GroceryItem, GrocerySortOrder

if TYPE_CHECKING:
    from collections.abc import Iterable

    from recipe_box.models import Ingredient, Recipe

CATEGORY_DISPLAY: dict[GroceryCategory, str] = {
    GroceryCategory.PRODUCE: "Produce",
    GroceryCategory.DAIRY: "Dairy",
    GroceryCategory.MEAT_AND_SEAFOOD: "Meat & Seafood",
    GroceryCategory.PANTRY: "Pantry",
    GroceryCategory.BAKERY: "Bakery",
    GroceryCategory.FROZEN: "Frozen",
    GroceryCategory.BEVERAGES: "Beverages",
    GroceryCategory.OTHER: "Other",
}

_CATEGORY_RANK: dict[GroceryCategory, int] = {
    category: rank for rank, category in enumerate(GroceryCategory)
}

ALL_ITEMS_HEADING = "All Items"


def merge_key(ingredient: Ingredient) -> str:
    """Return the string handle clients use to address a list item.

    Merging itself compares the (name, unit) pair, so a hyphen inside a
    name or unit never joins two different ingredients. Units are compared
    verbatim (case-insensitively), so ``cup`` and ``cups`` stay separate.

    Args:
        ingredient: Parsed ingredient.

    Returns:
        ``"<name>-<unit>"`` lowercased.
    """
    return f"{ingredient.name.lower()}-{ingredient.unit.lower()}"


def _merge_identity(ingredient: Ingredient) -> tuple[str, str]:
    """Return the lowercased (name, unit) pair that lines must share to merge."""
    return ingredient.name.lower(), ingredient.unit.lower()


def aggregate_grocery_list(
    recipes: Iterable[tuple[str, Iterable[str]]],
) -> list[GroceryItem]:
    """Build a deduplicated shopping list from recipe ingredient lines.

    Steps:
    1. Parse each line of each recipe, in order.
    2. Sum quantities of lines with the same name and unit, and append
       the recipe name to the item's sources (once per line).
    3. Keep the category of the first line seen for each pair.

    Args:
        recipes: Ordered ``(recipe name, ingredient lines)`` pairs.

    Returns:
        One GroceryItem per (name, unit) pair, in order of first appearance.
    """
    merged: dict[tuple[str, str], GroceryItem] = {}
    for recipe_name, lines in recipes:
        for line in lines:
            ingredient = parse_ingredient(line)
            key = _merge_identity(ingredient)
            existing = merged.get(key)
            if existing is not None:
                existing.ingredient.quantity += ingredient.quantity
                existing.source_recipes.append(recipe_name)
            else:
                merged[key] = GroceryItem(
                    ingredient=ingredient,
                    source_recipes=[recipe_name],
                )
    return list(merged.values())


def aggregate_recipes(recipes: Iterable[Recipe]) -> list[GroceryItem]:
    """Build a shopping list from stored recipes.

    Args:
        recipes: Recipes in the order they were selected.

    Returns:
        Consolidated shopping list.
    """
    return aggregate_grocery_list((r.name, r.ingredients) for r in recipes)


# ---------------------------------------------------------------------------
# Ordering and grouping
# ---------------------------------------------------------------------------


def _name_key(item: GroceryItem) -> str:
    """Sort key: the ingredient name, ignoring case."""
    return item.ingredient.name.lower()


def _first_recipe(item: GroceryItem) -> str:
    """Name of the recipe that first contributed the item, or empty."""
    return item.source_recipes[0] if item.source_recipes else ""


def sort_by_category(items: Iterable[GroceryItem]) -> list[GroceryItem]:
    """Order items by store section, then by name."""
    return sorted(
        items,
        key=lambda i: (_CATEGORY_RANK[i.ingredient.category], _name_key(i)),
    )


def sort_by_name(items: Iterable[GroceryItem]) -> list[GroceryItem]:
    """Order items alphabetically, ignoring case."""
    return sorted(items, key=_name_key)


def sort_by_recipe(items: Iterable[GroceryItem]) -> list[GroceryItem]:
    """Order items by their first source recipe, then by name."""
    return sorted(items, key=lambda i: (_first_recipe(i).lower(), _name_key(i)))


_SORTERS = {
    GrocerySortOrder.CATEGORY: sort_by_category,
    GrocerySortOrder.NAME: sort_by_name,
    GrocerySortOrder.RECIPE: sort_by_recipe,
}


def sort_grocery_items(
    items: Iterable[GroceryItem],
    order: GrocerySortOrder = GrocerySortOrder.CATEGORY,
) -> list[GroceryItem]:
    """Return a new list ordered by ``order``.

    Args:
        items: Shopping list items.
        order: Requested ordering.

    Returns:
        Sorted copy of the items; ties keep their input order.
    """
    return _SORTERS[GrocerySortOrder(order)](items)


def group_grocery_items(
    items: Iterable[GroceryItem],
    order: GrocerySortOrder = GrocerySortOrder.CATEGORY,
) -> list[tuple[str, list[GroceryItem]]]:
    """Group a sorted shopping list under display headings.

    Category order groups by store section, recipe order by first source
    recipe, and name order puts everything under a single heading.

    Args:
        items: Shopping list items.
        order: Requested ordering.

    Returns:
        Ordered ``(heading, items)`` pairs; empty groups are omitted.
    """
    order = GrocerySortOrder(order)
    ordered = sort_grocery_items(items, order)
    if not ordered:
        return []
    if order is GrocerySortOrder.NAME:
        return [(ALL_ITEMS_HEADING, ordered)]

    groups: dict[str, list[GroceryItem]] = {}
    for item in ordered:
        if order is GrocerySortOrder.CATEGORY:
            heading = CATEGORY_DISPLAY[item.ingredient.category]
        else:
            heading = _first_recipe(item)
        groups.setdefault(heading, []).append(item)
    return list(groups.items())


# ---------------------------------------------------------------------------
# Session helpers
# ---------------------------------------------------------------------------


def items_to_buy(items: Iterable[GroceryItem]) -> list[GroceryItem]:
    """Items the user still needs to purchase (not already owned)."""
    return [item for item in items if not item.already_have]


def remaining_items(items: Iterable[GroceryItem]) -> list[GroceryItem]:
    """To-buy items that have not been ticked off yet."""
    return [item for item in items_to_buy(items) if not item.checked]


def find_item(items: Iterable[GroceryItem], key: str) -> GroceryItem | None:
    """Look up an item by its merge key.

    Args:
        items: Shopping list items.
        key: Merge key as returned by :func:`merge_key`.

    Returns:
        Matching item or None.
    """
    lowered = key.lower()
    for item in items:
        if merge_key(item.ingredient) == lowered:
            return item
    return None
