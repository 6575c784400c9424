"""Plain-text and HTML renderings for sharing recipes and shopping lists."""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

from recipe_box.consolidator import (
    group_grocery_items,
    items_to_buy,
    remaining_items,
)
from recipe_box.models import GrocerySortOrder

if TYPE_CHECKING:
    from recipe_box.models import GroceryItem, Recipe

MAX_STARS = 5
SHARE_FOOTER = "Shared from My Recipe App"


def format_quantity(qty: float) -> str:
    """Format a quantity without trailing zeros.

    Args:
        qty: Quantity value.

    Returns:
        ``"2"`` for 2.0, ``"1.5"`` for 1.5.
    """
    if qty == int(qty):
        return str(int(qty))
    return f"{qty:g}"


def star_rating(rating: float) -> str:
    """Render a rating as filled and empty stars out of five."""
    filled = max(0, min(MAX_STARS, int(rating)))
    return "★" * filled + "☆" * (MAX_STARS - filled)


def recipe_share_text(recipe: Recipe) -> str:
    """Render a recipe as plain text for messages and the clipboard.

    Args:
        recipe: Recipe to render.

    Returns:
        Multi-line text with ingredients, instructions and notes.
    """
    lines = [recipe.name, "=" * len(recipe.name), ""]
    if recipe.rating > 0:
        lines.append(f"Rating: {star_rating(recipe.rating)}")
    lines.extend(
        [
            f"Category: {recipe.category.value}",
            f"Prep Time: {recipe.prep_time} minutes",
            f"Cook Time: {recipe.cook_time} minutes",
            f"Total Time: {recipe.total_time} minutes",
            f"Servings: {recipe.servings}",
            "",
            "INGREDIENTS",
            "-----------",
        ]
    )
    lines.extend(f"• {ingredient}" for ingredient in recipe.ingredients)
    lines.extend(["", "INSTRUCTIONS", "-----------", recipe.instructions])
    if recipe.notes:
        lines.extend(["", "NOTES", "-----", recipe.notes])
    lines.extend(["", "───────────────────────", SHARE_FOOTER])
    return "\n".join(lines)


_PRINT_STYLE = """\
body { font-family: -apple-system, BlinkMacSystemFont, sans-serif; padding: 20px; }
h1 { color: #333; }
h2 { color: #666; font-size: 18px; margin-top: 20px; }
.metadata { color: #888; font-size: 14px; }
ul { padding-left: 20px; }
li { margin: 5px 0; }
.instructions { white-space: pre-wrap; }
.notes { background: #f5f5f5; padding: 10px; border-radius: 5px; margin-top: 20px; }"""


def recipe_print_html(recipe: Recipe) -> str:
    """Render a recipe as a printable HTML document.

    All recipe text is escaped.

    Args:
        recipe: Recipe to render.

    Returns:
        Complete HTML document string.
    """
    rating = star_rating(recipe.rating) if recipe.rating > 0 else "Not rated"
    items = "".join(f"<li>{escape(i)}</li>" for i in recipe.ingredients)
    notes = ""
    if recipe.notes:
        notes = (
            '<div class="notes">\n<h2>Notes</h2>\n'
            f"<p>{escape(recipe.notes)}</p>\n</div>\n"
        )
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{escape(recipe.name)}</title>\n"
        f"<style>\n{_PRINT_STYLE}\n</style>\n"
        "</head>\n<body>\n"
        f"<h1>{escape(recipe.name)}</h1>\n"
        '<div class="metadata">\n'
        f"<p>Category: {escape(recipe.category.value)} | Rating: {rating}</p>\n"
        f"<p>Prep: {recipe.prep_time} min | Cook: {recipe.cook_time} min"
        f" | Servings: {recipe.servings}</p>\n"
        "</div>\n"
        f"<h2>Ingredients</h2>\n<ul>\n{items}\n</ul>\n"
        "<h2>Instructions</h2>\n"
        f'<div class="instructions">{escape(recipe.instructions)}</div>\n'
        f"{notes}"
        "</body>\n</html>\n"
    )


def _format_item_line(item: GroceryItem) -> str:
    ing = item.ingredient
    box = "[x]" if item.checked else "[ ]"
    parts = [format_quantity(ing.quantity)]
    if ing.unit:
        parts.append(ing.unit)
    parts.append(ing.name)
    return f"  {box} {' '.join(parts)}"


def shopping_list_text(
    items: list[GroceryItem],
    order: GrocerySortOrder = GrocerySortOrder.CATEGORY,
) -> str:
    """Render a shopping list as grouped plain text.

    Items marked already-have are listed separately at the end.

    Args:
        items: Shopping list items.
        order: Grouping and ordering to use.

    Returns:
        Formatted shopping list string.
    """
    if not items:
        return "Shopping list is empty."

    to_buy = items_to_buy(items)
    have = [i for i in items if i.already_have]

    lines: list[str] = ["Shopping List", ""]
    for heading, group in group_grocery_items(to_buy, order):
        lines.append(f"[{heading}]")
        lines.extend(_format_item_line(item) for item in group)
        lines.append("")

    if have:
        lines.append("--- Already Have ---")
        for heading, group in group_grocery_items(have, order):
            lines.append(f"[{heading}]")
            lines.extend(_format_item_line(item) for item in group)
            lines.append("")

    remaining = len(remaining_items(items))
    lines.append(f"{remaining} of {len(to_buy)} item(s) left to buy")
    return "\n".join(lines)
