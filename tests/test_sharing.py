"""Tests for recipe_box.sharing module."""

from __future__ import annotations

import pytest

from recipe_box.consolidator import aggregate_grocery_list
from recipe_box.models import GrocerySortOrder, Recipe, RecipeCategory
from recipe_box.sharing import (
    SHARE_FOOTER,
    format_quantity,
    recipe_print_html,
    recipe_share_text,
    shopping_list_text,
    star_rating,
)


@pytest.fixture()
def salad() -> Recipe:
    """Return a rated recipe with notes.

    Returns:
        Recipe instance.
    """
    return Recipe(
        name="Caesar Salad",
        ingredients=["1 head romaine lettuce", "1 cup croutons"],
        instructions="1. Chop\n2. Toss",
        prep_time=15,
        cook_time=0,
        servings=2,
        category=RecipeCategory.LUNCH,
        notes="Serve cold.",
        rating=4,
    )


class TestFormatQuantity:
    """Tests for quantity formatting."""

    @pytest.mark.parametrize(
        ("qty", "expected"),
        [(2.0, "2"), (1.5, "1.5"), (0.25, "0.25"), (0.0, "0"), (10.0, "10")],
    )
    def test_format(self, qty: float, expected: str) -> None:
        """Test trailing zeros are dropped."""
        assert format_quantity(qty) == expected


class TestStarRating:
    """Tests for star rendering."""

    def test_full(self) -> None:
        """Test five stars."""
        assert star_rating(5) == "★★★★★"

    def test_partial(self) -> None:
        """Test half stars round down."""
        assert star_rating(3.5) == "★★★☆☆"

    def test_unrated(self) -> None:
        """Test zero gives all empty stars."""
        assert star_rating(0) == "☆☆☆☆☆"


class TestRecipeShareText:
    """Tests for the plain-text recipe rendering."""

    def test_layout(self, salad: Recipe) -> None:
        """Test headings, metadata and bullets."""
        text = recipe_share_text(salad)
        lines = text.splitlines()
        assert lines[0] == "Caesar Salad"
        assert lines[1] == "=" * len("Caesar Salad")
        assert "Rating: ★★★★☆" in lines
        assert "Category: Lunch" in lines
        assert "Total Time: 15 minutes" in lines
        assert "Servings: 2" in lines
        assert "• 1 head romaine lettuce" in lines
        assert "1. Chop" in lines
        assert "NOTES" in lines
        assert lines[-1] == SHARE_FOOTER

    def test_unrated_without_notes(self, salad: Recipe) -> None:
        """Test rating and notes sections are omitted when empty."""
        text = recipe_share_text(salad.model_copy(update={"rating": 0, "notes": ""}))
        assert "Rating:" not in text
        assert "NOTES" not in text


class TestRecipePrintHtml:
    """Tests for the printable HTML rendering."""

    def test_document(self, salad: Recipe) -> None:
        """Test the document carries the recipe content."""
        html = recipe_print_html(salad)
        assert html.startswith("<!DOCTYPE html>")
        assert "<title>Caesar Salad</title>" in html
        assert "<li>1 cup croutons</li>" in html
        assert "Rating: ★★★★☆" in html
        assert '<div class="notes">' in html

    def test_escapes_text(self, salad: Recipe) -> None:
        """Test recipe text cannot inject markup."""
        html = recipe_print_html(
            salad.model_copy(update={"name": "<script>x</script>", "rating": 0}),
        )
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "Not rated" in html


class TestShoppingListText:
    """Tests for the plain-text shopping list."""

    def test_empty(self) -> None:
        """Test the empty list message."""
        assert shopping_list_text([]) == "Shopping list is empty."

    def test_grouped_by_category(self) -> None:
        """Test items appear under their section headings."""
        items = aggregate_grocery_list(
            [("A", ["2 cups flour", "1 cup milk"]), ("B", ["1 cup flour"])],
        )
        text = shopping_list_text(items)
        lines = text.splitlines()
        assert lines[0] == "Shopping List"
        assert lines.index("[Dairy]") < lines.index("[Pantry]")
        assert "  [ ] 1 cup milk" in lines
        assert "  [ ] 2 cups flour" in lines
        assert "  [ ] 1 cup flour" in lines
        assert lines[-1] == "3 of 3 item(s) left to buy"

    def test_checked_and_already_have(self) -> None:
        """Test ticked items are marked and owned items listed last."""
        items = aggregate_grocery_list([("A", ["2 eggs", "Salt", "1 cup milk"])])
        items[0].checked = True
        items[1].already_have = True
        text = shopping_list_text(items, GrocerySortOrder.NAME)
        lines = text.splitlines()
        assert "[All Items]" in lines
        assert "  [x] 2 eggs" in lines
        have_at = lines.index("--- Already Have ---")
        assert lines.index("  [ ] 1 Salt") > have_at
        assert lines[-1] == "1 of 2 item(s) left to buy"

    def test_grouped_by_recipe(self) -> None:
        """Test recipe order uses recipe names as headings."""
        items = aggregate_grocery_list([("Soup", ["1 carrot"]), ("Bread", ["Salt"])])
        lines = shopping_list_text(items, GrocerySortOrder.RECIPE).splitlines()
        assert lines.index("[Bread]") < lines.index("[Soup]")
