"""Tests for recipe_box.ingredient_parser module."""

from __future__ import annotations

import pytest

from recipe_box.ingredient_parser import (
    CATEGORY_KEYWORDS,
    categorize,
    parse_ingredient,
    parse_quantity,
)
from recipe_box.models import GroceryCategory

# ---------------------------------------------------------------------------
# parse_quantity tests
# ---------------------------------------------------------------------------


class TestParseQuantity:
    """Tests for plain decimal quantity parsing."""

    @pytest.mark.parametrize(
        ("token", "expected"),
        [("2", 2.0), ("1.5", 1.5), (".5", 0.5), ("3.", 3.0), ("012", 12.0)],
    )
    def test_numbers(self, token: str, expected: float) -> None:
        """Test digits with an optional decimal point parse."""
        assert parse_quantity(token) == expected

    @pytest.mark.parametrize(
        "token",
        ["1/2", "11/2", "-1", "+2", "1e3", "nan", "inf", "1_000", "two", "", "."],
    )
    def test_non_numbers(self, token: str) -> None:
        """Test fractions, signs, exponents and words are rejected."""
        assert parse_quantity(token) is None


# ---------------------------------------------------------------------------
# parse_ingredient tests
# ---------------------------------------------------------------------------


class TestParseIngredient:
    """Tests for free-text ingredient parsing."""

    def test_quantity_unit_name(self) -> None:
        """Test the common three-part form."""
        ing = parse_ingredient("2 cups flour")
        assert ing.quantity == 2.0
        assert ing.unit == "cups"
        assert ing.name == "flour"
        assert ing.category == GroceryCategory.PANTRY

    def test_name_keeps_remaining_words(self) -> None:
        """Test everything after the unit stays in the name."""
        ing = parse_ingredient("1 head romaine lettuce")
        assert ing.quantity == 1.0
        assert ing.unit == "head"
        assert ing.name == "romaine lettuce"
        assert ing.category == GroceryCategory.PRODUCE

    def test_decimal_quantity(self) -> None:
        """Test fractional decimal quantities."""
        ing = parse_ingredient("1.5 cups milk")
        assert ing.quantity == 1.5
        assert ing.unit == "cups"
        assert ing.category == GroceryCategory.DAIRY

    def test_two_parts_numeric(self) -> None:
        """Test quantity plus name with no unit."""
        ing = parse_ingredient("2 eggs")
        assert ing.quantity == 2.0
        assert ing.unit == ""
        assert ing.name == "eggs"
        assert ing.category == GroceryCategory.OTHER

    def test_single_word(self) -> None:
        """Test a line with no spaces defaults to one of the whole line."""
        ing = parse_ingredient("Salt")
        assert ing.quantity == 1.0
        assert ing.unit == ""
        assert ing.name == "Salt"
        assert ing.category == GroceryCategory.PANTRY

    def test_two_parts_non_numeric(self) -> None:
        """Test two words without a number keep the whole line."""
        ing = parse_ingredient("Black pepper")
        assert ing.quantity == 1.0
        assert ing.unit == ""
        assert ing.name == "Black pepper"
        assert ing.category == GroceryCategory.PRODUCE

    def test_written_fraction_falls_back(self) -> None:
        """Test ``1/2`` is not a quantity, so the whole line is the name."""
        ing = parse_ingredient("1/2 tsp salt")
        assert ing.quantity == 1.0
        assert ing.unit == ""
        assert ing.name == "1/2 tsp salt"
        assert ing.category == GroceryCategory.PANTRY

    def test_mixed_fraction_falls_back(self) -> None:
        """Test ``1 1/2`` is read as quantity 1 with unit ``1/2``."""
        ing = parse_ingredient("1 1/2 cups flour")
        assert ing.quantity == 1.0
        assert ing.unit == "1/2"
        assert ing.name == "cups flour"

    def test_concatenated_tokens_parse(self) -> None:
        """Test the first two tokens are joined when the first is not a number."""
        ing = parse_ingredient(". 5 cups sugar")
        assert ing.quantity == 0.5
        assert ing.unit == "cups"
        assert ing.name == "sugar"
        assert ing.category == GroceryCategory.PANTRY

    def test_concatenated_tokens_without_name(self) -> None:
        """Test the name is empty when nothing follows the unit."""
        ing = parse_ingredient(". 5 cups")
        assert ing.quantity == 0.5
        assert ing.unit == "cups"
        assert ing.name == ""

    def test_non_numeric_three_parts(self) -> None:
        """Test words in the quantity slot fall back to the default."""
        ing = parse_ingredient("a pinch of salt")
        assert ing.quantity == 1.0
        assert ing.unit == ""
        assert ing.name == "a pinch of salt"

    def test_surrounding_whitespace_stripped(self) -> None:
        """Test leading and trailing whitespace is ignored."""
        ing = parse_ingredient("  2   cups   flour  ")
        assert ing.quantity == 2.0
        assert ing.unit == "cups"
        assert ing.name == "flour"

    def test_default_name_is_stripped(self) -> None:
        """Test the default case uses the stripped line."""
        ing = parse_ingredient("  Salt \n")
        assert ing.name == "Salt"

    def test_empty_line(self) -> None:
        """Test an empty line still yields an ingredient."""
        ing = parse_ingredient("")
        assert ing.quantity == 1.0
        assert ing.unit == ""
        assert ing.name == ""
        assert ing.category == GroceryCategory.OTHER

    def test_negative_number_is_not_quantity(self) -> None:
        """Test signed numbers are not treated as quantities."""
        ing = parse_ingredient("-2 cups flour")
        assert ing.quantity == 1.0
        assert ing.name == "-2 cups flour"

    def test_unit_case_preserved(self) -> None:
        """Test the unit token is kept exactly as written."""
        ing = parse_ingredient("2 Tbsp sugar")
        assert ing.unit == "Tbsp"


# ---------------------------------------------------------------------------
# categorize tests
# ---------------------------------------------------------------------------


class TestCategorize:
    """Tests for keyword-based categorization."""

    def test_black_pepper_is_produce(self) -> None:
        """Test produce is checked before pantry for ``pepper``."""
        assert categorize("Black pepper") == GroceryCategory.PRODUCE

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("romaine lettuce", GroceryCategory.PRODUCE),
            ("Cheddar", GroceryCategory.DAIRY),
            ("sour cream", GroceryCategory.DAIRY),
            ("chicken thighs", GroceryCategory.MEAT_AND_SEAFOOD),
            ("ground cumin", GroceryCategory.MEAT_AND_SEAFOOD),
            ("olive oil", GroceryCategory.PANTRY),
            ("baking soda", GroceryCategory.PANTRY),
            ("corn tortillas", GroceryCategory.BAKERY),
            ("croutons", GroceryCategory.OTHER),
            ("eggs", GroceryCategory.OTHER),
        ],
    )
    def test_keyword_matches(self, name: str, expected: GroceryCategory) -> None:
        """Test representative names land in the expected section."""
        assert categorize(name) == expected

    def test_case_insensitive(self) -> None:
        """Test matching ignores case."""
        assert categorize("FLOUR") == GroceryCategory.PANTRY

    def test_substring_match(self) -> None:
        """Test keywords match inside longer words."""
        assert categorize("tomatoes") == GroceryCategory.PRODUCE

    def test_dairy_before_pantry(self) -> None:
        """Test earlier lists win when several match."""
        assert categorize("melted butter") == GroceryCategory.DAIRY
        assert categorize("cheese sauce") == GroceryCategory.DAIRY

    def test_empty_name_is_other(self) -> None:
        """Test the fallback category."""
        assert categorize("") == GroceryCategory.OTHER

    def test_repeated_calls_agree(self) -> None:
        """Test categorization has no hidden state."""
        assert categorize("salmon fillet") == categorize("salmon fillet")

    def test_keyword_table_order(self) -> None:
        """Test the keyword table is checked in section order."""
        order = [category for category, _ in CATEGORY_KEYWORDS]
        assert order == [
            GroceryCategory.PRODUCE,
            GroceryCategory.DAIRY,
            GroceryCategory.MEAT_AND_SEAFOOD,
            GroceryCategory.PANTRY,
            GroceryCategory.BAKERY,
        ]
