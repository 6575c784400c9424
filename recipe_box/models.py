"""Pydantic models and enums for Recipe Box.

This is the shared type system: the recipe document stored on disk and
the ingredient / shopping-list types produced by the grocery pipeline.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

# Reference date used by the mobile app's JSON date encoding.
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=UTC)

_UNSAFE_FILENAME_CHARS = '/\\:*?"<>|'
_FALLBACK_FILE_STEM = "Recipe"

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class GroceryCategory(StrEnum):
    """Grocery store sections, in display order."""

    PRODUCE = "produce"
    DAIRY = "dairy"
    MEAT_AND_SEAFOOD = "meat_seafood"
    PANTRY = "pantry"
    BAKERY = "bakery"
    FROZEN = "frozen"
    BEVERAGES = "beverages"
    OTHER = "other"


class RecipeCategory(StrEnum):
    """Meal type a recipe belongs to."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    DESSERT = "Dessert"
    SNACK = "Snack"
    BEVERAGE = "Beverage"


class RecipeSortOption(StrEnum):
    """Orderings offered for the recipe list."""

    NAME = "name"
    RATING = "rating"
    RECENT = "recent"
    FAVORITES = "favorites"


class GrocerySortOrder(StrEnum):
    """Orderings offered for a shopping list."""

    CATEGORY = "category"
    NAME = "name"
    RECIPE = "recipe"


# ---------------------------------------------------------------------------
# Grocery models
# ---------------------------------------------------------------------------


class Ingredient(BaseModel):
    """A structured ingredient parsed from one free-text line."""

    name: str
    quantity: float = Field(ge=0)
    unit: str = ""
    category: GroceryCategory = GroceryCategory.OTHER


class GroceryItem(BaseModel):
    """A single merged entry on a shopping list."""

    ingredient: Ingredient
    checked: bool = False
    already_have: bool = False
    source_recipes: list[str] = []


# ---------------------------------------------------------------------------
# Recipe document
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(UTC)


class Recipe(BaseModel):
    """A recipe as stored in its own JSON file.

    Field names serialize to camelCase so that documents written here
    stay readable by the mobile app syncing the same folder.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = Field(min_length=1)
    ingredients: list[str] = []
    instructions: str = ""
    prep_time: int = Field(default=0, ge=0)
    cook_time: int = Field(default=0, ge=0)
    servings: int = Field(default=1, ge=0)
    category: RecipeCategory = RecipeCategory.DINNER
    notes: str = ""
    rating: float = Field(default=0.0, ge=0, le=5)
    last_modified: datetime = Field(default_factory=_now)
    last_modified_by: str = ""
    image_file_name: str | None = None

    @field_validator("last_modified", mode="before")
    @classmethod
    def _decode_last_modified(cls, v: object) -> object:
        """Accept reference-date seconds as well as ISO strings.

        Args:
            v: Raw value from JSON or a caller.

        Returns:
            A datetime, or the value unchanged for pydantic to parse.
        """
        if isinstance(v, bool):
            return v
        if isinstance(v, (int, float)):
            return REFERENCE_DATE + timedelta(seconds=v)
        return v

    @field_validator("last_modified")
    @classmethod
    def _ensure_aware(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC.

        Args:
            v: Parsed datetime.

        Returns:
            Timezone-aware datetime.
        """
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @field_serializer("id")
    def _serialize_id(self, value: uuid.UUID) -> str:
        return str(value).upper()

    @field_serializer("last_modified")
    def _serialize_last_modified(self, value: datetime) -> float:
        return (value - REFERENCE_DATE).total_seconds()

    @property
    def total_time(self) -> int:
        """Prep plus cook time in minutes."""
        return self.prep_time + self.cook_time

    @property
    def file_name(self) -> str:
        """File name of this recipe's JSON document.

        Characters that are unsafe in file names are replaced with ``-``
        and the uppercase UUID keeps names unique. Leading dots are
        dropped so the file is never hidden.
        """
        safe = self.name
        for char in _UNSAFE_FILENAME_CHARS:
            safe = safe.replace(char, "-")
        safe = safe.strip().lstrip(".").strip() or _FALLBACK_FILE_STEM
        return f"{safe}_{str(self.id).upper()}.json"

    def to_document(self) -> dict[str, object]:
        """Return the JSON-ready dict written to disk.

        Returns:
            Dict with camelCase keys.
        """
        return self.model_dump(mode="json", by_alias=True)
