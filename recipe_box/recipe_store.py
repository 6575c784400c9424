"""Folder-backed recipe storage.

Each recipe lives in its own pretty-printed JSON file inside a user-chosen
folder, so the folder can be synced between devices by any file sync
service. The store keeps an in-memory copy, notifies subscribers after
every change, and polls the folder to pick up edits made elsewhere.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from recipe_box.models import Recipe, RecipeCategory, RecipeSortOption

if TYPE_CHECKING:
    import uuid
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

RECIPE_EXTENSION = ".json"
FAVORITE_RATING = 5

_ARTICLE_RE = re.compile(r"^(a|an|the)\s+", re.IGNORECASE)
_POSSESSIVE_RE = re.compile(r"'s\b")
_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


class RecipeStoreError(Exception):
    """Raised when the recipe folder cannot be read or written."""


def normalize_recipe_name(name: str) -> str:
    """Normalize a recipe name for consistent lookup.

    Lowercases, strips articles, normalizes possessives,
    removes punctuation, and collapses whitespace.

    Args:
        name: Raw recipe name.

    Returns:
        Normalized name string.
    """
    result = name.lower().strip()
    result = _ARTICLE_RE.sub("", result)
    result = _POSSESSIVE_RE.sub("s", result)
    result = _PUNCTUATION_RE.sub("", result)
    result = _WHITESPACE_RE.sub(" ", result).strip()
    return result


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------


def filter_recipes(recipes: Iterable[Recipe], search: str = "") -> list[Recipe]:
    """Keep recipes whose name or category contains ``search``.

    Args:
        recipes: Recipes to filter.
        search: Case-insensitive search text; empty keeps everything.

    Returns:
        Matching recipes in their original order.
    """
    needle = search.strip().lower()
    if not needle:
        return list(recipes)
    return [
        r
        for r in recipes
        if needle in r.name.lower() or needle in r.category.value.lower()
    ]


def _favorites_key(recipe: Recipe) -> tuple[bool, float]:
    """Sort key putting five-star recipes first, newest first within each part."""
    return (recipe.rating != FAVORITE_RATING, -recipe.last_modified.timestamp())


def sort_recipes(
    recipes: Iterable[Recipe],
    option: RecipeSortOption = RecipeSortOption.RECENT,
) -> list[Recipe]:
    """Order recipes for the recipe list.

    Args:
        recipes: Recipes to order.
        option: ``name`` ascending, ``rating`` highest first, ``recent``
            newest first, or ``favorites`` (five stars first, then newest).

    Returns:
        New sorted list.
    """
    option = RecipeSortOption(option)
    if option is RecipeSortOption.NAME:
        return sorted(recipes, key=lambda r: r.name.lower())
    if option is RecipeSortOption.RATING:
        return sorted(recipes, key=lambda r: r.rating, reverse=True)
    if option is RecipeSortOption.FAVORITES:
        return sorted(recipes, key=_favorites_key)
    return sorted(recipes, key=lambda r: r.last_modified, reverse=True)


def sample_recipes() -> list[Recipe]:
    """Return the starter recipes added to an empty folder.

    Returns:
        Three sample recipes.
    """
    return [
        Recipe(
            name="Classic Pancakes",
            ingredients=[
                "2 cups flour",
                "2 eggs",
                "1.5 cups milk",
                "2 tbsp sugar",
                "2 tsp baking powder",
                "1/2 tsp salt",
                "2 tbsp melted butter",
            ],
            instructions=(
                "1. Mix dry ingredients in a bowl\n"
                "2. Whisk wet ingredients separately\n"
                "3. Combine and mix until just blended\n"
                "4. Cook on griddle until bubbles form\n"
                "5. Flip and cook until golden"
            ),
            prep_time=10,
            cook_time=15,
            servings=4,
            category=RecipeCategory.BREAKFAST,
            notes=(
                "For fluffier pancakes, let the batter rest for 5 minutes "
                "before cooking. You can also add blueberries or chocolate "
                "chips!"
            ),
            rating=5,
        ),
        Recipe(
            name="Caesar Salad",
            ingredients=[
                "1 head romaine lettuce",
                "1/2 cup Caesar dressing",
                "1/4 cup parmesan cheese",
                "1 cup croutons",
                "2 tbsp lemon juice",
            ],
            instructions=(
                "1. Wash and chop lettuce\n"
                "2. Toss with dressing\n"
                "3. Add parmesan and croutons\n"
                "4. Squeeze lemon juice on top\n"
                "5. Serve immediately"
            ),
            prep_time=15,
            cook_time=0,
            servings=2,
            category=RecipeCategory.LUNCH,
            rating=4,
        ),
        Recipe(
            name="Spaghetti Carbonara",
            ingredients=[
                "1 lb spaghetti",
                "4 eggs",
                "1 cup parmesan",
                "8 oz pancetta",
                "Black pepper",
                "Salt",
            ],
            instructions=(
                "1. Cook spaghetti al dente\n"
                "2. Fry pancetta until crispy\n"
                "3. Beat eggs with cheese\n"
                "4. Toss hot pasta with pancetta\n"
                "5. Remove from heat, add egg mixture\n"
                "6. Season with pepper"
            ),
            prep_time=10,
            cook_time=20,
            servings=4,
            category=RecipeCategory.DINNER,
            notes=(
                "The key is to work quickly and keep the pasta hot, but "
                "remove from direct heat when adding eggs to avoid "
                "scrambling them."
            ),
            rating=5,
        ),
    ]


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class RecipeStore:
    """Recipes kept as one JSON file each in a folder."""

    def __init__(
        self,
        folder: str | Path,
        device_name: str = "unknown",
        seed_samples: bool = True,
    ) -> None:
        """Initialize the store. Nothing is read until load_recipes().

        Args:
            folder: Directory holding the recipe JSON files.
            device_name: Recorded as last_modified_by on every save.
            seed_samples: Add sample recipes when the folder has none.
        """
        self._folder = Path(folder)
        self._device_name = device_name
        self._seed_samples = seed_samples
        self._recipes: list[Recipe] = []
        self._subscribers: list[Callable[[list[Recipe]], None]] = []
        self._snapshot: frozenset[tuple[str, int, int]] | None = None

    @property
    def folder(self) -> Path:
        """Directory this store reads and writes."""
        return self._folder

    @property
    def recipes(self) -> list[Recipe]:
        """Loaded recipes, most recently modified first."""
        return list(self._recipes)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self, callback: Callable[[list[Recipe]], None]
    ) -> Callable[[], None]:
        """Register a callback run with the recipe list after each change.

        Args:
            callback: Receives a copy of the current recipe list.

        Returns:
            Function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        """Run every subscriber with a copy of the recipe list."""
        for callback in list(self._subscribers):
            callback(self.recipes)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _recipe_files(self) -> list[Path]:
        """List the non-hidden recipe files in the folder.

        Raises:
            RecipeStoreError: If the folder is missing or unreadable.
        """
        try:
            return sorted(
                p
                for p in self._folder.iterdir()
                if p.suffix == RECIPE_EXTENSION
                and not p.name.startswith(".")
                and p.is_file()
            )
        except OSError as err:
            raise RecipeStoreError(
                f"Cannot read recipe folder {self._folder}: {err}"
            ) from err

    def _take_snapshot(self) -> frozenset[tuple[str, int, int]]:
        """Record name, modification time and size of every recipe file."""
        entries = set()
        for path in self._recipe_files():
            try:
                stat = path.stat()
            except FileNotFoundError:
                continue
            entries.add((path.name, stat.st_mtime_ns, stat.st_size))
        return frozenset(entries)

    def load_recipes(self) -> list[Recipe]:
        """Read every recipe file in the folder.

        Files that are not valid recipe documents are logged and skipped.
        An empty folder is seeded with sample recipes when enabled.

        Returns:
            Loaded recipes, most recently modified first.

        Raises:
            RecipeStoreError: If the folder is missing or unreadable.
        """
        files = self._recipe_files()
        loaded: list[Recipe] = []
        for path in files:
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                loaded.append(Recipe.model_validate(data))
            except (OSError, ValueError, ValidationError) as exc:
                logger.warning("Failed to load recipe from %s: %s", path.name, exc)

        self._recipes = sort_recipes(loaded, RecipeSortOption.RECENT)
        logger.info("Loaded %d recipe(s) from %s", len(loaded), self._folder)

        if not files and self._seed_samples:
            for recipe in sample_recipes():
                self.add_recipe(recipe)

        self._snapshot = self._take_snapshot()
        self._notify()
        return self.recipes

    def check_for_changes(self) -> bool:
        """Reload if recipe files changed since the last load or save.

        Returns:
            True if a reload happened.
        """
        current = self._take_snapshot()
        if current == self._snapshot:
            return False
        logger.info("Recipe folder changed on disk; reloading")
        self.load_recipes()
        return True

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_recipe(self, recipe_id: uuid.UUID | str) -> Recipe | None:
        """Look up a loaded recipe by ID.

        Args:
            recipe_id: UUID or its string form (any case).

        Returns:
            Recipe if found, None otherwise.
        """
        wanted = str(recipe_id).lower()
        for recipe in self._recipes:
            if str(recipe.id) == wanted:
                return recipe
        return None

    def find_recipe(self, query: str) -> Recipe | None:
        """Find a recipe by exact or substring name match.

        Tries exact normalized match first, then substring.

        Args:
            query: Search query string.

        Returns:
            Best matching Recipe or None.
        """
        normalized = normalize_recipe_name(query)
        if not normalized:
            return None
        for recipe in self._recipes:
            if normalize_recipe_name(recipe.name) == normalized:
                return recipe
        for recipe in self._recipes:
            if normalized in normalize_recipe_name(recipe.name):
                return recipe
        return None

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def save_recipe(self, recipe: Recipe) -> Recipe:
        """Write a recipe's JSON file and update the in-memory list.

        Args:
            recipe: Recipe to persist as-is.

        Returns:
            The saved recipe.

        Raises:
            RecipeStoreError: If the file cannot be written.
        """
        path = self._folder / recipe.file_name
        try:
            path.write_text(
                json.dumps(recipe.to_document(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as err:
            raise RecipeStoreError(
                f"Failed to save recipe {recipe.name!r}: {err}"
            ) from err

        others = [r for r in self._recipes if r.id != recipe.id]
        self._recipes = sort_recipes([*others, recipe], RecipeSortOption.RECENT)
        self._snapshot = self._take_snapshot()
        self._notify()
        return recipe

    def _stamp(self, recipe: Recipe) -> Recipe:
        """Return a copy marked as modified now by this device."""
        return recipe.model_copy(
            update={
                "last_modified": datetime.now(UTC),
                "last_modified_by": self._device_name,
            }
        )

    def add_recipe(self, recipe: Recipe) -> Recipe:
        """Save a new recipe, stamped with this device and the time.

        Args:
            recipe: Recipe to add.

        Returns:
            The stamped, saved recipe.
        """
        return self.save_recipe(self._stamp(recipe))

    def update_recipe(self, recipe: Recipe) -> Recipe:
        """Save an edited recipe, removing its old file if it was renamed.

        Args:
            recipe: Edited recipe (same ID as the stored one).

        Returns:
            The stamped, saved recipe.
        """
        existing = self.get_recipe(recipe.id)
        if existing is not None and existing.file_name != recipe.file_name:
            self._delete_file(existing, with_image=False)
        return self.save_recipe(self._stamp(recipe))

    def rate_recipe(self, recipe_id: uuid.UUID | str, rating: float) -> Recipe:
        """Set a recipe's star rating.

        Args:
            recipe_id: ID of the recipe to rate.
            rating: Stars from 0 (unrated) to 5.

        Returns:
            The updated recipe.

        Raises:
            RecipeStoreError: If the recipe is not loaded.
            ValidationError: If the rating is outside 0..5.
        """
        existing = self.get_recipe(recipe_id)
        if existing is None:
            raise RecipeStoreError(f"Recipe {recipe_id} not found")
        rated = Recipe.model_validate({**existing.model_dump(), "rating": rating})
        return self.update_recipe(rated)

    def delete_recipe(self, recipe_id: uuid.UUID | str) -> bool:
        """Delete a recipe's file, its image, and the in-memory copy.

        Args:
            recipe_id: ID of the recipe to delete.

        Returns:
            True if a loaded recipe was removed.
        """
        existing = self.get_recipe(recipe_id)
        if existing is None:
            return False
        self._delete_file(existing)
        self._recipes = [r for r in self._recipes if r.id != existing.id]
        self._snapshot = self._take_snapshot()
        self._notify()
        return True

    def _delete_file(self, recipe: Recipe, with_image: bool = True) -> None:
        """Remove a recipe's JSON file and, optionally, its image.

        Args:
            recipe: Recipe whose files are removed.
            with_image: Also remove the image file the recipe references.
        """
        try:
            (self._folder / recipe.file_name).unlink()
        except OSError as exc:
            logger.warning("Failed to delete recipe file %s: %s", recipe.file_name, exc)
            return
        if with_image and recipe.image_file_name:
            (self._folder / recipe.image_file_name).unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_all(self, dest_dir: str | Path) -> Path:
        """Write every loaded recipe to a single export file.

        Args:
            dest_dir: Directory to write the export into.

        Returns:
            Path of the ``recipes_export_<timestamp>.json`` file.

        Raises:
            RecipeStoreError: If the file cannot be written.
        """
        now = datetime.now(UTC)
        path = Path(dest_dir) / f"recipes_export_{int(now.timestamp())}.json"
        payload = {
            "recipes": [r.to_document() for r in self._recipes],
            "exportDate": now.isoformat(),
        }
        try:
            path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as err:
            raise RecipeStoreError(f"Failed to export recipes: {err}") from err
        return path
