"""Flask web application for Recipe Box.

Exposes a small JSON API over the recipe folder: browse, edit, rate and
share recipes, and build a shopping list from a selection of recipes.
The shopping list and its checked / already-have flags live in the
Flask session, so they last for one browsing session only.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask, Response, current_app, jsonify, request, session
from pydantic import ValidationError

from recipe_box.consolidator import (
    aggregate_recipes,
    find_item,
    group_grocery_items,
    items_to_buy,
    merge_key,
    remaining_items,
)
from recipe_box.ingredient_parser import parse_ingredient
from recipe_box.models import (
    GroceryItem,
    GrocerySortOrder,
    Ingredient,
    Recipe,
    RecipeSortOption,
)
from recipe_box.recipe_store import (
    RecipeStore,
    RecipeStoreError,
    filter_recipes,
    sort_recipes,
)
from recipe_box.sharing import recipe_print_html, recipe_share_text, shopping_list_text

logger = logging.getLogger(__name__)

_SESSION_KEY = "shopping_list_items"
_TOGGLE_FIELDS = ("checked", "already_have")

JsonResult = tuple[Response, int]


def create_app(
    recipe_folder: str | Path,
    device_name: str = "web",
    seed_samples: bool = True,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        recipe_folder: Folder holding the recipe JSON files; created if missing.
        device_name: Recorded as the editing device on saves.
        seed_samples: Add sample recipes when the folder is empty.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)
    app.config["RECIPE_FOLDER"] = str(recipe_folder)
    app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY", os.urandom(32).hex())

    Path(recipe_folder).mkdir(parents=True, exist_ok=True)
    store = RecipeStore(
        recipe_folder,
        device_name=device_name,
        seed_samples=seed_samples,
    )
    store.load_recipes()
    app.extensions["recipe_store"] = store

    _register_hooks(app)
    _register_error_handlers(app)
    _register_recipe_routes(app)
    _register_shopping_list_routes(app)

    return app


def _get_store() -> RecipeStore:
    """Return the recipe store attached to the running app."""
    store: RecipeStore = current_app.extensions["recipe_store"]
    return store


def _error(message: str, code: int) -> JsonResult:
    """Build a JSON error response with the given status code."""
    return jsonify({"success": False, "error": message}), code


def _register_hooks(app: Flask) -> None:
    """Pick up recipe files changed by other devices before each request.

    Args:
        app: Flask application instance.
    """

    @app.before_request
    def refresh_recipes() -> None:
        try:
            _get_store().check_for_changes()
        except RecipeStoreError:
            logger.exception("Could not refresh recipe folder")


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error responses.

    Args:
        app: Flask application instance.
    """

    @app.errorhandler(404)
    def not_found(error: Exception) -> JsonResult:
        return _error("Not found", 404)

    @app.errorhandler(RecipeStoreError)
    def storage_error(error: RecipeStoreError) -> JsonResult:
        logger.error("Storage error: %s", error)
        return _error(str(error), 500)


# ---------------------------------------------------------------------------
# Recipes
# ---------------------------------------------------------------------------


def _recipe_json(recipe: Recipe) -> dict[str, object]:
    """Serialize a recipe for the API, adding its total time."""
    data = recipe.to_document()
    data["totalTime"] = recipe.total_time
    return data


def _validate_recipe_payload(
    payload: dict[str, object], recipe_id: str | None = None
) -> Recipe:
    """Build a Recipe from a request body.

    Client-supplied ``id`` and ``lastModified`` are ignored; the store sets
    them on save.

    Args:
        payload: Decoded JSON body.
        recipe_id: ID to keep when editing an existing recipe.

    Returns:
        Validated Recipe.

    Raises:
        ValidationError: If the body is not a valid recipe.
    """
    data = {
        k: v
        for k, v in payload.items()
        if k not in ("id", "lastModified", "last_modified")
    }
    if recipe_id is not None:
        data["id"] = recipe_id
    return Recipe.model_validate(data)


def _register_recipe_routes(app: Flask) -> None:
    """Register recipe API routes.

    Args:
        app: Flask application instance.
    """

    @app.route("/api/recipes")
    def recipes() -> JsonResult:
        """List recipes, optionally filtered and sorted.

        Query parameters ``search`` and ``sort`` (name, rating, recent,
        favorites) are both optional.

        Returns:
            JSON list of recipe documents.
        """
        sort_raw = request.args.get("sort", RecipeSortOption.RECENT.value)
        try:
            option = RecipeSortOption(sort_raw)
        except ValueError:
            return _error(f"Invalid sort: {sort_raw}", 400)
        found = filter_recipes(_get_store().recipes, request.args.get("search", ""))
        return jsonify([_recipe_json(r) for r in sort_recipes(found, option)]), 200

    @app.route("/api/recipes", methods=["POST"])
    def recipe_add() -> JsonResult:
        """Create a recipe from a JSON body.

        Returns:
            The saved recipe with status 201, or a validation error.
        """
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return _error("Invalid JSON", 400)
        try:
            recipe = _validate_recipe_payload(payload)
        except ValidationError as exc:
            return _error(str(exc), 400)
        saved = _get_store().add_recipe(recipe)
        return jsonify(_recipe_json(saved)), 201

    @app.route("/api/recipes/<recipe_id>")
    def recipe_detail(recipe_id: str) -> JsonResult:
        recipe = _get_store().get_recipe(recipe_id)
        if recipe is None:
            return _error("Recipe not found", 404)
        return jsonify(_recipe_json(recipe)), 200

    @app.route("/api/recipes/<recipe_id>", methods=["PUT"])
    def recipe_update(recipe_id: str) -> JsonResult:
        """Replace a recipe's contents.

        Args:
            recipe_id: ID of the recipe to edit.

        Returns:
            The updated recipe, or an error.
        """
        store = _get_store()
        existing = store.get_recipe(recipe_id)
        if existing is None:
            return _error("Recipe not found", 404)
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return _error("Invalid JSON", 400)
        try:
            recipe = _validate_recipe_payload(payload, str(existing.id))
        except ValidationError as exc:
            return _error(str(exc), 400)
        return jsonify(_recipe_json(store.update_recipe(recipe))), 200

    @app.route("/api/recipes/<recipe_id>", methods=["DELETE"])
    def recipe_delete(recipe_id: str) -> JsonResult:
        if not _get_store().delete_recipe(recipe_id):
            return _error("Recipe not found", 404)
        return jsonify({"success": True}), 200

    @app.route("/api/recipes/<recipe_id>/rating", methods=["POST"])
    def recipe_rate(recipe_id: str) -> JsonResult:
        """Set a recipe's star rating from ``{"rating": <0-5>}``.

        Args:
            recipe_id: ID of the recipe to rate.

        Returns:
            The updated recipe, or an error.
        """
        store = _get_store()
        if store.get_recipe(recipe_id) is None:
            return _error("Recipe not found", 404)
        payload = request.get_json(silent=True)
        rating = payload.get("rating") if isinstance(payload, dict) else None
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            return _error("Missing or invalid rating", 400)
        try:
            recipe = store.rate_recipe(recipe_id, float(rating))
        except ValidationError:
            return _error("Rating must be between 0 and 5", 400)
        return jsonify(_recipe_json(recipe)), 200

    @app.route("/api/recipes/<recipe_id>/share.txt")
    def recipe_share(recipe_id: str) -> Response | JsonResult:
        recipe = _get_store().get_recipe(recipe_id)
        if recipe is None:
            return _error("Recipe not found", 404)
        return Response(recipe_share_text(recipe), mimetype="text/plain")

    @app.route("/api/recipes/<recipe_id>/print")
    def recipe_print(recipe_id: str) -> Response | JsonResult:
        recipe = _get_store().get_recipe(recipe_id)
        if recipe is None:
            return _error("Recipe not found", 404)
        return Response(recipe_print_html(recipe), mimetype="text/html")


# ---------------------------------------------------------------------------
# Shopping list
# ---------------------------------------------------------------------------


def _session_items() -> list[GroceryItem]:
    """Load the shopping list stored in the session, or an empty list."""
    raw = session.get(_SESSION_KEY)
    if not isinstance(raw, list):
        return []
    return [GroceryItem.model_validate(item) for item in raw]


def _save_session_items(items: list[GroceryItem]) -> None:
    """Store the shopping list in the session."""
    session[_SESSION_KEY] = [item.model_dump(mode="json") for item in items]


def _parse_sort(raw: str | None) -> GrocerySortOrder | None:
    """Parse a sort query value, defaulting to category; None if invalid."""
    try:
        return GrocerySortOrder(raw or GrocerySortOrder.CATEGORY.value)
    except ValueError:
        return None


def _item_json(item: GroceryItem) -> dict[str, object]:
    """Serialize a list item together with its key."""
    data = item.model_dump(mode="json")
    data["key"] = merge_key(item.ingredient)
    return data


def _shopping_list_json(
    items: list[GroceryItem], order: GrocerySortOrder
) -> dict[str, object]:
    """Build the grouped shopping list response body.

    Args:
        items: Shopping list items.
        order: Grouping and ordering to use.

    Returns:
        Dict with the sort, groups and to-buy / remaining counts.
    """
    return {
        "sort": order.value,
        "groups": [
            {"heading": heading, "items": [_item_json(i) for i in group]}
            for heading, group in group_grocery_items(items, order)
        ],
        "to_buy": len(items_to_buy(items)),
        "remaining": len(remaining_items(items)),
    }


def _register_shopping_list_routes(app: Flask) -> None:
    """Register shopping list and ingredient parsing routes.

    Args:
        app: Flask application instance.
    """

    @app.route("/api/shopping-list", methods=["POST"])
    def shopping_list_generate() -> JsonResult:
        """Generate a shopping list from ``{"recipe_ids": [...], "sort": ...}``.

        Recipes are consolidated in the order given; unknown IDs are
        rejected. The result replaces any list already in the session.

        Returns:
            Grouped shopping list JSON.
        """
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return _error("Invalid JSON", 400)
        recipe_ids = payload.get("recipe_ids")
        if not isinstance(recipe_ids, list) or not recipe_ids:
            return _error("recipe_ids must be a non-empty list", 400)
        order = _parse_sort(payload.get("sort"))
        if order is None:
            return _error(f"Invalid sort: {payload.get('sort')}", 400)

        store = _get_store()
        selected: list[Recipe] = []
        for recipe_id in recipe_ids:
            recipe = store.get_recipe(str(recipe_id))
            if recipe is None:
                return _error(f"Recipe not found: {recipe_id}", 404)
            selected.append(recipe)

        items = aggregate_recipes(selected)
        _save_session_items(items)
        logger.info(
            "Generated shopping list of %d item(s) from %d recipe(s)",
            len(items),
            len(selected),
        )
        return jsonify(_shopping_list_json(items, order)), 200

    @app.route("/api/shopping-list")
    def shopping_list() -> JsonResult:
        order = _parse_sort(request.args.get("sort"))
        if order is None:
            return _error(f"Invalid sort: {request.args.get('sort')}", 400)
        return jsonify(_shopping_list_json(_session_items(), order)), 200

    @app.route("/api/shopping-list/toggle", methods=["POST"])
    def shopping_list_toggle() -> JsonResult:
        """Flip ``checked`` or ``already_have`` on one item.

        Expects JSON body with ``key`` (the item's merge key) and
        ``field``.

        Returns:
            JSON with the item's new state, or an error.
        """
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return _error("Invalid JSON", 400)
        key = payload.get("key")
        field = payload.get("field", "checked")
        if not isinstance(key, str) or field not in _TOGGLE_FIELDS:
            return _error("Missing key or invalid field", 400)

        items = _session_items()
        item = find_item(items, key)
        if item is None:
            return _error("Item not found", 404)
        setattr(item, field, not getattr(item, field))
        _save_session_items(items)
        return jsonify({"success": True, "item": _item_json(item)}), 200

    @app.route("/api/shopping-list/item", methods=["PUT"])
    def shopping_list_edit() -> JsonResult:
        """Correct the quantity and/or unit of one item.

        Expects JSON body with ``key`` and any of ``quantity`` and ``unit``.
        The item's key changes when its unit does; an edit that would give
        it the key of another item on the list is refused.

        Returns:
            JSON with the edited item, or an error.
        """
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict) or not isinstance(payload.get("key"), str):
            return _error("Missing key", 400)
        changes = {f: payload[f] for f in ("quantity", "unit") if f in payload}

        items = _session_items()
        item = find_item(items, payload["key"])
        if item is None:
            return _error("Item not found", 404)
        try:
            edited = Ingredient.model_validate(
                {**item.ingredient.model_dump(), **changes}
            )
        except ValidationError:
            return _error("Invalid quantity or unit", 400)
        other = find_item(items, merge_key(edited))
        if other is not None and other is not item:
            return _error("Another item already has that name and unit", 409)
        item.ingredient = edited
        _save_session_items(items)
        return jsonify({"success": True, "item": _item_json(item)}), 200

    @app.route("/api/shopping-list/share.txt")
    def shopping_list_share() -> Response | JsonResult:
        order = _parse_sort(request.args.get("sort"))
        if order is None:
            return _error(f"Invalid sort: {request.args.get('sort')}", 400)
        text = shopping_list_text(_session_items(), order)
        return Response(text, mimetype="text/plain")

    @app.route("/api/parse", methods=["POST"])
    def parse() -> JsonResult:
        payload = request.get_json(silent=True)
        line = payload.get("line") if isinstance(payload, dict) else None
        if not isinstance(line, str):
            return _error("Missing line", 400)
        ingredient = parse_ingredient(line)
        return jsonify(ingredient.model_dump(mode="json")), 200
