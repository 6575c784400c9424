"""Command-line interface for Recipe Box.

Provides subcommands for browsing, adding, rating, sharing and exporting
recipes, generating a shopping list from a selection of recipes, and
running the web app. Wires together RecipeStore, the consolidator and the
sharing renderers into a terminal-based recipe manager.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from recipe_box.config import Config, ConfigError, load_config
from recipe_box.consolidator import aggregate_recipes
from recipe_box.ingredient_parser import parse_ingredient
from recipe_box.models import (
    GrocerySortOrder,
    Recipe,
    RecipeCategory,
    RecipeSortOption,
)
from recipe_box.recipe_store import (
    RecipeStore,
    RecipeStoreError,
    filter_recipes,
    sort_recipes,
)
from recipe_box.sharing import (
    format_quantity,
    recipe_print_html,
    recipe_share_text,
    shopping_list_text,
    star_rating,
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Config + dependency bootstrap
# ------------------------------------------------------------------


def _load_config_safe() -> Config:
    """Load application config, falling back to defaults on failure.

    Returns:
        Config instance.
    """
    try:
        return load_config()
    except ConfigError as exc:
        print(f"Warning: {exc} Using defaults.", file=sys.stderr)
        return Config()


def _open_store(cfg: Config, folder: str | None) -> RecipeStore:
    """Create the recipe folder if needed and load its recipes.

    Args:
        cfg: Application configuration.
        folder: Folder given on the command line, overriding the config.

    Returns:
        Loaded RecipeStore.

    Raises:
        RecipeStoreError: If the folder cannot be created or read.
    """
    path = Path(folder).expanduser() if folder else Path(cfg.recipe_folder)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise RecipeStoreError(f"Cannot create recipe folder {path}: {err}") from err
    store = RecipeStore(
        path,
        device_name=cfg.device_name,
        seed_samples=cfg.seed_sample_recipes,
    )
    store.load_recipes()
    return store


# ------------------------------------------------------------------
# Output formatting
# ------------------------------------------------------------------


def _format_recipes(recipes: list[Recipe]) -> str:
    """Format recipe list as a table with name, category and rating.

    Args:
        recipes: Recipes to list.

    Returns:
        Formatted table string.
    """
    if not recipes:
        return "No saved recipes."

    header = f"  {'Name':<30s} {'Category':<10s} {'Rating':<6s} {'Time':>6s}"
    sep = "  " + "-" * 56
    lines: list[str] = [header, sep]
    for recipe in recipes:
        rating = star_rating(recipe.rating) if recipe.rating > 0 else "-"
        time = f"{recipe.total_time}m"
        lines.append(
            f"  {recipe.name:<30s} {recipe.category.value:<10s}"
            f" {rating:<6s} {time:>6s}"
        )
    return "\n".join(lines)


def _format_parsed(line: str) -> str:
    ingredient = parse_ingredient(line)
    return "\n".join(
        [
            f"Quantity: {format_quantity(ingredient.quantity)}",
            f"Unit:     {ingredient.unit or '-'}",
            f"Name:     {ingredient.name}",
            f"Category: {ingredient.category.value}",
        ]
    )


def _split_names(raw: str) -> list[str]:
    return [n.strip() for n in raw.split(",") if n.strip()]


# ------------------------------------------------------------------
# Subcommand handlers
# ------------------------------------------------------------------


def _handle_recipes(args: argparse.Namespace, store: RecipeStore) -> int:
    """Handle the ``recipes`` subcommand.

    Args:
        args: Parsed command-line arguments.
        store: Loaded recipe store.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    found = filter_recipes(store.recipes, args.search or "")
    print(_format_recipes(sort_recipes(found, RecipeSortOption(args.sort))))
    return 0


def _handle_show(args: argparse.Namespace, store: RecipeStore) -> int:
    recipe = store.find_recipe(args.recipe_name)
    if recipe is None:
        print(f"Recipe '{args.recipe_name}' not found.", file=sys.stderr)
        return 1
    print(recipe_share_text(recipe))
    return 0


def _handle_forget(args: argparse.Namespace, store: RecipeStore) -> int:
    """Delete a recipe by name.

    Args:
        args: Parsed arguments with ``recipe_name``.
        store: Loaded recipe store.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    recipe = store.find_recipe(args.recipe_name)
    if recipe is None:
        print(f"Recipe '{args.recipe_name}' not found.", file=sys.stderr)
        return 1
    store.delete_recipe(recipe.id)
    print(f"Deleted recipe '{recipe.name}'.")
    return 0


def _handle_rate(args: argparse.Namespace, store: RecipeStore) -> int:
    """Set the star rating of a recipe.

    Args:
        args: Parsed arguments with ``recipe_name`` and ``stars``.
        store: Loaded recipe store.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    recipe = store.find_recipe(args.recipe_name)
    if recipe is None:
        print(f"Recipe '{args.recipe_name}' not found.", file=sys.stderr)
        return 1
    try:
        rated = store.rate_recipe(recipe.id, args.stars)
    except ValidationError:
        print("Error: Rating must be between 0 and 5.", file=sys.stderr)
        return 1
    print(f"Rated '{rated.name}' {star_rating(rated.rating)}")
    return 0


def _handle_add(args: argparse.Namespace, store: RecipeStore) -> int:
    """Handle the ``add`` subcommand.

    Args:
        args: Parsed command-line arguments.
        store: Loaded recipe store.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    if not args.ingredient:
        print("Error: At least one --ingredient is required.", file=sys.stderr)
        return 1
    try:
        recipe = Recipe(
            name=args.name.strip(),
            ingredients=[i.strip() for i in args.ingredient if i.strip()],
            instructions=args.instructions,
            prep_time=args.prep,
            cook_time=args.cook,
            servings=args.servings,
            category=RecipeCategory(args.category),
            notes=args.notes,
        )
    except ValidationError as exc:
        print(f"Error: Invalid recipe: {exc}", file=sys.stderr)
        return 1
    saved = store.add_recipe(recipe)
    print(f"Saved recipe '{saved.name}' ({saved.file_name}).")
    return 0


def _handle_shop(args: argparse.Namespace, store: RecipeStore) -> int:
    """Handle the ``shop`` subcommand.

    Args:
        args: Parsed command-line arguments.
        store: Loaded recipe store.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    names = _split_names(args.recipes)
    if not names:
        print("Error: No recipes specified.", file=sys.stderr)
        return 1

    selected: list[Recipe] = []
    for name in names:
        recipe = store.find_recipe(name)
        if recipe is None:
            print(f"Recipe '{name}' not found.", file=sys.stderr)
            return 1
        selected.append(recipe)

    items = aggregate_recipes(selected)
    print(shopping_list_text(items, GrocerySortOrder(args.sort)))
    return 0


def _handle_parse(args: argparse.Namespace) -> int:
    print(_format_parsed(args.line))
    return 0


def _handle_share(args: argparse.Namespace, store: RecipeStore) -> int:
    recipe = store.find_recipe(args.recipe_name)
    if recipe is None:
        print(f"Recipe '{args.recipe_name}' not found.", file=sys.stderr)
        return 1
    if args.format == "html":
        print(recipe_print_html(recipe))
    else:
        print(recipe_share_text(recipe))
    return 0


def _handle_export(args: argparse.Namespace, store: RecipeStore) -> int:
    dest = Path(args.dest).expanduser() if args.dest else Path.cwd()
    path = store.export_all(dest)
    print(f"Exported {len(store.recipes)} recipe(s) to {path}")
    return 0


def _handle_serve(args: argparse.Namespace, cfg: Config) -> int:
    """Handle the ``serve`` subcommand.

    Args:
        args: Parsed command-line arguments.
        cfg: Application configuration.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    from recipe_box.app import create_app

    folder = args.folder or cfg.recipe_folder
    try:
        app = create_app(
            Path(folder).expanduser(),
            device_name=cfg.device_name,
            seed_samples=cfg.seed_sample_recipes,
        )
    except RecipeStoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    app.run(port=args.port or cfg.flask_port, debug=cfg.flask_debug)
    return 0


# ------------------------------------------------------------------
# Argument parser
# ------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all subcommands.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="recipe-box",
        description="Recipe Box: recipes in a folder and shopping lists.",
    )
    parser.add_argument(
        "--folder",
        default=None,
        help="Recipe folder (default from RECIPE_FOLDER).",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_recipes_parser(subparsers)
    _add_name_parser(subparsers, "show", "Show a recipe.")
    _add_name_parser(subparsers, "forget", "Delete a recipe.")
    _add_rate_parser(subparsers)
    _add_add_parser(subparsers)
    _add_shop_parser(subparsers)
    _add_parse_parser(subparsers)
    _add_share_parser(subparsers)
    _add_export_parser(subparsers)
    _add_serve_parser(subparsers)

    return parser


def _add_recipes_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    """Add the ``recipes`` subcommand parser.

    Args:
        subparsers: Subparsers action from the main parser.
    """
    recipes_parser = subparsers.add_parser("recipes", help="List saved recipes.")
    recipes_parser.add_argument(
        "--search",
        default=None,
        help="Only recipes whose name or category contains this text.",
    )
    recipes_parser.add_argument(
        "--sort",
        default=RecipeSortOption.RECENT.value,
        choices=[o.value for o in RecipeSortOption],
        help="Sort order (default: recent).",
    )


def _add_name_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    command: str,
    help_text: str,
) -> None:
    """Add a subcommand that takes only a recipe name.

    Args:
        subparsers: Subparsers action from the main parser.
        command: Subcommand name.
        help_text: Help shown for the subcommand.
    """
    name_parser = subparsers.add_parser(command, help=help_text)
    name_parser.add_argument("recipe_name", help="Recipe name.")


def _add_rate_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    rate_parser = subparsers.add_parser("rate", help="Rate a recipe 0-5 stars.")
    rate_parser.add_argument("recipe_name", help="Recipe name.")
    rate_parser.add_argument("stars", type=float, help="Stars (0 clears).")


def _add_add_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    """Add the ``add`` subcommand parser.

    Args:
        subparsers: Subparsers action from the main parser.
    """
    add_parser = subparsers.add_parser("add", help="Add a new recipe.")
    add_parser.add_argument("name", help="Recipe name.")
    add_parser.add_argument(
        "--ingredient",
        action="append",
        default=[],
        help="Ingredient line, e.g. '2 cups flour'. Repeat for each one.",
    )
    add_parser.add_argument("--instructions", default="", help="Instructions.")
    add_parser.add_argument("--prep", type=int, default=0, help="Prep minutes.")
    add_parser.add_argument("--cook", type=int, default=0, help="Cook minutes.")
    add_parser.add_argument("--servings", type=int, default=4, help="Servings.")
    add_parser.add_argument(
        "--category",
        default=RecipeCategory.DINNER.value,
        choices=[c.value for c in RecipeCategory],
        help="Meal category (default: Dinner).",
    )
    add_parser.add_argument("--notes", default="", help="Free-form notes.")


def _add_shop_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    """Add the ``shop`` subcommand parser.

    Args:
        subparsers: Subparsers action from the main parser.
    """
    shop_parser = subparsers.add_parser(
        "shop",
        help="Generate a shopping list from recipes.",
    )
    shop_parser.add_argument(
        "recipes",
        help="Comma-separated list of recipe names.",
    )
    shop_parser.add_argument(
        "--sort",
        default=None,
        choices=[o.value for o in GrocerySortOrder],
        help="Group by category, name or recipe (default from config).",
    )


def _add_parse_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    parse_parser = subparsers.add_parser(
        "parse",
        help="Show how an ingredient line is parsed.",
    )
    parse_parser.add_argument("line", help="Ingredient line, e.g. '2 cups flour'.")


def _add_share_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    share_parser = subparsers.add_parser(
        "share",
        help="Print a recipe as shareable text or printable HTML.",
    )
    share_parser.add_argument("recipe_name", help="Recipe name.")
    share_parser.add_argument(
        "--format",
        default="text",
        choices=["text", "html"],
        help="Output format (default: text).",
    )


def _add_export_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    export_parser = subparsers.add_parser(
        "export",
        help="Export all recipes to a single JSON file.",
    )
    export_parser.add_argument(
        "--dest",
        default=None,
        help="Directory for the export file (default: current directory).",
    )


def _add_serve_parser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    serve_parser = subparsers.add_parser("serve", help="Run the web app.")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default from FLASK_PORT).",
    )


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Run the CLI application.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    cfg = _load_config_safe()
    logging.basicConfig(level=cfg.log_level, format="%(levelname)s: %(message)s")

    exit_code = _dispatch(args, cfg)
    sys.exit(exit_code)


def _dispatch(args: argparse.Namespace, cfg: Config) -> int:
    """Dispatch a parsed command to the appropriate handler.

    Args:
        args: Parsed command-line arguments.
        cfg: Application configuration.

    Returns:
        Exit code from the handler.
    """
    command: str = args.command
    if command == "parse":
        return _handle_parse(args)
    if command == "serve":
        return _handle_serve(args, cfg)
    if command == "shop" and args.sort is None:
        args.sort = cfg.default_grocery_sort.value

    try:
        store = _open_store(cfg, args.folder)
        if command == "recipes":
            return _handle_recipes(args, store)
        if command == "show":
            return _handle_show(args, store)
        if command == "forget":
            return _handle_forget(args, store)
        if command == "rate":
            return _handle_rate(args, store)
        if command == "add":
            return _handle_add(args, store)
        if command == "shop":
            return _handle_shop(args, store)
        if command == "share":
            return _handle_share(args, store)
        if command == "export":
            return _handle_export(args, store)
    except RecipeStoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 1  # pragma: no cover
