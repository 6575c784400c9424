"""Configuration loading and validation for Recipe Box.

Loads settings from .env via python-dotenv. The recipe folder is the
only important setting; everything else has a sensible default.
"""

from __future__ import annotations

import logging
import os
import socket
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from recipe_box.models import GrocerySortOrder

_TRUE_VALUES = ("true", "1", "yes")


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""


def _default_device_name() -> str:
    return socket.gethostname() or "unknown"


@dataclass(frozen=True)
class Config:
    """Typed, validated application configuration."""

    # Folder holding one JSON file per recipe (e.g. a synced cloud folder)
    recipe_folder: str = str(Path("~/Recipes").expanduser())

    # Recorded as lastModifiedBy on every save
    device_name: str = "unknown"

    # Add the sample recipes when the folder has no recipes yet
    seed_sample_recipes: bool = True

    default_grocery_sort: GrocerySortOrder = GrocerySortOrder.CATEGORY

    # Flask
    flask_port: int = 5000
    flask_debug: bool = False

    log_level: str = "WARNING"


def _parse_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as err:
        raise ConfigError(f"{name} must be an integer, got: {raw!r}") from err


def _parse_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


def load_config(env_path: str | Path | None = None) -> Config:
    """Load and validate configuration from environment / .env file.

    Args:
        env_path: Optional path to .env file. If None, searches from cwd upward.

    Returns:
        Validated Config instance.

    Raises:
        ConfigError: If a setting has an invalid value.
    """
    load_dotenv(dotenv_path=env_path)

    folder_raw = os.getenv("RECIPE_FOLDER", "~/Recipes").strip()
    if not folder_raw:
        raise ConfigError("RECIPE_FOLDER must not be empty.")

    sort_raw = os.getenv("DEFAULT_GROCERY_SORT", "category").strip().lower()
    try:
        default_sort = GrocerySortOrder(sort_raw)
    except ValueError as err:
        valid = ", ".join(o.value for o in GrocerySortOrder)
        raise ConfigError(
            f"DEFAULT_GROCERY_SORT must be one of {valid}, got: {sort_raw!r}"
        ) from err

    log_level = os.getenv("LOG_LEVEL", "WARNING").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL is not a logging level: {log_level!r}")

    return Config(
        recipe_folder=str(Path(folder_raw).expanduser()),
        device_name=os.getenv("DEVICE_NAME", "") or _default_device_name(),
        seed_sample_recipes=_parse_bool("SEED_SAMPLE_RECIPES", "true"),
        default_grocery_sort=default_sort,
        flask_port=_parse_int("FLASK_PORT", "5000"),
        flask_debug=_parse_bool("FLASK_DEBUG", "false"),
        log_level=log_level,
    )
