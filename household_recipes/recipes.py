import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any

from household_recipes import config
from household_recipes.serving_scaler import scale_ingredients

logger = logging.getLogger(__name__)

CATEGORIES = (
    "breakfast",
    "lunch",
    "dinner",
    "snacks",
    "desserts",
    "vegetarian",
    "quick-meals",
)


class RecipeLoadError(Exception):
    """Raised when recipes cannot be loaded from file."""
    pass


class RecipeSaveError(Exception):
    """Raised when recipes cannot be saved to file."""
    pass


@dataclass
class SharedRecipe:
    id: str
    title: str
    ingredients: str  # one ingredient per line, free text
    steps: str
    servings: int = config.DEFAULT_SERVINGS
    notes: str | None = None
    created_by: str | None = None
    category: str | None = None

    @property
    def search_blob(self) -> str:
        return f"{self.title}\n{self.ingredients}".lower()

    def scaled_ingredients(self, servings: int) -> str:
        """Ingredient block rewritten for *servings* instead of the recipe's own count."""
        return scale_ingredients(self.ingredients, self.servings, servings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SharedRecipe":
        """Create a SharedRecipe from a stored dictionary.

        Recipes saved before serving counts existed have no "servings" key;
        they (and any non-positive count) get DEFAULT_SERVINGS.
        """
        required = ["id", "title", "ingredients", "steps"]
        missing = [f for f in required if f not in data]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        category = data.get("category")
        if category is not None and category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")

        servings = data.get("servings")
        if not isinstance(servings, int) or isinstance(servings, bool) or servings <= 0:
            servings = config.DEFAULT_SERVINGS

        return cls(
            id=data["id"],
            title=data["title"],
            ingredients=data["ingredients"],
            steps=data["steps"],
            servings=servings,
            notes=data.get("notes"),
            created_by=data.get("created_by"),
            category=category,
        )


def load_recipes(file_path: Path | str) -> list[SharedRecipe]:
    file_path = Path(file_path)

    if not file_path.exists():
        raise RecipeLoadError(f"Recipe file not found: {file_path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise RecipeLoadError(f"Invalid JSON in recipe file: {e}")

    if "recipes" not in data:
        raise RecipeLoadError("Recipe file must contain a 'recipes' key")

    try:
        recipes = [SharedRecipe.from_dict(r) for r in data["recipes"]]
    except ValueError as e:
        raise RecipeLoadError(f"Invalid recipe in {file_path}: {e}")

    logger.debug("Loaded recipes", extra={"count": len(recipes), "path": str(file_path)})
    return recipes


def save_recipes(file_path: Path | str, recipes: list[SharedRecipe]) -> None:
    """Save recipes to JSON file with atomic write.

    Raises:
        RecipeSaveError: If the file cannot be written
    """
    file_path = Path(file_path)
    data = {"recipes": [asdict(recipe) for recipe in recipes]}

    try:
        # Temp file in the same directory so the rename stays on one filesystem
        temp_fd, temp_path = tempfile.mkstemp(
            dir=file_path.parent,
            prefix=".recipes_tmp_",
            suffix=".json"
        )

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, file_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    except OSError as e:
        raise RecipeSaveError(f"Failed to save recipes to {file_path}: {e}")


def find_recipe(recipes: list[SharedRecipe], recipe_id: str) -> SharedRecipe | None:
    for recipe in recipes:
        if recipe.id == recipe_id:
            return recipe
    return None


def generate_recipe_id(title: str, existing_ids: set[str]) -> str:
    """Generate unique slugified ID from recipe title."""
    slug = re.sub(r'[^\w\s-]', '', title.lower())
    slug = re.sub(r'[-\s]+', '-', slug).strip('-') or "recipe"

    if slug not in existing_ids:
        return slug

    counter = 2
    while f"{slug}-{counter}" in existing_ids:
        counter += 1
    return f"{slug}-{counter}"


def update_recipe(recipes: list[SharedRecipe], updated_recipe: SharedRecipe) -> list[SharedRecipe]:
    """Replace recipe in list by ID, return new list.

    Raises:
        ValueError: If recipe with given ID is not found
    """
    for i, recipe in enumerate(recipes):
        if recipe.id == updated_recipe.id:
            new_recipes = recipes.copy()
            new_recipes[i] = updated_recipe
            return new_recipes

    raise ValueError(f"Recipe with ID '{updated_recipe.id}' not found")
