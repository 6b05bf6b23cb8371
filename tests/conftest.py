"""Pytest configuration and fixtures."""

from household_recipes.recipes import SharedRecipe


def create_test_recipe(
    recipe_id: str,
    title: str,
    ingredients: str = "2 eggs\n1/2 cup milk\nSalt to taste",
    steps: str = "Whisk everything together.",
    servings: int = 2,
    notes: str | None = None,
    created_by: str | None = None,
    category: str | None = None,
) -> SharedRecipe:
    """Helper to create a SharedRecipe with sensible defaults."""
    return SharedRecipe(
        id=recipe_id,
        title=title,
        ingredients=ingredients,
        steps=steps,
        servings=servings,
        notes=notes,
        created_by=created_by,
        category=category,
    )
