import logging
from pathlib import Path

from flask import Flask, jsonify, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect

from household_recipes import config
from household_recipes.dietary_filters import DietaryFilter
from household_recipes.logging_config import configure_logging
from household_recipes.recipes import (
    RecipeLoadError,
    RecipeSaveError,
    SharedRecipe,
    find_recipe,
    generate_recipe_id,
    load_recipes,
    save_recipes,
    update_recipe,
)
from household_recipes.serving_scaler import scale_ingredients

configure_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["SECRET_KEY"] = config.SECRET_KEY
# Keep fraction symbols readable in responses
app.json.ensure_ascii = False
csrf = CSRFProtect(app)
limiter = Limiter(
    get_remote_address,
    app=app,
    default_limits=[],          # no global limit; apply per-route only
    storage_uri="memory://",
)

# Fields a household member fills in on the recipe form
_FORM_TEXT_FIELDS = ["title", "ingredients", "steps"]


def _error(error: str, message: str, status: int):
    return jsonify({"error": error, "message": message}), status


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_servings_count(value) -> bool:
    return _is_number(value) and 0 < value <= config.MAX_SERVINGS


def _parse_servings(raw: str) -> int | None:
    """Parse a ?servings= query value; None if it isn't an acceptable count."""
    try:
        servings = int(raw)
    except (TypeError, ValueError):
        return None
    if not _is_servings_count(servings):
        return None
    return servings


def _dietary_filter_from_request() -> DietaryFilter | None:
    raw = request.args.get("blocked", "")
    if not raw.strip():
        return None
    return DietaryFilter.from_query(raw)


def _validate_recipe_form(data) -> str | None:
    """Return an error message for an invalid recipe form body, else None."""
    if not isinstance(data, dict):
        return "Request body must be a JSON object"

    missing = [
        f for f in _FORM_TEXT_FIELDS
        if not isinstance(data.get(f), str) or not data[f].strip()
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    if "servings" in data:
        servings = data["servings"]
        if not isinstance(servings, int) or not _is_servings_count(servings):
            return f"servings must be a whole number between 1 and {config.MAX_SERVINGS}"
    return None


def _serialize_recipe(recipe: SharedRecipe) -> dict:
    return {
        "id": recipe.id,
        "title": recipe.title,
        "servings": recipe.servings,
        "ingredients": recipe.ingredients,
        "steps": recipe.steps,
        "notes": recipe.notes,
        "category": recipe.category,
        "created_by": recipe.created_by,
    }


@app.errorhandler(RecipeLoadError)
def handle_recipe_load_error(e: RecipeLoadError):
    logger.error("Failed to load recipes", extra={"error": str(e)})
    return _error("Recipe store unavailable", str(e), 500)


@app.errorhandler(RecipeSaveError)
def handle_recipe_save_error(e: RecipeSaveError):
    logger.error("Failed to save recipes", extra={"error": str(e)})
    return _error("Save error", f"Failed to save recipe: {e}", 500)


@app.route("/recipes", methods=["GET"])
def list_recipes():
    """List shared recipes, optionally filtered by a search term.

    With ?blocked=peanut,milk every recipe also reports which of those
    ingredients it contains.
    """
    all_recipes = load_recipes(Path(config.RECIPES_FILE))

    search = request.args.get("search", "").strip().lower()
    if search:
        all_recipes = [r for r in all_recipes if search in r.search_blob]

    dietary_filter = _dietary_filter_from_request()

    serialized = []
    for r in all_recipes:
        item = {
            "id": r.id,
            "title": r.title,
            "servings": r.servings,
            "category": r.category,
        }
        if dietary_filter is not None:
            item["blocked_ingredients"] = dietary_filter.blocked_ingredients_in(r.ingredients)
        serialized.append(item)

    return jsonify({"recipes": serialized})


@app.route("/recipes", methods=["POST"])
def create_recipe():
    """Create a new shared recipe from the recipe form."""
    logger.info("Creating new recipe")
    data = request.get_json(silent=True)

    message = _validate_recipe_form(data)
    if message:
        return _error("Validation error", message, 400)

    recipes_file = Path(config.RECIPES_FILE)
    all_recipes = load_recipes(recipes_file)
    recipe_id = generate_recipe_id(data["title"], {r.id for r in all_recipes})

    try:
        recipe = SharedRecipe.from_dict({**data, "id": recipe_id})
    except ValueError as e:
        return _error("Validation error", str(e), 400)

    save_recipes(recipes_file, all_recipes + [recipe])
    logger.info("Created recipe", extra={"recipe_id": recipe.id})
    return jsonify(_serialize_recipe(recipe)), 201


@app.route("/recipes/<recipe_id>", methods=["GET"])
def get_recipe(recipe_id: str):
    """Fetch a single recipe, rescaled when ?servings= is given."""
    logger.debug("Fetching single recipe", extra={"recipe_id": recipe_id})
    recipe = find_recipe(load_recipes(Path(config.RECIPES_FILE)), recipe_id)

    if recipe is None:
        return _error("Recipe not found", f"No recipe found with ID '{recipe_id}'", 404)

    response = _serialize_recipe(recipe)
    response["original_servings"] = recipe.servings

    raw_servings = request.args.get("servings")
    if raw_servings is not None:
        servings = _parse_servings(raw_servings)
        if servings is None:
            return _error(
                "Invalid servings",
                f"servings must be a whole number between 1 and {config.MAX_SERVINGS}",
                400,
            )
        response["servings"] = servings
        response["ingredients"] = recipe.scaled_ingredients(servings)

    dietary_filter = _dietary_filter_from_request()
    if dietary_filter is not None:
        response["blocked_ingredients"] = dietary_filter.blocked_ingredients_in(recipe.ingredients)

    return jsonify(response)


@app.route("/recipes/<recipe_id>", methods=["PUT"])
def update_recipe_endpoint(recipe_id: str):
    """Replace an existing recipe with the edited form contents."""
    logger.info("Updating recipe", extra={"recipe_id": recipe_id})
    data = request.get_json(silent=True)

    message = _validate_recipe_form(data)
    if message:
        return _error("Validation error", message, 400)

    if data.get("id", recipe_id) != recipe_id:
        return _error(
            "ID mismatch",
            f"Recipe ID in URL ('{recipe_id}') must match ID in body ('{data.get('id')}')",
            400,
        )

    recipes_file = Path(config.RECIPES_FILE)
    all_recipes = load_recipes(recipes_file)
    existing = find_recipe(all_recipes, recipe_id)
    if existing is None:
        return _error("Recipe not found", f"No recipe found with ID '{recipe_id}'", 404)

    try:
        updated = SharedRecipe.from_dict({
            "created_by": existing.created_by,
            "servings": existing.servings,
            **data,
            "id": recipe_id,
        })
    except ValueError as e:
        return _error("Validation error", str(e), 400)

    save_recipes(recipes_file, update_recipe(all_recipes, updated))
    return jsonify(_serialize_recipe(updated))


@app.route("/api/scale-ingredients", methods=["POST"])
@csrf.exempt
@limiter.limit(config.SCALE_RATE_LIMIT)
def scale_ingredients_endpoint():
    """Scale a free-text ingredient block between two serving counts."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("Invalid request", "Request body must be a JSON object", 400)

    ingredients = data.get("ingredients")
    if not isinstance(ingredients, str):
        return _error("Invalid ingredients", "ingredients must be a string", 400)

    new_servings = data.get("new_servings")
    if not _is_servings_count(new_servings):
        return _error(
            "Invalid servings",
            f"new_servings must be a number between 0 and {config.MAX_SERVINGS}",
            400,
        )

    original_servings = data.get("original_servings", config.DEFAULT_SERVINGS)
    if not _is_number(original_servings) or original_servings > config.MAX_SERVINGS:
        return _error(
            "Invalid servings",
            f"original_servings must be a number no greater than {config.MAX_SERVINGS}",
            400,
        )

    scaled = scale_ingredients(ingredients, original_servings, new_servings)

    ratio = None
    if original_servings > 0 and original_servings != new_servings:
        ratio = new_servings / original_servings

    logger.info(
        "Scaled ingredients",
        extra={"original_servings": original_servings, "new_servings": new_servings},
    )
    return jsonify({"ingredients": scaled, "ratio": ratio})
