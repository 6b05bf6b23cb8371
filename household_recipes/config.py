import os
import secrets

# Flask secret key, used for session signing and CSRF token generation.
# Set SECRET_KEY in the environment for production; a random key is
# generated on startup as a fallback (sessions won't survive restarts).
SECRET_KEY = os.environ.get("SECRET_KEY", secrets.token_hex(32))

RECIPES_FILE = os.environ.get("RECIPES_FILE", "data/recipes.json")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Serving count assumed for recipes that don't declare one.
DEFAULT_SERVINGS = 2

# Largest serving count accepted from API callers.
MAX_SERVINGS = 100

SCALE_RATE_LIMIT = os.environ.get("SCALE_RATE_LIMIT", "60 per minute")
