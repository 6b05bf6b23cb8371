"""Flag recipes that contain ingredients a household member avoids."""

from dataclasses import dataclass, field


@dataclass
class DietaryFilter:
    name: str
    blocked_ingredients: list[str] = field(default_factory=list)

    @classmethod
    def from_query(cls, raw: str, name: str = "custom") -> "DietaryFilter":
        """Build a filter from a comma-separated list such as "peanut, milk"."""
        blocked = []
        for item in raw.split(","):
            item = item.strip()
            if item and item not in blocked:
                blocked.append(item)
        return cls(name=name, blocked_ingredients=blocked)

    def blocked_ingredients_in(self, recipe_ingredients: str) -> list[str]:
        """Blocked ingredients mentioned anywhere in an ingredient block.

        Matching is a case-insensitive substring test, so "nut" also flags
        "walnuts" and "nutmeg".
        """
        ingredients_lower = recipe_ingredients.lower()
        return [
            blocked for blocked in self.blocked_ingredients
            if blocked.lower() in ingredients_lower
        ]

    def has_blocked_ingredients(self, recipe_ingredients: str) -> bool:
        return bool(self.blocked_ingredients_in(recipe_ingredients))
