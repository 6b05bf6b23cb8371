from household_recipes.dietary_filters import DietaryFilter


class TestDietaryFilter:
    """Test blocked-ingredient flagging on free-text ingredient blocks."""

    def test_case_insensitive_substring_match(self):
        nut_free = DietaryFilter(name="Nut free", blocked_ingredients=["Peanut", "almond"])
        ingredients = "2 tbsp peanut butter\n½ cup ALMOND milk\n1 banana"

        assert nut_free.blocked_ingredients_in(ingredients) == ["Peanut", "almond"]
        assert nut_free.has_blocked_ingredients(ingredients)

    def test_substring_matches_inside_words(self):
        nut_free = DietaryFilter(name="Nut free", blocked_ingredients=["nut"])
        assert nut_free.blocked_ingredients_in("A pinch of nutmeg") == ["nut"]

    def test_no_blocked_ingredients(self):
        dairy_free = DietaryFilter(name="Dairy free", blocked_ingredients=["milk", "cheese"])

        assert dairy_free.blocked_ingredients_in("2 eggs\n1 onion") == []
        assert not dairy_free.has_blocked_ingredients("2 eggs\n1 onion")

    def test_empty_filter_flags_nothing(self):
        assert not DietaryFilter(name="Anything goes").has_blocked_ingredients("1 cup milk")

    def test_from_query_trims_and_deduplicates(self):
        dietary_filter = DietaryFilter.from_query(" milk, ,egg,milk ")

        assert dietary_filter.name == "custom"
        assert dietary_filter.blocked_ingredients == ["milk", "egg"]
