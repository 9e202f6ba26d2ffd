"""Tests for the AllowedCategories value object."""

import pytest

from inventory_kernel.domain.values import AllowedCategories


class TestParsing:

    def test_parse_comma_separated(self):
        cats = AllowedCategories.parse("Plants, Clothing, Meat")
        assert cats.labels == frozenset({"Plants", "Clothing", "Meat"})

    def test_parse_strips_whitespace_and_drops_empties(self):
        cats = AllowedCategories.parse("  Books ,, Toys ,")
        assert cats.sorted_labels() == ("Books", "Toys")

    @pytest.mark.parametrize("value", [None, "", " , ,"])
    def test_empty_input_is_unrestricted(self, value):
        assert AllowedCategories.parse(value) is AllowedCategories.UNRESTRICTED

    def test_of_empty_iterable_is_unrestricted(self):
        assert AllowedCategories.of([]).is_unrestricted

    def test_of_deduplicates(self):
        assert AllowedCategories.of(["Meat", "Meat", " Meat "]).sorted_labels() == ("Meat",)


class TestMembership:

    def test_exact_membership(self):
        cats = AllowedCategories.of(["Tools"])
        assert cats.allows("Tools")
        assert not cats.allows("Tool")
        assert not cats.allows("tools")

    def test_unrestricted_allows_everything(self):
        assert AllowedCategories.UNRESTRICTED.allows("Meat")
        assert AllowedCategories.UNRESTRICTED.allows("Books")


class TestStorage:

    def test_storage_is_sorted_list(self):
        assert AllowedCategories.parse("Meat, Clothing").to_storage() == ["Clothing", "Meat"]

    def test_unrestricted_stored_as_none(self):
        assert AllowedCategories.UNRESTRICTED.to_storage() is None

    def test_round_trip_through_storage(self):
        cats = AllowedCategories.parse("Electronics, Tools, Appliances")
        assert AllowedCategories.of(cats.to_storage()) == cats

    def test_str(self):
        assert str(AllowedCategories.parse("Meat, Clothing")) == "Clothing, Meat"
        assert str(AllowedCategories.UNRESTRICTED) == "<unrestricted>"

    def test_is_frozen(self):
        cats = AllowedCategories.of(["Meat"])
        with pytest.raises(AttributeError):
            cats.labels = frozenset()
