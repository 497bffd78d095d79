import pytest

from smartcart.domain.labels import is_food, normalize_label


@pytest.mark.parametrize("label", ["Tomato", "  Granny Smith apple ", "Natural foods", "Orange juice", "SEAFOOD"])
def test_is_food_matches_keyword_substrings(label):
    assert is_food(label)


@pytest.mark.parametrize("label", ["Red", "Table", "Hand", "Plastic bag", ""])
def test_is_food_rejects_non_food(label):
    assert not is_food(label)


def test_normalize_strips_single_trailing_s():
    assert normalize_label("Apples") == "apple"
    assert normalize_label("  Bananas ") == "banana"
    assert normalize_label("glass") == "glas"


def test_normalize_keeps_plural_exceptions():
    assert normalize_label("Grapes") == "grapes"
    assert normalize_label("chips") == "chips"
    assert normalize_label("OATS") == "oats"


def test_normalize_does_no_other_stemming():
    assert normalize_label("Tomatoes") == "tomatoe"
    assert normalize_label("Berries") == "berrie"
