from dataclasses import dataclass

from smartcart.domain.matcher import find_match


@dataclass
class Product:
    name: str
    category: str | None = None


CATALOG = [
    Product("Apple", "Fruit"),
    Product("Green Apple", "Fruit"),
    Product("Banana", "Fruit"),
    Product("Tomato", "Vegetable"),
    Product("Roma Tomato", "Vegetable"),
    Product("Milk", "Dairy"),
]


def test_exact_match_wins_over_substring():
    assert find_match("banana", CATALOG) is CATALOG[2]
    assert find_match("Tomato", CATALOG) is CATALOG[3]


def test_exact_match_after_normalization():
    assert find_match("Apples", CATALOG) is CATALOG[0]


def test_containment_prefers_name_inside_label():
    # "apple" siedzi w etykiecie, "green apple" nie
    assert find_match("Granny Smith apple", CATALOG) is CATALOG[0]


def test_containment_prefers_closest_length():
    catalog = [Product("Roma Tomato Vine Ripened"), Product("Roma Tomato Plum")]
    assert find_match("roma", catalog) is catalog[1]


def test_containment_ties_keep_catalog_order():
    catalog = [Product("Red Pear"), Product("Big Pear")]
    assert find_match("pear", catalog) is catalog[0]


def test_word_match_for_multi_word_labels():
    catalog = [Product("Cheddar Cheese", "Dairy")]
    assert find_match("sharp cheddar block", catalog) is catalog[0]


def test_word_match_skips_short_words_and_stopwords():
    catalog = [Product("Fresh Juice"), Product("Red Pepper")]
    # "red" ma 3 znaki, "fresh" to stopword
    assert find_match("fresh red thing", catalog) is None


def test_category_fallback_for_fruit():
    catalog = [Product("Milk", "Dairy"), Product("Kiwi", "Fruits")]
    assert find_match("Tropical fruit", catalog) is catalog[1]


def test_category_fallback_for_vegetable():
    assert find_match("leaf vegetable", CATALOG) is CATALOG[3]


def test_no_match_returns_none():
    assert find_match("dragon", CATALOG) is None
    assert find_match("   ", CATALOG) is None
    assert find_match("apple", []) is None


def test_empty_product_names_are_ignored():
    catalog = [Product(""), Product("   "), Product("Apple", "Fruit")]
    assert find_match("apple", catalog) is catalog[2]
