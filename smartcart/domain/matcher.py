# smartcart/domain/matcher.py
from typing import Protocol, Sequence, TypeVar

from smartcart.domain.labels import normalize_label
from smartcart.utils.logging import get_logger

logger = get_logger(__name__)

WORD_STOPWORDS = ("food", "fresh", "ripe", "juicy", "sweet", "natural", "product", "item")
CATEGORY_FALLBACKS = ("fruit", "vegetable")


class CatalogEntry(Protocol):
    name: str
    category: str | None


P = TypeVar("P", bound=CatalogEntry)


def find_match(label: str, catalog: Sequence[P]) -> P | None:
    """
    Heurystyka dopasowania etykiety z vision API do produktu z katalogu.
    Kolejnosc: exact -> zawieranie -> pojedyncze slowa -> kategoria.
    Przy remisach decyduje kolejnosc katalogu.
    """
    needle = normalize_label(label)
    if not needle:
        return None

    named = [(normalize_label(p.name), p) for p in catalog if p.name and p.name.strip()]
    if not named:
        logger.info("No products available for matching")
        return None

    # 1. exact
    for name, product in named:
        if name == needle:
            logger.info(f"Exact match for '{needle}': '{product.name}'")
            return product

    # 2. zawieranie w obie strony
    contains = [(name, product) for name, product in named if name in needle or needle in name]
    if contains:
        # sorted jest stabilne, wiec remisy zostaja w kolejnosci katalogu
        contains = sorted(
            contains,
            key=lambda pair: (pair[0] not in needle, abs(len(pair[0]) - len(needle))),
        )
        best = contains[0][1]
        logger.info(f"Partial match for '{needle}': '{best.name}' ({len(contains)} candidates)")
        return best

    # 3. pojedyncze slowa, tylko dla etykiet wielowyrazowych
    words = needle.split()
    if len(words) > 1:
        for word in words:
            if len(word) <= 3 or word in WORD_STOPWORDS:
                continue
            for name, product in named:
                if word in name:
                    logger.info(f"Word match for '{word}': '{product.name}'")
                    return product

    # 4. kategoria jako ostatnia deska ratunku
    for category in CATEGORY_FALLBACKS:
        if category not in needle:
            continue
        for _, product in named:
            if product.category and normalize_label(product.category) == category:
                logger.info(f"Category match from '{product.category}': '{product.name}'")
                return product

    logger.info(f"No match found for '{needle}'")
    return None
