# scripts/check_product_search.py
"""
Reczne sprawdzenie wyszukiwania produktow na zaseedowanym katalogu w pamieci.
Dla kazdej nazwy: po nazwie, potem po pierwszym slowie, na koniec przyklad z kategorii.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import smartcart.data.models  # noqa: F401
from smartcart.data.database import Base
from smartcart.data.seed import seed_products
from smartcart.domain.schemas import ProductSearchParams
from smartcart.services.catalog_service import CatalogService
from smartcart.services.product_cache import ProductCache

TEST_FOOD_ITEMS = ["Apple", "Banana", "Orange", "Chicken", "Tomato", "Cherry Tomato", "NonExistentFood"]
FALLBACK_CATEGORIES = ["Fruit", "Vegetable", "Meat", "Dairy", "Bakery"]


def print_products(products, header):
    print(header)
    for product in products:
        print(f"- {product.name} ({product.category}): ${product.price}")


def check_product_search(catalog: CatalogService) -> None:
    for food_name in TEST_FOOD_ITEMS:
        print(f'\nSearching for "{food_name}"')

        products = catalog.find(ProductSearchParams(name=food_name))
        if products:
            print_products(products, f"Found {len(products)} products:")
            continue
        print("No products found.")

        first_word = food_name.split()[0]
        products = catalog.find(ProductSearchParams(name=first_word))
        if products:
            print_products(products, f'Found {len(products)} products by first word "{first_word}":')
            continue
        print(f'No products found by first word "{first_word}" either.')

        for category in FALLBACK_CATEGORIES:
            products = catalog.find(ProductSearchParams(category=category))
            if products:
                print(f'Found {len(products)} products in category "{category}"')
                print(f"Sample product: {products[0].name}: ${products[0].price}")
                break


def main():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(bind=engine)()
    try:
        seed_products(db)
        check_product_search(CatalogService(db, ProductCache()))
    finally:
        db.close()


if __name__ == "__main__":
    main()
