# smartcart/services/catalog_service.py
import uuid
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smartcart.domain.schemas import ProductOut, ProductSearchParams
from smartcart.repos.product_repo import ProductRepo
from smartcart.services.product_cache import ProductCache
from smartcart.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogService:
    """
    Odczyt katalogu produktow. Bledy zapytan sa logowane i zamieniane
    na pusta liste / None, zeby ekran dzialal dalej.
    """

    def __init__(self, db: Session, cache: ProductCache):
        self.repo = ProductRepo(db)
        self.cache = cache

    def list_products(self, category: str | None = None) -> List[ProductOut]:
        try:
            rows = self.repo.list_products(category)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching products (category={category}): {e}")
            self.repo.db.rollback()
            return []

        products = [ProductOut.model_validate(row) for row in rows]
        self.cache.put_many(products)
        return products

    def snapshot(self, refresh: bool = False) -> List[ProductOut]:
        """Caly katalog dla matchera, z cache jesli swiezy."""
        if not refresh:
            cached = self.cache.snapshot()
            if cached is not None:
                return cached

        products = self.list_products()
        if products:
            self.cache.store_snapshot(products)
        logger.info(f"Catalog snapshot fetched: {len(products)} products")
        return products

    def get_product(self, product_id: uuid.UUID) -> ProductOut | None:
        return self.cache.get(product_id) or self.fetch_product(product_id)

    def fetch_product(self, product_id: uuid.UUID) -> ProductOut | None:
        try:
            row = self.repo.get_product(product_id)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching product {product_id}: {e}")
            self.repo.db.rollback()
            return None

        if row is None:
            return None

        product = ProductOut.model_validate(row)
        self.cache.put(product)
        return product

    def cached_product(self, product_id: uuid.UUID) -> ProductOut | None:
        return self.cache.get(product_id)

    def get_by_barcode(self, barcode: str) -> ProductOut | None:
        try:
            row = self.repo.get_by_barcode(barcode)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching product by barcode {barcode}: {e}")
            self.repo.db.rollback()
            return None

        if row is None:
            return None

        product = ProductOut.model_validate(row)
        self.cache.put(product)
        return product

    def search(self, query: str, limit: int = 5) -> List[ProductOut]:
        if not query or not query.strip():
            return []

        try:
            rows = self.repo.search(query.strip().lower(), limit)
        except SQLAlchemyError as e:
            logger.error(f"Error searching products for '{query}': {e}")
            self.repo.db.rollback()
            return []

        return [ProductOut.model_validate(row) for row in rows]

    def find(self, params: ProductSearchParams) -> List[ProductOut]:
        try:
            rows = self.repo.find(
                product_id=params.id,
                barcode=params.barcode,
                name=params.name,
                category=params.category,
            )
        except SQLAlchemyError as e:
            logger.error(f"Error finding products with {params.model_dump(exclude_none=True)}: {e}")
            self.repo.db.rollback()
            return []

        return [ProductOut.model_validate(row) for row in rows]

    def categories(self) -> List[str]:
        try:
            return self.repo.list_categories()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching categories: {e}")
            self.repo.db.rollback()
            return []
