# smartcart/repos/product_repo.py
import uuid
from typing import List

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from smartcart.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_products(self, category: str | None = None) -> List[ProductModel]:
        stmt = select(ProductModel)
        if category:
            stmt = stmt.where(ProductModel.category == category)
        return list(self.db.execute(stmt.order_by(ProductModel.name)).scalars().all())

    def get_product(self, product_id: uuid.UUID) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_by_barcode(self, barcode: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.barcode == barcode)
        ).scalar_one_or_none()

    def search(self, query: str, limit: int = 5) -> List[ProductModel]:
        pattern = f"%{query}%"
        stmt = (
            select(ProductModel)
            .where(or_(ProductModel.name.ilike(pattern), ProductModel.description.ilike(pattern)))
            .order_by(ProductModel.name)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def find(
        self,
        product_id: uuid.UUID | None = None,
        barcode: str | None = None,
        name: str | None = None,
        category: str | None = None,
    ) -> List[ProductModel]:
        stmt = select(ProductModel)
        if product_id:
            stmt = stmt.where(ProductModel.id == product_id)
        if barcode:
            stmt = stmt.where(ProductModel.barcode == barcode)
        if name:
            stmt = stmt.where(ProductModel.name.ilike(f"%{name}%"))
        if category:
            stmt = stmt.where(ProductModel.category == category)
        return list(self.db.execute(stmt.order_by(ProductModel.name)).scalars().all())

    def list_categories(self) -> List[str]:
        stmt = (
            select(ProductModel.category)
            .where(ProductModel.category.is_not(None))
            .distinct()
            .order_by(ProductModel.category)
        )
        return list(self.db.execute(stmt).scalars().all())
