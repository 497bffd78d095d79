# smartcart/repos/cart_repo.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from smartcart.data.models.cart import STATUS_ABANDONED, STATUS_ACTIVE, STATUS_COMPLETED, CartModel
from smartcart.data.models.cart_item import CartItemModel
from smartcart.data.models.product import ProductModel
from smartcart.domain.errors import AccessDeniedError


class CartRepo:
    """
    Dostep do carts / cart_items.
    Metody *_owned_* sprawdzaja wlasciciela wiersza tak jak polityki RLS po stronie bazy
    i rzucaja AccessDeniedError dla cudzych koszykow.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: uuid.UUID) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_owned_cart(self, cart_id: uuid.UUID, user_id: uuid.UUID) -> CartModel | None:
        cart = self.get_cart(cart_id)
        if cart and cart.user_id != user_id:
            raise AccessDeniedError(f"Cart {cart_id} does not belong to the current user")
        return cart

    def get_active_cart_by_user(self, user_id: uuid.UUID) -> CartModel | None:
        stmt = (
            select(CartModel)
            .where(CartModel.user_id == user_id, CartModel.status == STATUS_ACTIVE)
            .order_by(CartModel.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_cart_items(self, cart_id: uuid.UUID) -> List[Tuple[CartItemModel, ProductModel | None]]:
        # outer join: pozycja bez produktu nie moze zniknac z koszyka
        stmt = (
            select(CartItemModel, ProductModel)
            .outerjoin(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.created_at)
        )
        return [(item, product) for item, product in self.db.execute(stmt).all()]

    def count_cart_items(self, cart_id: uuid.UUID) -> int:
        stmt = select(func.count(CartItemModel.id)).where(CartItemModel.cart_id == cart_id)
        return self.db.execute(stmt).scalar_one()

    def get_cart_item(self, item_id: uuid.UUID) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id)

    def get_owned_cart_item(self, item_id: uuid.UUID, user_id: uuid.UUID) -> CartItemModel | None:
        item = self.get_cart_item(item_id)
        if item is None:
            return None
        cart = self.get_cart(item.cart_id)
        if cart is None or cart.user_id != user_id:
            raise AccessDeniedError(f"Cart item {item_id} does not belong to the current user")
        return item

    def get_cart_item_by_product(self, cart_id: uuid.UUID, product_id: uuid.UUID) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.cart_id == cart_id,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalars().first()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def update_cart(self, cart_id: uuid.UUID, new_data: Dict[str, Any]) -> int:
        # zmieniamy tylko aktywny koszyk, 0 wierszy = ktos nas wyprzedzil
        stmt = (
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.status == STATUS_ACTIVE)
            .values(**new_data)
        )
        return self.db.execute(stmt).rowcount

    def get_cart_summary(self, cart_id: uuid.UUID) -> Tuple[Decimal, int]:
        """Suma i liczba sztuk liczona po stronie bazy (odpowiednik widoku cart totals)."""
        stmt = (
            select(
                func.coalesce(func.sum(ProductModel.price * CartItemModel.quantity), 0),
                func.coalesce(func.sum(CartItemModel.quantity), 0),
            )
            .select_from(CartItemModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
        )
        total, count = self.db.execute(stmt).one()
        return Decimal(str(total)).quantize(Decimal("0.01")), int(count)

    def get_completed_carts(self, user_id: uuid.UUID) -> List[CartModel]:
        stmt = (
            select(CartModel)
            .where(CartModel.user_id == user_id, CartModel.status == STATUS_COMPLETED)
            .order_by(CartModel.checkout_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def abandon_carts_older_than(self, cutoff: datetime) -> int:
        stmt = (
            update(CartModel)
            .where(CartModel.status == STATUS_ACTIVE, CartModel.updated_at < cutoff)
            .values(status=STATUS_ABANDONED)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
