#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from smartcart.data.models.product import ProductModel
from smartcart.data.models.cart import CartModel
from smartcart.data.models.cart_item import CartItemModel
from smartcart.data.models.payment import PaymentModel

__all__ = ["ProductModel", "CartModel", "CartItemModel", "PaymentModel"]
