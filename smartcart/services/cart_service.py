# smartcart/services/cart_service.py
import uuid
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from smartcart.data.models.cart import STATUS_ACTIVE, STATUS_COMPLETED, CartModel
from smartcart.data.models.cart_item import CartItemModel
from smartcart.data.models.payment import PAYMENT_COMPLETED, PaymentModel
from smartcart.domain.errors import AccessDeniedError, BackendError, DuplicateMutationError, NotFoundError
from smartcart.domain.schemas import (
    CartItemOut,
    CartOut,
    CartSyncState,
    CartTotals,
    CheckoutOut,
    PaymentOut,
    ProductOut,
)
from smartcart.repos.cart_repo import CartRepo
from smartcart.repos.payment_repo import PaymentRepo
from smartcart.services.catalog_service import CatalogService
from smartcart.services.identity import Identity
from smartcart.services.local_cart_store import LocalCartStore, utcnow
from smartcart.services.mutation_guard import MutationGuard
from smartcart.utils.logging import get_logger
from smartcart.utils.settings import CART_CACHE_MAX_AGE_SECONDS, DEFAULT_PAYMENT_METHOD, TAX_RATE

logger = get_logger(__name__)

CENTS = Decimal("0.01")

_TRANSITIONS = {
    CartSyncState.IDLE: (CartSyncState.MUTATING,),
    CartSyncState.MUTATING: (CartSyncState.RECONCILING, CartSyncState.IDLE),
    CartSyncState.RECONCILING: (CartSyncState.IDLE,),
}


class CartService:
    """
    Koszyk biezacego uzytkownika.
    query (get_active_cart, totals, order_history) czyta lustro albo backend
    commands (add, update, remove) ida przez maszyne stanow:
    IDLE -> MUTATING -> RECONCILING -> IDLE, przy bledzie MUTATING -> IDLE
    Wygrywa ostatni zapis, bez wersjonowania.
    """

    def __init__(
        self,
        db: Session,
        identity: Identity,
        catalog: CatalogService,
        local_store: LocalCartStore,
        guard: MutationGuard,
        cache_max_age: int = CART_CACHE_MAX_AGE_SECONDS,
        tax_rate: str = TAX_RATE,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.repo = CartRepo(db)
        self.payments = PaymentRepo(db)
        self.identity = identity
        self.catalog = catalog
        self.local_store = local_store
        self.guard = guard
        self.cache_max_age = timedelta(seconds=cache_max_age)
        self.tax_rate = Decimal(str(tax_rate))
        self.clock = clock

    @property
    def user_id(self) -> uuid.UUID:
        return self.identity.user_id

    #query
    def get_active_cart(self, refresh: bool = False) -> CartOut:
        if self.identity.anonymous:
            return self._local_cart()

        cached, last_sync = self._load_mirror()
        if cached is not None and not refresh:
            # koszyk lokalny nigdy nie jest uzgadniany z backendem
            if cached.local:
                return cached
            if self._is_fresh(cached, last_sync):
                logger.info(f"Serving cached cart {cached.id} for user {self.user_id}")
                return cached

        mirrored_id = cached.id if cached is not None and not cached.local else None
        try:
            cart = self._load_from_backend(mirrored_id)
        except AccessDeniedError as e:
            self.repo.rollback()
            logger.warning(f"Access denied ({e.code}) loading cart for {self.user_id}, switching to local cart: {e}")
            return self._local_cart(cached)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Error loading cart for {self.user_id}: {e}")
            if cached is None:
                raise BackendError("Cart backend unavailable and no local copy exists") from e
            cached.stale = True
            cached.sync_state = CartSyncState.IDLE
            return cached

        self._save_mirror(cart)
        return cart

    def totals(self) -> CartTotals:
        cart = self.get_active_cart()

        subtotal = Decimal("0.00")
        item_count = 0
        for item in cart.items:
            item_count += item.quantity
            if item.product is not None:
                subtotal += item.product.price * item.quantity

        subtotal = subtotal.quantize(CENTS, rounding=ROUND_HALF_UP)
        tax = (subtotal * self.tax_rate).quantize(CENTS, rounding=ROUND_HALF_UP)
        return CartTotals(subtotal=subtotal, tax=tax, total=subtotal + tax, item_count=item_count)

    def order_history(self) -> List[CartOut]:
        if self.identity.anonymous:
            return []

        try:
            carts = self.repo.get_completed_carts(self.user_id)
            return [self._to_cart_out(cart) for cart in carts]
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Error fetching order history for {self.user_id}: {e}")
            return []

    #commands
    def add_item(self, product_id: uuid.UUID, quantity: int = 1) -> CartOut:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        product = self.catalog.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        if not self.guard.acquire(self.user_id, f"add:{product_id}", self.identity.anonymous):
            raise DuplicateMutationError("Item is already being added")

        cart = self.get_active_cart()

        def apply(c: CartOut) -> bool:
            for item in c.items:
                if item.product_id == product_id:
                    item.quantity += quantity
                    return True
            now = self.clock()
            c.items.append(
                CartItemOut(
                    id=uuid.uuid4(),
                    cart_id=c.id,
                    product_id=product_id,
                    quantity=quantity,
                    product=product,
                    created_at=now,
                    updated_at=now,
                )
            )
            return True

        def write():
            target = cart.id
            try:
                self._require_active_cart(target)
            except NotFoundError:
                # lustro wskazuje koszyk zamkniety na backendzie
                target = self._load_from_backend().id
                logger.info(f"Cart {cart.id} is no longer active, adding to cart {target}")
            self._write_add(target, product_id, quantity)

        logger.info(f"Adding {quantity} x product {product_id} to cart {cart.id}")
        return self._mutate(cart, apply, write)

    def update_quantity(self, item_id: uuid.UUID, quantity: int) -> CartOut:
        if quantity <= 0:
            return self.remove_item(item_id)

        if not self.guard.acquire(self.user_id, f"quantity:{item_id}:{quantity}", self.identity.anonymous):
            raise DuplicateMutationError("Quantity update already in progress")

        cart = self.get_active_cart()

        def apply(c: CartOut) -> bool:
            for item in c.items:
                if item.id == item_id:
                    item.quantity = quantity
                    return True
            return False

        def write():
            item = self.repo.get_owned_cart_item(item_id, self.user_id)
            if item is None:
                raise NotFoundError(f"Cart item {item_id} not found")
            item.quantity = quantity
            self.db.flush()

        logger.info(f"Setting quantity of cart item {item_id} to {quantity}")
        return self._mutate(cart, apply, write)

    def remove_item(self, item_id: uuid.UUID) -> CartOut:
        if not self.guard.acquire(self.user_id, f"remove:{item_id}", self.identity.anonymous):
            raise DuplicateMutationError("Item is already being removed")

        cart = self.get_active_cart()

        def apply(c: CartOut) -> bool:
            before = len(c.items)
            c.items = [item for item in c.items if item.id != item_id]
            return len(c.items) != before

        def write():
            item = self.repo.get_owned_cart_item(item_id, self.user_id)
            if item is None:
                raise NotFoundError(f"Cart item {item_id} not found")
            self.repo.delete_cart_item(item)

        logger.info(f"Removing cart item {item_id}")
        return self._mutate(cart, apply, write)

    def checkout(self, cart_id: uuid.UUID, payment_method: str = DEFAULT_PAYMENT_METHOD) -> CheckoutOut:
        if self.identity.anonymous:
            return self._checkout_local(self._local_cart(), cart_id, payment_method)

        cached, _ = self._load_mirror()
        if cached is not None and cached.local:
            return self._checkout_local(cached, cart_id, payment_method)

        return self._checkout_backend(cart_id, payment_method)

    #maszyna stanow
    def _transition(self, cart: CartOut, new_state: CartSyncState) -> None:
        if new_state not in _TRANSITIONS[cart.sync_state]:
            raise RuntimeError(f"Invalid cart state transition {cart.sync_state.value} -> {new_state.value}")
        logger.debug(f"Cart {cart.id}: {cart.sync_state.value} -> {new_state.value}")
        cart.sync_state = new_state

    def _mutate(self, cart: CartOut, apply: Callable[[CartOut], bool], write: Callable[[], None]) -> CartOut:
        if cart.local:
            if not apply(cart):
                raise NotFoundError("Item not found in cart")
            cart.updated_at = self.clock()
            self._save_mirror(cart)
            return cart

        self._transition(cart, CartSyncState.MUTATING)
        # optymistycznie: lustro zmienione zanim backend potwierdzi
        apply(cart)
        cart.updated_at = self.clock()
        self._save_mirror(cart)

        try:
            write()
            self.repo.commit()
        except AccessDeniedError as e:
            self.repo.rollback()
            logger.warning(f"Access denied ({e.code}) writing cart {cart.id}, continuing with local cart: {e}")
            self._transition(cart, CartSyncState.IDLE)
            cart.local = True
            self._save_mirror(cart)
            return cart
        except NotFoundError:
            self.repo.rollback()
            self._transition(cart, CartSyncState.IDLE)
            # lustro jest nieaktualne, nastepny odczyt idzie do backendu
            self._clear_mirror()
            raise
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Error writing cart {cart.id}, keeping optimistic copy: {e}")
            self._transition(cart, CartSyncState.IDLE)
            cart.stale = True
            self._save_mirror(cart)
            return cart

        return self._reconcile(cart)

    def _reconcile(self, cart: CartOut) -> CartOut:
        self._transition(cart, CartSyncState.RECONCILING)
        try:
            fresh = self._load_from_backend(cart.id)
        except AccessDeniedError as e:
            self.repo.rollback()
            logger.warning(f"Access denied ({e.code}) reloading cart {cart.id}, continuing with local cart: {e}")
            self._transition(cart, CartSyncState.IDLE)
            cart.local = True
            self._save_mirror(cart)
            return cart
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Error reloading cart {cart.id} after write: {e}")
            self._transition(cart, CartSyncState.IDLE)
            cart.stale = True
            self._save_mirror(cart)
            return cart

        self._transition(cart, CartSyncState.IDLE)
        self._save_mirror(fresh)
        return fresh

    #backend
    def _load_from_backend(self, cart_id: uuid.UUID | None = None) -> CartOut:
        cart = None
        if cart_id is not None:
            # koszyk z lustra, cudzy konczy sie AccessDeniedError (RLS)
            cart = self.repo.get_owned_cart(cart_id, self.user_id)
            if cart is not None and cart.status != STATUS_ACTIVE:
                cart = None
        if cart is None:
            cart = self.repo.get_active_cart_by_user(self.user_id)
        if cart is None:
            cart = self.repo.create_cart(CartModel(user_id=self.user_id, status=STATUS_ACTIVE))
            logger.info(f"Created cart {cart.id} for user {self.user_id}")
        return self._to_cart_out(cart)

    def _to_cart_out(self, cart: CartModel) -> CartOut:
        items = [
            CartItemOut(
                id=item.id,
                cart_id=item.cart_id,
                product_id=item.product_id,
                quantity=item.quantity,
                product=self._product_for(item, product),
                created_at=item.created_at,
                updated_at=item.updated_at,
            )
            for item, product in self.repo.get_cart_items(cart.id)
        ]
        return CartOut(
            id=cart.id,
            user_id=cart.user_id,
            status=cart.status,
            items=items,
            payment_method=cart.payment_method,
            checkout_at=cart.checkout_at,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )

    def _product_for(self, item: CartItemModel, product) -> ProductOut | None:
        if product is not None:
            return ProductOut.model_validate(product)

        # join nie zwrocil produktu: bezposrednio po id, potem cache
        found = self.catalog.fetch_product(item.product_id) or self.catalog.cached_product(item.product_id)
        if found is None:
            logger.warning(f"Product {item.product_id} for cart item {item.id} not found")
        return found

    def _require_active_cart(self, cart_id: uuid.UUID) -> CartModel:
        cart = self.repo.get_owned_cart(cart_id, self.user_id)
        if cart is None or cart.status != STATUS_ACTIVE:
            raise NotFoundError(f"Active cart {cart_id} not found")
        return cart

    def _write_add(self, cart_id: uuid.UUID, product_id: uuid.UUID, quantity: int) -> None:
        existing = self.repo.get_cart_item_by_product(cart_id, product_id)
        if existing is not None:
            existing.quantity += quantity
            self.db.flush()
            return

        try:
            self.repo.add_cart_item(CartItemModel(cart_id=cart_id, product_id=product_id, quantity=quantity))
        except IntegrityError:
            # rownolegle dodanie tego samego produktu, robimy increment
            self.repo.rollback()
            existing = self.repo.get_cart_item_by_product(cart_id, product_id)
            if existing is None:
                raise
            logger.info(f"Concurrent insert of product {product_id} into cart {cart_id}, incrementing instead")
            existing.quantity += quantity
            self.db.flush()

    #checkout
    def _checkout_local(self, cart: CartOut, cart_id: uuid.UUID, payment_method: str) -> CheckoutOut:
        if cart.id != cart_id:
            raise NotFoundError(f"Cart {cart_id} not found")
        if not cart.items:
            raise ValueError("Cannot checkout an empty cart")

        now = self.clock()
        cart.status = STATUS_COMPLETED
        cart.payment_method = payment_method
        cart.checkout_at = now
        cart.updated_at = now
        self._clear_mirror()

        logger.info(f"Local cart {cart.id} checked out for user {self.user_id}")
        return CheckoutOut(cart=cart, payment=None)

    def _checkout_backend(self, cart_id: uuid.UUID, payment_method: str) -> CheckoutOut:
        try:
            cart = self.repo.get_owned_cart(cart_id, self.user_id)
            if cart is None:
                raise NotFoundError(f"Cart {cart_id} not found")
            if cart.status != STATUS_ACTIVE:
                raise ValueError("Cart is not active")
            if self.repo.count_cart_items(cart.id) == 0:
                raise ValueError("Cannot checkout an empty cart")

            # kwota z zapytania agregujacego, nie z lustra
            amount, _ = self.repo.get_cart_summary(cart.id)
            if amount <= 0:
                raise ValueError("Cart total must be greater than 0")

            now = self.clock()
            updated = self.repo.update_cart(
                cart.id,
                {
                    "status": STATUS_COMPLETED,
                    "payment_method": payment_method,
                    "checkout_at": now,
                    "updated_at": now,
                },
            )
            if updated == 0:
                self.repo.rollback()
                raise RuntimeError("Cart was modified by another request, checkout aborted")

            payment = self.payments.create_payment(
                PaymentModel(
                    cart_id=cart.id,
                    amount=amount,
                    status=PAYMENT_COMPLETED,
                    payment_method=payment_method,
                    transaction_id=f"txn_{uuid.uuid4().hex}",
                )
            )
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Checkout of cart {cart_id} failed: {e}")
            raise BackendError(f"Checkout failed: {e}") from e

        self._clear_mirror()
        logger.info(f"Cart {cart_id} checked out, payment {payment.id} for {amount}")
        return CheckoutOut(cart=self._to_cart_out(cart), payment=PaymentOut.model_validate(payment))

    #lokalny koszyk
    def _local_cart(self, cached: CartOut | None = None) -> CartOut:
        if cached is None and self.identity.anonymous:
            cached, _ = self._load_mirror()

        # anonim nigdy nie przejmuje koszyka z backendu
        if cached is not None and not cached.local and self.identity.anonymous:
            cached = None

        if cached is not None and cached.status == STATUS_ACTIVE:
            if not cached.local:
                cached.local = True
                cached.stale = False
                cached.sync_state = CartSyncState.IDLE
                self._save_mirror(cached)
            return cached

        now = self.clock()
        cart = CartOut(
            id=uuid.uuid4(),
            user_id=self.user_id,
            status=STATUS_ACTIVE,
            created_at=now,
            updated_at=now,
            local=True,
        )
        self._save_mirror(cart)
        logger.info(f"Created local cart {cart.id} for user {self.user_id}")
        return cart

    #lustro, anonim ma osobna przestrzen kluczy
    def _save_mirror(self, cart: CartOut) -> None:
        self.local_store.save(cart, anonymous=self.identity.anonymous)

    def _load_mirror(self):
        return self.local_store.load(self.user_id, anonymous=self.identity.anonymous)

    def _clear_mirror(self) -> None:
        self.local_store.clear(self.user_id, anonymous=self.identity.anonymous)

    def _is_fresh(self, cart: CartOut, last_sync: datetime | None) -> bool:
        if last_sync is None or cart.stale or cart.sync_state != CartSyncState.IDLE:
            return False
        return self.clock() - last_sync < self.cache_max_age
