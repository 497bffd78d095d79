# smartcart/services/product_cache.py
import time
import uuid
from collections import OrderedDict
from typing import Callable, Iterable, List, Tuple

from smartcart.domain.schemas import ProductOut


class ProductCache:
    """
    Cache produktow trzymany przez instancje aplikacji i wstrzykiwany do serwisow.
    - LRU po id z limitem rozmiaru
    - snapshot calego katalogu dla matchera
    - oba z tym samym TTL, invalidate() czysci jeden wpis albo wszystko
    """

    def __init__(self, max_size: int = 256, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: "OrderedDict[uuid.UUID, Tuple[float, ProductOut]]" = OrderedDict()
        self._snapshot: Tuple[float, List[ProductOut]] | None = None

    def _expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at > self.ttl_seconds

    def get(self, product_id: uuid.UUID) -> ProductOut | None:
        entry = self._items.get(product_id)
        if entry is None:
            return None

        stored_at, product = entry
        if self._expired(stored_at):
            del self._items[product_id]
            return None

        self._items.move_to_end(product_id)
        return product

    def put(self, product: ProductOut) -> None:
        self._items[product.id] = (self._clock(), product)
        self._items.move_to_end(product.id)
        while len(self._items) > self.max_size:
            self._items.popitem(last=False)

    def put_many(self, products: Iterable[ProductOut]) -> None:
        for product in products:
            self.put(product)

    def snapshot(self) -> List[ProductOut] | None:
        if self._snapshot is None:
            return None

        stored_at, products = self._snapshot
        if self._expired(stored_at):
            self._snapshot = None
            return None
        return list(products)

    def store_snapshot(self, products: List[ProductOut]) -> None:
        self._snapshot = (self._clock(), list(products))

    @property
    def last_fetch_at(self) -> float | None:
        return self._snapshot[0] if self._snapshot else None

    def invalidate(self, product_id: uuid.UUID | None = None) -> None:
        if product_id is None:
            self._items.clear()
            self._snapshot = None
            return
        self._items.pop(product_id, None)

    def __len__(self) -> int:
        return len(self._items)
