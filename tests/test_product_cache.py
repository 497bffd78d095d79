import uuid
from decimal import Decimal

import pytest

from smartcart.domain.schemas import ProductOut
from smartcart.services.product_cache import ProductCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_product(name="Apple"):
    return ProductOut(id=uuid.uuid4(), name=name, price=Decimal("1.00"), category="Fruit")


def test_get_returns_cached_product():
    cache = ProductCache(max_size=4, ttl_seconds=60)
    product = make_product()
    cache.put(product)
    assert cache.get(product.id) == product


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ProductCache(max_size=4, ttl_seconds=60, clock=clock)
    product = make_product()
    cache.put(product)

    clock.now = 61
    assert cache.get(product.id) is None
    assert len(cache) == 0


def test_least_recently_used_entry_is_evicted():
    cache = ProductCache(max_size=2, ttl_seconds=60)
    first, second, third = make_product("A"), make_product("B"), make_product("C")
    cache.put(first)
    cache.put(second)
    cache.get(first.id)
    cache.put(third)

    assert cache.get(second.id) is None
    assert cache.get(first.id) == first
    assert cache.get(third.id) == third


def test_snapshot_expires_and_tracks_fetch_time():
    clock = FakeClock()
    cache = ProductCache(max_size=4, ttl_seconds=10, clock=clock)
    assert cache.snapshot() is None
    assert cache.last_fetch_at is None

    clock.now = 5
    cache.store_snapshot([make_product()])
    assert cache.last_fetch_at == 5
    assert len(cache.snapshot()) == 1

    clock.now = 16
    assert cache.snapshot() is None


def test_invalidate_single_and_all():
    cache = ProductCache(max_size=4, ttl_seconds=60)
    first, second = make_product("A"), make_product("B")
    cache.put_many([first, second])
    cache.store_snapshot([first, second])

    cache.invalidate(first.id)
    assert cache.get(first.id) is None
    assert cache.get(second.id) == second

    cache.invalidate()
    assert len(cache) == 0
    assert cache.snapshot() is None


def test_max_size_must_be_positive():
    with pytest.raises(ValueError):
        ProductCache(max_size=0)
