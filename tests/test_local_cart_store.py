import uuid
from datetime import datetime, timezone

from redis.exceptions import ConnectionError as RedisConnectionError

from smartcart.domain.schemas import CartOut
from smartcart.services.local_cart_store import LocalCartStore

SYNCED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_cart(user_id):
    return CartOut(id=uuid.uuid4(), user_id=user_id, status="active")


def test_save_and_load(redis_client):
    store = LocalCartStore(redis_client, clock=lambda: SYNCED_AT)
    cart = make_cart(uuid.uuid4())

    assert store.save(cart) == SYNCED_AT
    loaded, last_sync = store.load(cart.user_id)

    assert loaded == cart
    assert last_sync == SYNCED_AT


def test_one_blob_per_user(redis_client):
    store = LocalCartStore(redis_client)
    first, second = make_cart(uuid.uuid4()), make_cart(uuid.uuid4())
    store.save(first)
    store.save(second)

    assert store.load(first.user_id)[0].id == first.id
    assert store.load(second.user_id)[0].id == second.id


def test_missing_and_cleared(redis_client):
    store = LocalCartStore(redis_client)
    cart = make_cart(uuid.uuid4())
    assert store.load(cart.user_id) == (None, None)

    store.save(cart)
    store.clear(cart.user_id)
    assert store.load(cart.user_id) == (None, None)


def test_corrupt_blob_is_treated_as_absent(redis_client):
    store = LocalCartStore(redis_client)
    user_id = uuid.uuid4()
    redis_client.set(f"smartcart:cart:{user_id}", "{not json")

    assert store.load(user_id) == (None, None)


def test_storage_errors_are_logged_not_raised(redis_client, monkeypatch):
    store = LocalCartStore(redis_client)

    def down(*args, **kwargs):
        raise RedisConnectionError("down")

    monkeypatch.setattr("time.sleep", lambda seconds: None)
    monkeypatch.setattr(redis_client, "get", down)
    monkeypatch.setattr(redis_client, "set", down)

    cart = make_cart(uuid.uuid4())
    store.save(cart)
    assert store.load(cart.user_id) == (None, None)


def test_anonymous_carts_have_their_own_keys(redis_client):
    store = LocalCartStore(redis_client)
    user_id = uuid.uuid4()
    backend_cart = make_cart(user_id)
    device_cart = make_cart(user_id).model_copy(update={"local": True})

    store.save(backend_cart)
    store.save(device_cart, anonymous=True)

    assert store.load(user_id)[0].id == backend_cart.id
    assert store.load(user_id, anonymous=True)[0].id == device_cart.id
    assert redis_client.exists(f"smartcart:cart:anon:{user_id}")

    store.clear(user_id, anonymous=True)
    assert store.load(user_id)[0].id == backend_cart.id
