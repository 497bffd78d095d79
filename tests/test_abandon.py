import uuid
from datetime import datetime, timedelta, timezone

from smartcart.data.models import CartModel
from smartcart.tasks.abandon import abandon_stale_carts

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def add_cart(db, status, updated_at):
    cart = CartModel(user_id=uuid.uuid4(), status=status, created_at=updated_at, updated_at=updated_at)
    db.add(cart)
    db.commit()
    return cart.id


def test_only_old_active_carts_are_abandoned(db):
    old_active = add_cart(db, "active", NOW - timedelta(days=8))
    recent_active = add_cart(db, "active", NOW - timedelta(days=1))
    old_completed = add_cart(db, "completed", NOW - timedelta(days=30))

    assert abandon_stale_carts(db, max_age_seconds=7 * 24 * 3600, now=NOW) == 1

    db.expire_all()
    assert db.get(CartModel, old_active).status == "abandoned"
    assert db.get(CartModel, recent_active).status == "active"
    assert db.get(CartModel, old_completed).status == "completed"


def test_nothing_to_abandon(db):
    add_cart(db, "active", NOW)
    assert abandon_stale_carts(db, max_age_seconds=3600, now=NOW) == 0
