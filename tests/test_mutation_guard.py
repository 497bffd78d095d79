import uuid

from smartcart.services.mutation_guard import MutationGuard


def test_repeat_within_interval_is_rejected(redis_client):
    guard = MutationGuard(redis_client, min_interval_ms=5000)
    user_id = uuid.uuid4()

    assert guard.acquire(user_id, "add:1")
    assert not guard.acquire(user_id, "add:1")


def test_targets_and_users_are_independent(redis_client):
    guard = MutationGuard(redis_client, min_interval_ms=5000)
    user_id = uuid.uuid4()

    assert guard.acquire(user_id, "add:1")
    assert guard.acquire(user_id, "add:2")
    assert guard.acquire(uuid.uuid4(), "add:1")


def test_key_expires_after_interval(redis_client):
    guard = MutationGuard(redis_client, min_interval_ms=5000)
    user_id = uuid.uuid4()
    guard.acquire(user_id, "remove:9")

    ttl = redis_client.pttl(f"smartcart:mutation:{user_id}:remove:9")
    assert 0 < ttl <= 5000


def test_zero_interval_disables_guard(redis_client):
    guard = MutationGuard(redis_client, min_interval_ms=0)
    user_id = uuid.uuid4()

    assert guard.acquire(user_id, "add:1")
    assert guard.acquire(user_id, "add:1")


def test_anonymous_device_does_not_block_user(redis_client):
    guard = MutationGuard(redis_client, min_interval_ms=5000)
    user_id = uuid.uuid4()

    assert guard.acquire(user_id, "add:1", anonymous=True)
    assert guard.acquire(user_id, "add:1")
    assert redis_client.exists(f"smartcart:mutation:anon:{user_id}:add:1")
