# smartcart/services/local_cart_store.py
import uuid
from datetime import datetime, timezone
from typing import Callable, Tuple

import redis
from redis.exceptions import RedisError

from smartcart.domain.schemas import CartOut, CartSnapshot
from smartcart.utils.logging import get_logger
from smartcart.utils.retry import redis_retry

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocalCartStore:
    """
    Lokalne lustro koszyka: jeden blob JSON na uzytkownika (koszyk + last_sync).
    Koszyki anonimowe maja osobna przestrzen kluczy, device id nie moze
    nadpisac lustra zalogowanego uzytkownika o tym samym uuid.
    Bledy magazynu sa logowane, koszyk dziala dalej bez lustra.
    """

    def __init__(
        self,
        client: redis.Redis,
        prefix: str = "smartcart:cart:",
        clock: Callable[[], datetime] = utcnow,
    ):
        self.redis = client
        self.prefix = prefix
        self.clock = clock

    def _key(self, user_id: uuid.UUID, anonymous: bool = False) -> str:
        if anonymous:
            return f"{self.prefix}anon:{user_id}"
        return f"{self.prefix}{user_id}"

    @redis_retry()
    def _set(self, key: str, value: str) -> None:
        self.redis.set(key, value)

    @redis_retry()
    def _get(self, key: str) -> str | None:
        return self.redis.get(key)

    def save(self, cart: CartOut, anonymous: bool = False) -> datetime:
        last_sync = self.clock()
        blob = CartSnapshot(cart=cart, last_sync=last_sync).model_dump_json()
        try:
            self._set(self._key(cart.user_id, anonymous), blob)
        except RedisError as e:
            logger.error(f"Error saving local cart for {cart.user_id}: {e}")
        return last_sync

    def load(self, user_id: uuid.UUID, anonymous: bool = False) -> Tuple[CartOut | None, datetime | None]:
        try:
            raw = self._get(self._key(user_id, anonymous))
        except RedisError as e:
            logger.error(f"Error loading local cart for {user_id}: {e}")
            return None, None

        if not raw:
            return None, None

        try:
            snapshot = CartSnapshot.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Discarding corrupt local cart for {user_id}: {e}")
            return None, None

        return snapshot.cart, snapshot.last_sync

    def clear(self, user_id: uuid.UUID, anonymous: bool = False) -> None:
        try:
            self.redis.delete(self._key(user_id, anonymous))
        except RedisError as e:
            logger.error(f"Error clearing local cart for {user_id}: {e}")
