# smartcart/services/session_store.py
import redis
from redis.exceptions import RedisError

from smartcart.utils.logging import get_logger
from smartcart.utils.retry import redis_retry
from smartcart.utils.settings import SECURE_STORE_MAX_SIZE

logger = get_logger(__name__)

STORED_IN_OVERFLOW = "STORED_IN_OVERFLOW"


class SessionStore:
    """
    Tokeny sesji: bezpieczny magazyn ma limit rozmiaru wartosci,
    wieksze trafiaja do magazynu overflow a w bezpiecznym zostaje znacznik.
    """

    def __init__(
        self,
        secure: redis.Redis,
        overflow: redis.Redis,
        max_secure_size: int = SECURE_STORE_MAX_SIZE,
        prefix: str = "smartcart.auth.",
    ):
        self.secure = secure
        self.overflow = overflow
        self.max_secure_size = max_secure_size
        self.prefix = prefix

    def _overflow_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @redis_retry()
    def set_item(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        if size > self.max_secure_size:
            self.overflow.set(self._overflow_key(key), value)
            self.secure.set(key, STORED_IN_OVERFLOW)
            logger.info(f"Session value '{key}' too large for secure store ({size} bytes), stored in overflow")
            return

        self.secure.set(key, value)
        self.overflow.delete(self._overflow_key(key))

    def get_item(self, key: str) -> str | None:
        try:
            return self._get_item(key)
        except RedisError as e:
            logger.error(f"Error reading session value '{key}': {e}")
            return None

    @redis_retry()
    def _get_item(self, key: str) -> str | None:
        value = self.secure.get(key)
        if value and value != STORED_IN_OVERFLOW:
            return value
        return self.overflow.get(self._overflow_key(key))

    @redis_retry()
    def remove_item(self, key: str) -> None:
        self.secure.delete(key)
        self.overflow.delete(self._overflow_key(key))
