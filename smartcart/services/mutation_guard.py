# smartcart/services/mutation_guard.py
import uuid

import redis
from redis.exceptions import RedisError

from smartcart.utils.logging import get_logger
from smartcart.utils.retry import redis_retry
from smartcart.utils.settings import CART_MUTATION_MIN_INTERVAL_MS

logger = get_logger(__name__)


class MutationGuard:
    """
    -odrzuca powtorzona mutacje tego samego celu w krotkim oknie (podwojne klikniecie)
    -klucz wygasa sam (PX), nie trzeba go zwalniac
    """

    def __init__(
        self,
        client: redis.Redis,
        min_interval_ms: int = CART_MUTATION_MIN_INTERVAL_MS,
        prefix: str = "smartcart:mutation:",
    ):
        self.redis = client
        self.min_interval_ms = min_interval_ms
        self.prefix = prefix

    @redis_retry()
    def _set_nx(self, key: str) -> bool:
        #SET smartcart:mutation:<user>:add:<product> 1 NX PX 500
        return bool(self.redis.set(name=key, value="1", nx=True, px=self.min_interval_ms))

    def acquire(self, user_id: uuid.UUID, target: str, anonymous: bool = False) -> bool:
        if self.min_interval_ms <= 0:
            return True

        owner = f"anon:{user_id}" if anonymous else str(user_id)
        key = f"{self.prefix}{owner}:{target}"
        try:
            acquired = self._set_nx(key)
        except RedisError as e:
            # bez redisa nie blokujemy koszyka
            logger.error(f"Mutation guard unavailable for {key}: {e}")
            return True

        if not acquired:
            logger.info(f"Duplicate mutation {key} rejected")
        return acquired
