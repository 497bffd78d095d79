# smartcart/utils/retry.py
import requests
import redis
from tenacity import (
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

# 429 i 5xx warto powtorzyc, reszta 4xx to blad po naszej stronie
_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def is_transient_http_error(exc: BaseException) -> bool:
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code in _RETRYABLE_STATUS
    return False


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3) + wait_random(0, 0.3),
        retry=retry_if_exception(is_transient_http_error),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2) + wait_random(0, 0.2),
        retry=retry_if_exception_type((redis.ConnectionError, redis.TimeoutError)),
    )
