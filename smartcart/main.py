# smartcart/main.py
from contextlib import asynccontextmanager

import redis
import uvicorn
from fastapi import FastAPI

import smartcart.data.models  # noqa: F401  modele musza byc zarejestrowane przed create_all
from smartcart.api.routers import auth, carts, health, products, scan
from smartcart.data.database import Base, engine
from smartcart.services.auth_client import AuthClient
from smartcart.services.local_cart_store import LocalCartStore
from smartcart.services.mutation_guard import MutationGuard
from smartcart.services.product_cache import ProductCache
from smartcart.services.session_store import SessionStore
from smartcart.services.vision_client import VisionClient
from smartcart.utils.logging import get_logger
from smartcart.utils.settings import (
    PRODUCT_CACHE_SIZE,
    PRODUCT_CACHE_TTL_SECONDS,
    REDIS_URL,
    SECURE_REDIS_URL,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)
    yield


def create_app(
    redis_client: redis.Redis | None = None,
    secure_redis: redis.Redis | None = None,
    vision_client: VisionClient | None = None,
    auth_client: AuthClient | None = None,
    product_cache: ProductCache | None = None,
) -> FastAPI:
    app = FastAPI(
        title="SmartCart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # wspoldzielone przez wszystkie requesty tej instancji
    redis_client = redis_client or redis.Redis.from_url(REDIS_URL, decode_responses=True)
    secure_redis = secure_redis or redis.Redis.from_url(SECURE_REDIS_URL, decode_responses=True)

    app.state.product_cache = product_cache or ProductCache(PRODUCT_CACHE_SIZE, PRODUCT_CACHE_TTL_SECONDS)
    app.state.vision_client = vision_client or VisionClient()
    app.state.auth_client = auth_client or AuthClient()
    app.state.local_cart_store = LocalCartStore(redis_client)
    app.state.mutation_guard = MutationGuard(redis_client)
    app.state.session_store = SessionStore(secure_redis, redis_client)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(scan.router)
    app.include_router(carts.router)

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
