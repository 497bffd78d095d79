import uuid
from typing import Any, Dict

import fakeredis
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import smartcart.data.models  # noqa: F401
from smartcart.data.database import Base
from smartcart.data.seed import seed_products
from smartcart.domain.errors import AuthError, VisionApiError
from smartcart.services.catalog_service import CatalogService
from smartcart.services.identity import Identity
from smartcart.services.local_cart_store import LocalCartStore
from smartcart.services.mutation_guard import MutationGuard
from smartcart.services.product_cache import ProductCache

USER_ID = uuid.UUID("11111111-1111-4111-8111-111111111111")
OTHER_USER_ID = uuid.UUID("22222222-2222-4222-8222-222222222222")
TOKEN = "valid-token"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed_products(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def product_cache():
    return ProductCache(max_size=64, ttl_seconds=300)


@pytest.fixture
def catalog(db, product_cache):
    return CatalogService(db, product_cache)


@pytest.fixture
def local_store(redis_client):
    return LocalCartStore(redis_client)


@pytest.fixture
def guard(redis_client):
    # 0 wylacza debounce, testy guarda ustawiaja wlasny interwal
    return MutationGuard(redis_client, min_interval_ms=0)


@pytest.fixture
def user_identity():
    return Identity(user_id=USER_ID, anonymous=False, access_token=TOKEN)


class FakeAuthClient:
    """In-memory stand-in for the BaaS auth endpoints."""

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {
            TOKEN: {
                "id": str(USER_ID),
                "email": "shopper@example.com",
                "user_metadata": {"username": "shopper"},
                "created_at": "2024-01-01T00:00:00Z",
            }
        }
        self.passwords = {"shopper@example.com": "secret123"}
        self.signed_out = []

    def sign_up(self, email, password, username=None):
        if email in self.passwords:
            raise AuthError("User already registered")
        self.passwords[email] = password
        return {"id": str(uuid.uuid4()), "email": email, "user_metadata": {"username": username}}

    def sign_in_with_password(self, email, password):
        if self.passwords.get(email) != password:
            raise AuthError("Invalid login credentials")
        return {
            "access_token": TOKEN,
            "refresh_token": "refresh",
            "expires_in": 3600,
            "token_type": "bearer",
            "user": self.users[TOKEN],
        }

    def sign_out(self, access_token):
        self.signed_out.append(access_token)

    def get_user(self, access_token):
        if access_token not in self.users:
            raise AuthError("Invalid JWT")
        return self.users[access_token]


@pytest.fixture
def auth_client():
    return FakeAuthClient()


class StaticVisionClient:
    """Returns a canned annotate payload, or raises when given an exception."""

    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls = []

    def annotate(self, image_b64):
        self.calls.append(image_b64)
        if self.error is not None:
            raise self.error
        return self.response


def vision_payload(labels=(), best_guess=None, web_entities=()):
    web = {"webEntities": [{"description": d, "score": s} for d, s in web_entities]}
    if best_guess:
        web["bestGuessLabels"] = [{"label": best_guess}]
    return {
        "responses": [
            {
                "labelAnnotations": [{"description": d, "score": s} for d, s in labels],
                "webDetection": web,
            }
        ]
    }


@pytest.fixture
def failing_vision():
    return StaticVisionClient(error=VisionApiError("Vision API request failed: 503"))
