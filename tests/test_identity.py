import uuid

import pytest

from smartcart.domain.errors import AuthError
from smartcart.services.identity import (
    AnonymousIdentityResolver,
    AuthenticatedIdentityResolver,
    bearer_token,
    select_resolver,
)
from smartcart.utils.settings import DEMO_USER_ID
from tests.conftest import TOKEN, USER_ID


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc") == "abc"
    assert bearer_token("bearer  abc ") == "abc"
    assert bearer_token("Basic abc") is None
    assert bearer_token("Bearer ") is None
    assert bearer_token(None) is None


def test_authenticated_resolver(auth_client):
    resolver = select_resolver(f"Bearer {TOKEN}", None, auth_client)
    identity = resolver.resolve()

    assert isinstance(resolver, AuthenticatedIdentityResolver)
    assert identity.user_id == USER_ID
    assert not identity.anonymous
    assert identity.access_token == TOKEN


def test_invalid_token_is_rejected(auth_client):
    with pytest.raises(AuthError):
        select_resolver("Bearer nope", None, auth_client).resolve()


def test_device_id_becomes_anonymous_identity(auth_client):
    device_id = uuid.uuid4()
    resolver = select_resolver(None, str(device_id), auth_client)
    identity = resolver.resolve()

    assert isinstance(resolver, AnonymousIdentityResolver)
    assert identity.anonymous
    assert identity.user_id == device_id
    assert identity.access_token is None


@pytest.mark.parametrize("device_id", [None, "", "not-a-uuid"])
def test_falls_back_to_demo_user(device_id):
    identity = AnonymousIdentityResolver(device_id).resolve()
    assert identity.user_id == uuid.UUID(DEMO_USER_ID)
    assert identity.anonymous
