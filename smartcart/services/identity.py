# smartcart/services/identity.py
"""
Kto wykonuje operacje na koszyku.
Wariant wybierany raz na poczatku sesji (requestu), dalej kod patrzy tylko na Identity.anonymous.
"""
import uuid
from dataclasses import dataclass

from smartcart.domain.errors import AuthError
from smartcart.services.auth_client import AuthClient
from smartcart.utils.settings import DEMO_USER_ID


@dataclass(frozen=True)
class Identity:
    user_id: uuid.UUID
    anonymous: bool
    access_token: str | None = None


class IdentityResolver:
    def resolve(self) -> Identity:
        raise NotImplementedError


class AuthenticatedIdentityResolver(IdentityResolver):
    def __init__(self, auth_client: AuthClient, access_token: str):
        self.auth_client = auth_client
        self.access_token = access_token

    def resolve(self) -> Identity:
        user = self.auth_client.get_user(self.access_token)
        if not user.get("id"):
            raise AuthError("Session token did not resolve to a user")
        return Identity(user_id=uuid.UUID(str(user["id"])), anonymous=False, access_token=self.access_token)


class AnonymousIdentityResolver(IdentityResolver):
    """Lokalna tozsamosc: id urzadzenia jesli to poprawny UUID, inaczej wspolny demo user."""

    def __init__(self, device_id: str | None = None, demo_user_id: str = DEMO_USER_ID):
        self.device_id = device_id
        self.demo_user_id = demo_user_id

    def resolve(self) -> Identity:
        try:
            user_id = uuid.UUID(self.device_id) if self.device_id else uuid.UUID(self.demo_user_id)
        except ValueError:
            user_id = uuid.UUID(self.demo_user_id)
        return Identity(user_id=user_id, anonymous=True)


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def select_resolver(
    authorization: str | None,
    device_id: str | None,
    auth_client: AuthClient,
) -> IdentityResolver:
    token = bearer_token(authorization)
    if token:
        return AuthenticatedIdentityResolver(auth_client, token)
    return AnonymousIdentityResolver(device_id)
