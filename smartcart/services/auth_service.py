# smartcart/services/auth_service.py
import json
import uuid
from typing import Any, Dict

from smartcart.domain.errors import AuthError
from smartcart.domain.schemas import LoginIn, RegisterIn, SessionOut, UserOut
from smartcart.services.auth_client import AuthClient
from smartcart.services.session_store import SessionStore
from smartcart.utils.logging import get_logger

logger = get_logger(__name__)


def user_from_payload(user: Dict[str, Any], username: str | None = None) -> UserOut:
    email = user.get("email") or ""
    metadata = user.get("user_metadata") or {}
    return UserOut(
        id=uuid.UUID(str(user["id"])),
        email=email,
        username=username or metadata.get("username") or email.split("@")[0],
        created_at=user.get("created_at"),
        updated_at=user.get("last_sign_in_at"),
    )


def session_key(user_id: uuid.UUID) -> str:
    return f"session-{user_id}"


class AuthService:
    def __init__(self, auth_client: AuthClient, session_store: SessionStore):
        self.client = auth_client
        self.sessions = session_store

    def register(self, payload: RegisterIn) -> UserOut:
        data = self.client.sign_up(payload.email, payload.password, payload.username)
        # signup zwraca usera bezposrednio albo w polu "user"
        user = data.get("user") or data
        if not user.get("id"):
            raise AuthError("Registration failed, no user data returned")

        logger.info(f"Registered user {user['id']}")
        return user_from_payload(user, payload.username)

    def login(self, payload: LoginIn) -> SessionOut:
        data = self.client.sign_in_with_password(payload.email, payload.password)
        if not data.get("access_token") or not data.get("user"):
            raise AuthError("Login failed, no session returned")

        session = SessionOut(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
            token_type=data.get("token_type") or "bearer",
            user=user_from_payload(data["user"]),
        )
        self.sessions.set_item(session_key(session.user.id), session.model_dump_json())

        logger.info(f"User {session.user.id} logged in")
        return session

    def logout(self, access_token: str, user_id: uuid.UUID) -> None:
        try:
            self.client.sign_out(access_token)
        finally:
            self.sessions.remove_item(session_key(user_id))
        logger.info(f"User {user_id} logged out")

    def current_user(self, access_token: str) -> UserOut | None:
        try:
            user = self.client.get_user(access_token)
        except AuthError:
            return None
        if not user.get("id"):
            return None
        return user_from_payload(user)

    def current_session(self, user_id: uuid.UUID) -> SessionOut | None:
        raw = self.sessions.get_item(session_key(user_id))
        if not raw:
            return None
        try:
            return SessionOut.model_validate(json.loads(raw))
        except ValueError as e:
            logger.warning(f"Discarding unreadable stored session for {user_id}: {e}")
            return None
