# smartcart/services/auth_client.py
from typing import Any, Dict

import requests

from smartcart.domain.errors import AuthError, BackendError
from smartcart.utils.logging import get_logger
from smartcart.utils.retry import http_retry
from smartcart.utils.settings import HTTP_TIMEOUT_SECONDS, SUPABASE_ANON_KEY, SUPABASE_URL

logger = get_logger(__name__)


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if not isinstance(body, dict):
        return str(body)
    return body.get("msg") or body.get("error_description") or body.get("message") or body.get("error") or str(body)


class AuthClient:
    """Klient REST serwisu auth po stronie BaaS (signup, login haslem, logout, get user)."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url if base_url is not None else SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else SUPABASE_ANON_KEY
        self.timeout = timeout
        self.session = session or requests.Session()

        if not self.base_url or not self.api_key:
            logger.warning("Missing BaaS auth configuration (SUPABASE_URL / SUPABASE_ANON_KEY)")

    def _headers(self, access_token: str | None = None) -> Dict[str, str]:
        headers = {"apikey": self.api_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    @http_retry()
    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/auth/v1/{path}"
        logger.info(f"AuthClient {method} {url}")
        resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        # 4xx nie powtarzamy, oddajemy wolajacemu
        if resp.status_code >= 500 or resp.status_code == 429:
            resp.raise_for_status()
        return resp

    def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            resp = self._send(method, path, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Auth service request failed: {e}")
            raise BackendError(f"Auth service unavailable: {e}") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning(f"Auth service rejected {path}: {resp.status_code} {message}")
            raise AuthError(message)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise BackendError("Auth service returned a non-JSON body") from e

    def sign_up(self, email: str, password: str, username: str | None = None) -> Dict[str, Any]:
        payload = {"email": email, "password": password, "data": {"username": username}}
        return self._call("POST", "signup", json=payload, headers=self._headers())

    def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        return self._call(
            "POST",
            "token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._headers(),
        )

    def sign_out(self, access_token: str) -> None:
        self._call("POST", "logout", headers=self._headers(access_token))

    def get_user(self, access_token: str) -> Dict[str, Any]:
        return self._call("GET", "user", headers=self._headers(access_token))
