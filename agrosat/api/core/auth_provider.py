"""
Thin client for the hosted auth provider (Supabase GoTrue REST API)

Sign-up and sign-in are forwarded as-is; tokens are issued by the provider.
"""

from typing import Optional, Dict, Any
import logging
import requests

from agrosat.api.config import Settings

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """The auth provider rejected the request or could not be reached"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or f"HTTP {response.status_code}"
    )


class SupabaseAuthClient:
    """Forwards sign-up / sign-in to the provider's REST endpoints"""

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseAuthClient":
        return cls(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, timeout=settings.HTTP_TIMEOUT_SECONDS)

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "apikey": self.anon_key,
            "Content-Type": "application/json"
        }
        try:
            response = self.session.post(
                f"{self.url}{path}",
                json=payload,
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Auth provider unreachable: {e}")
            raise AuthProviderError("Auth provider unavailable", status_code=503)

        if response.status_code >= 400:
            raise AuthProviderError(_error_message(response), status_code=response.status_code)

        return response.json()

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> Dict[str, Any]:
        """
        Register a user

        Returns:
            Provider response (user and, when confirmation is off, a session)
        """
        return self._post("/auth/v1/signup", {
            "email": email,
            "password": password,
            "data": {"name": name}
        })

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """
        Password sign-in

        Returns:
            Session payload with access_token and user
        """
        return self._post("/auth/v1/token?grant_type=password", {
            "email": email,
            "password": password
        })
