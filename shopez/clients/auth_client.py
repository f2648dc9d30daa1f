# shopez/clients/auth_client.py

"""Email/password identity client for the Firebase Auth REST API."""

import time
from typing import Any

from shopez.clients.base_client import BaseClient
from shopez.errors import AuthError, ShopError
from shopez.models.session import Session

# Provider error code -> message shown to the user
_ERROR_MESSAGES: dict[str, str] = {
    "EMAIL_NOT_FOUND": "No account found.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect email or password.",
    "USER_DISABLED": "This account has been disabled.",
    "EMAIL_EXISTS": "Email already in use.",
    "INVALID_EMAIL": "Invalid email.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": (
        "Too many attempts. Please try again later."
    ),
    "TOKEN_EXPIRED": "Your session has expired. Please log in again.",
    "INVALID_REFRESH_TOKEN": (
        "Your session has expired. Please log in again."
    ),
}


def auth_error_from_payload(payload: Any) -> AuthError:
    """Map an Identity Toolkit error body to an AuthError.

    Provider messages look like ``EMAIL_EXISTS`` or
    ``WEAK_PASSWORD : Password should be at least 6 characters``.
    """
    raw = ""
    if isinstance(payload, dict):
        err: Any = payload.get("error", {})
        if isinstance(err, dict):
            raw = str(err.get("message", ""))
    code, _, detail = raw.partition(" : ")
    code = code.strip()
    message = _ERROR_MESSAGES.get(code) or detail.strip() or raw
    return AuthError(message or "Authentication failed.", code=code)


class AuthClient(BaseClient):
    """Signs users in and out against the identity provider."""

    def __init__(self, api_key: str | None = None) -> None:
        super().__init__("auth")
        self.api_key = api_key or self.settings.FIREBASE_API_KEY

    @property
    def base_url(self) -> str:
        return self.settings.AUTH_BASE_URL

    def _error(
        self,
        message: str,
        retryable: bool = True,
        status_code: int | None = None,
    ) -> ShopError:
        return AuthError(message, code="NETWORK_ERROR")

    def _post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        resp = self._send(
            "POST", url, params={"key": self.api_key}, payload=payload
        )
        data = self._decode(resp)
        if resp.status_code != 200:
            error = auth_error_from_payload(data)
            self.logger.info(
                "[auth] Provider rejected request: %s (HTTP %d)",
                error.code or "unknown",
                resp.status_code,
            )
            raise error
        if not isinstance(data, dict):
            raise AuthError("Authentication failed.", code="BAD_RESPONSE")
        return data

    @staticmethod
    def _session_from(data: dict[str, Any]) -> Session:
        expires_in = float(data.get("expiresIn", 3600) or 3600)
        return Session(
            uid=str(data["localId"]),
            email=str(data.get("email", "")),
            id_token=str(data["idToken"]),
            refresh_token=str(data.get("refreshToken", "")),
            expires_at=time.time() + expires_in,
        )

    def sign_in(self, email: str, password: str) -> Session:
        """Exchange email and password for a session."""
        data = self._post(
            self._url("accounts:signInWithPassword"),
            {
                "email": email,
                "password": password,
                "returnSecureToken": True,
            },
        )
        session = self._session_from(data)
        self.logger.info("[auth] Signed in uid=%s", session.uid)
        return session

    def register(self, email: str, password: str) -> Session:
        """Create an account and return its first session."""
        data = self._post(
            self._url("accounts:signUp"),
            {
                "email": email,
                "password": password,
                "returnSecureToken": True,
            },
        )
        session = self._session_from(data)
        self.logger.info("[auth] Registered uid=%s", session.uid)
        return session

    def refresh(self, session: Session) -> Session:
        """Trade the refresh token for a new id token."""
        data = self._post(
            f"{self.settings.TOKEN_BASE_URL}/token",
            {
                "grant_type": "refresh_token",
                "refresh_token": session.refresh_token,
            },
        )
        expires_in = float(data.get("expires_in", 3600) or 3600)
        refreshed = Session(
            uid=str(data.get("user_id", session.uid)),
            email=session.email,
            id_token=str(data["id_token"]),
            refresh_token=str(
                data.get("refresh_token", session.refresh_token)
            ),
            expires_at=time.time() + expires_in,
        )
        self.logger.debug("[auth] Refreshed token for uid=%s", refreshed.uid)
        return refreshed
