# shopez/errors.py

"""Exception taxonomy shared by the clients, services, and screens.

Every error carries a short ``title`` and a user-facing ``message`` so the
UI layer can surface it without knowing where it came from.
"""


class ShopError(Exception):
    """Base class for all ShopEZ failures shown to the user."""

    title: str = "Error"

    def __init__(self, message: str, title: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title


class NetworkError(ShopError):
    """Catalog fetch failed (transport, HTTP status, or parse)."""

    title = "Network error"

    def __init__(
        self,
        message: str,
        retryable: bool = True,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class StoreError(ShopError):
    """Cart read, write, or subscription against the realtime store failed."""

    title = "Cart error"


class ValidationError(ShopError):
    """A structural precondition (session, credentials) is missing."""

    title = "Validation"


class AuthError(ShopError):
    """The identity provider rejected a sign-in or registration."""

    def __init__(self, message: str, code: str = "") -> None:
        super().__init__(message)
        self.code = code
