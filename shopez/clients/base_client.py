# shopez/clients/base_client.py

"""Abstract base class for the JSON-over-HTTP service clients."""

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any

from curl_cffi import requests as curl_requests

from shopez.config.settings import Settings
from shopez.errors import NetworkError, ShopError


class BaseClient(ABC):
    """Shared session, timeout, and error translation for remote services.

    Requests are never retried; every failure is raised to the caller as
    the client's error type (see :meth:`_error`).
    """

    def __init__(self, service_name: str) -> None:
        self.service_name = service_name
        self.logger = logging.getLogger(f"shopez.{service_name}")
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT
        # One curl handle per client; requests go out one at a time
        self._lock = threading.Lock()

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Root URL that request paths are joined onto."""
        ...

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _error(
        self,
        message: str,
        retryable: bool = True,
        status_code: int | None = None,
    ) -> ShopError:
        """Build the exception raised for a failed request."""
        return NetworkError(
            message, retryable=retryable, status_code=status_code
        )

    def _send(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        payload: Any = None,
        headers: dict[str, str] | None = None,
    ) -> curl_requests.Response:
        """Issue one request; transport failures raise the client error.

        HTTP error statuses are returned as-is for the caller to inspect.
        """
        merged_headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            **(headers or {}),
        }
        try:
            with self._lock:
                resp = self.session.request(
                    method,
                    url,
                    params=params,
                    json=payload,
                    headers=merged_headers,
                    timeout=self._request_timeout,
                )
        except Exception as exc:
            self.logger.warning(
                "[%s] %s %s failed: %s",
                self.service_name,
                method,
                url.split("?", 1)[0],
                exc,
                exc_info=True,
            )
            raise self._error(
                f"Request to {self.service_name} failed: {exc}",
                retryable=True,
            ) from exc
        self.logger.debug(
            "[%s] %s %s -> HTTP %d",
            self.service_name,
            method,
            url.split("?", 1)[0],
            resp.status_code,
        )
        return resp

    def _decode(self, resp: curl_requests.Response) -> Any:
        """Parse a response body as JSON; an empty body decodes to None."""
        text = resp.text
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as exc:
            self.logger.error(
                "[%s] Unparseable response body: %.200s",
                self.service_name,
                text,
                exc_info=True,
            )
            raise self._error(
                f"Invalid response from {self.service_name}",
                retryable=False,
            ) from exc

    def _request_json(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        payload: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Non-2xx statuses raise; 5xx and 429 are marked retryable.
        """
        resp = self._send(
            method, url, params=params, payload=payload, headers=headers
        )
        if not 200 <= resp.status_code < 300:
            self.logger.warning(
                "[%s] HTTP %d for %s %s",
                self.service_name,
                resp.status_code,
                method,
                url.split("?", 1)[0],
            )
            retryable = (
                resp.status_code >= 500 or resp.status_code == 429
            )
            raise self._error(
                f"{self.service_name} answered HTTP {resp.status_code}",
                retryable=retryable,
                status_code=resp.status_code,
            )
        return self._decode(resp)
