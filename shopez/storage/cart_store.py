# shopez/storage/cart_store.py

"""Per-user cart persistence in the realtime database (REST interface)."""

import urllib.parse
from collections.abc import Iterable

from curl_cffi import requests as curl_requests

from shopez.clients.base_client import BaseClient
from shopez.errors import ShopError, StoreError
from shopez.models.cart import (
    CartCollection,
    CartLine,
    collection_from_tree,
    line_from_record,
)
from shopez.models.session import Session
from shopez.storage.cart_stream import CartSubscription


class _StreamingResponse:
    """An event-stream response bound to its own curl session."""

    def __init__(
        self,
        session: curl_requests.Session,
        response: curl_requests.Response,
    ) -> None:
        self._session = session
        self._response = response

    def iter_lines(self) -> Iterable[bytes | str]:
        return self._response.iter_lines()

    def close(self) -> None:
        try:
            self._response.close()
        finally:
            self._session.close()


class RealtimeCartStore(BaseClient):
    """Reads and writes ``carts/{uid}/{productId}`` records.

    Every operation takes the caller's :class:`Session`; the user id
    scopes the path and the id token authorises the request.  The store
    offers no atomic increment, so read-modify-write sequences built on
    top of it can lose updates under concurrent writers.
    """

    def __init__(self, database_url: str | None = None) -> None:
        super().__init__("cart_store")
        self._base_url = (
            database_url or self.settings.FIREBASE_DATABASE_URL
        ).rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _error(
        self,
        message: str,
        retryable: bool = True,
        status_code: int | None = None,
    ) -> ShopError:
        if status_code in (401, 403):
            return StoreError(
                "You are not allowed to access this cart. "
                "Please log in again."
            )
        return StoreError(message)

    def _path_url(self, session: Session, product_id: int | None = None) -> str:
        uid = urllib.parse.quote(session.uid, safe="")
        path = f"{self.settings.CART_ROOT}/{uid}"
        if product_id is not None:
            path = f"{path}/{int(product_id)}"
        return self._url(f"{path}.json")

    @staticmethod
    def _auth(session: Session) -> dict[str, str]:
        return {"auth": session.id_token}

    def read_cart(self, session: Session) -> CartCollection:
        """One-shot read of the user's whole cart."""
        data = self._request_json(
            "GET", self._path_url(session), params=self._auth(session)
        )
        return collection_from_tree(data)

    def read_line(self, session: Session, product_id: int) -> CartLine | None:
        """Current line for *product_id*, or ``None`` when absent.

        A stored record without a usable quantity still counts as present
        and is read as quantity 1.
        """
        data = self._request_json(
            "GET",
            self._path_url(session, product_id),
            params=self._auth(session),
        )
        if data is None:
            return None
        return line_from_record(product_id, data, repair_quantity=True)

    def upsert_line(self, session: Session, line: CartLine) -> None:
        """Write the full line record, replacing whatever is stored."""
        if line.quantity <= 0:
            msg = f"refusing to store line {line.id} with quantity {line.quantity}"
            raise ValueError(msg)
        self._request_json(
            "PUT",
            self._path_url(session, line.id),
            params=self._auth(session),
            payload=line.to_record(),
        )
        self.logger.info(
            "[cart_store] uid=%s set line %d qty=%d",
            session.uid,
            line.id,
            line.quantity,
        )

    def update_quantity(
        self, session: Session, product_id: int, quantity: int
    ) -> None:
        """Merge-update only the quantity field of an existing line."""
        if quantity <= 0:
            msg = f"refusing to store line {product_id} with quantity {quantity}"
            raise ValueError(msg)
        self._request_json(
            "PATCH",
            self._path_url(session, product_id),
            params=self._auth(session),
            payload={"quantity": quantity},
        )
        self.logger.info(
            "[cart_store] uid=%s line %d qty=%d",
            session.uid,
            product_id,
            quantity,
        )

    def delete_line(self, session: Session, product_id: int) -> None:
        """Remove a line; deleting an absent line is not an error."""
        self._request_json(
            "DELETE",
            self._path_url(session, product_id),
            params=self._auth(session),
        )
        self.logger.info(
            "[cart_store] uid=%s removed line %d", session.uid, product_id
        )

    def open_stream(self, session: Session) -> _StreamingResponse:
        """Open the event stream for the user's cart on a dedicated session."""
        stream_session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        try:
            resp = stream_session.get(
                self._path_url(session),
                params=self._auth(session),
                headers={"Accept": "text/event-stream"},
                stream=True,
                timeout=None,
            )
        except Exception as exc:
            stream_session.close()
            raise StoreError("Could not load your cart.") from exc
        if resp.status_code != 200:
            status = resp.status_code
            resp.close()
            stream_session.close()
            self.logger.warning(
                "[cart_store] Stream for uid=%s answered HTTP %d",
                session.uid,
                status,
            )
            raise self._error(
                "Could not load your cart.", status_code=status
            )
        return _StreamingResponse(stream_session, resp)

    def subscribe(self, session: Session) -> CartSubscription:
        """Lazy, cancellable stream of snapshots of the user's cart."""
        return CartSubscription(
            lambda: self.open_stream(session), label=session.uid
        )
