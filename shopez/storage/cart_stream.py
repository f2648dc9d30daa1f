# shopez/storage/cart_stream.py

"""Cancellable stream of cart snapshots from the realtime database.

The database pushes changes as server-sent events: ``put`` replaces the
value at a path, ``patch`` merges children into it.  Each event is applied
to a local copy of ``carts/{uid}`` and a full :data:`CartCollection` is
emitted, so consumers always see a complete point-in-time cart.
"""

import asyncio
import json
import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Protocol

from shopez.errors import StoreError
from shopez.models.cart import CartCollection, collection_from_tree

logger = logging.getLogger("shopez.cart_stream")


class EventSource(Protocol):
    """An open streaming HTTP response."""

    def iter_lines(self) -> Iterable[bytes | str]: ...

    def close(self) -> None: ...


def parse_event_stream(
    lines: Iterable[bytes | str],
) -> Iterator[tuple[str, str]]:
    """Group raw ``text/event-stream`` lines into (event, data) pairs."""
    event = ""
    data_parts: list[str] = []
    for raw in lines:
        line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        line = line.rstrip("\r\n")
        if not line:
            if event or data_parts:
                yield event or "message", "\n".join(data_parts)
            event = ""
            data_parts = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            event = value
        elif field == "data":
            data_parts.append(value)
    if event or data_parts:
        yield event or "message", "\n".join(data_parts)


def _normalize(value: Any) -> Any:
    """Arrays from the database are sparse child maps keyed by index."""
    if isinstance(value, list):
        return {
            str(i): item for i, item in enumerate(value) if item is not None
        }
    return value


def _set_path(tree: Any, keys: list[str], value: Any) -> Any:
    """Return *tree* with *value* written at *keys*; ``None`` deletes."""
    if not keys:
        return _normalize(value)
    node = _normalize(tree)
    node = dict(node) if isinstance(node, dict) else {}
    head, rest = keys[0], keys[1:]
    child = _set_path(node.get(head), rest, value)
    if child is None or child == {}:
        node.pop(head, None)
    else:
        node[head] = child
    return node or None


def apply_event(tree: Any, event: str, payload: dict[str, Any]) -> Any:
    """Apply one ``put`` or ``patch`` payload to the local tree."""
    keys = [k for k in str(payload.get("path", "/")).split("/") if k]
    data = payload.get("data")
    if event == "put":
        return _set_path(tree, keys, data)
    if event == "patch":
        if not isinstance(data, dict):
            return tree
        for child_path, value in data.items():
            child_keys = [k for k in str(child_path).split("/") if k]
            tree = _set_path(tree, keys + child_keys, value)
        return tree
    return tree


def fold_events(
    events: Iterable[tuple[str, str]],
) -> Iterator[CartCollection]:
    """Turn a stream of database events into full cart snapshots."""
    tree: Any = None
    for event, raw in events:
        if event == "keep-alive":
            continue
        if event in ("cancel", "auth_revoked"):
            logger.warning("Cart stream closed by server: %s %s", event, raw)
            raise StoreError(
                "Lost access to your cart. Please log in again."
            )
        if event not in ("put", "patch"):
            logger.debug("Ignoring cart stream event %r", event)
            continue
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise StoreError("Received a malformed cart update.") from exc
        if not isinstance(payload, dict):
            continue
        tree = apply_event(tree, event, payload)
        yield collection_from_tree(tree)


class CartSubscription:
    """Async iterator of cart snapshots with explicit cancellation.

    Nothing is opened until the first ``await`` on the iterator.  The
    blocking event stream is read on a daemon thread and snapshots are
    handed to the event loop.  After :meth:`cancel` no further snapshot
    is delivered, even one already queued.  A stream the server ends
    raises :class:`StoreError` instead of stopping quietly.  To restart,
    subscribe again.
    """

    def __init__(
        self,
        open_stream: Callable[[], EventSource],
        label: str = "",
    ) -> None:
        self._open_stream = open_stream
        self._label = label
        self._cancelled = threading.Event()
        self._source: EventSource | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[CartCollection | Exception | None] | None = None
        self._thread: threading.Thread | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def __aiter__(self) -> "CartSubscription":
        return self

    async def __anext__(self) -> CartCollection:
        if self._cancelled.is_set():
            raise StopAsyncIteration
        if self._queue is None:
            self._start()
        assert self._queue is not None
        item = await self._queue.get()
        if item is None or self._cancelled.is_set():
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item

    def _start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._thread = threading.Thread(
            target=self._pump,
            name=f"cart-stream-{self._label}",
            daemon=True,
        )
        self._thread.start()
        logger.info("Cart subscription started for %s", self._label)

    def _deliver(self, item: CartCollection | Exception | None) -> None:
        loop, queue = self._loop, self._queue
        if loop is None or queue is None:
            return
        try:
            loop.call_soon_threadsafe(queue.put_nowait, item)
        except RuntimeError:
            logger.debug("Event loop closed; dropping cart stream item")

    def _pump(self) -> None:
        try:
            self._source = self._open_stream()
            if self._cancelled.is_set():
                self._source.close()
                return
            events = parse_event_stream(self._source.iter_lines())
            for snapshot in fold_events(events):
                if self._cancelled.is_set():
                    break
                logger.debug(
                    "Cart snapshot for %s: %d lines",
                    self._label,
                    len(snapshot),
                )
                self._deliver(snapshot)
            if not self._cancelled.is_set():
                logger.warning(
                    "Cart stream for %s closed by server", self._label
                )
                self._deliver(
                    StoreError(
                        "Lost connection to your cart. "
                        "Please reopen it to refresh."
                    )
                )
        except StoreError as exc:
            if not self._cancelled.is_set():
                self._deliver(exc)
        except Exception as exc:
            if not self._cancelled.is_set():
                logger.error(
                    "Cart stream for %s failed: %s",
                    self._label,
                    exc,
                    exc_info=True,
                )
                error = StoreError("Could not load your cart.")
                error.__cause__ = exc
                self._deliver(error)
        finally:
            self._deliver(None)

    def cancel(self) -> None:
        """Stop delivery and release the remote listener."""
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        if self._source is not None:
            try:
                self._source.close()
            except Exception:
                logger.debug("Error closing cart stream", exc_info=True)
        if self._queue is not None:
            self._queue.put_nowait(None)
        logger.info("Cart subscription cancelled for %s", self._label)
