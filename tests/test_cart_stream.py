# tests/test_cart_stream.py

"""Tests for event-stream parsing, tree folding, and CartSubscription."""

import asyncio
import json
import threading
import unittest
from typing import Any

from shopez.errors import StoreError
from shopez.storage.cart_stream import (
    CartSubscription,
    apply_event,
    fold_events,
    parse_event_stream,
)


def _line(pid: int, qty: int = 1, price: float = 10.0) -> dict[str, Any]:
    return {
        "id": pid,
        "title": f"Item {pid}",
        "image": "",
        "price": price,
        "quantity": qty,
    }


def _sse(event: str, path: str, data: Any) -> list[bytes]:
    payload = json.dumps({"path": path, "data": data})
    return [
        f"event: {event}".encode(),
        f"data: {payload}".encode(),
        b"",
    ]


class FakeSource:
    """Event source that replays scripted lines, then optionally blocks."""

    def __init__(self, lines: list[bytes], hold_open: bool = False) -> None:
        self.lines = lines
        self.hold_open = hold_open
        self.closed = threading.Event()

    def iter_lines(self):
        yield from self.lines
        if self.hold_open:
            self.closed.wait(timeout=5)

    def close(self) -> None:
        self.closed.set()


class TestParseEventStream(unittest.TestCase):
    """Raw lines group into (event, data) pairs."""

    def test_groups_events(self) -> None:
        lines = [
            b"event: put",
            b'data: {"path": "/", "data": null}',
            b"",
            "event: keep-alive",
            "data: null",
            "",
        ]
        self.assertEqual(
            list(parse_event_stream(lines)),
            [
                ("put", '{"path": "/", "data": null}'),
                ("keep-alive", "null"),
            ],
        )

    def test_ignores_comments_and_flushes_tail(self) -> None:
        lines = [": heartbeat", "event: patch", 'data: {"a": 1}']
        self.assertEqual(
            list(parse_event_stream(lines)), [("patch", '{"a": 1}')]
        )


class TestApplyEvent(unittest.TestCase):
    """put replaces, patch merges, null deletes."""

    def test_root_put_replaces_tree(self) -> None:
        tree = apply_event({"1": _line(1)}, "put", {"path": "/", "data": {"2": _line(2)}})
        self.assertEqual(list(tree), ["2"])

    def test_child_put_and_delete(self) -> None:
        tree = apply_event(None, "put", {"path": "/5", "data": _line(5)})
        self.assertEqual(tree, {"5": _line(5)})
        tree = apply_event(tree, "put", {"path": "/5", "data": None})
        self.assertIsNone(tree)

    def test_patch_merges_quantity(self) -> None:
        tree = {"5": _line(5, qty=1)}
        tree = apply_event(tree, "patch", {"path": "/5", "data": {"quantity": 3}})
        self.assertEqual(tree["5"]["quantity"], 3)
        self.assertEqual(tree["5"]["title"], "Item 5")

    def test_array_root_is_normalised(self) -> None:
        tree = apply_event(None, "put", {"path": "/", "data": [None, _line(1)]})
        self.assertEqual(tree, {"1": _line(1)})


class TestFoldEvents(unittest.TestCase):
    """Each data event yields a complete snapshot."""

    def test_snapshots_follow_events(self) -> None:
        events = [
            ("put", json.dumps({"path": "/", "data": None})),
            ("keep-alive", "null"),
            ("put", json.dumps({"path": "/5", "data": _line(5, price=19.99)})),
            ("patch", json.dumps({"path": "/5", "data": {"quantity": 2}})),
            ("put", json.dumps({"path": "/5", "data": None})),
        ]
        snapshots = list(fold_events(events))
        self.assertEqual(len(snapshots), 4)
        self.assertEqual(snapshots[0], {})
        self.assertEqual(snapshots[1][5].quantity, 1)
        self.assertEqual(snapshots[2][5].quantity, 2)
        self.assertEqual(snapshots[3], {})

    def test_revoked_access_raises(self) -> None:
        events = [("auth_revoked", "credential is no longer valid")]
        with self.assertRaises(StoreError):
            list(fold_events(events))

    def test_malformed_payload_raises(self) -> None:
        with self.assertRaises(StoreError):
            list(fold_events([("put", "{not json")]))


class TestCartSubscription(unittest.IsolatedAsyncioTestCase):
    """Lazy start, ordered delivery, and cancellation."""

    async def test_nothing_opened_until_iterated(self) -> None:
        opened: list[FakeSource] = []

        def open_stream() -> FakeSource:
            source = FakeSource(_sse("put", "/", None), hold_open=True)
            opened.append(source)
            return source

        subscription = CartSubscription(open_stream)
        await asyncio.sleep(0)
        self.assertEqual(opened, [])
        first = await asyncio.wait_for(subscription.__anext__(), timeout=5)
        self.assertEqual(first, {})
        self.assertEqual(len(opened), 1)
        subscription.cancel()

    async def test_delivers_snapshots_in_order(self) -> None:
        lines = (
            _sse("put", "/", {"5": _line(5, qty=1)})
            + _sse("patch", "/5", {"quantity": 2})
        )
        subscription = CartSubscription(
            lambda: FakeSource(lines, hold_open=True)
        )
        quantities = []
        for _ in range(2):
            snapshot = await asyncio.wait_for(subscription.__anext__(), timeout=5)
            quantities.append(snapshot[5].quantity)
        subscription.cancel()
        self.assertEqual(quantities, [1, 2])

    async def test_server_closing_stream_raises(self) -> None:
        """A stream that ends without cancel() is reported, not silent."""
        subscription = CartSubscription(
            lambda: FakeSource(_sse("put", "/", None))
        )
        snapshots = []
        with self.assertRaises(StoreError) as ctx:
            async for snapshot in subscription:
                snapshots.append(snapshot)
        self.assertEqual(snapshots, [{}])
        self.assertIn("Lost connection", ctx.exception.message)

    async def test_cancel_stops_delivery_and_closes_source(self) -> None:
        source = FakeSource(_sse("put", "/", {"5": _line(5)}), hold_open=True)
        subscription = CartSubscription(lambda: source)

        first = await asyncio.wait_for(subscription.__anext__(), timeout=5)
        self.assertIn(5, first)

        subscription.cancel()
        self.assertTrue(subscription.cancelled)
        self.assertTrue(source.closed.is_set())
        with self.assertRaises(StopAsyncIteration):
            await asyncio.wait_for(subscription.__anext__(), timeout=5)

    async def test_stream_error_is_raised_to_consumer(self) -> None:
        def open_stream() -> FakeSource:
            raise StoreError("Could not load your cart.")

        subscription = CartSubscription(open_stream)
        with self.assertRaises(StoreError):
            async for _ in subscription:
                pass

    async def test_unexpected_error_becomes_store_error(self) -> None:
        def open_stream() -> FakeSource:
            raise OSError("socket closed")

        subscription = CartSubscription(open_stream)
        with self.assertRaises(StoreError) as ctx:
            await asyncio.wait_for(subscription.__anext__(), timeout=5)
        self.assertIsInstance(ctx.exception.__cause__, OSError)


if __name__ == "__main__":
    unittest.main()
