# shopez/services/cart_sync.py

"""Cart intents (add, increase, decrease, remove) and the derived cart view.

Quantity policy: a stored line always has quantity >= 1.  Any change
that would take a line to zero deletes it instead.

Adding a product reads the current line and then writes ``quantity + 1``.
The store has no atomic increment, so two concurrent adds of the same
product can both read N and both write N + 1, losing one increment.  This
gap is known and intentionally left in place.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from shopez.errors import StoreError, ValidationError
from shopez.models.cart import CartCollection, CartLine, cart_total
from shopez.models.product import Product
from shopez.models.session import Session
from shopez.storage.cart_store import RealtimeCartStore
from shopez.storage.cart_stream import CartSubscription

logger = logging.getLogger("shopez.cart_sync")

ADD_FAILED_MESSAGE = "Could not add to cart. Please try again."
UPDATE_FAILED_MESSAGE = "Could not update your cart. Please try again."

ConfirmRemoval = Callable[[CartLine], Awaitable[bool]]


class CartStore(Protocol):
    """The slice of the cart store adapter the sync logic relies on."""

    def read_line(self, session: Session, product_id: int) -> CartLine | None: ...

    def upsert_line(self, session: Session, line: CartLine) -> None: ...

    def update_quantity(
        self, session: Session, product_id: int, quantity: int
    ) -> None: ...

    def delete_line(self, session: Session, product_id: int) -> None: ...

    def subscribe(self, session: Session) -> CartSubscription: ...


@dataclass(frozen=True)
class CartView:
    """Render-ready cart: lines in product-id order plus the total."""

    lines: list[CartLine]
    total: float

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


def view_from_snapshot(cart: CartCollection) -> CartView:
    """Build the view from one full snapshot; nothing carries over."""
    lines = [cart[key] for key in sorted(cart)]
    return CartView(lines=lines, total=cart_total(cart))


def next_quantity(current: int, change: int) -> int:
    """Quantity after applying *change*; <= 0 means the line goes away."""
    return current + change


def require_session(
    session: Session | None,
    message: str = "Please log in to add items to your cart.",
) -> Session:
    """Reject cart intents when nobody is signed in."""
    if session is None:
        logger.info("Cart intent rejected: no session")
        raise ValidationError(message, title="Login required")
    return session


class CartService:
    """Translates user intents into cart store mutations."""

    def __init__(self, store: CartStore | None = None) -> None:
        self.store: CartStore = store or RealtimeCartStore()

    async def add_to_cart(
        self, session: Session | None, product: Product
    ) -> CartLine:
        """Add one unit of *product*, creating the line if needed.

        Read and write failures both surface as one StoreError; nothing
        is reported as added unless the write succeeded.
        """
        active = require_session(session)
        try:
            existing = await asyncio.to_thread(
                self.store.read_line, active, product.id
            )
            if existing is None:
                line = CartLine.from_product(product, quantity=1)
                await asyncio.to_thread(
                    self.store.upsert_line, active, line
                )
            else:
                line = existing.with_quantity(
                    next_quantity(existing.quantity, 1)
                )
                await asyncio.to_thread(
                    self.store.update_quantity,
                    active,
                    product.id,
                    line.quantity,
                )
        except StoreError as exc:
            logger.error(
                "Add to cart failed for product %d: %s",
                product.id,
                exc,
                exc_info=True,
            )
            raise StoreError(ADD_FAILED_MESSAGE) from exc
        logger.info(
            "Product %d in cart with quantity %d", product.id, line.quantity
        )
        return line

    async def change_quantity(
        self, session: Session | None, line: CartLine, change: int
    ) -> CartLine | None:
        """Apply +/- *change* to a displayed line.

        Returns the updated line, or ``None`` when it was deleted because
        the quantity would have reached zero.
        """
        active = require_session(
            session, "Please log in to manage your cart."
        )
        quantity = next_quantity(line.quantity, change)
        try:
            if quantity <= 0:
                await asyncio.to_thread(
                    self.store.delete_line, active, line.id
                )
                logger.info("Line %d removed at quantity zero", line.id)
                return None
            await asyncio.to_thread(
                self.store.update_quantity, active, line.id, quantity
            )
        except StoreError as exc:
            logger.error(
                "Quantity change failed for line %d: %s",
                line.id,
                exc,
                exc_info=True,
            )
            raise StoreError(UPDATE_FAILED_MESSAGE) from exc
        return line.with_quantity(quantity)

    async def increase(
        self, session: Session | None, line: CartLine
    ) -> CartLine | None:
        return await self.change_quantity(session, line, 1)

    async def decrease(
        self, session: Session | None, line: CartLine
    ) -> CartLine | None:
        return await self.change_quantity(session, line, -1)

    async def remove(
        self,
        session: Session | None,
        line: CartLine,
        confirm: ConfirmRemoval,
    ) -> bool:
        """Delete a line after the user confirms; ``False`` if cancelled."""
        active = require_session(
            session, "Please log in to manage your cart."
        )
        if not await confirm(line):
            logger.debug("Removal of line %d cancelled", line.id)
            return False
        try:
            await asyncio.to_thread(self.store.delete_line, active, line.id)
        except StoreError as exc:
            logger.error(
                "Remove failed for line %d: %s", line.id, exc, exc_info=True
            )
            raise StoreError(UPDATE_FAILED_MESSAGE) from exc
        logger.info("Line %d removed", line.id)
        return True

    def subscribe(self, session: Session | None) -> CartSubscription:
        """Open the user's snapshot stream; cancel it when done."""
        active = require_session(
            session, "Please log in to view your cart."
        )
        return self.store.subscribe(active)

    async def watch(
        self, subscription: CartSubscription
    ) -> AsyncIterator[CartView]:
        """Recompute the cart view for every snapshot on *subscription*."""
        async for snapshot in subscription:
            yield view_from_snapshot(snapshot)
