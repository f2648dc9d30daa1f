# shopez/models/cart.py

"""Cart line model and the per-user cart collection."""

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any

from shopez.models.product import Product

logger = logging.getLogger("shopez.cart")


@dataclass(frozen=True)
class CartLine:
    """One product's quantity record within a user's cart.

    ``price`` is a snapshot taken when the product was first added, not a
    live reference to the catalog.
    """

    id: int
    title: str
    image: str
    price: float
    quantity: int = 1

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartLine":
        """Snapshot a catalog product into a new cart line."""
        return cls(
            id=product.id,
            title=product.title,
            image=product.image,
            price=product.price,
            quantity=quantity,
        )

    def with_quantity(self, quantity: int) -> "CartLine":
        """Return a copy of this line with a different quantity."""
        return replace(self, quantity=quantity)

    @property
    def subtotal(self) -> float:
        """Line price multiplied by quantity."""
        return self.price * self.quantity

    def to_record(self) -> dict[str, Any]:
        """Serialise to the leaf object stored under ``carts/{uid}/{id}``."""
        return asdict(self)


# Product id -> line; key always equals the contained line's id
CartCollection = dict[int, CartLine]


def line_from_record(
    key: int | str,
    record: Any,
    repair_quantity: bool = False,
) -> CartLine | None:
    """Parse one stored leaf record, keyed by its product id.

    Returns ``None`` for records that are not objects or that carry a
    non-positive quantity; such lines are never part of a cart.  With
    *repair_quantity* a present record whose quantity is missing or
    invalid is read as quantity 1 instead of being dropped.
    """
    if not isinstance(record, dict):
        return None
    product_id = int(key)
    stored_id = record.get("id")
    if stored_id is not None and str(stored_id) != str(product_id):
        logger.warning(
            "Cart record under key %s carries id %s; using the key",
            product_id,
            stored_id,
        )
    try:
        price = float(record.get("price", 0) or 0)
    except (TypeError, ValueError):
        logger.debug(
            "Dropped malformed cart record %s: %r", product_id, record
        )
        return None
    try:
        quantity = int(record.get("quantity", 0) or 0)
    except (TypeError, ValueError):
        quantity = 0
    if quantity <= 0:
        if repair_quantity:
            logger.warning(
                "Cart record %s has no valid quantity; reading it as 1",
                product_id,
            )
            quantity = 1
        else:
            logger.debug(
                "Dropped cart record %s with quantity %r",
                product_id,
                record.get("quantity"),
            )
            return None
    return CartLine(
        id=product_id,
        title=str(record.get("title", "")),
        image=str(record.get("image", "") or ""),
        price=price,
        quantity=quantity,
    )


def collection_from_tree(tree: Any) -> CartCollection:
    """Convert a raw ``carts/{uid}`` value into a CartCollection.

    Absent data (``None``) is an empty cart.  The realtime database
    returns child maps whose keys are small integers as JSON arrays with
    ``null`` holes, so both list and dict shapes are accepted.
    """
    if tree is None:
        return {}
    if isinstance(tree, list):
        items: list[tuple[int | str, Any]] = list(enumerate(tree))
    elif isinstance(tree, dict):
        items = list(tree.items())
    else:
        logger.warning(
            "Unexpected cart payload type %s; treating as empty",
            type(tree).__name__,
        )
        return {}

    cart: CartCollection = {}
    for key, record in items:
        try:
            line = line_from_record(key, record)
        except ValueError:
            logger.warning("Ignoring non-numeric cart key %r", key)
            continue
        if line is not None:
            cart[line.id] = line
    return cart


def cart_total(cart: CartCollection) -> float:
    """Sum of price * quantity over every line, rounded to cents.

    Always computed from the full collection; an empty cart totals 0.0.
    """
    return round(sum(line.subtotal for line in cart.values()), 2)
