# tests/test_cart_model.py

"""Tests for cart lines, snapshot parsing, and totals."""

import unittest

from shopez.models.cart import (
    CartLine,
    cart_total,
    collection_from_tree,
    line_from_record,
)
from shopez.models.product import Product


def _record(product_id: int, price: float, quantity: int) -> dict[str, object]:
    """Build a stored leaf record."""
    return {
        "id": product_id,
        "title": f"Product {product_id}",
        "image": f"https://example.com/{product_id}.jpg",
        "price": price,
        "quantity": quantity,
    }


class TestCartLine(unittest.TestCase):
    """CartLine construction and serialisation."""

    def test_from_product_snapshots_price(self) -> None:
        """A new line copies the product's price and starts at 1."""
        product = Product(
            id=5, title="Bracelet", price=19.99, image="img.jpg"
        )
        line = CartLine.from_product(product)
        self.assertEqual(line.id, 5)
        self.assertEqual(line.price, 19.99)
        self.assertEqual(line.quantity, 1)

    def test_to_record_matches_store_layout(self) -> None:
        """Records carry exactly id, title, image, price, quantity."""
        line = CartLine(id=5, title="T", image="i", price=1.5, quantity=2)
        self.assertEqual(
            line.to_record(),
            {"id": 5, "title": "T", "image": "i", "price": 1.5, "quantity": 2},
        )

    def test_with_quantity_returns_copy(self) -> None:
        """Changing quantity does not mutate the original line."""
        line = CartLine(id=5, title="T", image="i", price=1.5, quantity=2)
        bumped = line.with_quantity(3)
        self.assertEqual(bumped.quantity, 3)
        self.assertEqual(line.quantity, 2)

    def test_subtotal(self) -> None:
        line = CartLine(id=1, title="T", image="", price=2.5, quantity=4)
        self.assertEqual(line.subtotal, 10.0)


class TestLineFromRecord(unittest.TestCase):
    """Parsing individual stored records."""

    def test_valid_record(self) -> None:
        line = line_from_record("3", _record(3, 9.5, 2))
        assert line is not None
        self.assertEqual(line.id, 3)
        self.assertEqual(line.quantity, 2)

    def test_zero_quantity_dropped(self) -> None:
        """Lines with quantity <= 0 are never part of a cart."""
        self.assertIsNone(line_from_record(3, _record(3, 9.5, 0)))
        self.assertIsNone(line_from_record(3, _record(3, 9.5, -2)))

    def test_repair_reads_missing_quantity_as_one(self) -> None:
        record = _record(3, 9.5, 1)
        del record["quantity"]
        self.assertIsNone(line_from_record(3, record))
        line = line_from_record(3, record, repair_quantity=True)
        assert line is not None
        self.assertEqual(line.quantity, 1)

    def test_non_object_dropped(self) -> None:
        self.assertIsNone(line_from_record(3, "oops"))

    def test_key_wins_over_stored_id(self) -> None:
        """The collection key is the line's identity."""
        line = line_from_record(4, _record(99, 1.0, 1))
        assert line is not None
        self.assertEqual(line.id, 4)

    def test_malformed_price_dropped(self) -> None:
        record = _record(3, 1.0, 1)
        record["price"] = "free"
        self.assertIsNone(line_from_record(3, record))


class TestCollectionFromTree(unittest.TestCase):
    """Turning raw carts/{uid} values into collections."""

    def test_none_is_empty_cart(self) -> None:
        """Absent remote data is an empty cart, not an error."""
        self.assertEqual(collection_from_tree(None), {})

    def test_dict_keyed_by_product_id(self) -> None:
        cart = collection_from_tree(
            {"5": _record(5, 19.99, 1), "12": _record(12, 3.0, 2)}
        )
        self.assertEqual(sorted(cart), [5, 12])
        self.assertTrue(all(key == line.id for key, line in cart.items()))

    def test_sparse_array_form(self) -> None:
        """Small integer keys come back as arrays with null holes."""
        cart = collection_from_tree([None, _record(1, 2.0, 1), None, _record(3, 4.0, 2)])
        self.assertEqual(sorted(cart), [1, 3])
        self.assertEqual(cart[3].quantity, 2)

    def test_non_numeric_key_ignored(self) -> None:
        cart = collection_from_tree({"abc": _record(1, 1.0, 1)})
        self.assertEqual(cart, {})

    def test_scalar_payload_is_empty(self) -> None:
        self.assertEqual(collection_from_tree(42), {})


class TestCartTotal(unittest.TestCase):
    """Totals are recomputed from the whole collection."""

    def test_empty_total_is_zero(self) -> None:
        self.assertEqual(cart_total({}), 0.0)

    def test_sum_of_price_times_quantity(self) -> None:
        cart = collection_from_tree(
            {"1": _record(1, 19.99, 2), "2": _record(2, 5.0, 3)}
        )
        self.assertAlmostEqual(cart_total(cart), 19.99 * 2 + 5.0 * 3)

    def test_total_rounded_to_cents(self) -> None:
        cart = collection_from_tree({"1": _record(1, 0.1, 3)})
        self.assertEqual(cart_total(cart), 0.3)


if __name__ == "__main__":
    unittest.main()
