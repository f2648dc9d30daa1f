# tests/test_category_filter.py

"""Tests for CategoryFilter client-side catalog filtering."""

import unittest

from shopez.filters.category_filter import ALL_CATEGORIES, CategoryFilter
from shopez.models.product import Product


def _make_product(product_id: int, category: str) -> Product:
    """Create a minimal Product in the given category."""
    return Product(
        id=product_id, title=f"P{product_id}", price=10.0, category=category
    )


CATALOG = [
    _make_product(1, "men's clothing"),
    _make_product(2, "jewelery"),
    _make_product(3, "electronics"),
    _make_product(4, "jewelery"),
    _make_product(5, "men's clothing"),
]


class TestFilterByCategory(unittest.TestCase):
    """CategoryFilter.filter_by_category behaviour."""

    def test_all_returns_list_unchanged(self) -> None:
        """'all' keeps every product in catalog order."""
        result = CategoryFilter.filter_by_category(CATALOG, ALL_CATEGORIES)
        self.assertEqual(result, CATALOG)
        self.assertEqual(len(result), len(CATALOG))

    def test_all_returns_a_copy(self) -> None:
        """Callers may mutate the result without touching the source."""
        result = CategoryFilter.filter_by_category(CATALOG, ALL_CATEGORIES)
        self.assertIsNot(result, CATALOG)

    def test_selection_keeps_only_matching(self) -> None:
        """Every kept product is in the selected category."""
        result = CategoryFilter.filter_by_category(CATALOG, "jewelery")
        self.assertTrue(all(p.category == "jewelery" for p in result))

    def test_selection_omits_nothing(self) -> None:
        """No product in the selected category is dropped."""
        for category in {p.category for p in CATALOG}:
            with self.subTest(category=category):
                result = CategoryFilter.filter_by_category(CATALOG, category)
                expected = sum(1 for p in CATALOG if p.category == category)
                self.assertEqual(len(result), expected)

    def test_order_preserved(self) -> None:
        """The subsequence keeps the catalog's order."""
        result = CategoryFilter.filter_by_category(CATALOG, "men's clothing")
        self.assertEqual([p.id for p in result], [1, 5])

    def test_idempotent(self) -> None:
        """Filtering twice to the same selection gives the same output."""
        once = CategoryFilter.filter_by_category(CATALOG, "jewelery")
        twice = CategoryFilter.filter_by_category(once, "jewelery")
        self.assertEqual(once, twice)

    def test_unknown_category_is_empty(self) -> None:
        """Categories with no current products yield nothing."""
        self.assertEqual(
            CategoryFilter.filter_by_category(CATALOG, "garden"), []
        )

    def test_empty_catalog(self) -> None:
        self.assertEqual(
            CategoryFilter.filter_by_category([], "jewelery"), []
        )

    def test_match_is_exact(self) -> None:
        """Category comparison is exact, not case-folded."""
        self.assertEqual(
            CategoryFilter.filter_by_category(CATALOG, "Jewelery"), []
        )


class TestCategoryOptions(unittest.TestCase):
    """CategoryFilter.category_options behaviour."""

    def test_all_comes_first(self) -> None:
        options = CategoryFilter.category_options(["electronics", "jewelery"])
        self.assertEqual(options, ["all", "electronics", "jewelery"])

    def test_all_not_duplicated(self) -> None:
        options = CategoryFilter.category_options(["all", "electronics"])
        self.assertEqual(options, ["all", "electronics"])

    def test_empty_categories(self) -> None:
        self.assertEqual(CategoryFilter.category_options([]), ["all"])


if __name__ == "__main__":
    unittest.main()
