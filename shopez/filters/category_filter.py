# shopez/filters/category_filter.py

"""Client-side category filtering over the last-fetched catalog."""

import logging

from shopez.config.settings import Settings
from shopez.models.product import Product

logger = logging.getLogger("shopez.filters")

ALL_CATEGORIES: str = Settings.ALL_CATEGORIES


class CategoryFilter:
    """Derive the visible product list from a category selection."""

    @staticmethod
    def filter_by_category(
        products: list[Product],
        selection: str,
    ) -> list[Product]:
        """Return the products in *selection*, keeping catalog order.

        ``"all"`` returns every product unchanged.  No network access;
        filtering the same list twice with the same selection gives the
        same result.
        """
        if selection == ALL_CATEGORIES:
            return list(products)

        kept = [p for p in products if p.category == selection]
        logger.debug(
            "Category '%s' kept %d of %d products",
            selection,
            len(kept),
            len(products),
        )
        return kept

    @staticmethod
    def category_options(categories: list[str]) -> list[str]:
        """Selectable categories: ``"all"`` first, then the catalog's own."""
        options = [ALL_CATEGORIES]
        for category in categories:
            if category not in options:
                options.append(category)
        return options
