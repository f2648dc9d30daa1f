# shopez/services/catalog_browser.py

"""Home-screen catalog state: full list, categories, and the filtered view."""

import asyncio
import logging
from dataclasses import dataclass, field

from shopez.clients.catalog_client import CatalogClient
from shopez.errors import NetworkError
from shopez.filters.category_filter import ALL_CATEGORIES, CategoryFilter
from shopez.models.product import Product

logger = logging.getLogger("shopez.catalog")

FETCH_FAILED_MESSAGE = "Failed to fetch products"


@dataclass
class CatalogState:
    """Everything the catalog screen renders."""

    all_products: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    products: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    categories: list[str] = field(
        default_factory=lambda: [ALL_CATEGORIES]
    )
    selection: str = ALL_CATEGORIES
    loading: bool = False
    error: str | None = None
    retryable: bool = False


class CatalogBrowser:
    """Loads the catalog once per screen and filters it locally.

    Products and categories come from two independent requests and may
    disagree (a category with no products is shown anyway).
    """

    def __init__(self, client: CatalogClient | None = None) -> None:
        self.client = client or CatalogClient()
        self.state = CatalogState()

    async def load(self) -> CatalogState:
        """Fetch products and categories concurrently.

        A product failure puts the screen in an error state; a category
        failure only leaves the "all" option.
        """
        self.state.loading = True
        self.state.error = None
        self.state.retryable = False

        products_result, categories_result = await asyncio.gather(
            asyncio.to_thread(self.client.fetch_all_products),
            asyncio.to_thread(self.client.fetch_categories),
            return_exceptions=True,
        )

        if isinstance(categories_result, BaseException):
            logger.error(
                "Category fetch failed: %s",
                categories_result,
                exc_info=categories_result,
            )
            self.state.categories = [ALL_CATEGORIES]
        else:
            self.state.categories = CategoryFilter.category_options(
                categories_result
            )

        if isinstance(products_result, NetworkError):
            logger.error("Product fetch failed: %s", products_result)
            self.state.all_products = []
            self.state.products = []
            self.state.error = FETCH_FAILED_MESSAGE
            self.state.retryable = products_result.retryable
        elif isinstance(products_result, BaseException):
            self.state.loading = False
            raise products_result
        else:
            self.state.all_products = products_result
            self.state.products = CategoryFilter.filter_by_category(
                products_result, self.state.selection
            )

        self.state.loading = False
        return self.state

    async def retry(self) -> CatalogState:
        """Re-run the initial load after an error."""
        logger.info("Retrying catalog load")
        return await self.load()

    def select(self, category: str) -> list[Product]:
        """Switch the category and re-filter the held list (no fetch)."""
        self.state.selection = category
        self.state.products = CategoryFilter.filter_by_category(
            self.state.all_products, category
        )
        return self.state.products

    async def load_product(self, product_id: int) -> Product | None:
        """Fetch one product for the detail view."""
        return await asyncio.to_thread(
            self.client.fetch_product, product_id
        )
