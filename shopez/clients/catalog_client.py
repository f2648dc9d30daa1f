# shopez/clients/catalog_client.py

"""Client for the public, read-only product catalog API."""

from typing import Any

from shopez.clients.base_client import BaseClient
from shopez.models.product import Product


class CatalogClient(BaseClient):
    """Fetches products and categories from the catalog REST API.

    The catalog returns its complete product set in one response, so no
    pagination is attempted.  Results are not cached; callers keep their
    own in-memory copy for as long as they need it.
    """

    def __init__(self, base_url: str | None = None) -> None:
        super().__init__("catalog")
        self._base_url = (base_url or self.settings.CATALOG_BASE_URL).rstrip(
            "/"
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _parse_products(self, data: Any) -> list[Product]:
        if not isinstance(data, list):
            raise self._error(
                "Catalog returned an unexpected product payload",
                retryable=False,
            )
        try:
            return [Product.from_api(item) for item in data]
        except (KeyError, TypeError, ValueError) as exc:
            self.logger.error(
                "[catalog] Malformed product in listing: %s",
                exc,
                exc_info=True,
            )
            raise self._error(
                "Catalog returned a malformed product", retryable=False
            ) from exc

    def fetch_all_products(self) -> list[Product]:
        """GET /products; raises NetworkError on any failure."""
        data = self._request_json("GET", self._url("products"))
        products = self._parse_products(data)
        self.logger.info("[catalog] Fetched %d products", len(products))
        return products

    def fetch_product(self, product_id: int) -> Product | None:
        """GET /products/{id}; ``None`` when the catalog has no such id."""
        data = self._request_json(
            "GET", self._url(f"products/{int(product_id)}")
        )
        if not data:
            self.logger.info("[catalog] Product %s not found", product_id)
            return None
        if not isinstance(data, dict):
            raise self._error(
                "Catalog returned an unexpected product payload",
                retryable=False,
            )
        try:
            return Product.from_api(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise self._error(
                f"Catalog returned a malformed product {product_id}",
                retryable=False,
            ) from exc

    def fetch_categories(self) -> list[str]:
        """GET /products/categories; raises NetworkError on any failure."""
        data = self._request_json(
            "GET", self._url("products/categories")
        )
        if not isinstance(data, list):
            raise self._error(
                "Catalog returned an unexpected category payload",
                retryable=False,
            )
        categories = [str(c) for c in data]
        self.logger.info(
            "[catalog] Fetched %d categories", len(categories)
        )
        return categories
