# shopez/models/product.py

"""Catalog product model."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Rating:
    """Aggregate review score for a product."""

    rate: float
    count: int


@dataclass(frozen=True)
class Product:
    """A single catalog listing; read-only from the client's side."""

    id: int
    title: str
    price: float
    image: str = ""
    category: str = ""
    description: str = ""
    rating: Rating | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "Product":
        """Build a Product from one catalog JSON object.

        Raises ``KeyError``/``ValueError``/``TypeError`` when the item is
        not an object or its id or price is missing or malformed.
        """
        if not isinstance(item, dict):
            msg = f"expected a product object, got {type(item).__name__}"
            raise TypeError(msg)
        raw_rating: Any = item.get("rating")
        rating = None
        if isinstance(raw_rating, dict):
            rating = Rating(
                rate=float(raw_rating.get("rate", 0) or 0),
                count=int(raw_rating.get("count", 0) or 0),
            )
        price = float(item["price"])
        if price < 0:
            msg = f"negative price {price} for product {item.get('id')}"
            raise ValueError(msg)
        return cls(
            id=int(item["id"]),
            title=str(item.get("title", "")),
            price=price,
            image=str(item.get("image", "") or ""),
            category=str(item.get("category", "") or ""),
            description=str(item.get("description", "") or ""),
            rating=rating,
        )
