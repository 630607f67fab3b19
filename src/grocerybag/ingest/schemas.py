"""Pydantic schemas for normalized inventory data.

These are the shapes every retailer scraper produces and every caller
consumes. Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class Availability(str, Enum):
    """Stock state shown for a product."""

    IN_STOCK = "in-stock"
    OUT_OF_STOCK = "out-of-stock"
    LIMITED = "limited"


class _WireModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-ready wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Store(_WireModel):
    """A physical retailer location."""

    id: str
    name: str
    address: str
    distance: str | None = None


class Product(_WireModel):
    """A single sellable item discovered at one retailer."""

    id: str
    name: str
    price: str
    original_price: str | None = None
    image_url: str
    availability: Availability = Availability.IN_STOCK
    url: str
    category: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> str:
        """Trim surrounding whitespace; reject empty names."""
        name = str(v or "").strip()
        if not name:
            raise ValueError("product name must not be empty")
        return name

    @field_validator("image_url")
    @classmethod
    def require_absolute_image(cls, v: str) -> str:
        """Images must be absolute http(s) URLs."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"image URL must be absolute: {v!r}")
        return v


class InventoryResponse(_WireModel):
    """Result of one scrape: a store and the products found there."""

    query: str
    zip: str
    store: Store
    products: tuple[Product, ...] = ()
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field(alias="totalResults")  # type: ignore[prop-decorator]
    @property
    def total_results(self) -> int:
        """Number of products; always equal to len(products)."""
        return len(self.products)
