from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LineItem(BaseModel):
    """One product/quantity pairing within an order."""

    model_config = ConfigDict(frozen=True)

    product_id: int | None = None  # None for custom (non-catalog) items
    quantity: int = Field(default=0, ge=0)


class Order(BaseModel):
    """Domain model representing an open Shopify order (REST Admin API shape)."""

    model_config = ConfigDict(frozen=True)

    id: int
    order_number: int  # e.g. 1001 for "#1001"
    created_at: datetime
    name: str | None = None
    fulfillment_status: str | None = None  # None while unfulfilled
    line_items: list[LineItem] = Field(default_factory=list)


class ProductImage(BaseModel):
    src: str | None = None


class Product(BaseModel):
    """Subset of the Shopify product resource needed to find its main image."""

    id: int | None = None
    title: str | None = None
    image: ProductImage | None = None

    @property
    def image_url(self) -> str | None:
        if self.image and self.image.src:
            return self.image.src
        return None
