from loguru import logger

from order_images.domain.interfaces import IProductLookup
from order_images.domain.order import Order
from order_images.infrastructure.shopify_client import ItemResolutionError


class ImageResolver:
    """Turns orders into a flat list of product image URLs, one per unit ordered."""

    def __init__(self, products: IProductLookup) -> None:
        self._products = products

    def resolve(self, orders: list[Order]) -> list[str]:
        """Return image URLs in order/line-item order, repeated by quantity.

        Each product is looked up at most once per call. Products without an
        image are remembered as such; a failed lookup is logged and not
        remembered, so a later line item for the same product tries again.
        """
        cache: dict[int, str | None] = {}
        urls: list[str] = []

        for order in orders:
            for item in order.line_items:
                if not item.product_id:
                    continue

                if item.product_id in cache:
                    image_url = cache[item.product_id]
                else:
                    image_url = self._lookup(item.product_id, cache)

                if image_url:
                    urls.extend([image_url] * item.quantity)

        logger.debug(
            f"Resolved {len(urls)} image URL(s) from {len(cache)} distinct product(s)"
        )
        return urls

    def _lookup(self, product_id: int, cache: dict[int, str | None]) -> str | None:
        try:
            product = self._products.get_product(product_id)
        except ItemResolutionError as exc:
            logger.warning(f"Failed to fetch product {product_id}: {exc}")
            return None

        image_url = product.image_url if product else None
        cache[product_id] = image_url
        if image_url is None:
            logger.debug(f"Product {product_id} has no image")
        return image_url
