from typing import NamedTuple

import httpx
from pydantic import ValidationError

from order_images.domain.order import Product
from order_images.shared.decorators import log_errors


class UpstreamError(Exception):
    """Raised when a Shopify order-list request returns a non-2xx response."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        message = f"Shopify API error {status_code}"
        if detail:
            message += f". Details: {detail}"
        super().__init__(message)


class ItemResolutionError(Exception):
    """Raised when a single product lookup or image download fails."""


class OrdersPage(NamedTuple):
    orders: list[dict]
    next_url: str | None


class ShopifyRestClient:
    """Thin httpx wrapper for the Shopify Admin REST API."""

    def __init__(
        self,
        client: httpx.Client,
        shop_name: str,
        access_token: str,
        api_version: str,
    ) -> None:
        self._client = client
        self._base_url = (
            f"https://{shop_name}.myshopify.com/admin/api/{api_version}"
        )
        self._headers = {"X-Shopify-Access-Token": access_token}

    @property
    def orders_url(self) -> str:
        return f"{self._base_url}/orders.json"

    def product_url(self, product_id: int) -> str:
        return f"{self._base_url}/products/{product_id}.json"

    @log_errors
    def fetch_orders_page(self, url: str, params: dict | None = None) -> OrdersPage:
        """GET one page of orders and the URL of the page after it.

        ``url`` is either :attr:`orders_url` (first page, with ``params``) or a
        ``rel="next"`` link from a previous page, which already carries its own
        query string.

        Raises:
            UpstreamError: on non-2xx HTTP responses.
        """
        response = self._client.get(url, headers=self._headers, params=params)

        if not response.is_success:
            raise UpstreamError(response.status_code, response.text)

        orders: list[dict] = response.json().get("orders") or []
        next_url = response.links.get("next", {}).get("url")
        return OrdersPage(orders=orders, next_url=next_url)

    def get_product(self, product_id: int) -> Product | None:
        """Look up a product; ``None`` when the response carries no product object.

        Raises:
            ItemResolutionError: on non-2xx responses, transport failures, or a
                body that is not a product.
        """
        try:
            response = self._client.get(
                self.product_url(product_id), headers=self._headers
            )
        except httpx.HTTPError as exc:
            raise ItemResolutionError(
                f"product {product_id}: {type(exc).__name__}: {exc}"
            ) from exc

        if not response.is_success:
            raise ItemResolutionError(
                f"product {product_id}: HTTP {response.status_code}"
            )

        try:
            raw = response.json().get("product")
            return Product.model_validate(raw) if raw else None
        except (ValueError, AttributeError, ValidationError) as exc:
            raise ItemResolutionError(
                f"product {product_id}: unreadable body ({exc})"
            ) from exc
