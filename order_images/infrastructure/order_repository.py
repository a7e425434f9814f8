from datetime import UTC, date, datetime, time

from loguru import logger

from order_images.domain.order import Order
from order_images.infrastructure.shopify_client import ShopifyRestClient


def _iso_millis(moment: datetime) -> str:
    """Format a UTC datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{moment.microsecond // 1000:03d}Z"


def day_window(day: date) -> tuple[str, str]:
    """Return the inclusive UTC bounds of ``day`` with millisecond precision."""
    start = datetime.combine(day, time.min, tzinfo=UTC)
    end = datetime.combine(day, time(23, 59, 59, 999_000), tzinfo=UTC)
    return _iso_millis(start), _iso_millis(end)


class OrderRepository:
    """Fetches open orders from the Shopify Admin REST API."""

    # Shopify's maximum page size for orders.json
    PAGE_SIZE = 250

    def __init__(
        self,
        client: ShopifyRestClient,
        page_size: int = PAGE_SIZE,
        early_exit: bool = True,
    ) -> None:
        self._client = client
        self._page_size = page_size
        self._early_exit = early_exit

    def fetch_by_date(self, day: date) -> list[Order]:
        """Return open orders created on ``day`` (UTC), from a single page.

        Only the first page is read. If more orders than the page size exist for
        the day, the rest are not returned.
        """
        created_at_min, created_at_max = day_window(day)
        params = {
            "status": "open",
            "created_at_min": created_at_min,
            "created_at_max": created_at_max,
            "limit": self._page_size,
        }

        page = self._client.fetch_orders_page(self._client.orders_url, params)
        orders = [self._map(raw) for raw in page.orders]

        if len(orders) >= self._page_size:
            logger.warning(
                f"Date {day.isoformat()} filled a whole page ({self._page_size} orders); "
                f"later orders for that day are not included"
            )
        logger.debug(f"Fetched {len(orders)} open order(s) created on {day.isoformat()}")
        return orders

    def fetch_by_range(self, start: int, end: int) -> list[Order]:
        """Return open orders with ``start <= order_number <= end``.

        Pages are followed through their ``rel="next"`` links. Shopify lists
        newest orders first, so once a page ends below ``start`` no later page
        can contain a match and traversal stops there (unless early exit is
        disabled).
        """
        collected: list[Order] = []
        url: str | None = self._client.orders_url
        params: dict | None = {"status": "open", "limit": self._page_size}
        pages = 0

        while url:
            page = self._client.fetch_orders_page(url, params)
            pages += 1
            # next links already carry the query string
            params = None

            if not page.orders:
                break

            orders = [self._map(raw) for raw in page.orders]
            collected.extend(orders)

            oldest = orders[-1].order_number
            logger.debug(
                f"Page {pages}: {len(orders)} order(s), oldest order number {oldest}"
            )
            if self._early_exit and oldest < start:
                logger.debug(f"Order number {oldest} is below {start}, stopping early")
                break

            url = page.next_url

        matching = [o for o in collected if start <= o.order_number <= end]
        logger.debug(
            f"Scanned {len(collected)} order(s) over {pages} page(s), "
            f"{len(matching)} within #{start}-#{end}"
        )
        return matching

    @staticmethod
    def _map(raw: dict) -> Order:
        """Map a raw REST order object to an ``Order`` domain object."""
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            created_at=raw["created_at"],
            name=raw.get("name"),
            fulfillment_status=raw.get("fulfillment_status"),
            line_items=[
                {
                    "product_id": item.get("product_id"),
                    "quantity": item.get("quantity") or 0,
                }
                for item in raw.get("line_items") or []
            ],
        )
