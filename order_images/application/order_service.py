from loguru import logger

from order_images.domain.interfaces import IOrderRepository
from order_images.domain.order import Order
from order_images.domain.request import DateRequest, OrderRangeRequest


class OrderService:
    """Application service selecting open orders for a bundling request."""

    def __init__(self, repository: IOrderRepository) -> None:
        self._repository = repository

    def get_open_orders(self, request: DateRequest | OrderRangeRequest) -> list[Order]:
        """Return the open orders matched by ``request``'s selection mode."""
        match request:
            case DateRequest(date=day):
                logger.info(f"Fetching open orders created on {day.isoformat()}…")
                return self._repository.fetch_by_date(day)
            case OrderRangeRequest(start=start, end=end):
                logger.info(f"Fetching open orders #{start} to #{end}…")
                return self._repository.fetch_by_range(start, end)
        raise TypeError(f"Unsupported request: {request!r}")
