from loguru import logger

from order_images.application.order_service import OrderService
from order_images.domain.interfaces import IArchiveStreamer, IImageResolver
from order_images.domain.order import Order
from order_images.domain.request import BundleResponse, DateRequest, OrderRangeRequest
from order_images.shared.decorators import timed

NO_ORDERS_MESSAGE = "No unfulfilled orders found for the selected criteria."
NO_IMAGES_MESSAGE = "No product images found in these unfulfilled orders."


class Executor:
    """Fetches open orders, resolves their product images and bundles them."""

    def __init__(
        self,
        order_service: OrderService,
        image_resolver: IImageResolver,
        archive_streamer: IArchiveStreamer,
    ) -> None:
        self._order_service = order_service
        self._image_resolver = image_resolver
        self._archive_streamer = archive_streamer

    @timed
    def run(self, request: DateRequest | OrderRangeRequest) -> BundleResponse:
        orders: list[Order] = self._order_service.get_open_orders(request)
        if not orders:
            logger.info("No matching open orders, nothing to bundle.")
            return BundleResponse(message=NO_ORDERS_MESSAGE)
        logger.info(f"Found {len(orders)} open order(s), resolving product images.")

        for order in orders:
            logger.debug(
                f"{order.name or f'#{order.order_number}'} | {order.fulfillment_status} | "
                f"{order.created_at.isoformat()} | {len(order.line_items)} line item(s)"
            )

        image_urls = self._image_resolver.resolve(orders)
        if not image_urls:
            logger.info("Orders reference no product images, nothing to bundle.")
            return BundleResponse(message=NO_IMAGES_MESSAGE)

        upload = self._archive_streamer.stream(image_urls)
        logger.info(f"Done. Archive available at: {upload.download_url}")
        return BundleResponse(
            message=(
                f"Successfully bundled {upload.entry_count} images. "
                f"Your download is ready."
            ),
            download_url=upload.download_url,
        )
