"""Request handler shell: validates one invocation and maps outcomes to HTTP statuses."""

import httpx
from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from order_images.application.archive_streamer import ArchiveStreamer
from order_images.application.image_resolver import ImageResolver
from order_images.application.order_service import OrderService
from order_images.domain.interfaces import IStorageSink
from order_images.domain.request import (
    DateRequest,
    OrderRangeRequest,
    bundle_request_adapter,
)
from order_images.entrypoints.executor import Executor
from order_images.entrypoints.settings import Config, ConfigurationError, load_config
from order_images.infrastructure.blob_store import LocalBlobStore
from order_images.infrastructure.order_repository import OrderRepository
from order_images.infrastructure.shopify_client import ShopifyRestClient, UpstreamError

_TAG_ERRORS = {"union_tag_invalid", "union_tag_not_found"}


class ValidationError(Exception):
    """Raised for an unsupported method or a malformed / unknown request body."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class HandlerResponse(BaseModel):
    status_code: int
    body: dict


def parse_request(
    method: str, body: str | bytes | dict | None
) -> DateRequest | OrderRangeRequest:
    """Validate the HTTP method and body of an invocation.

    Raises:
        ValidationError: 405 for non-POST methods, 400 for anything wrong with the body.
    """
    if method.upper() != "POST":
        raise ValidationError("Method Not Allowed", status_code=405)
    if not body:
        raise ValidationError("Request body is required.")

    try:
        if isinstance(body, dict):
            return bundle_request_adapter.validate_python(body)
        return bundle_request_adapter.validate_json(body)
    except PydanticValidationError as exc:
        errors = exc.errors()
        if any(err["type"] in _TAG_ERRORS for err in errors):
            raise ValidationError("Invalid request type.") from exc
        if any(err["type"] == "json_invalid" for err in errors):
            raise ValidationError("Request body is not valid JSON.") from exc
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in errors
        )
        raise ValidationError(f"Invalid request: {details}") from exc


def build_http_client(
    config: Config, transport: httpx.BaseTransport | None = None
) -> httpx.Client:
    timeout = httpx.Timeout(config.HTTP_TIMEOUT_SECONDS, connect=10.0)
    return httpx.Client(timeout=timeout, transport=transport)


def build_executor(
    config: Config,
    http_client: httpx.Client,
    sink: IStorageSink | None = None,
) -> Executor:
    # --- Shopify layer ---
    shopify_client = ShopifyRestClient(
        client=http_client,
        shop_name=config.SHOPIFY_STORE_NAME,
        access_token=config.ADMIN_API_ACCESS_TOKEN,
        api_version=config.API_VERSION,
    )
    order_service = OrderService(
        OrderRepository(
            shopify_client,
            page_size=config.ORDERS_PAGE_LIMIT,
            early_exit=config.RANGE_EARLY_EXIT,
        )
    )

    # --- Storage layer ---
    if sink is None:
        store = LocalBlobStore(config.BLOB_STORE_DIR, config.BLOB_BASE_URL)
        store.purge_expired()
        sink = store

    return Executor(
        order_service=order_service,
        image_resolver=ImageResolver(shopify_client),
        archive_streamer=ArchiveStreamer(
            http_client, sink, ttl_seconds=config.ARCHIVE_TTL_SECONDS
        ),
    )


def handle_request(
    method: str,
    body: str | bytes | dict | None,
    *,
    config: Config | None = None,
    transport: httpx.BaseTransport | None = None,
    sink: IStorageSink | None = None,
) -> HandlerResponse:
    """Run one bundling invocation and return the status code and JSON body.

    ``transport`` and ``sink`` replace the network transport and the blob
    store, e.g. with ``httpx.MockTransport`` and an in-memory sink.
    """
    if method.upper() != "POST":
        return HandlerResponse(status_code=405, body={"message": "Method Not Allowed"})

    try:
        config = config or load_config()
    except ConfigurationError as exc:
        logger.error(f"[handle_request] {exc}")
        return HandlerResponse(
            status_code=500, body={"message": "Server configuration error."}
        )

    try:
        request = parse_request(method, body)
    except ValidationError as exc:
        logger.warning(f"[handle_request] Rejected request: {exc}")
        return HandlerResponse(status_code=exc.status_code, body={"message": str(exc)})

    try:
        with build_http_client(config, transport) as http_client:
            result = build_executor(config, http_client, sink).run(request)
    except UpstreamError as exc:
        return HandlerResponse(
            status_code=502,
            body={"message": f"Shopify order request failed: {exc}"},
        )
    except Exception as exc:
        logger.exception(f"[handle_request] {type(exc).__name__}: {exc}")
        return HandlerResponse(
            status_code=500,
            body={"message": f"An internal error occurred: {exc}"},
        )

    return HandlerResponse(status_code=200, body=result.to_body())
