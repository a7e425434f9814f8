"""Tests for ShopifyRestClient against an httpx.MockTransport."""

import httpx
import pytest

from order_images.infrastructure.shopify_client import (
    ItemResolutionError,
    ShopifyRestClient,
    UpstreamError,
)

BASE = "https://demo.myshopify.com/admin/api/2024-04"


def _client(handler) -> ShopifyRestClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return ShopifyRestClient(
        client=http, shop_name="demo", access_token="shpat_test", api_version="2024-04"
    )


def test_fetch_orders_page_sends_token_and_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"orders": [{"id": 1, "order_number": 1001}]})

    client = _client(handler)
    page = client.fetch_orders_page(client.orders_url, {"status": "open", "limit": 250})

    assert page.orders == [{"id": 1, "order_number": 1001}]
    assert page.next_url is None
    request = seen[0]
    assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
    assert request.url.path == "/admin/api/2024-04/orders.json"
    assert request.url.params["status"] == "open"
    assert request.url.params["limit"] == "250"


def test_fetch_orders_page_reads_next_link() -> None:
    """The rel="next" URL is taken from a Link header that also lists rel="previous"."""
    link = (
        f'<{BASE}/orders.json?limit=250&page_info=prev123>; rel="previous", '
        f'<{BASE}/orders.json?limit=250&page_info=next456>; rel="next"'
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"orders": []}, headers={"Link": link})

    client = _client(handler)
    page = client.fetch_orders_page(client.orders_url)

    assert page.next_url == f"{BASE}/orders.json?limit=250&page_info=next456"


def test_fetch_orders_page_missing_orders_key() -> None:
    client = _client(lambda request: httpx.Response(200, json={}))

    assert client.fetch_orders_page(client.orders_url).orders == []


def test_fetch_orders_page_raises_with_status_and_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(402, text='{"errors":"Unavailable Shop"}')

    client = _client(handler)

    with pytest.raises(UpstreamError) as exc_info:
        client.fetch_orders_page(client.orders_url)

    assert exc_info.value.status_code == 402
    assert exc_info.value.detail == '{"errors":"Unavailable Shop"}'
    assert "Unavailable Shop" in str(exc_info.value)


# ---------------------------------------------------------------------------
# Product lookup
# ---------------------------------------------------------------------------


def test_get_product_returns_image_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/admin/api/2024-04/products/632910392.json"
        return httpx.Response(
            200,
            json={
                "product": {
                    "id": 632910392,
                    "title": "IPod Nano - 8GB",
                    "image": {"id": 850703190, "src": "https://cdn.shopify.com/ipod.jpg"},
                }
            },
        )

    product = _client(handler).get_product(632910392)

    assert product is not None
    assert product.image_url == "https://cdn.shopify.com/ipod.jpg"


def test_get_product_without_image() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"product": {"id": 1, "image": None}})

    product = _client(handler).get_product(1)

    assert product is not None
    assert product.image_url is None


def test_get_product_without_product_object() -> None:
    assert _client(lambda request: httpx.Response(200, json={})).get_product(1) is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"errors": "Not Found"}),
        httpx.Response(200, text="<html>maintenance</html>"),
    ],
)
def test_get_product_failures_raise_item_error(response: httpx.Response) -> None:
    with pytest.raises(ItemResolutionError):
        _client(lambda request: response).get_product(1)


def test_get_product_transport_error_raises_item_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ItemResolutionError):
        _client(handler).get_product(1)
