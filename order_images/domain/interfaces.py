from datetime import date
from typing import Any, BinaryIO, Protocol

from .order import Order, Product
from .request import ArchiveUpload


class IOrderRepository(Protocol):
    def fetch_by_date(self, day: date) -> list[Order]: ...

    def fetch_by_range(self, start: int, end: int) -> list[Order]: ...


class IProductLookup(Protocol):
    def get_product(self, product_id: int) -> Product | None: ...


class IImageResolver(Protocol):
    def resolve(self, orders: list[Order]) -> list[str]: ...


class IArchiveStreamer(Protocol):
    def stream(self, urls: list[str]) -> ArchiveUpload: ...


class IStorageSink(Protocol):
    def put(self, key: str, stream: BinaryIO, metadata: dict[str, Any]) -> str:
        """Store everything read from ``stream`` under ``key`` and return a handle."""
        ...

    def get_access_url(self, handle: str, expires_in: int) -> str:
        """Return a URL granting download of ``handle`` for ``expires_in`` seconds."""
        ...
