from typing import Any, BinaryIO

import pytest


class MemorySink:
    """In-memory storage sink that drains the stream it is handed."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.metadata: dict[str, dict[str, Any]] = {}
        self.url_requests: list[tuple[str, int]] = []

    def put(self, key: str, stream: BinaryIO, metadata: dict[str, Any]) -> str:
        self.blobs[key] = stream.read()
        self.metadata[key] = metadata
        return key

    def get_access_url(self, handle: str, expires_in: int) -> str:
        self.url_requests.append((handle, expires_in))
        return f"https://blobs.example.com/{handle}?expires_in={expires_in}"


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()
