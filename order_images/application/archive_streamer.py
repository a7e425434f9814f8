"""Streams downloaded images into a ZIP archive that is uploaded while it is written.

The archive is produced into the write end of an OS pipe while the storage
sink reads the other end, so the full archive never has to sit in memory.
Only one image is held at a time.
"""

import os
import zipfile
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import UTC, datetime
from typing import BinaryIO
from uuid import uuid4

import httpx
from loguru import logger

from order_images.domain.interfaces import IStorageSink
from order_images.domain.request import ArchiveUpload
from order_images.infrastructure.shopify_client import ItemResolutionError


def archive_key(now: datetime | None = None) -> str:
    """Return a fresh storage key of the form ``YYYY-MM-DD-<uuid4>.zip`` (UTC date)."""
    now = now or datetime.now(UTC)
    return f"{now.date().isoformat()}-{uuid4()}.zip"


def entry_name(position: int) -> str:
    return f"image-{position}.jpg"


class ArchiveStreamer:
    """Downloads images in order and uploads them as one deflated ZIP."""

    COMPRESS_LEVEL = 9
    TTL_SECONDS = 900

    def __init__(
        self,
        client: httpx.Client,
        sink: IStorageSink,
        ttl_seconds: int = TTL_SECONDS,
    ) -> None:
        self._client = client
        self._sink = sink
        self._ttl_seconds = ttl_seconds

    def stream(self, urls: list[str]) -> ArchiveUpload:
        """Bundle ``urls`` into an archive in the sink and return its access URL.

        Entry ``image-<k>.jpg`` holds the image at 1-based position ``k`` of
        ``urls``. Images that fail to download are logged and left out; the
        run continues with the next URL.
        """
        key = archive_key()
        read_fd, write_fd = os.pipe()
        reader = open(read_fd, "rb")
        writer = open(write_fd, "wb")

        logger.info(f"Streaming {len(urls)} image(s) into {key}")
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="archive") as pool:
            upload = pool.submit(self._upload, key, reader)
            produce = pool.submit(self._write_archive, urls, writer)
            wait([upload, produce])

        # an upload failure breaks the pipe under the producer, so report it first
        handle = upload.result()
        entry_count = produce.result()

        download_url = self._sink.get_access_url(handle, expires_in=self._ttl_seconds)
        logger.info(
            f"Archive {key} uploaded with {entry_count} of {len(urls)} image(s)"
        )
        return ArchiveUpload(key=key, download_url=download_url, entry_count=entry_count)

    def _upload(self, key: str, reader: BinaryIO) -> str:
        try:
            return self._sink.put(key, reader, {"ttl": self._ttl_seconds})
        finally:
            reader.close()

    def _write_archive(self, urls: list[str], writer: BinaryIO) -> int:
        appended = 0
        try:
            with zipfile.ZipFile(
                writer,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.COMPRESS_LEVEL,
            ) as archive:
                for position, url in enumerate(urls, start=1):
                    try:
                        content = self._download(url)
                    except ItemResolutionError as exc:
                        logger.warning(f"Could not download {url}: {exc}")
                        continue
                    archive.writestr(entry_name(position), content)
                    appended += 1
        finally:
            writer.close()
        return appended

    def _download(self, url: str) -> bytes:
        """Fetch one image completely so a broken transfer never leaves half an entry."""
        try:
            # CDN redirects are followed here only; Shopify API calls carry the token
            response = self._client.get(url, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ItemResolutionError(f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise ItemResolutionError(f"HTTP {response.status_code}")
        return response.content
