"""Filesystem-backed storage sink for finished archives."""

import json
import shutil
import time
from pathlib import Path
from typing import Any, BinaryIO

from loguru import logger

_META_SUFFIX = ".meta.json"
_CHUNK_SIZE = 64 * 1024


class LocalBlobStore:
    """Stores blobs as files under ``root`` with a JSON metadata sidecar.

    A ``ttl`` entry in the metadata marks when the blob may be removed by
    :meth:`purge_expired`. Access URLs point at ``base_url`` when one is given
    (for a directory served by a web server) and at the file itself otherwise.
    """

    def __init__(self, root: str | Path, base_url: str | None = None) -> None:
        self._root = Path(root)
        self._base_url = base_url.rstrip("/") if base_url else None

    def put(self, key: str, stream: BinaryIO, metadata: dict[str, Any]) -> str:
        self._root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)

        with open(path, "wb") as f:
            shutil.copyfileobj(stream, f, _CHUNK_SIZE)

        meta = dict(metadata)
        if ttl := meta.get("ttl"):
            meta["expires_at"] = int(time.time()) + int(ttl)
        self._meta_path(key).write_text(json.dumps(meta), encoding="utf-8")

        logger.info(f"[BlobStore] Stored {key} ({path.stat().st_size} bytes)")
        return key

    def get_access_url(self, handle: str, expires_in: int) -> str:
        path = self._path(handle)
        if not path.exists():
            raise FileNotFoundError(f"No blob stored under {handle!r}")
        if self._base_url is None:
            return path.resolve().as_uri()
        expires = int(time.time()) + expires_in
        return f"{self._base_url}/{handle}?expires={expires}"

    def purge_expired(self, now: float | None = None) -> list[str]:
        """Delete blobs whose ``expires_at`` has passed and return their keys."""
        now = time.time() if now is None else now
        purged: list[str] = []
        if not self._root.exists():
            return purged

        for meta_path in sorted(self._root.glob(f"*{_META_SUFFIX}")):
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
            expires_at = meta.get("expires_at")
            if expires_at is None or expires_at > now:
                continue
            key = meta_path.name.removesuffix(_META_SUFFIX)
            self._path(key).unlink(missing_ok=True)
            meta_path.unlink()
            purged.append(key)

        if purged:
            logger.info(f"[BlobStore] Purged {len(purged)} expired blob(s)")
        return purged

    def _path(self, key: str) -> Path:
        # keys are generated, never user supplied, but keep them inside root
        if Path(key).name != key:
            raise ValueError(f"Invalid blob key: {key!r}")
        return self._root / key

    def _meta_path(self, key: str) -> Path:
        return self._root / f"{key}{_META_SUFFIX}"
