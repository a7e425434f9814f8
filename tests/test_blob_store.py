"""Tests for LocalBlobStore."""

import io
import json
import time

import pytest

from order_images.infrastructure.blob_store import LocalBlobStore


def test_put_writes_blob_and_metadata(tmp_path) -> None:
    store = LocalBlobStore(tmp_path / "blobs")

    handle = store.put("2024-05-01-abc.zip", io.BytesIO(b"zip-bytes"), {"ttl": 900})

    assert handle == "2024-05-01-abc.zip"
    assert (tmp_path / "blobs" / handle).read_bytes() == b"zip-bytes"
    meta = json.loads((tmp_path / "blobs" / f"{handle}.meta.json").read_text())
    assert meta["ttl"] == 900
    assert meta["expires_at"] == pytest.approx(time.time() + 900, abs=5)


def test_access_url_uses_base_url(tmp_path) -> None:
    store = LocalBlobStore(tmp_path, base_url="https://files.example.com/bundles/")
    store.put("k.zip", io.BytesIO(b"x"), {"ttl": 900})

    url = store.get_access_url("k.zip", expires_in=900)

    assert url.startswith("https://files.example.com/bundles/k.zip?expires=")


def test_access_url_falls_back_to_file_uri(tmp_path) -> None:
    store = LocalBlobStore(tmp_path)
    store.put("k.zip", io.BytesIO(b"x"), {})

    assert store.get_access_url("k.zip", expires_in=900) == (tmp_path / "k.zip").resolve().as_uri()


def test_access_url_for_unknown_handle(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        LocalBlobStore(tmp_path).get_access_url("nope.zip", expires_in=900)


def test_purge_expired_removes_only_expired(tmp_path) -> None:
    store = LocalBlobStore(tmp_path)
    store.put("short.zip", io.BytesIO(b"x"), {"ttl": 10})
    store.put("long.zip", io.BytesIO(b"y"), {"ttl": 10_000})
    store.put("forever.zip", io.BytesIO(b"z"), {})

    purged = store.purge_expired(now=time.time() + 60)

    assert purged == ["short.zip"]
    assert not (tmp_path / "short.zip").exists()
    assert (tmp_path / "long.zip").exists()
    assert (tmp_path / "forever.zip").exists()


def test_rejects_keys_outside_root(tmp_path) -> None:
    with pytest.raises(ValueError):
        LocalBlobStore(tmp_path).put("../escape.zip", io.BytesIO(b"x"), {})
