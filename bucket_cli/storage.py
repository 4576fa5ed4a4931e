"""Storage adapter: the two object-store calls uploads need.

The upload scheduler depends only on the StorageAdapter protocol:

- head_object(bucket, key) -> bool: does the object exist?
- put_object(bucket, key, file_path, headers): upload a local file.

ObstoreAdapter implements it on top of obstore's S3Store, which speaks the
S3 protocol to any S3-compatible endpoint (AWS, MinIO, BOS, OSS, R2...).

Basic Usage:
    from bucket_cli.storage import ObstoreAdapter, build_put_headers

    adapter = ObstoreAdapter.from_profile(profile)
    if not adapter.head_object(profile.bucket, "img/logo.png"):
        adapter.put_object(profile.bucket, "img/logo.png", Path("logo.png"),
                           build_put_headers(None))
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, runtime_checkable

import obstore as obs
from obstore.store import (
    AzureStore,
    GCSStore,
    HTTPStore,
    LocalStore,
    MemoryStore,
    S3Store,
)

from bucket_cli.errors import ProviderError
from bucket_cli.profiles import Profile

logger = logging.getLogger(__name__)

# Type alias for all supported object stores
ObjectStore = S3Store | GCSStore | AzureStore | HTTPStore | LocalStore | MemoryStore

StoreFactory = Callable[[str], ObjectStore]

DEFAULT_PUT_HEADERS: dict[str, str] = {
    "Cache-Control": "max-age=315360000",
}

# Region sent when the profile's endpoint does not need one
DEFAULT_REGION = "us-east-1"


def build_put_headers(cache_control: str | None) -> dict[str, str]:
    """Merge an explicit Cache-Control value over the default headers."""
    headers = dict(DEFAULT_PUT_HEADERS)
    if cache_control:
        headers["Cache-Control"] = cache_control
    return headers


def _is_not_found(err: Exception) -> bool:
    """Check whether an obstore error means the object does not exist."""
    if isinstance(err, FileNotFoundError):
        return True
    return "NotFound" in type(err).__name__ or "404" in str(err) or "NoSuchKey" in str(err)


@runtime_checkable
class StorageAdapter(Protocol):
    """Object-store capability used by the upload scheduler.

    Implementations must be safe to call from several threads at once.
    """

    def head_object(self, bucket: str, key: str) -> bool:
        """Return True if the object exists.

        Raises:
            ProviderError: For any failure other than "not found".
        """
        ...

    def put_object(self, bucket: str, key: str, file_path: Path, headers: dict[str, str]) -> None:
        """Upload a local file to bucket/key with the given headers.

        Returns nothing; the public URL depends on the profile's host and is
        built by keys.generate_object_url.

        Raises:
            ProviderError: If the upload fails.
        """
        ...


class ObstoreAdapter:
    """StorageAdapter backed by obstore.

    Stores are created lazily, one per bucket, and shared between threads.

    Args:
        store_factory: Builds the object store for a bucket name.
        chunk_concurrency: Max concurrent chunks per file for multipart puts.
    """

    def __init__(self, store_factory: StoreFactory, *, chunk_concurrency: int = 12) -> None:
        self._store_factory = store_factory
        self._chunk_concurrency = chunk_concurrency
        self._stores: dict[str, ObjectStore] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_profile(cls, profile: Profile, *, chunk_concurrency: int = 12) -> ObstoreAdapter:
        """Create an adapter talking to the profile's S3-compatible endpoint."""

        def factory(bucket: str) -> ObjectStore:
            logger.debug("Creating S3Store for bucket %s at %s", bucket, profile.endpoint)
            return S3Store(
                bucket,
                endpoint=profile.endpoint,
                access_key_id=profile.access_key,
                secret_access_key=profile.secret_key,
                region=DEFAULT_REGION,
            )

        return cls(factory, chunk_concurrency=chunk_concurrency)

    def _store(self, bucket: str) -> ObjectStore:
        with self._lock:
            store = self._stores.get(bucket)
            if store is None:
                store = self._store_factory(bucket)
                self._stores[bucket] = store
            return store

    def head_object(self, bucket: str, key: str) -> bool:
        try:
            obs.head(self._store(bucket), key)
        except Exception as e:
            if _is_not_found(e):
                logger.debug("head %s/%s: not found", bucket, key)
                return False
            raise ProviderError("head", key, e) from e
        logger.debug("head %s/%s: exists", bucket, key)
        return True

    def put_object(self, bucket: str, key: str, file_path: Path, headers: dict[str, str]) -> None:
        try:
            obs.put(
                self._store(bucket),
                key,
                Path(file_path),
                attributes=headers,  # type: ignore[arg-type]
                max_concurrency=self._chunk_concurrency,
            )
        except Exception as e:
            raise ProviderError("put", key, e) from e
        logger.debug("put %s/%s <- %s", bucket, key, file_path)
