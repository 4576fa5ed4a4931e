"""Shared pytest fixtures for bucket-cli tests."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest

from bucket_cli.errors import ProviderError
from bucket_cli.profiles import MemoryProfileStore, Profile

# =============================================================================
# Storage Test Double
# =============================================================================


class RecordingAdapter:
    """StorageAdapter double that records calls and tracks in-flight requests.

    Args:
        existing: Keys that head_object reports as present.
        fail_keys: Keys whose put_object raises ProviderError.
        delay: Seconds each call sleeps, to make overlapping calls observable.
    """

    def __init__(
        self,
        existing: set[str] | None = None,
        fail_keys: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.existing = set(existing or ())
        self.fail_keys = set(fail_keys or ())
        self.delay = delay
        self.heads: list[tuple[str, str]] = []
        self.puts: list[tuple[str, str, Path, dict[str, str]]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    @contextmanager
    def _call(self) -> Iterator[None]:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            yield
        finally:
            with self._lock:
                self.in_flight -= 1

    def head_object(self, bucket: str, key: str) -> bool:
        with self._call():
            with self._lock:
                self.heads.append((bucket, key))
                return key in self.existing

    def put_object(self, bucket: str, key: str, file_path: Path, headers: dict[str, str]) -> None:
        with self._call():
            if key in self.fail_keys:
                raise ProviderError("put", key, RuntimeError("connection reset"))
            with self._lock:
                self.puts.append((bucket, key, file_path, headers))
                self.existing.add(key)

    @property
    def put_keys(self) -> list[str]:
        return [key for _, key, _, _ in self.puts]


# =============================================================================
# Profiles
# =============================================================================


@pytest.fixture
def profile() -> Profile:
    """A profile with a key prefix and a public host."""
    return Profile(
        name="p1",
        bucket="assets",
        endpoint="https://bj.bcebos.com",
        access_key="AKIATEST",
        secret_key="supersecretkey",
        host="https://cdn.example.com",
        prefix="img",
    )


@pytest.fixture
def bare_profile() -> Profile:
    """A profile with no prefix and no host."""
    return Profile(
        name="bare",
        bucket="raw",
        endpoint="https://bj.bcebos.com",
        access_key="ak",
        secret_key="sk",
    )


@pytest.fixture
def memory_store(profile: Profile, bare_profile: Profile) -> MemoryProfileStore:
    """In-memory store holding both profiles, with p1 current."""
    return MemoryProfileStore([profile, bare_profile], current="p1")


@pytest.fixture
def adapter() -> RecordingAdapter:
    """A recording adapter where nothing exists yet."""
    return RecordingAdapter()


# =============================================================================
# Local Files
# =============================================================================


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A folder tree to upload.

    site/
        index.html
        logo.png
        css/app.css
        img/icons/a.png
        img/icons/b.png
    """
    root = tmp_path / "site"
    (root / "css").mkdir(parents=True)
    (root / "img" / "icons").mkdir(parents=True)
    (root / "index.html").write_text("<html></html>")
    (root / "logo.png").write_bytes(b"\x89PNG")
    (root / "css" / "app.css").write_text("body {}")
    (root / "img" / "icons" / "a.png").write_bytes(b"a")
    (root / "img" / "icons" / "b.png").write_bytes(b"b")
    return root


@pytest.fixture
def make_adapter() -> type[RecordingAdapter]:
    """The RecordingAdapter class, for tests that need custom existing/fail keys."""
    return RecordingAdapter
