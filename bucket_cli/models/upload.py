"""Upload options, tasks and outcomes.

An upload run is described by one immutable UploadOptions. Each file becomes
an UploadTask carrying its resolved object key, and every task settles into
exactly one UploadOutcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from bucket_cli.errors import BucketError

DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class UploadOptions:
    """Options for a single `put` or `putfolder` invocation.

    Attributes:
        target_bucket: Profile name to upload with (default: current profile).
        prefix: Extra key prefix appended after the profile prefix.
        object_key: Explicit object key (single-file uploads only).
        limit: Max number of files uploaded concurrently (folder uploads only).
        extensions: Only upload files with these extensions (no leading dot).
        flat: Drop the directory structure and upload every file under one prefix.
        cache_control: Cache-Control header overriding the default.
        override: Overwrite objects that already exist.
        hashed_name: Replace the file name with an md5 of name and timestamp.
    """

    target_bucket: str | None = None
    prefix: str = ""
    object_key: str | None = None
    limit: int = DEFAULT_LIMIT
    extensions: frozenset[str] | None = None
    flat: bool = False
    cache_control: str | None = None
    override: bool = False
    hashed_name: bool = True


@dataclass(frozen=True)
class UploadTask:
    """One file to upload.

    Attributes:
        source: Absolute path of the local file.
        object_key: Destination key within the bucket.
        display_path: Path shown to the user (relative to the uploaded folder).
    """

    source: Path
    object_key: str
    display_path: str


class OutcomeStatus(str, Enum):
    """Terminal state of an upload task."""

    SUCCESS = "success"
    EXISTS = "exists"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadOutcome:
    """Result of a single upload task.

    Attributes:
        status: Whether the file was uploaded, skipped because it exists, or failed.
        url: URL the object is (or would be) served from.
        error: The failure, for FAILED outcomes only.
    """

    status: OutcomeStatus
    url: str
    error: Exception | None = None

    @classmethod
    def uploaded(cls, url: str) -> UploadOutcome:
        return cls(OutcomeStatus.SUCCESS, url)

    @classmethod
    def exists(cls, url: str) -> UploadOutcome:
        return cls(OutcomeStatus.EXISTS, url)

    @classmethod
    def failed(cls, url: str, error: Exception) -> UploadOutcome:
        return cls(OutcomeStatus.FAILED, url, error)

    @property
    def ok(self) -> bool:
        """True unless the task failed."""
        return self.status is not OutcomeStatus.FAILED

    @property
    def error_message(self) -> str:
        """The failure without its error code prefix, or "" when not failed."""
        if self.error is None:
            return ""
        if isinstance(self.error, BucketError):
            return self.error.message
        return str(self.error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {"status": self.status.value, "url": self.url}
        if self.error is not None:
            result["error"] = self.error_message
        return result


@dataclass(frozen=True)
class UploadSummary:
    """Counts of outcomes for a finished upload run.

    Attributes:
        total: Number of tasks.
        uploaded: Tasks that uploaded the file.
        skipped: Tasks skipped because the object already existed.
        failed: Tasks that failed.
    """

    total: int
    uploaded: int
    skipped: int
    failed: int

    @classmethod
    def from_results(cls, results: list[tuple[UploadTask, UploadOutcome]]) -> UploadSummary:
        statuses = [outcome.status for _, outcome in results]
        return cls(
            total=len(statuses),
            uploaded=statuses.count(OutcomeStatus.SUCCESS),
            skipped=statuses.count(OutcomeStatus.EXISTS),
            failed=statuses.count(OutcomeStatus.FAILED),
        )

    def to_dict(self) -> dict[str, int]:
        """Convert to JSON-serializable dict."""
        return {
            "total": self.total,
            "uploaded": self.uploaded,
            "skipped": self.skipped,
            "failed": self.failed,
        }
