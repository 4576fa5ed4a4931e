"""Data models for bucket-cli uploads.

Models are frozen dataclasses with JSON serialization support.
"""

from __future__ import annotations

from bucket_cli.models.upload import (
    DEFAULT_LIMIT,
    OutcomeStatus,
    UploadOptions,
    UploadOutcome,
    UploadSummary,
    UploadTask,
)

__all__ = [
    "DEFAULT_LIMIT",
    "OutcomeStatus",
    "UploadOptions",
    "UploadOutcome",
    "UploadSummary",
    "UploadTask",
]
