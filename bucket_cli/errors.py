"""Structured error codes for bucket-cli.

All errors follow the format BKT-{category}{number}:
- BKT-NF*: Something the command needs was not found (profile, folder)
- BKT-DUP*: Duplicate profile names
- BKT-CFG*: Configuration file errors
- BKT-IO*: Local filesystem errors while walking a folder
- BKT-PRV*: Storage provider errors
"""

from __future__ import annotations

from typing import Any


class BucketError(Exception):
    """Base class for all bucket-cli errors.

    All errors have:
    - code: Structured error code (e.g., BKT-NF001)
    - message: Human-readable error message
    """

    code: str = "BKT-000"

    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, /, **context: Any) -> None:
        """Initialize a bucket-cli error.

        Args:
            message: Human-readable error message.
            **context: Additional context stored as error attributes.
                Reserved keys (code, message, context, args) are ignored.
        """
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# Not Found Errors (BKT-NF*)
class NotFoundError(BucketError):
    """Base class for errors about missing profiles or folders."""

    code = "BKT-NF000"


class ProfileNotFoundError(NotFoundError):
    """Raised when a named profile does not exist.

    Error code: BKT-NF001
    """

    code = "BKT-NF001"

    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot find profile '{name}'", name=name)


class NoCurrentProfileError(NotFoundError):
    """Raised when no profile name was given and no current profile is set.

    Error code: BKT-NF002
    """

    code = "BKT-NF002"

    def __init__(self) -> None:
        super().__init__("No current profile, choose one with 'bucket use <name>' or pass -b")


class FolderNotFoundError(NotFoundError):
    """Raised when the folder to upload does not exist.

    Error code: BKT-NF003
    """

    code = "BKT-NF003"

    def __init__(self, path: str) -> None:
        super().__init__(f"{path} does not exist or is not a directory", path=path)


# Duplicate Errors (BKT-DUP*)
class DuplicateNameError(BucketError):
    """Raised when adding a profile whose name is already taken.

    Error code: BKT-DUP001
    """

    code = "BKT-DUP001"

    def __init__(self, name: str) -> None:
        super().__init__(f"Profile '{name}' already exists", name=name)


# Configuration Errors (BKT-CFG*)
class ConfigError(BucketError):
    """Base class for configuration-related errors."""

    code = "BKT-CFG000"


class ConfigReadError(ConfigError):
    """Raised when the config file exists but cannot be read or written.

    Error code: BKT-CFG001
    """

    code = "BKT-CFG001"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot access config file {path}: {reason}", path=path, reason=reason)


class ConfigParseError(ConfigError):
    """Raised when the config file is not valid JSON or has the wrong shape.

    Error code: BKT-CFG002
    """

    code = "BKT-CFG002"

    def __init__(self, path: str, parse_error: str) -> None:
        super().__init__(
            f"Failed to parse config file {path}: {parse_error}",
            path=path,
            parse_error=parse_error,
        )


# Filesystem Errors (BKT-IO*)
class WalkError(BucketError):
    """Raised when a directory cannot be listed while collecting files.

    Error code: BKT-IO001
    """

    code = "BKT-IO001"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read directory {path}: {reason}", path=path, reason=reason)


# Provider Errors (BKT-PRV*)
class ProviderError(BucketError):
    """Raised when the storage provider rejects or fails a request.

    Error code: BKT-PRV001
    """

    code = "BKT-PRV001"

    def __init__(self, operation: str, key: str, original_error: Exception) -> None:
        super().__init__(
            f"{operation} failed for {key}: {original_error}",
            operation=operation,
            key=key,
            original_error_type=type(original_error).__name__,
            original_error_message=str(original_error),
        )
        # Not serialized by to_dict()
        self.original_exception = original_error
