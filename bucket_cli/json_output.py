"""JSON output envelope for `--format json`.

Every command emits one envelope so scripts can parse results uniformly:

    {
        "success": true|false,
        "command": "putfolder",
        "data": { ... },
        "errors": [ ... ]  # Only present when success=false
    }

Usage:
    from bucket_cli.json_output import success_envelope, error_envelope, ErrorDetail

    click.echo(success_envelope("use", {"current": "p1"}).to_json())

    errors = [ErrorDetail.from_exception(err)]
    click.echo(error_envelope("use", errors).to_json())
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from bucket_cli.errors import BucketError


@dataclass
class ErrorDetail:
    """Structure for individual error entries in the errors array.

    Attributes:
        type: Error class name (e.g., "ProfileNotFoundError")
        message: Human-readable error description
        code: Structured error code for BucketError subclasses
    """

    type: str
    message: str
    code: str | None = None

    @classmethod
    def from_exception(cls, err: Exception) -> ErrorDetail:
        """Describe an exception, keeping the code and bare message of BucketErrors."""
        if isinstance(err, BucketError):
            return cls(type=type(err).__name__, message=err.message, code=err.code)
        return cls(type=type(err).__name__, message=str(err))

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        result = {"type": self.type, "message": self.message}
        if self.code is not None:
            result["code"] = self.code
        return result


@dataclass
class OutputEnvelope:
    """The consistent wrapper structure for all JSON command output.

    Attributes:
        success: True if command completed without errors, False otherwise
        command: Name of the command that produced this output
        data: Command-specific payload; structure varies by command
        errors: Array of error objects; present only when success=False
    """

    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        The errors field is excluded when None (for success cases).
        """
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }

        if self.errors is not None:
            result["errors"] = [e.to_dict() for e in self.errors]

        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    """Create a success envelope with the given command and data."""
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Create an error envelope with the given command and errors.

    Args:
        command: Name of the command
        errors: List of ErrorDetail objects describing the errors
        data: Optional partial data to include (default: empty dict)
    """
    return OutputEnvelope(
        success=False,
        command=command,
        data=data if data is not None else {},
        errors=errors,
    )
