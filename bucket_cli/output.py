"""Standardized terminal output utilities.

All user-facing CLI messages go through these functions for consistent
formatting. Diagnostics for developers go through `logging` instead.

Basic Usage:
    from bucket_cli.output import success, info, warn, error, detail

    success("[success] dist/app.js (https://cdn.example.com/app.js)")
    info("Uploading 42 file(s) to assets")
    warn("[exists] https://cdn.example.com/app.js already exists")
    error("Cannot find profile 'prod'")
    detail("  bucket: assets")

Profile listings are rendered as a table with rich:

    print_profiles_table(store.list_profiles(), current=store.current())
"""

from __future__ import annotations

import sys
from typing import TextIO

import click
from rich.console import Console
from rich.table import Table

from bucket_cli.profiles import Profile

# ANSI color codes via click's style system
_STYLES = {
    "success": {"fg": "green"},
    "info": {"fg": "blue"},
    "warn": {"fg": "yellow"},
    "error": {"fg": "red"},
    "detail": {"fg": "bright_black"},
}

_PREFIXES = {
    "success": "✓",  # checkmark
    "info": "→",  # arrow
    "warn": "⚠",  # warning
    "error": "✗",  # X
    "detail": " ",
}


def _output(message: str, style: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    prefix = _PREFIXES[style]
    fg_color = _STYLES[style]["fg"]
    styled_prefix = click.style(prefix, fg=fg_color)
    styled_message = click.style(message, fg=fg_color)
    click.echo(f"{styled_prefix} {styled_message}", file=file, nl=nl)


def success(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a success message with green checkmark (stdout).

    Example:
        >>> success("Bucket has been set to p1")
        ✓ Bucket has been set to p1
    """
    _output(message, "success", file=file, nl=nl)


def info(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print an info message with blue arrow (stdout)."""
    _output(message, "info", file=file, nl=nl)


def warn(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a warning message with yellow warning symbol (stderr by default)."""
    _output(message, "warn", file=file or sys.stderr, nl=nl)


def error(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print an error message with red X (stderr by default).

    Example:
        >>> error("Cannot find profile 'prod'")
        ✗ Cannot find profile 'prod'
    """
    _output(message, "error", file=file or sys.stderr, nl=nl)


def detail(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a dimmed detail line (stdout)."""
    _output(message, "detail", file=file, nl=nl)


def print_profiles_table(
    profiles: list[Profile], *, current: str = "", file: TextIO | None = None
) -> None:
    """Render profiles as a table, marking the current one.

    Args:
        profiles: Profiles to list.
        current: Name of the current profile.
        file: File to write to (default: sys.stdout at call time).
    """
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("name", style="cyan")
    table.add_column("bucket", style="green")
    table.add_column("host")
    table.add_column("prefix")
    table.add_column("current", justify="center")

    for profile in profiles:
        table.add_row(
            profile.name,
            profile.bucket,
            profile.host,
            profile.prefix,
            "*" if profile.name == current else "",
        )

    console = Console(file=file or sys.stdout)
    console.print(table)
