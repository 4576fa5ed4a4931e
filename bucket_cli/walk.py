"""Recursive file discovery for folder uploads."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from bucket_cli.errors import FolderNotFoundError, WalkError

logger = logging.getLogger(__name__)


def parse_extensions(value: str | None) -> frozenset[str] | None:
    """Parse a comma-separated extension list ("png,jpg") into a set.

    Leading dots are tolerated (".png" and "png" are equivalent).

    Returns:
        The extensions without dots, or None when no filter was given.
    """
    if not value:
        return None
    extensions = frozenset(e.strip().lstrip(".") for e in value.split(",") if e.strip())
    return extensions or None


def walk_files(root: Path, extensions: frozenset[str] | None = None) -> list[Path]:
    """Find every regular file under a directory.

    Args:
        root: Directory to walk.
        extensions: Optional extension filter (no leading dot, case-sensitive).

    Returns:
        Sorted absolute file paths. Directories are never included.

    Raises:
        FolderNotFoundError: If root does not exist or is not a directory.
        WalkError: If a directory under root cannot be listed.
    """
    root = root.resolve()
    if not root.is_dir():
        raise FolderNotFoundError(str(root))

    def _raise(err: OSError) -> None:
        raise WalkError(err.filename or str(root), err.strerror or str(err)) from err

    files: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for filename in filenames:
            path = Path(dirpath) / filename
            if not path.is_file():
                continue
            if extensions is not None and path.suffix.lstrip(".") not in extensions:
                continue
            files.append(path)

    files.sort()
    logger.debug("Found %d file(s) under %s", len(files), root)
    return files
