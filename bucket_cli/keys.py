"""Object key and URL generation.

Keys are built as:

    <profile prefix>/<option prefix>/<relative dir>/<file name>

Empty segments are dropped and each segment is normalised so the final key
never starts with "/" and never contains "//". The file name is either the
original basename or, with hashed naming, md5(basename + millis) followed by
the original extension. An explicit object key bypasses all of this.

Nothing here touches the filesystem.
"""

from __future__ import annotations

import hashlib
import re
import time
from pathlib import PurePath

from bucket_cli.models import UploadOptions
from bucket_cli.profiles import Profile

_SCHEME_PATTERN = re.compile(r"^(https?://)")


def _clean_segment(segment: str) -> str:
    """Strip leading/trailing slashes and collapse repeated ones."""
    return "/".join(part for part in segment.replace("\\", "/").split("/") if part)


def hashed_file_name(file_path: str | PurePath, now_ms: int | None = None) -> str:
    """Return md5(basename + millis) with the original extension kept.

    The hash covers the name and the time only, never the file content.

    Args:
        file_path: Local file path (only its name is used).
        now_ms: Milliseconds since the epoch (default: current time).

    Returns:
        Hashed file name, e.g. "5d41402abc4b2a76b9719d911017c592.png".
    """
    path = PurePath(file_path)
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    digest = hashlib.md5(f"{path.name}{now_ms}".encode()).hexdigest()
    return f"{digest}{path.suffix}"


def generate_object_key(
    file_path: str | PurePath,
    profile: Profile,
    options: UploadOptions,
    relative_dir: str = "",
    *,
    now_ms: int | None = None,
) -> str:
    """Compute the destination object key for a local file.

    Args:
        file_path: Local file path.
        profile: Profile whose prefix is applied first.
        options: Upload options (prefix, explicit key, hashed naming).
        relative_dir: Directory of the file relative to the uploaded folder,
            in POSIX form ("" for single files and flat uploads).
        now_ms: Timestamp used for hashed naming (default: current time).

    Returns:
        Object key for the storage service.
    """
    if options.object_key:
        return options.object_key

    segments = [_clean_segment(s) for s in (profile.prefix, options.prefix or "", relative_dir)]

    if options.hashed_name:
        name = hashed_file_name(file_path, now_ms)
    else:
        name = PurePath(file_path).name

    return "/".join([s for s in segments if s] + [name])


def generate_object_url(profile: Profile, object_key: str) -> str:
    """Build the URL an uploaded object is served from.

    Uses the profile's public host when set, otherwise the bucket's
    virtual-hosted endpoint (https://<bucket>.<endpoint host>).

    Args:
        profile: Profile the object was uploaded with.
        object_key: Object key within the bucket.

    Returns:
        Object URL.
    """
    if profile.host:
        return f"{profile.host.rstrip('/')}/{object_key}"
    base = _SCHEME_PATTERN.sub(rf"\g<1>{profile.bucket}.", profile.endpoint.rstrip("/"), count=1)
    return f"{base}/{object_key}"
