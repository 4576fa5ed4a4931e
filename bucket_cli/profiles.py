"""Bucket profiles and the stores that persist them.

A profile is a named bucket configuration: the bucket itself, the endpoint
that serves it, the credentials used to write to it, an optional public host
and a key prefix applied to every upload.

The ProfileStore protocol is the only way the rest of the package touches
profiles. Two implementations are provided:

- JsonFileProfileStore: the production store, backed by the JSON config file
  (see bucket_cli.config). The whole document is read before every operation
  and rewritten after every mutation.
- MemoryProfileStore: keeps the same document in memory, used by tests.

Thread Safety:
    Stores assume a single writer per invocation. Concurrent CLI processes
    writing the same config file race, and the last writer wins.

Usage:
    from bucket_cli.profiles import JsonFileProfileStore, Profile

    store = JsonFileProfileStore(get_config_path())
    store.add_profile(Profile(name="p1", bucket="assets", endpoint="https://bj.bcebos.com",
                              access_key="ak", secret_key="sk"))
    store.set_current("p1")
    profile = store.get_profile()  # current profile
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from bucket_cli.config import empty_config, load_config, save_config
from bucket_cli.errors import DuplicateNameError, NoCurrentProfileError, ProfileNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Profile:
    """A named bucket configuration.

    Attributes:
        name: Unique profile name.
        bucket: Bucket name in the storage service.
        endpoint: Service endpoint URL (e.g., https://bj.bcebos.com).
        access_key: Access key id.
        secret_key: Secret access key.
        host: Public host used to build object URLs (optional).
        prefix: Key prefix applied to every upload (optional).
    """

    name: str
    bucket: str
    endpoint: str
    access_key: str
    secret_key: str
    host: str = ""
    prefix: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk JSON shape.

        Returns:
            Dict with endpoint and credentials nested under "config".
        """
        return {
            "name": self.name,
            "bucket": self.bucket,
            "host": self.host,
            "prefix": self.prefix,
            "config": {
                "endpoint": self.endpoint,
                "credentials": {"ak": self.access_key, "sk": self.secret_key},
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        """Create a Profile from its on-disk JSON shape.

        Args:
            data: Dictionary with profile fields.

        Returns:
            Profile instance.
        """
        config = data.get("config") or {}
        credentials = config.get("credentials") or {}
        return cls(
            name=data["name"],
            bucket=data.get("bucket", ""),
            host=data.get("host") or "",
            prefix=data.get("prefix") or "",
            endpoint=config.get("endpoint", ""),
            access_key=credentials.get("ak", ""),
            secret_key=credentials.get("sk", ""),
        )

    def redacted(self) -> dict[str, str]:
        """Flat view of the profile with the secret key masked, for display."""
        secret = self.secret_key
        if len(secret) > 8:
            masked = secret[:2] + "*" * (len(secret) - 4) + secret[-2:]
        else:
            masked = "*" * len(secret)
        return {
            "name": self.name,
            "bucket": self.bucket,
            "host": self.host,
            "prefix": self.prefix,
            "endpoint": self.endpoint,
            "ak": self.access_key,
            "sk": masked,
        }


EDITABLE_FIELDS: frozenset[str] = frozenset(
    f.name for f in fields(Profile) if f.name != "name"
)


@runtime_checkable
class ProfileStore(Protocol):
    """Protocol for profile persistence.

    Profiles handed out by a store are immutable snapshots; edits go through
    update_profile, which replaces the stored record.
    """

    def get_profile(self, name: str | None = None) -> Profile:
        """Look up a profile by name, or the current profile when name is empty.

        Raises:
            NoCurrentProfileError: If name is empty and no current profile is set.
            ProfileNotFoundError: If the resolved name is not stored.
        """
        ...

    def list_profiles(self) -> list[Profile]:
        """List all profiles in insertion order."""
        ...

    def current(self) -> str:
        """Return the current profile name, or "" when none is selected."""
        ...

    def set_current(self, name: str) -> None:
        """Select the current profile.

        Raises:
            ProfileNotFoundError: If no profile has this name. Current is unchanged.
        """
        ...

    def add_profile(self, profile: Profile) -> None:
        """Store a new profile.

        Raises:
            DuplicateNameError: If a profile with the same name exists.
        """
        ...

    def remove_profile(self, name: str) -> None:
        """Delete a profile, clearing the current selection if it matched.

        Raises:
            ProfileNotFoundError: If no profile has this name.
        """
        ...

    def update_profile(self, name: str, /, **changes: str | None) -> Profile:
        """Replace fields of an existing profile; empty values are ignored.

        Raises:
            ProfileNotFoundError: If no profile has this name.
            ValueError: If a change names an unknown field.
        """
        ...


class DocumentProfileStore(ABC):
    """ProfileStore over a {"current", "config"} document.

    Subclasses only decide where the document lives. Every operation reads a
    fresh copy of the document and mutations write the whole thing back.
    """

    @abstractmethod
    def _read(self) -> dict[str, Any]:
        """Return the current document."""

    @abstractmethod
    def _write(self, document: dict[str, Any]) -> None:
        """Persist the whole document."""

    def _profiles(self, document: dict[str, Any]) -> list[Profile]:
        return [Profile.from_dict(item) for item in document.get("config", [])]

    def get_profile(self, name: str | None = None) -> Profile:
        document = self._read()
        target = name or document.get("current") or ""
        if not target:
            raise NoCurrentProfileError()
        for profile in self._profiles(document):
            if profile.name == target:
                return profile
        raise ProfileNotFoundError(target)

    def list_profiles(self) -> list[Profile]:
        return self._profiles(self._read())

    def current(self) -> str:
        return self._read().get("current") or ""

    def set_current(self, name: str) -> None:
        document = self._read()
        if not any(p.name == name for p in self._profiles(document)):
            raise ProfileNotFoundError(name)
        document["current"] = name
        self._write(document)
        logger.debug("Current profile set to %s", name)

    def add_profile(self, profile: Profile) -> None:
        document = self._read()
        if any(p.name == profile.name for p in self._profiles(document)):
            raise DuplicateNameError(profile.name)
        document.setdefault("config", []).append(profile.to_dict())
        self._write(document)
        logger.debug("Added profile %s", profile.name)

    def remove_profile(self, name: str) -> None:
        document = self._read()
        remaining = [item for item in document.get("config", []) if item.get("name") != name]
        if len(remaining) == len(document.get("config", [])):
            raise ProfileNotFoundError(name)
        document["config"] = remaining
        if document.get("current") == name:
            document["current"] = ""
        self._write(document)
        logger.debug("Removed profile %s", name)

    def update_profile(self, name: str, /, **changes: str | None) -> Profile:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile field(s): {', '.join(sorted(unknown))}")

        document = self._read()
        items = document.get("config", [])
        for index, item in enumerate(items):
            if item.get("name") != name:
                continue
            updates = {key: value for key, value in changes.items() if value}
            updated = replace(Profile.from_dict(item), **updates)
            items[index] = updated.to_dict()
            self._write(document)
            logger.debug("Updated profile %s fields: %s", name, sorted(updates))
            return updated
        raise ProfileNotFoundError(name)


class JsonFileProfileStore(DocumentProfileStore):
    """Profile store backed by the JSON config file.

    Args:
        path: Config file location, usually from config.get_config_path().
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, Any]:
        return load_config(self.path)

    def _write(self, document: dict[str, Any]) -> None:
        save_config(self.path, document)


class MemoryProfileStore(DocumentProfileStore):
    """In-memory profile store."""

    def __init__(self, profiles: list[Profile] | None = None, current: str = "") -> None:
        self._document = empty_config()
        self._document["config"] = [p.to_dict() for p in profiles or []]
        self._document["current"] = current

    def _read(self) -> dict[str, Any]:
        return copy.deepcopy(self._document)

    def _write(self, document: dict[str, Any]) -> None:
        self._document = copy.deepcopy(document)
