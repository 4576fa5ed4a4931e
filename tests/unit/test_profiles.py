"""Unit tests for profiles and profile stores.

Tests cover:
- Profile serialization to the on-disk shape
- Secret masking for display
- Store operations against both store implementations
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bucket_cli.errors import DuplicateNameError, NoCurrentProfileError, ProfileNotFoundError
from bucket_cli.profiles import (
    JsonFileProfileStore,
    MemoryProfileStore,
    Profile,
    ProfileStore,
)


class TestProfile:
    """Tests for the Profile dataclass."""

    @pytest.mark.unit
    def test_to_dict_nests_endpoint_and_credentials(self, profile: Profile) -> None:
        """Endpoint and keys live under config.credentials on disk."""
        data = profile.to_dict()

        assert data["name"] == "p1"
        assert data["config"]["endpoint"] == "https://bj.bcebos.com"
        assert data["config"]["credentials"] == {"ak": "AKIATEST", "sk": "supersecretkey"}

    @pytest.mark.unit
    def test_from_dict_inverts_to_dict(self, profile: Profile) -> None:
        assert Profile.from_dict(profile.to_dict()) == profile

    @pytest.mark.unit
    def test_from_dict_tolerates_missing_optional_fields(self) -> None:
        """Records without host/prefix or with nulls load with empty strings."""
        profile = Profile.from_dict(
            {
                "name": "x",
                "bucket": "b",
                "host": None,
                "config": {"endpoint": "https://e", "credentials": {"ak": "a", "sk": "s"}},
            }
        )
        assert profile.host == ""
        assert profile.prefix == ""

    @pytest.mark.unit
    def test_redacted_masks_long_secret(self, profile: Profile) -> None:
        """Long secrets keep two characters at each end."""
        sk = profile.redacted()["sk"]
        assert sk == "su" + "*" * 10 + "ey"
        assert "secret" not in sk

    @pytest.mark.unit
    def test_redacted_hides_short_secret_entirely(self, bare_profile: Profile) -> None:
        assert bare_profile.redacted()["sk"] == "**"

    @pytest.mark.unit
    def test_profile_is_immutable(self, profile: Profile) -> None:
        with pytest.raises(AttributeError):
            profile.bucket = "other"  # type: ignore[misc]


@pytest.fixture(params=["memory", "json"])
def empty_store(request: pytest.FixtureRequest, tmp_path: Path) -> ProfileStore:
    """An empty store of each implementation."""
    if request.param == "memory":
        return MemoryProfileStore()
    return JsonFileProfileStore(tmp_path / "nested" / "bucketrc.json")


class TestProfileStore:
    """Store behaviour shared by every implementation."""

    @pytest.mark.unit
    def test_stores_satisfy_protocol(self, empty_store: ProfileStore) -> None:
        assert isinstance(empty_store, ProfileStore)

    @pytest.mark.unit
    def test_empty_store(self, empty_store: ProfileStore) -> None:
        assert empty_store.list_profiles() == []
        assert empty_store.current() == ""

    @pytest.mark.unit
    def test_add_then_get(self, empty_store: ProfileStore, profile: Profile) -> None:
        empty_store.add_profile(profile)
        assert empty_store.get_profile("p1") == profile

    @pytest.mark.unit
    def test_add_keeps_insertion_order(
        self, empty_store: ProfileStore, profile: Profile, bare_profile: Profile
    ) -> None:
        empty_store.add_profile(bare_profile)
        empty_store.add_profile(profile)
        assert [p.name for p in empty_store.list_profiles()] == ["bare", "p1"]

    @pytest.mark.unit
    def test_duplicate_add_leaves_one_profile(
        self, empty_store: ProfileStore, profile: Profile
    ) -> None:
        """Adding a name twice fails and the store keeps exactly one."""
        empty_store.add_profile(profile)

        with pytest.raises(DuplicateNameError):
            empty_store.add_profile(Profile("p1", "other", "https://e", "a", "s"))

        profiles = empty_store.list_profiles()
        assert len(profiles) == 1
        assert profiles[0].bucket == "assets"

    @pytest.mark.unit
    def test_get_without_name_uses_current(
        self, empty_store: ProfileStore, profile: Profile, bare_profile: Profile
    ) -> None:
        empty_store.add_profile(profile)
        empty_store.add_profile(bare_profile)
        empty_store.set_current("bare")

        assert empty_store.get_profile().name == "bare"
        assert empty_store.get_profile("").name == "bare"

    @pytest.mark.unit
    def test_get_without_name_and_no_current(
        self, empty_store: ProfileStore, profile: Profile
    ) -> None:
        empty_store.add_profile(profile)
        with pytest.raises(NoCurrentProfileError):
            empty_store.get_profile()

    @pytest.mark.unit
    def test_get_unknown_name(self, empty_store: ProfileStore) -> None:
        with pytest.raises(ProfileNotFoundError, match="Cannot find profile 'ghost'"):
            empty_store.get_profile("ghost")

    @pytest.mark.unit
    def test_use_missing_name_keeps_current(
        self, empty_store: ProfileStore, profile: Profile
    ) -> None:
        """Selecting an unknown profile fails and leaves the selection alone."""
        empty_store.add_profile(profile)
        empty_store.set_current("p1")

        with pytest.raises(ProfileNotFoundError):
            empty_store.set_current("ghost")

        assert empty_store.current() == "p1"

    @pytest.mark.unit
    def test_remove_current_clears_selection(
        self, empty_store: ProfileStore, profile: Profile, bare_profile: Profile
    ) -> None:
        empty_store.add_profile(profile)
        empty_store.add_profile(bare_profile)
        empty_store.set_current("p1")

        empty_store.remove_profile("p1")

        assert [p.name for p in empty_store.list_profiles()] == ["bare"]
        assert empty_store.current() == ""

    @pytest.mark.unit
    def test_remove_other_keeps_selection(
        self, empty_store: ProfileStore, profile: Profile, bare_profile: Profile
    ) -> None:
        empty_store.add_profile(profile)
        empty_store.add_profile(bare_profile)
        empty_store.set_current("p1")

        empty_store.remove_profile("bare")

        assert empty_store.current() == "p1"

    @pytest.mark.unit
    def test_remove_missing(self, empty_store: ProfileStore) -> None:
        with pytest.raises(ProfileNotFoundError):
            empty_store.remove_profile("ghost")

    @pytest.mark.unit
    def test_update_replaces_given_fields(
        self, empty_store: ProfileStore, profile: Profile
    ) -> None:
        """Only non-empty changes are applied."""
        empty_store.add_profile(profile)

        updated = empty_store.update_profile("p1", bucket="new-bucket", prefix=None, host="")

        assert updated.bucket == "new-bucket"
        assert updated.prefix == "img"
        assert updated.host == "https://cdn.example.com"
        assert empty_store.get_profile("p1") == updated

    @pytest.mark.unit
    def test_update_unknown_field(self, empty_store: ProfileStore, profile: Profile) -> None:
        empty_store.add_profile(profile)
        with pytest.raises(ValueError, match="name"):
            empty_store.update_profile("p1", name="renamed")

    @pytest.mark.unit
    def test_update_missing_profile(self, empty_store: ProfileStore) -> None:
        with pytest.raises(ProfileNotFoundError):
            empty_store.update_profile("ghost", bucket="b")


class TestJsonFileProfileStore:
    """Tests specific to the file-backed store."""

    @pytest.mark.unit
    def test_writes_original_document_shape(self, tmp_path: Path, profile: Profile) -> None:
        path = tmp_path / ".bucketrc"
        store = JsonFileProfileStore(path)
        store.add_profile(profile)
        store.set_current("p1")

        document = json.loads(path.read_text())

        assert document["current"] == "p1"
        assert document["config"] == [profile.to_dict()]

    @pytest.mark.unit
    def test_reads_existing_file(self, tmp_path: Path, profile: Profile) -> None:
        path = tmp_path / ".bucketrc"
        path.write_text(json.dumps({"current": "p1", "config": [profile.to_dict()]}))

        store = JsonFileProfileStore(path)

        assert store.current() == "p1"
        assert store.get_profile() == profile

    @pytest.mark.unit
    def test_failed_use_does_not_write(self, tmp_path: Path) -> None:
        """A failed selection never creates the config file."""
        path = tmp_path / ".bucketrc"
        store = JsonFileProfileStore(path)

        with pytest.raises(ProfileNotFoundError):
            store.set_current("ghost")

        assert not path.exists()


class TestMemoryProfileStore:
    """Tests specific to the in-memory store."""

    @pytest.mark.unit
    def test_initial_profiles_and_current(self, memory_store: MemoryProfileStore) -> None:
        assert memory_store.current() == "p1"
        assert [p.name for p in memory_store.list_profiles()] == ["p1", "bare"]
