"""Unit tests for bucket-cli error classes.

Tests cover:
- Base BucketError behavior
- Error codes format (BKT-{category}{number})
- Error to_dict serialization
- Specific error types for each category
"""

from __future__ import annotations

import re

import pytest

from bucket_cli.errors import (
    BucketError,
    ConfigError,
    ConfigParseError,
    ConfigReadError,
    DuplicateNameError,
    FolderNotFoundError,
    NoCurrentProfileError,
    NotFoundError,
    ProfileNotFoundError,
    ProviderError,
    WalkError,
)


class TestBucketError:
    """Tests for base BucketError class."""

    @pytest.mark.unit
    def test_error_has_code_and_message(self) -> None:
        error = BucketError("Test error message")

        assert error.code == "BKT-000"
        assert error.message == "Test error message"

    @pytest.mark.unit
    def test_error_str_includes_code(self) -> None:
        """Error string representation should include code."""
        assert str(BucketError("Test message")) == "[BKT-000] Test message"

    @pytest.mark.unit
    def test_error_to_dict(self) -> None:
        data = BucketError("Test message", extra="value").to_dict()

        assert data == {"code": "BKT-000", "message": "Test message", "context": {"extra": "value"}}

    @pytest.mark.unit
    def test_context_becomes_attributes(self) -> None:
        error = BucketError("msg", path="/tmp/x")
        assert error.path == "/tmp/x"  # type: ignore[attr-defined]

    @pytest.mark.unit
    def test_reserved_context_keys_do_not_clobber(self) -> None:
        """Context keys named like core attributes stay in context only."""
        error = BucketError("real message", message="fake", code="X")

        assert error.message == "real message"
        assert error.code == "BKT-000"
        assert error.context["message"] == "fake"


ALL_ERRORS = [
    ProfileNotFoundError("p1"),
    NoCurrentProfileError(),
    FolderNotFoundError("/tmp/site"),
    DuplicateNameError("p1"),
    ConfigReadError("/tmp/rc", "denied"),
    ConfigParseError("/tmp/rc", "bad json"),
    WalkError("/tmp/site/css", "Permission denied"),
    ProviderError("put", "img/a.png", RuntimeError("timeout")),
]


class TestErrorCodes:
    """Every concrete error carries a unique, well-formed code."""

    @pytest.mark.unit
    @pytest.mark.parametrize("error", ALL_ERRORS, ids=lambda e: type(e).__name__)
    def test_code_format(self, error: BucketError) -> None:
        assert re.fullmatch(r"BKT-[A-Z]+\d{3}", error.code)
        assert isinstance(error, BucketError)

    @pytest.mark.unit
    def test_codes_are_unique(self) -> None:
        codes = [e.code for e in ALL_ERRORS]
        assert len(codes) == len(set(codes))


class TestSpecificErrors:
    """Messages and hierarchy of specific errors."""

    @pytest.mark.unit
    def test_profile_not_found(self) -> None:
        error = ProfileNotFoundError("prod")
        assert error.message == "Cannot find profile 'prod'"
        assert error.code == "BKT-NF001"
        assert isinstance(error, NotFoundError)

    @pytest.mark.unit
    def test_no_current_profile(self) -> None:
        error = NoCurrentProfileError()
        assert "bucket use" in error.message
        assert isinstance(error, NotFoundError)

    @pytest.mark.unit
    def test_folder_not_found(self) -> None:
        error = FolderNotFoundError("/tmp/site")
        assert error.message == "/tmp/site does not exist or is not a directory"
        assert error.to_dict()["context"] == {"path": "/tmp/site"}

    @pytest.mark.unit
    def test_duplicate_name(self) -> None:
        assert DuplicateNameError("p1").message == "Profile 'p1' already exists"

    @pytest.mark.unit
    def test_config_errors_share_base(self) -> None:
        assert isinstance(ConfigReadError("/x", "denied"), ConfigError)
        assert isinstance(ConfigParseError("/x", "bad"), ConfigError)

    @pytest.mark.unit
    def test_provider_error_keeps_original(self) -> None:
        original = RuntimeError("timeout")
        error = ProviderError("put", "img/a.png", original)

        assert error.message == "put failed for img/a.png: timeout"
        assert error.original_exception is original
        assert error.to_dict()["context"] == {
            "operation": "put",
            "key": "img/a.png",
            "original_error_type": "RuntimeError",
            "original_error_message": "timeout",
        }
