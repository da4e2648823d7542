"""Tests for postcards.core.errors — the error hierarchy."""

from __future__ import annotations

import pytest

from postcards.core.errors import (
    AuthenticationError,
    ConfigurationError,
    PostcardError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)


class TestErrorHierarchy:
    """Every failure kind is catchable as PostcardError."""

    @pytest.mark.parametrize(
        "error_cls",
        [ValidationError, ConfigurationError, UpstreamError, UpstreamTimeoutError, AuthenticationError],
    )
    def test_subclasses_postcard_error(self, error_cls):
        assert issubclass(error_cls, PostcardError)

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)

    def test_timeout_is_builtin_timeout(self):
        assert issubclass(UpstreamTimeoutError, TimeoutError)

    def test_message_preserved(self):
        err = ConfigurationError("Server configuration incomplete")
        assert err.message == "Server configuration incomplete"
        assert str(err) == "Server configuration incomplete"

    def test_upstream_status_code(self):
        assert UpstreamError("Error 503", status_code=503).status_code == 503
        assert UpstreamError("unreachable").status_code is None
