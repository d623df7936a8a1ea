"""Unit tests for resolver exceptions."""

import pytest

from agent_metadata_resolver.resolver.diagnostics import DiagnosticCode
from agent_metadata_resolver.resolver.exceptions import (
    ArweaveFetchError,
    DecompressionError,
    DecompressionFailedError,
    DecompressionLimitError,
    DocumentParseError,
    FetchError,
    GatewayAttemptError,
    HTTPSFetchError,
    InvalidBase64Error,
    InvalidJSONError,
    InvalidURIError,
    IPFSFetchError,
    NonObjectRootError,
    PayloadTooLargeError,
    ResolverError,
)


class TestResolverError:
    """Tests for the ResolverError base exception."""

    def test_message_and_field_path(self):
        """ResolverError should store message and field path."""
        error = InvalidJSONError("bad json", field_path="")
        assert error.message == "bad json"
        assert str(error) == "bad json"

    def test_to_diagnostic_uses_class_code(self):
        """to_diagnostic carries the code of the concrete class."""
        diagnostic = InvalidBase64Error("nope").to_diagnostic()
        assert diagnostic.code == DiagnosticCode.INVALID_BASE64
        assert diagnostic.message == "nope"
        assert diagnostic.is_error


class TestInvalidURIError:
    """Tests for InvalidURIError."""

    def test_default_code(self):
        """Default code is EA001."""
        assert InvalidURIError("empty").code == DiagnosticCode.INVALID_URI

    def test_code_override(self):
        """Unsupported schemes carry EA006."""
        error = InvalidURIError("ftp", code=DiagnosticCode.UNSUPPORTED_SCHEME)
        assert error.to_diagnostic().code == DiagnosticCode.UNSUPPORTED_SCHEME
        assert InvalidURIError.code == DiagnosticCode.INVALID_URI


class TestFetchErrors:
    """Tests for fetch error classes."""

    def test_message_includes_url(self):
        """FetchError includes the URL when given."""
        error = HTTPSFetchError("HTTP 500", url="https://example.com/a.json")
        assert str(error) == "Fetch failed from https://example.com/a.json: HTTP 500"
        assert error.url == "https://example.com/a.json"

    def test_message_without_url(self):
        """FetchError omits the URL part when absent."""
        assert str(ArweaveFetchError("boom")) == "Fetch failed: boom"

    def test_ipfs_error_lists_attempts(self):
        """IPFSFetchError summarises every gateway attempt."""
        attempts = [
            GatewayAttemptError("HTTP 504", gateway="https://a/ipfs/"),
            GatewayAttemptError("timed out after 10.0s", gateway="https://b/ipfs/"),
        ]
        error = IPFSFetchError("QmCid", attempts)

        assert error.code == DiagnosticCode.IPFS_FETCH_FAILED
        assert error.attempts == attempts
        assert "all 2 IPFS gateways failed for QmCid" in str(error)
        assert "https://a/ipfs/: HTTP 504" in str(error)
        assert "https://b/ipfs/: timed out after 10.0s" in str(error)

    def test_payload_too_large(self):
        """PayloadTooLargeError records the limit."""
        error = PayloadTooLargeError(1024, url="https://x/y")
        assert error.limit == 1024
        assert error.code == DiagnosticCode.PAYLOAD_TOO_LARGE

    @pytest.mark.parametrize(
        ("error_class", "code"),
        [
            (HTTPSFetchError, DiagnosticCode.HTTPS_FETCH_FAILED),
            (ArweaveFetchError, DiagnosticCode.ARWEAVE_FETCH_FAILED),
        ],
    )
    def test_single_attempt_codes(self, error_class, code):
        """Single-attempt fetch errors map to their scheme's code."""
        assert error_class("x").to_diagnostic().code == code


class TestDecompressionErrors:
    """Tests for decompression error classes."""

    def test_limit_error(self):
        """DecompressionLimitError names algorithm and limit."""
        error = DecompressionLimitError("gzip", 102400)
        assert error.algorithm == "gzip"
        assert error.limit == 102400
        assert error.code == DiagnosticCode.DECOMPRESSION_LIMIT
        assert str(error) == "gzip: decompressed output exceeds 102400 bytes"

    def test_failed_error(self):
        """DecompressionFailedError maps to EA005."""
        error = DecompressionFailedError("truncated stream", "br")
        assert error.code == DiagnosticCode.DECOMPRESSION_FAILED
        assert str(error) == "br: truncated stream"


class TestParseErrors:
    """Tests for parse error classes."""

    def test_non_object_root(self):
        """NonObjectRootError names the JSON type."""
        error = NonObjectRootError("array")
        assert error.type_name == "array"
        assert error.code == DiagnosticCode.ROOT_NOT_OBJECT
        assert "got array" in str(error)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    def test_all_errors_inherit_from_resolver_error(self):
        """All custom exceptions should inherit from ResolverError."""
        for error_class in (
            InvalidURIError,
            FetchError,
            DecompressionError,
            DocumentParseError,
        ):
            assert issubclass(error_class, ResolverError)

    def test_fetch_errors_inherit_from_fetch_error(self):
        """Fetch-related errors should inherit from FetchError."""
        for error_class in (
            GatewayAttemptError,
            IPFSFetchError,
            HTTPSFetchError,
            ArweaveFetchError,
            PayloadTooLargeError,
        ):
            assert issubclass(error_class, FetchError)

    def test_parse_errors_inherit_from_document_parse_error(self):
        """Parse-related errors should inherit from DocumentParseError."""
        for error_class in (InvalidBase64Error, InvalidJSONError, NonObjectRootError):
            assert issubclass(error_class, DocumentParseError)

    def test_can_catch_all_with_base_exception(self):
        """All resolver errors can be caught with ResolverError."""
        with pytest.raises(ResolverError):
            raise DecompressionLimitError("zstd", 10)
