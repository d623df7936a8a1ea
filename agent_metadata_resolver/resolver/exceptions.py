"""Custom exception hierarchy for the metadata resolver.

Every critical failure is raised as a ``ResolverError`` carrying the
diagnostic code it maps to. The resolution orchestrator is the only place
these are caught and turned into ``Diagnostic`` records; validation never
raises.
"""

from typing import ClassVar

from agent_metadata_resolver.resolver.diagnostics import Diagnostic, DiagnosticCode


class ResolverError(Exception):
    """Base exception for all resolver errors."""

    code: ClassVar[DiagnosticCode]

    def __init__(self, message: str, field_path: str = ""):
        self.message = message
        self.field_path = field_path
        super().__init__(message)

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(code=self.code, message=self.message, field_path=self.field_path)


class InvalidURIError(ResolverError):
    """Raised when a malformed URI reaches the fetch stage."""

    code = DiagnosticCode.INVALID_URI

    def __init__(self, message: str, code: DiagnosticCode = DiagnosticCode.INVALID_URI):
        self.code = code  # type: ignore[misc]
        super().__init__(message)


# =============================================================================
# Fetch errors
# =============================================================================


class FetchError(ResolverError):
    """Base exception for content retrieval failures."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(f"Fetch failed{f' from {url}' if url else ''}: {message}")


class GatewayAttemptError(FetchError):
    """Raised when a single IPFS gateway attempt fails.

    Never surfaced to callers: the fetcher moves on to the next gateway.
    """

    code = DiagnosticCode.IPFS_FETCH_FAILED

    def __init__(self, message: str, gateway: str, url: str | None = None):
        self.gateway = gateway
        self.reason = message
        super().__init__(message, url=url)


class IPFSFetchError(FetchError):
    """Raised when every configured IPFS gateway failed."""

    code = DiagnosticCode.IPFS_FETCH_FAILED

    def __init__(self, cid: str, attempts: list[GatewayAttemptError]):
        self.cid = cid
        self.attempts = attempts
        detail = "; ".join(f"{a.gateway}: {a.reason}" for a in attempts)
        super().__init__(f"all {len(attempts)} IPFS gateways failed for {cid} ({detail})")


class HTTPSFetchError(FetchError):
    """Raised when the single HTTPS attempt fails."""

    code = DiagnosticCode.HTTPS_FETCH_FAILED


class ArweaveFetchError(FetchError):
    """Raised when the single Arweave attempt fails."""

    code = DiagnosticCode.ARWEAVE_FETCH_FAILED


class PayloadTooLargeError(FetchError):
    """Raised when a payload exceeds the configured size cap."""

    code = DiagnosticCode.PAYLOAD_TOO_LARGE

    def __init__(self, limit: int, url: str | None = None):
        self.limit = limit
        super().__init__(f"payload exceeds {limit} bytes", url=url)


# =============================================================================
# Decompression errors
# =============================================================================


class DecompressionError(ResolverError):
    """Base exception for compression envelope failures."""

    def __init__(self, message: str, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f"{algorithm}: {message}")


class DecompressionLimitError(DecompressionError):
    """Raised the moment decompressed output would exceed the ceiling."""

    code = DiagnosticCode.DECOMPRESSION_LIMIT

    def __init__(self, algorithm: str, limit: int):
        self.limit = limit
        super().__init__(f"decompressed output exceeds {limit} bytes", algorithm)


class DecompressionFailedError(DecompressionError):
    """Raised when the codec rejects the compressed stream."""

    code = DiagnosticCode.DECOMPRESSION_FAILED


# =============================================================================
# Parse errors
# =============================================================================


class DocumentParseError(ResolverError):
    """Base exception for document decoding failures."""


class InvalidBase64Error(DocumentParseError):
    """Raised when a base64 envelope cannot be decoded."""

    code = DiagnosticCode.INVALID_BASE64


class InvalidJSONError(DocumentParseError):
    """Raised when the payload is not UTF-8 JSON."""

    code = DiagnosticCode.INVALID_JSON


class NonObjectRootError(DocumentParseError):
    """Raised when the JSON root value is not an object."""

    code = DiagnosticCode.ROOT_NOT_OBJECT

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"document root must be a JSON object, got {type_name}")
