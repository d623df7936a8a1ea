"""Metadata resolver module for ERC-8004 agent registration documents.

This module resolves the metadata URI recorded for an agent and reports
what it found as classified diagnostics.

The module includes:
- URI classification (data, IPFS, Arweave, HTTPS)
- Content fetching with IPFS gateway fallback
- Bounded decompression of compressed payloads
- Document parsing that preserves unknown fields
- Five-level validation against the registration schema and onchain state
- Tiered result caching
"""

from agent_metadata_resolver.resolver.cache import CacheBackend, CacheEntry, ResultCache
from agent_metadata_resolver.resolver.client import MetadataResolver, create_resolver, resolve
from agent_metadata_resolver.resolver.config import MAX_DECOMPRESSED_BYTES, ResolverConfig
from agent_metadata_resolver.resolver.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticCollector,
    Severity,
)
from agent_metadata_resolver.resolver.document import (
    AgentDocument,
    Registration,
    ServiceEntry,
    ServiceKind,
)
from agent_metadata_resolver.resolver.exceptions import (
    ArweaveFetchError,
    DecompressionError,
    DecompressionFailedError,
    DecompressionLimitError,
    DocumentParseError,
    FetchError,
    HTTPSFetchError,
    InvalidBase64Error,
    InvalidJSONError,
    InvalidURIError,
    IPFSFetchError,
    NonObjectRootError,
    PayloadTooLargeError,
    ResolverError,
)
from agent_metadata_resolver.resolver.result import CacheSource, ResolutionResult
from agent_metadata_resolver.resolver.uri import DataEncoding, MetadataURI, UriScheme, classify
from agent_metadata_resolver.resolver.validation import OnchainContext, validate

__all__ = [
    # Orchestrator
    "MetadataResolver",
    "ResolverConfig",
    "create_resolver",
    "resolve",
    "MAX_DECOMPRESSED_BYTES",
    # Classification
    "classify",
    "MetadataURI",
    "UriScheme",
    "DataEncoding",
    # Documents
    "AgentDocument",
    "ServiceEntry",
    "ServiceKind",
    "Registration",
    # Validation
    "validate",
    "OnchainContext",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticCollector",
    "Severity",
    # Results and cache
    "ResolutionResult",
    "CacheSource",
    "ResultCache",
    "CacheEntry",
    "CacheBackend",
    # Exceptions
    "ResolverError",
    "InvalidURIError",
    "FetchError",
    "IPFSFetchError",
    "HTTPSFetchError",
    "ArweaveFetchError",
    "PayloadTooLargeError",
    "DecompressionError",
    "DecompressionLimitError",
    "DecompressionFailedError",
    "DocumentParseError",
    "InvalidJSONError",
    "InvalidBase64Error",
    "NonObjectRootError",
]
