"""agent-metadata-resolver - Resolution and validation of ERC-8004 agent metadata."""

from .platform.observability import configure_logging_from_settings
from .resolver import (
    CacheSource,
    Diagnostic,
    DiagnosticCode,
    MetadataResolver,
    OnchainContext,
    ResolutionResult,
    ResolverConfig,
    create_resolver,
    resolve,
)

__all__ = [
    "CacheSource",
    "Diagnostic",
    "DiagnosticCode",
    "MetadataResolver",
    "OnchainContext",
    "ResolutionResult",
    "ResolverConfig",
    "configure_logging_from_settings",
    "create_resolver",
    "resolve",
]
