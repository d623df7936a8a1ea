"""Observability infrastructure module.

This module provides monitoring for the resolver:
- Structured logging with per-resolution correlation IDs
- Prometheus metrics
"""

from agent_metadata_resolver.platform.observability.logging import (
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    resolution_id_ctx,
    shorten_uri,
)
from agent_metadata_resolver.platform.observability.metrics import (
    BUCKETS,
    FetchLabels,
    ResolutionLabels,
    count_diagnostics,
    metrics,
    observe_fetch,
    observe_resolution,
)

__all__ = [
    "BUCKETS",
    "FetchLabels",
    "ResolutionLabels",
    "configure_logging",
    "configure_logging_from_settings",
    "count_diagnostics",
    "get_logger",
    "metrics",
    "observe_fetch",
    "observe_resolution",
    "resolution_id_ctx",
    "shorten_uri",
]
