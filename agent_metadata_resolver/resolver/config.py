"""Configuration for the metadata resolver.

This module provides the immutable runtime configuration consumed by the
fetcher, decompression guard and cache, plus the bridge from environment
``Settings``.
"""

from dataclasses import dataclass

from agent_metadata_resolver.platform.constants import USER_AGENT
from agent_metadata_resolver.platform.settings import (
    DEFAULT_ARWEAVE_GATEWAY,
    DEFAULT_IPFS_GATEWAYS,
    Settings,
)

# Fixed zip-bomb ceiling for decompressed documents
MAX_DECOMPRESSED_BYTES = 100 * 1024


@dataclass(frozen=True)
class ResolverConfig:
    """Configuration for a resolver instance.

    Attributes:
        ipfs_gateways: Ordered gateway base URLs tried for ipfs:// URIs.
        arweave_gateway: Gateway base URL for ar:// URIs.
        gateway_timeout_seconds: Per-attempt timeout for each IPFS gateway (default: 10s).
        https_timeout_seconds: Timeout for the single HTTPS attempt (default: 10s).
        arweave_timeout_seconds: Timeout for the single Arweave attempt (default: 15s).
        race_gateways: Run gateway attempts concurrently, first success wins (default: False).
        max_payload_bytes: Largest raw payload accepted (default: 1 MiB).
        max_decompressed_bytes: Decompressed size ceiling (default: 100 KiB).
        cache_max_entries: Capacity of the in-process cache tier (default: 1024).
        content_addressed_ttl_seconds: TTL for IPFS/Arweave results (default: 3600s).
        https_ttl_seconds: TTL for HTTPS results (default: 300s).
        user_agent: User-Agent header sent with every request.
    """

    ipfs_gateways: tuple[str, ...] = tuple(DEFAULT_IPFS_GATEWAYS)
    arweave_gateway: str = DEFAULT_ARWEAVE_GATEWAY
    gateway_timeout_seconds: float = 10.0
    https_timeout_seconds: float = 10.0
    arweave_timeout_seconds: float = 15.0
    race_gateways: bool = False
    max_payload_bytes: int = 1024 * 1024
    max_decompressed_bytes: int = MAX_DECOMPRESSED_BYTES
    cache_max_entries: int = 1024
    content_addressed_ttl_seconds: float = 3600.0
    https_ttl_seconds: float = 300.0
    user_agent: str = USER_AGENT

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResolverConfig":
        """Build a runtime config from environment settings."""
        return cls(
            ipfs_gateways=tuple(settings.fetch.ipfs_gateways),
            arweave_gateway=settings.fetch.arweave_gateway,
            gateway_timeout_seconds=settings.fetch.gateway_timeout_seconds,
            https_timeout_seconds=settings.fetch.https_timeout_seconds,
            arweave_timeout_seconds=settings.fetch.arweave_timeout_seconds,
            race_gateways=settings.fetch.race_gateways,
            max_payload_bytes=settings.fetch.max_payload_bytes,
            cache_max_entries=settings.cache.max_entries,
            content_addressed_ttl_seconds=settings.cache.content_addressed_ttl_seconds,
            https_ttl_seconds=settings.cache.https_ttl_seconds,
        )
