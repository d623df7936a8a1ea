"""Unit tests for ResolverConfig."""

import dataclasses

import pytest

from agent_metadata_resolver.platform.settings import DEFAULT_IPFS_GATEWAYS, Settings
from agent_metadata_resolver.resolver.config import MAX_DECOMPRESSED_BYTES, ResolverConfig


class TestResolverConfig:
    """Tests for ResolverConfig."""

    def test_defaults(self):
        """Config should have sensible defaults."""
        config = ResolverConfig()
        assert config.ipfs_gateways == tuple(DEFAULT_IPFS_GATEWAYS)
        assert config.gateway_timeout_seconds == 10.0
        assert config.https_timeout_seconds == 10.0
        assert config.arweave_timeout_seconds == 15.0
        assert config.race_gateways is False
        assert config.max_decompressed_bytes == MAX_DECOMPRESSED_BYTES == 100 * 1024

    def test_frozen(self):
        """Config instances are immutable."""
        config = ResolverConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.race_gateways = True  # type: ignore[misc]

    def test_from_settings(self, monkeypatch):
        """Environment settings carry over to the runtime config."""
        monkeypatch.setenv("METADATA_RESOLVER_FETCH__RACE_GATEWAYS", "true")
        monkeypatch.setenv("METADATA_RESOLVER_FETCH__IPFS_GATEWAYS", '["https://gw.example.com/ipfs/"]')
        monkeypatch.setenv("METADATA_RESOLVER_CACHE__MAX_ENTRIES", "10")

        config = ResolverConfig.from_settings(Settings())

        assert config.race_gateways is True
        assert config.ipfs_gateways == ("https://gw.example.com/ipfs/",)
        assert config.cache_max_entries == 10
        assert config.max_decompressed_bytes == MAX_DECOMPRESSED_BYTES
