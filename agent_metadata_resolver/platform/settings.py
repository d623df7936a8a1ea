"""Application settings and configuration.

This module provides Pydantic settings classes for resolver configuration,
loaded from environment variables with support for nested configuration.

Example:
    METADATA_RESOLVER_FETCH__RACE_GATEWAYS=true
    METADATA_RESOLVER_FETCH__IPFS_GATEWAYS='["https://ipfs.io/ipfs/"]'
    METADATA_RESOLVER_CACHE__HTTPS_TTL_SECONDS=60
"""

import logging

import pydantic_settings
from pydantic import BaseModel, Field, field_validator

DEFAULT_IPFS_GATEWAYS = [
    "https://ipfs.io/ipfs/",
    "https://dweb.link/ipfs/",
    "https://cloudflare-ipfs.com/ipfs/",
    "https://gateway.pinata.cloud/ipfs/",
]
DEFAULT_ARWEAVE_GATEWAY = "https://arweave.net/"


class LoggingSettings(BaseModel):
    level: str = Field("INFO")
    json_output: bool = Field(True)
    uri_max_length: int = Field(96, ge=16)
    quiet_transport: bool = Field(True)

    @field_validator("level")
    @classmethod
    def _validate_level(cls, v):
        v_upper = v.upper()
        if v_upper not in logging._nameToLevel:
            raise ValueError(f'invalid value "{v}"')
        return v_upper


class FetchSettings(BaseModel):
    """Network settings for the content fetcher.

    Attributes:
        ipfs_gateways: Ordered gateway base URLs; the CID is appended to each
        arweave_gateway: Base URL for Arweave transaction data
        gateway_timeout_seconds: Timeout for a single IPFS gateway attempt
        https_timeout_seconds: Timeout for the single HTTPS attempt
        arweave_timeout_seconds: Timeout for the single Arweave attempt
        race_gateways: Issue all gateway attempts concurrently, first success wins
        max_payload_bytes: Largest response body accepted from the network
    """

    ipfs_gateways: list[str] = Field(default_factory=lambda: list(DEFAULT_IPFS_GATEWAYS))
    arweave_gateway: str = Field(DEFAULT_ARWEAVE_GATEWAY)
    gateway_timeout_seconds: float = Field(10.0, gt=0)
    https_timeout_seconds: float = Field(10.0, gt=0)
    arweave_timeout_seconds: float = Field(15.0, gt=0)
    race_gateways: bool = Field(False)
    max_payload_bytes: int = Field(1024 * 1024, gt=0)

    @field_validator("ipfs_gateways")
    @classmethod
    def _validate_gateways(cls, v):
        if not v:
            raise ValueError("at least one IPFS gateway is required")
        for gateway in v:
            if not gateway.startswith("https://"):
                raise ValueError(f'gateway "{gateway}" must use https')
        return v

    @field_validator("arweave_gateway")
    @classmethod
    def _validate_arweave_gateway(cls, v):
        if not v.startswith("https://"):
            raise ValueError(f'gateway "{v}" must use https')
        return v


class CacheSettings(BaseModel):
    max_entries: int = Field(1024, gt=0)
    content_addressed_ttl_seconds: float = Field(3600.0, gt=0)
    https_ttl_seconds: float = Field(300.0, gt=0)


class Settings(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="METADATA_RESOLVER_",
        env_nested_delimiter="__",
    )

    logging: LoggingSettings = LoggingSettings()
    fetch: FetchSettings = FetchSettings()
    cache: CacheSettings = CacheSettings()
