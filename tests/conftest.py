"""Shared test fixtures.

This module provides:
- A complete sample document that validates cleanly
- A data URI builder, optionally gzip-compressed
- A factory that parses dicts into AgentDocument instances
"""

import base64
import gzip
import json
from collections.abc import Callable
from typing import Any

import pytest

from agent_metadata_resolver.resolver.document import REGISTRATION_TYPE, AgentDocument
from agent_metadata_resolver.resolver.parser import parse_document

REGISTRY = "eip155:1:0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


def _make_data_uri(
    document: Any,
    *,
    compress: str | None = None,
    media_type: str = "application/json",
) -> str:
    raw = json.dumps(document).encode()
    params = ""
    if compress == "gzip":
        raw = gzip.compress(raw)
        params = ";enc=gzip"
    return f"data:{media_type}{params};base64,{base64.b64encode(raw).decode()}"


@pytest.fixture
def complete_document() -> dict[str, Any]:
    """A document that passes every validation level without findings."""
    return {
        "type": REGISTRATION_TYPE,
        "name": "Weather Agent",
        "description": "Forecasts for any city",
        "image": "ipfs://QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG",
        "services": [
            {
                "name": "A2A",
                "endpoint": "https://agent.example.com/.well-known/agent-card.json",
                "version": "0.3.0",
            },
            {"name": "MCP", "endpoint": "https://agent.example.com/mcp", "version": "2025-06-18"},
            {
                "name": "OASF",
                "endpoint": "https://agent.example.com/oasf",
                "skills": ["natural_language_processing/text_generation"],
            },
            {"name": "agentWallet", "endpoint": REGISTRY},
            {"name": "ENS", "endpoint": "weather.eth"},
            {"name": "DID", "endpoint": "did:web:agent.example.com"},
            {"name": "web", "endpoint": "https://agent.example.com"},
            {"name": "email", "endpoint": "ops@agent.example.com"},
        ],
        "registrations": [{"agentId": 42, "agentRegistry": REGISTRY}],
        "supportedTrust": ["reputation", "crypto-economic"],
        "active": True,
        "updatedAt": "2025-01-31T12:00:00Z",
    }


@pytest.fixture
def data_uri() -> Callable[..., str]:
    """Builder for base64 data URIs carrying a JSON document."""
    return _make_data_uri


@pytest.fixture
def document_factory() -> Callable[[dict[str, Any]], AgentDocument]:
    """Factory that parses a dict into an AgentDocument."""

    def _build(data: dict[str, Any]) -> AgentDocument:
        return parse_document(json.dumps(data).encode())

    return _build
