"""Integration tests for end-to-end resolution.

These tests drive MetadataResolver through classification, fetching,
decoding, decompression, parsing, validation and caching, with network
traffic mocked at the HTTP transport by respx.
"""

import base64
import gzip
import hashlib
import json

import httpx
import respx

from agent_metadata_resolver import MetadataResolver, OnchainContext, ResolverConfig
from agent_metadata_resolver.resolver.diagnostics import DiagnosticCode
from agent_metadata_resolver.resolver.result import CacheSource
from agent_metadata_resolver.resolver.uri import UriScheme

CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"
REGISTRY = "eip155:1:0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
GATEWAYS = ("https://gw1.test/ipfs/", "https://gw2.test/ipfs/", "https://gw3.test/ipfs/")


class TestDataURIScenarios:
    """Inline data URI resolution."""

    async def test_minimal_base64_document(self):
        """A name-only document parses with WA001 and IA002 and no errors."""
        async with MetadataResolver() as resolver:
            result = await resolver.resolve("data:application/json;base64,eyJuYW1lIjoiQSJ9")

        assert result.document.to_dict() == {"name": "A"}
        assert "WA001" in result.codes
        assert "IA002" in result.codes
        assert result.errors == []

    async def test_unencoded_json_after_base64_marker(self):
        """Raw JSON after ;base64 still parses, with WA050."""
        async with MetadataResolver() as resolver:
            result = await resolver.resolve('data:application/json;base64,{"name":"A"}')

        assert result.document.to_dict() == {"name": "A"}
        assert "WA050" in result.codes
        assert result.errors == []

    async def test_complete_document_is_clean(self, complete_document, data_uri):
        """A complete document resolves with no diagnostics."""
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(data_uri(complete_document))

        assert result.diagnostics == []
        assert result.document.to_dict() == complete_document

    async def test_compressed_document(self, complete_document, data_uri):
        """gzip-enveloped documents are decompressed before parsing."""
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(data_uri(complete_document, compress="gzip"))

        assert result.diagnostics == []
        assert result.document.name == "Weather Agent"

    async def test_zip_bomb_rejected(self):
        """A compressed bomb is EA004 with no document."""
        bomb = base64.b64encode(gzip.compress(b" " * (4 * 1024 * 1024))).decode()
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(f"data:application/json;enc=gzip;base64,{bomb}")

        assert result.document is None
        assert result.codes == ["EA004"]

    async def test_unknown_compression_passthrough(self):
        """Unknown enc values are noted and the payload is parsed as-is."""
        encoded = base64.b64encode(b'{"name":"A"}').decode()
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(f"data:application/json;enc=lzma;base64,{encoded}")

        assert result.document.name == "A"
        assert "IA010" in result.codes

    async def test_invalid_base64(self):
        """Undecodable base64 is EA003."""
        async with MetadataResolver() as resolver:
            result = await resolver.resolve("data:application/json;base64,@@@@")

        assert result.document is None
        assert result.codes == ["EA003"]

    async def test_array_root(self):
        """A JSON array root is EA010."""
        async with MetadataResolver() as resolver:
            result = await resolver.resolve("data:application/json,[1,2]")

        assert result.document is None
        assert result.codes == ["EA010"]

    async def test_legacy_endpoints(self, complete_document, data_uri):
        """Legacy endpoints documents resolve with WA031 and normalise to services."""
        complete_document["endpoints"] = complete_document.pop("services")
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(data_uri(complete_document))

        assert result.codes == ["WA031"]
        assert "services" in result.document.normalized()
        assert "endpoints" in result.document.to_dict()


class TestHostileDocuments:
    """Valid but hostile JSON is reported, never raised."""

    async def test_oversized_integer(self):
        """An integer past the interpreter's digit limit is EA002."""
        encoded = base64.b64encode(b'{"name":"A","nonce":' + b"7" * 5000 + b"}").decode()
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(f"data:application/json;base64,{encoded}")

        assert result.document is None
        assert result.codes == ["EA002"]

    async def test_deep_nesting(self):
        """Hundreds of nested arrays in a tiny payload are EA002."""
        depth = 600
        encoded = base64.b64encode(('{"name":"A","x":' + "[" * depth + "]" * depth + "}").encode()).decode()
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(f"data:application/json;base64,{encoded}")

        assert result.document is None
        assert result.codes == ["EA002"]

    async def test_unicode_digit_agent_id(self, complete_document, data_uri):
        """A superscript digit agentId is WA062 on a parsed document."""
        complete_document["registrations"] = [{"agentId": "²", "agentRegistry": REGISTRY}]
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(data_uri(complete_document))

        assert result.document is not None
        assert result.codes == ["WA062"]

    async def test_string_active(self, complete_document, data_uri):
        """A string active flag is a type error and the agent is treated as inactive."""
        complete_document["active"] = "true"
        async with MetadataResolver() as resolver:
            result = await resolver.resolve(data_uri(complete_document))

        assert result.codes == ["WA010", "IA005"]
        assert result.document.active is False

    async def test_whitespace_padded_json_after_base64_marker(self):
        """Raw JSON behind long leading whitespace is WA050, not EA003."""
        async with MetadataResolver() as resolver:
            result = await resolver.resolve("data:application/json;base64," + "%20" * 20 + '{"name":"A"}')

        assert result.document.name == "A"
        assert "WA050" in result.codes
        assert result.errors == []


class TestNetworkScenarios:
    """IPFS, Arweave and HTTPS resolution."""

    @respx.mock
    async def test_https_timeout(self):
        """An HTTPS timeout is EA008 with no document on a fresh result."""
        respx.get("https://agent.example.com/agent.json").mock(side_effect=httpx.ReadTimeout("slow"))

        async with MetadataResolver() as resolver:
            result = await resolver.resolve("https://agent.example.com/agent.json")

        assert result.codes == ["EA008"]
        assert result.document is None
        assert result.source is CacheSource.FRESH

    @respx.mock
    async def test_ipfs_fallback(self, complete_document):
        """The last healthy gateway serves the document after earlier failures."""
        body = json.dumps(complete_document).encode()
        respx.get(f"https://gw1.test/ipfs/{CID}").mock(return_value=httpx.Response(504))
        respx.get(f"https://gw2.test/ipfs/{CID}").mock(side_effect=httpx.ConnectError("refused"))
        respx.get(f"https://gw3.test/ipfs/{CID}").mock(return_value=httpx.Response(200, content=body))

        async with MetadataResolver(ResolverConfig(ipfs_gateways=GATEWAYS)) as resolver:
            result = await resolver.resolve(f"ipfs://{CID}")

        assert result.diagnostics == []
        assert result.scheme == UriScheme.IPFS
        assert result.fetched_from.gateway == GATEWAYS[2]

    @respx.mock
    async def test_ipfs_all_gateways_down(self):
        """Every gateway failing is EA007."""
        for gateway in GATEWAYS:
            respx.get(f"{gateway}{CID}").mock(return_value=httpx.Response(503))

        async with MetadataResolver(ResolverConfig(ipfs_gateways=GATEWAYS)) as resolver:
            result = await resolver.resolve(f"ipfs://{CID}")

        assert result.codes == ["EA007"]
        assert result.document is None

    @respx.mock
    async def test_resolution_is_idempotent(self, complete_document):
        """A second resolution returns identical content from cache without refetching."""
        route = respx.get("https://agent.example.com/agent.json").mock(
            return_value=httpx.Response(200, content=json.dumps(complete_document).encode())
        )

        async with MetadataResolver() as resolver:
            first = await resolver.resolve("https://agent.example.com/agent.json")
            second = await resolver.resolve("https://agent.example.com/agent.json")

        assert route.call_count == 1
        assert first.source is CacheSource.FRESH
        assert second.source is CacheSource.CACHE_HIT
        assert second.document == first.document
        assert second.diagnostics == first.diagnostics

    @respx.mock
    async def test_transport_compressed_response(self, complete_document):
        """A gzip Content-Encoding body goes through the bounded decompressor."""
        respx.get("https://agent.example.com/agent.json").mock(
            return_value=httpx.Response(
                200,
                content=gzip.compress(json.dumps(complete_document).encode()),
                headers={"content-encoding": "gzip", "content-type": "application/json"},
            )
        )

        async with MetadataResolver() as resolver:
            result = await resolver.resolve("https://agent.example.com/agent.json")

        assert result.diagnostics == []
        assert result.document.name == "Weather Agent"


class TestOnchainCrossChecks:
    """Cross-checks against the onchain record."""

    @respx.mock
    async def test_hash_and_registration_agree(self, complete_document):
        """Matching hash and registration produce no findings."""
        body = json.dumps(complete_document).encode()
        respx.get("https://agent.example.com/agent.json").mock(return_value=httpx.Response(200, content=body))
        context = OnchainContext(
            agent_id=42,
            registry_address=REGISTRY,
            onchain_agent_hash=hashlib.sha256(body).digest(),
        )

        async with MetadataResolver() as resolver:
            result = await resolver.resolve("https://agent.example.com/agent.json", context)

        assert result.diagnostics == []

    async def test_hash_and_registration_disagree(self, complete_document, data_uri):
        """A tampered document and a foreign agent id are both reported."""
        context = OnchainContext(agent_id=99, registry_address=REGISTRY, onchain_agent_hash=b"\xaa" * 32)

        async with MetadataResolver() as resolver:
            result = await resolver.resolve(data_uri(complete_document), context)

        assert [(d.code, d.field_path) for d in result.diagnostics] == [
            (DiagnosticCode.CONTENT_HASH_MISMATCH, ""),
            (DiagnosticCode.REGISTRATION_CONFLICT, "registrations[0].agentId"),
        ]
        assert result.document is not None
