"""Unit tests for AgentDocument and its views."""

import pytest

from agent_metadata_resolver.resolver.document import ServiceKind


class TestServiceKind:
    """Tests for ServiceKind.from_name."""

    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("MCP", ServiceKind.MCP),
            ("mcp", ServiceKind.MCP),
            ("A2A", ServiceKind.A2A),
            ("oasf", ServiceKind.OASF),
            ("agentWallet", ServiceKind.AGENT_WALLET),
            ("AGENTWALLET", ServiceKind.AGENT_WALLET),
            ("ENS", ServiceKind.ENS),
            ("did", ServiceKind.DID),
            ("Web", ServiceKind.WEB),
            (" email ", ServiceKind.EMAIL),
        ],
    )
    def test_known_names(self, name, kind):
        """Known names match case-insensitively."""
        assert ServiceKind.from_name(name) is kind

    @pytest.mark.parametrize("name", ["gRPC", "", None, 7, "unknown"])
    def test_unknown_names(self, name):
        """Anything else is UNKNOWN."""
        assert ServiceKind.from_name(name) is ServiceKind.UNKNOWN


class TestAgentDocument:
    """Tests for AgentDocument."""

    def test_scalar_accessors(self, document_factory, complete_document):
        """Recognised fields are exposed directly."""
        document = document_factory(complete_document)
        assert document.name == "Weather Agent"
        assert document.active is True
        assert document.supported_trust == ("reputation", "crypto-economic")
        assert document.updated_at == "2025-01-31T12:00:00Z"

    def test_services_tagged_by_kind(self, document_factory, complete_document):
        """Each service entry carries its variant tag and raw fields."""
        document = document_factory(complete_document)
        kinds = [s.kind for s in document.services]
        assert kinds == [
            ServiceKind.A2A,
            ServiceKind.MCP,
            ServiceKind.OASF,
            ServiceKind.AGENT_WALLET,
            ServiceKind.ENS,
            ServiceKind.DID,
            ServiceKind.WEB,
            ServiceKind.EMAIL,
        ]
        assert document.services[1].version == "2025-06-18"
        assert document.services[2].skills == ("natural_language_processing/text_generation",)

    def test_unknown_service_keeps_raw_fields(self, document_factory):
        """Unknown service types keep every field."""
        document = document_factory({"services": [{"name": "gRPC", "endpoint": "grpc://x", "proto": "v1"}]})
        service = document.services[0]
        assert service.kind is ServiceKind.UNKNOWN
        assert dict(service.raw) == {"name": "gRPC", "endpoint": "grpc://x", "proto": "v1"}

    def test_non_object_service_entry(self, document_factory):
        """Non-object entries are kept as placeholders with their index."""
        document = document_factory({"services": ["oops", {}]})
        assert [s.is_object for s in document.services] == [False, True]
        assert document.services[1].index == 1

    def test_registrations(self, document_factory):
        """Registrations expose agentId and agentRegistry."""
        document = document_factory(
            {"registrations": [{"agentId": None, "agentRegistry": "eip155:1:0xabc"}, "junk"]}
        )
        assert len(document.registrations) == 1
        assert document.registrations[0].agent_id is None
        assert document.registrations[0].agent_registry == "eip155:1:0xabc"

    def test_active_defaults_false(self, document_factory):
        """Absent or non-boolean active is treated as False."""
        assert document_factory({}).active is False
        assert document_factory({"active": "yes"}).active is False

    def test_immutable(self, document_factory, complete_document):
        """Fields cannot be mutated through the document."""
        document = document_factory(complete_document)
        with pytest.raises(TypeError):
            document.fields["name"] = "changed"  # type: ignore[index]
        with pytest.raises(TypeError):
            document.fields["services"][0]["name"] = "x"  # type: ignore[index]

    def test_to_dict_is_deep_copy(self, document_factory, complete_document):
        """to_dict returns a fresh mutable copy."""
        document = document_factory(complete_document)
        data = document.to_dict()
        data["services"].append({"name": "web"})
        assert len(document.services) == 8
        assert data != document.to_dict()

    def test_key_order_preserved(self, document_factory):
        """Serialisation keeps the original key order."""
        document = document_factory({"z": 1, "name": "A", "a": 2})
        assert list(document.to_dict()) == ["z", "name", "a"]

    def test_non_ascii_round_trip(self, document_factory):
        """Non-ASCII text is not escaped on output."""
        document = document_factory({"name": "Agente Meteorológico"})
        assert "Meteorológico" in document.to_json()

    def test_legacy_endpoints(self, document_factory):
        """endpoints stands in for services when services is absent."""
        document = document_factory({"name": "A", "endpoints": [{"name": "web", "endpoint": "https://x.io"}]})
        assert document.uses_legacy_endpoints
        assert document.services_field == "endpoints"
        assert document.services[0].kind is ServiceKind.WEB

    def test_services_wins_over_endpoints(self, document_factory):
        """When both are present, services is authoritative."""
        document = document_factory(
            {"services": [{"name": "MCP"}], "endpoints": [{"name": "web"}, {"name": "web"}]}
        )
        assert not document.uses_legacy_endpoints
        assert [s.kind for s in document.services] == [ServiceKind.MCP]

    def test_normalized_renames_in_place(self, document_factory):
        """normalized() renames endpoints to services at the same position."""
        document = document_factory({"name": "A", "endpoints": [], "x": 1})
        assert list(document.normalized()) == ["name", "services", "x"]
        assert "endpoints" in document.to_dict()

    def test_equality_and_hash(self, document_factory):
        """Documents with equal content are equal and hash alike."""
        a = document_factory({"name": "A", "services": []})
        b = document_factory({"name": "A", "services": []})
        assert a == b
        assert hash(a) == hash(b)
        assert a != document_factory({"name": "B"})
