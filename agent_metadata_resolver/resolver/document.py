"""Parsed agent metadata documents.

An ``AgentDocument`` keeps the JSON object exactly as received, key order
and unknown fields included, and exposes typed read-only views over the
fields the resolver understands.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

REGISTRATION_TYPE = "https://eips.ethereum.org/EIPS/eip-8004#registration-v1"

KNOWN_FIELDS = frozenset(
    {
        "type",
        "name",
        "description",
        "image",
        "services",
        "endpoints",
        "registrations",
        "supportedTrust",
        "active",
        "updatedAt",
    }
)


class ServiceKind(StrEnum):
    """Service variants, tagged by the entry's ``name``."""

    MCP = "MCP"
    A2A = "A2A"
    OASF = "OASF"
    AGENT_WALLET = "agentWallet"
    ENS = "ENS"
    DID = "DID"
    WEB = "web"
    EMAIL = "email"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: Any) -> "ServiceKind":
        if isinstance(name, str):
            kind = _KINDS_BY_LOWER_NAME.get(name.strip().lower())
            if kind is not None:
                return kind
        return cls.UNKNOWN


_KINDS_BY_LOWER_NAME = {kind.value.lower(): kind for kind in ServiceKind if kind is not ServiceKind.UNKNOWN}


@dataclass(frozen=True)
class ServiceEntry:
    """One entry of the ``services`` list.

    Attributes:
        kind: The variant tag.
        index: Position in the source list, used for field paths.
        raw: All fields of the entry, verbatim.
        is_object: False when the source entry was not a JSON object.
    """

    kind: ServiceKind
    index: int
    raw: Mapping[str, Any] = field(default_factory=dict)
    is_object: bool = True

    @property
    def name(self) -> Any:
        return self.raw.get("name")

    @property
    def endpoint(self) -> Any:
        return self.raw.get("endpoint")

    @property
    def version(self) -> Any:
        return self.raw.get("version")

    @property
    def skills(self) -> Any:
        return self.raw.get("skills")

    @property
    def domains(self) -> Any:
        return self.raw.get("domains")


@dataclass(frozen=True)
class Registration:
    """One entry of the ``registrations`` list.

    Attributes:
        index: Position in the source list.
        agent_id: Onchain agent id; None when null or absent.
        agent_registry: CAIP-10 (or CAIP-2) identifier of the registry.
        raw: All fields of the entry, verbatim.
    """

    index: int
    agent_id: Any = None
    agent_registry: Any = None
    raw: Mapping[str, Any] = field(default_factory=dict)


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


class AgentDocument:
    """Immutable agent metadata document.

    ``fields`` is a read-only view of the original object: nested objects
    become mappingproxies and arrays become tuples. Use ``to_dict`` for a
    mutable deep copy and ``to_json`` to re-serialise without losing any
    field.
    """

    def __init__(self, data: dict[str, Any], raw_bytes: bytes = b""):
        self._fields = _freeze(data)
        self._raw_bytes = raw_bytes
        self.uses_legacy_endpoints = "services" not in data and "endpoints" in data
        self.services = self._build_services()
        self.registrations = self._build_registrations()

    def _services_source(self) -> Any:
        if "services" in self._fields:
            return self._fields["services"]
        return self._fields.get("endpoints")

    def _build_services(self) -> tuple[ServiceEntry, ...]:
        source = self._services_source()
        if not isinstance(source, tuple):
            return ()
        entries = []
        for index, item in enumerate(source):
            if isinstance(item, Mapping):
                entries.append(ServiceEntry(kind=ServiceKind.from_name(item.get("name")), index=index, raw=item))
            else:
                entries.append(ServiceEntry(kind=ServiceKind.UNKNOWN, index=index, is_object=False))
        return tuple(entries)

    def _build_registrations(self) -> tuple[Registration, ...]:
        source = self._fields.get("registrations")
        if not isinstance(source, tuple):
            return ()
        return tuple(
            Registration(
                index=index,
                agent_id=item.get("agentId"),
                agent_registry=item.get("agentRegistry"),
                raw=item,
            )
            for index, item in enumerate(source)
            if isinstance(item, Mapping)
        )

    @property
    def fields(self) -> Mapping[str, Any]:
        return self._fields

    @property
    def raw_bytes(self) -> bytes:
        """The decoded bytes the document was parsed from."""
        return self._raw_bytes

    @property
    def services_field(self) -> str:
        """Name of the field the services list was read from."""
        return "endpoints" if self.uses_legacy_endpoints else "services"

    def get(self, key: str, default: Any = None) -> Any:
        return self._fields.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    @property
    def type(self) -> Any:
        return self._fields.get("type")

    @property
    def name(self) -> Any:
        return self._fields.get("name")

    @property
    def description(self) -> Any:
        return self._fields.get("description")

    @property
    def image(self) -> Any:
        return self._fields.get("image")

    @property
    def active(self) -> bool:
        """Whether the agent is active; absent is treated as False."""
        return self._fields.get("active") is True

    @property
    def supported_trust(self) -> tuple[Any, ...]:
        value = self._fields.get("supportedTrust")
        return value if isinstance(value, tuple) else ()

    @property
    def updated_at(self) -> Any:
        return self._fields.get("updatedAt")

    @property
    def unknown_fields(self) -> list[str]:
        return [key for key in self._fields if key not in KNOWN_FIELDS]

    def to_dict(self) -> dict[str, Any]:
        return _thaw(self._fields)

    def to_json(self, **kwargs: Any) -> str:
        kwargs.setdefault("ensure_ascii", False)
        return json.dumps(self.to_dict(), **kwargs)

    def normalized(self) -> dict[str, Any]:
        """Deep copy with legacy ``endpoints`` presented as ``services``.

        Key order is kept; the renamed key takes the position of the legacy
        one. All other fields, known or not, are left untouched.
        """
        data = self.to_dict()
        if not self.uses_legacy_endpoints:
            return data
        return {("services" if key == "endpoints" else key): value for key, value in data.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AgentDocument):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(self.to_json(sort_keys=True))

    def __repr__(self) -> str:
        return f"AgentDocument(name={self.name!r}, services={len(self.services)})"
