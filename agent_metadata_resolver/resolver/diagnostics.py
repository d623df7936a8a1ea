"""Diagnostic codes and records produced during resolution and validation.

Codes follow the ``<Severity><Object><Number>`` layout, e.g. ``EA004``:
severity is one of E/W/I, object is A (agent metadata) or F (feedback),
and the number is zero-padded to three digits. Codes are part of the
public contract with downstream indexers and must never be renumbered.
"""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

CODE_PATTERN = re.compile(r"^[EWI][AF][0-9]{3}$")


class Severity(StrEnum):
    """Severity of a diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_SEVERITY_BY_PREFIX = {
    "E": Severity.ERROR,
    "W": Severity.WARNING,
    "I": Severity.INFO,
}


class DiagnosticCode(StrEnum):
    """Catalog of agent-metadata diagnostic codes."""

    # Errors: no document can be produced
    INVALID_URI = "EA001"
    INVALID_JSON = "EA002"
    INVALID_BASE64 = "EA003"
    DECOMPRESSION_LIMIT = "EA004"
    DECOMPRESSION_FAILED = "EA005"
    UNSUPPORTED_SCHEME = "EA006"
    IPFS_FETCH_FAILED = "EA007"
    HTTPS_FETCH_FAILED = "EA008"
    ARWEAVE_FETCH_FAILED = "EA009"
    ROOT_NOT_OBJECT = "EA010"
    PAYLOAD_TOO_LARGE = "EA011"

    # Warnings: document produced but deviates from recommended practice
    MISSING_TYPE = "WA001"
    MISSING_NAME = "WA002"
    MISSING_DESCRIPTION = "WA003"
    MISSING_IMAGE = "WA004"
    UNEXPECTED_TYPE = "WA005"
    WRONG_FIELD_TYPE = "WA010"
    SERVICE_NOT_OBJECT = "WA011"
    SERVICE_MISSING_NAME = "WA012"
    DUPLICATE_SERVICE = "WA013"
    SERVICE_MISSING_ENDPOINT = "WA020"
    SERVICE_ENDPOINT_NOT_URL = "WA021"
    A2A_NOT_WELL_KNOWN = "WA022"
    OASF_MISSING_TAXONOMY = "WA023"
    AGENT_WALLET_NOT_CAIP10 = "WA024"
    INVALID_ENS_NAME = "WA025"
    INVALID_DID = "WA026"
    INVALID_EMAIL = "WA027"
    LEGACY_ENDPOINTS = "WA031"
    INVALID_IMAGE_URI = "WA040"
    UNENCODED_BASE64_PAYLOAD = "WA050"
    NON_JSON_MEDIA_TYPE = "WA051"
    INVALID_CAIP_IDENTIFIER = "WA060"
    INVALID_TIMESTAMP = "WA061"
    INVALID_AGENT_ID = "WA062"
    CONTENT_HASH_MISMATCH = "WA070"
    REGISTRATION_CONFLICT = "WA080"

    # Info: advisory, expected in normal operation
    MISSING_REGISTRATIONS = "IA001"
    MISSING_SERVICES = "IA002"
    MISSING_SUPPORTED_TRUST = "IA003"
    AGENT_INACTIVE = "IA004"
    ACTIVE_NOT_SET = "IA005"
    MISSING_AGENT_ID = "IA006"
    UNKNOWN_SERVICE_TYPE = "IA007"
    UNKNOWN_FIELD = "IA008"
    UNKNOWN_TRUST_MODEL = "IA009"
    UNKNOWN_COMPRESSION = "IA010"
    MCP_MISSING_VERSION = "IA020"

    @property
    def severity(self) -> Severity:
        return _SEVERITY_BY_PREFIX[self.value[0]]


@dataclass(frozen=True)
class Diagnostic:
    """A classified finding.

    Attributes:
        code: Stable diagnostic code.
        message: Human-readable explanation.
        field_path: JSONPath-like location of the offending field ("" for the
            document or URI as a whole).
    """

    code: DiagnosticCode
    message: str
    field_path: str = ""

    @property
    def severity(self) -> Severity:
        return self.code.severity

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, str]:
        return {
            "code": str(self.code),
            "severity": str(self.severity),
            "message": self.message,
            "fieldPath": self.field_path,
        }


@dataclass
class DiagnosticCollector:
    """Ordered diagnostic accumulator.

    Keeps insertion order and collapses repeats of the same code at the same
    field path; the first message wins.
    """

    _items: list[Diagnostic] = field(default_factory=list)
    _seen: set[tuple[DiagnosticCode, str]] = field(default_factory=set)

    def add(self, code: DiagnosticCode, message: str, field_path: str = "") -> None:
        self.append(Diagnostic(code=code, message=message, field_path=field_path))

    def append(self, diagnostic: Diagnostic) -> None:
        key = (diagnostic.code, diagnostic.field_path)
        if key in self._seen:
            return
        self._seen.add(key)
        self._items.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.append(diagnostic)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self._items)

    def to_list(self) -> list[Diagnostic]:
        return list(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
