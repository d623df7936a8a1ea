"""Resolution results."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from agent_metadata_resolver.resolver.diagnostics import Diagnostic, Severity
from agent_metadata_resolver.resolver.document import AgentDocument
from agent_metadata_resolver.resolver.payload import FetchSource
from agent_metadata_resolver.resolver.uri import UriScheme


class CacheSource(StrEnum):
    """Whether a result was computed or served from cache."""

    FRESH = "fresh"
    CACHE_HIT = "cache_hit"


@dataclass
class ResolutionResult:
    """Outcome of resolving one metadata URI.

    Attributes:
        uri: The URI as supplied by the caller.
        scheme: Classified scheme of the URI.
        document: The parsed document; None iff a critical error halted parsing.
        diagnostics: Ordered diagnostics from every stage that ran.
        source: Fresh resolution or cache hit.
        fetched_from: Scheme and gateway that served the bytes, if any.
    """

    uri: str
    scheme: UriScheme
    document: AgentDocument | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    source: CacheSource = CacheSource.FRESH
    fetched_from: FetchSource | None = None

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def infos(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.INFO]

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    @property
    def codes(self) -> list[str]:
        return [str(d.code) for d in self.diagnostics]

    def to_dict(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "scheme": str(self.scheme),
            "document": self.document.to_dict() if self.document is not None else None,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "source": str(self.source),
            "fetchedFrom": str(self.fetched_from) if self.fetched_from else None,
        }
