"""Five-level validation of parsed agent documents.

Levels run in order and only ever append diagnostics; none of them stops
the pipeline or touches the document.
"""

from collections.abc import Callable

from agent_metadata_resolver.resolver.diagnostics import Diagnostic, DiagnosticCollector
from agent_metadata_resolver.resolver.document import AgentDocument
from agent_metadata_resolver.resolver.validation.context import OnchainContext
from agent_metadata_resolver.resolver.validation.endpoints import check_endpoints
from agent_metadata_resolver.resolver.validation.schema import check_schema
from agent_metadata_resolver.resolver.validation.semantic import check_semantic
from agent_metadata_resolver.resolver.validation.status import check_status
from agent_metadata_resolver.resolver.validation.syntax import check_syntax

ValidationLevel = Callable[[AgentDocument, DiagnosticCollector, OnchainContext | None], None]

LEVELS: tuple[tuple[str, ValidationLevel], ...] = (
    ("syntax", check_syntax),
    ("schema", check_schema),
    ("endpoints", check_endpoints),
    ("semantic", check_semantic),
    ("status", check_status),
)


def validate(document: AgentDocument, context: OnchainContext | None = None) -> list[Diagnostic]:
    """Run all validation levels against a document.

    Args:
        document: The parsed document.
        context: Optional onchain record enabling hash and registration checks.

    Returns:
        Ordered, de-duplicated diagnostics from every level.
    """
    report = DiagnosticCollector()
    for _, level in LEVELS:
        level(document, report, context)
    return report.to_list()
