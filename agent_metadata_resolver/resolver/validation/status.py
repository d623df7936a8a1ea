"""Level 5: production-readiness flags."""

from agent_metadata_resolver.resolver.diagnostics import DiagnosticCode, DiagnosticCollector
from agent_metadata_resolver.resolver.document import AgentDocument
from agent_metadata_resolver.resolver.validation.context import OnchainContext


def check_status(
    document: AgentDocument,
    report: DiagnosticCollector,
    context: OnchainContext | None = None,
) -> None:
    active = document.get("active")
    if active is None:
        report.add(DiagnosticCode.ACTIVE_NOT_SET, "'active' not set, agent treated as inactive", "active")
    elif not isinstance(active, bool):
        report.add(DiagnosticCode.ACTIVE_NOT_SET, "'active' is not a boolean, agent treated as inactive", "active")
    elif active is False:
        report.add(DiagnosticCode.AGENT_INACTIVE, "agent is marked inactive", "active")

    for registration in document.registrations:
        if registration.agent_id is None:
            report.add(
                DiagnosticCode.MISSING_AGENT_ID,
                "'agentId' not assigned yet",
                f"registrations[{registration.index}].agentId",
            )

    services = document.get(document.services_field)
    if isinstance(services, tuple) and not services:
        report.add(DiagnosticCode.MISSING_SERVICES, "'services' is empty", document.services_field)
