"""Level 1: structural well-formedness of fields the document relies on."""

from collections.abc import Mapping

from agent_metadata_resolver.resolver.diagnostics import DiagnosticCode, DiagnosticCollector
from agent_metadata_resolver.resolver.document import AgentDocument
from agent_metadata_resolver.resolver.validation.context import OnchainContext

_STRING_FIELDS = ("type", "name", "description", "image", "updatedAt")


def check_syntax(
    document: AgentDocument,
    report: DiagnosticCollector,
    context: OnchainContext | None = None,
) -> None:
    services_field = document.services_field
    services = document.get(services_field)
    if services is not None and not isinstance(services, tuple):
        report.add(
            DiagnosticCode.WRONG_FIELD_TYPE,
            f"'{services_field}' must be an array",
            services_field,
        )
    elif services is not None:
        for index, item in enumerate(services):
            if not isinstance(item, Mapping):
                report.add(
                    DiagnosticCode.SERVICE_NOT_OBJECT,
                    "service entry must be an object",
                    f"{services_field}[{index}]",
                )

    registrations = document.get("registrations")
    if registrations is not None and not isinstance(registrations, tuple):
        report.add(DiagnosticCode.WRONG_FIELD_TYPE, "'registrations' must be an array", "registrations")
    elif registrations is not None:
        for index, item in enumerate(registrations):
            if not isinstance(item, Mapping):
                report.add(
                    DiagnosticCode.WRONG_FIELD_TYPE,
                    "registration entry must be an object",
                    f"registrations[{index}]",
                )

    trust = document.get("supportedTrust")
    if trust is not None and not isinstance(trust, tuple):
        report.add(DiagnosticCode.WRONG_FIELD_TYPE, "'supportedTrust' must be an array", "supportedTrust")

    for name in _STRING_FIELDS:
        value = document.get(name)
        if value is not None and not isinstance(value, str):
            report.add(DiagnosticCode.WRONG_FIELD_TYPE, f"'{name}' must be a string", name)

    active = document.get("active")
    if active is not None and not isinstance(active, bool):
        report.add(DiagnosticCode.WRONG_FIELD_TYPE, "'active' must be a boolean", "active")
