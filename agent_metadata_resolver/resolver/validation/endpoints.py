"""Level 3: per-service required fields and endpoint formats.

Each known ``ServiceKind`` has one check below. Supporting a new service
type means adding an enum member and a clause in ``_KIND_CHECKS``.
"""

from collections.abc import Callable
from urllib.parse import urlsplit

from agent_metadata_resolver.resolver.diagnostics import DiagnosticCode, DiagnosticCollector
from agent_metadata_resolver.resolver.document import AgentDocument, ServiceEntry, ServiceKind
from agent_metadata_resolver.resolver.validation.context import OnchainContext
from agent_metadata_resolver.resolver.validation.formats import (
    is_blank,
    is_caip10,
    is_did,
    is_email,
    is_ens_name,
    is_http_url,
)

A2A_WELL_KNOWN_PATHS = ("/.well-known/agent-card.json", "/.well-known/agent.json")

# Kinds whose endpoint may be omitted
_ENDPOINT_OPTIONAL = frozenset({ServiceKind.OASF})


def _check_url(service: ServiceEntry, path: str, report: DiagnosticCollector) -> None:
    endpoint = service.endpoint
    if isinstance(endpoint, str) and endpoint.strip() and not is_http_url(endpoint):
        report.add(
            DiagnosticCode.SERVICE_ENDPOINT_NOT_URL,
            f"{service.kind} endpoint must be an http(s) URL",
            f"{path}.endpoint",
        )


def _check_mcp(service: ServiceEntry, path: str, report: DiagnosticCollector) -> None:
    _check_url(service, path, report)
    if is_blank(service.version):
        report.add(DiagnosticCode.MCP_MISSING_VERSION, "MCP service should declare 'version'", f"{path}.version")


def _check_a2a(service: ServiceEntry, path: str, report: DiagnosticCollector) -> None:
    _check_url(service, path, report)
    endpoint = service.endpoint
    if is_http_url(endpoint) and not urlsplit(endpoint.strip()).path.endswith(A2A_WELL_KNOWN_PATHS):
        report.add(
            DiagnosticCode.A2A_NOT_WELL_KNOWN,
            f"A2A endpoint should point at {A2A_WELL_KNOWN_PATHS[0]}",
            f"{path}.endpoint",
        )


def _check_oasf(service: ServiceEntry, path: str, report: DiagnosticCollector) -> None:
    has_taxonomy = any(
        isinstance(value, tuple) and len(value) > 0 for value in (service.skills, service.domains)
    )
    if not has_taxonomy:
        report.add(
            DiagnosticCode.OASF_MISSING_TAXONOMY,
            "OASF service must declare at least one of 'skills' or 'domains'",
            path,
        )


def _check_agent_wallet(service: ServiceEntry, path: str, report: DiagnosticCollector) -> None:
    endpoint = service.endpoint
    if isinstance(endpoint, str) and endpoint.strip() and not is_caip10(endpoint.strip()):
        report.add(
            DiagnosticCode.AGENT_WALLET_NOT_CAIP10,
            f"agentWallet endpoint must be a CAIP-10 account id, got {endpoint!r}",
            f"{path}.endpoint",
        )


def _check_ens(service: ServiceEntry, path: str, report: DiagnosticCollector) -> None:
    endpoint = service.endpoint
    if isinstance(endpoint, str) and endpoint.strip() and not is_ens_name(endpoint):
        report.add(DiagnosticCode.INVALID_ENS_NAME, f"invalid ENS name {endpoint!r}", f"{path}.endpoint")


def _check_did(service: ServiceEntry, path: str, report: DiagnosticCollector) -> None:
    endpoint = service.endpoint
    if isinstance(endpoint, str) and endpoint.strip() and not is_did(endpoint):
        report.add(DiagnosticCode.INVALID_DID, f"invalid DID {endpoint!r}", f"{path}.endpoint")


def _check_email(service: ServiceEntry, path: str, report: DiagnosticCollector) -> None:
    endpoint = service.endpoint
    if isinstance(endpoint, str) and endpoint.strip() and not is_email(endpoint):
        report.add(DiagnosticCode.INVALID_EMAIL, f"invalid email address {endpoint!r}", f"{path}.endpoint")


_KIND_CHECKS: dict[ServiceKind, Callable[[ServiceEntry, str, DiagnosticCollector], None]] = {
    ServiceKind.MCP: _check_mcp,
    ServiceKind.A2A: _check_a2a,
    ServiceKind.OASF: _check_oasf,
    ServiceKind.AGENT_WALLET: _check_agent_wallet,
    ServiceKind.ENS: _check_ens,
    ServiceKind.DID: _check_did,
    ServiceKind.WEB: _check_url,
    ServiceKind.EMAIL: _check_email,
}


def check_endpoints(
    document: AgentDocument,
    report: DiagnosticCollector,
    context: OnchainContext | None = None,
) -> None:
    services_field = document.services_field
    seen: set[tuple[ServiceKind, str]] = set()

    for service in document.services:
        path = f"{services_field}[{service.index}]"
        if not service.is_object:
            # Reported at the syntax level
            continue

        if is_blank(service.name):
            report.add(DiagnosticCode.SERVICE_MISSING_NAME, "service entry has no 'name'", f"{path}.name")
            continue

        if service.kind is ServiceKind.UNKNOWN:
            report.add(
                DiagnosticCode.UNKNOWN_SERVICE_TYPE,
                f"unknown service type {service.name!r}",
                f"{path}.name",
            )
            continue

        endpoint = service.endpoint
        if endpoint is not None and not isinstance(endpoint, str):
            report.add(DiagnosticCode.WRONG_FIELD_TYPE, "'endpoint' must be a string", f"{path}.endpoint")
        elif is_blank(endpoint):
            if service.kind not in _ENDPOINT_OPTIONAL:
                report.add(
                    DiagnosticCode.SERVICE_MISSING_ENDPOINT,
                    f"{service.kind} service has no 'endpoint'",
                    f"{path}.endpoint",
                )
        else:
            key = (service.kind, endpoint.strip())
            if key in seen:
                report.add(
                    DiagnosticCode.DUPLICATE_SERVICE,
                    f"duplicate {service.kind} service for {endpoint!r}",
                    path,
                )
            seen.add(key)

        _KIND_CHECKS[service.kind](service, path, report)
