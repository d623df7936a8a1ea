"""Level 4: cross-field consistency and agreement with onchain state."""

import hashlib

from agent_metadata_resolver.resolver.diagnostics import DiagnosticCode, DiagnosticCollector
from agent_metadata_resolver.resolver.document import AgentDocument, Registration
from agent_metadata_resolver.resolver.validation.context import OnchainContext
from agent_metadata_resolver.resolver.validation.formats import (
    as_agent_id,
    caip10_chain,
    is_caip2,
    is_caip10,
    is_iso8601_utc,
)

KNOWN_TRUST_MODELS = frozenset({"reputation", "crypto-economic", "tee-attestation"})


def content_hash(document: AgentDocument) -> bytes:
    """SHA-256 of the decoded document bytes, as compared with the onchain hash."""
    return hashlib.sha256(document.raw_bytes).digest()


def _check_supported_trust(document: AgentDocument, report: DiagnosticCollector) -> None:
    for index, value in enumerate(document.supported_trust):
        if not isinstance(value, str) or value not in KNOWN_TRUST_MODELS:
            report.add(
                DiagnosticCode.UNKNOWN_TRUST_MODEL,
                f"unknown trust model {value!r}",
                f"supportedTrust[{index}]",
            )


def _check_registrations(document: AgentDocument, report: DiagnosticCollector) -> None:
    for registration in document.registrations:
        path = f"registrations[{registration.index}]"
        registry = registration.agent_registry
        if not (is_caip10(registry) or is_caip2(registry)):
            report.add(
                DiagnosticCode.INVALID_CAIP_IDENTIFIER,
                f"'agentRegistry' must be a CAIP-10 or CAIP-2 identifier, got {registry!r}",
                f"{path}.agentRegistry",
            )
        agent_id = registration.agent_id
        if agent_id is not None and as_agent_id(agent_id) is None:
            report.add(
                DiagnosticCode.INVALID_AGENT_ID,
                f"'agentId' must be a non-negative integer, got {agent_id!r}",
                f"{path}.agentId",
            )


def _check_updated_at(document: AgentDocument, report: DiagnosticCollector) -> None:
    value = document.updated_at
    if value is not None and not is_iso8601_utc(value):
        report.add(
            DiagnosticCode.INVALID_TIMESTAMP,
            f"'updatedAt' must be an ISO 8601 UTC timestamp (YYYY-MM-DDTHH:MM:SSZ), got {value!r}",
            "updatedAt",
        )


def _references_registry(registration: Registration, registry_address: str) -> bool:
    registry = registration.agent_registry
    if not isinstance(registry, str):
        return False
    if is_caip10(registry):
        return registry.lower() == registry_address.lower()
    if is_caip2(registry):
        return registry.lower() == caip10_chain(registry_address).lower()
    return False


def _check_onchain_hash(document: AgentDocument, report: DiagnosticCollector, context: OnchainContext) -> None:
    expected = context.onchain_agent_hash
    if expected is None:
        return
    actual = content_hash(document)
    if actual != expected:
        report.add(
            DiagnosticCode.CONTENT_HASH_MISMATCH,
            f"content hash 0x{actual.hex()} does not match onchain hash 0x{expected.hex()}",
        )


def _check_registration_link(document: AgentDocument, report: DiagnosticCollector, context: OnchainContext) -> None:
    if not document.registrations:
        return

    matching = [r for r in document.registrations if _references_registry(r, context.registry_address)]
    if not matching:
        report.add(
            DiagnosticCode.REGISTRATION_CONFLICT,
            f"'registrations' does not reference onchain registry {context.registry_address}",
            "registrations",
        )
        return

    for registration in matching:
        agent_id = as_agent_id(registration.agent_id)
        if agent_id is not None and agent_id != context.agent_id:
            report.add(
                DiagnosticCode.REGISTRATION_CONFLICT,
                f"'agentId' {agent_id} conflicts with onchain agent id {context.agent_id}",
                f"registrations[{registration.index}].agentId",
            )


def check_semantic(
    document: AgentDocument,
    report: DiagnosticCollector,
    context: OnchainContext | None = None,
) -> None:
    _check_supported_trust(document, report)
    _check_registrations(document, report)
    _check_updated_at(document, report)
    if context is not None:
        _check_onchain_hash(document, report, context)
        _check_registration_link(document, report, context)
