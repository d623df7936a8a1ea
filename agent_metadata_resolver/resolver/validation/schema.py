"""Level 2: presence of recommended fields."""

from agent_metadata_resolver.resolver.diagnostics import DiagnosticCode, DiagnosticCollector
from agent_metadata_resolver.resolver.document import REGISTRATION_TYPE, AgentDocument
from agent_metadata_resolver.resolver.validation.context import OnchainContext
from agent_metadata_resolver.resolver.validation.formats import is_blank, is_image_uri

_RECOMMENDED_FIELDS = (
    ("type", DiagnosticCode.MISSING_TYPE),
    ("name", DiagnosticCode.MISSING_NAME),
    ("description", DiagnosticCode.MISSING_DESCRIPTION),
    ("image", DiagnosticCode.MISSING_IMAGE),
)


def check_schema(
    document: AgentDocument,
    report: DiagnosticCollector,
    context: OnchainContext | None = None,
) -> None:
    for name, code in _RECOMMENDED_FIELDS:
        if is_blank(document.get(name)):
            report.add(code, f"missing recommended field '{name}'", name)

    if "services" not in document and "endpoints" not in document:
        report.add(DiagnosticCode.MISSING_SERVICES, "no 'services' declared", "services")

    doc_type = document.type
    if isinstance(doc_type, str) and doc_type.strip() and doc_type != REGISTRATION_TYPE:
        report.add(
            DiagnosticCode.UNEXPECTED_TYPE,
            f"'type' should be {REGISTRATION_TYPE!r}, got {doc_type!r}",
            "type",
        )

    if "registrations" not in document:
        report.add(DiagnosticCode.MISSING_REGISTRATIONS, "no 'registrations' declared", "registrations")

    if "supportedTrust" not in document:
        report.add(DiagnosticCode.MISSING_SUPPORTED_TRUST, "no 'supportedTrust' declared", "supportedTrust")

    image = document.image
    if isinstance(image, str) and image.strip() and not is_image_uri(image):
        report.add(DiagnosticCode.INVALID_IMAGE_URI, f"'image' is not a supported URI: {image!r}", "image")

    for name in document.unknown_fields:
        report.add(DiagnosticCode.UNKNOWN_FIELD, f"unknown field '{name}' preserved", name)
