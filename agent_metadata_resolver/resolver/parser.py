"""Decoding of payload bytes into agent documents."""

import base64
import binascii
import json
import re
from typing import Any
from urllib.parse import unquote_to_bytes

from agent_metadata_resolver.resolver.diagnostics import Diagnostic, DiagnosticCode
from agent_metadata_resolver.resolver.document import AgentDocument
from agent_metadata_resolver.resolver.exceptions import (
    InvalidBase64Error,
    InvalidJSONError,
    NonObjectRootError,
)
from agent_metadata_resolver.resolver.payload import RawPayload
from agent_metadata_resolver.resolver.uri import DataEncoding

_WHITESPACE_RE = re.compile(rb"\s+")
_URLSAFE_TO_STANDARD = bytes.maketrans(b"-_", b"+/")

# Deepest array/object nesting accepted in a document
MAX_NESTING_DEPTH = 64

JSON_MEDIA_TYPES = frozenset({"application/json", "text/json", "text/plain"})

_JSON_TYPE_NAMES = {
    list: "array",
    str: "string",
    int: "number",
    float: "number",
    bool: "boolean",
    type(None): "null",
}


def _is_json_media_type(media_type: str | None) -> bool:
    if media_type is None:
        return True
    return media_type in JSON_MEDIA_TYPES or media_type.endswith("+json")


def _exceeds_depth(value: Any, limit: int) -> bool:
    """Whether any array or object is nested deeper than ``limit``.

    Walks with an explicit stack so hostile nesting cannot exhaust the
    interpreter's recursion limit.
    """
    stack = [(value, 1)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        if depth > limit:
            return True
        stack.extend((child, depth + 1) for child in children)
    return False


def decode_envelope(payload: RawPayload) -> tuple[bytes, list[Diagnostic]]:
    """Undo the data-URI transfer encoding of a payload.

    Fetched payloads are returned unchanged. For data URIs a declared
    ``;base64`` payload that is visibly raw JSON is taken verbatim and
    flagged with WA050 instead of failing.

    Returns:
        The decoded bytes and any diagnostics recorded on the way.

    Raises:
        InvalidBase64Error: The payload required base64 and is not valid base64.
    """
    diagnostics: list[Diagnostic] = []
    if payload.encoding is None:
        return payload.data, diagnostics

    if not _is_json_media_type(payload.media_type):
        diagnostics.append(
            Diagnostic(
                code=DiagnosticCode.NON_JSON_MEDIA_TYPE,
                message=f"data URI media type {payload.media_type!r} is not JSON",
            )
        )

    if payload.encoding == DataEncoding.PLAIN:
        return unquote_to_bytes(payload.data), diagnostics

    if payload.encoding == DataEncoding.AMBIGUOUS_BASE64:
        diagnostics.append(
            Diagnostic(
                code=DiagnosticCode.UNENCODED_BASE64_PAYLOAD,
                message="data URI declares base64 but carries unencoded JSON",
            )
        )
        return unquote_to_bytes(payload.data), diagnostics

    encoded = _WHITESPACE_RE.sub(b"", unquote_to_bytes(payload.data))
    # Accept the URL-safe alphabet and missing padding
    encoded = encoded.translate(_URLSAFE_TO_STANDARD)
    encoded += b"=" * (-len(encoded) % 4)
    try:
        decoded = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidBase64Error(f"invalid base64 payload: {e}") from e
    return decoded, diagnostics


def parse_document(data: bytes) -> AgentDocument:
    """Parse UTF-8 JSON bytes into an AgentDocument.

    Raises:
        InvalidJSONError: Bytes are not UTF-8 JSON, or nest deeper than
            ``MAX_NESTING_DEPTH``.
        NonObjectRootError: The root value is not an object.
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidJSONError(f"document is not valid UTF-8: {e}") from e

    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidJSONError(f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e
    except RecursionError as e:
        raise InvalidJSONError(f"JSON nesting exceeds {MAX_NESTING_DEPTH} levels") from e
    except ValueError as e:
        # Integers beyond the interpreter's digit limit
        raise InvalidJSONError(f"unsupported JSON value: {e}") from e

    if not isinstance(value, dict):
        raise NonObjectRootError(_JSON_TYPE_NAMES.get(type(value), type(value).__name__))
    if _exceeds_depth(value, MAX_NESTING_DEPTH):
        raise InvalidJSONError(f"JSON nesting exceeds {MAX_NESTING_DEPTH} levels")

    return AgentDocument(value, raw_bytes=data)


def parse(data: bytes) -> tuple[AgentDocument, list[Diagnostic]]:
    """Parse document bytes and report parse-time notes.

    Returns:
        The document and parse-time diagnostics (WA031 when the legacy
        ``endpoints`` field stands in for ``services``).
    """
    document = parse_document(data)
    diagnostics: list[Diagnostic] = []
    if document.uses_legacy_endpoints:
        diagnostics.append(
            Diagnostic(
                code=DiagnosticCode.LEGACY_ENDPOINTS,
                message="legacy 'endpoints' field used, rename it to 'services'",
                field_path="endpoints",
            )
        )
    return document, diagnostics
