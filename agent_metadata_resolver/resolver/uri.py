"""Metadata URI classification.

``classify`` is total: any input, including non-strings, yields a
``MetadataURI``. Problems are reported through the ``malformed`` scheme with
a reason and the diagnostic code the orchestrator should emit.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from urllib.parse import unquote, urlsplit, urlunsplit

from agent_metadata_resolver.resolver.diagnostics import DiagnosticCode

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")
_CID_RE = re.compile(r"^[A-Za-z0-9]+$")
_ARWEAVE_TX_RE = re.compile(r"^[A-Za-z0-9_\-]{43}$")

DEFAULT_DATA_MEDIA_TYPE = "text/plain"


class UriScheme(StrEnum):
    """Classified URI scheme."""

    DATA = "data"
    IPFS = "ipfs"
    ARWEAVE = "arweave"
    HTTPS = "https"
    MALFORMED = "malformed"


class DataEncoding(StrEnum):
    """Payload encoding declared by a data URI."""

    BASE64 = "base64"
    # ;base64 declared but the payload is visibly raw JSON
    AMBIGUOUS_BASE64 = "ambiguous_base64"
    PLAIN = "plain"


@dataclass(frozen=True)
class MetadataURI:
    """A classified metadata URI.

    Only the attributes relevant to ``scheme`` are populated.

    Attributes:
        scheme: The classified scheme.
        raw: The input string as received (stripped).
        reason: Why classification failed (malformed only).
        code: Diagnostic code for the failure (malformed only).
        media_type: Declared media type (data only).
        encoding: Declared payload encoding (data only).
        payload: Text after the first comma, undecoded (data only).
        params: Media-type parameters other than ``base64`` (data only).
        cid: Content identifier (ipfs only).
        path: Path below the CID (ipfs only).
        tx_id: Transaction id (arweave only).
        url: Full URL (https only).
    """

    scheme: UriScheme
    raw: str
    reason: str | None = None
    code: DiagnosticCode | None = None
    media_type: str | None = None
    encoding: DataEncoding | None = None
    payload: str | None = None
    params: tuple[tuple[str, str], ...] = ()
    cid: str | None = None
    path: str | None = None
    tx_id: str | None = None
    url: str | None = None

    @property
    def is_content_addressed(self) -> bool:
        return self.scheme in (UriScheme.DATA, UriScheme.IPFS, UriScheme.ARWEAVE)

    def param(self, name: str) -> str | None:
        """Return a data-URI media-type parameter, case-insensitively."""
        name = name.lower()
        for key, value in self.params:
            if key == name:
                return value
        return None

    @property
    def cache_key(self) -> str:
        """Canonical string used to key cached results."""
        if self.scheme == UriScheme.IPFS:
            return f"ipfs://{self.cid}" + (f"/{self.path}" if self.path else "")
        if self.scheme == UriScheme.ARWEAVE:
            return f"ar://{self.tx_id}"
        if self.scheme == UriScheme.HTTPS and self.url:
            parts = urlsplit(self.url)
            return urlunsplit(
                (parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, "")
            )
        return self.raw


def _malformed(raw: str, reason: str, code: DiagnosticCode = DiagnosticCode.INVALID_URI) -> MetadataURI:
    return MetadataURI(scheme=UriScheme.MALFORMED, raw=raw, reason=reason, code=code)


def _classify_data(raw: str) -> MetadataURI:
    header, sep, payload = raw[len("data:") :].partition(",")
    if not sep:
        return _malformed(raw, "data URI has no ',' separating header and payload")

    parts = header.split(";")
    media_type = parts[0].strip().lower() or DEFAULT_DATA_MEDIA_TYPE
    is_base64 = False
    params: list[tuple[str, str]] = []
    for part in parts[1:]:
        token = part.strip()
        if token.lower() == "base64":
            is_base64 = True
        elif "=" in token:
            key, _, value = token.partition("=")
            params.append((key.strip().lower(), value.strip()))

    if is_base64:
        head = unquote(payload).lstrip()[:1]
        encoding = (
            DataEncoding.AMBIGUOUS_BASE64
            if head.startswith(("{", "["))
            else DataEncoding.BASE64
        )
    else:
        encoding = DataEncoding.PLAIN

    return MetadataURI(
        scheme=UriScheme.DATA,
        raw=raw,
        media_type=media_type,
        encoding=encoding,
        payload=payload,
        params=tuple(params),
    )


def _classify_ipfs(raw: str, rest: str) -> MetadataURI:
    if rest.lower().startswith("ipfs/"):
        rest = rest[len("ipfs/") :]
    cid, _, path = rest.partition("/")
    if not cid:
        return _malformed(raw, "ipfs URI has an empty CID")
    if not _CID_RE.match(cid):
        return _malformed(raw, f"invalid CID {cid!r}")
    return MetadataURI(scheme=UriScheme.IPFS, raw=raw, cid=cid, path=path.strip("/") or None)


def _classify_arweave(raw: str, rest: str) -> MetadataURI:
    tx_id = rest.partition("/")[0]
    if not _ARWEAVE_TX_RE.match(tx_id):
        return _malformed(raw, f"invalid Arweave transaction id {tx_id!r}")
    return MetadataURI(scheme=UriScheme.ARWEAVE, raw=raw, tx_id=tx_id)


def _classify_https(raw: str) -> MetadataURI:
    try:
        parts = urlsplit(raw)
        hostname = parts.hostname
    except ValueError as e:
        return _malformed(raw, f"unparsable URL: {e}")
    if not hostname:
        return _malformed(raw, "https URI has no host")
    return MetadataURI(scheme=UriScheme.HTTPS, raw=raw, url=raw)


def classify(raw: Any) -> MetadataURI:
    """Classify a metadata URI string.

    Never raises. Scheme matching is case-insensitive; surrounding
    whitespace is ignored. Gateway URLs such as
    ``https://ipfs.io/ipfs/<cid>`` remain https and are not rewritten.

    Args:
        raw: The URI as found in the identity record.

    Returns:
        The classified MetadataURI.
    """
    if not isinstance(raw, str):
        return _malformed(repr(raw), f"URI must be a string, got {type(raw).__name__}")

    text = raw.strip()
    if not text:
        return _malformed(text, "URI is empty")

    match = _SCHEME_RE.match(text)
    if match is None:
        return _malformed(text, "URI is relative or has no scheme")

    scheme = match.group(1).lower()
    rest = text[match.end() :]

    if scheme == "data":
        return _classify_data(text)
    if scheme == "ipfs":
        if not rest.startswith("//"):
            return _malformed(text, "ipfs URI must start with ipfs://")
        return _classify_ipfs(text, rest[2:])
    if scheme in ("ar", "arweave"):
        if not rest.startswith("//"):
            return _malformed(text, "Arweave URI must start with ar://")
        return _classify_arweave(text, rest[2:])
    if scheme == "https":
        return _classify_https(text)
    if scheme == "http":
        return _malformed(text, "plain http is not accepted, use https", DiagnosticCode.UNSUPPORTED_SCHEME)
    return _malformed(text, f"unsupported URI scheme {scheme!r}", DiagnosticCode.UNSUPPORTED_SCHEME)
