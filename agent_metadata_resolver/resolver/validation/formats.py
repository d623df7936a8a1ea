"""Format checks shared by the validation levels."""

import re
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

# CAIP-2 chain id and CAIP-10 account id
CAIP2_RE = re.compile(r"^[-a-z0-9]{3,8}:[-_a-zA-Z0-9]{1,32}$")
CAIP10_RE = re.compile(r"^[-a-z0-9]{3,8}:[-_a-zA-Z0-9]{1,32}:[-.%a-zA-Z0-9]{1,128}$")

ISO8601_UTC_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.\d{1,9})?Z$", re.ASCII
)
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")
ENS_RE = re.compile(r"^(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+eth$")
DID_RE = re.compile(r"^did:[a-z0-9]+:[A-Za-z0-9._:%\-]+$")
AGENT_ID_RE = re.compile(r"[0-9]+")

IMAGE_SCHEMES = frozenset({"https", "http", "ipfs", "ar", "data"})


def is_blank(value: Any) -> bool:
    """True for absent, null and whitespace-only string values."""
    return value is None or (isinstance(value, str) and not value.strip())


def is_caip2(value: Any) -> bool:
    return isinstance(value, str) and CAIP2_RE.match(value) is not None


def is_caip10(value: Any) -> bool:
    return isinstance(value, str) and CAIP10_RE.match(value) is not None


def caip10_chain(value: str) -> str:
    """The CAIP-2 chain id part of a CAIP-10 account id."""
    return value.rsplit(":", 1)[0]


def is_iso8601_utc(value: Any) -> bool:
    """Accept only ``YYYY-MM-DDTHH:MM:SS[.fraction]Z`` naming a real instant."""
    if not isinstance(value, str):
        return False
    match = ISO8601_UTC_RE.match(value)
    if match is None:
        return False
    try:
        datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return False
    return True


def is_http_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parts = urlsplit(value.strip())
        return parts.scheme.lower() in ("http", "https") and bool(parts.hostname)
    except ValueError:
        return False


def is_image_uri(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    scheme, sep, rest = value.strip().partition(":")
    if not sep or scheme.lower() not in IMAGE_SCHEMES:
        return False
    if scheme.lower() in ("http", "https"):
        return is_http_url(value)
    return bool(rest.strip("/"))


def is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    address = value.strip()
    if address.lower().startswith("mailto:"):
        address = address[len("mailto:") :]
    return EMAIL_RE.match(address) is not None


def is_ens_name(value: Any) -> bool:
    return isinstance(value, str) and ENS_RE.match(value.strip().lower()) is not None


def is_did(value: Any) -> bool:
    return isinstance(value, str) and DID_RE.match(value.strip()) is not None


def as_agent_id(value: Any) -> int | None:
    """Interpret an agentId as a non-negative integer.

    Decimal strings are accepted since uint256 ids overflow JSON numbers in
    many producers. Returns None when the value is not a valid id.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and AGENT_ID_RE.fullmatch(value.strip()):
        return int(value.strip())
    return None
