"""Raw payloads and their provenance."""

from collections.abc import Iterable
from dataclasses import dataclass

from agent_metadata_resolver.resolver.uri import DataEncoding, UriScheme


@dataclass(frozen=True)
class FetchSource:
    """Where a payload came from.

    Attributes:
        scheme: Scheme of the resolved URI.
        gateway: Gateway base URL or host that served the bytes; None for
            inline data.
    """

    scheme: UriScheme
    gateway: str | None = None

    def __str__(self) -> str:
        return f"{self.scheme}:{self.gateway}" if self.gateway else str(self.scheme)


@dataclass(frozen=True)
class CompressionEnvelope:
    """Compression marker found alongside a payload.

    Attributes:
        algorithm: Value of the ``enc=`` marker, lower-cased.
        level: Declared compression level, informational only.
        declared_size: Declared uncompressed size; never trusted to allow
            output beyond the ceiling.
    """

    algorithm: str
    level: int | None = None
    declared_size: int | None = None

    @classmethod
    def from_params(cls, params: Iterable[tuple[str, str]]) -> "CompressionEnvelope | None":
        """Build an envelope from media-type parameters, if ``enc`` is present."""
        values = {key.lower(): value for key, value in params}
        algorithm = values.get("enc", "").strip().strip('"').lower()
        if not algorithm or algorithm == "identity":
            return None
        return cls(
            algorithm=algorithm,
            level=_as_int(values.get("level")),
            declared_size=_as_int(values.get("size")),
        )


def _as_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip().strip('"'))
    except ValueError:
        return None


@dataclass(frozen=True)
class RawPayload:
    """Bytes as retrieved, before envelope decoding and decompression.

    Attributes:
        data: The bytes.
        source: Provenance of the bytes.
        envelope: Optional compression marker.
        encoding: Data-URI payload encoding still to be undone (data only).
        media_type: Declared media type, when known.
    """

    data: bytes
    source: FetchSource
    envelope: CompressionEnvelope | None = None
    encoding: DataEncoding | None = None
    media_type: str | None = None
