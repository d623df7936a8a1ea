"""Bounded decompression of optional compression envelopes.

Every codec is driven in fixed-size output steps and written into a
``BoundedBuffer``, which raises the moment cumulative output would cross the
ceiling. Output is never materialised past the limit, whatever size the
input declares.
"""

import io
import zlib
from collections.abc import Callable, Iterator

import brotli
import lz4.frame
import zstandard

from agent_metadata_resolver.platform.observability import get_logger
from agent_metadata_resolver.resolver.config import MAX_DECOMPRESSED_BYTES
from agent_metadata_resolver.resolver.diagnostics import Diagnostic, DiagnosticCode
from agent_metadata_resolver.resolver.exceptions import (
    DecompressionFailedError,
    DecompressionLimitError,
)
from agent_metadata_resolver.resolver.payload import RawPayload

logger = get_logger(__name__)

SUPPORTED_ALGORITHMS = frozenset({"zstd", "gzip", "br", "lz4"})

# Largest slice any codec may return in one step
CHUNK_SIZE = 16 * 1024


class BoundedBuffer:
    """Append-only byte sink that refuses to grow past ``limit``."""

    def __init__(self, limit: int, algorithm: str):
        self.limit = limit
        self.algorithm = algorithm
        self._chunks: list[bytes] = []
        self._size = 0

    def write(self, chunk: bytes) -> None:
        if self._size + len(chunk) > self.limit:
            raise DecompressionLimitError(self.algorithm, self.limit)
        self._chunks.append(chunk)
        self._size += len(chunk)

    def __len__(self) -> int:
        return self._size

    def getvalue(self) -> bytes:
        return b"".join(self._chunks)


def _gzip_chunks(data: bytes) -> Iterator[bytes]:
    # wbits | 32 accepts both gzip and zlib headers
    decompressor = zlib.decompressobj(wbits=zlib.MAX_WBITS | 32)
    try:
        out = decompressor.decompress(data, CHUNK_SIZE)
        while True:
            if out:
                yield out
            if decompressor.eof:
                return
            tail = decompressor.unconsumed_tail
            out = decompressor.decompress(tail, CHUNK_SIZE)
            if not out and not tail and not decompressor.eof:
                raise DecompressionFailedError("truncated stream", "gzip")
    except zlib.error as e:
        raise DecompressionFailedError(str(e), "gzip") from e


def _zstd_chunks(data: bytes) -> Iterator[bytes]:
    try:
        with zstandard.ZstdDecompressor().stream_reader(io.BytesIO(data)) as reader:
            while chunk := reader.read(CHUNK_SIZE):
                yield chunk
    except zstandard.ZstdError as e:
        raise DecompressionFailedError(str(e), "zstd") from e


def _brotli_chunks(data: bytes) -> Iterator[bytes]:
    decompressor = brotli.Decompressor()
    try:
        yield decompressor.process(data, output_buffer_limit=CHUNK_SIZE)
        while not decompressor.is_finished():
            if decompressor.can_accept_more_data():
                raise DecompressionFailedError("truncated stream", "br")
            yield decompressor.process(b"", output_buffer_limit=CHUNK_SIZE)
    except brotli.error as e:
        raise DecompressionFailedError(str(e), "br") from e


def _lz4_chunks(data: bytes) -> Iterator[bytes]:
    decompressor = lz4.frame.LZ4FrameDecompressor()
    try:
        yield decompressor.decompress(data, max_length=CHUNK_SIZE)
        while not decompressor.eof:
            if decompressor.needs_input:
                raise DecompressionFailedError("truncated stream", "lz4")
            yield decompressor.decompress(b"", max_length=CHUNK_SIZE)
    except (RuntimeError, ValueError) as e:
        raise DecompressionFailedError(str(e), "lz4") from e


_CODECS: dict[str, Callable[[bytes], Iterator[bytes]]] = {
    "gzip": _gzip_chunks,
    "zstd": _zstd_chunks,
    "br": _brotli_chunks,
    "lz4": _lz4_chunks,
}


def decompress_bounded(data: bytes, algorithm: str, limit: int = MAX_DECOMPRESSED_BYTES) -> bytes:
    """Decompress ``data`` without ever holding more than ``limit`` output bytes.

    Raises:
        DecompressionLimitError: Output would exceed ``limit``.
        DecompressionFailedError: The stream is corrupt or truncated.
        KeyError: ``algorithm`` is not supported.
    """
    codec = _CODECS[algorithm]
    buffer = BoundedBuffer(limit, algorithm)
    for chunk in codec(data):
        buffer.write(chunk)
    return buffer.getvalue()


def maybe_decompress(
    payload: RawPayload,
    limit: int = MAX_DECOMPRESSED_BYTES,
) -> tuple[bytes, Diagnostic | None]:
    """Undo the payload's compression envelope, if any.

    Unknown algorithms pass the bytes through untouched and return an
    advisory diagnostic so newer encoders do not break older resolvers.

    Args:
        payload: Payload with an optional envelope.
        limit: Decompressed size ceiling in bytes.

    Returns:
        The document bytes and an optional advisory diagnostic.

    Raises:
        DecompressionLimitError: Output would exceed ``limit`` (EA004).
        DecompressionFailedError: Decompression was attempted and failed (EA005).
    """
    envelope = payload.envelope
    if envelope is None:
        return payload.data, None

    if envelope.algorithm not in SUPPORTED_ALGORITHMS:
        logger.info("compression_passthrough", algorithm=envelope.algorithm)
        return payload.data, Diagnostic(
            code=DiagnosticCode.UNKNOWN_COMPRESSION,
            message=f"unknown compression algorithm {envelope.algorithm!r}, payload used as-is",
        )

    if envelope.declared_size is not None and envelope.declared_size > limit:
        raise DecompressionLimitError(envelope.algorithm, limit)

    data = decompress_bounded(payload.data, envelope.algorithm, limit)
    logger.debug(
        "payload_decompressed",
        algorithm=envelope.algorithm,
        compressed_bytes=len(payload.data),
        decompressed_bytes=len(data),
    )
    return data, None
