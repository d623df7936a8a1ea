"""Content retrieval for classified metadata URIs.

Inline data URIs never touch the network. IPFS URIs fall back across an
ordered list of public gateways, optionally racing them; Arweave and HTTPS
URIs get exactly one attempt. Bodies are streamed with ``Accept-Encoding:
identity`` and capped, so neither transport compression nor an oversized
response can bypass the decompression guard.
"""

import asyncio
from time import monotonic

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_none

from agent_metadata_resolver.platform.observability import FetchLabels, get_logger, observe_fetch
from agent_metadata_resolver.resolver.config import ResolverConfig
from agent_metadata_resolver.resolver.exceptions import (
    ArweaveFetchError,
    GatewayAttemptError,
    HTTPSFetchError,
    InvalidURIError,
    IPFSFetchError,
    PayloadTooLargeError,
)
from agent_metadata_resolver.resolver.payload import CompressionEnvelope, FetchSource, RawPayload
from agent_metadata_resolver.resolver.uri import MetadataURI, UriScheme

logger = get_logger(__name__)

# Content-Encoding values that map onto the decompression whitelist
_CONTENT_ENCODINGS = {"gzip": "gzip", "x-gzip": "gzip", "br": "br", "zstd": "zstd"}


def _content_type_params(header: str | None) -> list[tuple[str, str]]:
    if not header:
        return []
    params = []
    for part in header.split(";")[1:]:
        key, sep, value = part.partition("=")
        if sep:
            params.append((key.strip().lower(), value.strip()))
    return params


def _media_type(header: str | None) -> str | None:
    if not header:
        return None
    return header.split(";")[0].strip().lower() or None


def _describe(error: BaseException, timeout: float) -> str:
    if isinstance(error, (httpx.TimeoutException, TimeoutError)):
        return f"timed out after {timeout}s"
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    return str(error) or type(error).__name__


class _GatewayWon(Exception):
    """Raised inside the racing task group by the first successful attempt."""

    def __init__(self, payload: RawPayload):
        self.payload = payload


class ContentFetcher:
    """Retrieves raw bytes for classified metadata URIs."""

    def __init__(
        self,
        httpx_client: httpx.AsyncClient,
        config: ResolverConfig | None = None,
    ):
        """Initialize the fetcher.

        Args:
            httpx_client: HTTP client for making requests.
            config: Optional resolver configuration for gateways and timeouts.
        """
        self._httpx_client = httpx_client
        self._config = config or ResolverConfig()

    async def fetch(self, uri: MetadataURI) -> RawPayload:
        """Retrieve the payload for a classified URI.

        Args:
            uri: A classified URI.

        Returns:
            The raw payload and its provenance.

        Raises:
            InvalidURIError: The URI is malformed.
            IPFSFetchError: Every IPFS gateway failed.
            ArweaveFetchError: The Arweave gateway fetch failed.
            HTTPSFetchError: The HTTPS fetch failed.
            PayloadTooLargeError: The payload exceeds the size cap.
        """
        if uri.scheme == UriScheme.DATA:
            return self._fetch_data(uri)
        if uri.scheme == UriScheme.IPFS:
            if self._config.race_gateways:
                return await self._fetch_ipfs_racing(uri)
            return await self._fetch_ipfs_sequential(uri)
        if uri.scheme == UriScheme.ARWEAVE:
            return await self._fetch_arweave(uri)
        if uri.scheme == UriScheme.HTTPS:
            return await self._fetch_https(uri)
        raise InvalidURIError(uri.reason or "malformed URI", code=uri.code or InvalidURIError.code)

    def _fetch_data(self, uri: MetadataURI) -> RawPayload:
        data = (uri.payload or "").encode("utf-8")
        if len(data) > self._config.max_payload_bytes:
            raise PayloadTooLargeError(self._config.max_payload_bytes)
        return RawPayload(
            data=data,
            source=FetchSource(scheme=UriScheme.DATA),
            envelope=CompressionEnvelope.from_params(uri.params),
            encoding=uri.encoding,
            media_type=uri.media_type,
        )

    async def _get(self, url: str, timeout: float, source: FetchSource) -> RawPayload:
        """Issue one bounded GET, recording its duration and outcome."""
        start_time = monotonic()
        outcome = "error"
        try:
            payload = await self._get_bounded(url, timeout, source)
            outcome = "ok"
            return payload
        finally:
            observe_fetch(FetchLabels(scheme=str(source.scheme), outcome=outcome), monotonic() - start_time)

    async def _get_bounded(self, url: str, timeout: float, source: FetchSource) -> RawPayload:
        """Issue one GET and read the body up to the payload cap."""
        headers = {"accept-encoding": "identity", "user-agent": self._config.user_agent}
        limit = self._config.max_payload_bytes
        async with asyncio.timeout(timeout):
            async with self._httpx_client.stream(
                "GET", url, headers=headers, timeout=httpx.Timeout(timeout), follow_redirects=True
            ) as response:
                response.raise_for_status()
                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > limit:
                    raise PayloadTooLargeError(limit, url=url)
                body = bytearray()
                async for chunk in response.aiter_raw():
                    body.extend(chunk)
                    if len(body) > limit:
                        raise PayloadTooLargeError(limit, url=url)

                content_type = response.headers.get("content-type")
                envelope = CompressionEnvelope.from_params(_content_type_params(content_type))
                encoding = response.headers.get("content-encoding", "").strip().lower()
                if envelope is None and encoding in _CONTENT_ENCODINGS:
                    envelope = CompressionEnvelope(algorithm=_CONTENT_ENCODINGS[encoding])

        return RawPayload(
            data=bytes(body),
            source=source,
            envelope=envelope,
            media_type=_media_type(content_type),
        )

    def _ipfs_url(self, gateway: str, uri: MetadataURI) -> str:
        url = f"{gateway.rstrip('/')}/{uri.cid}"
        return f"{url}/{uri.path}" if uri.path else url

    async def _gateway_attempt(self, gateway: str, uri: MetadataURI) -> RawPayload:
        url = self._ipfs_url(gateway, uri)
        timeout = self._config.gateway_timeout_seconds
        try:
            return await self._get(url, timeout, FetchSource(scheme=UriScheme.IPFS, gateway=gateway))
        except (httpx.HTTPError, httpx.InvalidURL, TimeoutError, PayloadTooLargeError) as e:
            reason = _describe(e, timeout)
            logger.warning("gateway_attempt_failed", gateway=gateway, cid=uri.cid, reason=reason)
            raise GatewayAttemptError(reason, gateway=gateway, url=url) from e

    async def _fetch_ipfs_sequential(self, uri: MetadataURI) -> RawPayload:
        """Try each gateway in order, immediately, until one succeeds."""
        gateways = self._config.ipfs_gateways
        attempts: list[GatewayAttemptError] = []
        retrying = AsyncRetrying(
            stop=stop_after_attempt(len(gateways)),
            wait=wait_none(),
            retry=retry_if_exception_type(GatewayAttemptError),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    gateway = gateways[attempt.retry_state.attempt_number - 1]
                    try:
                        return await self._gateway_attempt(gateway, uri)
                    except GatewayAttemptError as e:
                        attempts.append(e)
                        raise
        except GatewayAttemptError as e:
            raise IPFSFetchError(uri.cid or "", attempts) from e
        raise IPFSFetchError(uri.cid or "", attempts)

    async def _fetch_ipfs_racing(self, uri: MetadataURI) -> RawPayload:
        """Race all gateways; the first success cancels the rest."""
        gateways = self._config.ipfs_gateways
        failures: dict[str, GatewayAttemptError] = {}

        async def attempt(gateway: str) -> None:
            try:
                payload = await self._gateway_attempt(gateway, uri)
            except GatewayAttemptError as e:
                failures[gateway] = e
                return
            raise _GatewayWon(payload)

        winner: RawPayload | None = None
        try:
            async with asyncio.TaskGroup() as group:
                for gateway in gateways:
                    group.create_task(attempt(gateway))
        except* _GatewayWon as won:
            winner = won.exceptions[0].payload  # type: ignore[attr-defined]

        if winner is None:
            raise IPFSFetchError(uri.cid or "", [failures[g] for g in gateways if g in failures])
        return winner

    async def _fetch_arweave(self, uri: MetadataURI) -> RawPayload:
        gateway = self._config.arweave_gateway
        url = f"{gateway.rstrip('/')}/{uri.tx_id}"
        timeout = self._config.arweave_timeout_seconds
        try:
            return await self._get(url, timeout, FetchSource(scheme=UriScheme.ARWEAVE, gateway=gateway))
        except (httpx.HTTPError, httpx.InvalidURL, TimeoutError) as e:
            raise ArweaveFetchError(_describe(e, timeout), url=url) from e

    async def _fetch_https(self, uri: MetadataURI) -> RawPayload:
        url = uri.url or uri.raw
        timeout = self._config.https_timeout_seconds
        try:
            source = FetchSource(scheme=UriScheme.HTTPS, gateway=httpx.URL(url).host)
            return await self._get(url, timeout, source)
        except (httpx.HTTPError, httpx.InvalidURL, TimeoutError) as e:
            raise HTTPSFetchError(_describe(e, timeout), url=url) from e
