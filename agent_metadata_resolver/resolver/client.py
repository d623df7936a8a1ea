"""Resolution orchestrator.

Composes classification, fetching, envelope decoding, bounded
decompression, parsing, validation and caching into a single call. This is
the only module that knows every other stage.
"""

import asyncio
import dataclasses
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from time import monotonic
from typing import Any

import httpx
import structlog

from agent_metadata_resolver.platform.observability import (
    ResolutionLabels,
    count_diagnostics,
    get_logger,
    observe_resolution,
    resolution_id_ctx,
)
from agent_metadata_resolver.resolver.cache import ResultCache
from agent_metadata_resolver.resolver.compression import maybe_decompress
from agent_metadata_resolver.resolver.config import ResolverConfig
from agent_metadata_resolver.resolver.diagnostics import DiagnosticCollector
from agent_metadata_resolver.resolver.exceptions import ResolverError
from agent_metadata_resolver.resolver.fetcher import ContentFetcher
from agent_metadata_resolver.resolver.parser import decode_envelope, parse
from agent_metadata_resolver.resolver.result import CacheSource, ResolutionResult
from agent_metadata_resolver.resolver.uri import MetadataURI, classify
from agent_metadata_resolver.resolver.validation import OnchainContext, validate

logger = get_logger(__name__)


def cache_key(uri: MetadataURI, context: OnchainContext | None = None) -> str:
    """Cache key for a classified URI.

    Onchain cross-checks change the diagnostics, so results computed against
    an onchain record are keyed by that record as well.
    """
    key = uri.cache_key
    if context is None:
        return key
    agent_hash = context.onchain_agent_hash.hex() if context.onchain_agent_hash else ""
    return f"{key}#onchain={context.registry_address.lower()}/{context.agent_id}/{agent_hash}"


class MetadataResolver:
    """Resolves and validates agent metadata URIs.

    Safe to share across concurrent resolutions; the cache is the only
    shared mutable state.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        httpx_client: httpx.AsyncClient | None = None,
        cache: ResultCache | None = None,
    ):
        """Initialize the resolver.

        Args:
            config: Optional resolver configuration.
            httpx_client: Optional pre-configured HTTP client.
            cache: Optional shared result cache.
        """
        self._config = config or ResolverConfig()
        self._httpx_client = httpx_client
        self._owns_httpx_client = httpx_client is None
        self._cache = cache if cache is not None else ResultCache.from_config(self._config)
        self._fetcher: ContentFetcher | None = None

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def config(self) -> ResolverConfig:
        return self._config

    def _get_fetcher(self) -> ContentFetcher:
        if self._fetcher is None:
            if self._httpx_client is None:
                self._httpx_client = httpx.AsyncClient(
                    headers={"user-agent": self._config.user_agent},
                    timeout=httpx.Timeout(self._config.https_timeout_seconds),
                )
                self._owns_httpx_client = True
            self._fetcher = ContentFetcher(self._httpx_client, self._config)
        return self._fetcher

    async def aclose(self) -> None:
        """Release the HTTP client if this resolver created it."""
        if self._owns_httpx_client and self._httpx_client is not None:
            await self._httpx_client.aclose()
            self._httpx_client = None
        self._fetcher = None

    async def __aenter__(self) -> "MetadataResolver":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def resolve(
        self,
        uri: str,
        context: OnchainContext | None = None,
        *,
        timeout: float | None = None,
    ) -> ResolutionResult:
        """Resolve a metadata URI into a validated document.

        Args:
            uri: Metadata URI from the identity record.
            context: Optional onchain record enabling cross-checks.
            timeout: Optional deadline for the whole call; in-flight fetches
                are cancelled when it expires.

        Returns:
            The resolution result; never raises for bad input or network
            failures, which are reported as diagnostics.

        Raises:
            TimeoutError: ``timeout`` expired before resolution finished.
        """
        if timeout is None:
            return await self._resolve(uri, context)
        async with asyncio.timeout(timeout):
            return await self._resolve(uri, context)

    async def resolve_many(
        self,
        uris: Iterable[str],
        context: OnchainContext | None = None,
    ) -> list[ResolutionResult]:
        """Resolve several URIs concurrently, preserving input order."""
        return list(await asyncio.gather(*(self.resolve(uri, context) for uri in uris)))

    async def _resolve(self, raw: str, context: OnchainContext | None) -> ResolutionResult:
        token = resolution_id_ctx.set(uuid.uuid4().hex[:16])
        try:
            with structlog.contextvars.bound_contextvars(uri=raw if isinstance(raw, str) else repr(raw)):
                return await self._resolve_cached(raw, context)
        finally:
            resolution_id_ctx.reset(token)

    async def _resolve_cached(self, raw: str, context: OnchainContext | None) -> ResolutionResult:
        start_time = monotonic()
        classified = classify(raw)
        key = cache_key(classified, context)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info("resolution_cache_hit", scheme=str(classified.scheme))
            result = dataclasses.replace(
                cached.value,
                uri=raw,
                diagnostics=list(cached.value.diagnostics),
                source=CacheSource.CACHE_HIT,
            )
            self._observe(result, start_time)
            return result

        result = await self._resolve_fresh(raw, classified, context)
        self._cache.put(key, dataclasses.replace(result, diagnostics=list(result.diagnostics)))
        count_diagnostics(result.diagnostics)
        self._observe(result, start_time)
        logger.info(
            "resolution_completed",
            scheme=str(classified.scheme),
            fetched_from=str(result.fetched_from) if result.fetched_from else None,
            document=result.document is not None,
            diagnostics=len(result.diagnostics),
            errors=len(result.errors),
        )
        return result

    @staticmethod
    def _observe(result: ResolutionResult, start_time: float) -> None:
        labels = ResolutionLabels(
            scheme=str(result.scheme),
            source=str(result.source),
            outcome="error" if result.has_errors else "ok",
        )
        observe_resolution(labels, monotonic() - start_time)

    async def _resolve_fresh(
        self,
        raw: str,
        uri: MetadataURI,
        context: OnchainContext | None,
    ) -> ResolutionResult:
        result = ResolutionResult(uri=raw, scheme=uri.scheme)
        report = DiagnosticCollector()

        try:
            payload = await self._get_fetcher().fetch(uri)
            result.fetched_from = payload.source

            data, notes = decode_envelope(payload)
            report.extend(notes)

            data, note = maybe_decompress(
                dataclasses.replace(payload, data=data),
                self._config.max_decompressed_bytes,
            )
            if note is not None:
                report.append(note)

            document, notes = parse(data)
            report.extend(notes)
        except ResolverError as e:
            diagnostic = e.to_diagnostic()
            logger.warning("resolution_failed", code=str(diagnostic.code), reason=diagnostic.message)
            report.append(diagnostic)
            result.diagnostics = report.to_list()
            return result

        report.extend(validate(document, context))
        result.document = document
        result.diagnostics = report.to_list()
        return result


@asynccontextmanager
async def create_resolver(
    config: ResolverConfig | None = None,
    cache: ResultCache | None = None,
) -> AsyncIterator[MetadataResolver]:
    """Create a resolver as an async context manager.

    Args:
        config: Optional resolver configuration.
        cache: Optional shared result cache.

    Yields:
        A MetadataResolver that is closed on exit.
    """
    resolver = MetadataResolver(config=config, cache=cache)
    try:
        yield resolver
    finally:
        await resolver.aclose()


def resolve(
    uri: str,
    context: OnchainContext | None = None,
    *,
    config: ResolverConfig | None = None,
    cache: ResultCache | None = None,
) -> ResolutionResult:
    """Resolve a metadata URI synchronously.

    Runs a short-lived resolver on a fresh event loop; pass ``cache`` to keep
    results across calls. Must not be called from a running event loop.
    """

    async def _run() -> ResolutionResult:
        async with create_resolver(config=config, cache=cache) as resolver:
            return await resolver.resolve(uri, context)

    return asyncio.run(_run())
