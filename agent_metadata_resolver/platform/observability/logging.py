"""Structured logging for metadata resolution.

Every log line emitted while a resolution is in flight carries its
``resolution_id`` and the URI being resolved. Inline ``data:`` URIs can
embed a whole document, so logged URIs are shortened to a readable prefix.
"""

import logging
import sys
from contextvars import ContextVar

import structlog

from agent_metadata_resolver.platform.settings import Settings

# Context variable for the current resolution - propagates across async boundaries
resolution_id_ctx: ContextVar[str | None] = ContextVar("resolution_id", default=None)

DEFAULT_URI_MAX_LENGTH = 96

# Loggers that report every gateway attempt at INFO
TRANSPORT_LOGGERS = ("httpx", "httpcore", "hpack")


def add_resolution_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Processor that adds resolution_id to every log entry."""
    resolution_id = resolution_id_ctx.get()
    if resolution_id:
        event_dict["resolution_id"] = resolution_id
    return event_dict


def shorten_uri(uri: str, max_length: int = DEFAULT_URI_MAX_LENGTH) -> str:
    """Shorten a URI for logging.

    Data URIs keep their header and report the payload size; other URIs are
    cut at ``max_length`` characters.
    """
    if uri[:5].lower() == "data:":
        header, sep, payload = uri.partition(",")
        if sep:
            uri = f"{header},<{len(payload)} chars>"
    if len(uri) > max_length:
        return f"{uri[:max_length]}..."
    return uri


class URIShortener:
    """Processor that shortens the ``uri`` key of an event."""

    def __init__(self, max_length: int = DEFAULT_URI_MAX_LENGTH):
        self.max_length = max_length

    def __call__(
        self,
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        uri = event_dict.get("uri")
        if isinstance(uri, str):
            event_dict["uri"] = shorten_uri(uri, self.max_length)
        return event_dict


def configure_logging(
    log_level: str,
    json_output: bool = True,
    *,
    uri_max_length: int = DEFAULT_URI_MAX_LENGTH,
    quiet_transport: bool = True,
) -> None:
    """Configure structlog with appropriate processors and renderer.

    Args:
        log_level: Logging level (INFO, DEBUG, etc.)
        json_output: True for JSON output, False for console
        uri_max_length: Longest logged URI before it is cut
        quiet_transport: Raise HTTP transport loggers to WARNING
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_resolution_id,
        URIShortener(uri_max_length),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    transport_level = logging.WARNING if quiet_transport else logging.NOTSET
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


def configure_logging_from_settings(settings: Settings | None = None) -> None:
    """Configure logging from ``Settings.logging``, loading settings from env when omitted."""
    if settings is None:
        settings = Settings()
    options = settings.logging
    configure_logging(
        options.level,
        options.json_output,
        uri_max_length=options.uri_max_length,
        quiet_transport=options.quiet_transport,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        A bound structlog logger
    """
    return structlog.get_logger(name)
