"""Prometheus metrics for metadata resolution.

This module provides duration histograms for network fetches and whole
resolutions, plus a counter of emitted diagnostic codes. Metrics are
registered on the default Prometheus registry so a host process can expose
them with ``metrics()``.
"""

from collections.abc import Iterable
from typing import NamedTuple

import prometheus_client


class FetchLabels(NamedTuple):
    scheme: str
    outcome: str


class ResolutionLabels(NamedTuple):
    scheme: str
    source: str
    outcome: str


BUCKETS = (
    # log spaced, 3 per decade
    0.001,  # 1 ms
    0.002,
    0.005,
    0.01,
    0.02,
    0.05,
    0.1,
    0.2,
    0.5,
    1,
    2,
    5,
    10,
    20,  # sequential fallback over slow gateways lands here
    60,
    float("inf"),
)


def setup_metrics_factory(registry, name, documentation, labelnames):
    """Create a Prometheus histogram with standard bucket configuration.

    Args:
        registry: Prometheus registry to register the metric with
        name: Metric name (e.g., "metadata_fetch_duration_seconds")
        documentation: Human-readable metric description
        labelnames: Tuple of label names for the histogram

    Returns:
        Configured Prometheus Histogram instance
    """
    return prometheus_client.Histogram(
        name=name,
        documentation=documentation,
        labelnames=labelnames,
        registry=registry,
        buckets=BUCKETS,
    )


def setup_fetch_metrics(registry):
    """Histogram of single fetch attempts by scheme and outcome."""
    return setup_metrics_factory(
        registry,
        name="metadata_fetch_duration_seconds",
        documentation="Metadata fetch attempt duration (seconds)",
        labelnames=FetchLabels._fields,
    )


def setup_resolution_metrics(registry):
    """Histogram of whole resolutions by scheme, cache source and outcome."""
    return setup_metrics_factory(
        registry,
        name="metadata_resolution_duration_seconds",
        documentation="Metadata resolution duration (seconds)",
        labelnames=ResolutionLabels._fields,
    )


def setup_diagnostic_metrics(registry):
    return prometheus_client.Counter(
        name="metadata_diagnostics",
        documentation="Diagnostics emitted by fresh resolutions",
        labelnames=("code", "severity"),
        registry=registry,
    )


def observe_fetch(labels: FetchLabels, elapsed_sec: float) -> None:
    fetch_histogram.labels(*labels).observe(elapsed_sec)


def observe_resolution(labels: ResolutionLabels, elapsed_sec: float) -> None:
    resolution_histogram.labels(*labels).observe(elapsed_sec)


def count_diagnostics(diagnostics: Iterable) -> None:
    """Increment the diagnostic counter once per diagnostic."""
    for diagnostic in diagnostics:
        diagnostic_counter.labels(str(diagnostic.code), str(diagnostic.severity)).inc()


fetch_histogram = setup_fetch_metrics(registry=prometheus_client.REGISTRY)
resolution_histogram = setup_resolution_metrics(registry=prometheus_client.REGISTRY)
diagnostic_counter = setup_diagnostic_metrics(registry=prometheus_client.REGISTRY)


def metrics() -> tuple[bytes, str]:
    """Generate Prometheus exposition output.

    Returns:
        Tuple of (metrics_body, content_type) for an HTTP response
    """
    return (
        prometheus_client.generate_latest(prometheus_client.REGISTRY),
        prometheus_client.CONTENT_TYPE_LATEST,
    )
