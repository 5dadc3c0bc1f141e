"""Prometheus metrics for embedded Postgres."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all embedded Postgres lifecycle metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Lifecycle metrics
        self.starts_total = Counter(
            "embedded_postgres_starts_total",
            "Total start attempts",
            ["status"],  # success, error
            registry=self._registry,
        )

        self.stops_total = Counter(
            "embedded_postgres_stops_total",
            "Total stop attempts",
            ["status"],  # success, error
            registry=self._registry,
        )

        self.start_duration_seconds = Histogram(
            "embedded_postgres_start_duration_seconds",
            "Time from start() to a server accepting connections",
            buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
            registry=self._registry,
        )

        self.instances_running = Gauge(
            "embedded_postgres_instances_running",
            "Number of servers started and not yet stopped",
            registry=self._registry,
        )

        # Binary acquisition metrics
        self.binary_acquisitions_total = Counter(
            "embedded_postgres_binary_acquisitions_total",
            "Binary acquisitions by source",
            ["source"],  # already_extracted, extracted_from_cache, downloaded
            registry=self._registry,
        )

        # Readiness metrics
        self.readiness_probes_total = Counter(
            "embedded_postgres_readiness_probes_total",
            "Readiness probe attempts",
            ["result"],  # ready, not_ready
            registry=self._registry,
        )

        self.info = Info(
            "embedded_postgres",
            "Embedded Postgres library information",
            registry=self._registry,
        )


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8003, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """Set up the Prometheus metrics HTTP endpoint.

    Collectors already registered by an earlier ``get_metrics()`` on the same
    registry are reused; prometheus_client rejects registering them twice.
    """
    global _metrics
    target = registry or REGISTRY
    if _metrics is None or _metrics._registry is not target:
        _metrics = MetricsRegistry(target)

    from embedded_postgres import __version__
    _metrics.info.info({"version": __version__})

    start_http_server(port, registry=target)
    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
