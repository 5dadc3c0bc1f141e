"""Process-wide wiring of configuration and observability."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

import structlog
from opentelemetry import trace

from embedded_postgres.infrastructure.config import Config, get_config
from embedded_postgres.infrastructure.logging import get_logger, setup_logging
from embedded_postgres.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from embedded_postgres.infrastructure.tracing import get_tracer, setup_tracing

if TYPE_CHECKING:
    from embedded_postgres.application.embedded_postgres import EmbeddedPostgres


@dataclass
class Container:
    """Configured logging, tracing and metrics shared by all instances.

    The library never configures observability on its own; applications
    that want structured logs, spans or a metrics endpoint call
    ``Container.create()`` once at startup.
    """

    config: Config
    logger: structlog.BoundLogger
    tracer: trace.Tracer
    metrics: MetricsRegistry

    _instance: ClassVar[Container | None] = None

    @classmethod
    def create(cls, config: Config | None = None, metrics_port: int | None = None) -> Container:
        """Create and initialize the container.

        Args:
            config: Configuration (``get_config()`` if None).
            metrics_port: Serve Prometheus metrics on this port when given.
        """
        if cls._instance is not None:
            return cls._instance

        config = config or get_config()
        observability = config.observability

        setup_logging(observability.log_level, observability.log_format)
        if observability.otel_endpoint:
            tracer = setup_tracing(observability.otel_service_name, observability.otel_endpoint)
        else:
            tracer = get_tracer()
        metrics = setup_metrics(metrics_port) if metrics_port is not None else get_metrics()

        logger = get_logger("embedded_postgres")
        cls._instance = cls(config=config, logger=logger, tracer=tracer, metrics=metrics)

        logger.info(
            "embedded_postgres_container_initialized",
            log_format=observability.log_format,
            tracing=bool(observability.otel_endpoint),
        )
        return cls._instance

    @classmethod
    def get(cls) -> Container:
        """Get the singleton container instance."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        cls._instance = None

    def embedded_postgres(self, **kwargs: Any) -> EmbeddedPostgres:
        """Build an EmbeddedPostgres using this container's config and metrics."""
        from embedded_postgres.application.embedded_postgres import EmbeddedPostgres

        kwargs.setdefault("metrics", self.metrics)
        return EmbeddedPostgres(self.config, **kwargs)


def get_container() -> Container:
    """Get the dependency injection container."""
    return Container.get()
