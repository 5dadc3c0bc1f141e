"""Infrastructure layer - cross-cutting concerns."""

from embedded_postgres.infrastructure.config import Config, get_config
from embedded_postgres.infrastructure.container import Container, get_container
from embedded_postgres.infrastructure.log_buffer import BufferedLog
from embedded_postgres.infrastructure.logging import setup_logging, get_logger
from embedded_postgres.infrastructure.polling import PollTimeoutError, poll_until
from embedded_postgres.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from embedded_postgres.infrastructure.tracing import setup_tracing, shutdown_tracing, get_tracer, trace_span

__all__ = [
    "Config",
    "get_config",
    "Container",
    "get_container",
    "BufferedLog",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "PollTimeoutError",
    "poll_until",
    "setup_tracing",
    "shutdown_tracing",
    "get_tracer",
    "trace_span",
]
