"""Unit tests for observability wiring."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest
import structlog

from embedded_postgres import EmbeddedPostgres
from embedded_postgres.infrastructure import (
    Container,
    get_container,
    get_logger,
    setup_logging,
    setup_tracing,
    shutdown_tracing,
    trace_span,
)
from embedded_postgres.infrastructure.config import Config, ObservabilityConfig
from embedded_postgres.infrastructure.metrics import MetricsRegistry, get_metrics


@pytest.fixture
def container_config(test_config: Config) -> Config:
    return test_config.model_copy(
        update={"observability": ObservabilityConfig(log_level="DEBUG", log_format="json")}
    )


@pytest.fixture(autouse=True)
def reset_container() -> Generator[None, None, None]:
    Container.reset()
    yield
    Container.reset()
    structlog.reset_defaults()


@pytest.mark.unit
class TestContainer:
    """Tests for Container."""

    def test_create_is_singleton(self, container_config: Config) -> None:
        container = Container.create(container_config)

        assert Container.create() is container
        assert get_container() is container
        assert container.config is container_config

    def test_json_logging(
        self, container_config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        Container.create(container_config)

        get_logger("tests", port=5432).info("postgres_started", duration_seconds=0.5)

        err = capsys.readouterr().err
        assert '"event": "postgres_started"' in err
        assert '"port": 5432' in err

    def test_embedded_postgres_uses_container_metrics(
        self, container_config: Config, metrics_registry: MetricsRegistry
    ) -> None:
        container = Container.create(container_config)
        container.metrics = metrics_registry

        pg = container.embedded_postgres(logger=None)

        assert isinstance(pg, EmbeddedPostgres)
        assert pg.config is container_config
        assert pg.target.archive_name == "embedded-postgres-binaries-linux-amd64-16.6.0.txz"
        assert not pg.is_started

    def test_metrics_endpoint_after_global_metrics(
        self, container_config: Config, port_factory
    ) -> None:
        """Serving metrics reuses collectors an orchestrator already registered."""
        metrics = get_metrics()

        container = Container.create(container_config, metrics_port=port_factory())

        assert container.metrics is metrics
        assert get_metrics() is metrics

    def test_trace_span_without_provider(self) -> None:
        with trace_span("postgres.test", {"port": 5432}) as span:
            assert span is not None


@pytest.mark.unit
class TestObservabilityHelpers:
    """Tests for logging and tracing helpers."""

    def test_password_is_redacted(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging("INFO", "json")

        get_logger("tests").info("initdb_started", username="gin", password="hunter2")

        err = capsys.readouterr().err
        assert "hunter2" not in err
        assert '"password": "***"' in err
        assert '"username": "gin"' in err

    def test_debug_events_filtered_at_info(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging("INFO", "json")

        get_logger("tests").debug("readiness_probe_failed")

        assert "readiness_probe_failed" not in capsys.readouterr().err

    def test_setup_tracing_records_spans(self) -> None:
        tracer = setup_tracing("embedded_postgres_tests")

        with trace_span("postgres.start", {"data_path": Path("/tmp/data"), "port": 5432}) as span:
            assert span.is_recording()
        assert tracer is not None

        shutdown_tracing()
