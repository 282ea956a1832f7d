"""Tests for the Telemetry handle and its None-safe helpers."""

from __future__ import annotations

import pytest
from opentelemetry.instrumentation.asgi import OpenTelemetryMiddleware
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.metrics import NoOpMeterProvider
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import NoOpTracerProvider

import budtelemetry
from budtelemetry import MeterProviderBuilder, Telemetry
from budtelemetry.commons.exceptions import ProviderTimeoutError, TelemetryErrorGroup


class _FailingMeterProvider:
    def force_flush(self, timeout_millis: float = 10_000) -> bool:
        raise RuntimeError("meter flush failed")

    def shutdown(self, timeout_millis: float = 30_000) -> None:
        raise RuntimeError("meter shutdown failed")


class _SlowTracerProvider:
    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return False

    def shutdown(self) -> None:
        raise RuntimeError("tracer shutdown failed")


async def _app(scope, receive, send) -> None:
    pass


class TestNoOpTelemetry:
    """Tests for a handle without providers."""

    def test_noop_providers(self) -> None:
        """Test that missing providers are replaced by no-op providers."""
        telemetry = Telemetry()
        assert isinstance(telemetry.meter_provider, NoOpMeterProvider)
        assert isinstance(telemetry.tracer_provider, NoOpTracerProvider)

    def test_flush_and_shutdown_succeed(self) -> None:
        """Test that flushing and shutting down without providers is a no-op."""
        telemetry = Telemetry()
        telemetry.force_flush()
        telemetry.shutdown()

    def test_none_handle(self) -> None:
        """Test that the module helpers accept None."""
        assert isinstance(budtelemetry.get_meter_provider(None), NoOpMeterProvider)
        assert isinstance(budtelemetry.get_tracer_provider(None), NoOpTracerProvider)
        budtelemetry.force_flush(None)
        budtelemetry.shutdown(None)


class TestTelemetry:
    """Tests for a handle holding SDK providers."""

    def test_providers_are_returned(self) -> None:
        """Test that the held providers are returned as is."""
        meter, tracer = MeterProvider(), TracerProvider()
        telemetry = Telemetry(meter, tracer)
        assert telemetry.meter_provider is meter
        assert budtelemetry.get_tracer_provider(telemetry) is tracer

        budtelemetry.force_flush(telemetry, 1000)
        budtelemetry.shutdown(telemetry, 1000)

    def test_flush_errors_are_joined(self) -> None:
        """Test that both providers are flushed and their failures joined."""
        telemetry = Telemetry(_FailingMeterProvider(), _SlowTracerProvider())

        with pytest.raises(TelemetryErrorGroup) as exc_info:
            telemetry.force_flush(100)

        meter_err, tracer_err = exc_info.value.exceptions
        assert isinstance(meter_err, RuntimeError)
        assert isinstance(tracer_err, ProviderTimeoutError)
        assert tracer_err.timeout_millis == 100

    def test_single_shutdown_error(self) -> None:
        """Test that a single failure is raised unwrapped."""
        telemetry = Telemetry(None, _SlowTracerProvider())
        with pytest.raises(RuntimeError, match="tracer shutdown failed"):
            telemetry.shutdown()

    def test_shutdown_errors_are_joined(self) -> None:
        """Test that both providers are shut down even if the first one fails."""
        telemetry = Telemetry(_FailingMeterProvider(), _SlowTracerProvider())
        with pytest.raises(TelemetryErrorGroup) as exc_info:
            telemetry.shutdown()
        assert len(exc_info.value.exceptions) == 2

    def test_shutdown_stops_runtime_metrics(self) -> None:
        """Test that runtime metrics collected into the meter provider stop with it."""
        telemetry = Telemetry(MeterProviderBuilder().build(), None)
        assert SystemMetricsInstrumentor().is_instrumented_by_opentelemetry

        telemetry.shutdown()
        assert not SystemMetricsInstrumentor().is_instrumented_by_opentelemetry


class TestNewHttpHandler:
    """Tests for Telemetry.new_http_handler."""

    def test_wraps_app(self) -> None:
        """Test that the app is wrapped in the ASGI middleware."""
        handler = Telemetry().new_http_handler(_app)
        assert isinstance(handler, OpenTelemetryMiddleware)
        assert handler.app is _app

    def test_operation_names_spans(self) -> None:
        """Test that the operation becomes the name of every request span."""
        handler = Telemetry().new_http_handler(_app, "api")
        assert handler.default_span_details({"type": "http", "path": "/x"}) == ("api", {})
