#  -----------------------------------------------------------------------------
#  Copyright (c) 2024 Bud Ecosystem Inc.
#  #
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#  #
#      http://www.apache.org/licenses/LICENSE-2.0
#  #
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.
#  -----------------------------------------------------------------------------

"""Telemetry handle holding the built providers.

A `Telemetry` owns at most one SDK MeterProvider and one SDK TracerProvider.
Missing providers are replaced by OTEL's no-op providers, so code using the
handle never has to check what was configured. The module level helpers do
the same for a handle that is None.
"""

from __future__ import annotations

from typing import Any

from opentelemetry.metrics import MeterProvider, NoOpMeterProvider
from opentelemetry.sdk.metrics import MeterProvider as SDKMeterProvider
from opentelemetry.sdk.trace import TracerProvider as SDKTracerProvider
from opentelemetry.trace import NoOpTracerProvider, TracerProvider

from budtelemetry.commons.constants import DEFAULT_FLUSH_TIMEOUT_MILLIS
from budtelemetry.commons.exceptions import ProviderTimeoutError, join_errors

from .integrations.asgi import instrument_asgi_app
from .meter import stop_runtime_metrics


class Telemetry:
    """Handle for the meter and tracer provider of a service."""

    __slots__ = ("_meter_provider", "_tracer_provider")

    def __init__(
        self,
        meter_provider: SDKMeterProvider | None = None,
        tracer_provider: SDKTracerProvider | None = None,
    ) -> None:
        self._meter_provider = meter_provider
        self._tracer_provider = tracer_provider

    @property
    def meter_provider(self) -> MeterProvider:
        """The SDK meter provider, or a no-op provider when there is none."""
        if self._meter_provider is None:
            return NoOpMeterProvider()
        return self._meter_provider

    @property
    def tracer_provider(self) -> TracerProvider:
        """The SDK tracer provider, or a no-op provider when there is none."""
        if self._tracer_provider is None:
            return NoOpTracerProvider()
        return self._tracer_provider

    def new_http_handler(self, app: Any, operation: str | None = None, **options: Any) -> Any:
        """Wrap an ASGI app so each request is traced and measured with this handle's providers.

        Args:
            app: The ASGI application.
            operation: Span name for every request.
            **options: Additional ``OpenTelemetryMiddleware`` arguments.
        """
        return instrument_asgi_app(
            app,
            tracer_provider=self.tracer_provider,
            meter_provider=self.meter_provider,
            operation=operation,
            **options,
        )

    def force_flush(self, timeout_millis: int = DEFAULT_FLUSH_TIMEOUT_MILLIS) -> None:
        """Flush pending telemetry of both providers.

        Both providers are flushed even when the first one fails.

        Raises:
            ProviderTimeoutError: If a provider did not finish in time.
            TelemetryErrorGroup: If both providers failed.
        """
        errors: list[Exception] = []
        if self._meter_provider is not None:
            try:
                if not self._meter_provider.force_flush(timeout_millis):
                    errors.append(ProviderTimeoutError("meter provider", timeout_millis))
            except Exception as e:
                errors.append(e)
        if self._tracer_provider is not None:
            try:
                if not self._tracer_provider.force_flush(timeout_millis):
                    errors.append(ProviderTimeoutError("tracer provider", timeout_millis))
            except Exception as e:
                errors.append(e)

        err = join_errors(*errors, message="failed to flush telemetry providers")
        if err is not None:
            raise err

    def shutdown(self, timeout_millis: int = DEFAULT_FLUSH_TIMEOUT_MILLIS) -> None:
        """Shut down both providers, flushing pending telemetry.

        The tracer provider shuts down without a timeout. Runtime metrics
        collected into the meter provider are stopped first.

        Raises:
            TelemetryErrorGroup: If both providers failed.
        """
        errors: list[Exception] = []
        if self._meter_provider is not None:
            try:
                stop_runtime_metrics(self._meter_provider)
                self._meter_provider.shutdown(timeout_millis=timeout_millis)
            except Exception as e:
                errors.append(e)
        if self._tracer_provider is not None:
            try:
                self._tracer_provider.shutdown()
            except Exception as e:
                errors.append(e)

        err = join_errors(*errors, message="failed to shut down telemetry providers")
        if err is not None:
            raise err


def get_meter_provider(telemetry: Telemetry | None) -> MeterProvider:
    if telemetry is None:
        return NoOpMeterProvider()
    return telemetry.meter_provider


def get_tracer_provider(telemetry: Telemetry | None) -> TracerProvider:
    if telemetry is None:
        return NoOpTracerProvider()
    return telemetry.tracer_provider


def force_flush(telemetry: Telemetry | None, timeout_millis: int = DEFAULT_FLUSH_TIMEOUT_MILLIS) -> None:
    """Flush `telemetry`, doing nothing when it is None."""
    if telemetry is not None:
        telemetry.force_flush(timeout_millis)


def shutdown(telemetry: Telemetry | None, timeout_millis: int = DEFAULT_FLUSH_TIMEOUT_MILLIS) -> None:
    """Shut down `telemetry`, doing nothing when it is None."""
    if telemetry is not None:
        telemetry.shutdown(timeout_millis)
