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

"""Top level builder assembling both telemetry subsystems.

Example:
    ```python
    from budtelemetry import Builder, Config

    telemetry = Builder(Config(service_name="budapp")).as_global().with_default_exporter().build()
    tracer = telemetry.tracer_provider.get_tracer(__name__)
    ...
    telemetry.shutdown()
    ```
"""

from __future__ import annotations

from typing import Self

from opentelemetry.sdk.metrics import MeterProvider as SDKMeterProvider
from opentelemetry.sdk.trace import TracerProvider as SDKTracerProvider
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

from budtelemetry.commons import logging
from budtelemetry.commons.constants import OTLPProtocol, SamplerName
from budtelemetry.commons.exceptions import RuntimeMetricsError, join_errors

from .config import Config
from .meter import MeterProviderBuilder, stop_runtime_metrics
from .registry import ProviderRegistry
from .telemetry import Telemetry
from .tracer import TracerProviderBuilder
from .utils import stdout_span_exporter


logger = logging.get_logger(__name__)


class Builder:
    """Builds a `Telemetry` handle from a `Config`.

    The builder works on its own copy of the config. The subsystem builders
    reference ``config.meter`` and ``config.tracer`` of that copy, so changes
    made through ``builder.config`` are seen by them when building.

    Attributes:
        config: Configuration of the telemetry.
        meter_provider: Builder of the meter provider, None skips metrics.
        tracer_provider: Builder of the tracer provider, None skips tracing.
    """

    def __init__(self, config: Config | None = None, *, registry: ProviderRegistry | None = None) -> None:
        self.config = config.model_copy(deep=True) if config is not None else Config()
        self.meter_provider: MeterProviderBuilder | None = MeterProviderBuilder(self.config.meter, registry=registry)
        self.tracer_provider: TracerProviderBuilder | None = TracerProviderBuilder(
            self.config.tracer, registry=registry
        )
        self.default_exporter = False

    def as_global(self) -> Self:
        """Register both providers as the process-wide OTEL providers when built."""
        if self.meter_provider is not None:
            self.meter_provider.register_global = True
        if self.tracer_provider is not None:
            self.tracer_provider.register_global = True
        return self

    def with_default_exporter(self) -> Self:
        """Export through OTLP as configured by ``OTEL_EXPORTER_OTLP_*``.

        The exporter is chosen when building, after environment overrides are
        loaded. Nothing is exported when no endpoint is configured.
        """
        self.default_exporter = True
        return self

    def _wire_default_exporter(self) -> None:
        exporter = self.config.exporter
        if not exporter.endpoint:
            logger.info("No OTLP endpoint configured, skipping default exporter")
            return

        if exporter.protocol is OTLPProtocol.GRPC:
            logger.info(f"Using OTLP gRPC exporter: {exporter.endpoint}")
            if self.meter_provider is not None:
                self.meter_provider.with_grpc_exporter(exporter)
            if self.tracer_provider is not None:
                self.tracer_provider.with_grpc_exporter(exporter)
        else:
            logger.warning(f"OTLP protocol {exporter.protocol.value} is not supported, skipping default exporter")

    def build(self) -> Telemetry:
        """Build both providers.

        Both subsystems are always attempted. When any of them fails, the
        providers that were built are shut down and all failures are raised
        together.

        Raises:
            EnvironmentDecodeError: If an environment override cannot be decoded.
            TelemetryErrorGroup: If several errors occurred.
            TelemetryException: If a single subsystem failed.
        """
        self.config.load_environment()

        resource = None
        if self.meter_provider is not None and self.meter_provider.resource is None:
            resource = self.config.create_resource()
            self.meter_provider.resource = resource
        if self.tracer_provider is not None and self.tracer_provider.resource is None:
            self.tracer_provider.resource = resource or self.config.create_resource()

        if self.default_exporter:
            self._wire_default_exporter()

        errors: list[Exception] = []
        meter: SDKMeterProvider | None = None
        tracer: SDKTracerProvider | None = None
        orphans: list[SDKMeterProvider] = []

        if self.meter_provider is not None:
            try:
                meter = self.meter_provider.build()
            except RuntimeMetricsError as e:
                orphans.append(e.provider)
                errors.append(e)
            except Exception as e:
                errors.append(e)
        if self.tracer_provider is not None:
            try:
                tracer = self.tracer_provider.build()
            except Exception as e:
                errors.append(e)

        err = join_errors(*errors, message="failed to build telemetry providers")
        if err is None:
            return Telemetry(meter, tracer)

        for provider in (meter, tracer, *orphans):
            if provider is None:
                continue
            try:
                stop_runtime_metrics(provider)
                provider.shutdown()
            except Exception as e:
                logger.warning(f"Failed to shut down provider after failed build: {e}")
        raise err


def new_development_builder(config: Config | None = None, *, registry: ProviderRegistry | None = None) -> Builder:
    """Create a `Builder` suited for local development.

    Every span is sampled and printed to stdout.
    """
    builder = Builder(config, registry=registry)
    builder.config.tracer.sampler = SamplerName.ALWAYS_ON
    if builder.tracer_provider is not None:
        builder.tracer_provider.with_sampler(ALWAYS_ON).with_span_exporters(stdout_span_exporter())
    return builder
