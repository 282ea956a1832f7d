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

"""Builder for the OTEL SDK MeterProvider.

The builder accumulates readers, exporters and raw provider options through
chained calls. Failures while creating exporters are deferred until `build`,
so a chain never breaks halfway.

Example:
    ```python
    provider = (
        MeterProviderBuilder(config)
        .with_grpc_exporter(exporter_config)
        .with_prometheus_exporter(registry)
        .build()
    )
    ```
"""

from __future__ import annotations

from typing import Any, Self

from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricExporter, MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.metrics.view import View
from opentelemetry.sdk.resources import Resource
from prometheus_client import REGISTRY, CollectorRegistry

from budtelemetry.commons import logging
from budtelemetry.commons.exceptions import RuntimeMetricsError

from .config import ExporterOTLPConfig, MeterProviderConfig
from .errors import ErrorList
from .registry import GLOBAL_REGISTRY, ProviderRegistry
from .utils import merge_options


logger = logging.get_logger(__name__)

# Process runtime metrics collected by SystemMetricsInstrumentor. Both the
# process.runtime.* names and their newer process.* / cpython.* names are
# listed, the instrumentation ignores the ones it does not know.
RUNTIME_METRICS_CONFIG: dict[str, list[str] | None] = {
    "process.runtime.memory": ["rss", "vms"],
    "process.runtime.cpu.time": ["user", "system"],
    "process.runtime.gc_count": None,
    "process.runtime.thread_count": None,
    "process.runtime.cpu.utilization": None,
    "process.runtime.context_switches": ["involuntary", "voluntary"],
    "process.memory.usage": None,
    "process.memory.virtual": None,
    "process.cpu.time": ["user", "system"],
    "process.cpu.utilization": None,
    "process.thread.count": None,
    "process.context_switches": ["involuntary", "voluntary"],
    "cpython.gc.collections": None,
}

# provider the runtime metrics are currently collected into
_runtime_metrics_provider: MeterProvider | None = None


def start_runtime_metrics(provider: MeterProvider) -> None:
    """Start collecting process runtime metrics into `provider`.

    The instrumentor is a process-wide singleton bound to one provider at a
    time, it is unbound from a previously built provider first.

    Raises:
        RuntimeError: If the instrumentation did not start.
    """
    global _runtime_metrics_provider

    stop_runtime_metrics()
    instrumentor = SystemMetricsInstrumentor(config=RUNTIME_METRICS_CONFIG)
    instrumentor.instrument(meter_provider=provider)
    if not instrumentor.is_instrumented_by_opentelemetry:
        raise RuntimeError("system metrics instrumentation did not start")
    _runtime_metrics_provider = provider


def stop_runtime_metrics(provider: MeterProvider | None = None) -> None:
    """Stop collecting process runtime metrics.

    Args:
        provider: Only stop when collection is bound to this provider. Stops
            unconditionally when None.
    """
    global _runtime_metrics_provider

    if provider is not None and provider is not _runtime_metrics_provider:
        return
    instrumentor = SystemMetricsInstrumentor()
    if instrumentor.is_instrumented_by_opentelemetry:
        instrumentor.uninstrument()
    _runtime_metrics_provider = None


class RegistryPrometheusMetricReader(PrometheusMetricReader):
    """PrometheusMetricReader exposing its metrics through a given registry.

    The upstream reader always registers with the default ``prometheus_client``
    registry; this one moves its collector to `registry`.
    """

    def __init__(self, registry: CollectorRegistry, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._registry = registry
        if registry is not REGISTRY:
            registry.register(self._collector)
            REGISTRY.unregister(self._collector)

    def shutdown(self, timeout_millis: float = 30_000, **kwargs: Any) -> None:
        self._registry.unregister(self._collector)


class MeterProviderBuilder:
    """Builds a MeterProvider from a `MeterProviderConfig` and chained options.

    Attributes:
        config: Referenced configuration, environment overrides are loaded into it at build.
        register_global: Install the built provider through `registry`.
        disable_runtime_metrics: Do not start process runtime metrics.
        resource: Resource given to the provider before any other option.
        registry: Registry used for global registration.
    """

    def __init__(
        self,
        config: MeterProviderConfig | None = None,
        *,
        registry: ProviderRegistry | None = None,
    ) -> None:
        self.config = config if config is not None else MeterProviderConfig()
        self.register_global = False
        self.disable_runtime_metrics = False
        self.resource: Resource | None = None
        self.registry = registry or GLOBAL_REGISTRY

        self._options: list[dict[str, Any]] = []
        self._exporters: list[MetricExporter] = []
        self._errors = ErrorList()

    @property
    def errors(self) -> ErrorList:
        """Errors deferred until `build`."""
        return self._errors

    @property
    def exporters(self) -> list[MetricExporter]:
        """Push exporters, each is wrapped in a periodic reader at build."""
        return list(self._exporters)

    def with_options(self, **options: Any) -> Self:
        """Add keyword arguments for the MeterProvider constructor.

        Later options override earlier ones, except ``metric_readers`` and
        ``views`` which accumulate.
        """
        self._options.append(options)
        return self

    def with_reader(self, reader: MetricReader, *views: View) -> Self:
        """Add a metric reader and, optionally, views."""
        self.with_options(metric_readers=[reader])
        if views:
            self.with_options(views=list(views))
        return self

    def with_exporters(self, *exporters: MetricExporter) -> Self:
        self._exporters.extend(exporters)
        return self

    def with_grpc_exporter(self, config: ExporterOTLPConfig | None = None, **options: Any) -> Self:
        """Add an OTLP gRPC metric exporter.

        Exporter options are derived from `config` when given, explicit
        `options` take precedence. A failure to create the exporter is logged
        and raised by `build`.
        """
        try:
            exporter_options = config.grpc_exporter_options() if config is not None else {}
            exporter_options.update(options)
            exporter = OTLPMetricExporter(**exporter_options)
        except Exception as e:
            logger.warning(f"Failed to create OTLP gRPC metric exporter: {e}")
            self._errors.append(e)
            return self

        return self.with_exporters(exporter)

    def with_prometheus_exporter(self, registry: CollectorRegistry | None, *views: View) -> Self:
        """Expose metrics through a ``prometheus_client`` registry.

        Does nothing when `registry` is None.
        """
        if registry is None:
            return self

        try:
            reader = RegistryPrometheusMetricReader(registry)
        except Exception as e:
            logger.warning(f"Failed to create Prometheus metric reader: {e}")
            self._errors.append(e)
            return self

        return self.with_reader(reader, *views)

    def build(self, **options: Any) -> MeterProvider | None:
        """Build the MeterProvider.

        Args:
            **options: Keyword arguments for the MeterProvider constructor,
                applied after every option added to the builder.

        Returns:
            The provider, or None when metrics are disabled.

        Raises:
            EnvironmentDecodeError: If an environment override cannot be decoded.
            RuntimeMetricsError: If runtime metrics failed to start. The built
                provider is usable and available as the error's `provider`.
        """
        err = self._errors.join("failed to build meter provider")
        if err is not None:
            raise err

        self.config.load_environment()
        if not self.config.enabled:
            logger.info("Metrics are disabled, using no-op meter provider")
            return None

        base: dict[str, Any] = {}
        if self.resource is not None:
            base["resource"] = self.resource
        if self._exporters:
            base["metric_readers"] = [
                PeriodicExportingMetricReader(
                    exporter,
                    export_interval_millis=self.config.export_interval,
                    export_timeout_millis=self.config.export_timeout,
                )
                for exporter in self._exporters
            ]

        provider = MeterProvider(**merge_options(base, *self._options, options))

        if not self.disable_runtime_metrics:
            try:
                start_runtime_metrics(provider)
            except Exception as e:
                raise RuntimeMetricsError("failed to start runtime metrics", provider=provider) from e

        if self.register_global:
            self.registry.set_meter_provider(provider)

        logger.info(f"Built meter provider with {len(self._exporters)} exporter(s)")
        return provider
