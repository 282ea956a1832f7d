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

"""Builder for the OTEL SDK TracerProvider.

Besides raw provider options the builder accumulates resource attributes,
span exporters and an explicit sampler. Unless a sampler is set explicitly,
it is derived from the `TracerProviderConfig`.
"""

from __future__ import annotations

from typing import Any, Self

from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    DEFAULT_OFF,
    DEFAULT_ON,
    ParentBasedTraceIdRatio,
    Sampler,
    TraceIdRatioBased,
)

from budtelemetry.commons import logging
from budtelemetry.commons.constants import SERVICE_VERSION, VCS_PREFIX, SamplerName
from budtelemetry.commons.exceptions import ConfigurationError, ResourceError
from budtelemetry.types import KeyValue

from .buildinfo import BuildInfo
from .config import ExporterOTLPConfig, TracerProviderConfig
from .errors import ErrorList
from .registry import GLOBAL_REGISTRY, ProviderRegistry
from .utils import merge_options


logger = logging.get_logger(__name__)


def create_sampler(name: SamplerName | str, arg: str | None = None) -> Sampler:
    """Create the sampler named by ``OTEL_TRACES_SAMPLER``.

    Args:
        name: Sampler name.
        arg: Sampling ratio, only used by the ratio based samplers.

    Raises:
        ConfigurationError: If the name is unknown or the ratio is not a number in [0, 1].
    """
    try:
        name = SamplerName(name)
    except ValueError as e:
        raise ConfigurationError(f"Unknown sampler: {name}", details={"sampler": name}) from e

    if name is SamplerName.ALWAYS_ON:
        return ALWAYS_ON
    if name is SamplerName.ALWAYS_OFF:
        return ALWAYS_OFF
    if name is SamplerName.PARENT_BASED_ALWAYS_ON:
        return DEFAULT_ON
    if name is SamplerName.PARENT_BASED_ALWAYS_OFF:
        return DEFAULT_OFF

    try:
        rate = float(arg) if arg else 1.0
        if name is SamplerName.TRACE_ID_RATIO:
            return TraceIdRatioBased(rate)
        return ParentBasedTraceIdRatio(rate)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid argument for sampler {name.value}: {arg}",
            details={"sampler": name.value, "sampler_arg": arg},
        ) from e


class TracerProviderBuilder:
    """Builds a TracerProvider from a `TracerProviderConfig` and chained options.

    Attributes:
        config: Referenced configuration, environment overrides are loaded into it at build.
        register_global: Install the built provider through `registry`.
        attributes: Resource attributes merged into the base resource, in order.
        sampler: Explicit sampler, overrides the configured one.
        span_exporters: Exporters, each gets its own BatchSpanProcessor at build.
        resource: Base resource. Defaults to ``Resource.create()``.
        registry: Registry used for global registration.
    """

    def __init__(
        self,
        config: TracerProviderConfig | None = None,
        *,
        registry: ProviderRegistry | None = None,
    ) -> None:
        self.config = config if config is not None else TracerProviderConfig()
        self.register_global = False
        self.attributes: list[KeyValue] = []
        self.sampler: Sampler | None = None
        self.span_exporters: list[SpanExporter] = []
        self.resource: Resource | None = None
        self.registry = registry or GLOBAL_REGISTRY

        self._options: list[dict[str, Any]] = []
        self._errors = ErrorList()

    @property
    def errors(self) -> ErrorList:
        """Errors deferred until `build`."""
        return self._errors

    def with_options(self, **options: Any) -> Self:
        """Add keyword arguments for the TracerProvider constructor.

        ``span_processors`` is accepted as well, its processors are added to
        the provider after construction.
        """
        self._options.append(options)
        return self

    def with_sampler(self, sampler: Sampler) -> Self:
        self.sampler = sampler
        return self

    def with_attributes(self, *key_values: KeyValue) -> Self:
        """Add resource attributes. On duplicate keys the last one wins."""
        self.attributes.extend(key_values)
        return self

    def with_span_exporters(self, *exporters: SpanExporter) -> Self:
        self.span_exporters.extend(exporters)
        return self

    def with_grpc_exporter(self, config: ExporterOTLPConfig | None = None, **options: Any) -> Self:
        """Add an OTLP gRPC span exporter.

        Exporter options are derived from `config` when given, explicit
        `options` take precedence. A failure to create the exporter is logged
        and raised by `build`.
        """
        try:
            exporter_options = config.grpc_exporter_options() if config is not None else {}
            exporter_options.update(options)
            exporter = OTLPSpanExporter(**exporter_options)
        except Exception as e:
            logger.warning(f"Failed to create OTLP gRPC span exporter: {e}")
            self._errors.append(e)
            return self

        return self.with_span_exporters(exporter)

    def with_build_info(self, info: BuildInfo | None, *modules: str) -> Self:
        """Add the service version and version-control attributes of `info`.

        Args:
            info: Build information, nothing is added when None.
            *modules: Dependencies whose version is added as ``name: version`` attribute.
        """
        if info is None:
            return self

        self.with_attributes((SERVICE_VERSION, info.version))
        self.with_attributes(*((key, value) for key, value in info.settings.items() if key.startswith(VCS_PREFIX)))
        if modules:
            self.with_attributes(*((path, version) for path, version in info.deps.items() if path in modules))
        return self

    def _create_resource(self, base: Resource | None) -> Resource:
        resource = base or self.resource or Resource.create()
        if not self.attributes:
            return resource
        try:
            return resource.merge(Resource(dict(self.attributes)))
        except Exception as e:
            raise ResourceError(
                "failed to merge resource attributes",
                details={"attributes": len(self.attributes)},
            ) from e

    def build(self, **options: Any) -> TracerProvider | None:
        """Build the TracerProvider.

        Args:
            **options: Keyword arguments for the TracerProvider constructor,
                applied after every option added to the builder.

        Returns:
            The provider, or None when tracing is disabled.

        Raises:
            EnvironmentDecodeError: If an environment override cannot be decoded.
            ConfigurationError: If the configured sampler cannot be created.
            ResourceError: If the resource attributes cannot be merged.
        """
        err = self._errors.join("failed to build tracer provider")
        if err is not None:
            raise err

        self.config.load_environment()
        if not self.config.enabled:
            logger.info("Tracing is disabled, using no-op tracer provider")
            return None

        provider_options = merge_options(*self._options, options)
        if self.sampler is not None:
            provider_options["sampler"] = self.sampler
        elif "sampler" not in provider_options:
            provider_options["sampler"] = create_sampler(self.config.sampler, self.config.sampler_arg)

        processors = list(provider_options.pop("span_processors", []))
        processors.extend(BatchSpanProcessor(exporter) for exporter in self.span_exporters)
        provider_options["resource"] = self._create_resource(provider_options.pop("resource", None))

        provider = TracerProvider(**provider_options)
        for processor in processors:
            provider.add_span_processor(processor)

        if self.register_global:
            self.registry.set_tracer_provider(provider)

        logger.info(f"Built tracer provider with {len(processors)} span processor(s)")
        return provider

