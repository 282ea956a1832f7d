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

"""budtelemetry - OpenTelemetry provider setup for Bud-Stack services.

Builds the OTEL SDK meter and tracer providers of a service from environment
bound configuration and returns them in a single `Telemetry` handle.

Example:
    >>> import budtelemetry
    >>> config = budtelemetry.Config(service_name="my-service")
    >>> telemetry = budtelemetry.Builder(config).with_default_exporter().as_global().build()
    >>> tracer = telemetry.tracer_provider.get_tracer(__name__)
    >>> telemetry.shutdown()

Configuration:
    Configuration is read from the standard OTEL environment variables when
    building, on top of the values set on the `Config`:
        OTEL_SERVICE_NAME: Service name
        OTEL_RESOURCE_ATTRIBUTES: Resource attributes (key=value,key=value)
        OTEL_EXPORTER_OTLP_*: OTLP exporter endpoint, headers, protocol, timeout and TLS files
        OTEL_METRIC_ENABLED / OTEL_METRIC_EXPORT_INTERVAL / OTEL_METRIC_EXPORT_TIMEOUT: Metrics
        OTEL_TRACES_ENABLED / OTEL_TRACES_SAMPLER / OTEL_TRACES_SAMPLER_ARG: Tracing
"""

from budtelemetry.__about__ import __version__ as _about_version
from budtelemetry._internal.buildinfo import BuildInfo, read_build_info
from budtelemetry._internal.config import Config, ExporterOTLPConfig, MeterProviderConfig, TracerProviderConfig
from budtelemetry._internal.errors import ErrorList
from budtelemetry._internal.main import Builder, new_development_builder
from budtelemetry._internal.meter import MeterProviderBuilder
from budtelemetry._internal.registry import GLOBAL_REGISTRY, ProviderRegistry
from budtelemetry._internal.telemetry import Telemetry, force_flush, get_meter_provider, get_tracer_provider, shutdown
from budtelemetry._internal.tracer import TracerProviderBuilder, create_sampler
from budtelemetry._internal.utils import attributes_from_map, stdout_span_exporter
from budtelemetry.commons.exceptions import (
    ConfigurationError,
    EnvironmentDecodeError,
    ProviderTimeoutError,
    ResourceError,
    RuntimeMetricsError,
    TelemetryErrorGroup,
    TelemetryException,
)


__version__ = _about_version.split("@")[-1]

__all__ = [
    "GLOBAL_REGISTRY",
    "BuildInfo",
    "Builder",
    "Config",
    "ConfigurationError",
    "EnvironmentDecodeError",
    "ErrorList",
    "ExporterOTLPConfig",
    "MeterProviderBuilder",
    "MeterProviderConfig",
    "ProviderRegistry",
    "ProviderTimeoutError",
    "ResourceError",
    "RuntimeMetricsError",
    "Telemetry",
    "TelemetryErrorGroup",
    "TelemetryException",
    "TracerProviderBuilder",
    "TracerProviderConfig",
    "__version__",
    "attributes_from_map",
    "create_sampler",
    "force_flush",
    "get_meter_provider",
    "get_tracer_provider",
    "new_development_builder",
    "read_build_info",
    "shutdown",
    "stdout_span_exporter",
]
