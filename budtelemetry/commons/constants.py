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

"""Defines the environment keys, defaults, enumerations and attribute keys used across budtelemetry.

Environment keys follow the OpenTelemetry SDK configuration conventions so that
values exported by one process can be consumed by any other OTEL aware process.
"""

from __future__ import annotations

from enum import Enum


# General SDK configuration
ENV_SERVICE_NAME = "OTEL_SERVICE_NAME"
ENV_RESOURCE_ATTRIBUTES = "OTEL_RESOURCE_ATTRIBUTES"

# Shared OTLP exporter configuration
ENV_OTLP_ENDPOINT = "OTEL_EXPORTER_OTLP_ENDPOINT"
ENV_OTLP_HEADERS = "OTEL_EXPORTER_OTLP_HEADERS"
ENV_OTLP_PROTOCOL = "OTEL_EXPORTER_OTLP_PROTOCOL"
ENV_OTLP_TIMEOUT = "OTEL_EXPORTER_OTLP_TIMEOUT"
ENV_OTLP_CERTIFICATE = "OTEL_EXPORTER_OTLP_CERTIFICATE"
ENV_OTLP_CLIENT_KEY = "OTEL_EXPORTER_OTLP_CLIENT_KEY"
ENV_OTLP_CLIENT_CERTIFICATE = "OTEL_EXPORTER_OTLP_CLIENT_CERTIFICATE"

# Metrics
ENV_METRIC_ENABLED = "OTEL_METRIC_ENABLED"
ENV_METRIC_EXPORT_INTERVAL = "OTEL_METRIC_EXPORT_INTERVAL"
ENV_METRIC_EXPORT_TIMEOUT = "OTEL_METRIC_EXPORT_TIMEOUT"

# Traces
ENV_TRACES_ENABLED = "OTEL_TRACES_ENABLED"
ENV_TRACES_SAMPLER = "OTEL_TRACES_SAMPLER"
ENV_TRACES_SAMPLER_ARG = "OTEL_TRACES_SAMPLER_ARG"

ENV_PREFIX = "OTEL_"

# Defaults (durations in milliseconds)
DEFAULT_OTLP_TIMEOUT = 10000
DEFAULT_METRIC_EXPORT_INTERVAL = 60000
DEFAULT_METRIC_EXPORT_TIMEOUT = 30000
DEFAULT_TRACES_SAMPLER_ARG = "0.5"
DEFAULT_FLUSH_TIMEOUT_MILLIS = 30000

# Build info settings carrying version control metadata start with this prefix
VCS_PREFIX = "vcs."

# OTEL Semantic Convention attributes
SERVICE_NAME = "service.name"
SERVICE_VERSION = "service.version"


class OTLPProtocol(str, Enum):
    """Transport protocols of the OTLP exporters.

    Only gRPC is wired by the builders, ``http/protobuf`` is accepted so that
    environments prepared for other SDKs still decode.
    """

    GRPC = "grpc"
    HTTP_PROTOBUF = "http/protobuf"


class SamplerName(str, Enum):
    """Sampler names as accepted by ``OTEL_TRACES_SAMPLER``."""

    ALWAYS_ON = "always_on"
    ALWAYS_OFF = "always_off"
    TRACE_ID_RATIO = "traceidratio"
    PARENT_BASED_ALWAYS_ON = "parentbased_always_on"
    PARENT_BASED_ALWAYS_OFF = "parentbased_always_off"
    PARENT_BASED_TRACE_ID_RATIO = "parentbased_traceidratio"

    @property
    def uses_ratio(self) -> bool:
        """Whether the sampler reads its ratio from ``OTEL_TRACES_SAMPLER_ARG``."""
        return self in (SamplerName.TRACE_ID_RATIO, SamplerName.PARENT_BASED_TRACE_ID_RATIO)


DEFAULT_TRACES_SAMPLER = SamplerName.PARENT_BASED_TRACE_ID_RATIO


class LogLevel(str, Enum):
    """Define logging levels accepted by the library logging settings.

    Each value aligns with the level names of Python's built-in ``logging`` module.
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


__all__ = [
    "DEFAULT_FLUSH_TIMEOUT_MILLIS",
    "DEFAULT_METRIC_EXPORT_INTERVAL",
    "DEFAULT_METRIC_EXPORT_TIMEOUT",
    "DEFAULT_OTLP_TIMEOUT",
    "DEFAULT_TRACES_SAMPLER",
    "DEFAULT_TRACES_SAMPLER_ARG",
    "ENV_METRIC_ENABLED",
    "ENV_METRIC_EXPORT_INTERVAL",
    "ENV_METRIC_EXPORT_TIMEOUT",
    "ENV_OTLP_CERTIFICATE",
    "ENV_OTLP_CLIENT_CERTIFICATE",
    "ENV_OTLP_CLIENT_KEY",
    "ENV_OTLP_ENDPOINT",
    "ENV_OTLP_HEADERS",
    "ENV_OTLP_PROTOCOL",
    "ENV_OTLP_TIMEOUT",
    "ENV_PREFIX",
    "ENV_RESOURCE_ATTRIBUTES",
    "ENV_SERVICE_NAME",
    "ENV_TRACES_ENABLED",
    "ENV_TRACES_SAMPLER",
    "ENV_TRACES_SAMPLER_ARG",
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "VCS_PREFIX",
    "LogLevel",
    "OTLPProtocol",
    "SamplerName",
]
