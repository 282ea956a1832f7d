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

"""Configuration model for budtelemetry.

Configuration is layered:
1. Default values declared on the models (lowest)
2. Values set programmatically on a model instance
3. Environment variables, overlaid by `load_environment` at build time (highest)

Every model maps its fields to OTEL environment variables through the field
alias, which is used in both directions: `load_environment` decodes the
environment into the fields and `environ` encodes the fields back into an
environment mapping, e.g. to propagate configuration to subprocesses.

Loading overlays values onto the existing instance instead of creating a new
one, so builders holding a reference to a nested config observe the change.
"""

from __future__ import annotations

import os
from abc import abstractmethod
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Self

import grpc
from opentelemetry.sdk.resources import Resource
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from budtelemetry.commons.constants import (
    DEFAULT_METRIC_EXPORT_INTERVAL,
    DEFAULT_METRIC_EXPORT_TIMEOUT,
    DEFAULT_OTLP_TIMEOUT,
    DEFAULT_TRACES_SAMPLER,
    DEFAULT_TRACES_SAMPLER_ARG,
    ENV_METRIC_ENABLED,
    ENV_METRIC_EXPORT_INTERVAL,
    ENV_METRIC_EXPORT_TIMEOUT,
    ENV_OTLP_CERTIFICATE,
    ENV_OTLP_CLIENT_CERTIFICATE,
    ENV_OTLP_CLIENT_KEY,
    ENV_OTLP_ENDPOINT,
    ENV_OTLP_HEADERS,
    ENV_OTLP_PROTOCOL,
    ENV_OTLP_TIMEOUT,
    ENV_RESOURCE_ATTRIBUTES,
    ENV_SERVICE_NAME,
    ENV_TRACES_ENABLED,
    ENV_TRACES_SAMPLER,
    ENV_TRACES_SAMPLER_ARG,
    SERVICE_NAME,
    OTLPProtocol,
    SamplerName,
)
from budtelemetry.commons.exceptions import EnvironmentDecodeError, join_errors
from budtelemetry.commons.helpers import (
    format_bool,
    format_key_value_list,
    parse_key_value_list,
    read_optional_file,
)


def _decode_mapping(value: Any) -> Any:
    if isinstance(value, str):
        return parse_key_value_list(value)
    return value


def _validation_reason(err: ValidationError) -> str:
    return "; ".join(error["msg"] for error in err.errors())


class EnvironmentModel(BaseModel):
    """Base class for configuration models bound to environment variables.

    Fields declare their environment variable as alias. Nested models have no
    alias and are loaded recursively.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True, extra="forbid")

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Create a model with defaults, overlaid with the values found in `environ`.

        Args:
            environ: Environment mapping to read. Defaults to ``os.environ``.

        Raises:
            EnvironmentDecodeError: If a value cannot be decoded.
            TelemetryErrorGroup: If several values cannot be decoded.
        """
        config = cls()
        config.load_environment(environ)
        return config

    def load_environment(self, environ: Mapping[str, str] | None = None, *, recursive: bool = True) -> None:
        """Overlay the values found in `environ` onto this instance.

        Keys that are absent or empty leave the current value untouched. Every
        key is attempted before failing, so all malformed values are reported
        together.

        Args:
            environ: Environment mapping to read. Defaults to ``os.environ``.
            recursive: Also load nested models.

        Raises:
            EnvironmentDecodeError: If a value cannot be decoded.
            TelemetryErrorGroup: If several values cannot be decoded.
        """
        environ = os.environ if environ is None else environ
        failures: list[Exception] = []
        self._load_fields(environ, failures, recursive)

        err = join_errors(*failures, message="failed to decode telemetry environment")
        if err is not None:
            raise err

    def _load_fields(self, environ: Mapping[str, str], failures: list[Exception], recursive: bool) -> None:
        for name, field in type(self).model_fields.items():
            value = getattr(self, name)
            if isinstance(value, EnvironmentModel):
                if recursive:
                    value._load_fields(environ, failures, recursive)
                continue

            key = field.alias
            if key is None or not environ.get(key):
                continue
            try:
                setattr(self, name, environ[key])
            except ValidationError as err:
                failures.append(EnvironmentDecodeError(key, environ[key], _validation_reason(err)))

    @abstractmethod
    def environ(self) -> dict[str, str]:
        """Encode this model into its environment representation."""


class ExporterOTLPConfig(EnvironmentModel):
    """Settings shared by the OTLP exporters of both subsystems.

    Attributes:
        endpoint: Target URL of the OTLP receiver.
        headers: Headers sent with every export request.
        protocol: OTLP transport.
        timeout: Maximum time in milliseconds the exporter waits for each batch.
        certificate: Path to the trusted certificate for the server's TLS credentials.
        client_key: Path to the client private key for mTLS.
        client_certificate: Path to the client certificate chain for mTLS.
    """

    endpoint: str | None = Field(None, alias=ENV_OTLP_ENDPOINT)
    headers: dict[str, str] = Field(default_factory=dict, alias=ENV_OTLP_HEADERS)
    protocol: OTLPProtocol = Field(OTLPProtocol.GRPC, alias=ENV_OTLP_PROTOCOL)
    timeout: int = Field(DEFAULT_OTLP_TIMEOUT, alias=ENV_OTLP_TIMEOUT, ge=0)
    certificate: str | None = Field(None, alias=ENV_OTLP_CERTIFICATE)
    client_key: str | None = Field(None, alias=ENV_OTLP_CLIENT_KEY)
    client_certificate: str | None = Field(None, alias=ENV_OTLP_CLIENT_CERTIFICATE)

    @field_validator("headers", mode="before")
    @classmethod
    def decode_headers(cls, value: Any) -> Any:
        return _decode_mapping(value)

    @property
    def timeout_duration(self) -> timedelta:
        return timedelta(milliseconds=self.timeout)

    def grpc_exporter_options(self) -> dict[str, Any]:
        """Convert the settings into keyword arguments for the OTLP gRPC exporters.

        TLS material is read from disk when any of the certificate paths is set.

        Raises:
            OSError: If a certificate file cannot be read.
        """
        options: dict[str, Any] = {"timeout": self.timeout_duration.total_seconds()}
        if self.endpoint:
            options["endpoint"] = self.endpoint
        if self.headers:
            options["headers"] = dict(self.headers)
        if self.certificate or self.client_key or self.client_certificate:
            options["credentials"] = grpc.ssl_channel_credentials(
                root_certificates=read_optional_file(self.certificate),
                private_key=read_optional_file(self.client_key),
                certificate_chain=read_optional_file(self.client_certificate),
            )
        return options

    def environ(self) -> dict[str, str]:
        environ = {
            ENV_OTLP_PROTOCOL: self.protocol.value,
            ENV_OTLP_TIMEOUT: str(self.timeout),
        }
        optional = {
            ENV_OTLP_ENDPOINT: self.endpoint,
            ENV_OTLP_HEADERS: format_key_value_list(self.headers),
            ENV_OTLP_CERTIFICATE: self.certificate,
            ENV_OTLP_CLIENT_KEY: self.client_key,
            ENV_OTLP_CLIENT_CERTIFICATE: self.client_certificate,
        }
        environ.update({key: value for key, value in optional.items() if value})
        return environ


class MeterProviderConfig(EnvironmentModel):
    """Configuration for the `MeterProviderBuilder`.

    Attributes:
        enabled: When disabled the builder yields no provider and a no-op is used.
        export_interval: Time interval in milliseconds between the start of two export attempts.
        export_timeout: Maximum allowed time in milliseconds to export data.
    """

    enabled: bool = Field(True, alias=ENV_METRIC_ENABLED)
    export_interval: int = Field(DEFAULT_METRIC_EXPORT_INTERVAL, alias=ENV_METRIC_EXPORT_INTERVAL, gt=0)
    export_timeout: int = Field(DEFAULT_METRIC_EXPORT_TIMEOUT, alias=ENV_METRIC_EXPORT_TIMEOUT, ge=0)

    @property
    def export_interval_duration(self) -> timedelta:
        return timedelta(milliseconds=self.export_interval)

    @property
    def export_timeout_duration(self) -> timedelta:
        return timedelta(milliseconds=self.export_timeout)

    def environ(self) -> dict[str, str]:
        return {
            ENV_METRIC_ENABLED: format_bool(self.enabled),
            ENV_METRIC_EXPORT_INTERVAL: str(self.export_interval),
            ENV_METRIC_EXPORT_TIMEOUT: str(self.export_timeout),
        }


class TracerProviderConfig(EnvironmentModel):
    """Configuration for the `TracerProviderBuilder`.

    Attributes:
        enabled: When disabled the builder yields no provider and a no-op is used.
        sampler: Name of the sampler used unless the builder sets one explicitly.
        sampler_arg: Argument of the sampler, the sampling ratio for ratio based samplers.
    """

    enabled: bool = Field(True, alias=ENV_TRACES_ENABLED)
    sampler: SamplerName = Field(DEFAULT_TRACES_SAMPLER, alias=ENV_TRACES_SAMPLER)
    sampler_arg: str = Field(DEFAULT_TRACES_SAMPLER_ARG, alias=ENV_TRACES_SAMPLER_ARG)

    def environ(self) -> dict[str, str]:
        return {
            ENV_TRACES_ENABLED: format_bool(self.enabled),
            ENV_TRACES_SAMPLER: self.sampler.value,
            ENV_TRACES_SAMPLER_ARG: self.sampler_arg,
        }


class Config(EnvironmentModel):
    """Top level telemetry configuration.

    Holds the service identity shared by both subsystems, the OTLP exporter
    settings and one nested config per subsystem.

    Example:
        ```python
        config = Config(service_name="budapp", resource_attributes={"deployment.environment": "dev"})
        config.tracer.sampler = "always_on"
        ```
    """

    service_name: str | None = Field(None, alias=ENV_SERVICE_NAME)
    resource_attributes: dict[str, str] = Field(default_factory=dict, alias=ENV_RESOURCE_ATTRIBUTES)

    exporter: ExporterOTLPConfig = Field(default_factory=ExporterOTLPConfig)
    meter: MeterProviderConfig = Field(default_factory=MeterProviderConfig)
    tracer: TracerProviderConfig = Field(default_factory=TracerProviderConfig)

    @field_validator("resource_attributes", mode="before")
    @classmethod
    def decode_resource_attributes(cls, value: Any) -> Any:
        return _decode_mapping(value)

    def create_resource(self) -> Resource:
        """Create the OTEL Resource identifying this service.

        The SDK's default attributes and detected environment attributes are
        merged with the configured resource attributes and service name.
        """
        attributes: dict[str, str] = dict(self.resource_attributes)
        if self.service_name:
            attributes[SERVICE_NAME] = self.service_name
        return Resource.create(attributes)

    def environ(self) -> dict[str, str]:
        environ: dict[str, str] = {}
        if self.service_name:
            environ[ENV_SERVICE_NAME] = self.service_name
        if self.resource_attributes:
            environ[ENV_RESOURCE_ATTRIBUTES] = format_key_value_list(self.resource_attributes)

        environ.update(self.exporter.environ())
        environ.update(self.meter.environ())
        environ.update(self.tracer.environ())
        return environ
