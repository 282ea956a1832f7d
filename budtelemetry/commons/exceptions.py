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

"""Custom exceptions for budtelemetry."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from opentelemetry.sdk.metrics import MeterProvider


class TelemetryException(Exception):
    """Base exception for all telemetry errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(TelemetryException):
    """Invalid telemetry configuration."""

    pass


class EnvironmentDecodeError(ConfigurationError):
    """An environment variable holds a value that cannot be decoded into its config field."""

    def __init__(self, key: str, value: str, reason: str) -> None:
        super().__init__(
            f"Invalid value for {key}: {reason}",
            details={"key": key, "value": value},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ResourceError(TelemetryException):
    """Error merging resource attributes."""

    pass


class RuntimeMetricsError(TelemetryException):
    """Runtime metrics collection failed to start.

    The meter provider was built successfully and remains usable, it is
    available as `provider`.
    """

    def __init__(self, message: str, provider: MeterProvider) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderTimeoutError(TelemetryException):
    """A provider did not finish flushing within its timeout."""

    def __init__(self, provider: str, timeout_millis: float) -> None:
        super().__init__(
            f"{provider} did not flush within {timeout_millis}ms",
            details={"provider": provider, "timeout_millis": timeout_millis},
        )
        self.provider = provider
        self.timeout_millis = timeout_millis


class TelemetryErrorGroup(ExceptionGroup):
    """Compound error holding every failure of an operation.

    The original errors are available through `exceptions`.
    """

    def derive(self, excs: Sequence[Exception]) -> TelemetryErrorGroup:
        return TelemetryErrorGroup(self.message, excs)


def join_errors(*errors: Exception | None, message: str = "multiple telemetry errors") -> Exception | None:
    """Combine errors into a single error.

    `None` values are discarded. Returns None when nothing remains, the error
    itself when exactly one remains, and a `TelemetryErrorGroup` otherwise.

    Example:
        ```python
        err = join_errors(meter_err, tracer_err, message="failed to build telemetry providers")
        if err is not None:
            raise err
        ```
    """
    remaining = [err for err in errors if err is not None]
    if not remaining:
        return None
    if len(remaining) == 1:
        return remaining[0]
    return TelemetryErrorGroup(message, remaining)
