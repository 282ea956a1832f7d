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

"""Registration of providers as the process-wide OpenTelemetry defaults.

Builders never touch the OTEL globals directly, they go through a
`ProviderRegistry`. The default registry installs providers with the OTEL API
setters; tests pass `budtelemetry.testing.RecordingProviderRegistry` instead.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from opentelemetry import metrics, trace
from opentelemetry.metrics import MeterProvider
from opentelemetry.trace import TracerProvider

from budtelemetry.commons import logging


logger = logging.get_logger(__name__)


@runtime_checkable
class ProviderRegistry(Protocol):
    """Capability to install providers process-wide."""

    def set_meter_provider(self, provider: MeterProvider) -> None: ...

    def set_tracer_provider(self, provider: TracerProvider) -> None: ...


class GlobalProviderRegistry:
    """Installs providers through ``opentelemetry.metrics`` and ``opentelemetry.trace``.

    The OTEL API only allows the global providers to be set once per process,
    later calls are ignored by the API with a warning.
    """

    def set_meter_provider(self, provider: MeterProvider) -> None:
        metrics.set_meter_provider(provider)
        logger.info("Registered global meter provider")

    def set_tracer_provider(self, provider: TracerProvider) -> None:
        trace.set_tracer_provider(provider)
        logger.info("Registered global tracer provider")


GLOBAL_REGISTRY = GlobalProviderRegistry()
