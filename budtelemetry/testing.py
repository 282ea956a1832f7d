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

"""Test utilities for budtelemetry.

Example:
    >>> from budtelemetry import Builder
    >>> from budtelemetry.testing import RecordingProviderRegistry, prepared_environ
    >>> registry = RecordingProviderRegistry()
    >>> with prepared_environ(OTEL_SERVICE_NAME="test"):
    ...     telemetry = Builder(registry=registry).as_global().build()
    >>> assert registry.meter_providers
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from opentelemetry.metrics import MeterProvider
from opentelemetry.trace import TracerProvider

from budtelemetry.commons.constants import ENV_PREFIX


class RecordingProviderRegistry:
    """Provider registry that records registrations instead of setting the OTEL globals."""

    def __init__(self) -> None:
        self.meter_providers: list[MeterProvider] = []
        self.tracer_providers: list[TracerProvider] = []

    def set_meter_provider(self, provider: MeterProvider) -> None:
        self.meter_providers.append(provider)

    def set_tracer_provider(self, provider: TracerProvider) -> None:
        self.tracer_providers.append(provider)


@contextmanager
def prepared_environ(*prefixes: str, **values: str) -> Iterator[None]:
    """Run a block with a controlled environment.

    Variables starting with ``OTEL_`` or any of `prefixes` are removed, then
    `values` are set. The original environment is restored on exit.
    """
    snapshot = dict(os.environ)
    cleared = (ENV_PREFIX, *prefixes)
    try:
        for key in [key for key in os.environ if key.startswith(cleared)]:
            del os.environ[key]
        os.environ.update(values)
        yield
    finally:
        os.environ.clear()
        os.environ.update(snapshot)


__all__ = [
    "RecordingProviderRegistry",
    "prepared_environ",
]
