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

"""ASGI integration.

Wraps an ASGI application with the OpenTelemetry ASGI middleware, recording
a server span and HTTP server metrics per request with the given providers.
"""

from __future__ import annotations

from typing import Any

from opentelemetry.instrumentation.asgi import OpenTelemetryMiddleware
from opentelemetry.metrics import MeterProvider
from opentelemetry.trace import TracerProvider


def instrument_asgi_app(
    app: Any,
    *,
    tracer_provider: TracerProvider,
    meter_provider: MeterProvider,
    operation: str | None = None,
    **options: Any,
) -> OpenTelemetryMiddleware:
    """Wrap `app` with the OpenTelemetry ASGI middleware.

    Args:
        app: The ASGI application.
        tracer_provider: Provider for the request spans.
        meter_provider: Provider for the HTTP server metrics.
        operation: Span name used for every request. Defaults to the
            middleware's ``METHOD /path`` naming.
        **options: Additional `OpenTelemetryMiddleware` arguments.
    """
    if operation and "default_span_details" not in options:
        options["default_span_details"] = lambda scope: (operation, {})

    return OpenTelemetryMiddleware(
        app,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
        **options,
    )
