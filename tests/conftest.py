"""Pytest configuration and fixtures for budtelemetry tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from budtelemetry._internal.meter import stop_runtime_metrics
from budtelemetry.testing import RecordingProviderRegistry, prepared_environ


@pytest.fixture(autouse=True)
def clean_environ() -> Iterator[None]:
    """Run every test without OTEL_ or BUDTELEMETRY_ variables from the host."""
    with prepared_environ("BUDTELEMETRY_"):
        yield


@pytest.fixture(autouse=True)
def reset_runtime_metrics() -> Iterator[None]:
    """Stop runtime metrics started by a test, so the next build starts them again."""
    yield
    stop_runtime_metrics()


@pytest.fixture
def registry() -> RecordingProviderRegistry:
    """Registry recording global registrations."""
    return RecordingProviderRegistry()
