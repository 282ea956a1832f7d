"""Tests for the provider registries and test utilities."""

from __future__ import annotations

import os

import pytest

from budtelemetry import GLOBAL_REGISTRY, ProviderRegistry
from budtelemetry.testing import RecordingProviderRegistry, prepared_environ


class TestRegistries:
    """Tests for the provider registries."""

    def test_registries_implement_protocol(self) -> None:
        """Test that both registries satisfy ProviderRegistry."""
        assert isinstance(GLOBAL_REGISTRY, ProviderRegistry)
        assert isinstance(RecordingProviderRegistry(), ProviderRegistry)

    def test_recording_registry(self) -> None:
        """Test that registrations are recorded in order."""
        registry = RecordingProviderRegistry()
        registry.set_tracer_provider("first")
        registry.set_tracer_provider("second")
        assert registry.tracer_providers == ["first", "second"]
        assert registry.meter_providers == []


class TestPreparedEnviron:
    """Tests for prepared_environ."""

    def test_otel_variables_are_cleared_and_restored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that OTEL variables are hidden inside the block and restored after it."""
        monkeypatch.setenv("OTEL_SERVICE_NAME", "outer")

        with prepared_environ(OTEL_TRACES_SAMPLER="always_on"):
            assert "OTEL_SERVICE_NAME" not in os.environ
            assert os.environ["OTEL_TRACES_SAMPLER"] == "always_on"

        assert os.environ["OTEL_SERVICE_NAME"] == "outer"
        assert "OTEL_TRACES_SAMPLER" not in os.environ

    def test_extra_prefixes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that additional prefixes are cleared as well."""
        monkeypatch.setenv("BUDAPP_DEBUG", "1")
        with prepared_environ("BUDAPP_"):
            assert "BUDAPP_DEBUG" not in os.environ
        assert os.environ["BUDAPP_DEBUG"] == "1"
