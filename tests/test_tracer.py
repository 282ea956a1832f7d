"""Tests for TracerProviderBuilder and sampler creation."""

from __future__ import annotations

import pytest
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    DEFAULT_OFF,
    DEFAULT_ON,
    ParentBasedTraceIdRatio,
    TraceIdRatioBased,
)

from budtelemetry import BuildInfo, TracerProviderBuilder, TracerProviderConfig, create_sampler
from budtelemetry._internal import tracer as tracer_module
from budtelemetry.commons.constants import SamplerName
from budtelemetry.commons.exceptions import ConfigurationError, ResourceError, TelemetryErrorGroup
from budtelemetry.testing import RecordingProviderRegistry


def _failing_exporter(**kwargs):
    raise RuntimeError("exporter unavailable")


class TestCreateSampler:
    """Tests for create_sampler."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            (SamplerName.ALWAYS_ON, ALWAYS_ON),
            (SamplerName.ALWAYS_OFF, ALWAYS_OFF),
            ("parentbased_always_on", DEFAULT_ON),
            ("parentbased_always_off", DEFAULT_OFF),
        ],
    )
    def test_constant_samplers(self, name, expected) -> None:
        """Test that the constant samplers are the SDK singletons."""
        assert create_sampler(name) is expected

    def test_ratio_samplers(self) -> None:
        """Test that ratio based samplers use the argument."""
        sampler = create_sampler(SamplerName.TRACE_ID_RATIO, "0.25")
        assert isinstance(sampler, TraceIdRatioBased)
        assert sampler.rate == 0.25
        assert isinstance(create_sampler(SamplerName.PARENT_BASED_TRACE_ID_RATIO, "0.5"), ParentBasedTraceIdRatio)

    @pytest.mark.parametrize("arg", ["half", "1.5", "-0.1"])
    def test_invalid_ratio(self, arg: str) -> None:
        """Test that an invalid ratio raises a configuration error."""
        with pytest.raises(ConfigurationError):
            create_sampler(SamplerName.TRACE_ID_RATIO, arg)

    def test_unknown_sampler(self) -> None:
        """Test that an unknown sampler name raises a configuration error."""
        with pytest.raises(ConfigurationError):
            create_sampler("sometimes")


class TestTracerProviderBuilderChain:
    """Tests for the chained builder methods."""

    def test_methods_return_builder(self) -> None:
        """Test that every option method returns the same builder."""
        builder = TracerProviderBuilder()
        assert builder.with_options() is builder
        assert builder.with_sampler(ALWAYS_ON) is builder
        assert builder.with_attributes(("a", "b")) is builder
        assert builder.with_span_exporters(InMemorySpanExporter()) is builder
        assert builder.with_build_info(None) is builder

    def test_attributes_keep_order_and_duplicates(self) -> None:
        """Test that attributes are appended as given."""
        builder = TracerProviderBuilder().with_attributes(("a", "1"), ("b", "2")).with_attributes(("a", "3"))
        assert builder.attributes == [("a", "1"), ("b", "2"), ("a", "3")]

    def test_build_info(self) -> None:
        """Test that version, vcs settings and selected dependencies are added."""
        info = BuildInfo(
            path="budapp",
            version="1.2.3",
            settings={"vcs.revision": "abc123", "vcs.system": "git", "editable": "true"},
            deps={"pydantic": "2.7.0", "structlog": "24.1.0"},
        )
        builder = TracerProviderBuilder().with_build_info(info, "pydantic")
        assert builder.attributes == [
            ("service.version", "1.2.3"),
            ("vcs.revision", "abc123"),
            ("vcs.system", "git"),
            ("pydantic", "2.7.0"),
        ]

    def test_grpc_exporter_failures_are_joined(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that several failing exporters are raised together at build."""
        monkeypatch.setattr(tracer_module, "OTLPSpanExporter", _failing_exporter)
        builder = TracerProviderBuilder().with_grpc_exporter().with_grpc_exporter()

        with pytest.raises(TelemetryErrorGroup) as exc_info:
            builder.build()
        assert len(exc_info.value.exceptions) == 2


class TestTracerProviderBuilderBuild:
    """Tests for TracerProviderBuilder.build."""

    def test_sampler_from_config(self) -> None:
        """Test that the configured sampler is used by default."""
        provider = TracerProviderBuilder(TracerProviderConfig(sampler=SamplerName.ALWAYS_OFF)).build()
        assert provider.sampler is ALWAYS_OFF
        provider.shutdown()

    def test_explicit_sampler_wins(self) -> None:
        """Test that an explicit sampler overrides config and options."""
        builder = TracerProviderBuilder(TracerProviderConfig(sampler=SamplerName.ALWAYS_OFF))
        builder.with_options(sampler=DEFAULT_OFF).with_sampler(ALWAYS_ON)
        provider = builder.build(sampler=DEFAULT_OFF)
        assert provider.sampler is ALWAYS_ON
        provider.shutdown()

    def test_caller_options_override_builder_options(self) -> None:
        """Test that build options are applied after builder options."""
        provider = TracerProviderBuilder().with_options(sampler=DEFAULT_OFF).build(sampler=DEFAULT_ON)
        assert provider.sampler is DEFAULT_ON
        provider.shutdown()

    def test_spans_reach_exporters(self) -> None:
        """Test that span processors and exporters receive spans."""
        processed, batched = InMemorySpanExporter(), InMemorySpanExporter()
        builder = TracerProviderBuilder().with_sampler(ALWAYS_ON).with_span_exporters(batched)
        builder.with_options(span_processors=[SimpleSpanProcessor(processed)])

        provider = builder.build()
        with provider.get_tracer(__name__).start_as_current_span("work"):
            pass
        provider.force_flush()

        assert [span.name for span in processed.get_finished_spans()] == ["work"]
        assert [span.name for span in batched.get_finished_spans()] == ["work"]
        provider.shutdown()

    def test_attributes_are_merged_into_resource(self) -> None:
        """Test that attributes are merged into the base resource, last one winning."""
        builder = TracerProviderBuilder().with_attributes(("team", "a"), ("team", "b"))
        builder.resource = Resource.create({"service.name": "budapp"})

        provider = builder.build()
        assert provider.resource.attributes["service.name"] == "budapp"
        assert provider.resource.attributes["team"] == "b"
        provider.shutdown()

    def test_resource_merge_failure(self) -> None:
        """Test that a malformed attribute raises a resource error."""
        builder = TracerProviderBuilder()
        builder.attributes.append(("only-a-key",))

        with pytest.raises(ResourceError) as exc_info:
            builder.build()
        assert exc_info.value.__cause__ is not None

    def test_invalid_sampler_arg(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an invalid sampler argument from the environment fails the build."""
        monkeypatch.setenv("OTEL_TRACES_SAMPLER_ARG", "half")
        with pytest.raises(ConfigurationError):
            TracerProviderBuilder().build()

    def test_disabled_builds_nothing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that disabling tracing through the environment yields no provider."""
        monkeypatch.setenv("OTEL_TRACES_ENABLED", "false")
        assert TracerProviderBuilder().build() is None

    def test_global_registration(self, registry: RecordingProviderRegistry) -> None:
        """Test that the provider is registered when requested."""
        builder = TracerProviderBuilder(registry=registry)
        builder.register_global = True
        provider = builder.build()
        assert registry.tracer_providers == [provider]
        assert isinstance(provider, TracerProvider)
        provider.shutdown()
