"""Tests for build information of installed distributions."""

from __future__ import annotations

from importlib import metadata

from budtelemetry import BuildInfo, read_build_info


class TestReadBuildInfo:
    """Tests for read_build_info."""

    def test_unknown_distribution(self) -> None:
        """Test that a distribution that is not installed yields None."""
        assert read_build_info("budtelemetry-does-not-exist") is None

    def test_installed_distribution(self) -> None:
        """Test that version and installed dependencies are read."""
        info = read_build_info("opentelemetry-sdk")

        assert isinstance(info, BuildInfo)
        assert info.version == metadata.version("opentelemetry-sdk")
        assert info.deps["opentelemetry-api"] == metadata.version("opentelemetry-api")
        assert all(not key.startswith("vcs.") or value for key, value in info.settings.items())
