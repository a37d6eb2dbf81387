"""Tests for settings, logging setup and URI helpers."""

import logging
from pathlib import Path

import pytest
from burnmine_core.logging_config import configure_logging
from burnmine_core.pathing import path_to_uri, uri_to_path
from burnmine_core.settings import Settings, get_settings, reset_settings
from pydantic import ValidationError


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self) -> None:
        """Test default values."""
        settings = Settings()

        assert settings.compiler_path == "burn"
        assert settings.compiler_timeout_seconds == 5.0
        assert settings.max_number_of_problems == 100
        assert settings.source_extension == ".bn"
        assert settings.stdlib_prefix == "std/"

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test BURN_* environment variables."""
        monkeypatch.setenv("BURN_COMPILER_PATH", "/opt/burn/bin/burn")
        monkeypatch.setenv("BURN_MAX_NUMBER_OF_PROBLEMS", "7")
        reset_settings()

        settings = get_settings()

        assert settings.compiler_path == "/opt/burn/bin/burn"
        assert settings.max_number_of_problems == 7

    def test_cached_instance(self) -> None:
        """Test that get_settings() returns one instance until reset."""
        first = get_settings()

        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first

    def test_invalid_timeout(self) -> None:
        """Test that a non-positive timeout is rejected."""
        with pytest.raises(ValidationError):
            Settings(compiler_timeout_seconds=0)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_explicit_level(self) -> None:
        """Test applying a named level."""
        configure_logging("DEBUG")

        assert logging.getLogger("burnmine_core").level == logging.DEBUG

    def test_level_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the settings level is used by default."""
        monkeypatch.setenv("BURN_LOG_LEVEL", "warning")
        reset_settings()

        configure_logging()

        assert logging.getLogger("burnmine_core").level == logging.WARNING

    def test_unknown_level_falls_back(self) -> None:
        """Test that an unknown name falls back to INFO."""
        configure_logging("chatty")

        assert logging.getLogger("burnmine_core").level == logging.INFO


class TestPathing:
    """Tests for URI and path conversion."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """Test converting a path to a URI and back."""
        path = tmp_path / "dir with space" / "main.bn"

        uri = path_to_uri(path)

        assert uri.startswith("file://")
        assert "%20" in uri
        assert uri_to_path(uri) == path.resolve()

    def test_other_schemes(self) -> None:
        """Test that non-file URIs have no path."""
        assert uri_to_path("untitled:Untitled-1") is None

    def test_bare_path(self) -> None:
        """Test that a plain path is accepted."""
        assert uri_to_path("/tmp/main.bn") == Path("/tmp/main.bn")
