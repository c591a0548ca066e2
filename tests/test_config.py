# =============================================================================
# tests/test_config.py - Settings Tests
# =============================================================================
# Tests for environment-driven settings (app/config.py).
#
# Run with: poetry run pytest tests/test_config.py -v
# =============================================================================

import pytest
from pydantic import ValidationError

from app.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults_bind_an_ephemeral_local_port(self, monkeypatch):
        monkeypatch.delenv("PLUGIN_HOST", raising=False)
        monkeypatch.delenv("PLUGIN_PORT", raising=False)

        settings = Settings()

        assert settings.bind_address == "127.0.0.1:0"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PLUGIN_HOST", "localhost")
        monkeypatch.setenv("PLUGIN_PORT", "50051")
        monkeypatch.setenv("INFERENCE_SAMPLE_SIZE", "25")

        settings = Settings()

        assert settings.bind_address == "localhost:50051"
        assert settings.INFERENCE_SAMPLE_SIZE == 25

    def test_empty_variables_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("MAX_OPEN_FILES", "")
        assert Settings().MAX_OPEN_FILES == 8

    def test_debug_overrides_log_level(self):
        assert Settings(DEBUG=True, LOG_LEVEL="ERROR").log_level == "DEBUG"
        assert Settings(DEBUG=False, LOG_LEVEL="ERROR").log_level == "ERROR"

    @pytest.mark.parametrize("name,value", [
        ("PLUGIN_PORT", "70000"),
        ("INFERENCE_SAMPLE_SIZE", "0"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values_are_rejected(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            Settings()
