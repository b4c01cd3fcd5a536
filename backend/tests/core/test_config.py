"""
Tests for process-wide generation settings.
"""

import pytest

from genoscript.core.config import DEFAULT_MODEL, load_settings
from genoscript.core.errors import ConfigurationError


class TestLoadSettings:

    def test_missing_key_is_fatal(self):
        with pytest.raises(ConfigurationError):
            load_settings({})

    def test_defaults(self):
        settings = load_settings({"GEMINI_API_KEY": "k"})

        assert settings.api_key == "k"
        assert settings.model == DEFAULT_MODEL
        assert settings.timeout > 0

    def test_api_key_fallback(self):
        assert load_settings({"API_KEY": "legacy"}).api_key == "legacy"

    def test_overrides(self):
        settings = load_settings({
            "GEMINI_API_KEY": "k",
            "GEMINI_MODEL": "gemini-pro",
            "GEMINI_API_URL": "https://proxy.example/v1/",
            "GENERATION_TIMEOUT": "15",
        })

        assert settings.model == "gemini-pro"
        assert settings.api_url == "https://proxy.example/v1"
        assert settings.timeout == 15.0

    @pytest.mark.parametrize("value", ["abc", "0", "-3"])
    def test_bad_timeout(self, value):
        with pytest.raises(ConfigurationError):
            load_settings({"GEMINI_API_KEY": "k", "GENERATION_TIMEOUT": value})
