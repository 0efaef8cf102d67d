"""Tests for the centralized Gemini client factory."""

from unittest.mock import patch

import pytest

from app.core.exceptions import ConfigurationError
from app.core.gemini_factory import GeminiNotConfiguredError, build_gemini_client
from app.core.settings import Settings


class TestGeminiNotConfiguredError:
    def test_is_configuration_error(self):
        assert isinstance(GeminiNotConfiguredError(), ConfigurationError)

    def test_has_helpful_message(self):
        err = GeminiNotConfiguredError()
        assert "GEMINI_API_KEY" in str(err)
        assert "GOOGLE_CLOUD_PROJECT" in str(err)
        assert err.detail == "Gemini is not configured"


def _settings(**overrides) -> Settings:
    values = {
        "google_cloud_project": None,
        "gemini_api_key": None,
        "google_cloud_location": "us-central1",
        "gemini_text_model": "gemini-2.5-flash",
        "gemini_image_model": "gemini-2.5-flash-image",
        "gemini_timeout_seconds": 60.0,
        "gemini_max_retries": 3,
        "gemini_initial_backoff_seconds": 0.8,
    }
    values.update(overrides)
    return Settings.model_construct(**values)


class TestBuildGeminiClient:
    def test_raises_when_no_credentials(self, monkeypatch):
        from app.core import settings as settings_module

        monkeypatch.setattr(settings_module.settings, "google_cloud_project", None)
        monkeypatch.setattr(settings_module.settings, "gemini_api_key", None)

        with pytest.raises(GeminiNotConfiguredError):
            build_gemini_client()

    def test_builds_client_with_api_key(self):
        with patch("app.services.vertex_gemini.genai"):
            client = build_gemini_client(_settings(gemini_api_key="test-key"))
        assert client._text_model == "gemini-2.5-flash"
        assert client._image_model == "gemini-2.5-flash-image"
        assert client._max_retries == 3

    def test_builds_client_with_gcp_project(self):
        with patch("app.services.vertex_gemini.genai") as genai:
            build_gemini_client(_settings(google_cloud_project="test-project"))
        kwargs = genai.Client.call_args.kwargs
        assert kwargs["vertexai"] is True
        assert kwargs["project"] == "test-project"
