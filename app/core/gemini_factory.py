"""Builds the shared GeminiClient from application settings."""

from __future__ import annotations

from app.core.exceptions import ConfigurationError
from app.core.settings import Settings, settings as default_settings
from app.services.vertex_gemini import GeminiClient


class GeminiNotConfiguredError(ConfigurationError):
    """Raised when Gemini API credentials are missing."""

    def __init__(self) -> None:
        super().__init__(
            "Gemini is not configured. Set GEMINI_API_KEY or GOOGLE_CLOUD_PROJECT.",
            detail="Gemini is not configured",
        )


def build_gemini_client(settings: Settings | None = None) -> GeminiClient:
    """Build a GeminiClient from application settings.

    Raises:
        GeminiNotConfiguredError: If neither API key nor GCP project is set.
    """
    settings = settings or default_settings
    if not settings.google_cloud_project and not settings.gemini_api_key:
        raise GeminiNotConfiguredError()

    return GeminiClient(
        project=settings.google_cloud_project,
        location=settings.google_cloud_location,
        api_key=settings.gemini_api_key,
        text_model=settings.gemini_text_model,
        image_model=settings.gemini_image_model,
        timeout_seconds=settings.gemini_timeout_seconds,
        max_retries=settings.gemini_max_retries,
        initial_backoff_seconds=settings.gemini_initial_backoff_seconds,
    )
