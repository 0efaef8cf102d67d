import logging
import time
import uuid
from typing import Callable

from google import genai
from google.genai import types

from app.core.metrics import track_gemini_call

logger = logging.getLogger(__name__)


class GeminiError(Exception):
    """Base exception for Gemini-related errors."""

    def __init__(self, message: str, request_id: str | None = None, model: str | None = None):
        super().__init__(message)
        self.request_id = request_id
        self.model = model


class GeminiRateLimitError(GeminiError):
    """Raised when rate limit is exceeded."""


class GeminiContentFilterError(GeminiError):
    """Raised when content is blocked by safety filters."""


class GeminiTimeoutError(GeminiError):
    """Raised when request times out."""


class GeminiModelUnavailableError(GeminiError):
    """Raised when the model is unavailable."""


_ERROR_TYPES: dict[str, type[GeminiError]] = {
    "rate_limit": GeminiRateLimitError,
    "timeout": GeminiTimeoutError,
    "model_unavailable": GeminiModelUnavailableError,
    "content_filter": GeminiContentFilterError,
}


class GeminiClient:
    def __init__(
        self,
        project: str | None,
        location: str | None,
        api_key: str | None,
        text_model: str,
        image_model: str,
        timeout_seconds: float = 60.0,
        max_retries: int = 3,
        initial_backoff_seconds: float = 0.8,
    ):
        if not api_key and (not project or not location):
            raise RuntimeError(
                "Either GEMINI_API_KEY or both GOOGLE_CLOUD_PROJECT and GOOGLE_CLOUD_LOCATION must be configured"
            )

        self._text_model = text_model
        self._image_model = image_model
        self._max_retries = max(1, max_retries)
        self._initial_backoff_seconds = initial_backoff_seconds
        self.last_error_type: str | None = None

        http_options = types.HttpOptions(timeout=int(timeout_seconds * 1000))
        if api_key:
            self._client = genai.Client(api_key=api_key, http_options=http_options)
        else:
            self._client = genai.Client(
                vertexai=True, project=project, location=location, http_options=http_options
            )

    def _classify_error(self, error_text: str) -> tuple[str, bool]:
        """Return (error_type, is_retryable) for a failed call."""
        lowered = error_text.lower()
        if "RESOURCE_EXHAUSTED" in error_text or "429" in error_text:
            return "rate_limit", True
        if "SAFETY" in error_text.upper() or "blocked" in lowered:
            return "content_filter", False
        if "timeout" in lowered or "deadline" in lowered:
            return "timeout", True
        if "unavailable" in lowered or "503" in error_text:
            return "model_unavailable", True
        if "invalid" in lowered or "400" in error_text:
            return "invalid_request", False
        return "unknown", True

    def _check_response_safety(self, response: types.GenerateContentResponse, request_id: str, model: str) -> None:
        candidate = (response.candidates or [None])[0]
        if candidate is None:
            return
        finish_reason = getattr(candidate, "finish_reason", None)
        if finish_reason and "SAFETY" in str(finish_reason).upper():
            raise GeminiContentFilterError(
                "Content blocked by safety filters",
                request_id=request_id,
                model=model,
            )

    def _call(
        self,
        func: Callable[[], types.GenerateContentResponse],
        model: str,
        operation: str,
    ) -> types.GenerateContentResponse:
        request_id = str(uuid.uuid4())
        last_exc: Exception | None = None
        error_type = "unknown"

        for attempt in range(self._max_retries):
            try:
                with track_gemini_call(operation):
                    response = func()
                self.last_error_type = None
                self._check_response_safety(response, request_id, model)
                logger.debug(
                    "gemini.%s ok request_id=%s response_id=%s model=%s attempt=%s",
                    operation,
                    request_id,
                    response.response_id,
                    model,
                    attempt + 1,
                )
                return response
            except GeminiContentFilterError:
                self.last_error_type = "content_filter"
                raise
            except Exception as exc:  # noqa: BLE001
                last_exc = exc
                error_type, retryable = self._classify_error(str(exc))
                self.last_error_type = error_type
                logger.warning(
                    "gemini.%s failed request_id=%s model=%s attempt=%s/%s type=%s error=%r",
                    operation,
                    request_id,
                    model,
                    attempt + 1,
                    self._max_retries,
                    error_type,
                    exc,
                )
                if not retryable or attempt + 1 >= self._max_retries:
                    break
                time.sleep(self._initial_backoff_seconds * (2**attempt))

        error_cls = _ERROR_TYPES.get(error_type, GeminiError)
        raise error_cls(
            f"Gemini {operation} failed ({error_type}): {last_exc!r}",
            request_id=request_id,
            model=model,
        )

    @staticmethod
    def _first_parts(response: types.GenerateContentResponse) -> list[types.Part]:
        candidate = (response.candidates or [None])[0]
        if candidate is None or not candidate.content or not candidate.content.parts:
            raise RuntimeError("Gemini returned empty content")
        return list(candidate.content.parts)

    def generate_text(self, prompt: str, json_output: bool = False) -> str:
        """Generate text; with ``json_output`` the model is asked for a JSON body."""
        config = types.GenerateContentConfig(response_mime_type="application/json") if json_output else None
        response = self._call(
            lambda: self._client.models.generate_content(
                model=self._text_model,
                contents=[prompt],
                config=config,
            ),
            model=self._text_model,
            operation="generate_text",
        )
        texts = [part.text for part in self._first_parts(response) if part.text]
        if not texts:
            raise RuntimeError("Gemini returned no textual content")
        return "\n".join(texts).strip()

    def generate_image(self, prompt: str, aspect_ratio: str) -> tuple[bytes, str]:
        """Generate one image and return ``(image_bytes, mime_type)``."""
        response = self._call(
            lambda: self._client.models.generate_content(
                model=self._image_model,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
                ),
            ),
            model=self._image_model,
            operation="generate_image",
        )
        for part in self._first_parts(response):
            inline_data = part.inline_data
            if inline_data and inline_data.data:
                return inline_data.data, inline_data.mime_type or "image/png"
        raise RuntimeError("Gemini returned no image data")
