"""Tests for Gemini client error classification and retries."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from app.services.vertex_gemini import (
    GeminiClient,
    GeminiContentFilterError,
    GeminiError,
    GeminiModelUnavailableError,
    GeminiRateLimitError,
    GeminiTimeoutError,
)


def _response(parts, finish_reason="STOP"):
    candidate = SimpleNamespace(content=SimpleNamespace(parts=parts), finish_reason=finish_reason)
    return SimpleNamespace(candidates=[candidate], response_id="resp-1")


def _text_part(text):
    return SimpleNamespace(text=text, inline_data=None)


def _image_part(data, mime="image/png"):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime))


@pytest.fixture
def client():
    with patch("app.services.vertex_gemini.genai"):
        return GeminiClient(
            project=None,
            location=None,
            api_key="test-key",
            text_model="test-model",
            image_model="test-image-model",
            max_retries=3,
            initial_backoff_seconds=0,
        )


@pytest.fixture(autouse=True)
def _no_sleep():
    with patch("app.services.vertex_gemini.time.sleep"):
        yield


class TestErrorClassification:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("RESOURCE_EXHAUSTED: quota exceeded", ("rate_limit", True)),
            ("429 Too Many Requests", ("rate_limit", True)),
            ("Content blocked by SAFETY filter", ("content_filter", False)),
            ("Request timeout after 60s", ("timeout", True)),
            ("503 Service Unavailable", ("model_unavailable", True)),
            ("400 Invalid request: malformed prompt", ("invalid_request", False)),
            ("something odd", ("unknown", True)),
        ],
    )
    def test_classifies(self, client, text, expected):
        assert client._classify_error(text) == expected


def test_requires_credentials():
    with pytest.raises(RuntimeError):
        GeminiClient(project=None, location=None, api_key=None, text_model="t", image_model="i")


def test_generate_text_joins_parts(client):
    client._client.models.generate_content.return_value = _response([_text_part("a"), _text_part("b")])
    assert client.generate_text("prompt") == "a\nb"


def test_generate_image_returns_bytes_and_mime(client):
    client._client.models.generate_content.return_value = _response([_text_part("x"), _image_part(b"img", "image/jpeg")])
    assert client.generate_image("prompt", "9:16") == (b"img", "image/jpeg")


def test_generate_image_without_data_raises(client):
    client._client.models.generate_content.return_value = _response([_text_part("no image")])
    with pytest.raises(RuntimeError):
        client.generate_image("prompt", "1:1")


def test_retries_transient_errors_then_succeeds(client):
    client._client.models.generate_content.side_effect = [
        Exception("503 Service Unavailable"),
        _response([_text_part("ok")]),
    ]
    assert client.generate_text("prompt") == "ok"
    assert client._client.models.generate_content.call_count == 2


@pytest.mark.parametrize(
    "message,error_cls",
    [
        ("429 Too Many Requests", GeminiRateLimitError),
        ("deadline exceeded", GeminiTimeoutError),
        ("503 unavailable", GeminiModelUnavailableError),
        ("weird failure", GeminiError),
    ],
)
def test_exhausted_retries_raise_typed_error(client, message, error_cls):
    client._client.models.generate_content.side_effect = Exception(message)
    with pytest.raises(error_cls):
        client.generate_text("prompt")
    assert client._client.models.generate_content.call_count == 3


def test_invalid_request_is_not_retried(client):
    client._client.models.generate_content.side_effect = Exception("400 invalid argument")
    with pytest.raises(GeminiError):
        client.generate_text("prompt")
    assert client._client.models.generate_content.call_count == 1


def test_safety_block_is_not_retried(client):
    client._client.models.generate_content.return_value = _response([_text_part("x")], finish_reason="SAFETY")
    with pytest.raises(GeminiContentFilterError):
        client.generate_text("prompt")
    assert client._client.models.generate_content.call_count == 1
    assert client.last_error_type == "content_filter"


def test_gemini_error_has_request_id():
    exc = GeminiError("Test error", request_id="req-123", model="test-model")
    assert exc.request_id == "req-123"
    assert exc.model == "test-model"


def test_success_logs_the_response_id(client, caplog):
    client._client.models.generate_content.return_value = _response([_text_part("ok")])

    with caplog.at_level("DEBUG", logger="app.services.vertex_gemini"):
        client.generate_text("prompt")

    assert any("response_id=resp-1" in record.getMessage() for record in caplog.records)
