"""Tests for the Gemini text service."""
from unittest.mock import MagicMock, patch

import pytest

from generator import GeminiTextService, GenerationError, build_config


def _service(text="Subject: Hi\n\nBody"):
    client = MagicMock()
    client.models.generate_content.return_value.text = text
    return GeminiTextService(client=client), client


def test_generate_text_returns_model_text():
    service, client = _service()

    text = service.generate_text("prompt", model="gemini-2.5-flash", max_tokens=500)

    assert text == "Subject: Hi\n\nBody"
    kwargs = client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-2.5-flash"
    assert kwargs["contents"] == "prompt"
    assert kwargs["config"].max_output_tokens == 500
    assert kwargs["config"].tools[0].google_search is not None


def test_build_config_without_search():
    config = build_config("gemini-2.5-flash", 300, search=False)
    assert not config.tools
    assert config.max_output_tokens == 300


def test_build_config_thinking_model():
    config = build_config("gemini-3-flash-preview", 500)
    assert config.thinking_config is not None


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_response_raises(text):
    service, _ = _service(text)
    with pytest.raises(GenerationError):
        service.generate_text("prompt", model="gemini-2.5-flash", max_tokens=500)


def test_unknown_model_raises():
    service, client = _service()
    with pytest.raises(ValueError):
        service.generate_text("prompt", model="gpt-4o-mini", max_tokens=500)
    client.models.generate_content.assert_not_called()


def test_missing_api_key_raises():
    service = GeminiTextService(api_key="")
    with pytest.raises(GenerationError):
        service.generate_text("prompt", model="gemini-2.5-flash", max_tokens=500)


@patch("generator.genai.Client")
def test_client_is_created_once(mock_client_class):
    service = GeminiTextService(api_key="key", timeout_ms=1000)
    assert service.client is service.client
    mock_client_class.assert_called_once()
    assert mock_client_class.call_args.kwargs["api_key"] == "key"
