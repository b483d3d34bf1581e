import logging
import time
from google import genai
from google.genai import types

from config import AVAILABLE_MODELS

logger = logging.getLogger(__name__)

THINKING_MODELS = {
    "gemini-3-pro-preview",
    "gemini-3-flash-preview",
}


class GenerationError(Exception):
    """The model call finished but produced nothing usable."""


def build_config(model, max_tokens, search=True):
    kwargs = {"max_output_tokens": max_tokens}
    if search:
        kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
    if model in THINKING_MODELS:
        kwargs["thinking_config"] = types.ThinkingConfig(thinking_level="low")
    return types.GenerateContentConfig(**kwargs)


class GeminiTextService:
    """Text generation on Gemini, optionally grounded with Google Search."""

    def __init__(self, api_key=None, timeout_ms=300_000, client=None):
        self._api_key = api_key
        self._timeout_ms = timeout_ms
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self._api_key:
                raise GenerationError("GEMINI_API_KEY is not set")
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=self._timeout_ms),
            )
        return self._client

    def generate_text(self, prompt, model, max_tokens, search=True):
        if model not in AVAILABLE_MODELS:
            raise ValueError(f"Unknown model: {model}")

        config = build_config(model, max_tokens, search=search)

        start = time.time()
        response = self.client.models.generate_content(
            model=model, contents=prompt, config=config,
        )
        elapsed = round(time.time() - start, 1)

        text = getattr(response, "text", None)
        if not isinstance(text, str) or not text.strip():
            raise GenerationError("Model returned no text")

        logger.info("Generated %d chars with %s in %ss", len(text), model, elapsed)
        return text
