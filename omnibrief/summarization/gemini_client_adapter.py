import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from omnibrief.summarization.client_base import BaseMediaClient
from omnibrief.summarization.exceptions import SummarizationError, SummarizationNetworkError


class GeminiClientAdapter(BaseMediaClient):
    """Multimodal client for Google Gemini with inline audio payloads."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        max_retries: int = 1,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(
                timeout=timeout_seconds * 1000,
                retry_options=types.HttpRetryOptions(attempts=max_retries + 1),
            ),
        )

    def generate_from_media(
        self,
        *,
        model: str,
        prompt: str,
        data: bytes,
        mime_type: str,
        timeout_seconds: float | None = None,
    ) -> str:
        config = None
        if timeout_seconds is not None:
            # HttpOptions.timeout is in milliseconds.
            timeout_ms = int(min(float(self._timeout_seconds), timeout_seconds) * 1000)
            config = types.GenerateContentConfig(
                http_options=types.HttpOptions(timeout=max(timeout_ms, 1)),
            )
        try:
            response = self._client.models.generate_content(
                model=model,
                contents=[prompt, types.Part.from_bytes(data=data, mime_type=mime_type)],
                config=config,
            )
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise SummarizationNetworkError(f"Gemini network error: {exc}") from exc
        except genai_errors.APIError as exc:
            raise SummarizationNetworkError(f"Gemini API error: {exc}") from exc

        text = response.text
        if not text:
            raise SummarizationError("Gemini returned empty response")
        return text
