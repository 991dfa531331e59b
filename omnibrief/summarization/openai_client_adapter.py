from pathlib import Path

import httpx
import openai

from omnibrief.extraction.models import RawImage
from omnibrief.summarization.client_base import BaseChatClient, BaseTranscriptionClient
from omnibrief.summarization.exceptions import SummarizationError, SummarizationNetworkError


class OpenAIClientAdapter(BaseChatClient, BaseTranscriptionClient):
    """Chat, vision and transcription client for OpenAI-compatible APIs (Groq by default)."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        max_retries: int = 1,
        base_url: str | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=max_retries,
            base_url=base_url,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        json_mode: bool,
        image: RawImage | None = None,
        timeout_seconds: float | None = None,
    ) -> str:
        content: str | list[dict[str, object]] = prompt
        if image is not None:
            content = [
                {"type": "text", "text": prompt},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{image.mime_type};base64,{image.base64}"},
                },
            ]
        extra = self._request_options(timeout_seconds)
        if json_mode:
            extra["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                messages=[{"role": "user", "content": content}],
                **extra,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise SummarizationNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise SummarizationNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise SummarizationError("AI returned no choices")
        text = response.choices[0].message.content
        if text is None:
            raise SummarizationError("AI returned empty response")
        return text

    def transcribe(
        self,
        *,
        model: str,
        audio_path: Path,
        timeout_seconds: float | None = None,
    ) -> str:
        try:
            with audio_path.open("rb") as audio_file:
                transcription = self._client.audio.transcriptions.create(
                    file=audio_file,
                    model=model,
                    response_format="json",
                    temperature=0.0,
                    **self._request_options(timeout_seconds),
                )
        except OSError as exc:
            raise SummarizationError(f"Could not read audio for transcription: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise SummarizationNetworkError(f"Transcription network error: {exc}") from exc
        except openai.APIError as exc:
            raise SummarizationNetworkError(f"Transcription API error: {exc}") from exc

        text = getattr(transcription, "text", None)
        if not text or not text.strip():
            raise SummarizationError("Transcription returned no text")
        return text

    def _request_options(self, timeout_seconds: float | None) -> dict[str, object]:
        if timeout_seconds is None:
            return {}
        return {"timeout": min(float(self._timeout_seconds), timeout_seconds)}
