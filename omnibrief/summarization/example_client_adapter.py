"""Example summarization client adapter.

Use this module as a reference when implementing new provider adapters.
Implement the client contracts in client_base and register the provider in
OrchestratorFactory.
"""

import json
from pathlib import Path
from typing import ClassVar

from omnibrief.extraction.models import RawImage
from omnibrief.summarization.client_base import (
    BaseChatClient,
    BaseMediaClient,
    BaseTranscriptionClient,
)


class ExampleClientAdapter(BaseChatClient, BaseTranscriptionClient, BaseMediaClient):
    """Example adapter that returns fixed, valid summaries.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "summary": "Example summary generated without contacting an AI provider.",
        "keyPoints": ["Example provider is active", "No content was analyzed"],
    }
    DEFAULT_MEDIA_RESPONSE: ClassVar[dict[str, object]] = {
        **DEFAULT_RESPONSE,
        "chapters": [
            {"time": "0:00", "title": "Introduction", "description": "Example chapter"}
        ],
        "speakers": [{"name": "Speaker A", "traits": "Example speaker"}],
    }
    DEFAULT_TRANSCRIPT: ClassVar[str] = "Example transcript produced offline."

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
        _ = model, temperature, prompt, json_mode, image, timeout_seconds
        return json.dumps(self.DEFAULT_RESPONSE)

    def transcribe(
        self,
        *,
        model: str,
        audio_path: Path,
        timeout_seconds: float | None = None,
    ) -> str:
        _ = model, audio_path, timeout_seconds
        return self.DEFAULT_TRANSCRIPT

    def generate_from_media(
        self,
        *,
        model: str,
        prompt: str,
        data: bytes,
        mime_type: str,
        timeout_seconds: float | None = None,
    ) -> str:
        _ = model, prompt, data, mime_type, timeout_seconds
        return json.dumps(self.DEFAULT_MEDIA_RESPONSE)
