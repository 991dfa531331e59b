from abc import ABC, abstractmethod
from pathlib import Path

from omnibrief.extraction.models import RawImage


class BaseChatClient(ABC):
    """Contract for text and vision chat-completion providers."""

    @abstractmethod
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
        """Return provider response as plain text.

        ``timeout_seconds`` caps this request below the client's own timeout.
        """


class BaseTranscriptionClient(ABC):
    """Contract for speech-to-text providers."""

    @abstractmethod
    def transcribe(
        self,
        *,
        model: str,
        audio_path: Path,
        timeout_seconds: float | None = None,
    ) -> str:
        """Return the transcript of the audio file."""


class BaseMediaClient(ABC):
    """Contract for multimodal providers that understand audio natively."""

    @abstractmethod
    def generate_from_media(
        self,
        *,
        model: str,
        prompt: str,
        data: bytes,
        mime_type: str,
        timeout_seconds: float | None = None,
    ) -> str:
        """Return provider response for a prompt plus an inline media payload."""
