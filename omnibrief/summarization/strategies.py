"""Provider strategies for the summarization pathways.

Each strategy wraps one provider call and reports a StrategyOutcome instead of
raising, so the orchestrator can walk an ordered plan without nested handlers.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from omnibrief.extraction.mime_types import FileType
from omnibrief.extraction.models import ExtractionOutcome, PreparedAudio, RawImage, TextContent
from omnibrief.logging.logger import Log
from omnibrief.summarization.client_base import (
    BaseChatClient,
    BaseMediaClient,
    BaseTranscriptionClient,
)
from omnibrief.summarization.coercion import coerce_summary, extract_json_block
from omnibrief.summarization.exceptions import ProviderUnavailableError, SummarizationError
from omnibrief.summarization.models import SummaryResult
from omnibrief.summarization.prompt_loader import (
    IMAGE_SUMMARY_PROMPT,
    MEDIA_SUMMARY_PROMPT,
    TEXT_SUMMARY_PROMPT,
    TRANSCRIPT_SUMMARY_PROMPT,
    load_prompt_template,
)

MAX_PROMPT_CHARS = 15_000
RELAXED_JSON_SUFFIX = "\n\nPlease output valid JSON."


class StrategyTier(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class Pathway(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    MEDIA = "media"

    @classmethod
    def for_outcome(cls, outcome: ExtractionOutcome) -> "Pathway":
        if isinstance(outcome, TextContent):
            return cls.TEXT
        if isinstance(outcome, RawImage):
            return cls.IMAGE
        if isinstance(outcome, PreparedAudio):
            return cls.MEDIA
        raise TypeError(f"Unknown extraction outcome: {type(outcome).__name__}")


@dataclass(frozen=True)
class StrategyOutcome:
    """Result of one strategy attempt: either a summary or an error message."""

    strategy: str
    tier: StrategyTier
    result: SummaryResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def truncate_for_prompt(text: str) -> str:
    return text[:MAX_PROMPT_CHARS]


class SummaryStrategy(ABC):
    """One provider attempt within a pathway plan."""

    name: str = "strategy"
    tier: StrategyTier = StrategyTier.PRIMARY

    def run(
        self,
        outcome: ExtractionOutcome,
        file_type: FileType,
        timeout_seconds: float | None = None,
    ) -> StrategyOutcome:
        """Run the strategy, converting any failure into a failed outcome.

        ``timeout_seconds`` is the time left in the pipeline budget; provider
        calls are capped to it.
        """
        try:
            result = self._summarize(outcome, file_type, timeout_seconds)
        except SummarizationError as exc:
            Log.warning("Summary strategy failed", strategy=self.name, error=str(exc))
            return StrategyOutcome(self.name, self.tier, error=str(exc))
        except Exception as exc:
            Log.error(
                "Summary strategy crashed",
                strategy=self.name,
                error=f"{type(exc).__name__}: {exc}",
            )
            return StrategyOutcome(self.name, self.tier, error=f"Unexpected error: {exc}")
        Log.info("Summary strategy succeeded", strategy=self.name, key_points=len(result.key_points))
        return StrategyOutcome(self.name, self.tier, result=result)

    @abstractmethod
    def _summarize(
        self,
        outcome: ExtractionOutcome,
        file_type: FileType,
        timeout_seconds: float | None,
    ) -> SummaryResult:
        """Produce a summary or raise SummarizationError."""


class TextSummaryStrategy(SummaryStrategy):
    """Structured-JSON text summary of extracted document text."""

    name = "Text model"
    tier = StrategyTier.PRIMARY
    json_mode = True

    def __init__(
        self,
        *,
        client: BaseChatClient,
        model: str,
        temperature: float,
        prompt_template: str | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._template = prompt_template or load_prompt_template(TEXT_SUMMARY_PROMPT)

    def _summarize(
        self,
        outcome: ExtractionOutcome,
        file_type: FileType,
        timeout_seconds: float | None,
    ) -> SummaryResult:
        if not isinstance(outcome, TextContent):
            raise SummarizationError("Text summary requires extracted text")
        prompt = self._build_prompt(outcome.content, file_type)
        Log.debug(f"Text summary prompt:\n{prompt}")
        raw = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            prompt=prompt,
            json_mode=self.json_mode,
            timeout_seconds=timeout_seconds,
        )
        Log.debug(f"AI raw response:\n{raw}")
        return coerce_summary(raw)

    def _build_prompt(self, content: str, file_type: FileType) -> str:
        return self._template.format(
            file_type=file_type.value,
            content=truncate_for_prompt(content),
        )


class RelaxedTextSummaryStrategy(TextSummaryStrategy):
    """Retry of the text summary without the provider's strict JSON mode."""

    name = "Text model (relaxed JSON)"
    tier = StrategyTier.FALLBACK
    json_mode = False

    def _build_prompt(self, content: str, file_type: FileType) -> str:
        return super()._build_prompt(content, file_type) + RELAXED_JSON_SUFFIX


class ImageSummaryStrategy(SummaryStrategy):
    """Vision-model summary of an inline image."""

    name = "Vision model"
    tier = StrategyTier.PRIMARY

    def __init__(
        self,
        *,
        client: BaseChatClient,
        model: str,
        temperature: float,
        prompt_template: str | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._prompt = prompt_template or load_prompt_template(IMAGE_SUMMARY_PROMPT)

    def _summarize(
        self,
        outcome: ExtractionOutcome,
        file_type: FileType,
        timeout_seconds: float | None,
    ) -> SummaryResult:
        if not isinstance(outcome, RawImage):
            raise SummarizationError("Image summary requires an image payload")
        raw = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            prompt=self._prompt,
            json_mode=True,
            image=outcome,
            timeout_seconds=timeout_seconds,
        )
        return coerce_summary(raw)


class MultimodalMediaStrategy(SummaryStrategy):
    """Audio sent inline to a multimodal model; the only source of chapters and speakers."""

    name = "Gemini"
    tier = StrategyTier.PRIMARY

    def __init__(
        self,
        *,
        client: BaseMediaClient | None,
        model: str,
        prompt_template: str | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._prompt = prompt_template or load_prompt_template(MEDIA_SUMMARY_PROMPT)

    def _summarize(
        self,
        outcome: ExtractionOutcome,
        file_type: FileType,
        timeout_seconds: float | None,
    ) -> SummaryResult:
        if not isinstance(outcome, PreparedAudio):
            raise SummarizationError("Media summary requires prepared audio")
        if self._client is None:
            raise ProviderUnavailableError("Gemini API key is not configured")
        try:
            data = outcome.path.read_bytes()
        except OSError as exc:
            raise SummarizationError(f"Could not read prepared audio: {exc}") from exc

        Log.info("Sending audio to multimodal model", model=self._model, size_bytes=len(data))
        raw = self._client.generate_from_media(
            model=self._model,
            prompt=self._prompt,
            data=data,
            mime_type=outcome.mime_type,
            timeout_seconds=timeout_seconds,
        )
        block = extract_json_block(raw)
        return coerce_summary(block or raw, include_media_fields=True)


class TranscriptSummaryStrategy(SummaryStrategy):
    """Speech-to-text followed by a text summary of the transcript."""

    name = "Transcription"
    tier = StrategyTier.FALLBACK

    def __init__(
        self,
        *,
        transcriber: BaseTranscriptionClient,
        chat_client: BaseChatClient,
        transcription_model: str,
        text_model: str,
        temperature: float,
        prompt_template: str | None = None,
    ) -> None:
        self._transcriber = transcriber
        self._chat_client = chat_client
        self._transcription_model = transcription_model
        self._text_model = text_model
        self._temperature = temperature
        self._template = prompt_template or load_prompt_template(TRANSCRIPT_SUMMARY_PROMPT)

    def _summarize(
        self,
        outcome: ExtractionOutcome,
        file_type: FileType,
        timeout_seconds: float | None,
    ) -> SummaryResult:
        if not isinstance(outcome, PreparedAudio):
            raise SummarizationError("Transcription requires prepared audio")
        started = time.monotonic()
        transcript = self._transcriber.transcribe(
            model=self._transcription_model,
            audio_path=outcome.path,
            timeout_seconds=timeout_seconds,
        )
        Log.info("Transcription finished", chars=len(transcript))

        remaining = None
        if timeout_seconds is not None:
            remaining = timeout_seconds - (time.monotonic() - started)
            if remaining <= 0:
                raise SummarizationError("No time left to summarize the transcript")
        raw = self._chat_client.create_chat_completion(
            model=self._text_model,
            temperature=self._temperature,
            prompt=self._template.format(transcript=truncate_for_prompt(transcript)),
            json_mode=True,
            timeout_seconds=remaining,
        )
        return coerce_summary(raw)
