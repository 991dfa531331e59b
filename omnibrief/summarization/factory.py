from dataclasses import dataclass
from typing import ClassVar

from omnibrief.config.settings import Settings
from omnibrief.logging.logger import Log
from omnibrief.summarization.client_base import (
    BaseChatClient,
    BaseMediaClient,
    BaseTranscriptionClient,
)
from omnibrief.summarization.example_client_adapter import ExampleClientAdapter
from omnibrief.summarization.gemini_client_adapter import GeminiClientAdapter
from omnibrief.summarization.openai_client_adapter import OpenAIClientAdapter
from omnibrief.summarization.orchestrator import SummaryOrchestrator
from omnibrief.summarization.strategies import (
    ImageSummaryStrategy,
    MultimodalMediaStrategy,
    Pathway,
    RelaxedTextSummaryStrategy,
    TextSummaryStrategy,
    TranscriptSummaryStrategy,
)

GEMINI_PLACEHOLDER_KEY = "your_gemini_api_key_here"


@dataclass(frozen=True)
class ModelConfig:
    """Model names and sampling temperature used by the strategies."""

    text_model: str
    vision_model: str
    transcription_model: str
    media_model: str
    temperature: float

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelConfig":
        return cls(
            text_model=settings.text_model_name,
            vision_model=settings.vision_model_name,
            transcription_model=settings.transcription_model_name,
            media_model=settings.gemini_model_name,
            temperature=settings.summarization_temperature,
        )


def build_orchestrator(
    *,
    chat_client: BaseChatClient,
    transcriber: BaseTranscriptionClient,
    media_client: BaseMediaClient | None,
    models: ModelConfig,
) -> SummaryOrchestrator:
    """Wire clients into the ordered strategy plan of every pathway."""
    return SummaryOrchestrator(
        {
            Pathway.TEXT: [
                TextSummaryStrategy(
                    client=chat_client,
                    model=models.text_model,
                    temperature=models.temperature,
                ),
                RelaxedTextSummaryStrategy(
                    client=chat_client,
                    model=models.text_model,
                    temperature=models.temperature,
                ),
            ],
            Pathway.IMAGE: [
                ImageSummaryStrategy(
                    client=chat_client,
                    model=models.vision_model,
                    temperature=models.temperature,
                ),
            ],
            Pathway.MEDIA: [
                MultimodalMediaStrategy(client=media_client, model=models.media_model),
                TranscriptSummaryStrategy(
                    transcriber=transcriber,
                    chat_client=chat_client,
                    transcription_model=models.transcription_model,
                    text_model=models.text_model,
                    temperature=models.temperature,
                ),
            ],
        }
    )


class OrchestratorFactory:
    """Creates the summary orchestrator for the configured providers."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }
    MAX_RETRIES: ClassVar[int] = 1

    @classmethod
    def create(cls, settings: Settings) -> SummaryOrchestrator:
        """Create a configured orchestrator from application settings."""
        provider = settings.summarization_provider.lower()
        if provider == "example":
            client = ExampleClientAdapter()
            return build_orchestrator(
                chat_client=client,
                transcriber=client,
                media_client=client,
                models=ModelConfig(
                    text_model="example",
                    vision_model="example",
                    transcription_model="example",
                    media_model="example",
                    temperature=0.0,
                ),
            )

        client = OpenAIClientAdapter(
            api_key=settings.summarization_api_key,
            timeout_seconds=settings.summarization_timeout_seconds,
            max_retries=cls._resolve_max_retries(settings),
            base_url=cls._resolve_base_url(provider, settings),
        )
        return build_orchestrator(
            chat_client=client,
            transcriber=client,
            media_client=cls._create_media_client(settings),
            models=ModelConfig.from_settings(settings),
        )

    @classmethod
    def _create_media_client(cls, settings: Settings) -> BaseMediaClient | None:
        key = settings.gemini_api_key.strip()
        if not key or key == GEMINI_PLACEHOLDER_KEY:
            Log.warning("Gemini API key missing, media will use the transcription fallback")
            return None
        return GeminiClientAdapter(
            api_key=key,
            timeout_seconds=settings.gemini_timeout_seconds,
            max_retries=cls._resolve_max_retries(settings),
        )

    @classmethod
    def _resolve_max_retries(cls, settings: Settings) -> int:
        return max(0, min(cls.MAX_RETRIES, settings.summarization_max_retries))

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.summarization_base_url.strip()
            if not url:
                raise ValueError(
                    "summarization_base_url is required for "
                    "summarization_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return settings.summarization_base_url.strip() or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown summarization provider '{provider}'. Choose from: {supported}"
        )
