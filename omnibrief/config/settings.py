from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "omnibrief"
    db_username: str = "omnibrief"
    db_password: str = "secret"

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5
    pipeline_timeout_seconds: int = 300

    work_dir: Path = Path("/tmp/omnibrief")
    upload_dir: Path = Path("/tmp/omnibrief/uploads")
    pdf_engine: str = "pdfplumber"
    ffmpeg_binary: str = "ffmpeg"
    fetch_timeout_seconds: int = 60

    summarization_provider: str = "groq"
    summarization_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("SUMMARIZATION_API_KEY", "GROQ_API_KEY"),
    )
    summarization_base_url: str = ""
    summarization_timeout_seconds: int = 600
    summarization_max_retries: int = 1
    summarization_temperature: float = 0.4
    text_model_name: str = "llama-3.3-70b-versatile"
    vision_model_name: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    transcription_model_name: str = "whisper-large-v3"

    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_AI_API_KEY"),
    )
    gemini_model_name: str = "gemini-2.5-flash"
    gemini_timeout_seconds: int = 600
