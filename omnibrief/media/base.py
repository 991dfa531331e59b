from abc import ABC, abstractmethod
from pathlib import Path

from omnibrief.extraction.models import PreparedAudio

MAX_INLINE_PAYLOAD_BYTES = 18 * 1024 * 1024


def requires_normalization(is_video: bool, size_bytes: int) -> bool:
    """Video is always re-encoded; audio only when it reaches the ceiling."""
    return is_video or size_bytes >= MAX_INLINE_PAYLOAD_BYTES


class BaseMediaNormalizer(ABC):
    """Contract for audio/video normalization adapters."""

    @abstractmethod
    def normalize(
        self,
        source_path: Path,
        output_path: Path,
        timeout_seconds: float | None = None,
    ) -> PreparedAudio:
        """Transcode ``source_path`` into speech-optimized audio at ``output_path``.

        The caller owns ``output_path`` and removes it, whether or not this
        call succeeds.

        Raises:
            TranscodeError: if transcoding fails or the output is unusable.
            PipelineTimeoutError: if ``timeout_seconds`` elapses.
        """
