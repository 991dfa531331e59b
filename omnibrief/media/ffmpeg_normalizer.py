"""Speech-optimized audio normalization via the ffmpeg CLI."""

import subprocess
from pathlib import Path

from omnibrief.extraction.models import PreparedAudio
from omnibrief.logging.logger import Log
from omnibrief.media.base import MAX_INLINE_PAYLOAD_BYTES, BaseMediaNormalizer
from omnibrief.media.exceptions import AudioTooLongError, TranscodeError
from omnibrief.processor.exceptions import PipelineTimeoutError

MIN_OUTPUT_BYTES = 100
OUTPUT_MIME_TYPE = "audio/mpeg"

# Noise reduction, an 80 Hz - 8 kHz speech band, then loudness normalization.
SPEECH_FILTERS = "afftdn=nf=-25,highpass=f=80,lowpass=f=8000,loudnorm"


class FfmpegMediaNormalizer(BaseMediaNormalizer):
    """Re-encodes any audio/video input to mono 16 kHz 32 kbps MP3."""

    SAMPLE_RATE = 16000
    CHANNELS = 1
    BITRATE = "32k"

    def __init__(self, ffmpeg_binary: str = "ffmpeg") -> None:
        self._ffmpeg = ffmpeg_binary

    def build_command(self, source_path: Path, output_path: Path) -> list[str]:
        return [
            self._ffmpeg, "-y",
            "-i", str(source_path),
            "-vn",
            "-af", SPEECH_FILTERS,
            "-ac", str(self.CHANNELS),
            "-ar", str(self.SAMPLE_RATE),
            "-b:a", self.BITRATE,
            "-f", "mp3",
            str(output_path),
        ]

    def normalize(
        self,
        source_path: Path,
        output_path: Path,
        timeout_seconds: float | None = None,
    ) -> PreparedAudio:
        Log.info("Compression started", source=source_path.name, output=output_path.name)
        self._run(self.build_command(source_path, output_path), timeout_seconds)

        try:
            size = output_path.stat().st_size
        except FileNotFoundError:
            size = 0
        Log.info("Compression finished", output=output_path.name, size_bytes=size)

        if size < MIN_OUTPUT_BYTES:
            raise TranscodeError("Compressed audio extraction failed (file empty).")
        if size >= MAX_INLINE_PAYLOAD_BYTES:
            raise AudioTooLongError(
                "File is too large even after compression. "
                "Max audio duration is approx 90 minutes."
            )
        return PreparedAudio(path=output_path, mime_type=OUTPUT_MIME_TYPE, size_bytes=size)

    @staticmethod
    def _run(cmd: list[str], timeout_seconds: float | None) -> None:
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=timeout_seconds
            )
        except subprocess.TimeoutExpired as exc:
            raise PipelineTimeoutError(
                f"Audio compression timed out after {exc.timeout:.0f}s"
            ) from exc
        except OSError as exc:
            raise TranscodeError(f"Could not start ffmpeg: {exc}") from exc

        if result.returncode != 0:
            stderr_tail = (result.stderr or "").strip()[-500:]
            Log.error("Compression failed", returncode=result.returncode)
            raise TranscodeError(f"Failed to transcode media: {stderr_tail}")
