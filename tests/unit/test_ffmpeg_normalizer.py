import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from omnibrief.media.base import MAX_INLINE_PAYLOAD_BYTES, requires_normalization
from omnibrief.media.exceptions import AudioTooLongError, TranscodeError
from omnibrief.media.ffmpeg_normalizer import FfmpegMediaNormalizer
from omnibrief.processor.exceptions import PipelineTimeoutError


def _fake_run(output_size: int, returncode: int = 0, stderr: str = "") -> MagicMock:
    """subprocess.run stand-in that writes ``output_size`` bytes to the output path."""

    def _run(cmd: list[str], **_kwargs: object) -> MagicMock:
        if output_size:
            Path(cmd[-1]).write_bytes(b"\x00" * output_size)
        return MagicMock(returncode=returncode, stderr=stderr)

    return MagicMock(side_effect=_run)


class TestRequiresNormalization:
    def test_video_always_normalized(self) -> None:
        assert requires_normalization(True, 10)

    def test_small_audio_passes_through(self) -> None:
        assert not requires_normalization(False, MAX_INLINE_PAYLOAD_BYTES - 1)

    def test_audio_at_ceiling_is_normalized(self) -> None:
        assert requires_normalization(False, MAX_INLINE_PAYLOAD_BYTES)


class TestBuildCommand:
    def test_speech_profile(self, tmp_path: Path) -> None:
        cmd = FfmpegMediaNormalizer("/usr/bin/ffmpeg").build_command(
            tmp_path / "in.mp4", tmp_path / "out.mp3"
        )
        assert cmd[0] == "/usr/bin/ffmpeg"
        assert "-vn" in cmd
        assert cmd[cmd.index("-af") + 1] == (
            "afftdn=nf=-25,highpass=f=80,lowpass=f=8000,loudnorm"
        )
        assert cmd[cmd.index("-ac") + 1] == "1"
        assert cmd[cmd.index("-ar") + 1] == "16000"
        assert cmd[cmd.index("-b:a") + 1] == "32k"
        assert cmd[-1] == str(tmp_path / "out.mp3")


class TestNormalize:
    def test_returns_prepared_audio(self, tmp_path: Path) -> None:
        output = tmp_path / "out.mp3"
        with patch("omnibrief.media.ffmpeg_normalizer.subprocess.run", _fake_run(4096)):
            audio = FfmpegMediaNormalizer().normalize(tmp_path / "in.mp4", output, 30)

        assert audio.path == output
        assert audio.mime_type == "audio/mpeg"
        assert audio.size_bytes == 4096

    def test_passes_timeout(self, tmp_path: Path) -> None:
        fake = _fake_run(4096)
        with patch("omnibrief.media.ffmpeg_normalizer.subprocess.run", fake):
            FfmpegMediaNormalizer().normalize(tmp_path / "in.wav", tmp_path / "out.mp3", 12.5)
        assert fake.call_args.kwargs["timeout"] == 12.5

    def test_tiny_output_raises(self, tmp_path: Path) -> None:
        with (
            patch("omnibrief.media.ffmpeg_normalizer.subprocess.run", _fake_run(50)),
            pytest.raises(TranscodeError, match="file empty"),
        ):
            FfmpegMediaNormalizer().normalize(tmp_path / "in.mp4", tmp_path / "out.mp3")

    def test_missing_output_raises(self, tmp_path: Path) -> None:
        with (
            patch("omnibrief.media.ffmpeg_normalizer.subprocess.run", _fake_run(0)),
            pytest.raises(TranscodeError, match="file empty"),
        ):
            FfmpegMediaNormalizer().normalize(tmp_path / "in.mp4", tmp_path / "out.mp3")

    def test_output_over_ceiling_raises(self, tmp_path: Path) -> None:
        with (
            patch(
                "omnibrief.media.ffmpeg_normalizer.subprocess.run",
                _fake_run(MAX_INLINE_PAYLOAD_BYTES),
            ),
            pytest.raises(AudioTooLongError, match="90 minutes"),
        ):
            FfmpegMediaNormalizer().normalize(tmp_path / "in.mp4", tmp_path / "out.mp3")

    def test_nonzero_exit_includes_stderr_tail(self, tmp_path: Path) -> None:
        fake = _fake_run(0, returncode=1, stderr="Invalid data found when processing input")
        with (
            patch("omnibrief.media.ffmpeg_normalizer.subprocess.run", fake),
            pytest.raises(TranscodeError, match="Invalid data found"),
        ):
            FfmpegMediaNormalizer().normalize(tmp_path / "in.mp4", tmp_path / "out.mp3")

    def test_missing_binary_raises(self, tmp_path: Path) -> None:
        with (
            patch(
                "omnibrief.media.ffmpeg_normalizer.subprocess.run",
                side_effect=FileNotFoundError("ffmpeg"),
            ),
            pytest.raises(TranscodeError, match="Could not start ffmpeg"),
        ):
            FfmpegMediaNormalizer().normalize(tmp_path / "in.mp4", tmp_path / "out.mp3")

    def test_timeout_raises_pipeline_timeout(self, tmp_path: Path) -> None:
        with (
            patch(
                "omnibrief.media.ffmpeg_normalizer.subprocess.run",
                side_effect=subprocess.TimeoutExpired(cmd="ffmpeg", timeout=5),
            ),
            pytest.raises(PipelineTimeoutError),
        ):
            FfmpegMediaNormalizer().normalize(tmp_path / "in.mp4", tmp_path / "out.mp3", 5)

    def test_audio_too_long_is_transcode_error(self) -> None:
        assert issubclass(AudioTooLongError, TranscodeError)
