"""Resolve a user-supplied URL into a local file."""

import re
import shutil
import uuid
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
import yt_dlp
from yt_dlp.utils import YoutubeDLError

from omnibrief.extraction.mime_types import DEFAULT_MIME_TYPE
from omnibrief.fetching.exceptions import FetchError
from omnibrief.fetching.models import FetchedFile
from omnibrief.logging.logger import Log
from omnibrief.processor.deadline import Deadline
from omnibrief.processor.models import MediaAsset

VIDEO_HOST_PATTERN = re.compile(
    r"^(https?://)?(www\.|m\.)?(youtube\.com|youtu\.be)/.+$", re.IGNORECASE
)
VIDEO_AUDIO_MIME_TYPE = "audio/mpeg"

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.\-]")
_TITLE_STRIP = re.compile(r"[^\w\s]")


def is_video_host_url(url: str) -> bool:
    return bool(VIDEO_HOST_PATTERN.match(url.strip()))


def sanitize_title(title: str) -> str:
    """Strip everything but word characters and whitespace from a title."""
    return _TITLE_STRIP.sub("", title).strip()


class _YtDlpLogger:
    """Routes yt-dlp diagnostics to the application log without failing."""

    def debug(self, msg: str) -> None:
        Log.debug(f"yt-dlp: {msg}")

    def info(self, msg: str) -> None:
        Log.debug(f"yt-dlp: {msg}")

    def warning(self, msg: str) -> None:
        Log.warning("yt-dlp warning", detail=msg)

    def error(self, msg: str) -> None:
        Log.error("yt-dlp error", detail=msg)


class RemoteFetcher:
    """Downloads a URL into the work directory.

    Video-hosting links are reduced to an MP3 audio track with yt-dlp; any
    other URL is streamed to disk as-is. The returned asset belongs to the
    caller, who must delete it.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        work_dir: Path,
        timeout_seconds: float = 60,
        http_client: httpx.Client | None = None,
        ffmpeg_binary: str | None = None,
    ) -> None:
        self._work_dir = work_dir
        self._timeout_seconds = timeout_seconds
        self._ffmpeg_location = self._resolve_ffmpeg(ffmpeg_binary)
        self._client = http_client or httpx.Client(
            timeout=timeout_seconds, follow_redirects=True
        )

    @staticmethod
    def _resolve_ffmpeg(ffmpeg_binary: str | None) -> str | None:
        """Resolve the configured ffmpeg to the absolute path yt-dlp expects."""
        if not ffmpeg_binary:
            return None
        location = shutil.which(ffmpeg_binary)
        if location is None:
            Log.warning("Configured ffmpeg not found, yt-dlp will search PATH", ffmpeg=ffmpeg_binary)
        return location

    def close(self) -> None:
        self._client.close()

    def fetch(self, url: str, deadline: Deadline | None = None) -> FetchedFile:
        """Download ``url`` and return the local asset.

        Network timeouts are capped by the time left on ``deadline``.

        Raises:
            FetchError: on network failure, non-2xx status, missing output or
                an empty body.
            PipelineTimeoutError: if ``deadline`` passes during the download.
        """
        url = url.strip()
        parsed = urlparse(url if "://" in url else f"https://{url}")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise FetchError(f"Unsupported URL: {url}")

        self._work_dir.mkdir(parents=True, exist_ok=True)
        file_id = uuid.uuid4().hex
        try:
            if is_video_host_url(url):
                path, mime_type, name = self._fetch_video(url, file_id, deadline)
            else:
                path, mime_type, name = self._fetch_generic(url, file_id, deadline)
            size = self._verify(path)
        except BaseException:
            self._remove_partials(file_id)
            raise

        Log.info("URL downloaded", name=name, mime_type=mime_type, size_bytes=size)
        return FetchedFile(
            asset=MediaAsset(path=path, declared_mime_type=mime_type, size_bytes=size),
            suggested_name=name,
        )

    def _fetch_video(
        self, url: str, file_id: str, deadline: Deadline | None
    ) -> tuple[Path, str, str]:
        Log.info("Processing video-hosting URL", url=url)
        title = sanitize_title(self._video_title(url, deadline) or "")
        name = f"{title}.mp3" if title else f"youtube_{file_id}.mp3"

        options = {
            **self._ytdlp_options(deadline),
            "format": "bestaudio/best",
            "outtmpl": str(self._work_dir / f"{file_id}.%(ext)s"),
            "postprocessors": [
                {"key": "FFmpegExtractAudio", "preferredcodec": "mp3"}
            ],
        }
        if deadline is not None:
            deadline.check("audio download")
        Log.info("Downloading audio track", name=name)
        try:
            with yt_dlp.YoutubeDL(options) as ydl:
                ydl.download([url])
        except YoutubeDLError as exc:
            # Partial failures still count if the audio file was written.
            Log.warning("yt-dlp download reported an error", error=str(exc))

        expected = self._work_dir / f"{file_id}.mp3"
        if not expected.is_file():
            raise FetchError(f"Failed to download video audio: no output produced for {url}")
        return expected, VIDEO_AUDIO_MIME_TYPE, name

    def _video_title(self, url: str, deadline: Deadline | None) -> str | None:
        options = {**self._ytdlp_options(deadline), "skip_download": True}
        try:
            with yt_dlp.YoutubeDL(options) as ydl:
                info = ydl.extract_info(url, download=False)
        except YoutubeDLError as exc:
            raise FetchError(f"Failed to download video: {exc}") from exc
        if not isinstance(info, dict):
            Log.warning("yt-dlp returned no metadata", url=url)
            return None
        title = info.get("title")
        return title if isinstance(title, str) else None

    def _ytdlp_options(self, deadline: Deadline | None) -> dict[str, object]:
        options: dict[str, object] = {
            "quiet": True,
            "noplaylist": True,
            "nocheckcertificate": True,
            "prefer_free_formats": True,
            "socket_timeout": self._network_timeout(deadline),
            "logger": _YtDlpLogger(),
        }
        if self._ffmpeg_location:
            options["ffmpeg_location"] = self._ffmpeg_location
        return options

    def _network_timeout(self, deadline: Deadline | None) -> float:
        if deadline is None:
            return self._timeout_seconds
        return max(0.001, min(self._timeout_seconds, deadline.remaining()))

    def _fetch_generic(
        self, url: str, file_id: str, deadline: Deadline | None
    ) -> tuple[Path, str, str]:
        Log.info("Processing generic URL", url=url)
        name = self._name_from_url(url, file_id)
        target = self._work_dir / f"{file_id}_{name}"
        try:
            with self._client.stream(
                "GET", url, timeout=self._network_timeout(deadline)
            ) as response:
                if not response.is_success:
                    raise FetchError(
                        f"Failed to fetch URL: HTTP {response.status_code} "
                        f"{response.reason_phrase}".strip()
                    )
                mime_type = response.headers.get("content-type") or DEFAULT_MIME_TYPE
                with target.open("wb") as fh:
                    for chunk in response.iter_bytes(self.CHUNK_SIZE):
                        fh.write(chunk)
                        if deadline is not None:
                            deadline.check("download completion")
        except httpx.HTTPError as exc:
            raise FetchError(f"Failed to fetch URL: {exc}") from exc
        return target, mime_type, name

    @staticmethod
    def _name_from_url(url: str, file_id: str) -> str:
        segment = unquote(urlparse(url).path).rstrip("/").rsplit("/", 1)[-1]
        safe = _UNSAFE_NAME_CHARS.sub("_", segment).strip("._")
        return safe or f"download_{file_id}.bin"

    @staticmethod
    def _verify(path: Path) -> int:
        try:
            size = path.stat().st_size
        except FileNotFoundError as exc:
            raise FetchError(f"File not found after download: {path.name}") from exc
        if size == 0:
            raise FetchError("Downloaded file is empty")
        return size

    def _remove_partials(self, file_id: str) -> None:
        for leftover in self._work_dir.glob(f"{file_id}*"):
            try:
                leftover.unlink()
            except OSError as exc:
                Log.warning("Could not remove partial download", path=str(leftover), error=str(exc))
