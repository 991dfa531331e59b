import uuid
from pathlib import Path

from omnibrief.config.settings import Settings
from omnibrief.extraction.extractor import ContentExtractor
from omnibrief.extraction.factory import PdfExtractorFactory
from omnibrief.extraction.mime_types import FileType, classify_media_type, normalize_mime_type
from omnibrief.extraction.models import ExtractionOutcome, PreparedAudio
from omnibrief.logging.logger import Log
from omnibrief.media.base import BaseMediaNormalizer, requires_normalization
from omnibrief.media.ffmpeg_normalizer import FfmpegMediaNormalizer
from omnibrief.processor.deadline import Deadline
from omnibrief.processor.exceptions import UnsupportedTypeError
from omnibrief.processor.models import MediaAsset, ProcessResult
from omnibrief.summarization import OrchestratorFactory, SummaryOrchestrator


class Processor:
    """Orchestrates one pipeline run for a local media asset.

    Pipeline: classify -> extract or normalize -> summarize.
    Temporary files created here are always removed before returning; the
    input asset belongs to the caller and is never touched.
    """

    def __init__(
        self,
        extractor: ContentExtractor,
        media_normalizer: BaseMediaNormalizer,
        orchestrator: SummaryOrchestrator,
        work_dir: Path,
    ) -> None:
        self._extractor = extractor
        self._media_normalizer = media_normalizer
        self._orchestrator = orchestrator
        self._work_dir = work_dir

    def process(self, asset: MediaAsset, deadline: Deadline | None = None) -> ProcessResult:
        """Run the pipeline for ``asset``.

        Raises:
            UnsupportedTypeError: if the declared MIME type is unsupported.
            ProcessorError: any other hard failure from extraction,
                normalization or the deadline.
        """
        file_type = classify_media_type(asset.declared_mime_type)
        if file_type is None:
            raise UnsupportedTypeError(
                f"Unsupported file type: {asset.declared_mime_type or 'unknown'}"
            )
        Log.info(
            "Processing started",
            file=asset.path.name,
            file_type=file_type.value,
            size_bytes=asset.size_bytes,
        )

        artifacts: list[Path] = []
        try:
            if deadline is not None:
                deadline.check("content preparation")
            outcome = self._prepare(asset, file_type, artifacts, deadline)

            if deadline is not None:
                deadline.check("summarization")
            summary = self._orchestrator.summarize(outcome, file_type, deadline)

            if deadline is not None:
                deadline.check("persisting")
        finally:
            self._cleanup(artifacts)

        Log.info("Processing finished", file=asset.path.name, file_type=file_type.value)
        return ProcessResult(summary=summary, file_type=file_type)

    def _prepare(
        self,
        asset: MediaAsset,
        file_type: FileType,
        artifacts: list[Path],
        deadline: Deadline | None,
    ) -> ExtractionOutcome:
        if file_type in (FileType.DOCUMENT, FileType.IMAGE):
            return self._extractor.extract(asset.path, asset.declared_mime_type)

        is_video = file_type is FileType.VIDEO
        if not requires_normalization(is_video, asset.size_bytes):
            Log.info("Audio fits inline, skipping compression", size_bytes=asset.size_bytes)
            return PreparedAudio(
                path=asset.path,
                mime_type=normalize_mime_type(asset.declared_mime_type),
                size_bytes=asset.size_bytes,
            )

        self._work_dir.mkdir(parents=True, exist_ok=True)
        output_path = self._work_dir / f"{uuid.uuid4().hex}_compressed.mp3"
        artifacts.append(output_path)
        return self._media_normalizer.normalize(
            asset.path,
            output_path,
            timeout_seconds=deadline.remaining() if deadline is not None else None,
        )

    @staticmethod
    def _cleanup(artifacts: list[Path]) -> None:
        for path in artifacts:
            try:
                path.unlink(missing_ok=True)
                Log.debug("Temporary file removed", path=path.name)
            except OSError as exc:
                Log.warning("Could not remove temporary file", path=str(path), error=str(exc))


def build_processor(settings: Settings) -> Processor:
    """Build a Processor with all required adapters."""
    extractor = ContentExtractor(pdf_extractor=PdfExtractorFactory.create(settings))
    media_normalizer = FfmpegMediaNormalizer(ffmpeg_binary=settings.ffmpeg_binary)
    orchestrator = OrchestratorFactory.create(settings)
    return Processor(
        extractor=extractor,
        media_normalizer=media_normalizer,
        orchestrator=orchestrator,
        work_dir=settings.work_dir,
    )
