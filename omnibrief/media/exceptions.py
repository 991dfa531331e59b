from omnibrief.processor.exceptions import ProcessorError


class TranscodeError(ProcessorError):
    """Raised when audio/video transcoding fails or yields a degenerate file."""


class AudioTooLongError(TranscodeError):
    """Raised when compressed audio still exceeds the inline-payload ceiling."""
