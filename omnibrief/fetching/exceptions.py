from omnibrief.processor.exceptions import ProcessorError


class FetchError(ProcessorError):
    """Raised when a URL cannot be resolved to a non-empty local file."""
