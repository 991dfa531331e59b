from omnibrief.processor.exceptions import ProcessorError


class ExtractionError(ProcessorError):
    """Raised when a file cannot be read or its content cannot be extracted."""


class PdfExtractionError(ExtractionError):
    """Raised when a PDF text layer cannot be parsed."""


class WeakSignalError(ExtractionError):
    """Raised when a document yields too little text to summarize."""
