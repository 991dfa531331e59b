class ProcessorError(Exception):
    """Base exception for hard pipeline failures.

    Raised out of the pipeline to the caller, which rejects the request with
    the exception message.
    """


class UnsupportedTypeError(ProcessorError):
    """Raised when a declared MIME type matches no supported media family."""


class PipelineTimeoutError(ProcessorError):
    """Raised when the caller's wall-clock ceiling is exceeded."""


class InputNotFoundError(ProcessorError):
    """Raised when a job's uploaded file is missing from disk."""
