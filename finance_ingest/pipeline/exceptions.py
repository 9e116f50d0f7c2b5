class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""


class PathAccessError(PipelineError):
    """Raised when the input path cannot be accessed. Aborts the invocation."""


class UnsupportedFileTypeError(PipelineError):
    """Raised when no processor is registered for a file extension."""


class FileReadError(PipelineError):
    """Raised when a file cannot be read from disk."""


class ExtractionFailedError(PipelineError):
    """Raised when text or AI extraction of a document is unusable."""


class OperationCancelledError(PipelineError):
    """Raised when the invocation was cancelled or ran past its deadline."""
