class ExtractionError(Exception):
    """Base exception for content extraction errors."""


class UnsupportedMediaTypeError(ExtractionError):
    """Raised when the upload is neither a PDF nor an image, or the mode rejects it."""
