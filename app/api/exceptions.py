class ApiError(Exception):
    """Base exception for request-level failures with a fixed HTTP status."""

    status_code = 500
    error = "Failed to process file"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.error)
        self.message = message


class BadRequestError(ApiError):
    """Raised for a missing, empty or oversized file part."""

    status_code = 400
    error = "Bad request"


class UnauthorizedError(ApiError):
    """Raised when the bearer token is missing or wrong."""

    status_code = 403
    error = "Unauthorized access"


class ProcessingError(ApiError):
    """Wraps an unexpected fault raised while processing an upload."""


class ClientDisconnectedError(ApiError):
    """Raised when the caller went away before processing finished."""

    status_code = 499
    error = "Client closed request"
