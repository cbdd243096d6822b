class AnalysisError(Exception):
    """Base exception for the structured analysis stage."""


class UpstreamUnavailableError(AnalysisError):
    """Raised when the content-understanding service cannot be reached or fails."""


class MalformedResponseError(AnalysisError):
    """Raised when the upstream text cannot be repaired into a JSON object."""

    def __init__(self, message: str, raw_response: str) -> None:
        super().__init__(message)
        self.raw_response = raw_response


class InvalidStructureError(AnalysisError):
    """Raised when parsed JSON lacks required fields or violates page invariants."""
