class ValidationError(Exception):
    """Raised when a request is missing the input it needs. Maps to HTTP 400."""


class UpstreamError(Exception):
    """Raised when the weather provider call fails. Maps to HTTP 500."""
