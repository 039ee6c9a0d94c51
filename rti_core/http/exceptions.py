from typing import Optional, Any


class RTIServiceError(Exception):
    """Base exception for all RTI service communication errors."""
    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(f"[rti] {message} (Status: {status_code})")


class RTIUnavailableError(RTIServiceError):
    """Raised when the RTI service is unreachable or returns 5xx."""
    pass


class RTITimeoutError(RTIUnavailableError):
    """Raised specifically on timeouts."""
    pass


class RTIResponseError(RTIServiceError):
    """Raised on non-2xx responses or a verdict payload that fails validation."""
    pass
