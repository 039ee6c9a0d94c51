from .client import RTIService
from .exceptions import (
    RTIServiceError,
    RTIUnavailableError,
    RTITimeoutError,
    RTIResponseError,
)

__all__ = [
    "RTIService",
    "RTIServiceError",
    "RTIUnavailableError",
    "RTITimeoutError",
    "RTIResponseError",
]
