import logging
import httpx
from typing import Optional
from pydantic import ValidationError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    retry_if_not_exception_type,
    before_sleep_log,
)

from rti_core.body import RTIBody, serialize_body
from rti_core.config.policy import Policy
from rti_core.config.settings import RTI_ENDPOINT, RTI_DEFAULT_TIMEOUT_MS
from rti_core.models import RTIResponse

from .exceptions import (
    RTIServiceError,
    RTIUnavailableError,
    RTITimeoutError,
    RTIResponseError,
)

logger = logging.getLogger(__name__)


class RTIService:
    """
    Async HTTP client for the RTI service.

    Features:
    - Connection pooling (via httpx.AsyncClient).
    - Per-policy timeout in milliseconds.
    - One retry on connection failures; timeouts are not retried.
    - Standardized exception mapping.
    """

    def __init__(
        self,
        endpoint: str = RTI_ENDPOINT,
        timeout_ms: int = RTI_DEFAULT_TIMEOUT_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.timeout_ms = timeout_ms

        self.client = httpx.AsyncClient(
            timeout=timeout_ms / 1000,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def aclose(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()

    def _map_exception(self, exc: Exception) -> Exception:
        """Map httpx exceptions to RTI service exceptions."""
        if isinstance(exc, httpx.TimeoutException):
            return RTITimeoutError("Request timed out")
        if isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
            return RTIUnavailableError(f"Failed to connect: {str(exc)}")
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            text = exc.response.text
            if status >= 500:
                return RTIUnavailableError("Server error", status_code=status, details=text)
            return RTIResponseError(f"HTTP {status} Error", status_code=status, details=text)

        return RTIServiceError(f"Unexpected error: {str(exc)}")

    def _timeout_for(self, policy: Policy) -> float:
        timeout_ms = policy.timeout if policy.timeout else self.timeout_ms
        return timeout_ms / 1000

    @retry(
        retry=(
            retry_if_exception_type(RTIUnavailableError)
            & retry_if_not_exception_type(RTITimeoutError)
        ),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    async def call_rti(self, body: RTIBody, policy: Policy) -> RTIResponse:
        """
        Send a request body to the RTI service and return its verdict.

        Raises:
            RTITimeoutError: The policy timeout elapsed
            RTIUnavailableError: Connection failure or 5xx response
            RTIResponseError: Other non-2xx response or malformed verdict
        """
        try:
            response = await self.client.post(
                self.endpoint,
                data=serialize_body(body),
                timeout=self._timeout_for(policy),
            )
            response.raise_for_status()
            return RTIResponse.model_validate(response.json())

        except httpx.HTTPError as e:
            raise self._map_exception(e)
        except (ValidationError, ValueError) as e:
            raise RTIResponseError("Malformed RTI response", details=str(e))
