"""
Base HTTP client with retry logic and error handling.

Wraps httpx with tenacity retries and returns every call as a
FetchResult so callers can tell a failed load from an empty one.
"""

import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from catalog_explorer.config import RetryConfig, get_settings
from catalog_explorer.logger import get_logger

T = TypeVar("T")


class CatalogServiceError(Exception):
    """Base exception for catalog service errors."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)


class APIError(CatalogServiceError):
    """Raised when the service returns an error response."""

    pass


class ServerError(APIError):
    """5xx response; retried."""

    pass


class ResponseValidationError(CatalogServiceError):
    """Raised when a response body does not match its contract."""

    pass


class FetchResult(BaseModel, Generic[T]):
    """
    Outcome of one service call.

    ``success=False`` always means the call failed; a successful call
    with an empty payload is a valid, distinct result.
    """

    success: bool
    data: T | None = None
    error_message: str | None = None
    status_code: int | None = None
    endpoint: str
    duration_ms: float | None = None
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BaseServiceClient:
    """
    Async HTTP client foundation.

    Provides:
    - Lazy httpx.AsyncClient management (async context manager)
    - Retry with exponential backoff on transport errors and 5xx
    - Response parsing into pydantic contracts
    - Structured logging
    """

    user_agent = "CatalogExplorer/1.0"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        retry_config: RetryConfig | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Service root (uses settings if None)
            retry_config: Custom retry configuration (uses settings if None)
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (for tests)
        """
        settings = get_settings()
        self._base_url = (base_url or settings.catalog.base_url).rstrip("/")
        self._retry_config = retry_config or settings.retry
        self._timeout = timeout or settings.catalog.timeout_seconds
        self._transport = transport
        self._logger = get_logger(
            self.__class__.__name__,
            component="client",
            base_url=self._base_url,
        )
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BaseServiceClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _create_retry_decorator(self) -> Any:
        """Create retry decorator with current configuration."""
        return retry(
            retry=retry_if_exception_type((httpx.TransportError, ServerError)),
            stop=stop_after_attempt(self._retry_config.max_attempts),
            wait=wait_exponential(
                multiplier=self._retry_config.base_delay_seconds,
                max=self._retry_config.max_delay_seconds,
                exp_base=self._retry_config.exponential_base,
            ),
            before_sleep=self._log_retry_attempt,
            reraise=True,
        )

    def _log_retry_attempt(self, retry_state: Any) -> None:
        self._logger.warning(
            "Retrying request",
            attempt=retry_state.attempt_number,
            wait_seconds=retry_state.next_action.sleep if retry_state.next_action else 0,
            exception=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _make_request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Make HTTP request with retry logic.

        Raises:
            APIError: If the service returns an error response
            CatalogServiceError: On transport failure after retries
        """
        retry_decorator = self._create_retry_decorator()

        @retry_decorator
        async def _request() -> httpx.Response:
            self._logger.debug("Making request", method=method, path=path)
            response = await self.client.request(method, path, **kwargs)

            if response.status_code >= 500:
                raise ServerError(
                    f"API error: {response.status_code}",
                    endpoint=path,
                    status_code=response.status_code,
                )
            if response.status_code >= 400:
                raise APIError(
                    f"API error: {response.status_code} {response.text.strip()}".strip(),
                    endpoint=path,
                    status_code=response.status_code,
                )
            return response

        try:
            return await _request()  # type: ignore[no-any-return]
        except httpx.HTTPError as e:
            self._logger.error(
                "Request failed after retries",
                path=path,
                attempts=self._retry_config.max_attempts,
            )
            raise CatalogServiceError(
                f"Request failed after {self._retry_config.max_attempts} attempts: {e}",
                endpoint=path,
                original_error=e,
            ) from e

    def _parse(self, path: str, parser: Callable[[Any], T], raw_data: Any) -> T:
        try:
            return parser(raw_data)
        except PydanticValidationError as e:
            raise ResponseValidationError(
                f"Response validation failed: {e}",
                endpoint=path,
            ) from e

    async def _fetch(
        self,
        method: str,
        path: str,
        parser: Callable[[Any], T],
        **kwargs: Any,
    ) -> FetchResult[T]:
        """
        Request, decode and validate one endpoint.

        Never raises for service failures; they come back as
        ``FetchResult(success=False)``.
        """
        start_time = time.perf_counter()
        try:
            response = await self._make_request(method, path, **kwargs)
            try:
                raw_data = response.json()
            except ValueError as e:
                raise ResponseValidationError(
                    "Response is not valid JSON",
                    endpoint=path,
                    original_error=e,
                ) from e
            data = self._parse(path, parser, raw_data)
        except CatalogServiceError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._logger.error(
                "Fetch failed",
                path=path,
                error=str(e),
                status_code=e.status_code,
            )
            return FetchResult(
                success=False,
                error_message=str(e),
                status_code=e.status_code,
                endpoint=path,
                duration_ms=duration_ms,
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._logger.debug("Fetch successful", path=path, duration_ms=round(duration_ms, 2))
        return FetchResult(
            success=True,
            data=data,
            status_code=response.status_code,
            endpoint=path,
            duration_ms=duration_ms,
        )
