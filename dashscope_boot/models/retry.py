"""Retry policy shared by the model wrappers."""

import asyncio
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Optional, TypeVar

from dashscope_boot.clients.exceptions import DashScopeApiException, ExternalApiException, HttpClientException
from dashscope_boot.config.log import get_logger
from dashscope_boot.config.properties import RetryProperties

logger = get_logger(__name__)

T = TypeVar('T')


class RetryPolicy:
    """Retries transient DashScope failures with linear backoff.

    Transport errors and API errors with a retryable status are retried up to
    `max_attempts` calls in total; anything else propagates immediately.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        retry_on_status: Iterable[int] = (429, 500, 502, 503, 504),
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        if max_attempts < 1:
            raise ValueError('max_attempts must be at least 1')
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.retry_on_status: FrozenSet[int] = frozenset(retry_on_status)
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_properties(cls, properties: RetryProperties) -> 'RetryPolicy':
        return cls(
            max_attempts=properties.max_attempts,
            backoff_seconds=properties.backoff_seconds,
            retry_on_status=properties.retry_on_status,
        )

    def is_retryable(self, exc: DashScopeApiException) -> bool:
        if isinstance(exc, HttpClientException):
            return True
        if isinstance(exc, ExternalApiException):
            return exc.status_code in self.retry_on_status
        return False

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run `operation`, retrying on retryable failures."""
        attempt = 1
        while True:
            try:
                return await operation()
            except DashScopeApiException as exc:
                if attempt >= self.max_attempts or not self.is_retryable(exc):
                    raise
                delay = self.backoff_seconds * attempt
                logger.info('Retrying DashScope call', attempt=attempt, max_attempts=self.max_attempts, delay=delay, error=exc.message)
                await self._sleep(delay)
                attempt += 1
