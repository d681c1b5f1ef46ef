"""Fixed-delay retry policy for transient transport failures."""

import time
from collections.abc import Callable
from typing import Annotated, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from haven_client.settings import HavenSettings
from haven_client.transport.errors import RETRYABLE_KINDS, NetworkError
from haven_client.transport.metrics import TransportMetrics


logger = structlog.get_logger()

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """Configuration for retry behavior.

    Retries connection errors, timeouts and server errors with a fixed
    delay between attempts. Every other error kind propagates at once.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    retry_delay_seconds: Annotated[float, Field(ge=0.0, le=60.0)] = 1.0

    @classmethod
    def from_settings(cls, settings: HavenSettings) -> "RetryPolicy":
        """Create a retry policy from application settings."""
        return cls(
            max_retries=settings.max_retries,
            retry_delay_seconds=settings.retry_delay_seconds,
        )

    def should_retry(self, error: NetworkError, attempt: int) -> bool:
        """Determine if a failed attempt should be retried.

        Args:
            error: The error that occurred.
            attempt: Current attempt number (0-indexed).

        Returns:
            True if the request should be retried.
        """
        if attempt >= self.max_retries:
            return False
        return error.kind in RETRYABLE_KINDS

    def run(
        self,
        operation: Callable[[], T],
        sleep: Callable[[float], None] = time.sleep,
    ) -> T:
        """Run an operation, retrying transient failures.

        The operation is reissued on the calling thread after each delay,
        so callers running this on a worker thread keep it off their own
        context.

        Args:
            operation: Callable performing one attempt; raises NetworkError.
            sleep: Delay function, injectable for tests.

        Returns:
            The operation's result from the first successful attempt.

        Raises:
            NetworkError: The terminal error once retries are exhausted or
                the error is not retryable.
        """
        metrics = TransportMetrics.get_instance()
        attempt = 0
        while True:
            try:
                return operation()
            except NetworkError as error:
                if not self.should_retry(error, attempt):
                    metrics.record_failure(error.kind)
                    raise
                attempt += 1
                metrics.record_retry()
                logger.info(
                    "retry_attempt",
                    component="transport",
                    attempt=attempt,
                    max_retries=self.max_retries,
                    delay_seconds=self.retry_delay_seconds,
                    error_kind=error.kind.value,
                )
                sleep(self.retry_delay_seconds)
