"""Unit tests for the fixed-delay retry policy."""

import pytest

from haven_client.settings import HavenSettings
from haven_client.transport import (
    NetworkError,
    NetworkErrorKind,
    RetryPolicy,
    TransportMetrics,
)


class Flaky:
    """Operation failing with the given errors before succeeding."""

    def __init__(self, *errors: NetworkError, result: str = "ok") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start every test with fresh metrics."""
    TransportMetrics.reset()


class TestShouldRetry:
    """Tests for retry decisions."""

    @pytest.fixture
    def policy(self) -> RetryPolicy:
        """Create a standard retry policy."""
        return RetryPolicy(max_retries=3)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "kind",
        [
            NetworkErrorKind.CONNECTION_ERROR,
            NetworkErrorKind.TIMEOUT_ERROR,
            NetworkErrorKind.SERVER_ERROR,
        ],
    )
    def test_transient_kinds_retry_until_limit(
        self, policy: RetryPolicy, kind: NetworkErrorKind
    ) -> None:
        """Transient kinds are retried while attempts remain."""
        error = NetworkError(kind)

        assert policy.should_retry(error, attempt=0) is True
        assert policy.should_retry(error, attempt=2) is True
        assert policy.should_retry(error, attempt=3) is False

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "kind",
        [
            NetworkErrorKind.UNAUTHORIZED,
            NetworkErrorKind.HTTP_ERROR,
            NetworkErrorKind.DECODING_FAILED,
            NetworkErrorKind.NO_DATA,
            NetworkErrorKind.INVALID_URL,
            NetworkErrorKind.UNKNOWN,
        ],
    )
    def test_other_kinds_never_retry(
        self, policy: RetryPolicy, kind: NetworkErrorKind
    ) -> None:
        """Non-transient kinds are never retried."""
        assert policy.should_retry(NetworkError(kind), attempt=0) is False


class TestRun:
    """Tests for running operations under the policy."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        """Defaults are three retries one second apart."""
        policy = RetryPolicy()

        assert policy.max_retries == 3
        assert policy.retry_delay_seconds == 1.0

    @pytest.mark.unit
    def test_from_settings(self) -> None:
        """Settings drive the retry count and delay."""
        policy = RetryPolicy.from_settings(
            HavenSettings(max_retries=1, retry_delay_seconds=0.25)
        )

        assert policy.max_retries == 1
        assert policy.retry_delay_seconds == 0.25

    @pytest.mark.unit
    def test_success_without_retry(self) -> None:
        """A first-attempt success never sleeps."""
        sleeps: list[float] = []
        operation = Flaky()

        assert RetryPolicy().run(operation, sleep=sleeps.append) == "ok"
        assert operation.calls == 1
        assert sleeps == []

    @pytest.mark.unit
    def test_recovers_after_transient_failures(self) -> None:
        """Transient failures are retried with the fixed delay."""
        sleeps: list[float] = []
        operation = Flaky(
            NetworkError(NetworkErrorKind.TIMEOUT_ERROR),
            NetworkError(NetworkErrorKind.SERVER_ERROR),
        )

        result = RetryPolicy(retry_delay_seconds=0.5).run(
            operation, sleep=sleeps.append
        )

        assert result == "ok"
        assert operation.calls == 3
        assert sleeps == [0.5, 0.5]
        assert TransportMetrics.get_instance().http_retry_total == 2

    @pytest.mark.unit
    def test_gives_up_after_max_retries(self) -> None:
        """The last error propagates after max_retries retries."""
        sleeps: list[float] = []
        errors = [NetworkError(NetworkErrorKind.CONNECTION_ERROR) for _ in range(5)]
        operation = Flaky(*errors)

        with pytest.raises(NetworkError) as exc_info:
            RetryPolicy(max_retries=3).run(operation, sleep=sleeps.append)

        assert exc_info.value is errors[3]
        assert operation.calls == 4
        assert len(sleeps) == 3
        failures = TransportMetrics.get_instance().http_failures_total
        assert failures == {"CONNECTION_ERROR": 1}

    @pytest.mark.unit
    def test_non_transient_propagates_immediately(self) -> None:
        """Non-transient errors are raised on the first attempt."""
        sleeps: list[float] = []
        operation = Flaky(NetworkError(NetworkErrorKind.UNAUTHORIZED))

        with pytest.raises(NetworkError) as exc_info:
            RetryPolicy().run(operation, sleep=sleeps.append)

        assert exc_info.value.kind is NetworkErrorKind.UNAUTHORIZED
        assert operation.calls == 1
        assert sleeps == []

    @pytest.mark.unit
    def test_zero_retries(self) -> None:
        """With max_retries=0 the first transient error propagates."""
        operation = Flaky(NetworkError(NetworkErrorKind.SERVER_ERROR))

        with pytest.raises(NetworkError):
            RetryPolicy(max_retries=0).run(operation, sleep=lambda _: None)

        assert operation.calls == 1
