"""Shared request plumbing for backend services."""

import time
from collections.abc import Callable

import structlog

from haven_client.session.context import SessionContext, bearer_value
from haven_client.transport.client import ApiClient, RequestParams
from haven_client.transport.errors import NetworkError, NetworkErrorKind
from haven_client.transport.models import HttpMethod
from haven_client.transport.retry import RetryPolicy


logger = structlog.get_logger()


class BaseService:
    """Base class for services issuing requests through the retry policy.

    Authenticated requests read the bearer token from the session context
    on every attempt. A 401 is answered with at most one token refresh
    followed by one more retried request.
    """

    service_name: str = "service"

    def __init__(
        self,
        client: ApiClient,
        retry_policy: RetryPolicy | None = None,
        session: SessionContext | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the service.

        Args:
            client: API client used for every request.
            retry_policy: Retry policy; defaults to 3 retries 1 s apart.
            session: Session context for authenticated endpoints.
            sleep: Delay function used between retries.
        """
        self._client = client
        self._retry = retry_policy or RetryPolicy()
        self._session = session
        self._sleep = sleep
        self._log = logger.bind(component="service", subcomponent=self.service_name)

    def _headers(self, authenticated: bool) -> dict[str, str] | None:
        if not authenticated:
            return None
        if self._session is None:
            return {"Authorization": bearer_value("")}
        return self._session.authorization_header()

    def _request(
        self,
        endpoint: str,
        method: HttpMethod = HttpMethod.GET,
        params: RequestParams | None = None,
        authenticated: bool = False,
    ) -> bytes:
        """Send a request through the retry policy.

        Args:
            endpoint: Path relative to the base URL.
            method: HTTP method.
            params: Query parameters or JSON body fields.
            authenticated: Whether to attach the bearer token.

        Returns:
            Response body bytes.

        Raises:
            NetworkError: Terminal classified failure.
        """

        def attempt() -> bytes:
            return self._client.send(
                endpoint,
                method=method,
                params=params,
                headers=self._headers(authenticated),
            )

        try:
            return self._retry.run(attempt, sleep=self._sleep)
        except NetworkError as error:
            if not (
                authenticated
                and error.kind is NetworkErrorKind.UNAUTHORIZED
                and self._session is not None
                and self._session.refresh()
            ):
                raise
            self._log.info("request_resent_after_refresh", endpoint=endpoint)
            return self._retry.run(attempt, sleep=self._sleep)
