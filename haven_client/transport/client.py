"""HTTP client that maps transport outcomes onto the error taxonomy."""

import time
from collections.abc import Iterator
from types import TracebackType

import httpx
import structlog

from haven_client.transport.connectivity import ConnectivityProbe, StaticConnectivity
from haven_client.transport.constants import (
    EVENT_STREAM_CONTENT_TYPE,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_UNAUTHORIZED,
    JSON_CONTENT_TYPE,
)
from haven_client.transport.errors import (
    HttpStatusError,
    NetworkError,
    NetworkErrorKind,
    RequestFailedError,
)
from haven_client.transport.metrics import TransportMetrics
from haven_client.transport.models import ClientConfig, HttpMethod
from haven_client.transport.redact import body_preview, redact_headers, redact_params


logger = structlog.get_logger()

RequestParams = dict[str, object]


class ApiClient:
    """HTTP client for the Harmony Haven backend.

    ``send`` issues one request and:
    - Refuses to touch the network while the connectivity probe is offline
    - Encodes GET parameters as a query string and others as a JSON body
    - Classifies the outcome into the ``NetworkErrorKind`` taxonomy
    - Logs request and response traffic with sensitive headers redacted

    ``stream_lines`` applies the same checks to a server-sent event stream.
    """

    def __init__(
        self,
        config: ClientConfig,
        connectivity: ConnectivityProbe | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            config: Transport configuration.
            connectivity: Online/offline signal; defaults to always online.
            transport: Optional httpx transport (mocks in tests).
        """
        self._config = config
        self._connectivity = connectivity or StaticConnectivity(online=True)
        self._metrics = TransportMetrics.get_instance()
        client_kwargs: dict[str, object] = {
            "base_url": config.base_url,
            "headers": {
                "User-Agent": config.user_agent,
                "Accept": JSON_CONTENT_TYPE,
            },
            "follow_redirects": True,
        }
        if config.timeout_seconds is not None:
            client_kwargs["timeout"] = config.timeout_seconds
        if transport is not None:
            client_kwargs["transport"] = transport
        self._http = httpx.Client(**client_kwargs)  # type: ignore[arg-type]
        self._log = logger.bind(component="transport")

    @property
    def config(self) -> ClientConfig:
        """Get the transport configuration."""
        return self._config

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._http.close()

    def __enter__(self) -> "ApiClient":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit."""
        self.close()

    def send(
        self,
        endpoint: str,
        method: HttpMethod = HttpMethod.GET,
        params: RequestParams | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """Send one request and return the response body.

        Args:
            endpoint: Path relative to the base URL.
            method: HTTP method.
            params: Query parameters (GET) or JSON body fields (others).
            headers: Extra request headers.

        Returns:
            Non-empty response body bytes of a 2xx response.

        Raises:
            NetworkError: Classified failure.
        """
        log = self._log.bind(method=method.value, endpoint=endpoint)

        self._ensure_online(log)

        request = self._build_request(endpoint, method, params, headers, log)
        self._log_request(request, params, log)

        start_time_ns = time.perf_counter_ns()
        try:
            response = self._http.send(request)
        except Exception as e:  # noqa: BLE001
            raise self._transport_error(e, log) from e
        finally:
            duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
            self._metrics.record_duration(duration_ms)

        body = response.content
        self._metrics.record_request(response.status_code, len(body))
        self._log_response(response, log, round(duration_ms, 2))
        return self._classify_response(response, log)

    def stream_lines(
        self,
        endpoint: str,
        headers: dict[str, str] | None = None,
    ) -> Iterator[str]:
        """Open a server-sent event stream and yield its lines as they arrive.

        Nothing is sent until the first line is requested. Non-2xx
        responses are read in full and classified like ``send``.

        Args:
            endpoint: Path relative to the base URL.
            headers: Extra request headers.

        Yields:
            Decoded lines without their line terminators.

        Raises:
            NetworkError: Classified failure, before or during the stream.
        """
        log = self._log.bind(method=HttpMethod.GET.value, endpoint=endpoint)
        self._ensure_online(log)

        request_headers = {
            "Accept": EVENT_STREAM_CONTENT_TYPE,
            "Cache-Control": "no-cache",
            **(headers or {}),
        }
        request = self._build_request(
            endpoint, HttpMethod.GET, None, request_headers, log
        )
        self._log_request(request, None, log)

        start_time_ns = time.perf_counter_ns()
        try:
            response = self._http.send(request, stream=True)
        except Exception as e:  # noqa: BLE001
            raise self._transport_error(e, log) from e

        bytes_received = 0
        try:
            if not HTTP_STATUS_OK_MIN <= response.status_code < HTTP_STATUS_OK_MAX:
                try:
                    response.read()
                except httpx.HTTPError as e:
                    raise self._transport_error(e, log) from e
                bytes_received = len(response.content)
                self._classify_response(response, log)
            log.debug("stream_opened", status_code=response.status_code)
            try:
                for line in response.iter_lines():
                    bytes_received += len(line.encode())
                    yield line
            except httpx.HTTPError as e:
                raise self._transport_error(e, log) from e
            log.debug("stream_closed", bytes_received=bytes_received)
        finally:
            response.close()
            self._metrics.record_request(response.status_code, bytes_received)
            duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
            self._metrics.record_duration(duration_ms)

    def _ensure_online(self, log: structlog.stdlib.BoundLogger) -> None:
        """Raise CONNECTION_ERROR while the connectivity probe is offline."""
        if not self._connectivity.is_online:
            log.error("no_internet_connection")
            raise NetworkError(
                NetworkErrorKind.CONNECTION_ERROR, "No internet connection"
            )

    def _transport_error(
        self,
        error: Exception,
        log: structlog.stdlib.BoundLogger,
    ) -> NetworkError:
        """Map an exception raised while talking to the server."""
        if isinstance(error, httpx.TimeoutException):
            log.error("request_timed_out", error=str(error))
            return NetworkError(
                NetworkErrorKind.TIMEOUT_ERROR, f"Request timed out: {error}"
            )
        if isinstance(error, (httpx.NetworkError, httpx.RemoteProtocolError)):
            log.error("connection_failed", error=str(error))
            return NetworkError(
                NetworkErrorKind.CONNECTION_ERROR, f"Connection failed: {error}"
            )
        if isinstance(error, httpx.UnsupportedProtocol):
            log.error("invalid_url", error=str(error))
            return NetworkError(NetworkErrorKind.INVALID_URL, str(error))
        if isinstance(error, httpx.HTTPError):
            log.error("request_failed", error=str(error))
            return RequestFailedError(error)
        log.error("request_failed_unexpectedly", error=str(error))
        return NetworkError(NetworkErrorKind.UNKNOWN, f"Unexpected error: {error}")

    def _build_request(
        self,
        endpoint: str,
        method: HttpMethod,
        params: RequestParams | None,
        headers: dict[str, str] | None,
        log: structlog.stdlib.BoundLogger,
    ) -> httpx.Request:
        """Build the outgoing request.

        Raises:
            NetworkError: INVALID_URL or REQUEST_FAILED when the request
                cannot be built.
        """
        request_headers = dict(headers or {})
        try:
            if method == HttpMethod.GET:
                return self._http.build_request(
                    method.value,
                    endpoint,
                    params=params,  # type: ignore[arg-type]
                    headers=request_headers,
                )
            request_headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
            return self._http.build_request(
                method.value,
                endpoint,
                json=params,
                headers=request_headers,
            )
        except httpx.InvalidURL as e:
            log.error("invalid_url", error=str(e))
            raise NetworkError(NetworkErrorKind.INVALID_URL, str(e)) from e
        except (TypeError, ValueError) as e:
            log.error("request_serialization_failed", error=str(e))
            raise RequestFailedError(e) from e

    def _classify_response(
        self,
        response: httpx.Response,
        log: structlog.stdlib.BoundLogger,
    ) -> bytes:
        """Map an HTTP response onto a body or a typed error.

        Raises:
            NetworkError: For every non-2xx status or an empty body.
        """
        status_code = response.status_code

        if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
            if not response.content:
                log.error("no_data_received", status_code=status_code)
                raise NetworkError(NetworkErrorKind.NO_DATA, status_code=status_code)
            return response.content

        if status_code == HTTP_STATUS_UNAUTHORIZED:
            log.error("unauthorized", status_code=status_code)
            raise NetworkError(NetworkErrorKind.UNAUTHORIZED, status_code=status_code)

        if HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
            log.error("server_error", status_code=status_code)
            raise NetworkError(
                NetworkErrorKind.SERVER_ERROR,
                f"Server error ({status_code})",
                status_code=status_code,
            )

        log.error("http_error", status_code=status_code)
        raise HttpStatusError(status_code, response.content)

    def _log_request(
        self,
        request: httpx.Request,
        params: RequestParams | None,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        """Log an outgoing request when traffic logging is enabled."""
        if not self._config.log_traffic:
            return
        log.info(
            "http_request",
            url=str(request.url),
            headers=redact_headers(dict(request.headers)),
            body=redact_params(params) if request.method != HttpMethod.GET else None,
        )

    def _log_response(
        self,
        response: httpx.Response,
        log: structlog.stdlib.BoundLogger,
        duration_ms: float,
    ) -> None:
        """Log a received response when traffic logging is enabled."""
        if not self._config.log_traffic:
            return
        log.info(
            "http_response",
            status_code=response.status_code,
            url=str(response.url),
            headers=redact_headers(dict(response.headers)),
            body=body_preview(response.content),
            duration_ms=duration_ms,
        )
