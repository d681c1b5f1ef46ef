"""Typed error taxonomy for the transport layer.

Every failure surfaced by the transport, retry, decoding and service
layers is a ``NetworkError`` carrying a ``NetworkErrorKind``. Subclasses
add the data specific to their kind.
"""

from enum import Enum


class NetworkErrorKind(str, Enum):
    """Classification of client errors for retry decisions and messages.

    - INVALID_URL: Request URL could not be built
    - REQUEST_FAILED: Request could not be issued or failed in transit
    - INVALID_RESPONSE: Response was not a usable HTTP response
    - HTTP_ERROR: Non-2xx status other than 401 and 5xx
    - NO_DATA: 2xx response with an empty body
    - DECODING_FAILED: Body could not be decoded at all
    - UNAUTHORIZED: 401 Unauthorized
    - SERVER_ERROR: 5xx server error
    - CONNECTION_ERROR: Offline, or the connection could not be established
    - TIMEOUT_ERROR: Request timed out
    - UNKNOWN: Unclassified error
    """

    INVALID_URL = "INVALID_URL"
    REQUEST_FAILED = "REQUEST_FAILED"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    HTTP_ERROR = "HTTP_ERROR"
    NO_DATA = "NO_DATA"
    DECODING_FAILED = "DECODING_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"
    SERVER_ERROR = "SERVER_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    UNKNOWN = "UNKNOWN"


_DEFAULT_MESSAGES: dict[NetworkErrorKind, str] = {
    NetworkErrorKind.INVALID_URL: "Invalid URL",
    NetworkErrorKind.REQUEST_FAILED: "Request failed",
    NetworkErrorKind.INVALID_RESPONSE: "Invalid response from the server",
    NetworkErrorKind.HTTP_ERROR: "HTTP error",
    NetworkErrorKind.NO_DATA: "No data received from the server",
    NetworkErrorKind.DECODING_FAILED: "Failed to decode response",
    NetworkErrorKind.UNAUTHORIZED: "Unauthorized access",
    NetworkErrorKind.SERVER_ERROR: "Server error",
    NetworkErrorKind.CONNECTION_ERROR: "Connection error",
    NetworkErrorKind.TIMEOUT_ERROR: "Request timed out",
    NetworkErrorKind.UNKNOWN: "Unknown error occurred",
}


class NetworkError(Exception):
    """Base exception for all client errors.

    Attributes:
        kind: Classification of the error.
        message: Human-readable description.
        status_code: HTTP status code when one was received.
    """

    def __init__(
        self,
        kind: NetworkErrorKind,
        message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize the network error.

        Args:
            kind: Classification of the error.
            message: Human-readable message; defaults per kind.
            status_code: HTTP status code if available.
        """
        self.kind = kind
        self.message = message or _DEFAULT_MESSAGES[kind]
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def is_transient(self) -> bool:
        """Whether a later attempt of the same request may succeed."""
        return self.kind in RETRYABLE_KINDS

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "kind": self.kind.value,
            "message": self.message,
            "status_code": self.status_code,
        }


class HttpStatusError(NetworkError):
    """Non-2xx response that is neither 401 nor 5xx."""

    def __init__(self, status_code: int, body: bytes = b"") -> None:
        """Initialize the HTTP status error.

        Args:
            status_code: HTTP status code received.
            body: Raw response body, possibly empty.
        """
        super().__init__(
            NetworkErrorKind.HTTP_ERROR,
            f"HTTP error with status code: {status_code}",
            status_code=status_code,
        )
        self.body = body


class RequestFailedError(NetworkError):
    """The request could not be built or failed in transit."""

    def __init__(self, cause: BaseException) -> None:
        """Initialize the error.

        Args:
            cause: Underlying exception.
        """
        super().__init__(NetworkErrorKind.REQUEST_FAILED, f"Request failed: {cause}")
        self.cause = cause


class DecodingFailedError(NetworkError):
    """The response body could not be decoded as a whole."""

    def __init__(self, cause: BaseException | str) -> None:
        """Initialize the error.

        Args:
            cause: Underlying exception or description.
        """
        super().__init__(
            NetworkErrorKind.DECODING_FAILED, f"Failed to decode response: {cause}"
        )
        self.cause = cause


RETRYABLE_KINDS = frozenset(
    {
        NetworkErrorKind.CONNECTION_ERROR,
        NetworkErrorKind.TIMEOUT_ERROR,
        NetworkErrorKind.SERVER_ERROR,
    }
)
