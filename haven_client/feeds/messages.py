"""Mapping from client errors to user-facing messages."""

from haven_client.session.errors import AuthenticationError
from haven_client.transport.errors import NetworkError, NetworkErrorKind


NO_CONNECTION_MESSAGE = (
    "No internet connection. Please check your network settings and try again."
)
SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."
SERVER_ERROR_MESSAGE = "The server is experiencing issues. Please try again later."
DATA_ERROR_MESSAGE = (
    "There was a problem processing the data. Please try again later."
)
GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

_MESSAGES: dict[NetworkErrorKind, str] = {
    NetworkErrorKind.CONNECTION_ERROR: NO_CONNECTION_MESSAGE,
    NetworkErrorKind.TIMEOUT_ERROR: NO_CONNECTION_MESSAGE,
    NetworkErrorKind.UNAUTHORIZED: SESSION_EXPIRED_MESSAGE,
    NetworkErrorKind.SERVER_ERROR: SERVER_ERROR_MESSAGE,
    NetworkErrorKind.DECODING_FAILED: DATA_ERROR_MESSAGE,
}


def user_message(error: BaseException) -> str:
    """Map an error to a message fit for display.

    Authentication errors carry their own display message; network errors
    are mapped by kind; anything else gets the generic message.
    """
    if isinstance(error, AuthenticationError):
        return error.message
    if isinstance(error, NetworkError):
        return _MESSAGES.get(error.kind, GENERIC_ERROR_MESSAGE)
    return GENERIC_ERROR_MESSAGE
