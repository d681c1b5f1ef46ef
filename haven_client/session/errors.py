"""Exceptions for authentication and session handling."""


class AuthenticationError(Exception):
    """Base exception for authentication failures.

    Attributes:
        message: Human-readable message suitable for display.
    """

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class MissingTokenError(AuthenticationError):
    """The server reported success but sent no session token."""

    def __init__(self, message: str = "Authenticated but no token received") -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class AuthenticationRejectedError(AuthenticationError):
    """The server rejected the credentials or the submitted form.

    Attributes:
        error_code: Server-side validation error code, 0 when unknown.
    """

    def __init__(self, message: str, error_code: int = 0) -> None:
        """Initialize the error.

        Args:
            message: Validation message reported by the server.
            error_code: Server-side validation error code.
        """
        super().__init__(message)
        self.error_code = error_code


class InvalidInputError(AuthenticationError):
    """Submitted credentials failed local validation.

    Attributes:
        field: Name of the offending field.
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize the error.

        Args:
            field: Name of the offending field.
            message: Human-readable error message.
        """
        super().__init__(message)
        self.field = field


class TokenStoreError(Exception):
    """Raised when the token store is used before it is opened."""

    def __init__(self, message: str = "Token store not connected") -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
