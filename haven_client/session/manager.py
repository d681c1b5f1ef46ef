"""Sign-in lifecycle: login, registration, logout and session restore."""

import re

import structlog

from haven_client.feeds.messages import user_message
from haven_client.services.authentication import AuthenticationService
from haven_client.session.context import SessionContext
from haven_client.session.errors import AuthenticationError, InvalidInputError
from haven_client.transport.errors import NetworkError


logger = structlog.get_logger()

EMAIL_PATTERN = re.compile(r"^[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}$")
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
SHORT_PASSWORD_MESSAGE = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
SHORT_NAME_MESSAGE = f"Name must be at least {MIN_NAME_LENGTH} characters"


def validate_email(email: str) -> None:
    """Raise InvalidInputError unless the email looks deliverable."""
    if not EMAIL_PATTERN.match(email):
        raise InvalidInputError("email", INVALID_EMAIL_MESSAGE)


def validate_password(password: str) -> None:
    """Raise InvalidInputError if the password is too short."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError("password", SHORT_PASSWORD_MESSAGE)


def validate_name(name: str) -> None:
    """Raise InvalidInputError if the name is too short."""
    if len(name.strip()) < MIN_NAME_LENGTH:
        raise InvalidInputError("name", SHORT_NAME_MESSAGE)


class SessionManager:
    """Tracks whether the user is signed in.

    Credentials are validated locally before any request. Successful
    logins and registrations persist the token through the session
    context; failures leave a display message in ``error_message``.
    """

    def __init__(self, service: AuthenticationService, session: SessionContext) -> None:
        """Initialize the session manager.

        Args:
            service: Authentication service.
            session: Session context persisting the token.
        """
        self._service = service
        self._session = session
        self._is_authenticated = False
        self._error_message: str | None = None
        self._log = logger.bind(component="session", subcomponent="manager")

    @property
    def is_authenticated(self) -> bool:
        """Whether a session token is held."""
        return self._is_authenticated

    @property
    def token(self) -> str | None:
        """The stored session token."""
        return self._session.token

    @property
    def error_message(self) -> str | None:
        """Display message of the last failed operation."""
        return self._error_message

    def restore(self) -> bool:
        """Restore the session from the stored token.

        Returns:
            True if a token was found.
        """
        self._is_authenticated = self._session.has_token
        self._log.info("session_restored", is_authenticated=self._is_authenticated)
        return self._is_authenticated

    def login(self, email: str, password: str) -> bool:
        """Sign in with email and password.

        Returns:
            True on success; otherwise ``error_message`` is set.
        """
        self._error_message = None
        try:
            validate_email(email)
            validate_password(password)
            token = self._service.login(email, password)
        except (AuthenticationError, NetworkError) as error:
            return self._fail("login", error)
        return self._succeed("login", token)

    def register(self, name: str, email: str, password: str) -> bool:
        """Create an account and sign in.

        Returns:
            True on success; otherwise ``error_message`` is set.
        """
        self._error_message = None
        try:
            validate_name(name)
            validate_email(email)
            validate_password(password)
            token = self._service.register(name, email, password)
        except (AuthenticationError, NetworkError) as error:
            return self._fail("register", error)
        return self._succeed("register", token)

    def logout(self) -> None:
        """Forget the stored token."""
        self._session.clear()
        self._is_authenticated = False
        self._error_message = None
        self._log.info("logged_out")

    def _succeed(self, operation: str, token: str) -> bool:
        self._session.save_token(token)
        self._is_authenticated = True
        self._log.info("signed_in", operation=operation)
        return True

    def _fail(self, operation: str, error: AuthenticationError | NetworkError) -> bool:
        self._error_message = user_message(error)
        self._is_authenticated = False
        self._log.warning(
            "sign_in_failed",
            operation=operation,
            error_type=type(error).__name__,
            error=str(error),
        )
        return False
