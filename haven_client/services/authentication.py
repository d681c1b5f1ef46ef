"""Login and registration against the authentication endpoints."""

from haven_client.decoding.feed import decode_object
from haven_client.decoding.records import (
    AuthenticationResponse,
    LoginRequest,
    RegistrationRequest,
)
from haven_client.services.base import BaseService
from haven_client.services.constants import LOGIN_ENDPOINT, REGISTER_ENDPOINT
from haven_client.session.errors import AuthenticationRejectedError, MissingTokenError
from haven_client.transport.models import HttpMethod


GENERIC_AUTH_FAILURE = "Authentication failed"


class AuthenticationService(BaseService):
    """Exchanges credentials for a session token.

    These endpoints never carry a bearer token.
    """

    service_name = "authentication"

    def login(self, email: str, password: str) -> str:
        """Authenticate an existing user.

        Args:
            email: Account email.
            password: Account password.

        Returns:
            The session token.

        Raises:
            MissingTokenError: Authenticated without a token.
            AuthenticationRejectedError: Credentials or form rejected.
            NetworkError: On request or decoding failure.
        """
        request = LoginRequest(email=email, password=password)
        body = self._request(
            LOGIN_ENDPOINT, method=HttpMethod.POST, params=request.model_dump()
        )
        return self._token_from(decode_object(body, AuthenticationResponse), "login")

    def register(self, name: str, email: str, password: str) -> str:
        """Register a new user and sign them in.

        Args:
            name: Display name.
            email: Account email.
            password: Account password.

        Returns:
            The session token.

        Raises:
            MissingTokenError: Registered without a token.
            AuthenticationRejectedError: Form rejected.
            NetworkError: On request or decoding failure.
        """
        request = RegistrationRequest(name=name, email=email, password=password)
        body = self._request(
            REGISTER_ENDPOINT, method=HttpMethod.POST, params=request.model_dump()
        )
        return self._token_from(
            decode_object(body, AuthenticationResponse), "register"
        )

    def _token_from(self, response: AuthenticationResponse, operation: str) -> str:
        if response.is_authenticated and response.jwt:
            self._log.info("authentication_succeeded", operation=operation)
            return response.jwt

        if response.is_authenticated:
            self._log.error("authentication_token_missing", operation=operation)
            raise MissingTokenError

        form = response.form_validation_result
        credentials = response.credentials_validation_result
        if not form.is_valid and form.error_message:
            message, code = form.error_message, form.error_code
        elif credentials is not None and credentials.error_message:
            message, code = credentials.error_message, credentials.error_code
        else:
            message, code = GENERIC_AUTH_FAILURE, 0

        self._log.warning(
            "authentication_rejected",
            operation=operation,
            error_code=code,
        )
        raise AuthenticationRejectedError(message, error_code=code)
