"""Session context read by authenticated requests at call time."""

from collections.abc import Callable

import structlog

from haven_client.session.store import KeyValueStore
from haven_client.transport.errors import NetworkError, NetworkErrorKind


logger = structlog.get_logger()

DEFAULT_TOKEN_KEY = "authToken"

TokenRefresher = Callable[[], str | None]


def bearer_value(token: str) -> str:
    """Authorization header value for a possibly empty token."""
    return f"Bearer {token}" if token else "Bearer"


class SessionContext:
    """Holds access to the persisted session token.

    The token is looked up on every call rather than cached, so a login
    or logout in one place is seen by every service sharing the context.
    An optional refresher is used once per request on 401 responses.
    """

    def __init__(
        self,
        store: KeyValueStore,
        token_key: str = DEFAULT_TOKEN_KEY,
        token_refresher: TokenRefresher | None = None,
    ) -> None:
        """Initialize the session context.

        Args:
            store: Key-value store holding the token.
            token_key: Key the token is stored under.
            token_refresher: Callable returning a fresh token, or None.
        """
        self._store = store
        self._token_key = token_key
        self._token_refresher = token_refresher
        self._log = logger.bind(component="session")

    @property
    def token(self) -> str | None:
        """The stored token, or None when signed out."""
        return self._store.get(self._token_key)

    @property
    def bearer_token(self) -> str:
        """The stored token, or an empty string when signed out."""
        return self.token or ""

    @property
    def has_token(self) -> bool:
        """Whether a non-empty token is stored."""
        return bool(self.token)

    @property
    def can_refresh(self) -> bool:
        """Whether a token refresher is configured."""
        return self._token_refresher is not None

    def authorization_header(self) -> dict[str, str]:
        """Build the bearer authorization header from the stored token.

        Signed out, the value is the bare scheme; header values may not end
        in whitespace.
        """
        return {"Authorization": bearer_value(self.bearer_token)}

    def save_token(self, token: str) -> None:
        """Persist a new session token."""
        self._store.set(self._token_key, token)
        self._log.info("session_token_saved")

    def clear(self) -> None:
        """Remove the persisted session token."""
        self._store.remove(self._token_key)
        self._log.info("session_token_cleared")

    def refresh(self) -> bool:
        """Attempt a single token refresh via the configured refresher.

        Returns:
            True if a new token was stored, False if no refresher is
            configured or it produced no token.

        Raises:
            NetworkError: UNAUTHORIZED if the refresher itself fails.
        """
        if self._token_refresher is None:
            return False

        self._log.info("session_token_refresh_attempt")
        try:
            token = self._token_refresher()
        except Exception as exc:
            self._log.warning("session_token_refresh_failed", error=str(exc))
            raise NetworkError(
                NetworkErrorKind.UNAUTHORIZED, f"Token refresh failed: {exc}"
            ) from exc

        if not token:
            self._log.warning("session_token_refresh_empty")
            return False

        self.save_token(token)
        self._log.info("session_token_refreshed")
        return True
