"""Session token storage and access.

``SessionManager`` lives in ``haven_client.session.manager``; it depends
on the service layer, which itself depends on ``SessionContext``.
"""

from haven_client.session.context import DEFAULT_TOKEN_KEY, SessionContext
from haven_client.session.errors import (
    AuthenticationError,
    AuthenticationRejectedError,
    InvalidInputError,
    MissingTokenError,
    TokenStoreError,
)
from haven_client.session.store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqliteKeyValueStore,
)


__all__ = [
    # Context
    "SessionContext",
    "DEFAULT_TOKEN_KEY",
    # Stores
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    # Errors
    "AuthenticationError",
    "AuthenticationRejectedError",
    "InvalidInputError",
    "MissingTokenError",
    "TokenStoreError",
]
