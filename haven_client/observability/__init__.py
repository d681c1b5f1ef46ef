"""Observability module for logging."""

from haven_client.observability.logging import (
    bind_invocation_context,
    clear_invocation_context,
    configure_logging,
)


__all__ = [
    "bind_invocation_context",
    "clear_invocation_context",
    "configure_logging",
]
