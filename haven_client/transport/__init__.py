"""HTTP transport layer with typed errors and fixed-delay retries.

This module provides:
- ``ApiClient`` issuing requests against the backend base URL
- The ``NetworkErrorKind`` taxonomy raised as ``NetworkError``
- ``RetryPolicy`` retrying connection, timeout and server errors
- Connectivity probes, traffic redaction and metrics
"""

from haven_client.transport.client import ApiClient
from haven_client.transport.connectivity import ConnectivityProbe, StaticConnectivity
from haven_client.transport.errors import (
    RETRYABLE_KINDS,
    DecodingFailedError,
    HttpStatusError,
    NetworkError,
    NetworkErrorKind,
    RequestFailedError,
)
from haven_client.transport.metrics import TransportMetrics
from haven_client.transport.models import ClientConfig, HttpMethod
from haven_client.transport.redact import redact_headers, redact_params
from haven_client.transport.retry import RetryPolicy


__all__ = [
    # Client
    "ApiClient",
    "ClientConfig",
    "HttpMethod",
    # Connectivity
    "ConnectivityProbe",
    "StaticConnectivity",
    # Errors
    "NetworkError",
    "NetworkErrorKind",
    "HttpStatusError",
    "RequestFailedError",
    "DecodingFailedError",
    "RETRYABLE_KINDS",
    # Retry
    "RetryPolicy",
    # Metrics
    "TransportMetrics",
    # Redaction
    "redact_headers",
    "redact_params",
]
