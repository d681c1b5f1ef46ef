"""Data models for the transport layer."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from haven_client.settings import HavenSettings


class HttpMethod(str, Enum):
    """HTTP methods used by the client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ClientConfig(BaseModel):
    """Configuration for the HTTP transport.

    Built from ``HavenSettings`` for applications, or directly in tests.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: Annotated[str, Field(min_length=1)]
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "harmony-haven-client/0.1"
    )
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] | None = Field(
        default=None,
        description="Per-request timeout; None keeps the httpx default",
    )
    log_traffic: bool = Field(
        default=True, description="Log request and response details"
    )

    @classmethod
    def from_settings(cls, settings: HavenSettings) -> "ClientConfig":
        """Create a transport config from application settings.

        Args:
            settings: Loaded application settings.

        Returns:
            ClientConfig instance.
        """
        return cls(
            base_url=settings.base_url,
            user_agent=settings.user_agent,
            timeout_seconds=settings.request_timeout_seconds,
            log_traffic=settings.log_http_traffic,
        )
