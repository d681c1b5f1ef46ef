"""Tolerant decoding of backend responses.

This module provides:
- ``decode_feed`` trying several response shapes in a fixed order
- Pagination and total-count extraction from varying envelopes
- Best-effort timestamp normalization
- Pydantic wire records for every backend payload
"""

from haven_client.decoding.feed import FeedShape, decode_feed, decode_object
from haven_client.decoding.models import DecodedFeed, PaginationInfo
from haven_client.decoding.pagination import extract_pagination, extract_total_count
from haven_client.decoding.records import (
    ArticleCategoryRecord,
    ArticleRecord,
    AuthenticationResponse,
    LoginRequest,
    NotificationRecord,
    QuoteRecord,
    QuotesRequest,
    RegistrationRequest,
    ValidationResult,
)
from haven_client.decoding.timestamps import normalize_timestamp, parse_timestamp


__all__ = [
    # Decoder
    "FeedShape",
    "DecodedFeed",
    "PaginationInfo",
    "decode_feed",
    "decode_object",
    "extract_pagination",
    "extract_total_count",
    # Timestamps
    "parse_timestamp",
    "normalize_timestamp",
    # Records
    "ArticleRecord",
    "ArticleCategoryRecord",
    "QuoteRecord",
    "NotificationRecord",
    "AuthenticationResponse",
    "ValidationResult",
    "LoginRequest",
    "RegistrationRequest",
    "QuotesRequest",
]
