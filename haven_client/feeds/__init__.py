"""Paginated feeds, cached catalogs and their scheduling.

This module provides:
- ``QuotesFeed`` and ``NotificationsFeed`` for infinite scrolling
- ``ArticleCatalog`` and ``CategoryCatalog`` with cache-first loading
- ``Scheduler`` implementations delivering results to one context
- ``user_message`` mapping errors to display text
"""

from haven_client.feeds.catalog import (
    ArticleCatalog,
    CachedCatalog,
    CatalogSnapshot,
    CategoryCatalog,
)
from haven_client.feeds.cursor import FeedCursor
from haven_client.feeds.feed import FeedSnapshot, PaginatedFeed
from haven_client.feeds.messages import user_message
from haven_client.feeds.notifications import NotificationsFeed
from haven_client.feeds.quotes import QuotesFeed
from haven_client.feeds.scheduler import Cancellable, Scheduler, ThreadedScheduler
from haven_client.feeds.state_machine import (
    FeedState,
    FeedStateMachine,
    FeedStateTransitionError,
)


__all__ = [
    # Feeds
    "PaginatedFeed",
    "FeedSnapshot",
    "FeedCursor",
    "QuotesFeed",
    "NotificationsFeed",
    # Catalogs
    "CachedCatalog",
    "CatalogSnapshot",
    "ArticleCatalog",
    "CategoryCatalog",
    # State
    "FeedState",
    "FeedStateMachine",
    "FeedStateTransitionError",
    # Scheduling
    "Scheduler",
    "Cancellable",
    "ThreadedScheduler",
    # Messages
    "user_message",
]
