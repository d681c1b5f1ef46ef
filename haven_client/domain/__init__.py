"""Domain entities and record mappers."""

from haven_client.domain.mappers import (
    map_article,
    map_category,
    map_notification,
    map_notification_page,
    map_quote,
    map_quote_page,
)
from haven_client.domain.models import (
    VIDEO_EXTENSIONS,
    Article,
    ArticleCategory,
    FeedPage,
    Notification,
    Quote,
)


__all__ = [
    # Entities
    "Article",
    "ArticleCategory",
    "Quote",
    "Notification",
    "FeedPage",
    "VIDEO_EXTENSIONS",
    # Mappers
    "map_article",
    "map_category",
    "map_quote",
    "map_notification",
    "map_quote_page",
    "map_notification_page",
]
