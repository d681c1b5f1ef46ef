"""Pure mapping from wire records to domain entities."""

from haven_client.decoding.models import DecodedFeed
from haven_client.decoding.records import (
    ArticleCategoryRecord,
    ArticleRecord,
    NotificationRecord,
    QuoteRecord,
)
from haven_client.decoding.timestamps import normalize_timestamp
from haven_client.domain.models import (
    Article,
    ArticleCategory,
    FeedPage,
    Notification,
    Quote,
)


def map_category(record: ArticleCategoryRecord) -> ArticleCategory:
    """Map a category record to its entity."""
    return ArticleCategory(id=record.id, name=record.name, image_path=record.image_path)


def map_article(record: ArticleRecord) -> Article:
    """Map an article record, parsing its publish date.

    An unparseable publish date is replaced by the current time.
    """
    return Article(
        id=record.id,
        title=record.title,
        slug=record.slug,
        content=record.content,
        content_preview=record.content_preview,
        publish_date=normalize_timestamp(
            record.publish_date, field="article.publish_date"
        ),
        category_id=record.category_id,
        image_path=record.image_path,
    )


def map_quote(record: QuoteRecord) -> Quote:
    """Map a quote record; a missing writer becomes an empty string."""
    return Quote(
        id=record.id,
        content=record.quote,
        writer=record.writer or "",
        media_url=record.image_url,
        category_id=record.quote_category,
        is_liked=record.is_liked,
    )


def map_notification(record: NotificationRecord) -> Notification:
    """Map a notification record."""
    return Notification(
        id=record.id,
        title=record.title,
        content=record.content,
        timestamp=record.timestamp,
        screen_code=record.screen_code,
    )


def map_quote_page(decoded: DecodedFeed[QuoteRecord]) -> FeedPage[Quote]:
    """Map a decoded quotes response to a page of quotes."""
    return FeedPage(
        items=[map_quote(record) for record in decoded.records],
        pagination=decoded.pagination,
        total_count=decoded.total_count,
    )


def map_notification_page(
    decoded: DecodedFeed[NotificationRecord],
) -> FeedPage[Notification]:
    """Map a decoded notifications response to a page of notifications."""
    return FeedPage(
        items=[map_notification(record) for record in decoded.records],
        pagination=decoded.pagination,
        total_count=decoded.total_count,
    )
