"""Infinite notification feed."""

from haven_client.domain.models import FeedPage, Notification
from haven_client.feeds.feed import PaginatedFeed
from haven_client.feeds.scheduler import Scheduler
from haven_client.services.notifications import NotificationService


class NotificationsFeed(PaginatedFeed[Notification]):
    """Paginated notifications of the signed-in user."""

    feed_name = "notifications"
    trailing_window = 5

    def __init__(
        self,
        service: NotificationService,
        scheduler: Scheduler,
        **kwargs: float,
    ) -> None:
        super().__init__(scheduler, **kwargs)  # type: ignore[arg-type]
        self._service = service

    def fetch_page(
        self, page: int, page_size: int, **params: object
    ) -> FeedPage[Notification]:
        return self._service.fetch_notifications_page(page=page, page_size=page_size)
