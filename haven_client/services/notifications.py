"""Paginated notification retrieval."""

from haven_client.decoding.feed import FeedShape, decode_feed
from haven_client.decoding.records import NotificationRecord
from haven_client.domain.mappers import map_notification_page
from haven_client.domain.models import FeedPage, Notification
from haven_client.services.base import BaseService
from haven_client.services.constants import NOTIFICATIONS_ENDPOINT


NOTIFICATION_SHAPE = FeedShape(
    name="notifications",
    record_model=NotificationRecord,
    primary_key="notifications",
)


class NotificationService(BaseService):
    """Fetches pages of the signed-in user's notifications."""

    service_name = "notifications"

    def fetch_notifications_page(
        self, page: int, page_size: int
    ) -> FeedPage[Notification]:
        """Fetch one page of notifications.

        Args:
            page: 1-based page number.
            page_size: Requested number of notifications.

        Raises:
            NetworkError: On request or decoding failure.
        """
        body = self._request(
            NOTIFICATIONS_ENDPOINT,
            params={"page": page, "pageSize": page_size},
            authenticated=True,
        )
        result = map_notification_page(decode_feed(body, NOTIFICATION_SHAPE))
        self._log.info(
            "notifications_page_fetched",
            page=page,
            count=len(result.items),
            total_pages=result.pagination.total_pages,
        )
        return result
