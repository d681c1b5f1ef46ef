"""Article category retrieval."""

from haven_client.decoding.feed import FeedShape, decode_feed
from haven_client.decoding.records import ArticleCategoryRecord
from haven_client.domain.mappers import map_category
from haven_client.domain.models import ArticleCategory
from haven_client.services.base import BaseService
from haven_client.services.constants import CATEGORIES_ENDPOINT


CATEGORY_SHAPE = FeedShape(
    name="categories", record_model=ArticleCategoryRecord, primary_key="categories"
)


class CategoryService(BaseService):
    """Fetches the article categories."""

    service_name = "categories"

    def fetch_categories(self) -> list[ArticleCategory]:
        """Fetch every article category.

        Raises:
            NetworkError: On request or decoding failure.
        """
        body = self._request(CATEGORIES_ENDPOINT)
        decoded = decode_feed(body, CATEGORY_SHAPE)
        categories = [map_category(record) for record in decoded.records]
        self._log.info("categories_fetched", count=len(categories))
        return categories
