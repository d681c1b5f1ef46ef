"""Article retrieval."""

from haven_client.decoding.feed import FeedShape, decode_feed
from haven_client.decoding.records import ArticleRecord
from haven_client.domain.mappers import map_article
from haven_client.domain.models import Article
from haven_client.services.base import BaseService
from haven_client.services.constants import ARTICLES_ENDPOINT


ARTICLE_SHAPE = FeedShape(
    name="articles", record_model=ArticleRecord, primary_key="articles"
)


class ArticleService(BaseService):
    """Fetches articles, optionally restricted to one category."""

    service_name = "articles"

    def fetch_articles(self) -> list[Article]:
        """Fetch every article.

        Raises:
            NetworkError: On request or decoding failure.
        """
        return self._fetch(None)

    def fetch_articles_by_category(self, category_id: int) -> list[Article]:
        """Fetch the articles of one category.

        Args:
            category_id: Category to filter by, server side.

        Raises:
            NetworkError: On request or decoding failure.
        """
        return self._fetch({"categoryId": category_id})

    def _fetch(self, params: dict[str, object] | None) -> list[Article]:
        body = self._request(ARTICLES_ENDPOINT, params=params)
        decoded = decode_feed(body, ARTICLE_SHAPE)
        articles = [map_article(record) for record in decoded.records]
        self._log.info(
            "articles_fetched",
            count=len(articles),
            category_id=None if params is None else params["categoryId"],
        )
        return articles
