"""Paginated quote retrieval."""

from haven_client.decoding.feed import FeedShape, decode_feed
from haven_client.decoding.records import QuoteRecord, QuotesRequest
from haven_client.domain.mappers import map_quote_page
from haven_client.domain.models import FeedPage, Quote
from haven_client.services.base import BaseService
from haven_client.services.constants import QUOTES_ENDPOINT
from haven_client.transport.models import HttpMethod


QUOTE_SHAPE = FeedShape(name="quotes", record_model=QuoteRecord, primary_key="quotes")


class QuoteService(BaseService):
    """Fetches seeded, shuffled pages of quotes."""

    service_name = "quotes"

    def fetch_quotes_page(
        self, categories: list[int], page: int, page_size: int, seed: int
    ) -> FeedPage[Quote]:
        """Fetch one page of quotes.

        The seed keeps the server's shuffle order stable across pages of
        the same browsing session.

        Args:
            categories: Category ids to draw quotes from.
            page: 1-based page number.
            page_size: Requested number of quotes.
            seed: Shuffle seed.

        Raises:
            NetworkError: On request or decoding failure.
        """
        request = QuotesRequest(
            categories=categories, page=page, page_size=page_size, seed=seed
        )
        body = self._request(
            QUOTES_ENDPOINT,
            method=HttpMethod.POST,
            params=request.model_dump(by_alias=True),
            authenticated=True,
        )
        result = map_quote_page(decode_feed(body, QUOTE_SHAPE))
        self._log.info(
            "quotes_page_fetched",
            page=page,
            count=len(result.items),
            total_pages=result.pagination.total_pages,
            total_count=result.total_count,
        )
        return result
