"""Infinite quote feed filtered by category and shuffled by seed."""

import random

from haven_client.domain.models import FeedPage, Quote
from haven_client.feeds.feed import PaginatedFeed
from haven_client.feeds.scheduler import Scheduler
from haven_client.services.quotes import QuoteService


DEFAULT_QUOTE_CATEGORY = 21
SEED_RANGE = (1, 100_000)


class QuotesFeed(PaginatedFeed[Quote]):
    """Paginated quotes for one category.

    The shuffle seed is fixed for a browsing session so that pages do not
    overlap; ``reshuffle`` starts a new session with a fresh seed.
    """

    feed_name = "quotes"
    trailing_window = 3

    def __init__(
        self,
        service: QuoteService,
        scheduler: Scheduler,
        category_id: int = DEFAULT_QUOTE_CATEGORY,
        seed: int | None = None,
        rng: random.Random | None = None,
        **kwargs: float,
    ) -> None:
        """Initialize the quotes feed.

        Args:
            service: Quote service used for fetching.
            scheduler: Background and callback scheduler.
            category_id: Category to draw quotes from.
            seed: Initial shuffle seed; random when omitted.
            rng: Random source for seeds.
            **kwargs: Page size and delays, see ``PaginatedFeed``.
        """
        super().__init__(scheduler, **kwargs)  # type: ignore[arg-type]
        self._service = service
        self._rng = rng or random.Random()  # noqa: S311
        self._category_id = category_id
        self._seed = seed if seed is not None else self._new_seed()

    @property
    def category_id(self) -> int:
        """Selected category."""
        return self._category_id

    @property
    def seed(self) -> int:
        """Shuffle seed of the current browsing session."""
        return self._seed

    def request_params(self) -> dict[str, object]:
        return {"category_id": self._category_id, "seed": self._seed}

    def fetch_page(
        self, page: int, page_size: int, **params: object
    ) -> FeedPage[Quote]:
        return self._service.fetch_quotes_page(
            categories=[int(params["category_id"])],  # type: ignore[call-overload]
            page=page,
            page_size=page_size,
            seed=int(params["seed"]),  # type: ignore[call-overload]
        )

    def change_category(self, category_id: int) -> None:
        """Switch category, discarding loaded quotes."""
        self._log.info(
            "category_changed",
            old_category=self._category_id,
            new_category=category_id,
        )
        self._category_id = category_id
        self.load_first(force_refresh=True)

    def reshuffle(self) -> None:
        """Reload the first page under a new seed."""
        old_seed = self._seed
        self._seed = self._new_seed()
        self._log.info("quotes_reshuffled", old_seed=old_seed, new_seed=self._seed)
        self.load_first(force_refresh=True)

    def _new_seed(self) -> int:
        return self._rng.randint(*SEED_RANGE)
