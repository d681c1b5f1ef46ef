"""Unit tests for paginated feed behavior."""

import pytest

from haven_client.feeds import FeedSnapshot, FeedState, NotificationsFeed, QuotesFeed
from haven_client.feeds.messages import NO_CONNECTION_MESSAGE, SERVER_ERROR_MESSAGE
from haven_client.transport import NetworkError, NetworkErrorKind
from tests.helpers.feeds import (
    FakeNotificationService,
    FakeQuoteService,
    make_notification,
    page_of,
)
from tests.helpers.scheduler import ManualScheduler


class StubRng:
    """Returns queued values from randint."""

    def __init__(self, *values: int) -> None:
        self.values = list(values)

    def randint(self, low: int, high: int) -> int:
        return self.values.pop(0)


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Create a manual scheduler."""
    return ManualScheduler()


@pytest.fixture
def service() -> FakeQuoteService:
    """Create a scripted quote service."""
    return FakeQuoteService()


@pytest.fixture
def feed(service: FakeQuoteService, scheduler: ManualScheduler) -> QuotesFeed:
    """Create a quotes feed with a fixed seed."""
    return QuotesFeed(service, scheduler, seed=42, page_size=20)


def ids(feed: QuotesFeed | NotificationsFeed) -> list[int]:
    """Ids of the accumulated items."""
    return [item.id for item in feed.items]


def requested_pages(
    service: FakeQuoteService | FakeNotificationService,
) -> list[object]:
    """Pages requested so far."""
    return [call["page"] for call in service.calls]


class TestLoadFirst:
    """Tests for first-page loading."""

    @pytest.mark.unit
    def test_loads_first_page(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """The first page replaces the items and sets pagination."""
        service.queue(1, page_of([1, 2, 3], 1, 3))

        feed.load_first()
        assert feed.state is FeedState.LOADING_FIRST_PAGE
        assert feed.cursor.fetch_in_flight is True

        scheduler.run_until_idle()

        assert ids(feed) == [1, 2, 3]
        assert feed.state is FeedState.LOADED
        assert (feed.cursor.current_page, feed.cursor.total_pages) == (1, 3)
        assert feed.cursor.fetch_in_flight is False
        assert service.calls == [
            {"categories": [21], "page": 1, "page_size": 20, "seed": 42}
        ]

    @pytest.mark.unit
    def test_repeat_load_while_loading_is_dropped(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """A second load during the first-page fetch sends nothing."""
        service.queue(1, page_of([1, 2], 1, 1))

        feed.load_first()
        generation = feed.cursor.generation
        feed.load_first()
        scheduler.run_until_idle()

        assert len(service.calls) == 1
        assert feed.cursor.generation == generation
        assert ids(feed) == [1, 2]

    @pytest.mark.unit
    def test_forced_load_while_loading_restarts(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """A forced load discards the running fetch and starts over."""
        service.queue(1, page_of([1], 1, 1), page_of([2], 1, 1))

        feed.load_first()
        feed.load_first(force_refresh=True)
        scheduler.run_until_idle()

        assert len(service.calls) == 2
        assert ids(feed) == [2]

    @pytest.mark.unit
    def test_served_from_cache(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """A second load without force uses the cached items."""
        service.queue(1, page_of([1], 1, 1))
        feed.load_first()
        scheduler.run_until_idle()

        feed.load_first()

        assert scheduler.background == []
        assert len(service.calls) == 1

    @pytest.mark.unit
    def test_refresh_reloads(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """refresh discards the items and fetches page 1 again."""
        service.queue(1, page_of([1, 2], 1, 1), page_of([3], 1, 1))
        feed.load_first()
        scheduler.run_until_idle()

        feed.refresh()
        assert feed.items == ()
        scheduler.run_until_idle()

        assert ids(feed) == [3]

    @pytest.mark.unit
    def test_duplicates_within_page_dropped(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """Repeated ids within one page are kept once."""
        service.queue(1, page_of([1, 1, 2], 1, 1))

        feed.load_first()
        scheduler.run_until_idle()

        assert ids(feed) == [1, 2]


class TestFirstPageRetry:
    """Tests for the single automatic first-page retry."""

    @pytest.mark.unit
    def test_retries_once_after_delay(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """A failed first page is retried once after three seconds."""
        service.queue(
            1,
            NetworkError(NetworkErrorKind.SERVER_ERROR),
            page_of([1, 2], 1, 1),
        )

        feed.load_first()
        scheduler.run_until_idle()

        assert feed.state is FeedState.FAILED
        assert feed.error_message == SERVER_ERROR_MESSAGE
        assert [t.due for t in scheduler.pending_timers] == [3.0]

        scheduler.advance(2.5)
        assert len(service.calls) == 1

        scheduler.advance(0.5)
        assert ids(feed) == [1, 2]
        assert feed.state is FeedState.LOADED
        assert feed.error is None

    @pytest.mark.unit
    def test_no_second_automatic_retry(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """A failed automatic retry is not retried again."""
        service.queue(1, NetworkError(NetworkErrorKind.TIMEOUT_ERROR))

        feed.load_first()
        scheduler.run_until_idle()
        scheduler.advance(3.0)

        assert len(service.calls) == 2
        assert scheduler.pending_timers == []
        assert feed.error_message == NO_CONNECTION_MESSAGE

        scheduler.advance(60.0)
        assert len(service.calls) == 2

    @pytest.mark.unit
    def test_refresh_cancels_pending_retry(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """A manual refresh cancels the scheduled automatic retry."""
        service.queue(
            1, NetworkError(NetworkErrorKind.SERVER_ERROR), page_of([5], 1, 1)
        )
        feed.load_first()
        scheduler.run_until_idle()

        feed.refresh()
        scheduler.run_until_idle()
        scheduler.advance(5.0)

        assert ids(feed) == [5]
        assert len(service.calls) == 2


class TestLoadNext:
    """Tests for trailing-window pagination."""

    @pytest.fixture
    def loaded(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> QuotesFeed:
        """A feed holding page 1 of 3 with ids 1..10."""
        service.queue(1, page_of(list(range(1, 11)), 1, 3))
        feed.load_first()
        scheduler.run_until_idle()
        return feed

    @pytest.mark.unit
    def test_anchor_outside_window_does_nothing(
        self, loaded: QuotesFeed, service: FakeQuoteService
    ) -> None:
        """Anchors before the trailing window never trigger."""
        loaded.load_next_if_needed(1)
        loaded.load_next_if_needed(7)

        assert requested_pages(service) == [1]

    @pytest.mark.unit
    def test_anchor_in_window_appends_next_page(
        self,
        loaded: QuotesFeed,
        service: FakeQuoteService,
        scheduler: ManualScheduler,
    ) -> None:
        """Anchors in the last three positions load the next page."""
        service.queue(2, page_of(list(range(11, 21)), 2, 3))

        loaded.load_next_if_needed(8)
        assert loaded.state is FeedState.LOADING_NEXT_PAGE
        scheduler.run_until_idle()

        assert ids(loaded) == list(range(1, 21))
        assert loaded.cursor.current_page == 2
        assert requested_pages(service) == [1, 2]

    @pytest.mark.unit
    def test_overlapping_triggers_dropped(
        self,
        loaded: QuotesFeed,
        service: FakeQuoteService,
        scheduler: ManualScheduler,
    ) -> None:
        """Only one fetch runs at a time."""
        service.queue(2, page_of([11], 2, 3))

        loaded.load_next_if_needed(9)
        loaded.load_next_if_needed(10)
        scheduler.run_until_idle()

        assert requested_pages(service) == [1, 2]

    @pytest.mark.unit
    def test_unknown_anchor_triggers_once(
        self,
        loaded: QuotesFeed,
        service: FakeQuoteService,
        scheduler: ManualScheduler,
    ) -> None:
        """An anchor not in the items triggers, but not twice."""
        service.queue(2, page_of([11], 2, 3))

        loaded.load_next_if_needed(999)
        scheduler.run_until_idle()
        loaded.load_next_if_needed(999)

        assert requested_pages(service) == [1, 2]

    @pytest.mark.unit
    def test_duplicate_page_cascades(
        self,
        loaded: QuotesFeed,
        service: FakeQuoteService,
        scheduler: ManualScheduler,
    ) -> None:
        """A page of known items advances the cursor and fetches on."""
        service.queue(2, page_of([9, 10], 2, 3))
        service.queue(3, page_of([11, 12], 3, 3))

        loaded.load_next_if_needed(10)
        scheduler.run_until_idle()

        assert ids(loaded) == list(range(1, 11))
        assert loaded.cursor.current_page == 2
        assert requested_pages(service) == [1, 2]

        scheduler.advance(0.5)

        assert ids(loaded) == list(range(1, 13))
        assert loaded.cursor.current_page == 3
        assert requested_pages(service) == [1, 2, 3]

    @pytest.mark.unit
    def test_empty_page_ends_feed(
        self,
        loaded: QuotesFeed,
        service: FakeQuoteService,
        scheduler: ManualScheduler,
    ) -> None:
        """An empty page marks the end of the feed."""
        service.queue(2, page_of([], 2, 3))

        loaded.load_next_if_needed(10)
        scheduler.run_until_idle()
        loaded.load_next_if_needed(9)

        assert loaded.cursor.has_more is False
        assert requested_pages(service) == [1, 2]

    @pytest.mark.unit
    def test_failure_keeps_items(
        self,
        loaded: QuotesFeed,
        service: FakeQuoteService,
        scheduler: ManualScheduler,
    ) -> None:
        """A failed next page keeps accumulated items and schedules nothing."""
        service.queue(2, NetworkError(NetworkErrorKind.CONNECTION_ERROR))

        loaded.load_next_if_needed(10)
        scheduler.run_until_idle()

        assert ids(loaded) == list(range(1, 11))
        assert loaded.state is FeedState.FAILED
        assert loaded.error_message == NO_CONNECTION_MESSAGE
        assert loaded.cursor.fetch_in_flight is False
        assert scheduler.pending_timers == []

    @pytest.mark.unit
    def test_total_pages_never_below_current(
        self,
        loaded: QuotesFeed,
        service: FakeQuoteService,
        scheduler: ManualScheduler,
    ) -> None:
        """A server reporting fewer pages cannot move the cursor backwards."""
        service.queue(2, page_of([11], 1, 1))

        loaded.load_next_if_needed(10)
        scheduler.run_until_idle()

        assert loaded.cursor.current_page == 2
        assert loaded.cursor.total_pages == 2


class TestLastPage:
    """Tests at the end of the feed."""

    @pytest.mark.unit
    def test_page_three_of_three_does_not_fetch(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """No fetch is issued once the last page is loaded."""
        service.queue(1, page_of([1, 2, 3], 3, 3))
        feed.load_first()
        scheduler.run_until_idle()

        feed.load_next_if_needed(3)
        feed.load_next_if_needed(404)

        assert scheduler.background == []
        assert requested_pages(service) == [1]

    @pytest.mark.unit
    def test_force_load_reopens_last_page(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """force_load_next refetches the last page and appends new items."""
        service.queue(1, page_of([1, 2, 3], 1, 2))
        service.queue(2, page_of([4], 2, 2), page_of([4, 5], 2, 2))
        feed.load_first()
        scheduler.run_until_idle()
        feed.load_next_if_needed(3)
        scheduler.run_until_idle()

        feed.force_load_next()
        scheduler.run_until_idle()

        assert requested_pages(service) == [1, 2, 2]
        assert ids(feed) == [1, 2, 3, 4, 5]
        assert feed.cursor.current_page == 2

    @pytest.mark.unit
    def test_force_load_never_requests_page_zero(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """On a single-page feed the page never drops below 1."""
        service.queue(1, page_of([1, 2], 1, 1))
        service.queue(2, page_of([3], 2, 2))
        feed.load_first()
        scheduler.run_until_idle()

        feed.force_load_next()
        assert feed.cursor.current_page == 1
        scheduler.run_until_idle()

        assert requested_pages(service) == [1, 2]
        assert ids(feed) == [1, 2, 3]

    @pytest.mark.unit
    def test_force_load_waits_for_in_flight(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """A forced load during a fetch reschedules itself."""
        service.queue(1, page_of([1, 2, 3], 1, 3))
        service.queue(2, page_of([4], 2, 3))
        service.queue(3, page_of([5], 3, 3))
        feed.load_first()
        scheduler.run_until_idle()

        feed.load_next_if_needed(3)
        feed.force_load_next()
        assert [t.due for t in scheduler.pending_timers] == [1.0]

        scheduler.run_until_idle()
        scheduler.advance(1.0)

        assert requested_pages(service) == [1, 2, 3]
        assert ids(feed) == [1, 2, 3, 4, 5]

    @pytest.mark.unit
    def test_force_load_before_anything_loads_first(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """Forcing an idle feed loads its first page."""
        service.queue(1, page_of([1], 1, 1))

        feed.force_load_next()
        scheduler.run_until_idle()

        assert ids(feed) == [1]


class TestQuotesParameters:
    """Tests for category and seed handling."""

    @pytest.mark.unit
    def test_change_category_drops_stale_result(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """Results requested before a category change are discarded."""
        service.queue(1, page_of([1, 2], 1, 1), page_of([7, 8], 1, 1))

        feed.load_first()
        feed.change_category(5)
        scheduler.run_until_idle()

        assert [call["categories"] for call in service.calls] == [[21], [5]]
        assert ids(feed) == [7, 8]
        assert feed.category_id == 5

    @pytest.mark.unit
    def test_reshuffle_uses_new_seed(
        self, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """reshuffle reloads with a freshly drawn seed."""
        rng = StubRng(111, 222)
        feed = QuotesFeed(service, scheduler, rng=rng)  # type: ignore[arg-type]
        service.queue(1, page_of([1], 1, 1))

        feed.load_first()
        scheduler.run_until_idle()
        feed.reshuffle()
        scheduler.run_until_idle()

        assert [call["seed"] for call in service.calls] == [111, 222]
        assert feed.seed == 222


class TestSubscribers:
    """Tests for snapshot delivery."""

    @pytest.mark.unit
    def test_snapshots_follow_state(
        self, feed: QuotesFeed, service: FakeQuoteService, scheduler: ManualScheduler
    ) -> None:
        """Subscribers see loading then loaded snapshots."""
        seen: list[FeedSnapshot] = []
        unsubscribe = feed.subscribe(seen.append)
        service.queue(1, page_of([1], 1, 2))

        feed.load_first()
        scheduler.run_until_idle()
        unsubscribe()
        feed.refresh()

        assert [s.state for s in seen] == [
            FeedState.LOADING_FIRST_PAGE,
            FeedState.LOADED,
        ]
        assert seen[0].is_loading is True
        assert seen[1].has_more is True


class TestNotificationsFeed:
    """Tests for the notification feed's wider window."""

    @pytest.mark.unit
    def test_trailing_window_of_five(self, scheduler: ManualScheduler) -> None:
        """Notifications prefetch within the last five items."""
        service = FakeNotificationService()
        service.queue(1, page_of(list(range(1, 11)), 1, 2, factory=make_notification))
        service.queue(2, page_of([11], 2, 2, factory=make_notification))
        feed = NotificationsFeed(
            service,  # type: ignore[arg-type]
            scheduler,
            page_size=10,
        )
        feed.load_first()
        scheduler.run_until_idle()

        feed.load_next_if_needed(5)
        assert requested_pages(service) == [1]

        feed.load_next_if_needed(6)
        scheduler.run_until_idle()

        assert requested_pages(service) == [1, 2]
        assert ids(feed) == list(range(1, 12))
        assert service.calls[0]["page_size"] == 10
