"""Generic paginated feed with deduplication and guarded scheduling."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

import structlog

from haven_client.domain.models import FeedPage
from haven_client.feeds.cursor import FeedCursor
from haven_client.feeds.messages import user_message
from haven_client.feeds.scheduler import Callback, Cancellable, Scheduler
from haven_client.feeds.state_machine import FeedState, FeedStateMachine
from haven_client.transport.errors import NetworkError, NetworkErrorKind


logger = structlog.get_logger()


class Identified(Protocol):
    """Entity with an integer id."""

    @property
    def id(self) -> int: ...


T = TypeVar("T", bound=Identified)


@dataclass(frozen=True)
class FeedSnapshot(Generic[T]):
    """Immutable view of a feed handed to subscribers."""

    items: tuple[T, ...]
    state: FeedState
    current_page: int
    total_pages: int
    error_message: str | None = None
    error: NetworkError | None = None

    @property
    def is_loading(self) -> bool:
        """Whether a page request is in flight."""
        return self.state in (
            FeedState.LOADING_FIRST_PAGE,
            FeedState.LOADING_NEXT_PAGE,
        )

    @property
    def has_more(self) -> bool:
        """Whether further pages are known to exist."""
        return self.current_page < self.total_pages


Subscriber = Callable[[FeedSnapshot[T]], None]


def dedupe(items: list[T], seen: set[int] | None = None) -> list[T]:
    """Drop items whose id is in ``seen`` or repeats within ``items``.

    Keeps the first occurrence and the original order.
    """
    seen = set() if seen is None else set(seen)
    unique: list[T] = []
    for item in items:
        if item.id not in seen:
            seen.add(item.id)
            unique.append(item)
    return unique


class PaginatedFeed(ABC, Generic[T]):
    """Accumulates pages of entities for infinite scrolling.

    The feed owns a cursor and a state machine. Fetches run in the
    background; their outcomes are delivered back through the scheduler and
    applied only if they belong to the current generation. At most one
    fetch is in flight, and the accumulated items never repeat an id.

    Subclasses provide ``fetch_page`` and the trailing window size.
    """

    feed_name: str = "feed"
    trailing_window: int = 3

    def __init__(
        self,
        scheduler: Scheduler,
        page_size: int = 20,
        first_page_retry_delay: float = 3.0,
        duplicate_page_advance_delay: float = 0.5,
        force_load_retry_delay: float = 1.0,
    ) -> None:
        """Initialize the feed.

        Args:
            scheduler: Background and callback scheduler.
            page_size: Items requested per page.
            first_page_retry_delay: Delay before the automatic first-page
                retry.
            duplicate_page_advance_delay: Delay before fetching past a page
                that held only known items.
            force_load_retry_delay: Delay before retrying a forced load that
                found a fetch in flight.
        """
        self._scheduler = scheduler
        self._page_size = page_size
        self._first_page_retry_delay = first_page_retry_delay
        self._duplicate_page_advance_delay = duplicate_page_advance_delay
        self._force_load_retry_delay = force_load_retry_delay

        self._items: tuple[T, ...] = ()
        self._cursor = FeedCursor()
        self._machine = FeedStateMachine(self.feed_name)
        self._error: NetworkError | None = None
        self._auto_retry_used = False
        self._pending: set[Cancellable] = set()
        self._subscribers: list[Subscriber[T]] = []
        self._log = logger.bind(component="feed", feed=self.feed_name)

    @abstractmethod
    def fetch_page(self, page: int, page_size: int, **params: object) -> FeedPage[T]:
        """Fetch one page; runs in the background.

        Args:
            page: 1-based page number.
            page_size: Requested number of items.
            **params: Query parameters captured by ``request_params``.

        Raises:
            NetworkError: On failure.
        """

    def request_params(self) -> dict[str, object]:
        """Feed-specific query parameters, captured when a fetch starts."""
        return {}

    # ===== Observation =====

    @property
    def items(self) -> tuple[T, ...]:
        """Accumulated items, in load order."""
        return self._items

    @property
    def state(self) -> FeedState:
        """Current loading state."""
        return self._machine.state

    @property
    def cursor(self) -> FeedCursor:
        """Current paging position."""
        return self._cursor

    @property
    def error(self) -> NetworkError | None:
        """Last error, cleared on the next success."""
        return self._error

    @property
    def error_message(self) -> str | None:
        """User-facing message for the last error."""
        return None if self._error is None else user_message(self._error)

    def snapshot(self) -> FeedSnapshot[T]:
        """Build an immutable view of the feed."""
        return FeedSnapshot(
            items=self._items,
            state=self._machine.state,
            current_page=self._cursor.current_page,
            total_pages=self._cursor.total_pages,
            error_message=self.error_message,
            error=self._error,
        )

    def subscribe(self, subscriber: Subscriber[T]) -> Callable[[], None]:
        """Register a callback receiving a snapshot after every change.

        Returns:
            Function removing the subscription.
        """
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    # ===== Commands =====

    def load_first(self, force_refresh: bool = False) -> None:
        """Load the first page unless items are cached or a fetch is running.

        Args:
            force_refresh: Discard cached items and reload.
        """
        if self._items and not force_refresh:
            self._log.debug("feed_served_from_cache", item_count=len(self._items))
            self._notify()
            return
        if self._cursor.fetch_in_flight and not force_refresh:
            self._log.debug("load_already_in_flight")
            return
        self._auto_retry_used = False
        self._begin_first_page()

    def refresh(self) -> None:
        """Discard everything and reload the first page."""
        self.load_first(force_refresh=True)

    def load_next_if_needed(self, anchor_id: int) -> None:
        """Load the next page when the anchor nears the end of the items.

        No-op while a fetch is in flight, when no further pages exist, or
        when this anchor already triggered a fetch. Triggers when the
        anchor sits in the trailing window or is not among the items.

        Args:
            anchor_id: Id of the item currently being displayed.
        """
        cursor = self._cursor
        if cursor.fetch_in_flight or not cursor.has_more:
            return
        if anchor_id == cursor.last_trigger_id:
            return

        index = self._index_of(anchor_id)
        if index is not None and index < len(self._items) - self.trailing_window:
            return

        self._log.debug(
            "next_page_triggered",
            anchor_id=anchor_id,
            anchor_index=index,
            current_page=cursor.current_page,
        )
        cursor.last_trigger_id = anchor_id
        self._begin_next_page()

    def force_load_next(self) -> None:
        """Load the next page regardless of the trailing window.

        If a fetch is in flight, retries after a delay. At the last known
        page, steps the current page back once, never below page 1, before
        requesting the following page.
        """
        cursor = self._cursor
        if self._machine.state is FeedState.IDLE:
            self.load_first()
            return
        if cursor.fetch_in_flight:
            self._log.debug("force_load_deferred")
            self._schedule(self._force_load_retry_delay, self.force_load_next)
            return
        if not cursor.has_more and self._items:
            cursor.current_page = max(1, cursor.current_page - 1)
            self._log.info("last_page_reopened", current_page=cursor.current_page)
        cursor.last_trigger_id = None
        self._begin_next_page()

    # ===== Internals =====

    def _reset(self) -> None:
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()
        self._items = ()
        self._error = None
        generation = self._cursor.reset()
        self._log.debug("feed_reset", generation=generation)

    def _begin_first_page(self) -> None:
        self._reset()
        self._machine.transition_to(FeedState.LOADING_FIRST_PAGE)
        self._start_fetch(1, first_page=True)
        self._notify()

    def _begin_next_page(self) -> None:
        self._machine.transition_to(FeedState.LOADING_NEXT_PAGE)
        self._start_fetch(self._cursor.current_page + 1, first_page=False)
        self._notify()

    def _start_fetch(self, page: int, first_page: bool) -> None:
        self._cursor.fetch_in_flight = True
        generation = self._cursor.generation
        page_size = self._page_size
        params = self.request_params()

        def work() -> None:
            try:
                result = self.fetch_page(page, page_size, **params)
            except NetworkError as error:
                failure = error
            except Exception as exc:  # noqa: BLE001
                self._log.exception("feed_fetch_crashed", page=page)
                failure = NetworkError(
                    NetworkErrorKind.UNKNOWN, f"Unexpected error: {exc}"
                )
            else:
                self._scheduler.call_soon(
                    lambda: self._on_success(generation, page, first_page, result)
                )
                return
            self._scheduler.call_soon(
                lambda: self._on_failure(generation, page, first_page, failure)
            )

        self._log.info("page_fetch_started", page=page, page_size=page_size)
        self._scheduler.run_in_background(work)

    def _on_success(
        self, generation: int, page: int, first_page: bool, result: FeedPage[T]
    ) -> None:
        cursor = self._cursor
        if generation != cursor.generation:
            self._log.debug("stale_result_dropped", page=page, generation=generation)
            return

        cursor.fetch_in_flight = False
        self._error = None
        reported_page = result.pagination.current_page
        reported_total = result.pagination.total_pages

        if first_page:
            self._items = tuple(dedupe(result.items))
            cursor.advance_to(max(page, reported_page), reported_total)
        elif not result.items:
            cursor.advance_to(page, page)
            cursor.mark_end()
            self._log.info("feed_end_reached", page=page)
        else:
            fresh = dedupe(result.items, seen={item.id for item in self._items})
            cursor.advance_to(max(page, reported_page), reported_total)
            if fresh:
                self._items = self._items + tuple(fresh)
            else:
                self._log.info("duplicate_page_skipped", page=page)
                if cursor.has_more:
                    self._schedule(
                        self._duplicate_page_advance_delay, self._cascade_next_page
                    )

        self._machine.transition_to(FeedState.LOADED)
        self._log.info(
            "page_loaded",
            page=page,
            item_count=len(self._items),
            current_page=cursor.current_page,
            total_pages=cursor.total_pages,
        )
        self._notify()

    def _on_failure(
        self, generation: int, page: int, first_page: bool, error: NetworkError
    ) -> None:
        cursor = self._cursor
        if generation != cursor.generation:
            self._log.debug("stale_failure_dropped", page=page, generation=generation)
            return

        cursor.fetch_in_flight = False
        cursor.last_trigger_id = None
        self._error = error
        self._machine.transition_to(FeedState.FAILED)
        self._log.warning("page_load_failed", page=page, **error.to_dict())

        if first_page and not self._items and not self._auto_retry_used:
            self._auto_retry_used = True
            self._log.info(
                "first_page_retry_scheduled",
                delay_seconds=self._first_page_retry_delay,
            )
            self._schedule(self._first_page_retry_delay, self._begin_first_page)
        self._notify()

    def _cascade_next_page(self) -> None:
        if self._cursor.fetch_in_flight or not self._cursor.has_more:
            return
        self._begin_next_page()

    def _schedule(self, delay_seconds: float, callback: Callback) -> None:
        """Defer a callback, dropping it if the feed resets first."""
        generation = self._cursor.generation
        handle: Cancellable

        def fire() -> None:
            self._pending.discard(handle)
            if generation != self._cursor.generation:
                self._log.debug("stale_callback_dropped", generation=generation)
                return
            callback()

        handle = self._scheduler.call_later(delay_seconds, fire)
        self._pending.add(handle)

    def _index_of(self, item_id: int) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for subscriber in list(self._subscribers):
            subscriber(snapshot)
