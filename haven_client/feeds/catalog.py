"""Cache-first catalogs of articles and article categories."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

from haven_client.domain.models import Article, ArticleCategory
from haven_client.feeds.messages import user_message
from haven_client.feeds.scheduler import Scheduler
from haven_client.services.articles import ArticleService
from haven_client.services.categories import CategoryService
from haven_client.transport.errors import NetworkError, NetworkErrorKind


logger = structlog.get_logger()

E = TypeVar("E")


@dataclass(frozen=True)
class CatalogSnapshot(Generic[E]):
    """Immutable view of a catalog handed to subscribers."""

    items: tuple[E, ...]
    is_loading: bool
    error_message: str | None = None
    error: NetworkError | None = None


class CachedCatalog(ABC, Generic[E]):
    """Loads a whole collection once and serves it from memory afterwards.

    ``items`` is the visible selection; the full collection is kept as a
    cache. Only one load runs at a time; a forced reload discards the
    result of any older load.
    """

    catalog_name: str = "catalog"

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._cache: tuple[E, ...] = ()
        self._items: tuple[E, ...] = ()
        self._is_loading = False
        self._error: NetworkError | None = None
        self._generation = 0
        self._subscribers: list[Callable[[CatalogSnapshot[E]], None]] = []
        self._log = logger.bind(component="catalog", catalog=self.catalog_name)

    @abstractmethod
    def fetch_all(self) -> list[E]:
        """Fetch the whole collection; runs in the background."""

    @property
    def items(self) -> tuple[E, ...]:
        """Currently visible entities."""
        return self._items

    @property
    def cached(self) -> tuple[E, ...]:
        """Every loaded entity."""
        return self._cache

    @property
    def is_loading(self) -> bool:
        """Whether a load is in flight."""
        return self._is_loading

    @property
    def error(self) -> NetworkError | None:
        """Last load error."""
        return self._error

    @property
    def error_message(self) -> str | None:
        """User-facing message for the last load error."""
        return None if self._error is None else user_message(self._error)

    def snapshot(self) -> CatalogSnapshot[E]:
        """Build an immutable view of the catalog."""
        return CatalogSnapshot(
            items=self._items,
            is_loading=self._is_loading,
            error_message=self.error_message,
            error=self._error,
        )

    def subscribe(
        self, subscriber: Callable[[CatalogSnapshot[E]], None]
    ) -> Callable[[], None]:
        """Register a callback receiving a snapshot after every change.

        Returns:
            Function removing the subscription.
        """
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def load(self, force_refresh: bool = False) -> None:
        """Load the collection unless it is cached.

        Args:
            force_refresh: Reload even when cached.
        """
        if self._cache and not force_refresh:
            self._log.debug("catalog_served_from_cache", count=len(self._cache))
            self._items = self._select(self._cache)
            self._notify()
            return
        if self._is_loading and not force_refresh:
            return

        self._generation += 1
        generation = self._generation
        self._is_loading = True
        self._error = None

        def work() -> None:
            try:
                loaded = self.fetch_all()
            except NetworkError as error:
                failure = error
            except Exception as exc:  # noqa: BLE001
                self._log.exception("catalog_fetch_crashed")
                failure = NetworkError(
                    NetworkErrorKind.UNKNOWN, f"Unexpected error: {exc}"
                )
            else:
                self._scheduler.call_soon(lambda: self._on_success(generation, loaded))
                return
            self._scheduler.call_soon(lambda: self._on_failure(generation, failure))

        self._log.info("catalog_load_started", force_refresh=force_refresh)
        self._scheduler.run_in_background(work)
        self._notify()

    def refresh(self) -> None:
        """Reload the collection from the server."""
        self.load(force_refresh=True)

    def _select(self, entities: tuple[E, ...]) -> tuple[E, ...]:
        """Choose the visible entities from the full collection."""
        return entities

    def _on_success(self, generation: int, loaded: list[E]) -> None:
        if generation != self._generation:
            self._log.debug("stale_result_dropped", generation=generation)
            return
        self._is_loading = False
        self._cache = tuple(loaded)
        self._items = self._select(self._cache)
        self._log.info("catalog_loaded", count=len(self._cache))
        self._notify()

    def _on_failure(self, generation: int, error: NetworkError) -> None:
        if generation != self._generation:
            self._log.debug("stale_failure_dropped", generation=generation)
            return
        self._is_loading = False
        self._error = error
        self._log.warning("catalog_load_failed", **error.to_dict())
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for subscriber in list(self._subscribers):
            subscriber(snapshot)


class CategoryCatalog(CachedCatalog[ArticleCategory]):
    """Article categories."""

    catalog_name = "categories"

    def __init__(self, service: CategoryService, scheduler: Scheduler) -> None:
        super().__init__(scheduler)
        self._service = service

    def fetch_all(self) -> list[ArticleCategory]:
        return self._service.fetch_categories()


class ArticleCatalog(CachedCatalog[Article]):
    """Articles, optionally narrowed to one category.

    Category filtering happens locally on the cached collection.
    """

    catalog_name = "articles"

    def __init__(self, service: ArticleService, scheduler: Scheduler) -> None:
        super().__init__(scheduler)
        self._service = service
        self._category_id: int | None = None

    @property
    def category_id(self) -> int | None:
        """Category the visible articles are narrowed to, if any."""
        return self._category_id

    def fetch_all(self) -> list[Article]:
        return self._service.fetch_articles()

    def filter_by_category(self, category_id: int | None) -> None:
        """Narrow the visible articles without a network request.

        Args:
            category_id: Category to show, or None for every article.
        """
        self._category_id = category_id
        self._items = self._select(self._cache)
        self._notify()

    def load_articles_by_category(self, category_id: int) -> None:
        """Show one category, loading every article first if needed."""
        self._category_id = category_id
        if self._cache:
            self._items = self._select(self._cache)
            self._notify()
            return
        self.load()

    def _select(self, entities: tuple[Article, ...]) -> tuple[Article, ...]:
        if self._category_id is None:
            return entities
        return tuple(a for a in entities if a.category_id == self._category_id)
