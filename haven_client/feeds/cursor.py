"""Pagination cursor owned by a feed."""

from dataclasses import dataclass


@dataclass
class FeedCursor:
    """Mutable paging position of one feed.

    Only the feed's state-owning context touches a cursor. ``generation``
    is bumped on every reset; work tagged with an older generation is
    discarded.
    """

    current_page: int = 1
    total_pages: int = 1
    fetch_in_flight: bool = False
    generation: int = 0
    last_trigger_id: int | None = None

    @property
    def has_more(self) -> bool:
        """Whether pages beyond the current one are known to exist."""
        return self.current_page < self.total_pages

    def reset(self) -> int:
        """Return to page 1 under a new generation.

        Returns:
            The new generation.
        """
        self.current_page = 1
        self.total_pages = 1
        self.fetch_in_flight = False
        self.last_trigger_id = None
        self.generation += 1
        return self.generation

    def advance_to(self, page: int, reported_total_pages: int) -> None:
        """Record a successfully loaded page.

        The current page never moves backwards here and total pages never
        drop below it.
        """
        self.current_page = max(self.current_page, page)
        self.total_pages = max(reported_total_pages, self.current_page)

    def mark_end(self) -> None:
        """Treat the current page as the last one."""
        self.total_pages = self.current_page
