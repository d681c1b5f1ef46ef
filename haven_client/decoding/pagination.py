"""Pagination metadata extraction from unstable response envelopes."""

from haven_client.decoding.models import (
    DEFAULT_CURRENT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TOTAL_PAGES,
    PaginationInfo,
)


# Field groups, each searched in order; the first integer present wins.
TOTAL_PAGES_KEYS: tuple[str, ...] = (
    "totalPages",
    "total_pages",
    "pages",
    "totalCount",
    "total",
)
CURRENT_PAGE_KEYS: tuple[str, ...] = ("currentPage", "current_page", "page")
PAGE_SIZE_KEYS: tuple[str, ...] = ("pageSize", "page_size", "size", "limit")
TOTAL_COUNT_KEYS: tuple[str, ...] = ("totalCount", "total")

# Nested objects searched before the top-level object, in priority order.
PAGINATION_CONTAINER_KEYS: tuple[str, ...] = ("pagination", "meta")


def pagination_sources(tree: object) -> list[dict[str, object]]:
    """List the objects that may carry pagination fields, by priority.

    Args:
        tree: Parsed JSON response.

    Returns:
        Nested ``pagination`` and ``meta`` objects (when present) followed
        by the top-level object; empty for non-object responses.
    """
    if not isinstance(tree, dict):
        return []
    sources = [
        tree[key]
        for key in PAGINATION_CONTAINER_KEYS
        if isinstance(tree.get(key), dict)
    ]
    sources.append(tree)
    return sources


def first_int(sources: list[dict[str, object]], keys: tuple[str, ...]) -> int | None:
    """Find the first integer value for a key group across sources.

    Args:
        sources: Objects in priority order.
        keys: Candidate keys in priority order.

    Returns:
        The first integral value found, or None.
    """
    for source in sources:
        for key in keys:
            value = _as_int(source.get(key))
            if value is not None:
                return value
    return None


def extract_pagination(tree: object) -> PaginationInfo:
    """Extract pagination metadata, defaulting absent fields.

    Args:
        tree: Parsed JSON response.

    Returns:
        PaginationInfo with (1, 1, 20) defaults for missing groups.
    """
    sources = pagination_sources(tree)
    total_pages = first_int(sources, TOTAL_PAGES_KEYS)
    current_page = first_int(sources, CURRENT_PAGE_KEYS)
    page_size = first_int(sources, PAGE_SIZE_KEYS)
    return PaginationInfo(
        total_pages=DEFAULT_TOTAL_PAGES if total_pages is None else max(total_pages, 0),
        current_page=(
            DEFAULT_CURRENT_PAGE if current_page is None else max(current_page, 0)
        ),
        page_size=DEFAULT_PAGE_SIZE if page_size is None else max(page_size, 0),
    )


def extract_total_count(tree: object, default: int) -> int:
    """Extract the server-reported total record count.

    Args:
        tree: Parsed JSON response.
        default: Value used when no count is present.

    Returns:
        Reported total count, or the default.
    """
    count = first_int(pagination_sources(tree), TOTAL_COUNT_KEYS)
    return default if count is None else count


def _as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None
