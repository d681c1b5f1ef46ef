"""Multi-hypothesis decoder for feed responses of unstable shape.

The backend has returned the same feed as a bare array, as an object
keyed by the feed name, under generic envelope keys, and nested one level
deeper under ``data``. Each shape is tried by a pure strategy function;
the first one that yields records wins.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from haven_client.decoding.models import DecodedFeed
from haven_client.decoding.pagination import extract_pagination, extract_total_count
from haven_client.transport.errors import DecodingFailedError


logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

GENERIC_LIST_KEYS: tuple[str, ...] = ("data", "items", "content", "results")
NESTED_LIST_KEY = "data"


@dataclass(frozen=True)
class FeedShape(Generic[M]):
    """Describes where a feed's records may live in a response.

    Attributes:
        name: Feed name used in logs.
        record_model: Pydantic model for a single record.
        primary_key: Feed-specific key tried before the generic ones.
    """

    name: str
    record_model: type[M]
    primary_key: str

    @property
    def candidate_keys(self) -> tuple[str, ...]:
        """Keys that may hold the record list, in priority order."""
        return (self.primary_key,) + tuple(
            key for key in GENERIC_LIST_KEYS if key != self.primary_key
        )


Strategy = Callable[[object, FeedShape[M]], list[M] | None]


def decode_all(items: list[object], model: type[M]) -> list[M]:
    """Validate every item; any failure rejects the whole list.

    Raises:
        ValidationError: If any item does not validate.
    """
    return TypeAdapter(list[model]).validate_python(items)  # type: ignore[valid-type]


def try_top_level_array(tree: object, shape: FeedShape[M]) -> list[M] | None:
    """The body itself is the record list."""
    if not isinstance(tree, list):
        return None
    try:
        return decode_all(tree, shape.record_model)
    except ValidationError:
        return None


def try_candidate_key(tree: object, shape: FeedShape[M]) -> list[M] | None:
    """The record list lives directly under a candidate key."""
    if not isinstance(tree, dict):
        return None
    for key in shape.candidate_keys:
        items = tree.get(key)
        if isinstance(items, list):
            try:
                return decode_all(items, shape.record_model)
            except ValidationError:
                continue
    return None


def try_nested_data(tree: object, shape: FeedShape[M]) -> list[M] | None:
    """The record list lives under ``data`` inside a candidate key."""
    for container in _candidate_objects(tree, shape):
        items = container.get(NESTED_LIST_KEY)
        if isinstance(items, list):
            try:
                return decode_all(items, shape.record_model)
            except ValidationError:
                continue
    return None


def try_lenient_traversal(tree: object, shape: FeedShape[M]) -> list[M] | None:
    """Repeat the search, decoding records one by one and skipping failures."""
    items = _find_any_list(tree, shape)
    if items is None:
        return None

    log = logger.bind(component="decoder", feed=shape.name)
    records: list[M] = []
    for index, item in enumerate(items):
        try:
            records.append(shape.record_model.model_validate(item))
        except ValidationError as e:
            log.warning(
                "record_skipped",
                index=index,
                error_count=e.error_count(),
                errors=[err["loc"] for err in e.errors()],
            )
    return records


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("top_level_array", try_top_level_array),
    ("candidate_key", try_candidate_key),
    ("nested_data", try_nested_data),
    ("lenient_traversal", try_lenient_traversal),
)


def parse_json(body: bytes) -> object:
    """Parse a response body as JSON.

    Raises:
        DecodingFailedError: If the body is not JSON at all.
    """
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodingFailedError(e) from e


def decode_feed(body: bytes, shape: FeedShape[M]) -> DecodedFeed[M]:
    """Decode a feed response using the first strategy that matches.

    Pagination and total count are extracted independently of which
    strategy recovered the records.

    Args:
        body: Raw response body.
        shape: Where the records may live and how to validate them.

    Returns:
        Decoded records with pagination metadata. Records are empty when
        no strategy finds a list.

    Raises:
        DecodingFailedError: If the body is not JSON.
    """
    log = logger.bind(component="decoder", feed=shape.name)
    tree = parse_json(body)

    records: list[M] = []
    strategy_name = "none"
    for name, strategy in STRATEGIES:
        result = strategy(tree, shape)
        if result is not None:
            records, strategy_name = result, name
            break

    if strategy_name == "none":
        log.warning("feed_records_not_found", body_type=type(tree).__name__)

    pagination = extract_pagination(tree)
    total_count = extract_total_count(tree, default=len(records))
    log.debug(
        "feed_decoded",
        strategy=strategy_name,
        record_count=len(records),
        current_page=pagination.current_page,
        total_pages=pagination.total_pages,
        total_count=total_count,
    )
    return DecodedFeed(
        records=records,
        pagination=pagination,
        total_count=total_count,
        strategy=strategy_name,
    )


def decode_object(body: bytes, model: type[M]) -> M:
    """Decode a single-object response.

    Raises:
        DecodingFailedError: If the body is not JSON or does not validate.
    """
    tree = parse_json(body)
    try:
        return model.model_validate(tree)
    except ValidationError as e:
        raise DecodingFailedError(e) from e


def _candidate_objects(tree: object, shape: FeedShape[M]) -> list[dict[str, object]]:
    if not isinstance(tree, dict):
        return []
    return [
        tree[key] for key in shape.candidate_keys if isinstance(tree.get(key), dict)
    ]


def _find_any_list(tree: object, shape: FeedShape[M]) -> list[object] | None:
    if isinstance(tree, list):
        return tree
    if not isinstance(tree, dict):
        return None
    for key in shape.candidate_keys:
        items = tree.get(key)
        if isinstance(items, list):
            return items
    for container in _candidate_objects(tree, shape):
        items = container.get(NESTED_LIST_KEY)
        if isinstance(items, list):
            return items
    return None
