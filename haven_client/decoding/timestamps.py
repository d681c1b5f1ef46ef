"""Best-effort timestamp normalization for loosely typed payloads.

Servers have been observed sending Unix seconds, Unix milliseconds,
several date-time string layouts and nested ``{"date": ...}`` objects for
the same field. ``parse_timestamp`` tries each representation in a fixed
order and returns the first that parses.
"""

import re
from datetime import UTC, datetime

import structlog


logger = structlog.get_logger()

# Ordered; the first entry is the article publish-date wire format.
TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%d-%m-%Y %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d-%m-%Y",
)

NESTED_TIMESTAMP_KEYS: tuple[str, ...] = ("date", "value")

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


def parse_timestamp(value: object) -> datetime | None:
    """Parse a timestamp from any supported wire representation.

    Order of attempts:
    - int/float: Unix epoch seconds (milliseconds if out of range)
    - integer string: Unix epoch seconds
    - string matching one of ``TIMESTAMP_FORMATS``
    - ISO-8601 string accepted by ``datetime.fromisoformat``
    - object with a ``date`` or ``value`` member, parsed recursively
    - real-number string: Unix epoch milliseconds

    Args:
        value: Raw JSON value.

    Returns:
        Timezone-aware datetime (naive layouts are read as UTC), or None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        return _from_epoch_seconds(value)
    if isinstance(value, str):
        return _parse_string(value.strip())
    if isinstance(value, dict):
        for key in NESTED_TIMESTAMP_KEYS:
            if key in value:
                return parse_timestamp(value[key])
    return None


def normalize_timestamp(
    value: object,
    fallback: datetime | None = None,
    field: str = "timestamp",
) -> datetime:
    """Parse a timestamp, substituting a fallback when nothing parses.

    Args:
        value: Raw JSON value.
        fallback: Value to use on failure; defaults to the current time.
        field: Field name for the failure log entry.

    Returns:
        Parsed or fallback datetime.
    """
    parsed = parse_timestamp(value)
    if parsed is not None:
        return parsed
    logger.warning(
        "timestamp_parse_failed",
        component="decoder",
        field=field,
        raw_value=repr(value)[:200],
    )
    return fallback or datetime.now(UTC)


def _parse_string(text: str) -> datetime | None:
    if not text:
        return None

    if _INTEGER_PATTERN.match(text):
        parsed = _from_epoch_seconds(int(text))
        if parsed is not None:
            return parsed

    for fmt in TIMESTAMP_FORMATS:
        try:
            return _ensure_aware(datetime.strptime(text, fmt))  # noqa: DTZ007
        except ValueError:
            continue

    try:
        return _ensure_aware(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    try:
        return _from_epoch_milliseconds(float(text))
    except ValueError:
        return None


def _from_epoch_seconds(seconds: float) -> datetime | None:
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        # Too large for seconds; servers also send milliseconds.
        return _from_epoch_milliseconds(seconds)


def _from_epoch_milliseconds(milliseconds: float) -> datetime | None:
    try:
        return datetime.fromtimestamp(milliseconds / 1000.0, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
