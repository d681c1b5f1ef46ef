"""Result models produced by the decoding layer."""

from dataclasses import dataclass
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


R = TypeVar("R")

DEFAULT_CURRENT_PAGE = 1
DEFAULT_TOTAL_PAGES = 1
DEFAULT_PAGE_SIZE = 20


class PaginationInfo(BaseModel):
    """Pagination metadata recovered from a feed response."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    current_page: Annotated[int, Field(ge=0)] = DEFAULT_CURRENT_PAGE
    total_pages: Annotated[int, Field(ge=0)] = DEFAULT_TOTAL_PAGES
    page_size: Annotated[int, Field(ge=0)] = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class DecodedFeed(Generic[R]):
    """Records and metadata recovered from one feed response.

    Attributes:
        records: Successfully decoded wire records, in payload order.
        pagination: Pagination metadata, defaulted where absent.
        total_count: Total record count reported by the server, or the
            number of decoded records.
        strategy: Name of the hypothesis that produced the records.
    """

    records: list[R]
    pagination: PaginationInfo
    total_count: int
    strategy: str
