"""Immutable domain entities exposed to callers."""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from haven_client.decoding.models import PaginationInfo


T = TypeVar("T")

VIDEO_EXTENSIONS: tuple[str, ...] = (".mp4", ".mov", ".avi", ".wmv")

_ENTITY_CONFIG = ConfigDict(frozen=True, extra="forbid")


class ArticleCategory(BaseModel):
    """A category articles are grouped under."""

    model_config = _ENTITY_CONFIG

    id: int
    name: str
    image_path: str


class Article(BaseModel):
    """A published article."""

    model_config = _ENTITY_CONFIG

    id: int
    title: str
    slug: str
    content: str
    content_preview: str
    publish_date: datetime
    category_id: int
    image_path: str


class Quote(BaseModel):
    """A motivational quote shown over an image or a video."""

    model_config = _ENTITY_CONFIG

    id: int
    content: str
    writer: str
    media_url: str
    category_id: int
    is_liked: bool

    @property
    def is_video(self) -> bool:
        """Whether the media URL points at a video file."""
        return self.media_url.lower().endswith(VIDEO_EXTENSIONS)


class Notification(BaseModel):
    """A notification addressed to the signed-in user."""

    model_config = _ENTITY_CONFIG

    id: int
    title: str
    content: str
    timestamp: datetime
    screen_code: str | None = None


@dataclass(frozen=True)
class FeedPage(Generic[T]):
    """One page of entities with the server's pagination metadata."""

    items: list[T]
    pagination: PaginationInfo
    total_count: int
