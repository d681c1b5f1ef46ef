"""Wire-format transfer records for backend requests and responses.

Response records accept the camelCase keys the backend sends and expose
snake_case attributes. Records are frozen once validated.
"""

import random
from datetime import datetime

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from haven_client.decoding.timestamps import normalize_timestamp


logger = structlog.get_logger()

NOTIFICATION_ID_RANGE = (1000, 9999)
DEFAULT_NOTIFICATION_TITLE = "Notification"
DEFAULT_NOTIFICATION_CONTENT = "No content available"
NOTIFICATION_TIMESTAMP_KEYS: tuple[str, ...] = (
    "timeStamp",
    "timestamp",
    "time",
    "date",
    "createdAt",
)
NOTIFICATION_SCREEN_CODE_KEYS: tuple[str, ...] = (
    "screenCode",
    "screen_code",
    "screenId",
    "screen_id",
)

_RECORD_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ArticleCategoryRecord(BaseModel):
    """Article category as sent by ``GET /api/v1/categories``."""

    model_config = _RECORD_CONFIG

    id: int
    name: str
    image_path: str = Field(alias="imagePath")


class ArticleRecord(BaseModel):
    """Article as sent by ``GET /api/v1/articles``."""

    model_config = _RECORD_CONFIG

    id: int
    title: str
    slug: str
    content: str
    content_preview: str = Field(alias="contentPreview")
    publish_date: str = Field(alias="publishDate")
    category_id: int = Field(alias="categoryId")
    image_path: str = Field(alias="imagePath")


class QuoteRecord(BaseModel):
    """Quote as sent by ``POST /api/v3/get-quotes``.

    ``id``, ``quote`` and ``imageUrl`` are required; a record missing any of
    them fails on its own without affecting the rest of the page.
    """

    model_config = _RECORD_CONFIG

    id: int
    quote: str
    writer: str | None = None
    image_url: str = Field(alias="imageUrl")
    quote_category: int = Field(default=0, alias="quoteCategory")
    is_liked: bool = Field(default=False, alias="isLiked")

    @field_validator("quote_category", mode="before")
    @classmethod
    def default_category(cls, v: object) -> object:
        """Treat an explicit null category as the default."""
        return 0 if v is None else v

    @field_validator("is_liked", mode="before")
    @classmethod
    def default_liked(cls, v: object) -> object:
        """Treat an explicit null like flag as not liked."""
        return False if v is None else v


class NotificationRecord(BaseModel):
    """Notification as sent by ``GET /api/v1/user/get-notifications``.

    Every field is recovered defensively: the id may arrive as a number or
    a numeric string, the timestamp under several keys and formats, and the
    screen code under several spellings. Missing values get placeholders.

    When no usable id is present a pseudo-random id is synthesized. Such
    ids are not stable across refreshes, so deduplicating notifications by
    id is unreliable for records that relied on the placeholder.
    """

    model_config = _RECORD_CONFIG

    id: int
    title: str = DEFAULT_NOTIFICATION_TITLE
    content: str = DEFAULT_NOTIFICATION_CONTENT
    timestamp: datetime
    screen_code: str | None = None
    id_synthesized: bool = False

    @model_validator(mode="before")
    @classmethod
    def normalize_payload(cls, data: object) -> object:
        """Map the raw payload onto canonical fields before validation."""
        if not isinstance(data, dict):
            return data

        log = logger.bind(component="decoder", record="notification")
        normalized: dict[str, object] = {}

        record_id = _coerce_int(data.get("id"))
        if record_id is None:
            record_id = random.randint(*NOTIFICATION_ID_RANGE)  # noqa: S311
            normalized["id_synthesized"] = True
            log.warning("notification_id_synthesized", raw_id=repr(data.get("id")))
        normalized["id"] = record_id

        title = data.get("title")
        if isinstance(title, str):
            normalized["title"] = title
        else:
            log.warning("notification_title_defaulted", notification_id=record_id)

        content = data.get("content")
        if isinstance(content, str):
            normalized["content"] = content
        else:
            log.warning("notification_content_defaulted", notification_id=record_id)

        normalized["screen_code"] = next(
            (
                data[key]
                for key in NOTIFICATION_SCREEN_CODE_KEYS
                if isinstance(data.get(key), str)
            ),
            None,
        )

        raw_timestamp = next(
            (
                data[key]
                for key in NOTIFICATION_TIMESTAMP_KEYS
                if _is_timestamp_candidate(data.get(key))
            ),
            None,
        )
        normalized["timestamp"] = normalize_timestamp(
            raw_timestamp, field="notification.timestamp"
        )
        return normalized


class ValidationResult(BaseModel):
    """Outcome of a server-side validation step."""

    model_config = _RECORD_CONFIG

    is_valid: bool = Field(default=True, alias="isValid")
    error_message: str = Field(default="", alias="errorMessage")
    error_code: int = Field(default=0, alias="errorCode")

    @field_validator("error_message", mode="before")
    @classmethod
    def default_message(cls, v: object) -> object:
        """Treat a null message as empty."""
        return "" if v is None else v


class AuthenticationResponse(BaseModel):
    """Response of the login and registration endpoints.

    The validation results are reported independently of whether the
    authentication itself succeeded.
    """

    model_config = _RECORD_CONFIG

    form_validation_result: ValidationResult = Field(
        default_factory=ValidationResult, alias="formValidationResult"
    )
    credentials_validation_result: ValidationResult | None = Field(
        default=None, alias="credentialsValidationResult"
    )
    is_authenticated: bool = Field(default=False, alias="isAuthenticated")
    jwt: str | None = None


class LoginRequest(BaseModel):
    """Body of ``POST /api/v1/user/authenticate``."""

    model_config = ConfigDict(frozen=True)

    email: str
    password: str


class RegistrationRequest(BaseModel):
    """Body of ``POST /api/v2/user/authenticate``."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    password: str


class QuotesRequest(BaseModel):
    """Body of ``POST /api/v3/get-quotes``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    categories: list[int]
    page: int
    page_size: int = Field(alias="pageSize")
    seed: int


def _coerce_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _is_timestamp_candidate(value: object) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, str | int | float):
        return True
    if isinstance(value, dict):
        return any(isinstance(value.get(key), str) for key in ("date", "value"))
    return False
