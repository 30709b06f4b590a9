"""Book records, drafts, list filters and HTTP envelopes."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Upper bound of the int4 page columns.
MAX_PAGES = 2_147_483_647


class _CamelModel(BaseModel):
    """JSON uses camelCase (pageCount, readPage); Python uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookDraft(_CamelModel):
    """
    Client-supplied state of a book, used for both create and full update.

    finished is derived by the store and cannot be set here; an incoming
    "finished" key is ignored.
    """

    name: str = Field(default="", max_length=255)
    author: str = Field(default="", max_length=255)
    publisher: str = Field(default="", max_length=255)
    page_count: int = Field(default=0, ge=0, le=MAX_PAGES)
    read_page: int = Field(default=0, ge=0, le=MAX_PAGES)
    reading: bool = False


class Book(_CamelModel):
    """Stored book record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    author: str
    publisher: str
    page_count: int
    read_page: int
    reading: bool
    finished: bool
    inserted_at: datetime
    updated_at: datetime


class BookFilter(BaseModel):
    """
    List predicates and page window.

    name, reading and finished are tri-state: None means the predicate is not
    applied. limit falls back to 10 when missing or not positive and is capped
    at 100; a negative offset becomes 0.
    """

    name: str | None = None
    reading: bool | None = None
    finished: bool | None = None
    limit: int | None = DEFAULT_LIMIT
    offset: int | None = 0

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        needle = str(v).strip().lower()
        return needle or None

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int | None) -> int:
        if v is None or v <= 0:
            return DEFAULT_LIMIT
        return min(v, MAX_LIMIT)

    @field_validator("offset")
    @classmethod
    def clamp_offset(cls, v: int | None) -> int:
        if v is None or v < 0:
            return 0
        return v


class BookSummary(BaseModel):
    """Light list entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    publisher: str


class BookListData(BaseModel):
    books: list[BookSummary]


class PageMeta(BaseModel):
    limit: int
    offset: int
    total: int


class BookListResponse(BaseModel):
    status: Literal["success"] = "success"
    data: BookListData
    meta: PageMeta


class BookDetailData(BaseModel):
    book: Book


class BookDetailResponse(BaseModel):
    status: Literal["success"] = "success"
    data: BookDetailData


class BookIdData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    book_id: str = Field(alias="bookId")


class BookCreatedResponse(BaseModel):
    status: Literal["success"] = "success"
    data: BookIdData


class MessageResponse(BaseModel):
    """Envelope for success messages and for fail/error bodies."""

    status: Literal["success", "fail", "error"]
    message: str
