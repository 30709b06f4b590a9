"""Books endpoints: public reads, role-gated writes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import get_catalog_store
from app.api.v1.auth import require_admin, require_editor
from app.core.context import RequestContext
from app.schemas.books import (
    DEFAULT_LIMIT,
    BookCreatedResponse,
    BookDetailData,
    BookDetailResponse,
    BookDraft,
    BookFilter,
    BookIdData,
    BookListData,
    BookListResponse,
    BookSummary,
    MessageResponse,
    PageMeta,
)
from app.services.catalog_store import CatalogStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_flag(value: str | None) -> bool | None:
    """'1'/'true' and '0'/'false'; anything else leaves the filter unset."""
    if value is None:
        return None
    v = value.strip().lower()
    if v in ("1", "true"):
        return True
    if v in ("0", "false"):
        return False
    return None


def _parse_count(value: str | None, default: int) -> int:
    try:
        n = int(value) if value is not None else default
    except ValueError:
        return default
    return n if n >= 0 else default


@router.get("", response_model=BookListResponse)
def list_books(
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
    name: str | None = None,
    reading: str | None = None,
    finished: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
) -> BookListResponse:
    """
    List books, newest first.

    Filters: name (case-insensitive substring), reading and finished (1/0).
    Pagination: limit (default 10, max 100) and offset; meta.total counts all
    matches before pagination.
    """
    book_filter = BookFilter(
        name=name,
        reading=_parse_flag(reading),
        finished=_parse_flag(finished),
        limit=_parse_count(limit, DEFAULT_LIMIT),
        offset=_parse_count(offset, 0),
    )
    books, total = store.list(book_filter)
    return BookListResponse(
        data=BookListData(books=[BookSummary.model_validate(b) for b in books]),
        meta=PageMeta(limit=book_filter.limit, offset=book_filter.offset, total=total),
    )


@router.get("/{book_id}", response_model=BookDetailResponse)
def get_book(
    book_id: str,
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
) -> BookDetailResponse:
    return BookDetailResponse(data=BookDetailData(book=store.get(book_id)))


@router.post("", response_model=BookCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_book(
    body: BookDraft,
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
    context: Annotated[RequestContext, Depends(require_editor)],
) -> BookCreatedResponse:
    """Add a book (editor or admin). finished is computed from pageCount and readPage."""
    book_id = store.create(body)
    logger.info("Book created id=%s by=%s", book_id, context.subject)
    return BookCreatedResponse(data=BookIdData(book_id=book_id))


@router.put("/{book_id}", response_model=MessageResponse)
def update_book(
    book_id: str,
    body: BookDraft,
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
    context: Annotated[RequestContext, Depends(require_editor)],
) -> MessageResponse:
    """Replace every mutable field of a book (editor or admin); partial updates are not supported."""
    store.update(book_id, body)
    logger.info("Book updated id=%s by=%s", book_id, context.subject)
    return MessageResponse(status="success", message="updated")


@router.delete("/{book_id}", response_model=MessageResponse)
def delete_book(
    book_id: str,
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
    context: Annotated[RequestContext, Depends(require_admin)],
) -> MessageResponse:
    store.delete(book_id)
    logger.info("Book deleted id=%s by=%s", book_id, context.subject)
    return MessageResponse(status="success", message="deleted")
