"""Catalog store: book records with validation, filtering and pagination.

Two backends share one contract. MemoryCatalogStore keeps the record set in
process behind a reader/writer lock; SqlCatalogStore maps each operation onto
one short transaction against the books table.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.core.database import MAX_INSERT_ATTEMPTS, is_unique_violation
from app.core.errors import Conflict, InvalidArgument, NotFound
from app.core.ids import new_id
from app.core.locks import RWLock
from app.models import BookRow
from app.schemas.books import Book, BookDraft, BookFilter

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


class CatalogStore(Protocol):
    def create(self, draft: BookDraft) -> str: ...

    def get(self, book_id: str) -> Book: ...

    def list(self, book_filter: BookFilter) -> tuple[list[Book], int]: ...

    def update(self, book_id: str, draft: BookDraft) -> None: ...

    def delete(self, book_id: str) -> None: ...


def validate_draft(draft: BookDraft) -> None:
    """Reject drafts that would break a record invariant. Runs before any write."""
    if not draft.name.strip():
        raise InvalidArgument("name is required")
    if draft.read_page > draft.page_count:
        raise InvalidArgument("readPage must be <= pageCount")


def _mutable_fields(draft: BookDraft) -> dict:
    return {
        "name": draft.name,
        "author": draft.author,
        "publisher": draft.publisher,
        "page_count": draft.page_count,
        "read_page": draft.read_page,
        "reading": draft.reading,
        "finished": draft.page_count == draft.read_page,
    }


def _matches(book: Book, book_filter: BookFilter) -> bool:
    if book_filter.name is not None and book_filter.name not in book.name.lower():
        return False
    if book_filter.reading is not None and book.reading != book_filter.reading:
        return False
    if book_filter.finished is not None and book.finished != book_filter.finished:
        return False
    return True


class MemoryCatalogStore:
    """In-process catalog. Readers share the lock; writers hold it exclusively."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._lock = RWLock()
        self._books: dict[str, Book] = {}
        self._clock = clock

    def create(self, draft: BookDraft) -> str:
        validate_draft(draft)
        with self._lock.write():
            for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
                book_id = new_id()
                if book_id not in self._books:
                    break
                logger.warning("Book id collision (attempt %s/%s)", attempt, MAX_INSERT_ATTEMPTS)
            else:
                raise Conflict("could not allocate a unique book id")
            now = self._clock()
            self._books[book_id] = Book(
                id=book_id, inserted_at=now, updated_at=now, **_mutable_fields(draft)
            )
        return book_id

    def get(self, book_id: str) -> Book:
        with self._lock.read():
            book = self._books.get(book_id)
            if book is None:
                raise NotFound("book not found")
            return book.model_copy()

    def list(self, book_filter: BookFilter) -> tuple[list[Book], int]:
        with self._lock.read():
            matched = [b for b in self._books.values() if _matches(b, book_filter)]
            matched.sort(key=lambda b: (b.inserted_at, b.id), reverse=True)
            window = matched[book_filter.offset : book_filter.offset + book_filter.limit]
            return [b.model_copy() for b in window], len(matched)

    def update(self, book_id: str, draft: BookDraft) -> None:
        validate_draft(draft)
        with self._lock.write():
            current = self._books.get(book_id)
            if current is None:
                raise NotFound("book not found")
            self._books[book_id] = current.model_copy(
                update={**_mutable_fields(draft), "updated_at": self._clock()}
            )

    def delete(self, book_id: str) -> None:
        with self._lock.write():
            if self._books.pop(book_id, None) is None:
                raise NotFound("book not found")


class SqlCatalogStore:
    """
    Catalog backed by the books table.

    Every operation opens and closes its own session, so no connection is held
    between operations. Update and delete are single statements and report
    NotFound from the affected row count.
    """

    def __init__(self, session_factory: sessionmaker, clock: Clock = utcnow) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def create(self, draft: BookDraft) -> str:
        validate_draft(draft)
        now = self._clock()
        for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
            book_id = new_id()
            row = BookRow(id=book_id, inserted_at=now, updated_at=now, **_mutable_fields(draft))
            try:
                with self._session_factory.begin() as session:
                    session.add(row)
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                logger.warning("Book id collision on insert (attempt %s/%s)", attempt, MAX_INSERT_ATTEMPTS)
                continue
            return book_id
        raise Conflict("could not allocate a unique book id")

    def get(self, book_id: str) -> Book:
        with self._session_factory() as session:
            row = session.get(BookRow, book_id)
            if row is None:
                raise NotFound("book not found")
            return Book.model_validate(row)

    def list(self, book_filter: BookFilter) -> tuple[list[Book], int]:
        conditions = []
        if book_filter.name is not None:
            conditions.append(func.lower(BookRow.name).contains(book_filter.name, autoescape=True))
        if book_filter.reading is not None:
            conditions.append(BookRow.reading == book_filter.reading)
        if book_filter.finished is not None:
            conditions.append(BookRow.finished == book_filter.finished)

        with self._session_factory() as session:
            total = session.scalar(select(func.count()).select_from(BookRow).where(*conditions))
            rows = session.scalars(
                select(BookRow)
                .where(*conditions)
                .order_by(BookRow.inserted_at.desc(), BookRow.id.desc())
                .limit(book_filter.limit)
                .offset(book_filter.offset)
            ).all()
            return [Book.model_validate(r) for r in rows], total or 0

    def update(self, book_id: str, draft: BookDraft) -> None:
        validate_draft(draft)
        with self._session_factory.begin() as session:
            result = session.execute(
                update(BookRow)
                .where(BookRow.id == book_id)
                .values(updated_at=self._clock(), **_mutable_fields(draft))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFound("book not found")

    def delete(self, book_id: str) -> None:
        with self._session_factory.begin() as session:
            result = session.execute(
                delete(BookRow)
                .where(BookRow.id == book_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFound("book not found")
