"""ORM model for catalog books."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String

from app.models.base import Base


class BookRow(Base):
    """
    Persisted book. finished is stored so list filters can use it, and is
    always written as page_count == read_page.
    """

    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint("read_page <= page_count", name="ck_books_read_page_le_page_count"),
    )

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False, default="")
    publisher = Column(String(255), nullable=False, default="")
    page_count = Column(Integer, nullable=False, default=0)
    read_page = Column(Integer, nullable=False, default=0)
    reading = Column(Boolean, nullable=False, default=False)
    finished = Column(Boolean, nullable=False, default=False)
    inserted_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)
