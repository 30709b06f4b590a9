"""Pydantic request/response schemas and domain records."""

from app.schemas.auth import (
    Account,
    AccountDraft,
    Claims,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from app.schemas.books import (
    Book,
    BookCreatedResponse,
    BookDetailResponse,
    BookDraft,
    BookFilter,
    BookListResponse,
    MessageResponse,
)
from app.schemas.health import HealthResponse

__all__ = [
    "Account",
    "AccountDraft",
    "Book",
    "BookCreatedResponse",
    "BookDetailResponse",
    "BookDraft",
    "BookFilter",
    "BookListResponse",
    "Claims",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "RegisterResponse",
    "TokenResponse",
]
