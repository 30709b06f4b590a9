"""Account store: user records keyed by id, unique by normalized email."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from threading import Lock
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.core.database import MAX_INSERT_ATTEMPTS, is_unique_violation
from app.core.errors import Conflict, InvalidArgument, NotFound
from app.core.ids import new_id
from app.core.security import DEFAULT_ROLES
from app.models import UserRow
from app.schemas.auth import Account, AccountDraft, email_local_part, normalize_email

logger = logging.getLogger(__name__)


class AccountStore(Protocol):
    def create(self, draft: AccountDraft) -> str: ...

    def find_by_email(self, email: str) -> Account: ...


def normalize_roles(roles: Iterable[str]) -> list[str]:
    """Strip and de-duplicate role names; fall back to the default writer role."""
    seen: list[str] = []
    for role in roles:
        role = role.strip()
        if role and role not in seen:
            seen.append(role)
    return seen or list(DEFAULT_ROLES)


def _prepare(draft: AccountDraft) -> tuple[str, str, list[str]]:
    email = normalize_email(draft.email)
    if not email:
        raise InvalidArgument("email is required")
    if not draft.password_hash:
        raise InvalidArgument("password is required")
    username = (draft.username or "").strip() or email_local_part(email)
    return email, username, normalize_roles(draft.roles)


class MemoryAccountStore:
    def __init__(self) -> None:
        self._lock = Lock()
        self._by_email: dict[str, Account] = {}

    def create(self, draft: AccountDraft) -> str:
        email, username, roles = _prepare(draft)
        with self._lock:
            if email in self._by_email:
                raise Conflict("email already used")
            taken = {a.id for a in self._by_email.values()}
            for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
                account_id = new_id()
                if account_id not in taken:
                    break
                logger.warning("Account id collision (attempt %s/%s)", attempt, MAX_INSERT_ATTEMPTS)
            else:
                raise Conflict("could not allocate a unique account id")
            now = datetime.now(UTC)
            self._by_email[email] = Account(
                id=account_id,
                email=email,
                username=username,
                password_hash=draft.password_hash,
                roles=roles,
                created_at=now,
                updated_at=now,
            )
        return account_id

    def find_by_email(self, email: str) -> Account:
        with self._lock:
            account = self._by_email.get(normalize_email(email))
            if account is None:
                raise NotFound("user not found")
            return account.model_copy(deep=True)


class SqlAccountStore:
    """
    Accounts in the users table.

    The email pre-check gives a clean Conflict in the common case; a unique
    violation at insert is re-checked to tell a concurrent registration of
    the same email (Conflict) from an id collision (retry).
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _email_exists(self, email: str) -> bool:
        with self._session_factory() as session:
            return session.scalar(select(UserRow.id).where(UserRow.email == email)) is not None

    def create(self, draft: AccountDraft) -> str:
        email, username, roles = _prepare(draft)
        if self._email_exists(email):
            raise Conflict("email already used")
        for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
            account_id = new_id()
            now = datetime.now(UTC)
            row = UserRow(
                id=account_id,
                email=email,
                username=username,
                password_hash=draft.password_hash,
                roles=roles,
                created_at=now,
                updated_at=now,
            )
            try:
                with self._session_factory.begin() as session:
                    session.add(row)
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                if self._email_exists(email):
                    raise Conflict("email already used") from e
                logger.warning("Account id collision on insert (attempt %s/%s)", attempt, MAX_INSERT_ATTEMPTS)
                continue
            return account_id
        raise Conflict("could not allocate a unique account id")

    def find_by_email(self, email: str) -> Account:
        with self._session_factory() as session:
            row = session.scalar(select(UserRow).where(UserRow.email == normalize_email(email)))
            if row is None:
                raise NotFound("user not found")
            return Account.model_validate(row)
