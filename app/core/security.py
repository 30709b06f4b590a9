"""Password hashing, JWT issuance/verification and role checks."""

from collections.abc import Collection, Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt
from pydantic import SecretStr

from app.core.config import Settings
from app.core.errors import PermissionDenied, Unauthenticated
from app.schemas.auth import Claims

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Route policy: who may write to the catalog.
EDITOR_ROLES = frozenset({"editor", "admin"})
ADMIN_ROLES = frozenset({"admin"})
DEFAULT_ROLES = ("editor",)


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class TokenService:
    """
    Mints and verifies short-lived HMAC-signed access tokens.

    Tokens carry sub, roles, iat and exp. There is no revocation list:
    a token stays valid until exp, with the roles it was issued with.
    """

    def __init__(self, secret: SecretStr, algorithm: str = "HS256", ttl_minutes: int = 15) -> None:
        if not secret.get_secret_value().strip():
            raise ValueError("token signing secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = timedelta(minutes=ttl_minutes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            ttl_minutes=settings.JWT_EXPIRE_MINUTES,
        )

    def issue(self, subject: str, roles: Iterable[str], now: datetime | None = None) -> str:
        """Create a signed token for subject with roles; expires ttl after now."""
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(subject),
            "roles": sorted(set(roles)),
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self._secret.get_secret_value(), algorithm=self.algorithm)

    def verify(self, token: str, now: datetime | None = None) -> Claims:
        """
        Validate signature, algorithm and expiry; return the claims.
        Raises Unauthenticated on any failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret.get_secret_value(),
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as e:
            raise Unauthenticated("invalid token") from e

        exp = payload.get("exp")
        iat = payload.get("iat")
        if not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
            raise Unauthenticated("invalid token payload")
        current = now or datetime.now(UTC)
        if current.timestamp() >= exp:
            raise Unauthenticated("token expired")

        sub = payload.get("sub")
        roles = payload.get("roles")
        if not isinstance(sub, str) or not sub:
            raise Unauthenticated("invalid token payload")
        if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
            raise Unauthenticated("invalid token payload")
        return Claims(
            subject=sub,
            roles=frozenset(roles),
            issued_at=datetime.fromtimestamp(iat, UTC),
            expires_at=datetime.fromtimestamp(exp, UTC),
        )


def authorize(claims: Claims, required: Collection[str]) -> None:
    """Pass when claims hold at least one of the required roles; else PermissionDenied."""
    if not claims.roles & frozenset(required):
        raise PermissionDenied("forbidden")
