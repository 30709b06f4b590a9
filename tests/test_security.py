"""Unit tests for app.core.security: password hashing, token issue/verify and role checks."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt
from pydantic import SecretStr

from app.core.context import RequestContext
from app.core.errors import PermissionDenied, Unauthenticated
from app.core.security import (
    ADMIN_ROLES,
    EDITOR_ROLES,
    TokenService,
    authorize,
    hash_password,
    verify_password,
)

SECRET = "unit-test-secret-0123456789abcdef0123456789"


def _service(secret: str = SECRET, **kwargs: object) -> TokenService:
    return TokenService(SecretStr(secret), **kwargs)


class TestPasswordHashing(unittest.TestCase):
    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = hash_password("correct horse", rounds=4)
        self.assertNotEqual(hashed, "correct horse")
        self.assertTrue(verify_password("correct horse", hashed))
        self.assertFalse(verify_password("wrong horse", hashed))

    def test_salted(self) -> None:
        self.assertNotEqual(hash_password("same-password", rounds=4), hash_password("same-password", rounds=4))

    def test_malformed_hash_does_not_verify(self) -> None:
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))


class TestTokenIssueVerify(unittest.TestCase):
    def test_round_trip_carries_subject_and_roles(self) -> None:
        service = _service()
        now = datetime.now(UTC)
        claims = service.verify(service.issue("user-1", ["editor", "admin", "editor"], now=now))
        self.assertEqual(claims.subject, "user-1")
        self.assertEqual(claims.roles, frozenset({"editor", "admin"}))
        self.assertEqual(claims.expires_at - claims.issued_at, timedelta(minutes=15))

    def test_expired_token_rejected_even_with_valid_signature(self) -> None:
        service = _service()
        token = service.issue("user-1", ["editor"], now=datetime.now(UTC) - timedelta(minutes=16))
        with self.assertRaises(Unauthenticated) as ctx:
            service.verify(token)
        self.assertEqual(ctx.exception.message, "token expired")

    def test_token_valid_until_expiry(self) -> None:
        service = _service()
        issued = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        token = service.issue("user-1", ["editor"], now=issued)
        service.verify(token, now=issued + timedelta(minutes=14, seconds=59))
        with self.assertRaises(Unauthenticated):
            service.verify(token, now=issued + timedelta(minutes=15))
        with self.assertRaises(Unauthenticated):
            service.verify(token, now=issued + timedelta(days=1))

    def test_ttl_is_configurable(self) -> None:
        service = _service(ttl_minutes=1)
        issued = datetime.now(UTC)
        claims = service.verify(service.issue("u", ["admin"], now=issued), now=issued)
        self.assertEqual(claims.expires_at - claims.issued_at, timedelta(minutes=1))

    def test_wrong_secret_rejected(self) -> None:
        token = _service(secret="another-secret-0123456789abcdef012345678").issue("u", ["admin"])
        with self.assertRaises(Unauthenticated):
            _service().verify(token)

    def test_mismatched_algorithm_rejected(self) -> None:
        token = _service(algorithm="HS512").issue("u", ["admin"])
        with self.assertRaises(Unauthenticated):
            _service(algorithm="HS256").verify(token)

    def test_tampered_payload_rejected(self) -> None:
        token = _service().issue("u", ["editor"])
        header, payload, signature = token.split(".")
        forged = jwt.encode(
            {"sub": "u", "roles": ["admin"], "iat": 0, "exp": 9999999999},
            "attacker-secret-0123456789abcdef0123456",
            algorithm="HS256",
        ).split(".")[1]
        with self.assertRaises(Unauthenticated):
            _service().verify(f"{header}.{forged}.{signature}")

    def test_garbage_rejected(self) -> None:
        with self.assertRaises(Unauthenticated):
            _service().verify("not-a-token")

    def test_roles_must_be_a_list_of_strings(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "u", "roles": "admin", "iat": now, "exp": now + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(Unauthenticated):
            _service().verify(token)

    def test_missing_exp_rejected(self) -> None:
        token = jwt.encode({"sub": "u", "roles": ["admin"], "iat": datetime.now(UTC)}, SECRET, algorithm="HS256")
        with self.assertRaises(Unauthenticated):
            _service().verify(token)

    def test_blank_secret_refused(self) -> None:
        with self.assertRaises(ValueError):
            TokenService(SecretStr("  "))


class TestAuthorize(unittest.TestCase):
    def _claims(self, roles: list[str]):
        service = _service()
        return service.verify(service.issue("u", roles))

    def test_editor_passes_editor_route_and_fails_admin_route(self) -> None:
        claims = self._claims(["editor"])
        authorize(claims, EDITOR_ROLES)
        with self.assertRaises(PermissionDenied):
            authorize(claims, ADMIN_ROLES)

    def test_admin_passes_both(self) -> None:
        claims = self._claims(["admin"])
        authorize(claims, EDITOR_ROLES)
        authorize(claims, ADMIN_ROLES)

    def test_unrelated_role_denied(self) -> None:
        with self.assertRaises(PermissionDenied):
            authorize(self._claims(["reader"]), EDITOR_ROLES)


class TestRequestContext(unittest.TestCase):
    def test_accessors_fail_loudly_without_claims(self) -> None:
        context = RequestContext()
        self.assertFalse(context.is_authenticated)
        with self.assertRaises(Unauthenticated):
            _ = context.roles
        with self.assertRaises(Unauthenticated):
            _ = context.subject

    def test_accessors_expose_claims(self) -> None:
        service = _service()
        context = RequestContext(service.verify(service.issue("user-9", ["admin"])))
        self.assertTrue(context.is_authenticated)
        self.assertEqual(context.subject, "user-9")
        self.assertEqual(context.roles, frozenset({"admin"}))


if __name__ == "__main__":
    unittest.main()
