"""Unit tests for app.core.config: required secrets, backend rules and validators."""

import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from app.core.config import Settings

SECRET = "config-test-secret-0123456789abcdef0123"


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {"JWT_SECRET": SECRET, "STORE_BACKEND": "memory"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestRequiredSettings(unittest.TestCase):
    def test_missing_jwt_secret_is_fatal(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None, STORE_BACKEND="memory")

    def test_blank_jwt_secret_is_fatal(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_SECRET="   ")

    def test_sql_backend_requires_database_url(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValidationError):
                _settings(STORE_BACKEND="sql")

    def test_reads_environment(self) -> None:
        env = {
            "JWT_SECRET": SECRET,
            "DATABASE_URL": "postgresql+psycopg2://app:app@db:5432/booksdb",
            "PORT": "9090",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.STORE_BACKEND, "sql")
        self.assertEqual(settings.PORT, 9090)
        self.assertEqual(settings.JWT_SECRET.get_secret_value(), SECRET)


class TestDefaults(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = _settings()
        self.assertEqual(settings.PORT, 8080)
        self.assertEqual(settings.JWT_ALGORITHM, "HS256")
        self.assertEqual(settings.JWT_EXPIRE_MINUTES, 15)
        self.assertEqual(settings.API_PREFIX, "")
        self.assertEqual((settings.DB_POOL_MIN_SIZE, settings.DB_POOL_MAX_SIZE), (2, 10))

    def test_secret_not_in_repr(self) -> None:
        self.assertNotIn(SECRET, repr(_settings()))


class TestValidators(unittest.TestCase):
    def test_database_url_scheme(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://root@localhost/db")
        self.assertEqual(_settings(DATABASE_URL=" sqlite:// ").DATABASE_URL, "sqlite://")

    def test_pool_max_must_cover_min(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DB_POOL_MIN_SIZE=5, DB_POOL_MAX_SIZE=2)

    def test_port_range(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(PORT=70000)

    def test_jwt_algorithm_must_be_hmac(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="RS256")

    def test_expire_minutes_range(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_EXPIRE_MINUTES=0)

    def test_api_prefix_normalized(self) -> None:
        self.assertEqual(_settings(API_PREFIX="/api/v1/").API_PREFIX, "/api/v1")
        with self.assertRaises(ValidationError):
            _settings(API_PREFIX="api")

    def test_log_level(self) -> None:
        self.assertEqual(_settings(LOG_LEVEL="debug").LOG_LEVEL, "DEBUG")
        with self.assertRaises(ValidationError):
            _settings(LOG_LEVEL="verbose")


if __name__ == "__main__":
    unittest.main()
