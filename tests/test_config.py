"""Unit tests for authsvc.core.config.Settings validation."""

import unittest

from pydantic import ValidationError

from authsvc.api.cookies import CookiePolicy
from authsvc.core.config import Settings
from authsvc.core.tokens import TokenConfig

ACCESS = "cfg-access-secret-0123456789abcdef0123456789ab"
REFRESH = "cfg-refresh-secret-fedcba9876543210fedcba9876"


def _settings(**overrides: object) -> Settings:
    values: dict = {
        "DATABASE_URL": "sqlite://",
        "ACCESS_TOKEN_SECRET": ACCESS,
        "REFRESH_TOKEN_SECRET": REFRESH,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSecrets(unittest.TestCase):
    """Signing secrets must differ, and placeholders are refused in prod."""

    def test_identical_secrets_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(REFRESH_TOKEN_SECRET=ACCESS)

    def test_default_secrets_rejected_in_prod(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(APP_ENV="prod", ACCESS_TOKEN_SECRET="change-me-access-secret")

    def test_empty_secret_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(ACCESS_TOKEN_SECRET="   ")


class TestRanges(unittest.TestCase):
    def test_database_url_scheme(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://root@localhost/db")

    def test_refresh_expiry_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(REFRESH_TOKEN_EXPIRE_DAYS=0)

    def test_non_hmac_algorithm_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="RS256")

    def test_general_rate_limit_bounds(self) -> None:
        self.assertEqual(_settings().GENERAL_RATE_LIMIT_PER_MINUTE, 100)
        with self.assertRaises(ValidationError):
            _settings(GENERAL_RATE_LIMIT_PER_MINUTE=0)

    def test_trusted_proxy_subnets_parsed(self) -> None:
        s = _settings(TRUSTED_PROXY_SUBNETS="10.0.0.0/8, 192.168.1.1 fd00::/8")
        self.assertEqual(
            [str(n) for n in s.trusted_proxy_networks],
            ["10.0.0.0/8", "192.168.1.1/32", "fd00::/8"],
        )
        self.assertEqual(_settings().trusted_proxy_networks, [])

    def test_bad_trusted_proxy_subnet_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(TRUSTED_PROXY_SUBNETS="10.0.0.0/8,not-a-network")


class TestDerivedConfig(unittest.TestCase):
    """TokenConfig and CookiePolicy are built from Settings, not read ambiently."""

    def test_token_config_from_settings(self) -> None:
        config = TokenConfig.from_settings(_settings(ACCESS_TOKEN_EXPIRE_MINUTES=5))
        self.assertEqual(config.access_secret, ACCESS)
        self.assertEqual(config.refresh_secret, REFRESH)
        self.assertEqual(config.access_ttl.total_seconds(), 300)
        self.assertEqual(config.refresh_ttl.days, 7)

    def test_cookie_policy_secure_only_in_prod(self) -> None:
        self.assertFalse(CookiePolicy.from_settings(_settings(APP_ENV="dev")).secure)
        self.assertTrue(CookiePolicy.from_settings(_settings(APP_ENV="prod")).secure)


if __name__ == "__main__":
    unittest.main()
