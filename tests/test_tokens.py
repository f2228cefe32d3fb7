"""Unit tests for authsvc.core.tokens: issuance, verification, failure kinds."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from authsvc.core.tokens import (
    AccessClaims,
    RefreshClaims,
    TokenConfig,
    TokenFailure,
    TokenInvalid,
    TokenIssuer,
)

ACCESS_SECRET = "unit-access-secret-0123456789abcdef0123456789"
REFRESH_SECRET = "unit-refresh-secret-fedcba9876543210fedcba98"


def _config(**kwargs: object) -> TokenConfig:
    params: dict = {"access_secret": ACCESS_SECRET, "refresh_secret": REFRESH_SECRET}
    params.update(kwargs)
    return TokenConfig(**params)


def _issuer_at(moment: datetime) -> TokenIssuer:
    return TokenIssuer(_config(), now=lambda: moment)


class TestTokenConfig(unittest.TestCase):
    """Secrets must be distinct; defaults match a 7 day refresh window."""

    def test_identical_secrets_rejected(self) -> None:
        with self.assertRaises(ValueError):
            TokenConfig(access_secret="same-secret", refresh_secret="same-secret")

    def test_default_refresh_ttl_is_seven_days(self) -> None:
        self.assertEqual(_config().refresh_ttl, timedelta(days=7))


class TestIssue(unittest.TestCase):
    """issue() signs minimal claims with the right secret for each token."""

    def setUp(self) -> None:
        self.issuer = TokenIssuer(_config())

    def test_access_token_claims(self) -> None:
        pair = self.issuer.issue("user-1", "a@x.com")
        payload = jwt.decode(pair.access_token, ACCESS_SECRET, algorithms=["HS256"])
        self.assertEqual(payload["sub"], "user-1")
        self.assertEqual(payload["email"], "a@x.com")
        self.assertIn("jti", payload)

    def test_refresh_token_carries_only_user_id(self) -> None:
        pair = self.issuer.issue("user-1", "a@x.com")
        payload = jwt.decode(pair.refresh_token, REFRESH_SECRET, algorithms=["HS256"])
        self.assertEqual(payload["sub"], "user-1")
        self.assertNotIn("email", payload)
        self.assertEqual(payload["exp"] - payload["iat"], 7 * 24 * 3600)

    def test_consecutive_pairs_differ(self) -> None:
        moment = datetime.now(UTC)
        issuer = _issuer_at(moment)
        first = issuer.issue("user-1", "a@x.com")
        second = issuer.issue("user-1", "a@x.com")
        self.assertNotEqual(first.refresh_token, second.refresh_token)
        self.assertNotEqual(first.access_token, second.access_token)


class TestVerify(unittest.TestCase):
    """verify_* return claims or TokenInvalid with MALFORMED/EXPIRED, never raise."""

    def setUp(self) -> None:
        self.issuer = TokenIssuer(_config())
        self.pair = self.issuer.issue("user-1", "a@x.com")

    def test_valid_access_token(self) -> None:
        claims = self.issuer.verify_access(self.pair.access_token)
        self.assertIsInstance(claims, AccessClaims)
        self.assertEqual(claims.user_id, "user-1")
        self.assertEqual(claims.email, "a@x.com")

    def test_valid_refresh_token(self) -> None:
        claims = self.issuer.verify_refresh(self.pair.refresh_token)
        self.assertIsInstance(claims, RefreshClaims)
        self.assertEqual(claims.user_id, "user-1")

    def test_tokens_are_not_interchangeable(self) -> None:
        as_refresh = self.issuer.verify_refresh(self.pair.access_token)
        as_access = self.issuer.verify_access(self.pair.refresh_token)
        self.assertIsInstance(as_refresh, TokenInvalid)
        self.assertEqual(as_refresh.reason, TokenFailure.MALFORMED)
        self.assertIsInstance(as_access, TokenInvalid)
        self.assertEqual(as_access.reason, TokenFailure.MALFORMED)

    def test_garbage_is_malformed(self) -> None:
        for token in ("", "abc", "a.b.c", self.pair.refresh_token[:-4] + "AAAA"):
            with self.subTest(token=token):
                result = self.issuer.verify_refresh(token)
                self.assertIsInstance(result, TokenInvalid)
                self.assertEqual(result.reason, TokenFailure.MALFORMED)

    def test_foreign_secret_is_malformed(self) -> None:
        other = TokenIssuer(
            _config(refresh_secret="another-refresh-secret-0000000000000000000000")
        )
        result = self.issuer.verify_refresh(other.issue("user-1", "a@x.com").refresh_token)
        self.assertEqual(result, TokenInvalid(TokenFailure.MALFORMED, "InvalidSignatureError"))

    def test_expired_refresh_token(self) -> None:
        stale = _issuer_at(datetime.now(UTC) - timedelta(days=8)).issue("user-1", "a@x.com")
        result = self.issuer.verify_refresh(stale.refresh_token)
        self.assertIsInstance(result, TokenInvalid)
        self.assertEqual(result.reason, TokenFailure.EXPIRED)

    def test_expired_access_token(self) -> None:
        stale = _issuer_at(datetime.now(UTC) - timedelta(hours=1)).issue("user-1", "a@x.com")
        result = self.issuer.verify_access(stale.access_token)
        self.assertEqual(result.reason, TokenFailure.EXPIRED)

    def test_missing_sub_is_malformed(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"iat": now, "exp": now + timedelta(minutes=5)},
            REFRESH_SECRET,
            algorithm="HS256",
        )
        result = self.issuer.verify_refresh(token)
        self.assertEqual(result.reason, TokenFailure.MALFORMED)

    def test_empty_sub_is_malformed(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "", "iat": now, "exp": now + timedelta(minutes=5)},
            REFRESH_SECRET,
            algorithm="HS256",
        )
        result = self.issuer.verify_refresh(token)
        self.assertEqual(result.reason, TokenFailure.MALFORMED)


if __name__ == "__main__":
    unittest.main()
