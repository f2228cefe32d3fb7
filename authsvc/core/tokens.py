"""Access/refresh JWT issuance and verification."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import jwt

from authsvc.core.config import Settings


class TokenFailure(str, Enum):
    """Why a token did not verify. Callers treat both as 'not authenticated'."""

    MALFORMED = "malformed"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TokenInvalid:
    reason: TokenFailure
    detail: str = ""


@dataclass(frozen=True)
class AccessClaims:
    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class RefreshClaims:
    user_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class TokenConfig:
    """Signing material and lifetimes for both token kinds."""

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)

    def __post_init__(self) -> None:
        if self.access_secret == self.refresh_secret:
            raise ValueError("access and refresh secrets must differ")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            access_secret=settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            refresh_secret=settings.REFRESH_TOKEN_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenIssuer:
    """
    Signs and verifies access and refresh tokens.

    Access tokens carry sub (user id) and email; refresh tokens carry only sub.
    Each token gets a random jti so two pairs minted in the same second differ.
    No persistence: this is a pure function of config, claims and clock.
    """

    def __init__(
        self,
        config: TokenConfig,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self._now = now

    def _encode(self, claims: dict[str, Any], secret: str, ttl: timedelta) -> str:
        now = self._now()
        payload = {
            **claims,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def issue(self, user_id: str, email: str) -> TokenPair:
        """Create a fresh access/refresh pair for the user."""
        access = self._encode(
            {"sub": str(user_id), "email": email},
            self.config.access_secret,
            self.config.access_ttl,
        )
        refresh = self._encode(
            {"sub": str(user_id)},
            self.config.refresh_secret,
            self.config.refresh_ttl,
        )
        return TokenPair(access_token=access, refresh_token=refresh)

    def verify(self, token: str, secret: str) -> dict[str, Any] | TokenInvalid:
        """
        Check signature and expiry; return the decoded payload or TokenInvalid.
        Never raises: expired tokens yield EXPIRED, everything else MALFORMED.
        """
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            return TokenInvalid(TokenFailure.EXPIRED, "token expired")
        except jwt.PyJWTError as e:
            return TokenInvalid(TokenFailure.MALFORMED, type(e).__name__)
        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            return TokenInvalid(TokenFailure.MALFORMED, "missing sub")
        return payload

    def verify_access(self, token: str) -> AccessClaims | TokenInvalid:
        payload = self.verify(token, self.config.access_secret)
        if isinstance(payload, TokenInvalid):
            return payload
        email = payload.get("email")
        if not isinstance(email, str) or not email:
            return TokenInvalid(TokenFailure.MALFORMED, "missing email")
        return AccessClaims(
            user_id=payload["sub"],
            email=email,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )

    def verify_refresh(self, token: str) -> RefreshClaims | TokenInvalid:
        payload = self.verify(token, self.config.refresh_secret)
        if isinstance(payload, TokenInvalid):
            return payload
        return RefreshClaims(
            user_id=payload["sub"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )
