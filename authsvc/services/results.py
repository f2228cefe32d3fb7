"""Result types returned by SessionManager operations."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from authsvc.core.tokens import TokenPair

if TYPE_CHECKING:
    from authsvc.models import User

T = TypeVar("T")


class AuthErrorKind(str, Enum):
    ALREADY_EXISTS = "already_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    MISSING_TOKEN = "missing_token"
    NOT_LOGGED_IN = "not_logged_in"
    INVALID_TOKEN = "invalid_token"
    USER_NOT_FOUND = "user_not_found"
    INTERNAL_FAILURE = "internal_failure"


# kind -> (HTTP status, client-facing message)
ERROR_RESPONSES: dict[AuthErrorKind, tuple[int, str]] = {
    AuthErrorKind.ALREADY_EXISTS: (409, "Email already in use"),
    AuthErrorKind.INVALID_CREDENTIALS: (401, "Invalid credentials"),
    AuthErrorKind.MISSING_TOKEN: (401, "Authentication required. Please log in again."),
    AuthErrorKind.NOT_LOGGED_IN: (401, "User not logged in"),
    AuthErrorKind.INVALID_TOKEN: (403, "Invalid or expired token. Please log in again."),
    AuthErrorKind.USER_NOT_FOUND: (404, "User not found. Please log in again."),
    AuthErrorKind.INTERNAL_FAILURE: (500, "Internal server error"),
}


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class AuthError:
    """
    A typed failure. `reason` is diagnostic detail for logs only (never the password,
    never a token value); clients see `message` and the status for `kind`.
    """

    kind: AuthErrorKind
    reason: str | None = None

    @property
    def status_code(self) -> int:
        return ERROR_RESPONSES[self.kind][0]

    @property
    def message(self) -> str:
        return ERROR_RESPONSES[self.kind][1]


@dataclass(frozen=True)
class UserInfo:
    """Public view of a user; never carries the password hash or refresh token."""

    id: str
    email: str
    username: str | None
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, user: "User") -> "UserInfo":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            created_at=user.created_at,
        )


@dataclass(frozen=True)
class LoginResult:
    user: UserInfo
    tokens: TokenPair
