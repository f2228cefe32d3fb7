"""Cookie policy for carrying the access and refresh tokens."""

from dataclasses import dataclass
from datetime import timedelta

from fastapi import Response

from authsvc.core.config import Settings

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"


@dataclass(frozen=True)
class CookiePolicy:
    """
    Both cookies are http-only and same-site strict; `secure` follows production mode.
    The access cookie is a session cookie, the refresh cookie lives as long as its token.
    """

    secure: bool
    refresh_max_age: timedelta = timedelta(days=7)
    path: str = "/"

    @classmethod
    def from_settings(cls, settings: Settings) -> "CookiePolicy":
        return cls(
            secure=settings.is_production,
            refresh_max_age=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def _set(self, response: Response, key: str, value: str, max_age: int | None) -> None:
        response.set_cookie(
            key=key,
            value=value,
            max_age=max_age,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite="strict",
        )

    def set_access_cookie(self, response: Response, token: str) -> None:
        self._set(response, ACCESS_TOKEN_COOKIE, token, max_age=None)

    def set_refresh_cookie(self, response: Response, token: str) -> None:
        self._set(
            response,
            REFRESH_TOKEN_COOKIE,
            token,
            max_age=int(self.refresh_max_age.total_seconds()),
        )

    def clear_session_cookies(self, response: Response) -> None:
        for key in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
            response.delete_cookie(
                key=key,
                path=self.path,
                secure=self.secure,
                httponly=True,
                samesite="strict",
            )
