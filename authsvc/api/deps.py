"""FastAPI dependencies handing out the per-app objects built by create_app."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from authsvc.api.cookies import CookiePolicy
from authsvc.api.rate_limit import RateLimit
from authsvc.core.config import Settings
from authsvc.core.database import get_db
from authsvc.core.security import PasswordHasher
from authsvc.core.tokens import TokenIssuer
from authsvc.services.credential_store import CredentialStore
from authsvc.services.session_manager import SessionManager


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_cookie_policy(request: Request) -> CookiePolicy:
    return request.app.state.cookie_policy


def get_session_manager(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> SessionManager:
    """Per-request SessionManager bound to the request's DB session."""
    return SessionManager(CredentialStore(db), hasher, issuer)


general_rate_limit = RateLimit("general")
auth_rate_limit = RateLimit("auth")
