"""Auth routes: signup, login, refresh and logout over http-only cookies."""

from typing import Annotated, NoReturn

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response

from authsvc.api.cookies import CookiePolicy
from authsvc.api.deps import auth_rate_limit, get_cookie_policy, get_session_manager
from authsvc.schemas.auth import (
    AccessClaimsOut,
    CurrentUserResponse,
    LoginRequest,
    MessageResponse,
    RefreshResponse,
    SignUpRequest,
    UserOut,
    UserResponse,
)
from authsvc.services.results import AuthError
from authsvc.services.session_manager import SessionManager

router = APIRouter()

Manager = Annotated[SessionManager, Depends(get_session_manager)]
Cookies = Annotated[CookiePolicy, Depends(get_cookie_policy)]


def _raise_for(error: AuthError) -> NoReturn:
    """Map a typed failure to its HTTP status; the diagnostic reason stays server-side."""
    raise HTTPException(status_code=error.status_code, detail=error.message)


@router.post("/signup", response_model=UserResponse, dependencies=[Depends(auth_rate_limit)])
def signup(body: SignUpRequest, manager: Manager) -> UserResponse:
    """Register a new account. No session is started; call /login afterwards."""
    result = manager.sign_up(body.email, body.password, body.username)
    if isinstance(result, AuthError):
        _raise_for(result)
    return UserResponse(user=UserOut.model_validate(result.value))


@router.post("/login", response_model=UserResponse, dependencies=[Depends(auth_rate_limit)])
def login(
    body: LoginRequest,
    response: Response,
    manager: Manager,
    cookies: Cookies,
) -> UserResponse:
    """
    Authenticate with email and password. Sets the access_token (session) and
    refresh_token (7 day) cookies; any earlier refresh token stops working.
    """
    result = manager.login(body.email, body.password)
    if isinstance(result, AuthError):
        _raise_for(result)
    tokens = result.value.tokens
    cookies.set_access_cookie(response, tokens.access_token)
    cookies.set_refresh_cookie(response, tokens.refresh_token)
    return UserResponse(user=UserOut.model_validate(result.value.user))


@router.post("/refresh", response_model=RefreshResponse, dependencies=[Depends(auth_rate_limit)])
def refresh(
    response: Response,
    manager: Manager,
    cookies: Cookies,
    refresh_token: Annotated[str | None, Cookie()] = None,
) -> RefreshResponse:
    """Exchange the refresh_token cookie for a new token pair (rotation-on-use)."""
    result = manager.refresh(refresh_token)
    if isinstance(result, AuthError):
        _raise_for(result)
    cookies.set_refresh_cookie(response, result.value.refresh_token)
    return RefreshResponse(access_token=result.value.access_token)


@router.post("/logout", response_model=MessageResponse, dependencies=[Depends(auth_rate_limit)])
def logout(
    response: Response,
    manager: Manager,
    cookies: Cookies,
    refresh_token: Annotated[str | None, Cookie()] = None,
) -> MessageResponse:
    """Revoke the user's stored refresh token and clear both cookies."""
    result = manager.logout(refresh_token)
    if isinstance(result, AuthError):
        _raise_for(result)
    cookies.clear_session_cookies(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=CurrentUserResponse)
def me(
    manager: Manager,
    access_token: Annotated[str | None, Cookie()] = None,
) -> CurrentUserResponse:
    """Return the identity carried by a valid access_token cookie (no store lookup)."""
    result = manager.authenticate_access(access_token)
    if isinstance(result, AuthError):
        _raise_for(result)
    return CurrentUserResponse(
        user=AccessClaimsOut(id=result.value.user_id, email=result.value.email)
    )
