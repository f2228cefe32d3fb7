"""Pydantic request/response schemas."""

from authsvc.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RefreshResponse,
    SignUpRequest,
    UserOut,
    UserResponse,
)
from authsvc.schemas.health import HealthResponse

__all__ = [
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RefreshResponse",
    "SignUpRequest",
    "UserOut",
    "UserResponse",
]
