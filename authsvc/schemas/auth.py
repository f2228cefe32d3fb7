"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from authsvc.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN


def _check_password_strength(v: str) -> str:
    if len(v) < PASSWORD_MIN_LEN:
        raise ValueError("Password must be at least 8 characters long")
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one number")
    if not any(c.isupper() for c in v):
        raise ValueError("Password must contain at least one uppercase letter")
    return v


def _normalize_email(v: str) -> str:
    return v.strip().lower()


class SignUpRequest(BaseModel):
    """Signup body: email, password, confirmPassword and an optional display name."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(..., max_length=PASSWORD_MAX_LEN)
    confirm_password: str = Field(..., alias="confirmPassword", max_length=PASSWORD_MAX_LEN)
    username: str | None = Field(default=None, min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "SignUpRequest":
        if self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(..., max_length=PASSWORD_MAX_LEN)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_strength(v)


class UserOut(BaseModel):
    """User as returned to clients (no password hash, no refresh token)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: str | None = None
    created_at: datetime | None = None


class UserResponse(BaseModel):
    """Response for signup and login."""

    success: bool = True
    user: UserOut


class RefreshResponse(BaseModel):
    """Response for refresh: the new access token (the refresh token travels as a cookie)."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    access_token: str = Field(..., serialization_alias="accessToken")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class AccessClaimsOut(BaseModel):
    id: str
    email: str


class CurrentUserResponse(BaseModel):
    """Response for GET /me: claims carried by the access token."""

    success: bool = True
    user: AccessClaimsOut
