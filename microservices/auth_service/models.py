"""
Authentication Service Models

Session and user shapes observed from the identity provider, auth change
events, and the request/response models of the auth API.
"""

import time
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class AuthChangeEvent(str, Enum):
    """Auth state changes delivered to session subscribers"""
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class AuthForm(str, Enum):
    """Forms guarded by the advisory rate limiter"""
    LOGIN = "login"
    REGISTER = "register"
    FORGOT = "forgot"


class AuthUser(BaseModel):
    """User identity as reported by the identity provider"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    email: Optional[str] = None
    role: Optional[str] = None
    email_confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


class Session(BaseModel):
    """
    Token bundle issued by the identity provider

    Not owned by the application; merely observed.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None
    user: AuthUser

    @classmethod
    def from_provider(cls, data: Dict[str, Any]) -> "Session":
        payload = dict(data)
        if payload.get("expires_at") is None and payload.get("expires_in") is not None:
            payload["expires_at"] = int(time.time()) + int(payload["expires_in"])
        return cls.model_validate(payload)

    @property
    def user_id(self) -> str:
        return self.user.id

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) >= self.expires_at


class SessionSnapshot(BaseModel):
    """Immutable view of the current auth state"""
    model_config = ConfigDict(frozen=True)

    event: AuthChangeEvent = AuthChangeEvent.INITIAL_SESSION
    session: Optional[Session] = None
    loading: bool = True

    @property
    def user(self) -> Optional[AuthUser]:
        return self.session.user if self.session else None


# ====================
# Request Models
# ====================

class SignInRequest(BaseModel):
    """Email/password sign-in"""
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class SignUpRequest(BaseModel):
    """Email/password registration"""
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class PasswordResetRequest(BaseModel):
    """Request a password-reset e-mail"""
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class PasswordUpdateRequest(BaseModel):
    """Set a new password for the signed-in (or recovering) user"""
    password: str
    confirm_password: str


class RefreshRequest(BaseModel):
    """Exchange a refresh token for a new session"""
    refresh_token: str = Field(..., min_length=1)


# ====================
# Response Models
# ====================

class SessionResponse(BaseModel):
    """Auth call outcome carrying a session"""
    session: Optional[Session] = None
    user: Optional[AuthUser] = None
    message: Optional[str] = None


class MessageResponse(BaseModel):
    """Auth call outcome carrying only a message"""
    message: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


__all__ = [
    "AuthChangeEvent",
    "AuthForm",
    "AuthUser",
    "Session",
    "SessionSnapshot",
    "SignInRequest",
    "SignUpRequest",
    "PasswordResetRequest",
    "PasswordUpdateRequest",
    "RefreshRequest",
    "SessionResponse",
    "MessageResponse",
    "HealthResponse",
]
