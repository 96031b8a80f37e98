"""
Authentication Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Optional, Protocol, runtime_checkable

from core.backend_client import BackendResult


# Custom exceptions - defined here to avoid importing the identity client

class AuthenticationError(Exception):
    """Base authentication error; the message is shown to the user as-is"""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password"""
    pass


class RegistrationError(AuthenticationError):
    """Registration failed"""
    pass


class PasswordResetError(AuthenticationError):
    """Password-reset e-mail could not be requested"""
    pass


class PasswordUpdateError(AuthenticationError):
    """New password rejected locally or by the provider"""
    pass


class InvalidTokenError(AuthenticationError):
    """Invalid or expired token"""
    pass


class IdentityProviderUnavailableError(AuthenticationError):
    """Identity provider could not be reached"""
    pass


class RateLimitedError(AuthenticationError):
    """Form locked after too many failed attempts"""

    def __init__(self, remaining_seconds: int):
        super().__init__(f"Too Many Attempts. Please try again in {remaining_seconds} seconds.")
        self.remaining_seconds = remaining_seconds


@runtime_checkable
class IdentityClientProtocol(Protocol):
    """
    Interface for the identity provider.

    Every call returns a BackendResult; nothing raises across this boundary.
    """

    async def sign_in(self, email: str, password: str) -> BackendResult:
        """data: provider session dict"""
        ...

    async def sign_up(self, email: str, password: str, redirect_to: Optional[str] = None) -> BackendResult:
        """data: provider user or session dict"""
        ...

    async def sign_out(self, access_token: str) -> BackendResult:
        ...

    async def request_password_reset(self, email: str, redirect_to: Optional[str] = None) -> BackendResult:
        ...

    async def update_password(self, access_token: str, password: str) -> BackendResult:
        """data: provider user dict"""
        ...

    async def get_user(self, access_token: str) -> BackendResult:
        """data: provider user dict"""
        ...

    async def refresh_session(self, refresh_token: str) -> BackendResult:
        """data: provider session dict"""
        ...

    async def health_check(self) -> bool:
        ...
