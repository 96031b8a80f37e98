"""
Authentication Service

Email/password identity flows on top of the hosted identity provider.
Provider error messages are passed through to the user verbatim.
"""

import logging
from typing import Type

from core.backend_client import BackendError

from .models import (
    AuthUser,
    PasswordResetRequest,
    PasswordUpdateRequest,
    Session,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
)
from .protocols import (
    AuthenticationError,
    IdentityClientProtocol,
    IdentityProviderUnavailableError,
    InvalidCredentialsError,
    InvalidTokenError,
    PasswordResetError,
    PasswordUpdateError,
    RegistrationError,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

REGISTRATION_MESSAGE = "Registration successful! Please check your email to verify your account."
RESET_LINK_MESSAGE = "Password reset link sent!"
PASSWORD_UPDATED_MESSAGE = "Password updated successfully!"


def _provider_error(
    error: BackendError,
    error_cls: Type[AuthenticationError],
    prefix: str = "",
) -> AuthenticationError:
    if error.is_connectivity:
        return IdentityProviderUnavailableError(error.message)
    return error_cls(f"{prefix}{error.message}")


class AuthenticationService:
    """Identity flows: sign-in, sign-up, sign-out, password reset and update"""

    def __init__(self, identity: IdentityClientProtocol, site_url: str = "http://localhost:3000"):
        self.identity = identity
        self.site_url = site_url.rstrip("/")

    @property
    def sign_up_redirect(self) -> str:
        return f"{self.site_url}/"

    @property
    def password_reset_redirect(self) -> str:
        return f"{self.site_url}/#/update-password"

    async def sign_in(self, request: SignInRequest) -> Session:
        result = await self.identity.sign_in(request.email, request.password)
        if result.error:
            logger.info(f"Sign-in rejected for {request.email}: {result.error.message}")
            raise _provider_error(result.error, InvalidCredentialsError)
        session = Session.from_provider(result.data)
        logger.info(f"User {session.user_id} signed in")
        return session

    async def sign_up(self, request: SignUpRequest) -> SessionResponse:
        """
        Register a new account

        When e-mail confirmation is on, the provider answers with a bare user
        and no session; the user has to confirm before signing in.
        """
        result = await self.identity.sign_up(
            request.email, request.password, redirect_to=self.sign_up_redirect
        )
        if result.error:
            raise _provider_error(result.error, RegistrationError)

        data = result.data or {}
        if data.get("access_token"):
            session = Session.from_provider(data)
            return SessionResponse(session=session, user=session.user, message=REGISTRATION_MESSAGE)

        user = AuthUser.model_validate(data.get("user") or data) if data else None
        return SessionResponse(user=user, message=REGISTRATION_MESSAGE)

    async def sign_out(self, access_token: str) -> None:
        result = await self.identity.sign_out(access_token)
        if result.error:
            logger.warning(f"Sign-out failed at identity provider: {result.error.message}")
            raise _provider_error(result.error, AuthenticationError)

    async def request_password_reset(self, request: PasswordResetRequest) -> str:
        result = await self.identity.request_password_reset(
            request.email, redirect_to=self.password_reset_redirect
        )
        if result.error:
            raise _provider_error(result.error, PasswordResetError)
        return RESET_LINK_MESSAGE

    @staticmethod
    def validate_new_password(request: PasswordUpdateRequest) -> None:
        if request.password != request.confirm_password:
            raise PasswordUpdateError("Passwords do not match.")
        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise PasswordUpdateError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )

    async def update_password(self, access_token: str, request: PasswordUpdateRequest) -> AuthUser:
        self.validate_new_password(request)
        result = await self.identity.update_password(access_token, request.password)
        if result.error:
            raise _provider_error(result.error, PasswordUpdateError, "Error updating password: ")
        user = AuthUser.model_validate(result.data)
        logger.info(f"Password updated for user {user.id}")
        return user

    async def get_user(self, access_token: str) -> AuthUser:
        result = await self.identity.get_user(access_token)
        if result.error:
            raise _provider_error(result.error, InvalidTokenError)
        return AuthUser.model_validate(result.data)

    async def refresh(self, refresh_token: str) -> Session:
        result = await self.identity.refresh_session(refresh_token)
        if result.error:
            raise _provider_error(result.error, InvalidTokenError)
        return Session.from_provider(result.data)

    async def health_check(self) -> bool:
        return await self.identity.health_check()


__all__ = [
    "AuthenticationService",
    "MIN_PASSWORD_LENGTH",
    "REGISTRATION_MESSAGE",
    "RESET_LINK_MESSAGE",
    "PASSWORD_UPDATED_MESSAGE",
]
