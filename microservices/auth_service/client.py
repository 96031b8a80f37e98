"""
Auth Service Client

Client library for the auth service. Owns the client side of the session:
every successful call publishes a snapshot to the SessionContext, "remember
me" is kept in client-local state, and the advisory rate limiter guards the
login, register and forgot-password forms.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from core.local_state import REMEMBERED_EMAIL_KEY, LocalStateStore
from core.notifications import ToastQueue, ToastType

from .auth_service import PASSWORD_UPDATED_MESSAGE, AuthenticationService
from .models import (
    AuthChangeEvent,
    AuthForm,
    AuthUser,
    PasswordUpdateRequest,
    Session,
    SessionResponse,
)
from .rate_limiter import AuthRateLimiter
from .session_context import SessionContext

logger = logging.getLogger(__name__)


class AuthClientError(Exception):
    """Error response (or transport failure) from the auth service"""

    def __init__(self, message: str, status_code: Optional[int] = None, connectivity: bool = False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.connectivity = connectivity


class AuthServiceClient:
    """Auth Service HTTP client"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session_context: Optional[SessionContext] = None,
        local_state: Optional[LocalStateStore] = None,
        rate_limiter: Optional[AuthRateLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        toasts: Optional[ToastQueue] = None,
    ):
        """
        Initialize Auth Service client

        Args:
            base_url: Auth service base URL, defaults to the configured one
            session_context: Where session snapshots are published
            local_state: Client-local store for the remembered e-mail
            rate_limiter: Advisory per-form attempt limiter
            toasts: Where user-visible outcomes are queued
        """
        if base_url is None:
            from core.config import get_settings
            base_url = get_settings().services.auth_service_url
        self.base_url = base_url.rstrip('/')
        self.session_context = session_context or SessionContext()
        self.local_state = local_state or LocalStateStore()
        self.rate_limiter = rate_limiter or AuthRateLimiter(self.local_state)
        self.client = http_client or httpx.AsyncClient(timeout=30.0)
        self.toasts = toasts

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _request(
        self, method: str, path: str, access_token: Optional[str] = None, **kwargs
    ) -> Any:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        try:
            response = await self.client.request(
                method, f"{self.base_url}{path}", headers=headers, **kwargs
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise AuthClientError(f"Failed to fetch: {e}", connectivity=True) from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            if not isinstance(detail, str):
                detail = str(detail)
            raise AuthClientError(detail, status_code=response.status_code)

        return response.json() if response.content else None

    async def _guarded(self, form: AuthForm, method: str, path: str, **kwargs) -> Any:
        """Rate-limited call: locked forms fail fast, failures are counted"""
        self.rate_limiter.check(form)
        try:
            return await self._request(method, path, **kwargs)
        except AuthClientError:
            self.rate_limiter.record_failure(form)
            raise

    # =============================================================================
    # Session state
    # =============================================================================

    def initialize(self) -> None:
        """Publish the initial (signed-out) state; ends the loading phase"""
        self.session_context.publish(AuthChangeEvent.INITIAL_SESSION, self.session_context.session)

    def remembered_email(self) -> Optional[str]:
        return self.local_state.get(REMEMBERED_EMAIL_KEY)

    def lockout_remaining(self, form: AuthForm) -> int:
        return self.rate_limiter.remaining_lockout(form)

    # =============================================================================
    # Flows
    # =============================================================================

    async def sign_in(self, email: str, password: str, remember_me: bool = False) -> Session:
        """
        Sign in and publish SIGNED_IN

        Example:
            >>> session = await client.sign_in("ada@example.com", "secret", remember_me=True)
            >>> client.session_context.user.email
            'ada@example.com'
        """
        data = await self._guarded(
            AuthForm.LOGIN,
            "POST",
            "/api/v1/auth/sign-in",
            json={"email": email, "password": password},
        )
        response = SessionResponse.model_validate(data)

        if remember_me:
            self.local_state.set(REMEMBERED_EMAIL_KEY, email)
        else:
            self.local_state.remove(REMEMBERED_EMAIL_KEY)

        self.session_context.publish(AuthChangeEvent.SIGNED_IN, response.session)
        return response.session

    async def sign_up(self, email: str, password: str) -> SessionResponse:
        data = await self._guarded(
            AuthForm.REGISTER,
            "POST",
            "/api/v1/auth/sign-up",
            json={"email": email, "password": password},
        )
        response = SessionResponse.model_validate(data)
        if response.session:
            self.session_context.publish(AuthChangeEvent.SIGNED_IN, response.session)
        return response

    async def request_password_reset(self, email: str) -> str:
        data = await self._guarded(
            AuthForm.FORGOT,
            "POST",
            "/api/v1/auth/password-reset",
            json={"email": email},
        )
        return data["message"]

    async def sign_out(self) -> None:
        """Revoke the session remotely if possible; the local session is always cleared"""
        token = self.session_context.access_token()
        try:
            if token:
                await self._request("POST", "/api/v1/auth/sign-out", access_token=token)
        except AuthClientError as e:
            logger.warning(f"Remote sign-out failed, clearing local session anyway: {e}")
        finally:
            self.session_context.publish(AuthChangeEvent.SIGNED_OUT, None)

    async def recover_session(self, access_token: str, refresh_token: Optional[str] = None) -> AuthUser:
        """Adopt the tokens from a password-recovery link and publish PASSWORD_RECOVERY"""
        data = await self._request("GET", "/api/v1/auth/session", access_token=access_token)
        user = SessionResponse.model_validate(data).user
        session = Session(access_token=access_token, refresh_token=refresh_token, user=user)
        self.session_context.publish(AuthChangeEvent.PASSWORD_RECOVERY, session)
        return user

    async def update_password(self, password: str, confirm_password: str) -> str:
        """Set a new password, then sign out so the user logs in with it"""
        request = PasswordUpdateRequest(password=password, confirm_password=confirm_password)
        AuthenticationService.validate_new_password(request)

        token = self.session_context.access_token()
        if not token:
            raise AuthClientError("User authentication required", status_code=401)

        await self._request(
            "POST",
            "/api/v1/auth/password-update",
            access_token=token,
            json=request.model_dump(),
        )
        await self.sign_out()
        if self.toasts is not None:
            self.toasts.enqueue(PASSWORD_UPDATED_MESSAGE, ToastType.SUCCESS)
        return PASSWORD_UPDATED_MESSAGE

    async def refresh(self) -> Session:
        session = self.session_context.session
        if session is None or not session.refresh_token:
            raise AuthClientError("No session to refresh", status_code=401)
        data = await self._request(
            "POST", "/api/v1/auth/refresh", json={"refresh_token": session.refresh_token}
        )
        refreshed = SessionResponse.model_validate(data).session
        self.session_context.publish(AuthChangeEvent.TOKEN_REFRESHED, refreshed)
        return refreshed

    async def current_user(self) -> Optional[AuthUser]:
        token = self.session_context.access_token()
        if not token:
            return None
        data = await self._request("GET", "/api/v1/auth/session", access_token=token)
        return SessionResponse.model_validate(data).user

    async def health_check(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")


__all__ = ["AuthServiceClient", "AuthClientError"]
