"""
Identity Provider Client

Email/password identity operations against the hosted identity provider's
REST interface.
"""

import logging
from typing import Optional

import httpx

from core.backend_client import BackendClient, BackendResult
from core.config import BackendConfig

logger = logging.getLogger(__name__)


class IdentityClient(BackendClient):
    """Client for the hosted identity provider"""

    def __init__(
        self,
        config: BackendConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config, http_client)
        self.auth_url = config.auth_url

    async def sign_in(self, email: str, password: str) -> BackendResult:
        """Password grant; data is the session payload"""
        return await self.request_json(
            "POST",
            f"{self.auth_url}/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    async def sign_up(
        self, email: str, password: str, redirect_to: Optional[str] = None
    ) -> BackendResult:
        """Register; data is a user (confirmation pending) or a session"""
        params = {"redirect_to": redirect_to} if redirect_to else None
        return await self.request_json(
            "POST",
            f"{self.auth_url}/signup",
            params=params,
            json={"email": email, "password": password},
        )

    async def sign_out(self, access_token: str) -> BackendResult:
        """Revoke the session behind access_token"""
        return await self.request("POST", f"{self.auth_url}/logout", access_token=access_token)

    async def request_password_reset(
        self, email: str, redirect_to: Optional[str] = None
    ) -> BackendResult:
        params = {"redirect_to": redirect_to} if redirect_to else None
        return await self.request_json(
            "POST",
            f"{self.auth_url}/recover",
            params=params,
            json={"email": email},
        )

    async def update_password(self, access_token: str, password: str) -> BackendResult:
        return await self.request_json(
            "PUT",
            f"{self.auth_url}/user",
            access_token=access_token,
            json={"password": password},
        )

    async def get_user(self, access_token: str) -> BackendResult:
        return await self.request_json("GET", f"{self.auth_url}/user", access_token=access_token)

    async def refresh_session(self, refresh_token: str) -> BackendResult:
        return await self.request_json(
            "POST",
            f"{self.auth_url}/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )


__all__ = ["IdentityClient"]
