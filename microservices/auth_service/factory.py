"""
Auth Service Factory

Factory for creating auth service instances with proper dependency injection.
"""

import logging
from typing import Optional

from core.config import AppConfig, get_settings

from .auth_service import AuthenticationService
from .clients.identity_client import IdentityClient

logger = logging.getLogger(__name__)


class AuthServiceFactory:
    """Factory for creating auth service components"""

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or get_settings()
        self._identity_client: Optional[IdentityClient] = None
        self._service: Optional[AuthenticationService] = None

    async def initialize(self) -> None:
        """Initialize all components; raises BackendNotConfiguredError without backend credentials"""
        logger.info("Initializing Auth Service components...")
        self._identity_client = IdentityClient(self.config.backend)
        self._service = AuthenticationService(
            identity=self._identity_client,
            site_url=self.config.services.site_url,
        )
        logger.info("Auth Service components initialized")

    async def close(self) -> None:
        if self._identity_client:
            await self._identity_client.close()
        logger.info("Auth Service components closed")

    @property
    def service(self) -> AuthenticationService:
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service

    @property
    def identity_client(self) -> IdentityClient:
        if not self._identity_client:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._identity_client


__all__ = ["AuthServiceFactory"]
