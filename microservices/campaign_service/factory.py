"""
Campaign Service Factory

Factory for creating campaign service instances with proper dependency injection.
"""

import logging
from typing import Optional

from core.config import AppConfig, get_settings

from .campaign_repository import CampaignRepository
from .campaign_service import CampaignService
from .clients.moderation_client import ModerationClient
from .clients.storage_client import StorageClient
from .moderation import ContentSafetyGate

logger = logging.getLogger(__name__)


class CampaignServiceFactory:
    """Factory for creating campaign service components"""

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or get_settings()
        self._repository: Optional[CampaignRepository] = None
        self._storage_client: Optional[StorageClient] = None
        self._moderation_client: Optional[ModerationClient] = None
        self._service: Optional[CampaignService] = None

    async def initialize(self) -> None:
        """Initialize all components; raises BackendNotConfiguredError without backend credentials"""
        logger.info("Initializing Campaign Service components...")

        backend = self.config.backend
        self._repository = CampaignRepository(backend)
        self._storage_client = StorageClient(backend)

        self._moderation_client = ModerationClient(self.config.moderation)
        if not self._moderation_client.is_configured:
            logger.warning("Moderation classifier not configured; submissions will not be screened")

        self._service = CampaignService(
            repository=self._repository,
            storage=self._storage_client,
            safety_gate=ContentSafetyGate(self._moderation_client),
            upload_config=self.config.uploads,
            portrait_bucket=backend.portrait_bucket,
            resume_bucket=backend.resume_bucket,
            page_size=self.config.page_size,
        )

        logger.info("Campaign Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Campaign Service components...")

        if self._storage_client:
            await self._storage_client.close()

        if self._repository:
            await self._repository.close()

        logger.info("Campaign Service components closed")

    @property
    def repository(self) -> CampaignRepository:
        """Get campaign repository"""
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def service(self) -> CampaignService:
        """Get campaign service"""
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service

    @property
    def moderation_client(self) -> Optional[ModerationClient]:
        return self._moderation_client


__all__ = [
    "CampaignServiceFactory",
]
