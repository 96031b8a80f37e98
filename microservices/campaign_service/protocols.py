"""
Campaign Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from typing import Any, Dict, List, Optional, Protocol

from core.backend_client import BackendResult

from .models import Campaign, CampaignQuery, ModerationVerdict


# ====================
# Repository Protocol
# ====================


class CampaignRepositoryProtocol(Protocol):
    """
    Protocol for the campaign record store

    Every call returns a BackendResult; nothing raises across this boundary.
    access_token is the caller's bearer token so that row-level security
    applies to the request.
    """

    async def health_check(self) -> bool:
        """Check repository health"""
        ...

    async def list_campaigns(
        self,
        query: CampaignQuery,
        page: int = 0,
        page_size: int = 6,
        access_token: Optional[str] = None,
    ) -> BackendResult:
        """Filter, order newest first, then slice one page. data: List[Campaign]"""
        ...

    async def get_campaign(
        self, campaign_id: str, access_token: Optional[str] = None
    ) -> BackendResult:
        """Fetch one campaign. data: Optional[Campaign]"""
        ...

    async def insert_campaign(
        self, row: Dict[str, Any], access_token: str
    ) -> BackendResult:
        """Insert one row. data: Campaign"""
        ...

    async def update_campaign(
        self, campaign_id: str, changes: Dict[str, Any], access_token: str
    ) -> BackendResult:
        """Update one row in place. data: Optional[Campaign]"""
        ...

    async def delete_campaign(
        self, campaign_id: str, access_token: str
    ) -> BackendResult:
        """Delete one row"""
        ...


# ====================
# Client Protocols
# ====================


class StorageClientProtocol(Protocol):
    """Protocol for the blob store"""

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
        access_token: Optional[str] = None,
    ) -> BackendResult:
        """Upload one object"""
        ...

    def get_public_url(self, bucket: str, path: str) -> str:
        """Public URL of an object"""
        ...

    async def remove(
        self, bucket: str, paths: List[str], access_token: Optional[str] = None
    ) -> BackendResult:
        """Remove objects from a bucket"""
        ...


class ModerationClientProtocol(Protocol):
    """Protocol for the external text classifier"""

    @property
    def is_configured(self) -> bool:
        ...

    async def classify(self, text: str) -> str:
        """Return the classifier's raw verdict token; may raise"""
        ...


class ContentSafetyGateProtocol(Protocol):
    """Protocol for the allow/deny gate used by the mutation flow"""

    async def moderate(self, text: str) -> ModerationVerdict:
        ...


# ====================
# Custom Exceptions
# ====================


class CampaignServiceError(Exception):
    """Base exception for campaign service errors"""
    pass


class CampaignNotFoundError(CampaignServiceError):
    """Raised when campaign is not found"""

    def __init__(self, campaign_id: str):
        super().__init__("Campaign not found.")
        self.campaign_id = campaign_id


class AuthenticationRequiredError(CampaignServiceError):
    """Raised when an operation needs a signed-in user"""

    def __init__(self, message: str = "You must be logged in to perform this action."):
        super().__init__(message)


class CampaignAccessDeniedError(CampaignServiceError):
    """Raised when a non-owner tries to edit or delete a campaign"""

    def __init__(self, message: str = "You are not authorized to edit this campaign."):
        super().__init__(message)


class CampaignValidationError(CampaignServiceError):
    """Raised when campaign validation fails"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class CampaignModerationError(CampaignServiceError):
    """Raised when the content-safety gate denies a submission"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class CampaignPersistenceError(CampaignServiceError):
    """Raised when the record store or blob store rejects or cannot be reached"""

    def __init__(self, message: str, connectivity: bool = False):
        super().__init__(message)
        self.connectivity = connectivity


class CampaignDeletionError(CampaignPersistenceError):
    """Raised when the record delete itself fails"""
    pass


class MediaUploadError(CampaignPersistenceError):
    """Raised when the blob store rejects an upload"""
    pass


class DeleteConfirmationError(CampaignServiceError):
    """Raised when a delete arrives without a valid confirmation token"""

    def __init__(self, message: str = "Deletion must be confirmed. Request a new confirmation and try again."):
        super().__init__(message)


__all__ = [
    "CampaignRepositoryProtocol",
    "StorageClientProtocol",
    "ModerationClientProtocol",
    "ContentSafetyGateProtocol",
    "CampaignServiceError",
    "CampaignNotFoundError",
    "AuthenticationRequiredError",
    "CampaignAccessDeniedError",
    "CampaignValidationError",
    "CampaignModerationError",
    "CampaignPersistenceError",
    "CampaignDeletionError",
    "MediaUploadError",
    "DeleteConfirmationError",
]
