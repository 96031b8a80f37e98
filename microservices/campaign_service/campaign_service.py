"""
Campaign Service Business Logic

Implements the campaign listing pipeline, the gated create/update flow,
owner-only editing, the two-step delete with best-effort media cleanup,
and media uploads.
"""

import logging
import os
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from core.auth_dependencies import Actor
from core.config import UploadConfig

from .media import CARD_THUMBNAIL, DETAIL_PORTRAIT, get_storage_info, transform_image_url
from .models import (
    MODERATED_FIELDS,
    Campaign,
    CampaignCard,
    CampaignCreateRequest,
    CampaignDetail,
    CampaignPage,
    CampaignQuery,
    CampaignUpdateRequest,
    DeleteConfirmationResponse,
    MediaKind,
    MediaUploadResponse,
    SubmissionState,
)
from .moderation import ContentSafetyGate
from .pagination import NETWORK_ERROR_MESSAGE, PAGE_SIZE, has_more_after, load_error_message
from .protocols import (
    AuthenticationRequiredError,
    CampaignAccessDeniedError,
    CampaignDeletionError,
    CampaignModerationError,
    CampaignNotFoundError,
    CampaignPersistenceError,
    CampaignRepositoryProtocol,
    CampaignValidationError,
    ContentSafetyGateProtocol,
    DeleteConfirmationError,
    MediaUploadError,
    StorageClientProtocol,
)
from .rich_text import create_snippet, sanitize_html

logger = logging.getLogger(__name__)

StateCallback = Callable[[SubmissionState], None]

# Extensions used when the uploaded filename has none
CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "application/pdf": "pdf",
}


@dataclass(frozen=True)
class PendingDeletion:
    """Outstanding delete confirmation"""
    campaign_id: str
    user_id: str
    expires_at: datetime


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CampaignService:
    """Campaign service business logic layer"""

    DELETE_CONFIRMATION_TTL = timedelta(minutes=5)

    def __init__(
        self,
        repository: CampaignRepositoryProtocol,
        storage: Optional[StorageClientProtocol] = None,
        safety_gate: Optional[ContentSafetyGateProtocol] = None,
        upload_config: Optional[UploadConfig] = None,
        portrait_bucket: str = "portraits",
        resume_bucket: str = "resumes",
        page_size: int = PAGE_SIZE,
        clock: Callable[[], datetime] = _now,
    ):
        self.repository = repository
        self.storage = storage
        self.safety_gate = safety_gate or ContentSafetyGate()
        self.upload_config = upload_config or UploadConfig()
        self.buckets = {
            MediaKind.PORTRAIT: portrait_bucket,
            MediaKind.RESUME: resume_bucket,
        }
        self.page_size = page_size
        self._clock = clock
        self._pending_deletions: Dict[str, PendingDeletion] = {}

    # ====================
    # Reads
    # ====================

    async def list_campaigns(
        self,
        query: CampaignQuery,
        page: int = 0,
        actor: Optional[Actor] = None,
    ) -> CampaignPage:
        """
        One page of campaigns: filter, then newest first, then slice

        Owner-scoped queries without an owner id return an empty final page
        without touching the record store.
        """
        if page < 0:
            raise CampaignValidationError("Page must be zero or greater", field="page")

        if query.scoped_to_owner and not query.owner_id:
            return CampaignPage(page=page, page_size=self.page_size, has_more=False)

        result = await self.repository.list_campaigns(
            query,
            page=page,
            page_size=self.page_size,
            access_token=actor.access_token if actor else None,
        )
        if result.error:
            logger.error(f"Error fetching paginated campaigns: {result.error.message}")
            raise CampaignPersistenceError(
                load_error_message(result.error.message, result.error.is_connectivity),
                connectivity=result.error.is_connectivity,
            )

        campaigns = result.data or []
        return CampaignPage(
            campaigns=campaigns,
            page=page,
            page_size=self.page_size,
            has_more=has_more_after(len(campaigns), self.page_size),
        )

    async def get_campaign(self, campaign_id: str, actor: Optional[Actor] = None) -> Campaign:
        """Get campaign by ID"""
        result = await self.repository.get_campaign(
            campaign_id, access_token=actor.access_token if actor else None
        )
        if result.error:
            logger.error(f"Error fetching campaign {campaign_id}: {result.error.message}")
            if result.error.is_connectivity:
                raise CampaignPersistenceError(NETWORK_ERROR_MESSAGE, connectivity=True)
            raise CampaignPersistenceError(
                f"Failed to load campaign. An unexpected error occurred: {result.error.message}"
            )
        if result.data is None:
            raise CampaignNotFoundError(campaign_id)
        return result.data

    async def get_campaign_detail(
        self, campaign_id: str, actor: Optional[Actor] = None
    ) -> CampaignDetail:
        campaign = await self.get_campaign(campaign_id, actor)
        return self.to_detail(campaign)

    async def get_campaign_for_edit(self, campaign_id: str, actor: Optional[Actor]) -> Campaign:
        """Load a campaign for its owner; anyone else is turned away"""
        actor = self._require_actor(actor)
        return await self._load_owned(campaign_id, actor)

    @staticmethod
    def to_card(campaign: Campaign) -> CampaignCard:
        return CampaignCard(
            **campaign.model_dump(),
            snippet=create_snippet(campaign.proposed_policies),
            thumbnail_url=transform_image_url(campaign.portrait_url, CARD_THUMBNAIL) or None,
        )

    @staticmethod
    def to_detail(campaign: Campaign) -> CampaignDetail:
        return CampaignDetail(
            **campaign.model_dump(),
            proposed_policies_html=sanitize_html(campaign.proposed_policies),
            snippet=create_snippet(campaign.proposed_policies),
            portrait_display_url=transform_image_url(campaign.portrait_url, DETAIL_PORTRAIT) or None,
        )

    # ====================
    # Create / Update
    # ====================

    async def create_campaign(
        self,
        request: CampaignCreateRequest,
        actor: Optional[Actor],
        on_state: Optional[StateCallback] = None,
    ) -> Campaign:
        """Validate, moderate, then insert; the row is stamped with the actor's id"""
        notify = on_state or (lambda state: None)

        notify(SubmissionState.VALIDATING)
        if actor is None:
            notify(SubmissionState.FAILED)
            raise AuthenticationRequiredError("You must be logged in to create a campaign.")

        await self._moderate(request.moderation_text(), notify)

        notify(SubmissionState.PERSISTING)
        result = await self.repository.insert_campaign(
            request.to_row(actor.user_id), access_token=actor.access_token
        )
        if result.error:
            notify(SubmissionState.FAILED)
            raise CampaignPersistenceError(
                f"Error creating campaign: {result.error.message}",
                connectivity=result.error.is_connectivity,
            )

        notify(SubmissionState.SUCCESS)
        logger.info(f"Campaign {result.data.id} created by {actor.user_id}")
        return result.data

    async def update_campaign(
        self,
        campaign_id: str,
        request: CampaignUpdateRequest,
        actor: Optional[Actor],
        on_state: Optional[StateCallback] = None,
    ) -> Campaign:
        """Owner-only partial update, moderated on the merged content"""
        notify = on_state or (lambda state: None)

        notify(SubmissionState.VALIDATING)
        try:
            actor = self._require_actor(actor)
            existing = await self._load_owned(campaign_id, actor)
        except Exception:
            notify(SubmissionState.FAILED)
            raise

        changes = request.changes()
        if not changes:
            notify(SubmissionState.SUCCESS)
            return existing

        merged = {name: getattr(existing, name) for name in MODERATED_FIELDS}
        merged.update({k: v for k, v in changes.items() if k in MODERATED_FIELDS})
        await self._moderate(" ".join(merged[name] or "" for name in MODERATED_FIELDS), notify)

        notify(SubmissionState.PERSISTING)
        result = await self.repository.update_campaign(
            campaign_id, changes, access_token=actor.access_token
        )
        if result.error:
            notify(SubmissionState.FAILED)
            raise CampaignPersistenceError(
                f"Error updating campaign: {result.error.message}",
                connectivity=result.error.is_connectivity,
            )
        if result.data is None:
            notify(SubmissionState.FAILED)
            raise CampaignPersistenceError("Error updating campaign: no rows were updated")

        notify(SubmissionState.SUCCESS)
        logger.info(f"Campaign {campaign_id} updated by {actor.user_id}")
        return result.data

    # ====================
    # Delete
    # ====================

    async def request_delete(
        self, campaign_id: str, actor: Optional[Actor]
    ) -> DeleteConfirmationResponse:
        """First step of the delete: issue a single-use confirmation token"""
        actor = self._require_actor(actor)
        await self._load_owned(campaign_id, actor)

        self._purge_expired_confirmations()
        token = secrets.token_urlsafe(24)
        expires_at = self._clock() + self.DELETE_CONFIRMATION_TTL
        self._pending_deletions[token] = PendingDeletion(
            campaign_id=campaign_id,
            user_id=actor.user_id,
            expires_at=expires_at,
        )
        return DeleteConfirmationResponse(
            campaign_id=campaign_id,
            confirmation_token=token,
            expires_at=expires_at,
        )

    async def delete_campaign(
        self,
        campaign_id: str,
        actor: Optional[Actor],
        confirmation_token: Optional[str],
    ) -> None:
        """
        Second step of the delete

        Referenced media are removed first, each failure logged and skipped;
        then the record itself is deleted. A failed record delete leaves the
        campaign in place and is raised to the caller.
        """
        actor = self._require_actor(actor)
        self._consume_confirmation(campaign_id, actor, confirmation_token)
        campaign = await self._load_owned(campaign_id, actor)

        await self._remove_media(campaign, actor)

        result = await self.repository.delete_campaign(campaign_id, access_token=actor.access_token)
        if result.error:
            logger.error(f"Record delete failed for campaign {campaign_id}: {result.error.message}")
            raise CampaignDeletionError(
                f"Deletion failed: {result.error.message}. Please check RLS policies.",
                connectivity=result.error.is_connectivity,
            )
        if not result.data:
            raise CampaignDeletionError("Deletion failed: no rows were deleted. Please check RLS policies.")

        logger.info(f"Campaign {campaign_id} deleted by {actor.user_id}")

    async def _remove_media(self, campaign: Campaign, actor: Actor):
        if self.storage is None:
            if campaign.media_urls():
                logger.warning(f"No blob store configured; skipping media cleanup for {campaign.id}")
            return

        for url in campaign.media_urls():
            info = get_storage_info(url)
            if info is None:
                logger.warning(f"Could not parse storage URL for cleanup: {url}")
                continue
            bucket, path = info
            try:
                result = await self.storage.remove(bucket, [path], access_token=actor.access_token)
            except Exception as e:
                logger.error(f"Failed to delete file from {bucket}: {e}")
                continue
            if result.error:
                logger.error(f"Failed to delete file from {bucket}: {result.error.message}")

    def _consume_confirmation(
        self, campaign_id: str, actor: Actor, token: Optional[str]
    ) -> None:
        self._purge_expired_confirmations()
        pending = self._pending_deletions.pop(token, None) if token else None
        if pending is None:
            raise DeleteConfirmationError()
        if pending.campaign_id != campaign_id or pending.user_id != actor.user_id:
            raise DeleteConfirmationError("Confirmation does not match this campaign.")

    def _purge_expired_confirmations(self):
        now = self._clock()
        expired = [t for t, p in self._pending_deletions.items() if p.expires_at <= now]
        for token in expired:
            del self._pending_deletions[token]

    # ====================
    # Media
    # ====================

    async def upload_media(
        self,
        kind: MediaKind,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
        actor: Optional[Actor],
    ) -> MediaUploadResponse:
        """Validate and upload a portrait or resume; returns its public URL"""
        actor = self._require_actor(actor)
        if self.storage is None:
            raise MediaUploadError("Upload failed: blob store is not configured")

        content_type = (content_type or "").lower()
        if kind == MediaKind.PORTRAIT:
            if content_type not in self.upload_config.image_types:
                raise CampaignValidationError(
                    "Invalid file type. Please upload a JPEG or PNG image.", field="file"
                )
        elif content_type not in self.upload_config.document_types:
            raise CampaignValidationError("Invalid file type. Please upload a PDF.", field="file")

        if len(content) > self.upload_config.max_bytes:
            limit_mb = self.upload_config.max_bytes // (1024 * 1024)
            raise CampaignValidationError(
                f"File is too large. Maximum size is {limit_mb}MB.", field="file"
            )

        bucket = self.buckets[kind]
        ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
        if not ext:
            ext = CONTENT_TYPE_EXTENSIONS.get(content_type, "bin")
        path = f"{bucket}/{uuid.uuid4().hex}.{ext}"

        result = await self.storage.upload(
            bucket, path, content, content_type, access_token=actor.access_token
        )
        if result.error:
            raise MediaUploadError(
                f"Upload failed: {result.error.message}",
                connectivity=result.error.is_connectivity,
            )

        return MediaUploadResponse(
            url=self.storage.get_public_url(bucket, path),
            bucket=bucket,
            path=path,
        )

    # ====================
    # Helpers
    # ====================

    async def _moderate(self, text: str, notify: StateCallback):
        notify(SubmissionState.MODERATING)
        verdict = await self.safety_gate.moderate(text)
        if not verdict.safe:
            notify(SubmissionState.FAILED)
            raise CampaignModerationError(verdict.reason or "Content violates our safety policies.")

    @staticmethod
    def _require_actor(actor: Optional[Actor]) -> Actor:
        if actor is None:
            raise AuthenticationRequiredError()
        return actor

    async def _load_owned(self, campaign_id: str, actor: Actor) -> Campaign:
        campaign = await self.get_campaign(campaign_id, actor)
        if campaign.user_id != actor.user_id:
            logger.warning(f"User {actor.user_id} denied access to campaign {campaign_id}")
            raise CampaignAccessDeniedError()
        return campaign

    async def health_check(self) -> bool:
        return await self.repository.health_check()


__all__ = ["CampaignService", "PendingDeletion"]
