"""
Campaign Service Client

Client library for the campaign service. Requests carry the current user's
access token when a token provider is given; successful create/update
clears the matching form draft, and outcomes the user should see are
queued as toasts.
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from core.notifications import ToastQueue, ToastType

from .drafts import FormDraftStore
from .models import (
    Campaign,
    CampaignCreateRequest,
    CampaignDetail,
    CampaignListResponse,
    CampaignQuery,
    CampaignUpdateRequest,
    DeleteConfirmationResponse,
    MediaKind,
    MediaUploadResponse,
    MutationResponse,
)
from .pagination import PAGE_SIZE, CampaignFeed

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class CampaignClientError(Exception):
    """Error response (or transport failure) from the campaign service"""

    def __init__(self, message: str, status_code: Optional[int] = None, connectivity: bool = False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.connectivity = connectivity


class CampaignServiceClient:
    """Campaign Service HTTP client"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        drafts: Optional[FormDraftStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        page_size: int = PAGE_SIZE,
        toasts: Optional[ToastQueue] = None,
    ):
        if base_url is None:
            from core.config import get_settings
            base_url = get_settings().services.campaign_service_url
        self.base_url = base_url.rstrip('/')
        self.token_provider = token_provider
        self.drafts = drafts
        self.page_size = page_size
        self.toasts = toasts
        self.client = http_client or httpx.AsyncClient(timeout=30.0)

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _notify(self, message: str, type: ToastType) -> None:
        if self.toasts is not None:
            self.toasts.enqueue(message, type)

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self.client.request(
                method, f"{self.base_url}{path}", headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise CampaignClientError(f"Failed to fetch: {e}", connectivity=True) from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            if not isinstance(detail, str):
                # request validation errors come back as a list
                detail = str(detail)
            logger.warning(f"{method} {path} -> {response.status_code}: {detail}")
            raise CampaignClientError(detail, status_code=response.status_code)

        return response.json() if response.content else None

    # =============================================================================
    # Reads
    # =============================================================================

    async def list_campaigns(self, query: CampaignQuery, page: int = 0) -> CampaignListResponse:
        """
        Fetch one page of campaigns

        Args:
            query: search term and owner scoping
            page: zero-based page number
        """
        params: Dict[str, Any] = {"page": page}
        if query.search_term:
            params["query"] = query.search_term
        if query.scoped_to_owner:
            params["mine"] = "true"
        elif query.owner_id:
            params["owner_id"] = query.owner_id

        data = await self._request("GET", "/api/v1/campaigns", params=params)
        return CampaignListResponse.model_validate(data)

    def feed(self, query: Optional[CampaignQuery] = None) -> CampaignFeed:
        """A paginated feed over list_campaigns; call reset() to load page 0"""
        return CampaignFeed(self.list_campaigns, query=query, page_size=self.page_size)

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignDetail]:
        """Campaign detail, or None when it does not exist"""
        try:
            data = await self._request("GET", f"/api/v1/campaigns/{campaign_id}")
        except CampaignClientError as e:
            if e.status_code == 404:
                return None
            raise
        return CampaignDetail.model_validate(data)

    async def get_campaign_for_edit(self, campaign_id: str) -> Campaign:
        """Load a campaign for its edit form; a non-owner gets a danger toast"""
        try:
            data = await self._request("GET", f"/api/v1/campaigns/{campaign_id}/edit")
        except CampaignClientError as e:
            if e.status_code == 403:
                self._notify(e.message, ToastType.DANGER)
            raise
        return Campaign.model_validate(data)

    # =============================================================================
    # Mutations
    # =============================================================================

    async def create_campaign(self, request: CampaignCreateRequest) -> MutationResponse:
        data = await self._request(
            "POST", "/api/v1/campaigns", json=request.model_dump(mode="json")
        )
        if self.drafts:
            self.drafts.clear()
        response = MutationResponse.model_validate(data)
        self._notify(response.message, ToastType.SUCCESS)
        return response

    async def update_campaign(
        self, campaign_id: str, request: CampaignUpdateRequest
    ) -> MutationResponse:
        data = await self._request(
            "PATCH", f"/api/v1/campaigns/{campaign_id}", json=request.changes()
        )
        if self.drafts:
            self.drafts.clear(campaign_id)
        response = MutationResponse.model_validate(data)
        self._notify(response.message, ToastType.SUCCESS)
        return response

    async def request_delete(self, campaign_id: str) -> DeleteConfirmationResponse:
        data = await self._request("POST", f"/api/v1/campaigns/{campaign_id}/delete-request")
        return DeleteConfirmationResponse.model_validate(data)

    async def delete_campaign(self, campaign_id: str, confirmation_token: str) -> MutationResponse:
        data = await self._request(
            "DELETE",
            f"/api/v1/campaigns/{campaign_id}",
            params={"confirmation_token": confirmation_token},
        )
        response = MutationResponse.model_validate(data)
        self._notify(response.message, ToastType.SUCCESS)
        return response

    async def upload_media(
        self,
        kind: MediaKind,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> MediaUploadResponse:
        data = await self._request(
            "POST",
            f"/api/v1/campaigns/media/{MediaKind(kind).value}",
            files={"file": (filename, content, content_type)},
        )
        return MediaUploadResponse.model_validate(data)

    async def health_check(self) -> bool:
        try:
            await self._request("GET", "/health")
            return True
        except CampaignClientError:
            return False


__all__ = ["CampaignServiceClient", "CampaignClientError"]
