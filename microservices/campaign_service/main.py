"""
Campaign Service Main Application

FastAPI application for campaign pages.
Port: 8251
"""

import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse

from core.auth_dependencies import Actor, optional_actor
from core.backend_client import BackendNotConfiguredError
from core.config import get_settings

from .campaign_service import CampaignService
from .factory import CampaignServiceFactory
from .models import (
    Campaign,
    CampaignCreateRequest,
    CampaignDetail,
    CampaignListResponse,
    CampaignQuery,
    CampaignUpdateRequest,
    DeleteConfirmationResponse,
    HealthResponse,
    MediaKind,
    MediaUploadResponse,
    MutationResponse,
)
from .protocols import (
    AuthenticationRequiredError,
    CampaignAccessDeniedError,
    CampaignModerationError,
    CampaignNotFoundError,
    CampaignPersistenceError,
    CampaignValidationError,
    DeleteConfirmationError,
)
from .routes_registry import SERVICE_METADATA

settings = get_settings()
settings.logging.apply()
logger = logging.getLogger(__name__)

# Service configuration
SERVICE_NAME = SERVICE_METADATA["service_name"]
SERVICE_PORT = settings.services.campaign_service_port
SERVICE_VERSION = SERVICE_METADATA["version"]

# Global factory instance
factory: Optional[CampaignServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    try:
        factory = CampaignServiceFactory(settings)
        await factory.initialize()
    except BackendNotConfiguredError as e:
        # keep serving so every request gets the configuration error
        logger.error(f"{SERVICE_NAME} started without a backend: {e}")
        factory = None

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    if factory:
        await factory.close()


# Create FastAPI application
app = FastAPI(
    title="Campaign Service",
    description="Political campaign pages: browse, search, create, edit and delete",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(CampaignNotFoundError)
async def campaign_not_found_handler(request: Request, exc: CampaignNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(CampaignAccessDeniedError)
async def access_denied_handler(request: Request, exc: CampaignAccessDeniedError):
    return _error(status.HTTP_403_FORBIDDEN, exc)


@app.exception_handler(AuthenticationRequiredError)
async def authentication_required_handler(request: Request, exc: AuthenticationRequiredError):
    return _error(status.HTTP_401_UNAUTHORIZED, exc)


@app.exception_handler(CampaignValidationError)
async def validation_error_handler(request: Request, exc: CampaignValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "field": exc.field},
    )


@app.exception_handler(CampaignModerationError)
async def moderation_error_handler(request: Request, exc: CampaignModerationError):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(DeleteConfirmationError)
async def delete_confirmation_handler(request: Request, exc: DeleteConfirmationError):
    return _error(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(CampaignPersistenceError)
async def persistence_error_handler(request: Request, exc: CampaignPersistenceError):
    if exc.connectivity:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, exc)
    return _error(status.HTTP_502_BAD_GATEWAY, exc)


@app.exception_handler(BackendNotConfiguredError)
async def backend_not_configured_handler(request: Request, exc: BackendNotConfiguredError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler"""
    logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An unexpected error occurred. Please try again later.",
            "type": type(exc).__name__,
        },
    )


# ====================
# Dependencies
# ====================


def get_service() -> CampaignService:
    """Get campaign service from factory"""
    if not factory:
        raise BackendNotConfiguredError()
    return factory.service


# ====================
# Health Endpoints
# ====================


@app.get("/api/v1/campaigns/health")
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}
    service_status = "healthy"

    if factory:
        try:
            store_healthy = await factory.repository.health_check()
        except Exception as e:
            logger.warning(f"Record store health check failed: {e}")
            store_healthy = False
        dependencies["record_store"] = "healthy" if store_healthy else "unhealthy"
        moderation = factory.moderation_client
        dependencies["moderation"] = (
            "configured" if moderation and moderation.is_configured else "not_configured"
        )
        if not store_healthy:
            service_status = "degraded"
    else:
        dependencies["record_store"] = "not_configured"
        service_status = "degraded"

    return HealthResponse(
        status=service_status,
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


# ====================
# Campaign Endpoints
# ====================


@app.get(
    "/api/v1/campaigns",
    response_model=CampaignListResponse,
    tags=["Campaigns"],
)
async def list_campaigns(
    query: Optional[str] = Query(None, max_length=200, description="Search candidate, position or region"),
    owner_id: Optional[str] = Query(None, description="Only campaigns created by this user"),
    mine: bool = Query(False, description="Only the caller's campaigns"),
    page: int = Query(0, ge=0, description="Zero-based page number"),
    service: CampaignService = Depends(get_service),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """List campaigns newest first, one fixed-size page at a time"""
    if mine:
        campaign_query = CampaignQuery(
            query=query,
            owner_id=actor.user_id if actor else None,
            scoped_to_owner=True,
        )
    else:
        campaign_query = CampaignQuery(query=query, owner_id=owner_id)

    result = await service.list_campaigns(campaign_query, page=page, actor=actor)

    return CampaignListResponse(
        campaigns=[service.to_card(c) for c in result.campaigns],
        page=result.page,
        page_size=result.page_size,
        has_more=result.has_more,
    )


@app.get(
    "/api/v1/campaigns/{campaign_id}",
    response_model=CampaignDetail,
    tags=["Campaigns"],
)
async def get_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_service),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """Get a campaign with its policies sanitized for display"""
    return await service.get_campaign_detail(campaign_id, actor)


@app.get(
    "/api/v1/campaigns/{campaign_id}/edit",
    response_model=Campaign,
    tags=["Campaigns"],
)
async def get_campaign_for_edit(
    campaign_id: str,
    service: CampaignService = Depends(get_service),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """Load a campaign into the edit form; owner only"""
    return await service.get_campaign_for_edit(campaign_id, actor)


@app.post(
    "/api/v1/campaigns",
    response_model=MutationResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Campaigns"],
)
async def create_campaign(
    request: CampaignCreateRequest,
    service: CampaignService = Depends(get_service),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """Create a campaign owned by the caller"""
    campaign = await service.create_campaign(request, actor)
    return MutationResponse(campaign=campaign, message="Campaign created successfully!")


@app.patch(
    "/api/v1/campaigns/{campaign_id}",
    response_model=MutationResponse,
    tags=["Campaigns"],
)
async def update_campaign(
    campaign_id: str,
    request: CampaignUpdateRequest,
    service: CampaignService = Depends(get_service),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """Update a campaign in place; owner only"""
    campaign = await service.update_campaign(campaign_id, request, actor)
    return MutationResponse(campaign=campaign, message="Campaign updated successfully!")


@app.post(
    "/api/v1/campaigns/{campaign_id}/delete-request",
    response_model=DeleteConfirmationResponse,
    tags=["Campaigns"],
)
async def request_delete(
    campaign_id: str,
    service: CampaignService = Depends(get_service),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """First step of a delete: returns a short-lived confirmation token"""
    return await service.request_delete(campaign_id, actor)


@app.delete(
    "/api/v1/campaigns/{campaign_id}",
    response_model=MutationResponse,
    tags=["Campaigns"],
)
async def delete_campaign(
    campaign_id: str,
    confirmation_token: Optional[str] = Query(None),
    service: CampaignService = Depends(get_service),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """Confirmed delete: media first (best-effort), then the record"""
    await service.delete_campaign(campaign_id, actor, confirmation_token)
    return MutationResponse(message="Campaign deleted successfully.")


@app.post(
    "/api/v1/campaigns/media/{kind}",
    response_model=MediaUploadResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Media"],
)
async def upload_media(
    kind: MediaKind,
    file: UploadFile = File(...),
    service: CampaignService = Depends(get_service),
    actor: Optional[Actor] = Depends(optional_actor),
):
    """Upload a portrait (JPEG/PNG) or resume (PDF)"""
    # read at most one byte past the size limit
    content = await file.read(service.upload_config.max_bytes + 1)
    return await service.upload_media(
        kind=kind,
        filename=file.filename,
        content=content,
        content_type=file.content_type,
        actor=actor,
    )


# ====================
# Main Entry Point
# ====================


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.campaign_service.main:app",
        host="0.0.0.0",
        port=SERVICE_PORT,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
