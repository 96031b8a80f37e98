"""
Campaign Service Routes Registry

Defines service metadata and the public route table.
"""

SERVICE_METADATA = {
    "service_name": "campaign_service",
    "version": "1.0.0",
    "tags": ['campaign', 'elections', 'v1'],
    "capabilities": ['campaign_pages', 'campaign_search', 'media_upload'],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/api/v1/campaigns/health", "methods": ["GET"], "description": "Service health check (API v1)"},
    {"path": "/api/v1/campaigns", "methods": ["GET", "POST"], "description": "List or create campaigns"},
    {"path": "/api/v1/campaigns/{campaign_id}", "methods": ["GET", "PATCH", "DELETE"], "description": "Read, update or delete a campaign"},
    {"path": "/api/v1/campaigns/{campaign_id}/edit", "methods": ["GET"], "description": "Load a campaign for its owner"},
    {"path": "/api/v1/campaigns/{campaign_id}/delete-request", "methods": ["POST"], "description": "Request a delete confirmation token"},
    {"path": "/api/v1/campaigns/media/{kind}", "methods": ["POST"], "description": "Upload a portrait or resume"},
]


def get_route_summary():
    """Route metadata for service registration"""
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join([r["path"] for r in ROUTES]),
        "api_version": "v1",
        "base_path": "/api/v1/campaigns",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_summary"]
