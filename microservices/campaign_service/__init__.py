"""
Campaign Service

Political-campaign pages microservice providing:
- Paginated, searchable campaign listing (newest first)
- Owner-only create/update gated by a content-safety check
- Two-step delete with best-effort media cleanup
- Portrait and resume uploads to the blob store

Port: 8251
"""

__version__ = "1.0.0"
__service__ = "campaign_service"
