"""
Campaign Service Clients

Adapters for the external collaborators of the campaign service.
"""

from .moderation_client import ModerationClient
from .storage_client import StorageClient

__all__ = ["ModerationClient", "StorageClient"]
