"""
Blob Store Client

Upload, public-URL issuance and removal of campaign media objects.
"""

import logging
from typing import List, Optional

import httpx

from core.backend_client import BackendClient, BackendResult
from core.config import BackendConfig

from ..media import public_object_url

logger = logging.getLogger(__name__)


class StorageClient(BackendClient):
    """Client for the hosted blob store"""

    def __init__(
        self,
        config: BackendConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config, http_client)
        self.storage_url = config.storage_url

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
        access_token: Optional[str] = None,
    ) -> BackendResult:
        """Upload one object; existing objects are not overwritten"""
        result = await self.request(
            "POST",
            f"{self.storage_url}/object/{bucket}/{path}",
            access_token=access_token,
            content=content,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        if result.ok:
            logger.info(f"Uploaded {bucket}/{path} ({len(content)} bytes)")
        return result

    def get_public_url(self, bucket: str, path: str) -> str:
        return public_object_url(self.storage_url, bucket, path)

    async def remove(
        self,
        bucket: str,
        paths: List[str],
        access_token: Optional[str] = None,
    ) -> BackendResult:
        """Remove objects from a bucket"""
        return await self.request_json(
            "DELETE",
            f"{self.storage_url}/object/{bucket}",
            access_token=access_token,
            json={"prefixes": paths},
        )


__all__ = ["StorageClient"]
